''' Graphic Control Extension.
    Carries the delay and transparent color of the image block that
    follows it, and only that one.
'''

from .errors import BlockDecodeError
from .streams import BLOCK_FOOTER, skip_blocks

#--- Constants ---
GRAPHIC_HEADER = 0xF9
GRAPHIC_SIZE = 4

#================================================================
# GIF components : Graphic Control Extension block
#================================================================
class GraphicControl(object):
    ''' Pending frame settings from a graphic control extension.
        A default instance stands for "no extension": no delay, no
        transparency.
    '''

    __slots__ = [
        "_trans",
        "_index",
        "_delay",
        "_disposal",
        "_userin",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, delay=0, trans=None, disposal=0, user_input=False):
        '''Create control settings, delay in centiseconds'''
        self._delay = delay
        self.trans = trans
        self._disposal = disposal
        self._userin = user_input

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @classmethod
    def decode(cls, stream):
        ''' Reads bytes from the already open stream.
            Should happen after block header 0x21f9 is discovered.
            A malformed body is consumed up to its terminator before the
            error is raised, so the stream stays on a block boundary.
        '''
        ret = cls()

        block_size = stream.unpack('B')
        if block_size == BLOCK_FOOTER:
            #Size byte is already the terminator
            raise BlockDecodeError("Empty graphic extension")
        if block_size != GRAPHIC_SIZE:
            stream.read_exact(block_size)
            skip_blocks(stream)
            raise BlockDecodeError("Bad graphic extension size: %d" % block_size)

        packed_byte, ret._delay, ret._index, footer = stream.unpack('<BHBB')

        #Unpack the packed byte
        ret._disposal = (packed_byte >> 2) & 0x7
        ret._userin = (packed_byte >> 1) & 1
        ret._trans = packed_byte & 1

        if footer != BLOCK_FOOTER:
            stream.read_exact(footer)
            skip_blocks(stream)
            raise BlockDecodeError("Bad graphic extension footer")
        return ret

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def trans(self):
        '''Get the index of transparency, or None if nontransparent'''
        if self._trans:
            return self._index
        return None

    @trans.setter
    def trans(self, value):
        '''Set the transparent color'''
        if value is None:
            self._trans = False
            self._index = 0
        else:
            self._trans = True
            self._index = value

    @property
    def delay(self):
        '''Gets the delay time in milliseconds'''
        return self._delay * 10

    @property
    def disposal(self):
        '''Get the disposal method'''
        return self._disposal

    @property
    def user_input(self):
        '''Check if the user input flag is set'''
        return bool(self._userin)
