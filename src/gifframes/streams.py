''' Byte and bit level readers used by the decoder.
    Neither reader ever rewinds: the byte stream only moves forward and the
    bit reader hands out zero bits once it runs past the end of its data.
'''

from struct import unpack, calcsize

from .errors import StreamTruncatedError

#--- Constants ---
BLOCK_FOOTER = 0

#================================================================
# Byte streaming class
#================================================================
class ByteStream(object):
    '''Forward-only reader over a binary file object'''

    __slots__ = [
        "_file",
        "_pos",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, file):
        '''Wrap an already open binary file'''
        self._file = file
        self._pos = 0

    #------------------------------------------------
    # Reading
    #------------------------------------------------
    def read(self, amount):
        '''Read up to amount bytes, fewer if the stream ends'''
        out = self._file.read(amount)
        self._pos += len(out)
        return out

    def read_exact(self, amount):
        '''Read exactly amount bytes or raise StreamTruncatedError'''
        out = self.read(amount)
        if len(out) != amount:
            raise StreamTruncatedError(
                "Stream ended at offset %d, wanted %d more bytes" % (self._pos, amount - len(out)))
        return out

    def unpack(self, fmt):
        '''Read a new struct-formatted tuple from stream
        If only one item in tuple, return just the item'''
        temp = unpack(fmt, self.read_exact(calcsize(fmt)))
        if len(temp) == 1:
            return temp[0]
        return temp

    @property
    def position(self):
        '''Number of bytes consumed so far'''
        return self._pos

#================================================================
# Bit-level operations
#================================================================
class BitReader(object):
    '''Reads LSB-first bit fields from a byte string'''

    __slots__ = [
        "_str",
        "_ptr",
        "_len",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, byte_string):
        '''Initialize the reader with a complete byte string'''
        if not isinstance(byte_string, (bytes, bytearray)):
            raise TypeError("Requires bytelike object")
        self._str = byte_string
        self._ptr = 0
        self._len = len(byte_string) * 8

    #------------------------------------------------
    # Bit operations
    #------------------------------------------------
    def read(self, amount):
        '''Read amount bits and return them as an int
        Bits past the end of the data read as zero'''
        value = 0
        got = 0
        while got < amount and self._ptr < self._len:
            byte_index, start = divmod(self._ptr, 8)
            take = min(8 - start, amount - got)
            chunk = (self._str[byte_index] >> start) & ((1 << take) - 1)
            value |= chunk << got
            got += take
            self._ptr += take
        #Skip the missing tail so exhausted stays true
        self._ptr += amount - got
        return value

    @property
    def exhausted(self):
        '''Check if every bit has been consumed'''
        return self._ptr >= self._len

#================================================================
# Sub-block framing
#================================================================
def block_split(stream):
    ''' Parses through sub-blocks and returns the joined payload.
        If the stream ends before the terminator, the payload read so far
        travels on the StreamTruncatedError.
    '''
    ret = bytearray()
    while True:
        size = stream.read(1)
        if not size:
            break
        if size[0] == BLOCK_FOOTER:
            return bytes(ret)
        data = stream.read(size[0])
        ret += data
        if len(data) != size[0]:
            break
    raise StreamTruncatedError(
        "Sub-blocks end without terminator after %d bytes" % len(ret), bytes(ret))

def skip_blocks(stream):
    '''Consume sub-blocks up to and including the terminator'''
    size = stream.read_exact(1)[0]
    while size:
        stream.read_exact(size)
        size = stream.read_exact(1)[0]
