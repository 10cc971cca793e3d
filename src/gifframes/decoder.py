''' GIF container parsing.
    decode() makes one forward pass over the stream and turns every image
    block into an RGBA Frame. A bad header stops decoding; a bad block is
    logged, counted and skipped.
'''

## Sources cited:
# * w3.org/Graphics/GIF/spec-gif89a.txt
# * matthewflickinger.com/lab/whatsinagif

#--- Included modules ---
import logging
import os
from contextlib import contextmanager
from io import BytesIO

from .assemble import FALLBACK_COLOR, assemble_rgba
from .control import GRAPHIC_HEADER, GraphicControl
from .errors import BlockDecodeError, GifError, GifFormatError, StreamTruncatedError
from .lzw import MAX_LZW_MIN, MIN_CODE_SIZE, lzw_decode_image
from .streams import ByteStream, block_split, skip_blocks

logger = logging.getLogger(__name__)

#--- Constants ---
BLOCK_HEADER = 0x21
IMAGE_HEADER = 0x2C
APPLICATION_HEADER = 0xFF
NETSCAPE_IDENT = b"NETSCAPE2.0"
GIF_HEADER = b"GIF"
GIF87a = b"87a"
GIF89a = b"89a"
GIF_FOOTER = 0x3B

#Largest frame decoded, in pixels; None decodes any size
MAX_PIXELS = None

#================================================================
# Color tables
#================================================================
def read_color_table(stream, packed_byte):
    ''' Read the color table announced by a packed field.
        Returns a list of (r, g, b) tuples, or None if bit 7 is clear.
    '''
    if not (packed_byte >> 7) & 1:
        return None
    size = 2 << (packed_byte & 7)
    raw = stream.read_exact(size * 3)
    return [tuple(raw[i:i + 3]) for i in range(0, len(raw), 3)]

#================================================================
# GIF components : Header and logical screen descriptor
#================================================================
class Header(object):
    '''Signature, logical screen descriptor and global color table'''

    __slots__ = [
        "_version",
        "_width",
        "_height",
        "_flags",
        "_bgcolor",
        "_aspect",
        "_gct",
    ]

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @classmethod
    def decode(cls, stream):
        ''' Reads the header from the start of the stream.
            Anything wrong here is a GifFormatError.
        '''
        ret = cls()

        #Check signature and version
        signature = stream.read(6)
        if signature[:3] != GIF_HEADER or signature[3:] not in (GIF87a, GIF89a):
            raise GifFormatError("Invalid signature: %r" % signature)
        ret._version = signature[3:].decode("ascii")

        try:
            ret._width, ret._height, *rest = stream.unpack("<2H3B")
            ret._flags, ret._bgcolor, ret._aspect = rest
            ret._gct = read_color_table(stream, ret._flags)
        except StreamTruncatedError as e:
            raise GifFormatError("Truncated header: %s" % e) from None
        return ret

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def version(self):
        '''Get the GIF version, "87a" or "89a"'''
        return self._version

    @property
    def width(self):
        '''Get the logical screen width'''
        return self._width

    @property
    def height(self):
        '''Get the logical screen height'''
        return self._height

    @property
    def color_resolution(self):
        '''Get the color resolution in bits per primary'''
        return ((self._flags >> 4) & 7) + 1

    @property
    def gct_sorted(self):
        '''Check if the global color table is sorted'''
        return bool((self._flags >> 3) & 1)

    @property
    def background(self):
        '''Get the background color index, or None without a global table'''
        if self._gct:
            return self._bgcolor
        return None

    @property
    def aspect_ratio(self):
        '''Get the pixel aspect ratio byte'''
        return self._aspect

    @property
    def gct(self):
        '''Get the global color table, or None'''
        return self._gct

#================================================================
# GIF components : Image descriptor
#================================================================
class ImageDescriptor(object):
    '''Position, size and flags of one image block'''

    __slots__ = [
        "_x",
        "_y",
        "_width",
        "_height",
        "_flags",
    ]

    @classmethod
    def decode(cls, stream):
        ''' Reads the 9 descriptor bytes.
            Should happen after block header 0x2c is discovered.
        '''
        ret = cls()
        ret._x, ret._y, ret._width, ret._height, ret._flags = stream.unpack('<4HB')
        return ret

    @property
    def position(self):
        '''Get the image position'''
        return self._x, self._y

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def flags(self):
        '''Get the raw packed field'''
        return self._flags

    @property
    def lct_exists(self):
        return bool((self._flags >> 7) & 1)

    @property
    def interlace(self):
        '''Check if image is interlaced'''
        return bool((self._flags >> 6) & 1)

    @property
    def lct_size(self):
        return 2 << (self._flags & 7)

#================================================================
# Decoded output
#================================================================
class Frame(object):
    ''' One decoded image: RGBA8 pixels, row-major, 4 bytes per pixel.
        Position and disposal are passed through for whoever composites
        the frames; nothing here applies them.
    '''

    __slots__ = [
        "_pixels",
        "_width",
        "_height",
        "_delay",
        "_x",
        "_y",
        "_disposal",
    ]

    def __init__(self, pixels, width, height, delay=0, position=(0, 0), disposal=0):
        if len(pixels) != width * height * 4:
            raise ValueError("Expected %d bytes of RGBA, got %d" % (width * height * 4, len(pixels)))
        self._pixels = bytes(pixels)
        self._width, self._height = width, height
        self._delay = delay
        self._x, self._y = position
        self._disposal = disposal

    @property
    def pixels(self):
        '''Get the RGBA8 buffer'''
        return self._pixels

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def delay(self):
        '''Get the delay time in milliseconds'''
        return self._delay

    @property
    def position(self):
        return self._x, self._y

    @property
    def disposal(self):
        return self._disposal

    def pixel(self, x, y):
        '''Get the (r, g, b, a) tuple at x, y'''
        offset = (y * self._width + x) * 4
        return tuple(self._pixels[offset:offset + 4])

    def __repr__(self):
        return "Frame(%dx%d, delay=%dms)" % (self._width, self._height, self._delay)

class DecodeResult(object):
    ''' Frames decoded from one stream, plus diagnostics.
        Behaves as the list of frames for iteration, len() and indexing.
    '''

    def __init__(self):
        self.frames = []
        self.header = None
        self.skipped = 0
        self.errors = []
        self.loop_count = None

    def __iter__(self):
        return iter(self.frames)

    def __len__(self):
        return len(self.frames)

    def __getitem__(self, index):
        return self.frames[index]

    @property
    def ok(self):
        '''Check if the header parsed and no block was skipped'''
        return self.header is not None and not self.skipped and not self.errors

    def _report(self, message, skipped=True):
        '''Record a recoverable problem'''
        logger.warning(message)
        self.errors.append(message)
        if skipped:
            self.skipped += 1

#================================================================
# Block decoding
#================================================================
def _decode_image(stream, header, control, strict, fallback, max_pixels, result):
    '''Decode one image block into a Frame'''
    descriptor = ImageDescriptor.decode(stream)
    lct = read_color_table(stream, descriptor.flags)
    lzw_min = stream.unpack('B')
    try:
        lzw = block_split(stream)
    except StreamTruncatedError as e:
        if strict:
            raise
        result._report("Truncated image data at offset %d" % stream.position, skipped=False)
        lzw = e.data

    #Data is consumed, the stream is on the next block either way
    if not MIN_CODE_SIZE <= lzw_min <= MAX_LZW_MIN:
        raise BlockDecodeError("Bad LZW minimum code size: %d" % lzw_min)
    if max_pixels is not None and descriptor.width * descriptor.height > max_pixels:
        raise BlockDecodeError("Image of %dx%d exceeds %d pixels"
            % (descriptor.width, descriptor.height, max_pixels))
    if descriptor.interlace:
        logger.debug("Interlaced image left in stored row order")

    indices = lzw_decode_image(lzw, lzw_min, descriptor.width, descriptor.height, strict)
    palette = lct if lct is not None else header.gct
    pixels = assemble_rgba(indices, palette, control.trans, fallback)
    return Frame(pixels, descriptor.width, descriptor.height,
        control.delay, descriptor.position, control.disposal)

def _read_loop_count(stream):
    ''' Read an application extension, returning the NETSCAPE2.0 loop
        count or None for any other application.
    '''
    data = []
    size = stream.read_exact(1)[0]
    while size:
        data.append(stream.read_exact(size))
        size = stream.read_exact(1)[0]
    if len(data) >= 2 and data[0] == NETSCAPE_IDENT and len(data[1]) == 3 and data[1][0] == 1:
        return int.from_bytes(data[1][1:], "little")
    return None

def _decode_blocks(stream, result, strict, fallback, max_pixels):
    '''Parse the header and every block up to the trailer'''
    header = result.header = Header.decode(stream)
    logger.debug("GIF%s %dx%d, global table: %s", header.version,
        header.width, header.height, len(header.gct) if header.gct else None)

    control = GraphicControl()
    while True:
        head = stream.read(1)
        if not head:
            result._report("Missing trailer", skipped=False)
            return
        head = head[0]
        if head == GIF_FOOTER:
            return

        try:
            if head == IMAGE_HEADER:
                #Control settings belong to this image only
                pending, control = control, GraphicControl()
                frame = _decode_image(stream, header, pending, strict, fallback, max_pixels, result)
                logger.debug("Decoded %r", frame)
                result.frames.append(frame)
            elif head == BLOCK_HEADER:
                label = stream.read_exact(1)[0]
                if label == GRAPHIC_HEADER:
                    control = GraphicControl.decode(stream)
                elif label == APPLICATION_HEADER:
                    loop_count = _read_loop_count(stream)
                    if loop_count is not None:
                        result.loop_count = loop_count
                else:
                    logger.debug("Skipping extension 0x%02x", label)
                    skip_blocks(stream)
            else:
                raise BlockDecodeError("Invalid block header: 0x%02x" % head)
        except BlockDecodeError as e:
            if strict:
                raise
            result._report("Skipped block at offset %d: %s" % (stream.position, e))

#================================================================
# GIF Loading
#================================================================
@contextmanager
def _open_source(src):
    '''Yield a binary file for a path, a byte string or a file object'''
    if isinstance(src, (str, os.PathLike)):
        with open(src, "rb") as file:
            yield file
    elif isinstance(src, (bytes, bytearray, memoryview)):
        yield BytesIO(src)
    else:
        yield src

def decode(src, strict=False, fallback=FALLBACK_COLOR, max_pixels=MAX_PIXELS):
    ''' Decode every frame of a GIF.
        src may be a path, a byte string or a binary file object; paths are
        closed again before returning, file objects are left open.
        Never raises for bad input: problems end up in the result's errors,
        and whatever frames decoded cleanly are returned. With strict set,
        the first block error or truncation ends decoding instead of being
        skipped over.
    '''
    result = DecodeResult()
    try:
        with _open_source(src) as file:
            _decode_blocks(ByteStream(file), result, strict, fallback, max_pixels)
    except GifError as e:
        logger.error("GIF decoding stopped: %s", e)
        result.errors.append(str(e))
    except OSError as e:
        logger.error("Cannot read GIF: %s", e)
        result.errors.append(str(e))
    return result

def decode_frames(src, **options):
    '''Decode a GIF and return just the list of frames'''
    return decode(src, **options).frames
