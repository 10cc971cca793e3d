''' GIF flavoured LZW decompression.
    Codes are packed LSB-first, start at min_code_size + 1 bits and widen
    each time the code table fills the current width, up to 12 bits.
    A clear code resets the table; once 4096 entries exist the table stops
    growing until the next clear code.
'''

import logging

from .errors import BlockDecodeError, StreamTruncatedError
from .streams import BitReader

logger = logging.getLogger(__name__)

#--- Constants ---
MIN_CODE_SIZE = 2
MAX_LZW_MIN = 8
MAX_CODE_SIZE = 12
MAX_TABLE_SIZE = 1 << MAX_CODE_SIZE

#================================================================
# Decoder state
#================================================================
class LZWDecoder(object):
    ''' Code table and code width for one LZW stream.
        Feed it one code at a time through step().
    '''

    __slots__ = [
        "min_code_size",
        "clear_code",
        "end_code",
        "code_size",
        "table",
        "previous",
        "finished",
        "malformed",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, min_code_size):
        '''Create a decoder for the given LZW minimum code size'''
        if not MIN_CODE_SIZE <= min_code_size <= MAX_LZW_MIN:
            raise ValueError("Bad minimum code size: %d" % min_code_size)
        self.min_code_size = min_code_size
        self.clear_code = 1 << min_code_size
        self.end_code = self.clear_code + 1
        self.finished = False
        self.malformed = False
        self.reset()

    def reset(self):
        '''Restore the initial code table and code size'''
        self.table = [bytes((x,)) for x in range(self.clear_code)]
        #Placeholders for the clear and end codes
        self.table.append(b"")
        self.table.append(b"")
        self.code_size = self.min_code_size + 1
        self.previous = None

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @property
    def next_code(self):
        '''The code the next table entry will get'''
        return len(self.table)

    def step(self, code):
        ''' Process one code.
            Returns the indices it expands to, b"" for a clear code, or None
            when decoding has to stop.
        '''
        if code == self.end_code:
            self.finished = True
            return None
        if code == self.clear_code:
            self.reset()
            return b""

        table = self.table
        if code < len(table):
            entry = table[code]
            if self.previous is not None:
                self._grow(table[self.previous] + entry[:1])
        elif code == len(table) and self.previous is not None:
            #Code not in table yet: previous + first of previous
            previous = table[self.previous]
            entry = previous + previous[:1]
            self._grow(entry)
        else:
            logger.warning("Invalid LZW code %d with %d table entries, stopping", code, len(table))
            self.malformed = True
            return None
        self.previous = code
        return entry

    def _grow(self, entry):
        '''Append a table entry and widen the codes when the width is full'''
        table = self.table
        if len(table) < MAX_TABLE_SIZE:
            table.append(entry)
            if len(table) == (1 << self.code_size) and self.code_size < MAX_CODE_SIZE:
                self.code_size += 1

#================================================================
# LZW decompression
#================================================================
def lzw_decompress(raw_bytes, lzw_min, limit=None, strict=False):
    ''' Decompress the LZW data into a string of color indices.
        Stops at the end code, on an invalid code, when the data runs out or
        once limit indices have been produced. In strict mode running out of
        data or hitting an invalid code raises instead.
    '''
    decoder = LZWDecoder(lzw_min)
    code_in = BitReader(bytes(raw_bytes))
    idx_out = bytearray()
    while not code_in.exhausted:
        if limit is not None and len(idx_out) >= limit:
            break
        entry = decoder.step(code_in.read(decoder.code_size))
        if entry is None:
            break
        idx_out += entry

    if strict and not (limit is not None and len(idx_out) >= limit):
        if decoder.malformed:
            raise BlockDecodeError("Invalid LZW code after %d indices" % len(idx_out))
        if not decoder.finished:
            raise StreamTruncatedError("LZW data ends without end code", bytes(idx_out))
    return bytes(idx_out)

def lzw_decode_image(raw_bytes, lzw_min, width, height, strict=False):
    ''' Decompress the LZW data of a width x height image.
        The result always holds exactly width * height indices, row-major.
        Short data is padded with index 0, unless strict is set.
    '''
    size = width * height
    idx_out = lzw_decompress(raw_bytes, lzw_min, size, strict)
    if len(idx_out) < size:
        if strict:
            raise StreamTruncatedError(
                "LZW data holds %d of %d pixels" % (len(idx_out), size), idx_out)
        logger.warning("LZW data holds %d of %d pixels, padding with zeros", len(idx_out), size)
        return idx_out + bytes(size - len(idx_out))
    return idx_out[:size]
