''' Pure Python GIF decoder producing RGBA frames.

    >>> import gifframes
    >>> result = gifframes.decode("animation.gif")
    >>> for frame in result:
    ...     upload(frame.pixels, frame.width, frame.height, frame.delay)
'''

from .assemble import FALLBACK_COLOR, assemble_rgba
from .control import GraphicControl
from .decoder import DecodeResult, Frame, Header, ImageDescriptor, decode, decode_frames, read_color_table
from .errors import BlockDecodeError, GifError, GifFormatError, StreamTruncatedError
from .lzw import LZWDecoder, lzw_decode_image, lzw_decompress

__all__ = [
    'decode',
    'decode_frames',
    'DecodeResult',
    'Frame',
    'Header',
    'ImageDescriptor',
    'GraphicControl',
    'LZWDecoder',
    'lzw_decompress',
    'lzw_decode_image',
    'assemble_rgba',
    'read_color_table',
    'FALLBACK_COLOR',
    'GifError',
    'GifFormatError',
    'BlockDecodeError',
    'StreamTruncatedError',
]
