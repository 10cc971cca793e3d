''' Error classes raised while decoding a GIF stream.
    Only GifFormatError aborts a decode; the block errors are recovered
    by the container parser, which drops the offending block and moves on.
'''

class GifError(RuntimeError):
    '''Base class for all decoding errors'''
    pass

class GifFormatError(GifError):
    '''Raised when the header is not a GIF87a/GIF89a header'''
    pass

class BlockDecodeError(GifError):
    '''Raised when a single image or extension block cannot be parsed'''
    pass

class StreamTruncatedError(BlockDecodeError):
    ''' Raised when the input ends in the middle of a block.
        data holds whatever was read before the end.
    '''

    def __init__(self, message, data=b""):
        BlockDecodeError.__init__(self, message)
        self.data = data
