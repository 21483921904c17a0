class ClxException(Exception):
    '''Base class to extend in order to throw exception in clxstrip.

    It takes as first argument the chain of the layers that caused the
    exception, outermost first, so that it's possible to tell which
    part of the archive broke (something like "clips.2.frames.0").
    '''

    def __init__(self, chain, message=None):
        self.chain = chain
        self.message = message
        super().__init__(message)

    def __str__(self):
        location = '.'.join(str(_) for _ in self.chain)
        if not location:
            return self.message or ''

        return f'{location}: {self.message}' if self.message else location


class UnpackException(ClxException):
    '''The data ends before a field can be read or it's not coherent.'''
    pass


class ChunkUnpackException(UnpackException):
    '''Malformed data found inside a sub-chunk, the chain tells where.'''
    pass


class InvalidGroupException(ClxException, IndexError):
    pass


class OffsetOverflowException(ClxException, OverflowError):
    '''An offset or a size doesn't fit anymore into 32 bits.'''
    pass
