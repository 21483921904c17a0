"""
Core module for the abstraction of a file format

"""
import logging

from .streams import Stream


class Chunk(object):
    """
    Main class that defines a component of a format: its main attributes
    are offset and size that identify a Chunk inside the file.

    A Chunk can contain sub-chunks, it's up to the subclass to propagate
    unpack(), relayout() and pack() to them.
    """

    def __init__(self, filepath=None):
        self.logger = logging.getLogger(__name__)
        self.offset = None

        # now we have setup all the attributes necessary and we can unpack if
        # some data is passed with the constructor
        if filepath is not None:
            with Stream(filepath) as stream:
                self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
                self.unpack(stream)

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset their offsets
        so to pack correctly. It returns the size of the chunk.'''
        raise NotImplementedError(f"method {self.__class__.__name__}.relayout() not implemented")

    def pack(self, stream=None, relayout=True):
        raise NotImplementedError(f"method {self.__class__.__name__}.pack() not implemented")

    def unpack(self, stream):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack() not implemented")
