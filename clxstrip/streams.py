import io
import os
import logging

from .exceptions import UnpackException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file object to
    uniform its properties: mainly we need a seek() that accepts only
    sane offsets and reads that fail loudly when the data is over.

    It's a context manager so that the underlying file is released
    as soon as the parsing (or the writing) is done.'''
    def __init__(self, obj, flags='r'):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        if isinstance(obj, os.PathLike):
            obj = os.fspath(obj)

        self._type = type(obj)
        self.flags = flags
        self.obj = obj
        self.history = []

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to stream' % self.obj.__class__.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self._type.__name__)

    def close(self):
        self.obj.close()

    def init_str(self):
        '''We think this is a path'''
        mode = 'wb' if 'w' in self.flags else 'rb'
        logger.debug('opening path \'%s\' with mode \'%s\'' % (self.obj, mode))
        self.obj = open(self.obj, mode)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        if offset < 0:
            raise ValueError(f'negative offset {offset}')

        return self.obj.seek(offset)

    def size(self):
        '''Returns the number of bytes in the stream without moving the cursor.'''
        self.save()
        size = self.obj.seek(0, io.SEEK_END)
        self.restore()

        return size

    def read_exactly(self, n, chain=None):
        '''Read n bytes or raise UnpackException if the stream ends before.'''
        offset = self.obj.tell()
        data = self.obj.read(n)

        if len(data) != n:
            raise UnpackException(
                chain=chain or [],
                message=f'expected {n} bytes at offset 0x{offset:x}, got {len(data)}')

        return data

    def write(self, data):
        return self.obj.write(data)

    def getvalue(self):
        return self.obj.getvalue()

    def save(self):
        self.history.append(self.obj.tell())

    def restore(self):
        old_seek = self.history.pop()
        self.obj.seek(old_seek)
