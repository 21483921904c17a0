"""
A Field is "fundamental" datatype from the format point of view: an integer
with a fixed width and byte order, directly packable/unpackable.

This is the only place where the byte order is handled, the models
built on top of it never shift bytes by themselves.
"""
import logging
import struct
from enum import Enum, auto

from .exceptions import UnpackException, OffsetOverflowException


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()
    NETWORK       = auto()
    NATIVE        = auto()


ENDIANESS_PREFIX = {
    Endianess.LITTLE_ENDIAN: '<',
    Endianess.BIG_ENDIAN:    '>',
    Endianess.NETWORK:       '!',
    Endianess.NATIVE:        '=',
}


class StructField(object):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The instance doesn't store any value, it's a codec that reads and writes at the
    actual position of the stream it's given, advancing it by its size.
    """

    def __init__(self, format, endianess=Endianess.BIG_ENDIAN, name=None):
        self.format = format
        self.endianess = endianess
        self.name = name
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.get_format())

    def get_format(self):
        return '%s%s' % (ENDIANESS_PREFIX[self.endianess], self.format)

    @property
    def size(self):
        return struct.calcsize(self.get_format())

    def _chain(self):
        return [self.name] if self.name else []

    def unpack_raw(self, raw, offset=0):
        '''Decode the value found at the given offset of a bytes-like object.'''
        try:
            return struct.unpack_from(self.get_format(), raw, offset)[0]
        except struct.error as e:
            self.logger.error(e)
            raise UnpackException(
                chain=self._chain(),
                message=f'need {self.size} bytes at offset {offset}, buffer has {len(raw)}')

    def unpack(self, stream):
        raw = stream.read_exactly(self.size, chain=self._chain())
        value = self.unpack_raw(raw)

        self.logger.debug('unpacked %s = 0x%x' % (self.name or self.format, value))

        return value

    def pack_raw(self, value):
        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            self.logger.error(e)
            raise OffsetOverflowException(
                chain=self._chain(),
                message=f'value {value} doesn\'t fit into format \'{self.get_format()}\'')

    def pack(self, stream, value):
        stream.write(self.pack_raw(value))


class WordField(StructField):
    '''Unsigned 16 bits'''

    def __init__(self, **kwargs):
        super().__init__('H', **kwargs)


class DWordField(StructField):
    '''Unsigned 32 bits'''

    MAX = 0xffffffff

    def __init__(self, **kwargs):
        super().__init__('I', **kwargs)
