'''
# CLX

Archive storing animations as groups of frames, each frame being a small
header (size, width and height) followed by the pixel data. All the
integers are big-endian.

The general structure is the following

  .----------------------------------.
  | group offsets (only multi-group) |
  | group 0 header                   |
  |   frame 0                        |
  |   frame 1                        |
  |   ...                            |
  | group 1 header                   |
  |   ...                            |
  | group N header                   |
  |   ...                            |
  '----------------------------------'

and a group header is

  .-------------------------------------------.
  | frame count                               |
  | frame offsets (relative to the group)     |
  | offset of the next group (relative to it) |
  '-------------------------------------------'

There is no magic nor an explicit number of groups: an archive with a single
group doesn't have the table of group offsets at all and we need to guess
which layout we are looking at (see is_mono_group_layout()).
'''
import os
import logging

from ...core import Chunk
from ...streams import Stream
from ... import fields
from ...exceptions import (
    UnpackException,
    ChunkUnpackException,
    InvalidGroupException,
    OffsetOverflowException,
)


logger = logging.getLogger(__name__)


group_offset_field = fields.DWordField(name='group_offsets')
frame_count_field  = fields.DWordField(name='frame_count')
frame_offset_field = fields.DWordField(name='frame_offsets')
next_offset_field  = fields.DWordField(name='next_offset')

header_size_field = fields.WordField(name='header_size')
width_field       = fields.WordField(name='width')
height_field      = fields.WordField(name='height')


def check_offset(value, chain):
    '''The format addresses everything with 32 bits, nothing can go beyond.'''
    if value > fields.DWordField.MAX:
        raise OffsetOverflowException(
            chain=chain,
            message=f'offset 0x{value:x} doesn\'t fit into 32 bits')

    return value


def is_mono_group_layout(next_offset, file_size):
    '''The format doesn't tag archives with a single group: the first dword is
    read as a frame count and the dword following that many frame offsets as the
    offset of the next group. If that points exactly at the end of file we have
    a single group starting at offset zero.

    NOTE: it's a coincidence check, a multi-group archive having by chance the
          file size at that position is read as mono-group.'''
    return next_offset == file_size


class Frame(Chunk):
    '''A single image of a clip: the payload is kept as it is, we only peek into
    its header.'''

    def __init__(self, image=b'', offset=None):
        super().__init__()
        self.image = image
        self.offset = offset

    def __repr__(self):
        return f'<{self.__class__.__name__}(offset={self.offset}, size={self.size})>'

    @property
    def header_size(self):
        return header_size_field.unpack_raw(self.image, 0)

    @property
    def width(self):
        return width_field.unpack_raw(self.image, 2)

    @property
    def height(self):
        return height_field.unpack_raw(self.image, 4)

    def _get_size(self):
        return len(self.image)

    def relayout(self, offset=0):
        self.offset = offset

        return self.size

    def unpack(self, stream, size):
        '''Differently from the other chunks the frame doesn't know its size,
        the caller derives it from the offset of the frame that follows.'''
        offset = stream.tell()

        if size <= 0:
            raise UnpackException(
                chain=[],
                message=f'frame at offset 0x{offset:x} spans {size} bytes')

        self.offset = offset
        self.image = stream.read_exactly(size)

    def pack(self, stream):
        if self.offset is None:
            raise AttributeError(f'offset for {self!r} is not defined!')

        stream.seek(self.offset)
        stream.write(self.image)


class Clip(Chunk):
    '''A group of frames forming an animation.

    frame_offsets are absolute, they are converted from/to relative
    only when reading or writing the header.'''

    def __init__(self, frames=None, offset=None):
        super().__init__()
        self.offset = offset
        self.frames = list(frames) if frames else []
        self.frame_offsets = [_.offset for _ in self.frames]
        self.next_offset = None

    def __repr__(self):
        return '<%s(offset=%s, frames=%d, next_offset=%s)>' % (
            self.__class__.__name__,
            self.offset,
            self.frame_count,
            self.next_offset,
        )

    @property
    def frame_count(self):
        return len(self.frames)

    @property
    def header_size(self):
        return frame_count_field.size + frame_offset_field.size * self.frame_count + next_offset_field.size

    def _get_size(self):
        size = self.header_size
        for frame in self.frames:
            size = check_offset(size + frame.size, chain=['frames'])

        return size

    def relayout(self, offset=0):
        '''Frames come right after the header, one after the other.'''
        self.offset = offset

        cursor = offset + self.header_size
        for frame in self.frames:
            cursor = check_offset(cursor + frame.relayout(offset=cursor), chain=['frames'])

        self.frame_offsets = [_.offset for _ in self.frames]
        self.next_offset = cursor - offset

        return self.next_offset

    def unpack(self, stream, file_size):
        self.offset = offset = stream.tell()

        frame_count = frame_count_field.unpack(stream)
        header_end = offset + frame_count_field.size + frame_offset_field.size * frame_count + next_offset_field.size
        if header_end > file_size:
            raise UnpackException(
                chain=['frame_count'],
                message=f'{frame_count} frames at offset 0x{offset:x} don\'t fit into {file_size} bytes')

        self.frame_offsets = [offset + frame_offset_field.unpack(stream) for _ in range(frame_count)]
        self.next_offset = next_offset_field.unpack(stream)

        end = offset + self.next_offset
        if end > file_size:
            raise UnpackException(
                chain=['next_offset'],
                message=f'next group at 0x{end:x} is past the end of file (0x{file_size:x})')

        self.logger.debug('clip at 0x%x has %d frames up to 0x%x' % (offset, frame_count, end))

        self.frames = []
        for idx, start in enumerate(self.frame_offsets):
            stop = self.frame_offsets[idx + 1] if idx + 1 < frame_count else end

            stream.seek(start)
            frame = Frame()
            try:
                frame.unpack(stream, stop - start)
            except UnpackException as e:
                raise ChunkUnpackException(chain=['frames', idx] + e.chain, message=e.message)

            self.frames.append(frame)

    def pack_header(self, stream):
        if self.offset is None or self.next_offset is None:
            raise AttributeError(f'offsets for {self!r} are not defined!')

        stream.seek(self.offset)
        frame_count_field.pack(stream, self.frame_count)
        for frame_offset in self.frame_offsets:
            frame_offset_field.pack(stream, frame_offset - self.offset)
        next_offset_field.pack(stream, self.next_offset)


class ClxFile(Chunk):
    '''The whole archive.

    It can be built from a path (or raw bytes) to unpack, or from a list of
    clips; in the latter case the offsets are calculated right away.
    '''

    def __init__(self, filepath=None, clips=None):
        self.group_offsets = []
        self.clips = list(clips) if clips else []

        super().__init__(filepath)

        if filepath is not None:
            self.validate()
        elif self.clips:
            self.group_offsets = [None] * len(self.clips)
            self.relayout()

    def __repr__(self):
        return '<%s(groups=%d, size=%d)>' % (self.__class__.__name__, len(self.clips), self.file_size())

    def __len__(self):
        return len(self.clips)

    def is_mono_group(self):
        return len(self.group_offsets) == 1

    @property
    def table_size(self):
        '''Bytes taken by the table of group offsets.'''
        return 0 if self.is_mono_group() else group_offset_field.size * len(self.group_offsets)

    def file_size(self):
        if not self.clips:
            return 0

        last = self.clips[-1]

        return last.offset + last.next_offset

    def _get_size(self):
        size = self.table_size
        for clip in self.clips:
            size = check_offset(size + clip.size, chain=['clips'])

        return size

    def validate(self):
        if len(self.group_offsets) != len(self.clips):
            raise UnpackException(
                chain=['group_offsets'],
                message=f'{len(self.group_offsets)} group offsets for {len(self.clips)} clips')

        for idx, clip in enumerate(self.clips):
            if clip.frame_count != len(clip.frame_offsets):
                raise ChunkUnpackException(
                    chain=['clips', idx, 'frame_offsets'],
                    message=f'{len(clip.frame_offsets)} frame offsets for {clip.frame_count} frames')

    def probe_mono_group(self, stream, file_size):
        '''Read the first dword as a frame count and follow it to the tail pointer.'''
        stream.seek(0)
        frame_count = frame_count_field.unpack(stream)

        probe = frame_count_field.size + frame_offset_field.size * frame_count
        if probe + next_offset_field.size > file_size:
            raise UnpackException(
                chain=['frame_count'],
                message=f'probing for a single group at 0x{probe:x} goes past the end of file (0x{file_size:x})')

        stream.seek(probe)
        next_offset = next_offset_field.unpack(stream)

        return is_mono_group_layout(next_offset, file_size)

    def find_group_offsets(self, stream, file_size):
        '''The first group starts right after the table, so its offset
        tells us where the table ends.'''
        stream.seek(0)
        table_end = group_offset_field.unpack(stream)

        if table_end == 0 or table_end % group_offset_field.size or table_end > file_size:
            raise UnpackException(
                chain=['group_offsets'],
                message=f'0x{table_end:x} is not a valid size for the table of group offsets')

        stream.seek(0)
        group_offsets = []
        while stream.tell() != table_end:
            group_offsets.append(group_offset_field.unpack(stream))

        return group_offsets

    def unpack(self, stream):
        file_size = stream.size()
        self.logger.debug('file size = %d' % file_size)

        if self.probe_mono_group(stream, file_size):
            self.logger.debug('mono group, adding artificial group offset of 0')
            self.group_offsets = [0]
        else:
            self.group_offsets = self.find_group_offsets(stream, file_size)

        self.logger.debug('found %d groups' % len(self.group_offsets))

        self.clips = []
        for idx, group_offset in enumerate(self.group_offsets):
            stream.seek(group_offset)
            clip = Clip()
            try:
                clip.unpack(stream, file_size)
            except UnpackException as e:
                raise ChunkUnpackException(chain=['clips', idx] + e.chain, message=e.message)

            self.clips.append(clip)

    def relayout(self, offset=0):
        '''Rewrite from scratch every offset of the archive so that
        clips and frames are contiguous. It returns the size of the archive.'''
        cursor = offset + self.table_size
        for idx, clip in enumerate(self.clips):
            try:
                cursor = check_offset(cursor + clip.relayout(offset=cursor), chain=[])
            except OffsetOverflowException as e:
                raise OffsetOverflowException(chain=['clips', idx] + e.chain, message=e.message)

        self.group_offsets = [_.offset for _ in self.clips]

        return cursor - offset

    def _check_group_index(self, index):
        # bool is an int for python, not for us
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.group_offsets):
            raise InvalidGroupException(
                chain=['group_offsets'],
                message=f'group index {index!r} out of range [0, {len(self.group_offsets)})')

    def remove_group(self, index):
        self._check_group_index(index)

        if len(self.group_offsets) == 1:
            raise InvalidGroupException(
                chain=['group_offsets'],
                message='cannot remove the only group of the archive')

        self.logger.debug('removing group #%d at offset 0x%x' % (index, self.group_offsets[index]))

        del self.group_offsets[index]
        del self.clips[index]

        self.relayout()

    def remove_groups(self, indexes):
        '''Remove a batch of groups, all the indexes refer to the archive
        as it is before the call. Nothing is touched if one of them is not valid.

        It returns the indexes removed, in the order they were removed.'''
        indexes = list(indexes)
        for index in indexes:
            self._check_group_index(index)

        to_remove = sorted(set(indexes), reverse=True)

        if to_remove and len(to_remove) == len(self.group_offsets):
            raise InvalidGroupException(
                chain=['group_offsets'],
                message='cannot remove every group of the archive')

        # from the highest so that the others don't shift
        for index in to_remove:
            self.logger.debug('removing group #%d at offset 0x%x' % (index, self.group_offsets[index]))
            del self.group_offsets[index]
            del self.clips[index]

        self.relayout()

        return to_remove

    def pack(self, stream=None, relayout=True):
        '''Encode the archive. Everything is written at the offsets stored into the
        model so the passes can be in any order; with relayout=False the offsets
        are used as they are.

        Without a stream the data is packed in memory and returned, otherwise
        the stream is written (and truncated at the end of the archive) and
        nothing is returned.'''
        if relayout:
            self.relayout()

        in_memory = stream is None
        stream = Stream(b'') if in_memory else stream

        if not self.is_mono_group():
            stream.seek(0)
            for group_offset in self.group_offsets:
                group_offset_field.pack(stream, group_offset)
        self.logger.debug('wrote group offsets')

        for clip in self.clips:
            clip.pack_header(stream)
        self.logger.debug('wrote clip headers')

        for clip in self.clips:
            for frame in clip.frames:
                frame.pack(stream)
        self.logger.debug('wrote frames')

        # whatever was in the stream past the archive is not ours
        stream.seek(self.file_size())
        stream.truncate()

        if in_memory:
            return stream.getvalue()

    def save(self, path, relayout=True):
        '''Write the archive to path passing by a temporary file so that
        a failure doesn't leave behind a truncated archive.'''
        data = self.pack(relayout=relayout)

        path = os.fspath(path)
        tmp_path = path + '.tmp'
        try:
            with Stream(tmp_path, flags='w') as stream:
                stream.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self.logger.debug('saved %d bytes to \'%s\'' % (len(data), path))
