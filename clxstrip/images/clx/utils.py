import os
import logging

from . import ClxFile


logger = logging.getLogger(__name__)


DEFAULT_SUFFIX = '.stripped'


def remove_groups(clx_path, group_indexes, suffix=DEFAULT_SUFFIX):
    '''Write next to clx_path a copy of the archive without the groups indicated.

    The original archive is never touched; it returns the path of the new one.'''
    if not suffix:
        raise ValueError('an empty suffix would overwrite the original archive')

    clx_path = os.fspath(clx_path)

    clx = ClxFile(clx_path)
    logger.info('%d groups in file %s' % (len(clx), clx_path))

    for index in clx.remove_groups(group_indexes):
        logger.info('removed group #%d' % index)

    logger.info('%d groups' % len(clx))

    output_path = clx_path + suffix
    clx.save(output_path)
    logger.info('wrote %d bytes to %s' % (clx.file_size(), output_path))

    return output_path


def describe(clx):
    '''Yields a line for each group and each frame of the archive.'''
    layout = 'mono group' if clx.is_mono_group() else f'table of {clx.table_size} bytes'
    yield f'{len(clx)} groups, {clx.file_size()} bytes ({layout})'

    for idx, clip in enumerate(clx.clips):
        yield f'[{idx:02d}] offset 0x{clip.offset:08x} size 0x{clip.size:08x} frames {clip.frame_count}'
        for f_idx, frame in enumerate(clip.frames):
            yield f'  ({f_idx:02d}) offset 0x{frame.offset:08x} size 0x{frame.size:06x} {frame.width}x{frame.height}'
