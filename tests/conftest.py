import struct

import pytest


def _make_frame(width, height, payload):
    return struct.pack('>HHH', 6, width, height) + payload


def _build_group(frames):
    '''Encode a group: header followed by the frames, offsets relative to the group.'''
    cursor = 4 + 4 * len(frames) + 4

    relative_offsets = []
    for frame in frames:
        relative_offsets.append(cursor)
        cursor += len(frame)

    return (
        struct.pack('>I', len(frames)) +
        b''.join(struct.pack('>I', _) for _ in relative_offsets) +
        struct.pack('>I', cursor) +
        b''.join(frames)
    )


def _build_archive(groups):
    '''A single group is written without the table of group offsets.'''
    blobs = [_build_group(_) for _ in groups]

    if len(blobs) == 1:
        return blobs[0]

    offset = 4 * len(blobs)
    table = b''
    for blob in blobs:
        table += struct.pack('>I', offset)
        offset += len(blob)

    return table + b''.join(blobs)


@pytest.fixture
def make_frame():
    return _make_frame


@pytest.fixture
def build_archive():
    return _build_archive


@pytest.fixture
def four_groups():
    '''Groups A, B, C and D; the first byte of each payload tells the group.'''
    return [
        [_make_frame(4, 4, bytes([0xa0 + idx]) * 16), _make_frame(4, 2, bytes([0xa0 + idx]) * 8)]
        for idx in range(4)
    ]


@pytest.fixture
def three_groups():
    '''Three groups of two frames placed at offsets 12, 140 and 310.'''
    return [
        [_make_frame(7, 7, b'\x10' * 50), _make_frame(7, 7, b'\x11' * 50)],  # 16 + 56 + 56
        [_make_frame(8, 8, b'\x20' * 71), _make_frame(8, 8, b'\x21' * 71)],  # 16 + 77 + 77
        [_make_frame(5, 5, b'\x30' * 34), _make_frame(5, 5, b'\x31' * 38)],  # 16 + 40 + 44
    ]
