#!/usr/bin/env python3
'''
Remove groups from a CLX archive

 $ clx_rm_groups.py towners.clx 0 3

writes towners.clx.stripped without the first and the fourth group.
'''
import logging
import sys
import os

from clxstrip.images.clx.utils import remove_groups
from clxstrip.exceptions import ClxException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} <path to clx> <space separated groups to remove>')
    sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    path = sys.argv[1]

    try:
        to_remove = [int(_) for _ in sys.argv[2:]]
    except ValueError:
        usage(sys.argv[0])

    try:
        remove_groups(path, to_remove)
    except ClxException as e:
        logger.error(f'failed to strip \'{path}\': {e}')
        sys.exit(1)
