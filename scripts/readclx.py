#!/usr/bin/env python3
import sys
import os
import logging

from clxstrip.images.clx import ClxFile
from clxstrip.images.clx.utils import describe
from clxstrip.exceptions import ClxException

logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <clx file>' % progname)
    sys.exit(1)


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]

    try:
        clx = ClxFile(path)

        for line in describe(clx):
            print(line)
    except ClxException as e:
        logger.error(f'failed to read \'{path}\': {e}')
        sys.exit(1)
