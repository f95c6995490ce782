#!/usr/bin/env python3
"""
Image/Video to ASCII Motion
===========================
Command line entry point; see ascii_motion.cli for the options.
"""

import sys

from ascii_motion.cli import main


if __name__ == '__main__':
    sys.exit(main())
