#!/usr/bin/env python3
"""
Central logging setup for ASCII Motion.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(level: Union[str, int] = "WARNING", log_file: Optional[str] = None,
                  rotate_bytes: int = 5 * 1024 * 1024, rotate_keep: int = 3) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("ascii_motion").setLevel(level)

    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(rotate_bytes),
            backupCount=int(rotate_keep),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)
