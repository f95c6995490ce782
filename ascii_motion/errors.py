#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Errors
====================================
Exception types raised by the rendering pipeline and frame orchestration.
"""

from typing import Optional


class AsciiMotionError(Exception):
    """Base class for all package errors."""


class InvalidConfig(AsciiMotionError, ValueError):
    """A render configuration cannot be processed (rejected before any frame)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PartialFrameFailure(AsciiMotionError, RuntimeError):
    """One frame of a batch failed; the batch is aborted at that index."""

    def __init__(self, frame_index: int, message: str):
        super().__init__(f"Frame {frame_index}: {message}")
        self.frame_index = frame_index
