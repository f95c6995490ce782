#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Video Frames
==========================================
Frame sources for animation: evenly spaced video samples (OpenCV) and
animated GIF frames (Pillow), plus the frame-count recommendation shown to
users before sampling.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import cv2
from PIL import Image

from .constants import SOURCE_FRAME_RATE
from .errors import AsciiMotionError, InvalidConfig, PartialFrameFailure
from .kernels import round_half_up

logger = logging.getLogger(__name__)

CaptureFactory = Callable[[str], Any]


# =============================================================================
# FRAME SCHEDULE
# =============================================================================

def frame_grid_size(duration: float) -> int:
    """Frames in a video of `duration` seconds on the fixed 30 fps grid."""
    return int(math.floor(duration * SOURCE_FRAME_RATE))


def frame_timestamps(duration: float, count: int) -> List[float]:
    """
    Seek times (seconds) for `count` evenly spaced frames.

    The first frame is always at t = 0. Frame i sits at grid position
    min(i * step, total - 1) with step = total / count, converted back to time.

    Args:
        duration: Video duration in seconds
        count: Number of frames to sample (>= 1)

    Returns:
        List of `count` timestamps
    """
    if count < 1:
        raise InvalidConfig(f"frame count must be >= 1, got {count}", field='frames')
    total = frame_grid_size(duration)
    if total < 1:
        return [0.0] * count

    step = total / count
    times = [0.0]
    for i in range(1, count):
        position = min(i * step, total - 1)
        times.append(position / total * duration)
    return times


def recommended_frame_count(duration: float) -> int:
    """About 24 samples per video second, at least 60, never more than exist."""
    return min(max(round_half_up(duration * 24), 60), frame_grid_size(duration))


def frame_quality(frame_count: int, duration: float) -> str:
    """Quality label by sampled frames per second of source video."""
    frames_per_second = frame_count / duration if duration > 0 else 0.0
    if frames_per_second >= 24:
        return 'Excellent'
    elif frames_per_second >= 18:
        return 'Very Good'
    elif frames_per_second >= 12:
        return 'Good'
    elif frames_per_second >= 6:
        return 'Fair'
    return 'Low'


@dataclass
class FrameReport:
    """Summary of a sampling choice for a given playback rate."""
    frame_count: int
    duration: float
    fps: float
    recommended: int
    quality: str
    animation_length: float                  # Seconds of playback at fps
    frames_per_second: float                 # Samples per second of source

    def describe(self) -> str:
        return (f"Animation length: {self.animation_length:.1f}s at {self.fps:g} fps | "
                f"Quality: {self.quality} ({self.frames_per_second:.1f} frames/sec of video) | "
                f"Recommended: {self.recommended}")


def frame_report(frame_count: int, duration: float, fps: float) -> FrameReport:
    """Build a FrameReport for sampling frame_count frames and playing at fps."""
    if fps <= 0:
        raise InvalidConfig(f"fps must be > 0, got {fps}", field='fps')
    return FrameReport(
        frame_count=frame_count,
        duration=duration,
        fps=fps,
        recommended=recommended_frame_count(duration),
        quality=frame_quality(frame_count, duration),
        animation_length=frame_count / fps,
        frames_per_second=frame_count / duration if duration > 0 else 0.0,
    )


# =============================================================================
# VIDEO
# =============================================================================

@dataclass
class VideoInfo:
    """Basic stream properties reported by the decoder."""
    duration: float
    width: int
    height: int

    @property
    def total_frames(self) -> int:
        return frame_grid_size(self.duration)


def _open(path: str, capture_factory: Optional[CaptureFactory]):
    capture = (capture_factory or cv2.VideoCapture)(str(path))
    if not capture.isOpened():
        capture.release()
        raise AsciiMotionError(f"Cannot open video: {path}")
    return capture


def _video_info(capture) -> VideoInfo:
    fps = capture.get(cv2.CAP_PROP_FPS) or 0.0
    frame_count = capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0
    duration = frame_count / fps if fps > 0 else 0.0
    return VideoInfo(
        duration=duration,
        width=int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
        height=int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
    )


def probe_video(path: str, capture_factory: Optional[CaptureFactory] = None) -> VideoInfo:
    """Read duration and frame size of a video file."""
    capture = _open(path, capture_factory)
    try:
        return _video_info(capture)
    finally:
        capture.release()


def sample_frames(path: str, count: int,
                  capture_factory: Optional[CaptureFactory] = None) -> List[Image.Image]:
    """
    Sample `count` evenly spaced frames from a video.

    Args:
        path: Video file path
        count: Number of frames
        capture_factory: Replacement for cv2.VideoCapture

    Returns:
        List of RGB images, in time order

    Raises:
        AsciiMotionError: if the video cannot be opened
        PartialFrameFailure: if seeking to or decoding a frame fails
    """
    capture = _open(path, capture_factory)
    try:
        info = _video_info(capture)
        times = frame_timestamps(info.duration, count)
        logger.info("Sampling %d frames from %s (%.2fs)", count, path, info.duration)

        frames = []
        for index, seconds in enumerate(times):
            capture.set(cv2.CAP_PROP_POS_MSEC, seconds * 1000.0)
            ok, bgr = capture.read()
            if not ok or bgr is None:
                logger.error("Could not decode frame %d at %.3fs", index, seconds)
                raise PartialFrameFailure(index, f"could not decode frame at {seconds:.3f}s")
            frames.append(Image.fromarray(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)))
            logger.debug("Extracted frame %d/%d", index + 1, count)
        return frames
    finally:
        capture.release()


# =============================================================================
# ANIMATED GIF
# =============================================================================

def gif_frames(path: str) -> List[Image.Image]:
    """
    Extract all frames of an animated GIF.

    Args:
        path: Path to GIF file

    Returns:
        List of RGBA images
    """
    frames = []
    with Image.open(path) as gif:
        try:
            while True:
                frames.append(gif.copy().convert('RGBA'))
                gif.seek(gif.tell() + 1)
        except EOFError:
            pass
    logger.info("Read %d frames from %s", len(frames), path)
    return frames
