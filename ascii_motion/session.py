#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Playback Session
==============================================
Owns the frames of one loaded animation, their rendered TextFrames and the
playback position, and decides when a configuration change forces the
frames to be regenerated.

State machine::

    IDLE --load_frames--> FRAMES_EXTRACTED --process_all--> PROCESSED <--play/pause--> PLAYING

A configuration change while paused sets ``needs_regen``, consumed by the
next navigation or play. A change while playing is stamped with the session
clock and honoured by tick() once no further change arrived for the
debounce interval.
A regeneration that fails leaves both flags set, so the next attempt retries.
"""

import logging
import time
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import RenderConfig
from .constants import DEFAULT_FPS, REGENERATION_DEBOUNCE_S
from .errors import InvalidConfig
from .luminance import ImageLike, Resampler
from .pipeline import ProgressCallback, iter_render, render
from .quantizer import TextFrame

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a PlaybackSession."""
    IDLE = 'idle'
    FRAMES_EXTRACTED = 'frames_extracted'
    PROCESSED = 'processed'
    PLAYING = 'playing'


class PlaybackSession:
    """Frame cache, playback position and regeneration flags for one animation."""

    def __init__(self, config: Optional[RenderConfig] = None, *,
                 clock: Callable[[], float] = time.monotonic,
                 resampler: Optional[Resampler] = None,
                 rng: Optional[np.random.Generator] = None,
                 debounce: float = REGENERATION_DEBOUNCE_S,
                 fps: float = DEFAULT_FPS):
        """
        Initialize an empty session.

        Args:
            config: Render configuration (defaults to RenderConfig())
            clock: Monotonic time source in seconds, replaceable in tests
            resampler: Resampler passed through to the pipeline
            rng: Random generator passed through to noise dithering
            debounce: Quiet period before a change made while playing is applied
            fps: Playback rate
        """
        if fps <= 0:
            raise InvalidConfig(f"fps must be > 0, got {fps}", field='fps')
        self.config = (config or RenderConfig()).validate()
        self.clock = clock
        self.resampler = resampler
        self.rng = rng
        self.debounce = debounce
        self.fps = fps

        self.generation = 0
        self.state = SessionState.IDLE
        self.frames: List[ImageLike] = []
        self.ascii_frames: List[TextFrame] = []
        self.current_index = 0
        self.needs_regen = False
        self.changed_while_playing = False
        self.last_change_time = 0.0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Drop all frames and abandon any regeneration still in progress."""
        self.generation += 1
        self.state = SessionState.IDLE
        self.frames = []
        self.ascii_frames = []
        self.current_index = 0
        self.needs_regen = False
        self.changed_while_playing = False

    def load_frames(self, images: Sequence[ImageLike]) -> None:
        """Replace the session's source frames."""
        self.reset()
        self.frames = list(images)
        if self.frames:
            self.state = SessionState.FRAMES_EXTRACTED
        logger.info("Loaded %d frames (generation %d)", len(self.frames), self.generation)

    @property
    def is_loaded(self) -> bool:
        return bool(self.frames)

    @property
    def is_playing(self) -> bool:
        return self.state == SessionState.PLAYING

    @property
    def frame_delay(self) -> float:
        """Seconds between ticks at the current fps."""
        return 1.0 / self.fps

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    def iter_process(self) -> Iterator[Tuple[int, int]]:
        """
        Render every frame, yielding (index, total) after each one.

        The host may do other work between iterations. If reset() or
        load_frames() is called meanwhile, the run stops and its results
        are discarded.
        """
        generation = self.generation
        config = self.config
        frames = list(self.frames)
        total = len(frames)

        rendered = []
        for index, frame in iter_render(frames, config, resampler=self.resampler, rng=self.rng):
            rendered.append(frame)
            yield index, total
            if self.generation != generation:
                logger.info("Discarding stale regeneration (generation %d)", generation)
                return

        self.ascii_frames = rendered
        if self.config is config:
            self.needs_regen = False
        if self.state == SessionState.FRAMES_EXTRACTED:
            self.state = SessionState.PROCESSED
        logger.info("Processed %d frames", total)

    def process_all(self, progress: Optional[ProgressCallback] = None) -> List[TextFrame]:
        """Render every frame, reporting progress(index, total) after each."""
        for index, total in self.iter_process():
            if progress is not None:
                progress(index, total)
        return self.ascii_frames

    def _regenerate(self) -> None:
        index = self.current_index
        self.process_all()
        self.current_index = index

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def update_config(self, config: RenderConfig) -> None:
        """
        Switch to a new configuration.

        Raises:
            InvalidConfig: the session keeps its previous configuration
        """
        if not isinstance(config, RenderConfig):
            raise InvalidConfig(f"Expected RenderConfig, got {type(config).__name__}")
        self.config = config.validate()
        if not self.is_loaded:
            return
        if self.is_playing:
            self.changed_while_playing = True
            self.last_change_time = self.clock()
        else:
            self.needs_regen = True

    # -------------------------------------------------------------------------
    # Navigation and playback
    # -------------------------------------------------------------------------

    def display(self, index: int) -> Optional[TextFrame]:
        """Cached TextFrame for index, rendered on demand if not cached yet."""
        if not self.is_loaded:
            return None
        if index < len(self.ascii_frames):
            return self.ascii_frames[index]
        return render(self.frames[index], self.config, resampler=self.resampler, rng=self.rng)

    @property
    def current_frame(self) -> Optional[TextFrame]:
        return self.display(self.current_index)

    def _step(self, offset: int) -> Optional[TextFrame]:
        if not self.is_loaded:
            return None
        if self.needs_regen:
            self._regenerate()
        self.current_index = (self.current_index + offset) % len(self.frames)
        return self.display(self.current_index)

    def next_frame(self) -> Optional[TextFrame]:
        """Advance one frame (wrapping), regenerating first if settings changed."""
        return self._step(1)

    def previous_frame(self) -> Optional[TextFrame]:
        """Go back one frame (wrapping), regenerating first if settings changed."""
        return self._step(-1)

    def play(self, fps: Optional[float] = None) -> None:
        """Start playback, regenerating first if the cache is stale or incomplete."""
        if not self.is_loaded or self.is_playing:
            return
        if fps is not None:
            if fps <= 0:
                raise InvalidConfig(f"fps must be > 0, got {fps}", field='fps')
            self.fps = fps
        if self.needs_regen or len(self.ascii_frames) < len(self.frames):
            self._regenerate()
        self.changed_while_playing = False
        self.state = SessionState.PLAYING
        logger.debug("Playing at %g fps from frame %d", self.fps, self.current_index)

    def pause(self) -> None:
        """Stop playback; a change still waiting for its debounce carries over."""
        if not self.is_playing:
            return
        self.state = SessionState.PROCESSED
        if self.changed_while_playing:
            self.changed_while_playing = False
            self.needs_regen = True

    def toggle_playback(self, fps: Optional[float] = None) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play(fps)

    def tick(self) -> Optional[TextFrame]:
        """
        Advance playback by one frame interval.

        Called by the host once every frame_delay seconds while playing. When
        a change made during playback has been quiet for the debounce
        interval, playback pauses, every frame is regenerated and playback
        resumes at the same position.

        Returns:
            The frame to show, or None when not playing
        """
        if not self.is_playing:
            return None

        if self.changed_while_playing and self.clock() - self.last_change_time > self.debounce:
            logger.debug("Regenerating frames after settings change")
            self.state = SessionState.PROCESSED
            try:
                self._regenerate()
            finally:
                self.state = SessionState.PLAYING
            self.changed_while_playing = False
            return self.display(self.current_index)

        self.current_index = (self.current_index + 1) % len(self.frames)
        return self.display(self.current_index)
