#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Pipeline
======================================
Entry points that turn images into TextFrames according to a RenderConfig.

    gray, rgb = luminance_stage(image)
    edge method -> detector levels | dithering -> dither levels | quantize
    levels_to_frame(levels, glyphs)
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .clahe import apply_clahe
from .config import RenderConfig
from .constants import EdgeMethod
from .dithering import dither
from .edge_detection import EdgeProcessor
from .errors import InvalidConfig, PartialFrameFailure
from .luminance import ImageLike, Resampler, green_mask, luminance_stage
from .quantizer import TextFrame, empty_frame, levels_to_frame, quantize
from .texture import local_binary_pattern, margin_mask

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


# =============================================================================
# PER-METHOD RENDERERS
# =============================================================================

def _white_mask(gray: np.ndarray, config: RenderConfig) -> Optional[np.ndarray]:
    return gray == 255 if config.ignore_white else None


def _keyed_mask(gray: np.ndarray, rgb: np.ndarray, config: RenderConfig) -> np.ndarray:
    """Pixels excluded by ignore_white and/or ignore_green."""
    mask = np.zeros(gray.shape, dtype=bool)
    if config.ignore_white:
        mask |= gray == 255
    if config.ignore_green:
        mask |= green_mask(rgb)
    return mask


def _render_sobel(gray, rgb, config: RenderConfig, gradient: str, rng):
    edges = EdgeProcessor.sobel_threshold(gray, config.edge_threshold)
    return quantize(edges, len(gradient), _white_mask(gray, config)), gradient


def _render_canny(gray, rgb, config: RenderConfig, gradient: str, rng):
    edges, angle = EdgeProcessor.canny(gray, config.canny_low, config.canny_high, config.canny_sigma)
    return EdgeProcessor.edge_levels(edges > 0, angle), EdgeProcessor.DIRECTION_GLYPHS


def _render_dog(gray, rgb, config: RenderConfig, gradient: str, rng):
    mask, angle = EdgeProcessor.contours(gray, config.dog_sigma1, config.dog_sigma2, config.dog_threshold)
    return EdgeProcessor.edge_levels(mask, angle), EdgeProcessor.DIRECTION_GLYPHS


def _render_clahe(gray, rgb, config: RenderConfig, gradient: str, rng):
    enhanced = apply_clahe(gray, config.clahe_tile_size, config.clahe_clip_limit)
    return quantize(enhanced, len(gradient), _keyed_mask(gray, rgb, config)), gradient


def _render_lbp(gray, rgb, config: RenderConfig, gradient: str, rng):
    codes = local_binary_pattern(gray, config.lbp_radius, config.lbp_neighbors,
                                 config.lbp_threshold, config.lbp_uniform)
    max_code = 2 ** config.lbp_neighbors - 1
    excluded = margin_mask(gray.shape, config.lbp_radius)
    return quantize(codes, len(gradient), excluded, max_value=max_code), gradient


def _render_luminance(gray, rgb, config: RenderConfig, gradient: str, rng):
    if config.dithering:
        levels = dither(gray, len(gradient), config.dither_algorithm,
                        _keyed_mask(gray, rgb, config), rng)
        return levels, gradient
    return quantize(gray, len(gradient), _white_mask(gray, config)), gradient


RENDERERS = {
    EdgeMethod.NONE: _render_luminance,
    EdgeMethod.SOBEL: _render_sobel,
    EdgeMethod.CANNY: _render_canny,
    EdgeMethod.DOG: _render_dog,
    EdgeMethod.CLAHE: _render_clahe,
    EdgeMethod.LBP: _render_lbp,
}


# =============================================================================
# ENTRY POINTS
# =============================================================================

def _render_validated(image: ImageLike, config: RenderConfig,
                      resampler: Optional[Resampler],
                      rng: Optional[np.random.Generator]) -> TextFrame:
    gray, rgb = luminance_stage(image, config, resampler)
    if gray.shape[0] == 0:
        return empty_frame(config.ascii_width)

    levels, glyphs = RENDERERS[config.edge_method](gray, rgb, config, config.gradient, rng)
    return levels_to_frame(levels, glyphs)


def render(image: ImageLike, config: RenderConfig, *,
           resampler: Optional[Resampler] = None,
           rng: Optional[np.random.Generator] = None) -> TextFrame:
    """
    Render one image.

    Args:
        image: PIL image or (H, W, 3|4) uint8 array
        config: Render configuration
        resampler: Replacement for the default Pillow resampler
        rng: Random generator for noise dithering

    Returns:
        TextFrame of config.ascii_width columns

    Raises:
        InvalidConfig: if the configuration cannot be rendered
    """
    config.validate()
    frame = _render_validated(image, config, resampler, rng)
    logger.debug("Rendered %dx%d frame (%s)", frame.width, frame.height, config.edge_method.value)
    return frame


def iter_render(images: Iterable[ImageLike], config: RenderConfig, *,
                resampler: Optional[Resampler] = None,
                rng: Optional[np.random.Generator] = None) -> Iterator[Tuple[int, TextFrame]]:
    """
    Render images one at a time, yielding (index, frame) after each.

    The configuration is validated before the first frame is touched.

    Raises:
        InvalidConfig: if the configuration cannot be rendered
        PartialFrameFailure: when a frame fails, carrying its index
    """
    config.validate()
    for index, image in enumerate(images):
        try:
            frame = _render_validated(image, config, resampler, rng)
        except InvalidConfig:
            raise
        except Exception as e:
            logger.error("Frame %d failed: %s", index, e)
            raise PartialFrameFailure(index, str(e)) from e
        yield index, frame


def render_all(images: Sequence[ImageLike], config: RenderConfig,
               progress: Optional[ProgressCallback] = None, *,
               resampler: Optional[Resampler] = None,
               rng: Optional[np.random.Generator] = None) -> List[TextFrame]:
    """
    Render a sequence of images.

    Args:
        images: Source frames
        config: Render configuration shared by every frame
        progress: Called as progress(index, total) after each frame, with the
            0-based index of the frame just finished
        resampler: Replacement for the default Pillow resampler
        rng: Random generator for noise dithering

    Returns:
        One TextFrame per image, in order
    """
    images = list(images)
    total = len(images)
    frames = []
    for index, frame in iter_render(images, config, resampler=resampler, rng=rng):
        frames.append(frame)
        if progress is not None:
            progress(index, total)
    logger.info("Rendered %d frames at width %d", total, config.ascii_width)
    return frames
