#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Luminance Stage
=============================================
Resamples a source image onto the character grid and converts it to an
adjusted gray field.
"""

import logging
from typing import Callable, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageFilter

from .constants import FONT_ASPECT_RATIO, GREEN_KEY_MIN, GREEN_KEY_RATIO
from .errors import AsciiMotionError
from .kernels import round_half_up

logger = logging.getLogger(__name__)

ImageLike = Union[Image.Image, np.ndarray]
Resampler = Callable[[Image.Image, int, int, float], Image.Image]


def to_pil(image: ImageLike) -> Image.Image:
    """Accept a PIL image or an (H, W, 3|4) uint8 array and return an RGBA image."""
    if isinstance(image, Image.Image):
        return image if image.mode == 'RGBA' else image.convert('RGBA')

    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise AsciiMotionError(f"Expected an (H, W, 3) or (H, W, 4) array, got shape {arr.shape}")
    return Image.fromarray(arr.astype(np.uint8)).convert('RGBA')


def ascii_height(img_width: int, img_height: int, ascii_width: int) -> int:
    """Number of text rows for an image rendered at ascii_width columns."""
    if img_width <= 0:
        raise AsciiMotionError(f"Image has no width ({img_width}x{img_height})")
    return round_half_up(img_height / img_width * ascii_width * FONT_ASPECT_RATIO)


def pillow_resample(image: Image.Image, width: int, height: int, blur: float) -> Image.Image:
    """
    Default resampler: bilinear resize, then a Gaussian blur in grid pixels.

    Args:
        image: Source image
        width: Target columns
        height: Target rows
        blur: Gaussian radius (0 disables)

    Returns:
        RGBA image of exactly (width, height)
    """
    resized = image.convert('RGBA').resize((width, height), Image.BILINEAR)
    if blur > 0:
        resized = resized.filter(ImageFilter.GaussianBlur(radius=blur))
    return resized


def contrast_factor(contrast: float) -> float:
    """Contrast multiplier 259(c + 255) / (255(259 - c))."""
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


def to_gray_field(rgb: np.ndarray, brightness: float = 0.0, contrast: float = 0.0,
                  invert: bool = False) -> np.ndarray:
    """
    Convert an (H, W, 3) RGB array to an adjusted gray field.

    Args:
        rgb: Pixel array (any numeric dtype)
        brightness: Offset added after contrast
        contrast: Contrast amount, see contrast_factor()
        invert: Invert luminance before adjustment

    Returns:
        float64 array of shape (H, W) clamped to [0, 255]
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    lum = 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
    if invert:
        lum = 255 - lum
    factor = contrast_factor(contrast)
    return np.clip(factor * (lum - 128) + 128 + brightness, 0, 255)


def green_mask(rgb: np.ndarray) -> np.ndarray:
    """True where a pixel is keyed out as green screen."""
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    return (g > r * GREEN_KEY_RATIO) & (g > b * GREEN_KEY_RATIO) & (g > GREEN_KEY_MIN)


def luminance_stage(image: ImageLike, config, resampler: Optional[Resampler] = None
                    ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Resample an image onto the character grid and compute its gray field.

    Args:
        image: Source image
        config: RenderConfig
        resampler: Optional replacement for pillow_resample

    Returns:
        Tuple of (gray field (H, W), resampled RGB (H, W, 3)); both are empty
        when the computed height is 0
    """
    source = to_pil(image)
    width = config.ascii_width
    height = ascii_height(source.width, source.height, width)
    if height <= 0:
        return np.zeros((0, width)), np.zeros((0, width, 3))

    resampled = (resampler or pillow_resample)(source, width, height, config.blur)
    if resampled.size != (width, height):
        raise AsciiMotionError(
            f"Resampler returned {resampled.size[0]}x{resampled.size[1]}, expected {width}x{height}"
        )
    rgb = np.asarray(resampled.convert('RGB'), dtype=np.float64)
    gray = to_gray_field(rgb, config.brightness, config.contrast, config.invert)
    logger.debug("Luminance field %dx%d (source %dx%d)", width, height, source.width, source.height)
    return gray, rgb
