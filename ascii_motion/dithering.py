#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Dithering
=======================================
Error diffusion, noise and ordered dithering from a gray field straight to
gradient levels.

Every function scans row-major on a working copy and returns an int64 level
array in which -1 marks an excluded pixel (rendered as a space). Excluded
pixels are skipped before quantization: they consume no noise sample and
neither absorb nor spread error.
"""

from typing import Optional

import numpy as np

from .constants import BAYER_4X4, DitherAlgorithm
from .kernels import clamp, round_half_up

# (dy, dx, weight) offsets
FLOYD_STEINBERG_WEIGHTS = ((0, 1, 7 / 16), (1, -1, 3 / 16), (1, 0, 5 / 16), (1, 1, 1 / 16))
ATKINSON_WEIGHTS = ((0, 1, 1 / 8), (0, 2, 1 / 8), (1, -1, 1 / 8), (1, 0, 1 / 8),
                    (1, 1, 1 / 8), (2, 0, 1 / 8))


def _no_exclusions(shape) -> np.ndarray:
    return np.zeros(shape, dtype=bool)


def error_diffusion(gray: np.ndarray, levels: int, weights,
                    excluded: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Quantize with error diffusion.

    Args:
        gray: Gray field in [0, 255]
        levels: Number of gradient glyphs
        weights: Sequence of (dy, dx, weight) neighbours receiving error
        excluded: Mask of pixels to leave blank

    Returns:
        Level array (-1 for excluded pixels)
    """
    height, width = gray.shape
    work = np.asarray(gray, dtype=np.float64).tolist()
    skip = (excluded if excluded is not None else _no_exclusions(gray.shape)).tolist()
    out = np.full((height, width), -1, dtype=np.int64)
    steps = levels - 1

    for y in range(height):
        row = work[y]
        for x in range(width):
            if skip[y][x]:
                continue
            value = row[x]
            level = round_half_up(value / 255 * steps) if steps else 0
            out[y, x] = level
            if not steps:
                # A single glyph has no quantization error to spread
                continue
            error = value - level / steps * 255
            for dy, dx, weight in weights:
                ny, nx = y + dy, x + dx
                if 0 <= nx < width and ny < height:
                    work[ny][nx] = clamp(work[ny][nx] + error * weight, 0, 255)
    return out


def floyd_steinberg(gray: np.ndarray, levels: int,
                    excluded: Optional[np.ndarray] = None) -> np.ndarray:
    """Floyd-Steinberg: 7/16 right, 3/16 bottom-left, 5/16 bottom, 1/16 bottom-right."""
    return error_diffusion(gray, levels, FLOYD_STEINBERG_WEIGHTS, excluded)


def atkinson(gray: np.ndarray, levels: int,
             excluded: Optional[np.ndarray] = None) -> np.ndarray:
    """Atkinson: 1/8 to six neighbours, the remaining 2/8 of the error is dropped."""
    return error_diffusion(gray, levels, ATKINSON_WEIGHTS, excluded)


def noise(gray: np.ndarray, levels: int, excluded: Optional[np.ndarray] = None,
          rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Add uniform noise of +/- (255 / levels) / 2 before quantizing.

    One sample is drawn per included pixel in scan order, so a seeded
    generator gives reproducible output.
    """
    rng = rng if rng is not None else np.random.default_rng()
    height, width = gray.shape
    skip = excluded if excluded is not None else _no_exclusions(gray.shape)
    out = np.full((height, width), -1, dtype=np.int64)
    steps = levels - 1
    amplitude = 255 / levels

    for y in range(height):
        for x in range(width):
            if skip[y, x]:
                continue
            noisy = clamp(float(gray[y, x]) + (rng.random() - 0.5) * amplitude, 0, 255)
            out[y, x] = round_half_up(noisy / 255 * steps)
    return out


def ordered(gray: np.ndarray, levels: int,
            excluded: Optional[np.ndarray] = None) -> np.ndarray:
    """Ordered dithering against the 4x4 Bayer matrix, floor-quantized."""
    height, width = gray.shape
    bayer = np.asarray(BAYER_4X4, dtype=np.float64)
    size = bayer.shape[0]
    ys = np.arange(height)[:, None] % size
    xs = np.arange(width)[None, :] % size
    threshold = (bayer[ys, xs] + 0.5) / (size * size)

    value = np.clip(np.asarray(gray, dtype=np.float64) / 255 + threshold - 0.5, 0, 1)
    out = np.minimum(np.floor(value * levels).astype(np.int64), levels - 1)
    if excluded is not None:
        out[excluded] = -1
    return out


def dither(gray: np.ndarray, levels: int, algorithm: DitherAlgorithm,
           excluded: Optional[np.ndarray] = None,
           rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Dispatch to the dithering algorithm named by the config."""
    if algorithm == DitherAlgorithm.FLOYD_STEINBERG:
        return floyd_steinberg(gray, levels, excluded)
    elif algorithm == DitherAlgorithm.ATKINSON:
        return atkinson(gray, levels, excluded)
    elif algorithm == DitherAlgorithm.NOISE:
        return noise(gray, levels, excluded, rng)
    elif algorithm == DitherAlgorithm.ORDERED:
        return ordered(gray, levels, excluded)
    else:
        raise ValueError(f"Unknown dither algorithm: {algorithm}")
