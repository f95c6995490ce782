#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Texture
=====================================
Local binary patterns with circular, bilinearly interpolated sampling.
"""

import math

import numpy as np


def uniform_sentinel(neighbors: int) -> int:
    """Code that every non-uniform pattern collapses to."""
    return neighbors * (neighbors - 1) + 2


def count_transitions(pattern: int, neighbors: int) -> int:
    """Number of 0/1 changes walking once around an N-bit circular pattern."""
    transitions = 0
    for n in range(neighbors):
        if ((pattern >> n) & 1) != ((pattern >> ((n + 1) % neighbors)) & 1):
            transitions += 1
    return transitions


def is_uniform_pattern(pattern: int, neighbors: int) -> bool:
    """A pattern is uniform when it has at most two circular transitions."""
    return count_transitions(pattern, neighbors) <= 2


def circular_sample(gray: np.ndarray, xs: np.ndarray, ys: np.ndarray,
                    radius: int, angle: float) -> np.ndarray:
    """
    Sample gray at (x + r cos a, y + r sin a) for every (x, y) pair.

    Bilinear between the floor and ceil corners when all four lie inside the
    field, the floor corner alone when only it does, otherwise 0.
    """
    height, width = gray.shape
    nx = xs + radius * math.cos(angle)
    ny = ys + radius * math.sin(angle)
    x0 = np.floor(nx).astype(np.int64)
    y0 = np.floor(ny).astype(np.int64)
    x1 = np.ceil(nx).astype(np.int64)
    y1 = np.ceil(ny).astype(np.int64)
    dx = nx - x0
    dy = ny - y0

    def inside(cx, cy):
        return (cx >= 0) & (cx < width) & (cy >= 0) & (cy < height)

    def at(cx, cy):
        return gray[np.clip(cy, 0, height - 1), np.clip(cx, 0, width - 1)]

    v00, v01, v10, v11 = at(x0, y0), at(x1, y0), at(x0, y1), at(x1, y1)
    bilinear = ((1 - dx) * (1 - dy) * v00 + dx * (1 - dy) * v01
                + (1 - dx) * dy * v10 + dx * dy * v11)
    floor_inside = inside(x0, y0)
    all_inside = floor_inside & inside(x1, y0) & inside(x0, y1) & inside(x1, y1)
    return np.where(all_inside, bilinear, np.where(floor_inside, v00, 0.0))


def local_binary_pattern(gray: np.ndarray, radius: int = 1, neighbors: int = 8,
                         threshold: float = 5.0, uniform: bool = False) -> np.ndarray:
    """
    Compute LBP codes for every pixel at least `radius` away from the border.

    Bit n is set when the n-th circular sample is >= center + threshold.

    Args:
        gray: Gray field
        radius: Sampling circle radius in pixels
        neighbors: Number of samples (bits)
        threshold: Margin a sample must exceed the center by
        uniform: Collapse non-uniform codes to uniform_sentinel(neighbors)

    Returns:
        int64 array of codes, 0 inside the margin
    """
    gray = np.asarray(gray, dtype=np.float64)
    height, width = gray.shape
    codes = np.zeros((height, width), dtype=np.int64)
    if height <= 2 * radius or width <= 2 * radius:
        return codes

    ys, xs = np.mgrid[radius:height - radius, radius:width - radius]
    xs = xs.astype(np.float64)
    ys = ys.astype(np.float64)
    center = gray[radius:height - radius, radius:width - radius]

    inner = np.zeros(center.shape, dtype=np.int64)
    for n in range(neighbors):
        sample = circular_sample(gray, xs, ys, radius, 2 * math.pi * n / neighbors)
        inner |= (sample >= center + threshold).astype(np.int64) << n

    if uniform:
        transitions = np.zeros(inner.shape, dtype=np.int64)
        for n in range(neighbors):
            transitions += ((inner >> n) & 1) != ((inner >> ((n + 1) % neighbors)) & 1)
        inner = np.where(transitions > 2, uniform_sentinel(neighbors), inner)

    codes[radius:height - radius, radius:width - radius] = inner
    return codes


def margin_mask(shape, radius: int) -> np.ndarray:
    """True for pixels inside the unsampled border margin."""
    height, width = shape
    mask = np.ones((height, width), dtype=bool)
    if height > 2 * radius and width > 2 * radius:
        mask[radius:height - radius, radius:width - radius] = False
    return mask
