#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - CLAHE
===================================
Contrast limited adaptive histogram equalization over a tile grid, blended
between neighbouring tiles.
"""

import logging
from typing import Tuple

import numpy as np

from .kernels import round_half_up

logger = logging.getLogger(__name__)

HISTOGRAM_BINS = 256


def tile_grid(length: int, tile_size: int) -> Tuple[int, int]:
    """Return (number of tiles, tile extent) along one axis."""
    num_tiles = max(2, length // tile_size)
    return num_tiles, length // num_tiles


def clip_histogram(histogram: np.ndarray, clip_limit: float, pixel_count: int) -> np.ndarray:
    """
    Clip a histogram and redistribute the excess.

    Every bin gets the integer share of the clipped mass; the remainder goes
    one count each to the lowest bins.

    Args:
        histogram: 256-bin integer histogram
        clip_limit: Relative clip limit
        pixel_count: Number of pixels in the tile

    Returns:
        New clipped histogram with the same total count
    """
    limit = max(1, round_half_up(clip_limit * pixel_count / HISTOGRAM_BINS))
    clipped = np.minimum(histogram, limit)
    excess = int(histogram.sum() - clipped.sum())

    per_bin, residual = divmod(excess, HISTOGRAM_BINS)
    clipped = clipped + per_bin
    clipped[:residual] += 1
    return clipped


def tile_mappings(gray: np.ndarray, tile_size: int, clip_limit: float) -> np.ndarray:
    """
    Intensity mapping (cumulative clipped histogram scaled to 0-255) per tile.

    Returns:
        Array of shape (tiles_y, tiles_x, 256)
    """
    height, width = gray.shape
    tiles_y, extent_y = tile_grid(height, tile_size)
    tiles_x, extent_x = tile_grid(width, tile_size)
    values = round_half_up(np.clip(gray, 0, 255))

    mappings = np.zeros((tiles_y, tiles_x, HISTOGRAM_BINS), dtype=np.float64)
    for ty in range(tiles_y):
        for tx in range(tiles_x):
            tile = values[ty * extent_y:min((ty + 1) * extent_y, height),
                          tx * extent_x:min((tx + 1) * extent_x, width)]
            count = tile.size
            histogram = np.bincount(tile.ravel(), minlength=HISTOGRAM_BINS)
            histogram = clip_histogram(histogram, clip_limit, count)
            mappings[ty, tx] = np.cumsum(histogram) * 255 / count
    return mappings


def apply_clahe(gray: np.ndarray, tile_size: int = 8, clip_limit: float = 4.0) -> np.ndarray:
    """
    Enhance local contrast of a gray field.

    Each pixel is remapped with its tile's mapping, blended with the tile to
    the right and/or below. Weights grow linearly across the image in units of
    whole tiles; pixels in the last tile row blend horizontally only, pixels in
    the last tile column vertically only, and the last tile uses its own
    mapping.

    Args:
        gray: Gray field (at least 2x2)
        tile_size: Nominal tile size in pixels
        clip_limit: Relative histogram clip limit

    Returns:
        Enhanced float field in [0, 255]
    """
    gray = np.asarray(gray, dtype=np.float64)
    height, width = gray.shape
    if height < 2 or width < 2:
        # No tile grid fits; nothing to equalize against
        logger.debug("CLAHE skipped for %dx%d field", width, height)
        return gray.copy()

    tiles_y, extent_y = tile_grid(height, tile_size)
    tiles_x, extent_x = tile_grid(width, tile_size)
    mappings = tile_mappings(gray, tile_size, clip_limit)
    values = round_half_up(np.clip(gray, 0, 255))

    ys = np.arange(height)[:, None]
    xs = np.arange(width)[None, :]
    ty = np.minimum(tiles_y - 1, ys // extent_y)
    tx = np.minimum(tiles_x - 1, xs // extent_x)
    ty, tx = np.broadcast_arrays(ty, tx)
    ty1 = np.minimum(ty + 1, tiles_y - 1)
    tx1 = np.minimum(tx + 1, tiles_x - 1)

    right = (xs / width - tx / tiles_x) * tiles_x
    left = 1 - right
    bottom = (ys / height - ty / tiles_y) * tiles_y
    top = 1 - bottom

    top_left = mappings[ty, tx, values]
    top_right = mappings[ty, tx1, values]
    bottom_left = mappings[ty1, tx, values]
    bottom_right = mappings[ty1, tx1, values]

    last_row = ty == tiles_y - 1
    last_col = tx == tiles_x - 1
    # Weights near tile seams can fall slightly outside [0, 1]
    blended = np.select(
        [last_row & last_col, last_row, last_col],
        [
            top_left,
            left * top_left + right * top_right,
            top * top_left + bottom * bottom_left,
        ],
        top * (left * top_left + right * top_right) + bottom * (left * bottom_left + right * bottom_right),
    )
    return np.clip(blended, 0, 255)
