#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Kernel Math
=========================================
Gaussian kernels, 2D convolution and the 3x3 Sobel gradient shared by the
edge detectors.
"""

import math
from typing import Tuple, Union

import numpy as np
from scipy import ndimage


Number = Union[int, float]

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)


# =============================================================================
# ROUNDING
# =============================================================================

def round_half_up(value):
    """Round halves towards +infinity (0.5 -> 1, -0.5 -> 0, 2.5 -> 3).

    Python's round() rounds halves to even, which shifts quantization
    boundaries, so every level computation goes through this helper.
    Accepts scalars (returns int) and arrays (returns int64 array).
    """
    if np.isscalar(value):
        return int(math.floor(value + 0.5))
    return np.floor(np.asarray(value, dtype=np.float64) + 0.5).astype(np.int64)


def clamp(value, lo: Number = 0.0, hi: Number = 255.0):
    """Clamp a scalar or array into [lo, hi]."""
    if np.isscalar(value):
        return min(max(value, lo), hi)
    return np.clip(value, lo, hi)


# =============================================================================
# GAUSSIAN
# =============================================================================

def gaussian_kernel_size(sigma: float) -> int:
    """Kernel size used for a blur of the given sigma: max(3, ceil(6 * sigma))."""
    return max(3, int(math.ceil(sigma * 6)))


def gaussian_kernel_2d(sigma: float, kernel_size: int) -> np.ndarray:
    """
    Build a normalized 2D Gaussian kernel.

    The kernel spans -half..half on each axis with half = kernel_size // 2, so
    an even size yields a (kernel_size + 1) square kernel centered on the
    origin.

    Args:
        sigma: Standard deviation (> 0)
        kernel_size: Requested kernel size

    Returns:
        Square float64 kernel summing to 1
    """
    half = kernel_size // 2
    offsets = np.arange(-half, half + 1, dtype=np.float64)
    yy, xx = np.meshgrid(offsets, offsets, indexing='ij')
    kernel = np.exp(-(xx * xx + yy * yy) / (2 * sigma * sigma))
    return kernel / kernel.sum()


# =============================================================================
# CONVOLUTION
# =============================================================================

def convolve_2d(img: np.ndarray, kernel: np.ndarray, mode: str = 'nearest') -> np.ndarray:
    """
    Apply a centered 2D kernel to a gray field.

    The kernel is applied without flipping (kernel[ky][kx] weights the pixel at
    offset (ky - half, kx - half)), which is identical to convolution for the
    symmetric Gaussian kernels used here.

    Args:
        img: 2D float array
        kernel: Odd-sized square kernel
        mode: Border handling; 'nearest' replicates edge pixels so flat
            regions stay flat up to the border, 'constant' pads with zeros

    Returns:
        Filtered array with the same shape as img
    """
    arr = np.asarray(img, dtype=np.float64)
    if arr.size == 0:
        return arr.copy()
    return ndimage.correlate(arr, np.asarray(kernel, dtype=np.float64), mode=mode, cval=0.0)


# =============================================================================
# SOBEL
# =============================================================================

def sobel_gradients(img: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Horizontal and vertical 3x3 Sobel responses for interior pixels.

    Terms are accumulated row by row, left to right, so results are
    reproducible to the last bit. Border pixels are 0.
    """
    arr = np.asarray(img, dtype=np.float64)
    height, width = arr.shape
    gx = np.zeros_like(arr)
    gy = np.zeros_like(arr)
    if height < 3 or width < 3:
        return gx, gy

    sum_x = np.zeros((height - 2, width - 2), dtype=np.float64)
    sum_y = np.zeros_like(sum_x)
    for ky in range(3):
        for kx in range(3):
            window = arr[ky:ky + height - 2, kx:kx + width - 2]
            sum_x = sum_x + window * SOBEL_X[ky, kx]
            sum_y = sum_y + window * SOBEL_Y[ky, kx]

    gx[1:-1, 1:-1] = sum_x
    gy[1:-1, 1:-1] = sum_y
    return gx, gy


def apply_sobel_2d(img: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gradient magnitude and direction of a gray field.

    Args:
        img: 2D float array

    Returns:
        Tuple of (magnitude, angle). The angle is in degrees folded into
        [0, 180]; both arrays are 0 on the one-pixel border.
    """
    gx, gy = sobel_gradients(img)
    magnitude = np.sqrt(gx * gx + gy * gy)

    angle = np.arctan2(gy, gx) * (180 / math.pi)
    angle = np.where(angle < 0, angle + 180, angle)
    return magnitude, angle
