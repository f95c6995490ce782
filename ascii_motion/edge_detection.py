#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Edge Detection
============================================
This module contains the EdgeProcessor class: Sobel threshold masks, Canny
and Difference of Gaussians contours, plus direction glyph selection.
"""

import logging
from typing import Tuple

import numpy as np

from .constants import EDGE_CHARS, SOBEL_MAX_MAGNITUDE
from .kernels import apply_sobel_2d, convolve_2d, gaussian_kernel_2d, gaussian_kernel_size

logger = logging.getLogger(__name__)

STRONG = 2
WEAK = 1

# 8-connected neighbour offsets, row by row
NEIGHBOURS = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))


class EdgeProcessor:
    """Process edges in gray fields using various edge detection algorithms."""

    # Glyph order matches direction_levels(): index 0..3
    DIRECTION_GLYPHS = (
        EDGE_CHARS['horizontal'] + EDGE_CHARS['diagonal_up']
        + EDGE_CHARS['vertical'] + EDGE_CHARS['diagonal_down']
    )

    @staticmethod
    def sobel_threshold(gray: np.ndarray, threshold: float) -> np.ndarray:
        """
        Binary Sobel edge mask.

        Args:
            gray: Gray field
            threshold: Cut-off on the magnitude scaled to 0-255

        Returns:
            Array of 0 (edge) and 255 (background); the border is background
        """
        magnitude, _ = apply_sobel_2d(gray)
        normalized = magnitude / SOBEL_MAX_MAGNITUDE * 255
        mask = np.where(normalized > threshold, 0.0, 255.0)

        height, width = mask.shape
        border = np.ones((height, width), dtype=bool)
        border[1:-1, 1:-1] = False
        mask[border] = 255.0
        return mask

    @staticmethod
    def gaussian_blur(gray: np.ndarray, sigma: float) -> np.ndarray:
        """Blur with a Gaussian of kernel size max(3, ceil(6 * sigma))."""
        kernel = gaussian_kernel_2d(sigma, gaussian_kernel_size(sigma))
        return convolve_2d(gray, kernel)

    @staticmethod
    def non_max_suppression(magnitude: np.ndarray, angle: np.ndarray) -> np.ndarray:
        """
        Thin edges by keeping pixels that are at least as strong as both
        neighbours along the gradient direction.

        Args:
            magnitude: Gradient magnitude
            angle: Gradient angle in degrees, [0, 180]

        Returns:
            Suppressed magnitude (0 on the border)
        """
        mag = np.asarray(magnitude, dtype=np.float64)
        result = np.zeros_like(mag)
        if mag.shape[0] < 3 or mag.shape[1] < 3:
            return result

        theta = angle[1:-1, 1:-1]
        center = mag[1:-1, 1:-1]

        # Angle 0: left/right
        # Angle 45: top-right/bottom-left
        # Angle 90: top/bottom
        # Angle 135: top-left/bottom-right
        sectors = [
            ((theta >= 0) & (theta < 22.5)) | ((theta >= 157.5) & (theta <= 180)),
            (theta >= 22.5) & (theta < 67.5),
            (theta >= 67.5) & (theta < 112.5),
            (theta >= 112.5) & (theta < 157.5),
        ]
        first = np.select(sectors, [mag[1:-1, :-2], mag[:-2, 2:], mag[:-2, 1:-1], mag[:-2, :-2]], 0.0)
        second = np.select(sectors, [mag[1:-1, 2:], mag[2:, :-2], mag[2:, 1:-1], mag[2:, 2:]], 0.0)

        keep = (center >= first) & (center >= second)
        result[1:-1, 1:-1] = np.where(keep, center, 0.0)
        return result

    @staticmethod
    def double_threshold(img: np.ndarray, low: float, high: float) -> np.ndarray:
        """Classify pixels as strong (2), weak (1) or none (0)."""
        labels = np.zeros(img.shape, dtype=np.int8)
        labels[img >= low] = WEAK
        labels[img >= high] = STRONG
        return labels

    @staticmethod
    def hysteresis(labels: np.ndarray) -> np.ndarray:
        """
        Promote weak pixels 8-connected to a strong pixel.

        Uses an explicit stack, so arbitrarily long edge chains are fine.

        Args:
            labels: Output of double_threshold()

        Returns:
            Array of 255 (edge) and 0
        """
        result = np.array(labels, dtype=np.int8, copy=True)
        height, width = result.shape
        stack = [tuple(p) for p in np.argwhere(result == STRONG)]

        while stack:
            y, x = stack.pop()
            for dy, dx in NEIGHBOURS:
                ny, nx = y + dy, x + dx
                if 0 <= ny < height and 0 <= nx < width and result[ny, nx] == WEAK:
                    result[ny, nx] = STRONG
                    stack.append((ny, nx))

        return np.where(result == STRONG, 255, 0).astype(np.uint8)

    @classmethod
    def canny(cls, gray: np.ndarray, low: float, high: float,
              sigma: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Canny edge detection.

        Args:
            gray: Gray field
            low: Weak edge threshold on gradient magnitude
            high: Strong edge threshold on gradient magnitude
            sigma: Gaussian blur sigma

        Returns:
            Tuple of (edges 255/0, gradient angle in degrees)
        """
        blurred = cls.gaussian_blur(gray, sigma)
        magnitude, angle = apply_sobel_2d(blurred)
        suppressed = cls.non_max_suppression(magnitude, angle)
        edges = cls.hysteresis(cls.double_threshold(suppressed, low, high))
        logger.debug("Canny: %d edge pixels", int(np.count_nonzero(edges)))
        return edges, angle

    @staticmethod
    def difference_of_gaussians(gray: np.ndarray, sigma1: float, sigma2: float) -> np.ndarray:
        """blur(sigma1) - blur(sigma2) with a kernel size shared by both blurs."""
        size = gaussian_kernel_size(max(sigma1, sigma2))
        blurred1 = convolve_2d(gray, gaussian_kernel_2d(sigma1, size))
        blurred2 = convolve_2d(gray, gaussian_kernel_2d(sigma2, size))
        return blurred1 - blurred2

    @classmethod
    def contours(cls, gray: np.ndarray, sigma1: float, sigma2: float,
                 threshold: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Difference of Gaussians contour detection.

        Returns:
            Tuple of (edge mask, angle of the DoG field in degrees)
        """
        dog = cls.difference_of_gaussians(gray, sigma1, sigma2)
        _, angle = apply_sobel_2d(dog)
        return np.abs(dog) > threshold, angle

    @staticmethod
    def direction_levels(angle: np.ndarray) -> np.ndarray:
        """
        Index into DIRECTION_GLYPHS for each gradient angle.

        The stroke runs perpendicular to the gradient, so the angle is turned
        by 90 degrees before binning.
        """
        adjusted = np.mod(np.asarray(angle, dtype=np.float64) + 90, 180)
        return np.select(
            [(adjusted < 22.5) | (adjusted >= 157.5), adjusted < 67.5, adjusted < 112.5],
            [0, 1, 2],
            3,
        ).astype(np.int64)

    @classmethod
    def get_edge_char(cls, angle: float) -> str:
        """Glyph for a single gradient angle in degrees."""
        return cls.DIRECTION_GLYPHS[int(cls.direction_levels(np.array([angle]))[0])]

    @classmethod
    def edge_levels(cls, mask: np.ndarray, angle: np.ndarray) -> np.ndarray:
        """Direction glyph index where mask is set, -1 (space) elsewhere."""
        return np.where(np.asarray(mask, dtype=bool), cls.direction_levels(angle), -1)
