#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Quantizer
=======================================
Maps gray values to gradient levels and assembles level grids into text.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .kernels import round_half_up

SPACE_LEVEL = -1


@dataclass(frozen=True)
class TextFrame:
    """Rendered character grid."""
    lines: Tuple[str, ...]                   # One string per row, all `width` long
    width: int = 0
    height: int = 0

    @property
    def text(self) -> str:
        """Frame as printed: every line followed by a newline."""
        return ''.join(line + '\n' for line in self.lines)

    def __str__(self) -> str:
        return self.text


def quantize(values: np.ndarray, levels: int, excluded: Optional[np.ndarray] = None,
             max_value: float = 255.0) -> np.ndarray:
    """
    Linear quantization round(value / max_value * (levels - 1)).

    Args:
        values: Field to quantize
        levels: Number of gradient glyphs
        excluded: Optional mask of pixels rendered as space
        max_value: Value mapping to the last glyph

    Returns:
        int64 level array, SPACE_LEVEL where excluded
    """
    out = round_half_up(np.asarray(values, dtype=np.float64) / max_value * (levels - 1))
    out = np.clip(out, 0, levels - 1)
    if excluded is not None:
        out = np.where(excluded, SPACE_LEVEL, out)
    return out


def levels_to_frame(levels: np.ndarray, glyphs: str) -> TextFrame:
    """
    Assemble a TextFrame from a level grid.

    Args:
        levels: 2D int array of indices into glyphs, SPACE_LEVEL for blanks
        glyphs: Gradient (or edge glyph) string

    Returns:
        TextFrame with one line per row
    """
    table = np.array(list(glyphs) + [' '], dtype=object)
    levels = np.asarray(levels, dtype=np.int64)
    height, width = levels.shape
    # SPACE_LEVEL (-1) indexes the trailing blank
    rows = table[levels]
    lines = tuple(''.join(row) for row in rows)
    return TextFrame(lines=lines, width=width, height=height)


def empty_frame(width: int) -> TextFrame:
    """Frame for an image whose computed height rounds to zero rows."""
    return TextFrame(lines=(), width=width, height=0)


def character_distribution(frame: TextFrame) -> Dict[str, int]:
    """Character counts, most frequent first; ties keep reading order."""
    return dict(Counter(''.join(frame.lines)).most_common())
