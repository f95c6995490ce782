#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Constants
=======================================
Enumerations, character gradients and numeric constants shared by the
rendering pipeline.
"""

from enum import Enum
from typing import Dict, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class EdgeMethod(Enum):
    """Detector applied to the gray field before quantization."""
    NONE = 'none'
    SOBEL = 'sobel'
    DOG = 'dog'              # Difference of Gaussians (contours)
    CANNY = 'canny'
    CLAHE = 'clahe'          # Contrast limited adaptive histogram equalization
    LBP = 'lbp'              # Local binary pattern texture


class DitherAlgorithm(Enum):
    """Dithering algorithm used when dithering is enabled."""
    FLOYD_STEINBERG = 'floyd'
    ATKINSON = 'atkinson'
    NOISE = 'noise'
    ORDERED = 'ordered'


# =============================================================================
# CHARACTER SETS
# =============================================================================

class CharacterSet:
    """Predefined character gradients.

    Index 0 is the glyph used for the darkest gray value. The order of each
    gradient is kept exactly as designed for that charset and is never
    normalized, so some read dense-to-sparse and others sparse-to-dense.
    """

    STANDARD: str = "@%#*+=-:."
    BLOCKS: str = "█▓▒░ "
    BINARY: str = "01"
    HEX: str = "0123456789ABCDEF"
    DETAILED: str = "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,\"^`'."

    MANUAL = 'manual'
    DEFAULT_MANUAL_CHAR = '0'

    @classmethod
    def presets(cls) -> Dict[str, str]:
        """Return the named gradients."""
        return {
            'standard': cls.STANDARD,
            'blocks': cls.BLOCKS,
            'binary': cls.BINARY,
            'hex': cls.HEX,
            'detailed': cls.DETAILED,
        }

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        """All charset names accepted by the configuration, including 'manual'."""
        return tuple(cls.presets()) + (cls.MANUAL,)

    @classmethod
    def get_preset(cls, name: str, manual_char: str = '') -> str:
        """
        Get a gradient by charset name.

        Args:
            name: Charset name ('standard', 'blocks', 'binary', 'hex',
                'detailed' or 'manual')
            manual_char: Glyph used by the 'manual' charset

        Returns:
            Gradient string. Unknown names fall back to 'detailed'.
        """
        name = name.lower()
        if name == cls.MANUAL:
            return (manual_char or cls.DEFAULT_MANUAL_CHAR) + ' '
        return cls.presets().get(name, cls.DETAILED)


# =============================================================================
# NUMERIC CONSTANTS
# =============================================================================

# Width/height ratio of a monospace character cell
FONT_ASPECT_RATIO = 0.55

# Largest 3x3 Sobel magnitude reachable with 8-bit input
SOBEL_MAX_MAGNITUDE = 1442

# Contrast factor 259*(c+255) / (255*(259-c)) is defined on [-255, 259)
CONTRAST_MIN = -255.0
CONTRAST_POLE = 259.0

# Color key for green screen removal
GREEN_KEY_RATIO = 1.4
GREEN_KEY_MIN = 100

BAYER_4X4 = (
    (0, 8, 2, 10),
    (12, 4, 14, 6),
    (3, 11, 1, 9),
    (15, 7, 13, 5),
)

# Edge glyphs by quantized line orientation
EDGE_CHARS = {
    'horizontal': '-',
    'diagonal_up': '/',
    'vertical': '|',
    'diagonal_down': '\\',
    'none': ' ',
}

# Playback
REGENERATION_DEBOUNCE_S = 0.5
DEFAULT_FPS = 12
SOURCE_FRAME_RATE = 30
