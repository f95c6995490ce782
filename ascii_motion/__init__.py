"""
Image/Video to ASCII Motion
===========================
Convert images and sampled video frames to character-grid art.

Features:
- Luminance gradients with brightness, contrast, blur and invert
- Floyd-Steinberg, Atkinson, noise and ordered (Bayer) dithering
- Sobel, Canny and Difference of Gaussians edge art with directional glyphs
- CLAHE local contrast enhancement
- Local binary pattern texture rendering
- Frame sampling and a playback session with debounced regeneration
"""

from .clahe import apply_clahe
from .config import ConfigManager, Presets, RenderConfig
from .constants import CharacterSet, DitherAlgorithm, EdgeMethod
from .edge_detection import EdgeProcessor
from .errors import AsciiMotionError, InvalidConfig, PartialFrameFailure
from .kernels import apply_sobel_2d, convolve_2d, gaussian_kernel_2d
from .luminance import pillow_resample
from .pipeline import iter_render, render, render_all
from .quantizer import TextFrame, character_distribution
from .session import PlaybackSession, SessionState
from .texture import local_binary_pattern
from .video import frame_timestamps, gif_frames, recommended_frame_count, sample_frames

__version__ = '1.0.0'

__all__ = [
    # Enums
    'EdgeMethod', 'DitherAlgorithm',

    # Configuration
    'CharacterSet', 'RenderConfig', 'ConfigManager', 'Presets',

    # Errors
    'AsciiMotionError', 'InvalidConfig', 'PartialFrameFailure',

    # Rendering
    'render', 'render_all', 'iter_render', 'TextFrame', 'pillow_resample',

    # Algorithms
    'gaussian_kernel_2d', 'convolve_2d', 'apply_sobel_2d', 'EdgeProcessor',
    'apply_clahe', 'local_binary_pattern',

    # Animation
    'PlaybackSession', 'SessionState', 'sample_frames', 'gif_frames',
    'frame_timestamps', 'recommended_frame_count',

    # Analysis
    'character_distribution',
]
