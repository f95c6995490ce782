#!/usr/bin/env python3
"""
Image/Video to ASCII Motion - Configuration
===========================================
Immutable render configuration, JSON persistence and named presets.
"""

import json
import logging
import math
import numbers
from dataclasses import asdict, dataclass, fields, replace as dataclass_replace
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import CONTRAST_MIN, CONTRAST_POLE, CharacterSet, DitherAlgorithm, EdgeMethod
from .errors import InvalidConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".ascii_motion.json"

# Expected JSON-level types, checked before any range check
REAL_FIELDS = ('brightness', 'contrast', 'blur', 'edge_threshold', 'dog_sigma1', 'dog_sigma2',
               'dog_threshold', 'canny_low', 'canny_high', 'canny_sigma', 'clahe_clip_limit',
               'lbp_threshold')
INT_FIELDS = ('ascii_width', 'clahe_tile_size', 'lbp_radius', 'lbp_neighbors')
BOOL_FIELDS = ('invert', 'ignore_white', 'ignore_green', 'dithering', 'lbp_uniform')
STR_FIELDS = ('charset', 'manual_char')


# =============================================================================
# RENDER CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class RenderConfig:
    """Configuration for rendering one frame (never mutated, use replace())."""

    # Size
    ascii_width: int = 150                   # Output columns

    # Luminance adjustment
    brightness: float = 0.0                  # Added after contrast
    contrast: float = 0.0                    # [-255, 259)
    blur: float = 0.0                        # Gaussian radius applied while resampling
    invert: bool = False

    # Pixel exclusion
    ignore_white: bool = True                # Adjusted gray == 255 renders as space
    ignore_green: bool = False               # Green-screen key renders as space

    # Dithering (only on the plain luminance path)
    dithering: bool = True
    dither_algorithm: DitherAlgorithm = DitherAlgorithm.FLOYD_STEINBERG

    # Character gradient
    charset: str = 'detailed'
    manual_char: str = CharacterSet.DEFAULT_MANUAL_CHAR
    custom_gradient: Optional[str] = None    # Overrides charset when set

    # Edge / texture method and per-method parameters
    edge_method: EdgeMethod = EdgeMethod.NONE
    edge_threshold: float = 100.0            # Sobel, on the 0-255 normalized magnitude
    dog_sigma1: float = 1.0
    dog_sigma2: float = 2.0
    dog_threshold: float = 10.0
    canny_low: float = 50.0
    canny_high: float = 150.0
    canny_sigma: float = 1.4
    clahe_tile_size: int = 8
    clahe_clip_limit: float = 4.0
    lbp_radius: int = 1
    lbp_neighbors: int = 8
    lbp_threshold: float = 5.0
    lbp_uniform: bool = False

    def __post_init__(self):
        # Accept enum values given as their string form
        for name, enum_cls in (('edge_method', EdgeMethod), ('dither_algorithm', DitherAlgorithm)):
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                try:
                    object.__setattr__(self, name, enum_cls(str(value).lower()))
                except ValueError:
                    choices = ', '.join(member.value for member in enum_cls)
                    raise InvalidConfig(
                        f"Unknown {name} {value!r} (expected one of: {choices})", field=name
                    ) from None

    @property
    def gradient(self) -> str:
        """Character gradient resolved from custom_gradient or charset."""
        if self.custom_gradient is not None:
            return self.custom_gradient
        return CharacterSet.get_preset(self.charset, self.manual_char)

    def validate(self) -> 'RenderConfig':
        """
        Check every field that would make rendering impossible.

        Returns:
            self, so calls can be chained

        Raises:
            InvalidConfig: naming the first offending field
        """
        def fail(field_name: str, message: str):
            raise InvalidConfig(f"{field_name}: {message}", field=field_name)

        self._check_types()
        if not isinstance(self.ascii_width, int) or self.ascii_width <= 0:
            fail('ascii_width', f"must be a positive integer, got {self.ascii_width!r}")
        for name in ('brightness', 'contrast', 'blur', 'edge_threshold', 'dog_threshold',
                     'canny_low', 'canny_high', 'clahe_clip_limit', 'lbp_threshold'):
            if not math.isfinite(getattr(self, name)):
                fail(name, "must be a finite number")
        if not CONTRAST_MIN <= self.contrast < CONTRAST_POLE:
            fail('contrast', f"must be in [{CONTRAST_MIN:g}, {CONTRAST_POLE:g}), got {self.contrast}")
        if self.blur < 0:
            fail('blur', f"must be >= 0, got {self.blur}")

        if self.custom_gradient is None and self.charset.lower() not in CharacterSet.names():
            fail('charset', f"unknown charset {self.charset!r}")
        if len(self.gradient) == 0:
            fail('custom_gradient', "gradient must contain at least one character")
        if len(self.manual_char) > 1:
            fail('manual_char', f"must be a single character, got {self.manual_char!r}")

        for name in ('dog_sigma1', 'dog_sigma2', 'canny_sigma'):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                fail(name, f"must be > 0, got {value}")
        if self.canny_low < 0 or self.canny_high < 0:
            fail('canny_low', "Canny thresholds must be >= 0")
        if self.clahe_tile_size <= 0:
            fail('clahe_tile_size', f"must be > 0, got {self.clahe_tile_size}")
        if self.clahe_clip_limit < 0:
            fail('clahe_clip_limit', f"must be >= 0, got {self.clahe_clip_limit}")
        if self.lbp_radius <= 0:
            fail('lbp_radius', f"must be > 0, got {self.lbp_radius}")
        if not 0 < self.lbp_neighbors <= 32:
            fail('lbp_neighbors', f"must be in 1..32, got {self.lbp_neighbors}")
        return self

    def _check_types(self):
        """Reject values of the wrong JSON type (bool is not a number here)."""
        def expect(name: str, kinds, label: str):
            value = getattr(self, name)
            if isinstance(value, bool) and bool not in kinds or not isinstance(value, kinds):
                raise InvalidConfig(f"{name}: must be {label}, got {value!r}", field=name)

        for name in REAL_FIELDS:
            expect(name, (numbers.Real,), "a number")
        for name in INT_FIELDS:
            expect(name, (int,), "an integer")
        for name in BOOL_FIELDS:
            expect(name, (bool,), "true or false")
        for name in STR_FIELDS:
            expect(name, (str,), "a string")
        if self.custom_gradient is not None:
            expect('custom_gradient', (str,), "a string or null")

    def replace(self, **changes) -> 'RenderConfig':
        """Return a validated copy with the given fields changed."""
        return dataclass_replace(self, **changes).validate()

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict (enums stored by value)."""
        data = asdict(self)
        data['edge_method'] = self.edge_method.value
        data['dither_algorithm'] = self.dither_algorithm.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        """Build a validated config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ', '.join(unknown))
        try:
            config = cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise InvalidConfig(f"Malformed configuration: {e}") from e
        return config.validate()


# =============================================================================
# PERSISTENCE
# =============================================================================

class ConfigManager:
    """Handles loading and saving of render configuration."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file (defaults to ~/.ascii_motion.json)
        """
        self.config_path = Path(config_path)

    def load(self) -> RenderConfig:
        """Load configuration from file, returning defaults if not found.

        Raises:
            InvalidConfig: if the file exists but is not a valid configuration
        """
        if not self.config_path.exists():
            logger.debug("No config file at %s, using defaults", self.config_path)
            return RenderConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfig(f"{self.config_path}: invalid JSON ({e})") from e
        if not isinstance(data, dict):
            raise InvalidConfig(f"{self.config_path}: expected a JSON object")

        config = RenderConfig.from_dict(data)
        logger.info("Loaded configuration from %s", self.config_path)
        return config

    def save(self, config: RenderConfig) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info("Saved configuration to %s", self.config_path)


# =============================================================================
# PRESETS
# =============================================================================

class Presets:
    """Predefined configuration presets."""

    @staticmethod
    def photo() -> RenderConfig:
        """High-detail configuration for photographs."""
        return RenderConfig(
            ascii_width=150,
            charset='detailed',
            dithering=True,
            dither_algorithm=DitherAlgorithm.FLOYD_STEINBERG,
            contrast=20.0,
        )

    @staticmethod
    def line_art() -> RenderConfig:
        """Directional strokes from Canny edges."""
        return RenderConfig(
            ascii_width=120,
            edge_method=EdgeMethod.CANNY,
            canny_low=40.0,
            canny_high=120.0,
            canny_sigma=1.4,
        )

    @staticmethod
    def texture() -> RenderConfig:
        """Uniform local binary patterns for surface texture."""
        return RenderConfig(
            ascii_width=120,
            charset='standard',
            edge_method=EdgeMethod.LBP,
            lbp_uniform=True,
        )

    @staticmethod
    def retro() -> RenderConfig:
        """Retro terminal look with blocks and ordered dithering."""
        return RenderConfig(
            ascii_width=80,
            charset='blocks',
            dithering=True,
            dither_algorithm=DitherAlgorithm.ORDERED,
        )

    NAMES = ('photo', 'line_art', 'texture', 'retro')

    @classmethod
    def get(cls, name: str) -> RenderConfig:
        """Look up a preset by name."""
        if name not in cls.NAMES:
            raise InvalidConfig(
                f"Unknown preset {name!r} (expected one of: {', '.join(cls.NAMES)})"
            )
        return getattr(cls, name)()
