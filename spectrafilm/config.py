"""
Configuration management for the SpectraFilm pipeline.
Loads settings from YAML and exposes them as immutable reduction and barcode settings.
"""

import yaml
import os
from dataclasses import dataclass
from typing import Any, Dict

from .errors import InvalidConfiguration


AVERAGE_MODES = ('linear', 'square')

_MISSING = object()


@dataclass(frozen=True)
class ReductionConfig:
    """Which reductions to compute for every frame."""
    average: bool = True
    average_mode: str = 'linear'
    median: bool = False
    dominant_count: int = 0

    def __post_init__(self):
        if self.average_mode not in AVERAGE_MODES:
            raise InvalidConfiguration(
                f"Unknown average mode: {self.average_mode!r} (expected one of {', '.join(AVERAGE_MODES)})")
        if isinstance(self.dominant_count, bool) or not isinstance(self.dominant_count, int):
            raise InvalidConfiguration(f"Dominant color count must be an integer, got {self.dominant_count!r}")
        if self.dominant_count < 0:
            raise InvalidConfiguration(f"Dominant color count must be >= 0, got {self.dominant_count}")

    @property
    def dominant(self) -> bool:
        return self.dominant_count > 0

    @property
    def square(self) -> bool:
        return self.average_mode == 'square'

    @classmethod
    def from_flags(cls, average: bool = False, median: bool = False, dominant_count: int = 0,
                   square: bool = False, all_metrics: bool = False) -> 'ReductionConfig':
        """Build a config from tool-style switches.

        ``all_metrics`` turns on every reduction and asks for at least one dominant
        color. Selecting nothing falls back to the average image.
        """
        if all_metrics:
            average = True
            median = True
            if dominant_count == 0:
                dominant_count = 1

        if not average and not median and dominant_count == 0:
            average = True

        return cls(
            average=average,
            average_mode='square' if square else 'linear',
            median=median,
            dominant_count=dominant_count,
        )


@dataclass(frozen=True)
class BarcodeConfig:
    """Raster geometry shared by every barcode image."""
    width: int = 720
    line_height: int = 1
    height: int = 1280

    def __post_init__(self):
        for name in ('width', 'line_height', 'height'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfiguration(f"Barcode {name} must be a positive integer, got {value!r}")

    @property
    def target_frame_count(self) -> int:
        """Number of frames to sample so the stacked lines approach ``height``."""
        return max(1, self.height // self.line_height)


class SpectraFilmConfig:
    """Configuration manager for the SpectraFilm pipeline."""

    def __init__(self, config_path: str = None):
        """Initialize configuration from YAML file."""
        if config_path is None:
            config_path = os.path.join(os.path.dirname(__file__), 'config.yaml')

        self.config_path = config_path
        self._config = None
        self.load_config()

    def load_config(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self._config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise InvalidConfiguration(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise InvalidConfiguration(f"Error parsing configuration file: {e}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'SpectraFilmConfig':
        """Build a configuration from an in-memory mapping instead of a file."""
        config = cls.__new__(cls)
        config.config_path = None
        config._config = values
        return config

    def get(self, key_path: str, default: Any = _MISSING) -> Any:
        """Get configuration value using dot notation (e.g., 'barcode.width')."""
        keys = key_path.split('.')
        value = self._config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            if default is not _MISSING:
                return default
            raise KeyError(f"Configuration key not found: {key_path}")

    @property
    def width(self) -> int:
        """Width of every output image."""
        return self.get('barcode.width', 720)

    @property
    def line_height(self) -> int:
        """Rows painted per frame."""
        return self.get('barcode.line_height', 1)

    @property
    def height(self) -> int:
        """Desired output image height."""
        return self.get('barcode.height', 1280)

    @property
    def max_workers(self) -> int:
        """Threads used to reduce frames."""
        return self.get('pipeline.max_workers', 4)

    @property
    def verbose(self) -> bool:
        """Print progress while reducing and rendering."""
        return bool(self.get('logging.verbose', True))

    @property
    def output_files(self) -> Dict[str, str]:
        """File name per barcode metric."""
        return {
            'average': self.get('output.average_file', 'avg.png'),
            'median': self.get('output.median_file', 'med.png'),
            'dominant': self.get('output.dominant_file', 'mode_{count}.png'),
        }

    def reduction(self) -> ReductionConfig:
        """Immutable reduction settings."""
        average_mode = self.get('reduction.average_mode', 'linear')
        if average_mode not in AVERAGE_MODES:
            raise InvalidConfiguration(f"Unknown average mode: {average_mode!r}")

        return ReductionConfig.from_flags(
            average=bool(self.get('reduction.average', False)),
            median=bool(self.get('reduction.median', False)),
            dominant_count=self.get('reduction.dominant_count', 0),
            square=average_mode == 'square',
            all_metrics=bool(self.get('reduction.all', False)),
        )

    def barcode(self) -> BarcodeConfig:
        """Immutable raster geometry."""
        return BarcodeConfig(width=self.width, line_height=self.line_height, height=self.height)


# Global configuration instance
_config_instance = None


def get_config(config_path: str = None) -> SpectraFilmConfig:
    """Get global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = SpectraFilmConfig(config_path)
    return _config_instance


def reload_config(config_path: str = None) -> SpectraFilmConfig:
    """Reload global configuration."""
    global _config_instance
    _config_instance = SpectraFilmConfig(config_path)
    return _config_instance
