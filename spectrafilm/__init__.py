"""
SpectraFilm - Video Color Barcodes

Reduces sampled video frames to their average, median and dominant colors
and stacks them into barcode images that show a film's color progression.
"""

__version__ = "1.0.0"

from . import io, analysis, visualization
from .errors import SpectraFilmError, EmptyFrame, DecodeFailure, EncodeFailure, InvalidConfiguration
from .config import ReductionConfig, BarcodeConfig, SpectraFilmConfig, get_config
from .pipeline import FrameSeries, FrameSeriesPipeline

__all__ = [
    'io', 'analysis', 'visualization',
    'SpectraFilmError', 'EmptyFrame', 'DecodeFailure', 'EncodeFailure', 'InvalidConfiguration',
    'ReductionConfig', 'BarcodeConfig', 'SpectraFilmConfig', 'get_config',
    'FrameSeries', 'FrameSeriesPipeline',
]
