"""
Error kinds raised by the SpectraFilm pipeline.
Every error is terminal for the batch that raised it; nothing is retried.
"""


class SpectraFilmError(Exception):
    """Base class for all SpectraFilm failures."""


class EmptyFrame(SpectraFilmError):
    """A frame with zero pixels was handed to the reducer."""


class DecodeFailure(SpectraFilmError):
    """A frame source could not be decoded into a pixel grid."""


class EncodeFailure(SpectraFilmError):
    """A barcode raster could not be encoded or written."""


class InvalidConfiguration(SpectraFilmError, ValueError):
    """A configuration value is out of range."""
