"""
Barcode rendering: stacks one band per frame into a lossless raster.
Line images paint a single color per band, column images split each band into a palette.
"""

import numpy as np
from pathlib import Path
from typing import Sequence, Union

from PIL import Image

from ..analysis.colors import Color
from ..config import BarcodeConfig
from ..errors import EncodeFailure

# Unpainted pixels stay transparent black
BACKGROUND = (0, 0, 0, 0)


class BarcodeComposer:
    """Render per-frame colors into barcode images."""

    def __init__(self, config: BarcodeConfig = None, verbose: bool = False):
        self.config = config or BarcodeConfig()
        self.verbose = verbose

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def line_height(self) -> int:
        return self.config.line_height

    def _canvas(self, frame_count: int) -> np.ndarray:
        raster = np.zeros((frame_count * self.line_height, self.width, 4), dtype=np.uint8)
        raster[...] = BACKGROUND
        return raster

    def _band(self, raster: np.ndarray, index: int) -> np.ndarray:
        top = index * self.line_height
        return raster[top:top + self.line_height]

    def render_lines(self, colors: Sequence[Color]) -> np.ndarray:
        """One band of ``line_height`` rows per color, each filled edge to edge."""
        raster = self._canvas(len(colors))

        for i, color in enumerate(colors):
            self._band(raster, i)[:, :] = color.rgba

        return raster

    def render_columns(self, palettes: Sequence[Sequence[Color]]) -> np.ndarray:
        """One band per palette, split into equal-width columns.

        Column width is ``width // len(palette)``; leftover pixels on the right and
        bands with an empty palette keep the background.
        """
        raster = self._canvas(len(palettes))

        for i, palette in enumerate(palettes):
            if not palette:
                continue

            band = self._band(raster, i)
            col_width = self.width // len(palette)
            for j, color in enumerate(palette):
                band[:, j * col_width:(j + 1) * col_width] = color.rgba

        return raster

    def save(self, raster: np.ndarray, path: Union[str, Path]) -> str:
        """Encode the raster as PNG at ``path``."""
        if raster.shape[0] == 0 or raster.shape[1] == 0:
            raise EncodeFailure(f"Nothing to encode for {path}: raster is {raster.shape[1]}x{raster.shape[0]}")

        try:
            Image.fromarray(raster).save(path, format='PNG')
        except (OSError, ValueError) as e:
            raise EncodeFailure(f"Could not write {path}: {e}") from e

        return str(path)

    def write_line_image(self, colors: Sequence[Color], path: Union[str, Path]) -> str:
        """Render and save a single-metric barcode."""
        if self.verbose:
            print(f"Generating {path}")
        return self.save(self.render_lines(colors), path)

    def write_column_image(self, palettes: Sequence[Sequence[Color]], path: Union[str, Path]) -> str:
        """Render and save a dominant-color barcode."""
        if self.verbose:
            print(f"Generating {path}")
        return self.save(self.render_columns(palettes), path)
