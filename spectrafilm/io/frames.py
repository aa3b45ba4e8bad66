"""
Frame loading for the reducers.
Turns decoded images, numpy arrays or image files into read-only RGB pixel grids.
"""

import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from PIL import Image, UnidentifiedImageError

from ..errors import DecodeFailure


FRAME_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp')


@dataclass(frozen=True, eq=False)
class PixelGrid:
    """Row-major (height, width, 3) uint8 pixels of one frame."""
    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise DecodeFailure(f"Pixel grid must have shape (H, W, 3), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise DecodeFailure(f"Pixel grid must be uint8, got {pixels.dtype}")

        # Freeze a private copy, the caller keeps a writable array
        frozen = np.array(pixels, copy=True)
        frozen.flags.writeable = False
        object.__setattr__(self, 'pixels', frozen)

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def flat(self) -> np.ndarray:
        """All pixels as an (N, 3) array in row-major order."""
        return self.pixels.reshape(-1, 3)

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'PixelGrid':
        """Wrap an image array. Grayscale is expanded to RGB and alpha is dropped."""
        array = np.asarray(array)

        if array.ndim == 2:
            array = np.repeat(array[:, :, np.newaxis], 3, axis=2)
        elif array.ndim == 3 and array.shape[2] == 4:
            array = array[:, :, :3]

        if array.dtype != np.uint8:
            if not np.issubdtype(array.dtype, np.integer):
                raise DecodeFailure(f"Pixel values must be 8-bit integers, got {array.dtype}")
            if array.size and (array.min() < 0 or array.max() > 255):
                raise DecodeFailure("Pixel values must lie in [0, 255]")
            array = array.astype(np.uint8)

        return cls(array)

    @classmethod
    def from_image(cls, image: Image.Image) -> 'PixelGrid':
        """Decode a Pillow image, treating every pixel as opaque."""
        return cls.from_array(np.asarray(image.convert('RGB')))

    @classmethod
    def open(cls, path: Union[str, Path]) -> 'PixelGrid':
        """Read an image file into a pixel grid."""
        try:
            with Image.open(path) as image:
                image.load()
                return cls.from_image(image)
        except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as e:
            raise DecodeFailure(f"Could not decode frame {path}: {e}") from e


FrameSource = Union[PixelGrid, np.ndarray, Image.Image, str, Path]


def load_frame(source: FrameSource) -> PixelGrid:
    """Resolve any supported frame source to a pixel grid."""
    if isinstance(source, PixelGrid):
        return source
    if isinstance(source, np.ndarray):
        return PixelGrid.from_array(source)
    if isinstance(source, Image.Image):
        return PixelGrid.from_image(source)
    if isinstance(source, (str, Path)):
        return PixelGrid.open(source)
    raise DecodeFailure(f"Unsupported frame source: {type(source).__name__}")


def list_frame_files(frame_dir: Union[str, Path]) -> List[Path]:
    """Image files of a frame directory in file-name order (img000001.png, img000002.png, ...)."""
    frame_dir = Path(frame_dir)
    if not frame_dir.is_dir():
        raise DecodeFailure(f"Frame directory not found: {frame_dir}")

    return sorted(
        (p for p in frame_dir.iterdir() if p.is_file() and p.suffix.lower() in FRAME_EXTENSIONS),
        key=lambda p: p.name,
    )
