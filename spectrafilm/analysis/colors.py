"""
Color value types and HSL helpers.
Hue is the only ordering key used by the reducers; HSL values are never stored.
"""

import functools
import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Sequence


@dataclass(frozen=True)
class Color:
    """An opaque 8-bit RGB color."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"Color channel out of range [0, 255]: {channel}")

    @classmethod
    def from_array(cls, values) -> 'Color':
        """Build a color from any 3-element sequence (numpy rows included)."""
        r, g, b = (int(v) for v in values[:3])
        return cls(r, g, b)

    @classmethod
    def from_hex(cls, value: str) -> 'Color':
        """Parse ``#RRGGBB`` (the leading ``#`` is optional)."""
        value = value.lstrip('#')
        if len(value) != 6:
            raise ValueError(f"Expected 6 hex digits, got {value!r}")
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))

    @property
    def hex(self) -> str:
        return hex_encode(self)

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    @property
    def rgba(self) -> tuple:
        return (self.r, self.g, self.b, 255)


@dataclass(frozen=True)
class HSL:
    """Hue in [0, 1), saturation and lightness in [0, 1]."""
    hue: float
    saturation: float
    lightness: float


def hsl_array(rgb: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) array of 8-bit RGB values to (..., 3) HSL in [0, 1]."""
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0

    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_val = np.maximum(np.maximum(r, g), b)
    min_val = np.minimum(np.minimum(r, g), b)
    delta = max_val - min_val

    # Lightness
    l = (max_val + min_val) / 2

    chromatic = delta != 0

    # Saturation, zero for grays
    s = np.zeros_like(delta)
    dark = chromatic & (l < 0.5)
    light = chromatic & (l >= 0.5)
    s[dark] = delta[dark] / (max_val[dark] + min_val[dark])
    s[light] = delta[light] / (2 - max_val[light] - min_val[light])

    # Hue, red wins over green wins over blue when channels tie at the max
    h = np.zeros_like(delta)
    mask_r = chromatic & (max_val == r)
    mask_g = chromatic & (max_val == g) & ~mask_r
    mask_b = chromatic & (max_val == b) & ~mask_r & ~mask_g

    h[mask_r] = (g[mask_r] - b[mask_r]) / (6 * delta[mask_r])
    h[mask_g] = 1.0 / 3.0 + (b[mask_g] - r[mask_g]) / (6 * delta[mask_g])
    h[mask_b] = 2.0 / 3.0 + (r[mask_b] - g[mask_b]) / (6 * delta[mask_b])
    h[h < 0] += 1

    return np.stack([h, s, l], axis=-1)


def hue_array(rgb: np.ndarray) -> np.ndarray:
    """Hue of every pixel in an (..., 3) RGB array."""
    return hsl_array(rgb)[..., 0]


def to_hsl(color: Color) -> HSL:
    """Exact HSL conversion of a single color."""
    h, s, l = hsl_array(np.array([color.rgb]))[0]
    return HSL(float(h), float(s), float(l))


def compare_by_hue(a: Color, b: Color) -> int:
    """Three-way comparison on hue. Equal hues compare equal, whatever the other channels."""
    hue_a = to_hsl(a).hue
    hue_b = to_hsl(b).hue
    return (hue_a > hue_b) - (hue_a < hue_b)


def sort_by_hue(colors: Iterable[Color]) -> List[Color]:
    """Stable hue-ascending sort; colors with equal hue keep their input order."""
    return sorted(colors, key=functools.cmp_to_key(compare_by_hue))


def hex_encode(color: Color) -> str:
    """``#RRGGBB`` with uppercase digits and no alpha."""
    return f"#{color.r:02X}{color.g:02X}{color.b:02X}"


def colors_from_array(rgb: np.ndarray) -> List[Color]:
    """Colors for each row of an (N, 3) array."""
    return [Color.from_array(row) for row in np.asarray(rgb).reshape(-1, 3)]


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """Pack (..., 3) 8-bit RGB into 24-bit integers (0xRRGGBB)."""
    rgb = np.asarray(rgb, dtype=np.uint32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def unpack_rgb(packed: Sequence[int]) -> np.ndarray:
    """Inverse of :func:`pack_rgb`, returning an (N, 3) uint8 array."""
    packed = np.asarray(packed, dtype=np.uint32)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1).astype(np.uint8)
