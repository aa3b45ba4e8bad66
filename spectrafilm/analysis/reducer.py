"""
Per-frame color reduction: average, median and dominant colors.
Each reduction is a pure function of one pixel grid, so frames can be reduced concurrently.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config import ReductionConfig
from ..errors import EmptyFrame
from ..io.frames import PixelGrid
from .colors import Color, colors_from_array, hue_array, pack_rgb, sort_by_hue, unpack_rgb


@dataclass(frozen=True)
class ColorCount:
    """Occurrences of one exact color inside a frame."""
    color: Color
    occurrences: int


@dataclass(frozen=True)
class FrameColorProfile:
    """Reduced colors for a single frame."""
    source: str
    average: Optional[Color] = None
    median: Optional[Color] = None
    dominant: Tuple[Color, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        """Record in the exported summary layout (hex strings, empty when not computed)."""
        return {
            'Path': self.source,
            'Average': self.average.hex if self.average else '',
            'Median': self.median.hex if self.median else '',
            'Mode': [c.hex for c in self.dominant],
        }


def _pixels(grid: PixelGrid) -> np.ndarray:
    if grid.pixel_count == 0:
        raise EmptyFrame(f"Frame has no pixels ({grid.width}x{grid.height})")
    return grid.flat()


def average_color(grid: PixelGrid, square: bool = False) -> Color:
    """Per-channel mean of all pixels.

    Linear mode floors ``sum / count``. Square mode takes the root mean square
    and rounds to the nearest integer.
    """
    pixels = _pixels(grid)
    total = len(pixels)

    if square:
        # https://sighack.com/post/averaging-rgb-colors-the-right-way
        values = pixels.astype(np.float64)
        rms = np.sqrt(np.sum(values ** 2, axis=0) / total)
        channels = np.floor(rms + 0.5)
    else:
        channels = np.sum(pixels, axis=0, dtype=np.uint64) // total

    return Color.from_array(channels)


def median_color(grid: PixelGrid) -> Color:
    """Pixel at position ``count // 2`` after a stable sort by hue.

    This is a positional pick, never a blend: the result is always a pixel of the frame.
    """
    pixels = _pixels(grid)
    order = np.argsort(hue_array(pixels), kind='stable')
    return Color.from_array(pixels[order[len(order) // 2]])


def count_colors(grid: PixelGrid) -> List[ColorCount]:
    """Distinct colors ranked by occurrences, most frequent first.

    Equal counts are ordered by ascending 0xRRGGBB value.
    """
    packed = pack_rgb(_pixels(grid))
    values, counts = np.unique(packed, return_counts=True)

    # np.unique returns values ascending, so a stable sort keeps that as the tie-break
    ranking = np.argsort(-counts, kind='stable')
    colors = colors_from_array(unpack_rgb(values[ranking]))

    return [ColorCount(color, int(n)) for color, n in zip(colors, counts[ranking])]


def dominant_colors(grid: PixelGrid, count: int) -> List[Color]:
    """The ``count`` most frequent colors, sorted by hue for display."""
    if count <= 0:
        return []

    top = count_colors(grid)[:count]
    return sort_by_hue(cc.color for cc in top)


class FrameReducer:
    """Reduce frames to the colors selected in a :class:`ReductionConfig`."""

    def __init__(self, config: ReductionConfig = None):
        self.config = config or ReductionConfig()

    def reduce(self, grid: PixelGrid, source: str = "") -> FrameColorProfile:
        """Compute every enabled reduction for one frame."""
        if grid.pixel_count == 0:
            raise EmptyFrame(f"Frame {source or '<unnamed>'} has no pixels")

        average = average_color(grid, self.config.square) if self.config.average else None
        median = median_color(grid) if self.config.median else None
        dominant = tuple(dominant_colors(grid, self.config.dominant_count))

        return FrameColorProfile(source=source, average=average, median=median, dominant=dominant)
