"""Color analysis module for per-frame color reduction."""

from .colors import Color, HSL, to_hsl, compare_by_hue, sort_by_hue, hex_encode
from .reducer import FrameReducer, FrameColorProfile, ColorCount

__all__ = ['Color', 'HSL', 'to_hsl', 'compare_by_hue', 'sort_by_hue', 'hex_encode',
           'FrameReducer', 'FrameColorProfile', 'ColorCount']
