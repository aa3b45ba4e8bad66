"""I/O module for turning decoded frames into pixel grids."""

from .frames import PixelGrid, load_frame, list_frame_files

__all__ = ['PixelGrid', 'load_frame', 'list_frame_files']
