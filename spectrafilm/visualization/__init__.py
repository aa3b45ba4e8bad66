"""Barcode image rendering."""

from .barcode import BarcodeComposer

__all__ = ['BarcodeComposer']
