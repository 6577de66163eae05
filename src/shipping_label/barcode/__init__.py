"""Barcode recognition backends."""

from shipping_label.barcode.base import BarcodeReader

__all__ = ["BarcodeReader"]
