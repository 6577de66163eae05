"""pyzbar barcode recognition backend."""

import logging

import cv2
import numpy as np
from pyzbar.pyzbar import decode as pyzbar_decode

from shipping_label.barcode.base import BarcodeReader

logger = logging.getLogger(__name__)


class PyzbarBarcodeReader(BarcodeReader):
    """Barcode reader backed by the zbar library."""

    @property
    def name(self) -> str:
        return "pyzbar"

    def read(self, image: np.ndarray) -> list[str]:
        """Decode barcodes from the grayscale version of the image."""
        if image is None or image.size == 0:
            raise ValueError("Cannot read barcodes from an empty image")

        gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        values = []
        for symbol in pyzbar_decode(gray):
            value = symbol.data.decode("utf-8", errors="ignore").strip()
            logger.debug("Decoded %s barcode: %s", symbol.type, value)
            values.append(value)
        return values
