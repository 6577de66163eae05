"""PaddleOCR text recognition backend."""

import logging
import os

import numpy as np
from paddleocr import PaddleOCR

from shipping_label.ocr.base import BoundingBox, TextBlock, TextLine, TextRecognizer
from shipping_label.ocr.layout import group_lines_into_blocks

logger = logging.getLogger(__name__)


# Disable OneDNN/MKLDNN to avoid PIR compatibility issues with PaddlePaddle 3.x
# See: https://github.com/PaddlePaddle/PaddleOCR/discussions/17350
os.environ.setdefault("FLAGS_use_mkldnn", "0")


class PaddleOCRRecognizer(TextRecognizer):
    """Text recognizer using PaddleOCR line detections grouped into blocks."""

    def __init__(self, lang: str = "en", gap_ratio: float = 0.8):
        """
        Initialize PaddleOCR recognizer.

        Args:
            lang: Language for OCR. Default is "en" for English.
            gap_ratio: Maximum vertical gap between lines of one block,
                in line heights.
        """
        self._lang = lang
        self._gap_ratio = gap_ratio
        self._ocr = PaddleOCR(lang=lang, enable_mkldnn=False)

    @property
    def name(self) -> str:
        return f"paddleocr:{self._lang}"

    def recognize(self, image: np.ndarray) -> list[TextBlock]:
        """Recognize text blocks in a BGR image."""
        if image is None or image.size == 0:
            raise ValueError("Cannot recognize text in an empty image")

        result = self._ocr.predict(image)
        if not result or not result[0]:
            return []

        # PaddleOCR 3.x returns OCRResult objects with rec_texts and rec_polys
        ocr_result = result[0]
        texts = ocr_result.get("rec_texts", [])
        polys = ocr_result.get("rec_polys", [])

        lines = []
        for text, poly in zip(texts, polys):
            poly_list = poly.tolist() if hasattr(poly, "tolist") else poly
            xs = [p[0] for p in poly_list]
            ys = [p[1] for p in poly_list]
            lines.append(
                TextLine(
                    text=text,
                    bounding_box=BoundingBox(
                        left=float(min(xs)),
                        top=float(min(ys)),
                        right=float(max(xs)),
                        bottom=float(max(ys)),
                    ),
                )
            )

        blocks = group_lines_into_blocks(lines, gap_ratio=self._gap_ratio)
        logger.debug("PaddleOCR found %d lines in %d blocks", len(lines), len(blocks))
        return blocks

    def close(self) -> None:
        self._ocr = None
