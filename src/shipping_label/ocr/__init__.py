"""Text recognition backends producing spatial text blocks."""

from shipping_label.ocr.base import BoundingBox, TextBlock, TextLine, TextRecognizer
from shipping_label.ocr.layout import group_lines_into_blocks

__all__ = [
    "BoundingBox",
    "TextBlock",
    "TextLine",
    "TextRecognizer",
    "group_lines_into_blocks",
]
