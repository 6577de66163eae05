"""Reading-order normalization and field extraction from recognized text."""

from shipping_label.extractor.base import Extractor
from shipping_label.extractor.fields import Anchor, FieldExtractor, Position, find_anchors
from shipping_label.extractor.normalizer import NormalizedDocument, normalize

__all__ = [
    "Anchor",
    "Extractor",
    "FieldExtractor",
    "NormalizedDocument",
    "Position",
    "find_anchors",
    "normalize",
]
