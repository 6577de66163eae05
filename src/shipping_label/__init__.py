"""Shipping label scanner with concurrent OCR and barcode recognition."""

from shipping_label.coordinator import FrameAnalysisCoordinator
from shipping_label.extractor import FieldExtractor, normalize
from shipping_label.models.label import ExtractedLabel, LabelRecord, ScanResult
from shipping_label.validator import LabelValidator

__version__ = "0.1.0"
__all__ = [
    "ExtractedLabel",
    "FieldExtractor",
    "FrameAnalysisCoordinator",
    "LabelRecord",
    "LabelValidator",
    "ScanResult",
    "normalize",
]
