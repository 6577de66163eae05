"""Data models for shipping label information."""

from shipping_label.models.label import ExtractedLabel, LabelRecord, ScanResult

__all__ = [
    "ExtractedLabel",
    "LabelRecord",
    "ScanResult",
]
