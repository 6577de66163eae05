"""Abstract base class for label field extractors."""

from abc import ABC, abstractmethod

from shipping_label.extractor.normalizer import NormalizedDocument
from shipping_label.models.label import ExtractedLabel


class Extractor(ABC):
    """Abstract base class for label field extractors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this extractor."""
        ...

    @abstractmethod
    def extract(self, document: NormalizedDocument | None) -> ExtractedLabel:
        """
        Extract label fields from a normalized document.

        Args:
            document: Blocks of line strings in reading order.

        Returns:
            ExtractedLabel; fields that cannot be found are empty strings.
            Implementations never raise for missing or malformed content.
        """
        ...
