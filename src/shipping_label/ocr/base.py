"""Abstract base class for text recognition backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in image pixel coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def height(self) -> float:
        """Vertical extent of the box."""
        return self.bottom - self.top

    def overlaps_horizontally(self, other: "BoundingBox") -> bool:
        """Whether the two boxes share any horizontal span."""
        return self.left <= other.right and other.left <= self.right

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        return BoundingBox(
            left=min(self.left, other.left),
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
        )


@dataclass(frozen=True)
class TextLine:
    """Single recognized line of text with its position."""

    text: str
    """Recognized text content."""

    bounding_box: BoundingBox | None = None
    """Line position, absent when the engine did not report one."""


@dataclass(frozen=True)
class TextBlock:
    """Group of lines the recognition engine judged to belong together."""

    lines: tuple[TextLine, ...] = ()
    """Lines in engine order (not necessarily top-to-bottom)."""

    bounding_box: BoundingBox | None = None
    """Block position, absent when the engine did not report one."""

    @property
    def text(self) -> str:
        """All lines of the block joined with newlines."""
        return "\n".join(line.text for line in self.lines)


class TextRecognizer(ABC):
    """Abstract base class for text recognition backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this recognition backend."""
        ...

    @abstractmethod
    def recognize(self, image: np.ndarray) -> list[TextBlock]:
        """
        Recognize text in an image.

        Args:
            image: BGR image as numpy array.

        Returns:
            Recognized text blocks, in no particular order.

        Raises:
            ValueError: If the image cannot be processed.
        """
        ...

    def close(self) -> None:
        """Release engine resources. No further calls are made afterwards."""
