"""Abstract base class for barcode recognition backends."""

from abc import ABC, abstractmethod

import numpy as np


class BarcodeReader(ABC):
    """Abstract base class for barcode recognition backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this barcode backend."""
        ...

    @abstractmethod
    def read(self, image: np.ndarray) -> list[str]:
        """
        Decode every barcode visible in an image.

        Args:
            image: BGR image as numpy array.

        Returns:
            Decoded values in engine order, possibly empty.

        Raises:
            ValueError: If the image cannot be processed.
        """
        ...

    def close(self) -> None:
        """Release engine resources. No further calls are made afterwards."""
