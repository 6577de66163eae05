"""Still-image label scanning: capture, analysis and validation."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import cv2

from shipping_label.coordinator import FrameAnalysisCoordinator
from shipping_label.models.label import ScanResult
from shipping_label.preprocessing import LabelCropper
from shipping_label.validator import LabelValidator, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class ScanOutcome:
    """Everything produced by scanning one captured label image."""

    image_path: str
    result: ScanResult
    validation: ValidationResult
    processing_time_ms: float = 0.0


class LabelScanner:
    """Main controller for scanning captured label images."""

    def __init__(
        self,
        coordinator: FrameAnalysisCoordinator,
        validator: LabelValidator,
        cropper: LabelCropper | None = None,
        timeout: float = 60.0,
    ):
        """
        Initialize the scanner.

        Args:
            coordinator: Runs text and barcode recognition on the image.
            validator: Checks the joined result.
            cropper: Optional label cropper applied before analysis.
            timeout: Seconds to wait for both recognitions to finish.
        """
        self._coordinator = coordinator
        self._validator = validator
        self._cropper = cropper
        self._timeout = timeout

    def scan(self, image_path: str | Path) -> ScanOutcome:
        """
        Scan a captured label image and validate the extracted record.

        Args:
            image_path: Path to the label photo.

        Returns:
            ScanOutcome with the joined result and its validation.

        Raises:
            FileNotFoundError: If the image file does not exist.
            ValueError: If the image cannot be decoded.
        """
        start_time = time.perf_counter()

        result = self.analyze(image_path)
        validation = self._validator.validate(result.label, result.barcode_value)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return ScanOutcome(
            image_path=str(image_path),
            result=result,
            validation=validation,
            processing_time_ms=round(elapsed_ms, 2),
        )

    def analyze(self, image_path: str | Path) -> ScanResult:
        """
        Run recognition on the image without validating the result.

        Useful for debugging or checking OCR quality.
        """
        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")

        image = cv2.imread(str(path))
        if image is None:
            raise ValueError(f"Cannot decode image: {path}")

        if self._cropper is not None:
            cropped = self._cropper.crop(image)
            if cropped is not None:
                logger.debug("Cropped label region from %s", path)
                image = cropped

        result = self._coordinator.analyze_image(image).result(timeout=self._timeout)
        return result or ScanResult()
