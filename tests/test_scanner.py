"""Tests for still-image label scanning."""

from concurrent.futures import Future
from unittest.mock import Mock

import cv2
import numpy as np
import pytest

from shipping_label.models.label import ExtractedLabel, ScanResult
from shipping_label.scanner import LabelScanner
from shipping_label.validator import LabelValidator


def resolved(value):
    future = Future()
    future.set_result(value)
    return future


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "label.png"
    img = np.zeros((200, 300, 3), dtype=np.uint8)
    img[40:160, 60:240] = 255
    cv2.imwrite(str(path), img)
    return path


class TestLabelScanner:
    """Test LabelScanner."""

    def test_scan_valid_label(self, image_path):
        """Test a complete result is validated into a record."""
        label = ExtractedLabel(
            to_address="JANE DOE, 123 MAIN ST, OTTAWA ON K1A 0B1",
            from_address="ACME SUPPLY CO, 55 KING ST W",
        )
        coordinator = Mock()
        coordinator.analyze_image.return_value = resolved(
            ScanResult(label=label, barcode_value="7023456789")
        )

        outcome = LabelScanner(coordinator, LabelValidator()).scan(image_path)

        assert outcome.image_path == str(image_path)
        assert outcome.validation.ok
        assert outcome.validation.record.bar_code == "7023456789"
        assert outcome.processing_time_ms >= 0
        image = coordinator.analyze_image.call_args.args[0]
        assert image.shape == (200, 300, 3)

    def test_empty_result_fails_validation(self, image_path):
        """Test a frame with nothing recognized is reported as missing fields."""
        coordinator = Mock()
        coordinator.analyze_image.return_value = resolved(None)

        outcome = LabelScanner(coordinator, LabelValidator()).scan(image_path)

        assert outcome.result == ScanResult()
        assert outcome.validation.missing_fields == ["toAddress", "fromAddress", "barCode"]

    def test_cropper_output_is_analyzed(self, image_path):
        """Test the cropped label replaces the photo."""
        cropped = np.ones((50, 80, 3), dtype=np.uint8)
        cropper = Mock()
        cropper.crop.return_value = cropped
        coordinator = Mock()
        coordinator.analyze_image.return_value = resolved(None)

        LabelScanner(coordinator, LabelValidator(), cropper=cropper).analyze(image_path)

        assert coordinator.analyze_image.call_args.args[0] is cropped

    def test_cropper_miss_keeps_photo(self, image_path):
        """Test the full photo is used when no label outline is found."""
        cropper = Mock()
        cropper.crop.return_value = None
        coordinator = Mock()
        coordinator.analyze_image.return_value = resolved(None)

        LabelScanner(coordinator, LabelValidator(), cropper=cropper).analyze(image_path)

        assert coordinator.analyze_image.call_args.args[0].shape == (200, 300, 3)

    def test_missing_file(self, tmp_path):
        """Test a missing image raises FileNotFoundError."""
        scanner = LabelScanner(Mock(), LabelValidator())
        with pytest.raises(FileNotFoundError):
            scanner.scan(tmp_path / "missing.jpg")

    def test_undecodable_file(self, tmp_path):
        """Test a file that is not an image raises ValueError."""
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"not an image")
        scanner = LabelScanner(Mock(), LabelValidator())
        with pytest.raises(ValueError, match="Cannot decode image"):
            scanner.scan(path)
