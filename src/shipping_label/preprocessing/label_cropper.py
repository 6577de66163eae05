"""Shipping label region detection and cropping."""

import logging
from pathlib import Path

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class LabelCropper:
    """Detect the label in a photo and return a flat, cropped image of it.

    Labels are bright paper rectangles, so the bright-region mask is tried
    first; adaptive thresholding and plain Canny edges follow for labels
    on light backgrounds. The largest convex quadrilateral wins and is
    perspective-corrected.
    """

    # Larger images are downscaled for contour search
    MAX_PROCESS_DIM = 1500

    def __init__(
        self,
        min_area_ratio: float = 0.1,
        max_area_ratio: float = 0.98,
        epsilon_factor: float = 0.02,
    ):
        """
        Initialize LabelCropper.

        Args:
            min_area_ratio: Minimum label area as ratio of image area.
            max_area_ratio: Maximum label area as ratio of image area.
            epsilon_factor: Contour approximation tolerance, relative to perimeter.
        """
        self._min_area_ratio = min_area_ratio
        self._max_area_ratio = max_area_ratio
        self._epsilon_factor = epsilon_factor

    def crop_file(self, image_path: Path) -> np.ndarray | None:
        """Read an image and crop the label from it, None if not found."""
        img = cv2.imread(str(image_path))
        if img is None:
            logger.warning("Failed to read image: %s", image_path)
            return None
        return self.crop(img)

    def crop(self, img: np.ndarray) -> np.ndarray | None:
        """
        Crop the label from a BGR image.

        Returns:
            Perspective-corrected label image, or None if no label outline
            was found.
        """
        if img is None or img.size == 0:
            return None

        height, width = img.shape[:2]
        scale = min(1.0, self.MAX_PROCESS_DIM / max(height, width))
        if scale < 1.0:
            size = (int(width * scale), int(height * scale))
            small = cv2.resize(img, size, interpolation=cv2.INTER_AREA)
        else:
            small = img

        for strategy in (self._bright_mask, self._adaptive_edges, self._canny_edges):
            contours, _ = cv2.findContours(
                strategy(small), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
            )
            quad = self._largest_quad(contours, small.shape)
            if quad is not None:
                logger.debug("Label outline found with %s", strategy.__name__)
                corners = quad.reshape(4, 2).astype(np.float32) / scale
                return self._warp(img, corners)

        logger.debug("No label outline found")
        return None

    def _bright_mask(self, img: np.ndarray) -> np.ndarray:
        lightness = cv2.cvtColor(img, cv2.COLOR_BGR2LAB)[:, :, 0]
        _, mask = cv2.threshold(lightness, 180, 255, cv2.THRESH_BINARY)
        kernel = np.ones((7, 7), np.uint8)
        mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel, iterations=3)
        return cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel, iterations=2)

    def _adaptive_edges(self, img: np.ndarray) -> np.ndarray:
        gray = cv2.GaussianBlur(cv2.cvtColor(img, cv2.COLOR_BGR2GRAY), (5, 5), 0)
        thresh = cv2.adaptiveThreshold(
            gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 11, 2
        )
        edges = cv2.Canny(thresh, 50, 150)
        return cv2.dilate(edges, np.ones((5, 5), np.uint8), iterations=2)

    def _canny_edges(self, img: np.ndarray) -> np.ndarray:
        gray = cv2.GaussianBlur(cv2.cvtColor(img, cv2.COLOR_BGR2GRAY), (5, 5), 0)
        edges = cv2.Canny(gray, 50, 150)
        return cv2.dilate(edges, np.ones((3, 3), np.uint8), iterations=2)

    def _largest_quad(self, contours, img_shape: tuple) -> np.ndarray | None:
        """Largest convex 4-point contour within the configured area range."""
        img_area = img_shape[0] * img_shape[1]
        min_area = img_area * self._min_area_ratio
        max_area = img_area * self._max_area_ratio
        best = None
        best_area = 0.0

        for contour in contours:
            area = cv2.contourArea(contour)
            if area < min_area or area > max_area:
                continue
            approx = cv2.approxPolyDP(
                contour, self._epsilon_factor * cv2.arcLength(contour, True), True
            )
            if len(approx) == 4 and cv2.isContourConvex(approx) and area > best_area:
                best, best_area = approx, area

        return best

    def _warp(self, img: np.ndarray, corners: np.ndarray) -> np.ndarray:
        ordered = order_corners(corners)
        top_left, top_right, bottom_right, bottom_left = ordered
        width = int(
            max(
                np.linalg.norm(top_left - top_right),
                np.linalg.norm(bottom_left - bottom_right),
            )
        )
        height = int(
            max(
                np.linalg.norm(top_left - bottom_left),
                np.linalg.norm(top_right - bottom_right),
            )
        )
        width, height = max(width, 100), max(height, 100)

        target = np.array(
            [[0, 0], [width - 1, 0], [width - 1, height - 1], [0, height - 1]],
            dtype=np.float32,
        )
        matrix = cv2.getPerspectiveTransform(ordered, target)
        return cv2.warpPerspective(img, matrix, (width, height))


def order_corners(pts: np.ndarray) -> np.ndarray:
    """Order 4 points as top-left, top-right, bottom-right, bottom-left."""
    ordered = np.zeros((4, 2), dtype=np.float32)
    sums = pts.sum(axis=1)
    diffs = np.diff(pts, axis=1).ravel()
    ordered[0] = pts[np.argmin(sums)]
    ordered[2] = pts[np.argmax(sums)]
    ordered[1] = pts[np.argmin(diffs)]
    ordered[3] = pts[np.argmax(diffs)]
    return ordered
