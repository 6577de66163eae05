"""Edge-map filter applied to frames before recognition."""

import cv2
import numpy as np


class EdgeFilter:
    """Replace a frame with its Canny edge map, as a 3-channel image.

    Optional and replaceable: pass an instance as the coordinator's
    ``preprocess`` callable.
    """

    def __init__(self, low_threshold: int = 25, high_threshold: int = 75, blur: int = 5):
        self._low = low_threshold
        self._high = high_threshold
        self._blur = blur

    def __call__(self, image: np.ndarray) -> np.ndarray:
        gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if self._blur > 1:
            gray = cv2.GaussianBlur(gray, (self._blur, self._blur), 0)
        edges = cv2.Canny(gray, self._low, self._high)
        return cv2.cvtColor(edges, cv2.COLOR_GRAY2BGR)
