"""Camera frame source keeping only the newest frame."""

import logging
import threading
from collections.abc import Iterator

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class LatestFrameSource:
    """Reads a camera continuously and hands out only the newest frame.

    A daemon thread drains the device so stale frames never queue up;
    consumers that are busy simply miss intermediate frames.
    """

    def __init__(self, device: int | str = 0, read_timeout: float = 2.0):
        """
        Open the camera.

        Args:
            device: OpenCV device index or stream URL.
            read_timeout: Seconds to wait for a new frame before giving up.

        Raises:
            ValueError: If the device cannot be opened.
        """
        self._capture = cv2.VideoCapture(device)
        if not self._capture.isOpened():
            raise ValueError(f"Cannot open camera: {device}")

        self._read_timeout = read_timeout
        self._condition = threading.Condition()
        self._frame: np.ndarray | None = None
        self._sequence = 0
        self._running = True
        self._reader = threading.Thread(
            target=self._read_loop, name="camera-reader", daemon=True
        )
        self._reader.start()

    def __enter__(self) -> "LatestFrameSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def latest(self, after: int = 0) -> tuple[int, np.ndarray] | None:
        """
        Wait for a frame newer than ``after``.

        Returns:
            (sequence number, frame), or None on timeout or after close.
        """
        with self._condition:
            ready = self._condition.wait_for(
                lambda: not self._running or self._sequence > after,
                timeout=self._read_timeout,
            )
            if not ready or self._frame is None or self._sequence <= after:
                return None
            return self._sequence, self._frame

    def frames(self) -> Iterator[np.ndarray]:
        """Yield each new frame once, skipping frames that arrived meanwhile."""
        seen = 0
        while True:
            item = self.latest(after=seen)
            if item is None:
                return
            seen, frame = item
            yield frame

    def close(self) -> None:
        """Stop reading and release the device."""
        with self._condition:
            if not self._running:
                return
            self._running = False
            self._condition.notify_all()
        self._reader.join(timeout=self._read_timeout)
        self._capture.release()

    def _read_loop(self) -> None:
        while True:
            with self._condition:
                if not self._running:
                    return
            ok, frame = self._capture.read()
            if not ok:
                logger.warning("Camera read failed; stopping frame source")
                with self._condition:
                    self._running = False
                    self._condition.notify_all()
                return
            with self._condition:
                self._frame = frame
                self._sequence += 1
                self._condition.notify_all()
