"""Per-frame orchestration of text and barcode recognition."""

import logging
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

import numpy as np

from shipping_label.barcode.base import BarcodeReader
from shipping_label.extractor.base import Extractor
from shipping_label.extractor.fields import FieldExtractor
from shipping_label.extractor.normalizer import normalize
from shipping_label.extractor.patterns import POSTAL_CODE_PATTERN
from shipping_label.models.label import ExtractedLabel, ScanResult
from shipping_label.ocr.base import TextBlock, TextRecognizer

logger = logging.getLogger(__name__)


class CoordinatorState(str, Enum):
    """Lifecycle of the coordinator."""

    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


@dataclass(frozen=True)
class FrameState:
    """Point-in-time view of the coordinator flags and the latest frame."""

    paused: bool = False
    barcode_in_flight: bool = False
    text_done: bool = False
    barcode_done: bool = False


class _FrameJoin:
    """Two-way join of one frame's text and barcode branches.

    Each branch resolves exactly once; whichever resolves second completes
    the frame.
    """

    def __init__(self, frame_id: int, on_joined: Callable[["_FrameJoin"], None]):
        self.frame_id = frame_id
        self.future: Future = Future()
        self.future.set_running_or_notify_cancel()
        self.label = ExtractedLabel()
        self.barcode_value = ""
        self.text_done = False
        self.barcode_done = False
        self._lock = threading.Lock()
        self._on_joined = on_joined

    def resolve_text(self, label: ExtractedLabel) -> None:
        with self._lock:
            if self.text_done:
                return
            self.label = label
            self.text_done = True
            joined = self.barcode_done
        if joined:
            self._on_joined(self)

    def resolve_barcode(self, value: str) -> None:
        with self._lock:
            if self.barcode_done:
                return
            self.barcode_value = value
            self.barcode_done = True
            joined = self.text_done
        if joined:
            self._on_joined(self)


class FrameAnalysisCoordinator:
    """Runs text and barcode recognition on camera frames.

    Every frame launches both recognitions on a background executor and
    joins them before the fields and barcode are aggregated. The first
    frame whose text contains a postal code pauses analysis and notifies
    the host once; frames are ignored until :meth:`resume` is called.

    Barcode recognition is single-flight: while one barcode read is
    outstanding, later live frames skip it and join with an empty barcode.
    Captured stills never skip: their read starts once the outstanding one
    finishes.

    Recognition failures and cancellations count as empty results.
    """

    def __init__(
        self,
        text_recognizer: TextRecognizer,
        barcode_reader: BarcodeReader,
        on_label_detected: Callable[[], None] | None = None,
        on_result: Callable[[ScanResult], None] | None = None,
        extractor: Extractor | None = None,
        preprocess: Callable[[np.ndarray], np.ndarray] | None = None,
        max_workers: int = 2,
    ):
        """
        Initialize the coordinator.

        Args:
            text_recognizer: Backend producing text blocks from an image.
            barcode_reader: Backend decoding barcodes from an image.
            on_label_detected: Called once when a label first shows up.
            on_result: Called with every non-empty frame result.
            extractor: Field extractor, FieldExtractor by default.
            preprocess: Optional filter applied to images before recognition.
            max_workers: Threads available to the recognition branches.
        """
        self._text_recognizer = text_recognizer
        self._barcode_reader = barcode_reader
        self._on_label_detected = on_label_detected
        self._on_result = on_result
        self._extractor = extractor or FieldExtractor()
        self._preprocess = preprocess
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="frame-analysis"
        )

        self._lock = threading.Lock()
        self._state = CoordinatorState.ACTIVE
        self._barcode_in_flight = False
        self._outstanding: set[Future] = set()
        # Captured stills waiting for the in-flight barcode read to finish
        self._waiting_stills: deque[tuple[np.ndarray, _FrameJoin]] = deque()
        self._last_join: _FrameJoin | None = None
        self._frame_count = 0

    def __enter__(self) -> "FrameAnalysisCoordinator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    @property
    def state(self) -> CoordinatorState:
        with self._lock:
            return self._state

    @property
    def paused(self) -> bool:
        return self.state is CoordinatorState.PAUSED

    def snapshot(self) -> FrameState:
        """Current flags, with completion flags of the most recent frame."""
        with self._lock:
            join = self._last_join
            return FrameState(
                paused=self._state is CoordinatorState.PAUSED,
                barcode_in_flight=self._barcode_in_flight,
                text_done=join.text_done if join else False,
                barcode_done=join.barcode_done if join else False,
            )

    def analyze_frame(self, image: np.ndarray) -> "Future[ScanResult | None] | None":
        """
        Analyze one live camera frame.

        Args:
            image: BGR frame.

        Returns:
            Future resolving to the frame's ScanResult, or to None when
            nothing was recognized. None when the coordinator is paused or
            closed and the frame was ignored.
        """
        return self._submit(image, respect_pause=True)

    def analyze_image(self, image: np.ndarray) -> "Future[ScanResult | None]":
        """
        Analyze a captured still image, regardless of the pause state.

        The barcode is always read from the still, after any read already
        in flight for a live frame.

        Raises:
            RuntimeError: If the coordinator has been shut down.
        """
        future = self._submit(image, respect_pause=False)
        if future is None:
            raise RuntimeError("Frame analysis coordinator has been shut down")
        return future

    def resume(self) -> None:
        """Accept frames again and re-arm label detection."""
        with self._lock:
            if self._state is not CoordinatorState.PAUSED:
                return
            self._state = CoordinatorState.ACTIVE
        logger.info("Frame analysis resumed")

    def shutdown(self) -> None:
        """Cancel outstanding recognitions and release both backends."""
        with self._lock:
            if self._state is CoordinatorState.CLOSED:
                return
            self._state = CoordinatorState.CLOSED
            pending = list(self._outstanding)
            stranded = list(self._waiting_stills)
            self._waiting_stills.clear()

        for future in pending:
            future.cancel()
        for _, join in stranded:
            join.resolve_barcode("")
        # Not waiting: shutdown may be requested from a result callback
        self._executor.shutdown(wait=False, cancel_futures=True)

        for backend in (self._text_recognizer, self._barcode_reader):
            try:
                backend.close()
            except Exception:
                logger.exception("Failed to close %s", backend.name)
        logger.info("Frame analysis coordinator shut down")

    def _submit(
        self, image: np.ndarray, respect_pause: bool
    ) -> "Future[ScanResult | None] | None":
        if self._preprocess is not None:
            image = self._apply_preprocess(image)

        with self._lock:
            if self._state is CoordinatorState.CLOSED:
                return None
            if respect_pause and self._state is CoordinatorState.PAUSED:
                return None

            self._frame_count += 1
            join = _FrameJoin(self._frame_count, self._finish)
            self._last_join = join

            text_future = self._executor.submit(self._recognize_text, image)
            self._outstanding.add(text_future)

            barcode_future = self._launch_barcode(image)
            if barcode_future is None and not respect_pause:
                logger.debug(
                    "Barcode read in flight; frame %d waits for it", join.frame_id
                )
                self._waiting_stills.append((image, join))

        # Callbacks may run synchronously, so they are attached unlocked
        text_future.add_done_callback(self._forget)
        text_future.add_done_callback(
            lambda f: join.resolve_text(self._text_outcome(f, join.frame_id))
        )
        if barcode_future is not None:
            self._attach_barcode(barcode_future, join)
        elif respect_pause:
            logger.debug("Barcode read in flight; skipping it for frame %d", join.frame_id)
            join.resolve_barcode("")
        return join.future

    def _launch_barcode(self, image: np.ndarray) -> Future | None:
        """Start a barcode read unless one is in flight. Caller holds the lock."""
        if self._barcode_in_flight:
            return None
        self._barcode_in_flight = True
        future = self._executor.submit(self._read_barcode, image)
        self._outstanding.add(future)
        return future

    def _attach_barcode(self, future: Future, join: _FrameJoin) -> None:
        future.add_done_callback(self._release_barcode)
        future.add_done_callback(
            lambda f: join.resolve_barcode(self._barcode_outcome(f, join.frame_id))
        )

    def _apply_preprocess(self, image: np.ndarray) -> np.ndarray:
        try:
            return self._preprocess(image)
        except Exception:
            logger.warning("Preprocessing failed; using the raw image", exc_info=True)
            return image

    def _recognize_text(self, image: np.ndarray) -> ExtractedLabel:
        try:
            blocks = self._text_recognizer.recognize(image)
        except Exception:
            logger.warning("Text recognition failed; treating it as empty", exc_info=True)
            return ExtractedLabel()

        self._check_label_detected(blocks)
        return self._extractor.extract(normalize(blocks))

    def _read_barcode(self, image: np.ndarray) -> str:
        try:
            values = self._barcode_reader.read(image)
        except Exception:
            logger.warning("Barcode recognition failed; treating it as empty", exc_info=True)
            return ""
        return next((value for value in values if value), "")

    def _check_label_detected(self, blocks: list[TextBlock]) -> None:
        if not any(POSTAL_CODE_PATTERN.search(block.text) for block in blocks):
            return

        with self._lock:
            if self._state is not CoordinatorState.ACTIVE:
                return
            self._state = CoordinatorState.PAUSED

        logger.info("Label detected; pausing frame analysis")
        self._notify(self._on_label_detected)

    def _text_outcome(self, future: Future, frame_id: int) -> ExtractedLabel:
        if future.cancelled():
            logger.debug("Text recognition cancelled for frame %d", frame_id)
            return ExtractedLabel()
        error = future.exception()
        if error is not None:
            logger.warning("Text branch of frame %d failed: %s", frame_id, error)
            return ExtractedLabel()
        return future.result()

    def _barcode_outcome(self, future: Future, frame_id: int) -> str:
        if future.cancelled():
            logger.debug("Barcode recognition cancelled for frame %d", frame_id)
            return ""
        error = future.exception()
        if error is not None:
            logger.warning("Barcode branch of frame %d failed: %s", frame_id, error)
            return ""
        return future.result()

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._outstanding.discard(future)

    def _release_barcode(self, future: Future) -> None:
        with self._lock:
            self._barcode_in_flight = False
            self._outstanding.discard(future)
            if not self._waiting_stills or self._state is CoordinatorState.CLOSED:
                return
            image, join = self._waiting_stills.popleft()
            next_future = self._launch_barcode(image)

        logger.debug("Reading barcode of captured frame %d", join.frame_id)
        self._attach_barcode(next_future, join)

    def _finish(self, join: _FrameJoin) -> None:
        result = ScanResult(label=join.label, barcode_value=join.barcode_value)
        logger.debug(
            "Frame %d joined (barcode: %r, empty: %s)",
            join.frame_id,
            join.barcode_value,
            result.is_empty,
        )
        if result.is_empty:
            join.future.set_result(None)
            return

        if self.state is not CoordinatorState.CLOSED:
            self._notify(self._on_result, result)
        join.future.set_result(result)

    def _notify(self, callback: Callable | None, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Host callback %r failed", callback)
