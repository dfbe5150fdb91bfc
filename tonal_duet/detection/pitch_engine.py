"""Continuous pitch detection over a pull-based frame source.

Each engine owns one detection loop. Every frame read from the source goes
through estimate -> ignore filter -> quantize, and accepted detections are
handed to the caller's callback. Engines share no state, so several can run
side by side (one per performer).
"""

from __future__ import annotations

import threading
from typing import Callable, ClassVar, Optional

from ..core.exceptions import AcquisitionFailure, EngineAlreadyRunning
from ..core.interfaces import IFrameSource, IPitchEngine
from ..logger import get_logger
from ..note_types import DetectionResult, EngineState, Frame
from ..note_utils import A4_FREQUENCY, quantize
from .autocorrelation import AutocorrelationEstimator
from .ignore_filter import DEFAULT_TOLERANCE, IgnoreSet, IgnoreSpec

logger = get_logger(__name__)

ResultCallback = Callable[[DetectionResult], None]


class _DetectionRun:
    """State owned by a single start/stop cycle of an engine."""

    def __init__(self, frame_source: IFrameSource, on_result: ResultCallback) -> None:
        self.frame_source = frame_source
        self.on_result = on_result
        self.stop_requested = threading.Event()
        self.finished = threading.Event()
        self.thread: Optional[threading.Thread] = None  # Background thread, if any
        self.reader: Optional[threading.Thread] = None  # Thread running the loop
        self.frames = 0
        self.detections = 0


class PitchEngine(IPitchEngine):
    """Single-voice pitch detector with self-feedback suppression."""

    # Seconds stop() waits for the loop to finish its current read
    JOIN_TIMEOUT: ClassVar[float] = 5.0

    def __init__(
        self,
        reference_frequency: float = A4_FREQUENCY,
        silence_threshold: float = AutocorrelationEstimator.DEFAULT_SILENCE_THRESHOLD,
        window_threshold: float = AutocorrelationEstimator.DEFAULT_WINDOW_THRESHOLD,
        ignore_tolerance: float = DEFAULT_TOLERANCE,
        name: str = "pitch-engine",
        estimator: Optional[AutocorrelationEstimator] = None,
    ) -> None:
        """Initialize the engine in the Idle state.

        Args:
            reference_frequency: Frequency of A4 in Hz
            silence_threshold: RMS below which a frame is treated as silence
            window_threshold: Amplitude used to bound the autocorrelation window
            ignore_tolerance: Tolerance in Hz for ignore entries given without one
            name: Name used in log messages and for the loop thread
            estimator: Pitch estimator, or None to build one from the thresholds
        """
        self.name = name
        self._reference_frequency = reference_frequency
        self._ignore_tolerance = ignore_tolerance
        self._estimator = estimator or AutocorrelationEstimator(
            silence_threshold=silence_threshold,
            window_threshold=window_threshold,
        )

        # Guards run transitions and result delivery; reentrant so callbacks may call stop()
        self._lock = threading.RLock()
        self._run: Optional[_DetectionRun] = None
        self._last_run: Optional[_DetectionRun] = None
        # Replaced wholesale, never mutated
        self._ignore_set: IgnoreSet = IgnoreSet.EMPTY

        logger.debug(
            f"{self.name}: initialized (A4={reference_frequency}Hz, "
            f"silence={self._estimator.silence_threshold}, tolerance={ignore_tolerance}Hz)"
        )

    @property
    def state(self) -> EngineState:
        return EngineState.RUNNING if self._run is not None else EngineState.IDLE

    def is_running(self) -> bool:
        return self._run is not None

    @property
    def ignore_set(self) -> IgnoreSet:
        return self._ignore_set

    def set_ignore_set(self, entries: IgnoreSpec) -> None:
        """Replace the ignore set; applies from the next frame processed.

        Args:
            entries: See IgnoreSet.build

        Raises:
            InvalidIgnoreEntry: If any entry is invalid; the current set is kept
        """
        snapshot = IgnoreSet.build(entries, self._ignore_tolerance)
        self._ignore_set = snapshot
        logger.debug(
            f"{self.name}: ignoring {[f'{e.frequency:.2f}Hz' for e in snapshot.entries]}"
        )

    def start(
        self,
        frame_source: IFrameSource,
        on_result: ResultCallback,
        background: bool = True,
    ) -> None:
        """Open the frame source and start detecting.

        Args:
            frame_source: Source of frames; opened here, closed when the run ends
            on_result: Called with each accepted DetectionResult
            background: Run the loop on a daemon thread. If False, the loop runs
                on the calling thread and this returns once the source is
                exhausted or stop() is called.

        Raises:
            EngineAlreadyRunning: If the engine is already running
            AcquisitionFailure: If the frame source cannot be opened
        """
        with self._lock:
            if self._run is not None:
                raise EngineAlreadyRunning(f"{self.name} is already running")

            try:
                frame_source.open()
            except AcquisitionFailure as e:
                logger.error(f"{self.name}: could not acquire frame source: {e}")
                raise

            run = _DetectionRun(frame_source, on_result)
            self._run = run
            self._last_run = run
            logger.info(f"{self.name}: started ({frame_source.sample_rate} Hz)")

            if background:
                run.thread = threading.Thread(
                    target=self._loop, args=(run,), name=f"{self.name}-loop", daemon=True
                )
                run.thread.start()

        if not background:
            self._loop(run)

    def stop(self) -> None:
        """Stop detecting. Does nothing if the engine is idle.

        Waits for the loop to finish its current read; the loop closes the
        source on its way out. Called from the loop itself (a callback), it
        returns at once and the loop exits after the callback.
        """
        with self._lock:
            run = self._run
            if run is None:
                return
            run.stop_requested.set()
            self._run = None
            self._ignore_set = IgnoreSet.EMPTY

        if run.reader is threading.current_thread():
            logger.info(f"{self.name}: stop requested from the detection loop")
            return

        if not run.finished.wait(self.JOIN_TIMEOUT):
            logger.warning(f"{self.name}: loop did not exit within {self.JOIN_TIMEOUT}s")
        elif run.thread is not None:
            run.thread.join(self.JOIN_TIMEOUT)

        logger.info(f"{self.name}: stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the current (or last) run to finish.

        Returns:
            True if the run has finished, False on timeout
        """
        run = self._last_run
        if run is None:
            return True
        return run.finished.wait(timeout)

    def analyze_frame(
        self, frame: Frame, ignore_set: Optional[IgnoreSpec] = None
    ) -> Optional[DetectionResult]:
        """Run the detection pipeline on one frame without delivering the result.

        Args:
            frame: Frame to analyze
            ignore_set: Ignore set to apply, or None for the engine's current one

        Returns:
            The detection, or None if the frame has no pitch or it is ignored
        """
        if ignore_set is None:
            snapshot = self._ignore_set
        else:
            snapshot = IgnoreSet.build(ignore_set, self._ignore_tolerance)

        frequency = self._estimator.estimate(frame)
        if frequency is None:
            return None

        if snapshot.should_ignore(frequency):
            logger.debug(f"{self.name}: ignoring {frequency:.2f}Hz")
            return None

        note, cents = quantize(frequency, self._reference_frequency)
        return DetectionResult(note=note, frequency=frequency, cents=cents)

    def _deliver(self, run: _DetectionRun, frame: Frame) -> None:
        result = self.analyze_frame(frame)
        if result is None:
            return

        with self._lock:
            if self._run is not run or run.stop_requested.is_set():
                return
            run.detections += 1
            logger.debug(f"{self.name}: {result}")
            run.on_result(result)

    def _loop(self, run: _DetectionRun) -> None:
        run.reader = threading.current_thread()
        try:
            while not run.stop_requested.is_set():
                frame = run.frame_source.read()
                if frame is None:
                    logger.info(f"{self.name}: frame source exhausted")
                    break
                run.frames += 1
                self._deliver(run, frame)
        except Exception as e:
            logger.error(f"{self.name}: detection loop failed: {e}", exc_info=True)
            raise
        finally:
            self._finish(run)

    def _finish(self, run: _DetectionRun) -> None:
        with self._lock:
            if self._run is run:
                self._run = None
                self._ignore_set = IgnoreSet.EMPTY

        run.frame_source.close()
        run.finished.set()
        logger.info(
            f"{self.name}: processed {run.frames} frames, {run.detections} detections"
        )
