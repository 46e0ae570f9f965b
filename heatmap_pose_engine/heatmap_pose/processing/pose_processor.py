# heatmap_pose_engine/heatmap_pose/processing/pose_processor.py
import logging
import threading
import time
import numpy as np
from typing import Optional, Tuple
from ..common.enums import PoseState
from ..common.errors import EngineInferenceFailed, InputConstructionFailed, InvalidGeometryError
from ..common.models import FrameMetadata, PoseEstimationOutput, PoseResult
from ..common.options import PoseEstimationInput, PostprocessOptions, PreprocessOptions, Rect
from .estimators import PoseEstimator

logger = logging.getLogger(__name__)

class PoseProcessor:
    """Runs one estimator per frame and reports the outcome as a tagged PoseResult."""

    def __init__(self, estimator: PoseEstimator,
                 preprocess_options: Optional[PreprocessOptions] = None,
                 postprocess_options: Optional[PostprocessOptions] = None):
        self.estimator = estimator
        self.preprocess_options = preprocess_options or PreprocessOptions()
        self.postprocess_options = postprocess_options or PostprocessOptions()
        # The engine is not reentrant: a frame arriving mid-decode is dropped.
        self._busy = threading.Lock()
        self.dropped_frames = 0

    def update_options(self, preprocess_options: Optional[PreprocessOptions] = None,
                       postprocess_options: Optional[PostprocessOptions] = None):
        """Swaps in new immutable option values; they apply from the next frame on."""
        if preprocess_options is not None:
            self.preprocess_options = preprocess_options
        if postprocess_options is not None:
            self.postprocess_options = postprocess_options

    def process_frame(self, frame: np.ndarray, metadata: FrameMetadata) -> PoseResult:
        """Processes a single frame; never raises for per-frame failures."""
        if not self._busy.acquire(blocking=False):
            self.dropped_frames += 1
            return self._result(metadata, PoseState.DROPPED, 0.0)

        try:
            start_time = time.perf_counter()
            pose_input = PoseEstimationInput(
                frame=frame,
                preprocess_options=self.preprocess_options,
                postprocess_options=self.postprocess_options,
            )
            try:
                output = self.estimator.inference(pose_input)
            except InputConstructionFailed as e:
                logger.warning("Frame %d skipped, input construction failed: %s", metadata.frame_id, e)
                return self._result(metadata, PoseState.INPUT_ERROR, self._elapsed_ms(start_time), error=str(e))
            except EngineInferenceFailed as e:
                logger.warning("Frame %d skipped, inference failed: %s", metadata.frame_id, e)
                return self._result(metadata, PoseState.ENGINE_ERROR, self._elapsed_ms(start_time), error=str(e))

            processing_time_ms = self._elapsed_ms(start_time)
            status = PoseState.SUCCESS if output.humans else PoseState.NO_HUMAN
            crop = self._crop(frame)
            return self._result(
                metadata, status, processing_time_ms,
                output=output,
                roi_bbox=crop.as_int_box() if crop is not None else None,
                crop=crop,
                performance_metrics={"humans": float(len(output.humans))},
            )
        finally:
            self._busy.release()

    def _crop(self, frame: np.ndarray) -> Optional[Rect]:
        height, width = frame.shape[:2]
        try:
            return self.estimator.preprocessor.geometry.crop_rect((width, height), self.preprocess_options.crop_area)
        except InvalidGeometryError:
            return None

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    @staticmethod
    def _result(metadata: FrameMetadata, status: PoseState, processing_time_ms: float,
                output: Optional[PoseEstimationOutput] = None, **kwargs) -> PoseResult:
        return PoseResult(
            timestamp=metadata.timestamp,
            frame_id=metadata.frame_id,
            processing_time_ms=processing_time_ms,
            status=status,
            output=output or PoseEstimationOutput(),
            **kwargs,
        )

    def close(self):
        self.estimator.close()


class PoseWorker:
    """
    Runs a PoseProcessor on one dedicated thread.

    `submit` hands a frame over only when the worker is idle; otherwise the
    frame is dropped rather than queued.
    """

    def __init__(self, processor: PoseProcessor):
        self._processor = processor
        self._condition = threading.Condition()
        self._pending: Optional[Tuple[np.ndarray, FrameMetadata]] = None
        self._in_flight = False
        self._latest: Optional[PoseResult] = None
        self._running = False
        self._thread = threading.Thread(target=self._run, daemon=True)
        self.dropped_frames = 0

    def submit(self, frame: np.ndarray, metadata: FrameMetadata) -> bool:
        """Returns False when the frame was dropped because a decode is still in flight."""
        with self._condition:
            if self._in_flight:
                self.dropped_frames += 1
                return False
            self._pending = (frame, metadata)
            self._in_flight = True
            self._condition.notify()
        return True

    def latest_result(self) -> Optional[PoseResult]:
        with self._condition:
            return self._latest

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: not self._in_flight, timeout)

    def _run(self):
        while True:
            with self._condition:
                self._condition.wait_for(lambda: self._pending is not None or not self._running)
                if not self._running:
                    return
                frame, metadata = self._pending
                self._pending = None

            try:
                result = self._processor.process_frame(frame, metadata)
            except Exception as e:
                # Keep serving frames; an unexpected failure only costs this one.
                logger.exception("Frame %d failed unexpectedly", metadata.frame_id)
                result = PoseResult(
                    timestamp=metadata.timestamp,
                    frame_id=metadata.frame_id,
                    processing_time_ms=0.0,
                    status=PoseState.ENGINE_ERROR,
                    error=f"{type(e).__name__}: {e}",
                )

            with self._condition:
                self._latest = result
                self._in_flight = False
                self._condition.notify_all()

    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self._running = True
        self._thread.start()
        logger.info("PoseWorker started.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        with self._condition:
            self._running = False
            self._condition.notify_all()
        self._thread.join()
        logger.info("PoseWorker stopped (%d frames dropped).", self.dropped_frames)
