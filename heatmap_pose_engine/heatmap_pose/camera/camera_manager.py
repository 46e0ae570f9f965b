# heatmap_pose_engine/heatmap_pose/camera/camera_manager.py
import cv2
import logging
import time
import threading
import numpy as np
from collections import deque
from typing import Tuple, Optional
from ..common.config import CameraConfig
from ..common.models import FrameMetadata

logger = logging.getLogger(__name__)

class CameraManager:
    """Grabs frames on a background thread and exposes only the most recent one."""

    def __init__(self, config: CameraConfig):
        self.config = config
        source = config.source
        if isinstance(source, str) and source.isdigit():
            source = int(source)
        self._cap = cv2.VideoCapture(source)
        if not self._cap.isOpened():
            raise IOError(f"Cannot open camera source: {config.source}")

        width, height = config.resolution
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._cap.set(cv2.CAP_PROP_FPS, config.target_fps)
        # Video files end; live devices only fail transiently.
        self._is_file = isinstance(source, str)

        self._buffer = deque(maxlen=config.buffer_size)
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._update, daemon=True)
        self._running = False
        self._frame_id = 0
        self._last_served_id = 0
        self._dropped_frames = 0

    def _update(self):
        while self._running:
            ret, frame = self._cap.read()
            if not ret:
                if self._is_file:
                    logger.info("End of video source %s after %d frames.", self.config.source, self._frame_id)
                    self._running = False
                    break
                self._dropped_frames += 1
                time.sleep(0.01)
                continue

            timestamp = time.perf_counter()
            with self._lock:
                self._frame_id += 1
                self._buffer.append((frame, self._frame_id, timestamp))

    def get_frame(self) -> Tuple[Optional[np.ndarray], Optional[FrameMetadata]]:
        """Returns the newest frame not handed out yet, or (None, None)."""
        with self._lock:
            if not self._buffer or self._buffer[-1][1] == self._last_served_id:
                return None, None
            frame, frame_id, timestamp = self._buffer[-1]
            self._last_served_id = frame_id

        metadata = FrameMetadata(
            frame_id=frame_id,
            timestamp=timestamp,
            source_resolution=(frame.shape[1], frame.shape[0])
        )
        return frame.copy(), metadata

    def get_stats(self) -> dict:
        return {
            "is_running": self.is_running(),
            "buffer_size": len(self._buffer),
            "frames_read": self._frame_id,
            "dropped_frames": self._dropped_frames,
            "target_fps": self.config.target_fps,
        }

    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self._running = True
        self._thread.start()
        logger.info("CameraManager started on source %s.", self.config.source)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._running = False
        self._thread.join()
        self._cap.release()
        logger.info("CameraManager stopped, %d frames dropped.", self._dropped_frames)
