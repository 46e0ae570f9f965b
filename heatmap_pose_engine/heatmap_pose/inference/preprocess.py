# heatmap_pose_engine/heatmap_pose/inference/preprocess.py
from typing import Tuple
import cv2
import numpy as np
from ..common.errors import InputConstructionFailed, InvalidGeometryError
from ..common.options import PreprocessOptions, Rect
from ..processing.geometry import GeometryMapper

_TO_RGB = {1: cv2.COLOR_GRAY2RGB, 3: cv2.COLOR_BGR2RGB, 4: cv2.COLOR_BGRA2RGB}
_TO_GRAY = {3: cv2.COLOR_BGR2GRAY, 4: cv2.COLOR_BGRA2GRAY}


class FramePreprocessor:
    """Crops, resizes and converts a BGR(A) or grayscale uint8 frame into the engine's input tensor."""

    def __init__(self, input_size: Tuple[int, int], grayscale: bool = False, normalized: bool = False):
        self.geometry = GeometryMapper(input_size)
        self.input_size = (int(input_size[0]), int(input_size[1]))
        self.grayscale = grayscale
        self.normalized = normalized

    def __call__(self, frame: np.ndarray, options: PreprocessOptions) -> Tuple[np.ndarray, Rect]:
        """Returns the [1, H, W, C] float32 tensor and the crop it was taken from."""
        channels = self._check_format(frame)
        height, width = frame.shape[:2]
        try:
            crop = self.geometry.crop_rect((width, height), options.crop_area)
        except InvalidGeometryError as e:
            raise InputConstructionFailed(str(e)) from e

        x0, y0, x1, y1 = crop.as_int_box()
        x1, y1 = min(max(x1, x0 + 1), width), min(max(y1, y0 + 1), height)
        patch = np.ascontiguousarray(frame[y0:y1, x0:x1])
        if patch.size == 0:
            raise InputConstructionFailed(f"Crop {crop} produced an empty patch")

        resized = cv2.resize(patch, self.input_size, interpolation=cv2.INTER_LINEAR)
        if channels == 1:
            resized = resized.reshape(resized.shape[0], resized.shape[1])

        if self.grayscale:
            image = resized if channels == 1 else cv2.cvtColor(resized, _TO_GRAY[channels])
            image = image[:, :, np.newaxis]
        else:
            image = cv2.cvtColor(resized, _TO_RGB[channels])

        tensor = image.astype(np.float32)
        if self.normalized:
            tensor /= 255.0
        return tensor[np.newaxis], crop

    @staticmethod
    def _check_format(frame) -> int:
        if not isinstance(frame, np.ndarray) or frame.dtype != np.uint8:
            raise InputConstructionFailed("Frame must be a uint8 numpy array")
        if frame.ndim == 2:
            return 1
        if frame.ndim == 3 and frame.shape[2] in (1, 3, 4):
            return frame.shape[2]
        raise InputConstructionFailed(f"Unsupported pixel format with shape {frame.shape}")
