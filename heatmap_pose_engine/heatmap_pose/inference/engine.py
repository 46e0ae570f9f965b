# heatmap_pose_engine/heatmap_pose/inference/engine.py
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple
import cv2
import numpy as np
from ..common.errors import EngineInferenceFailed

logger = logging.getLogger(__name__)


class InferenceEngine(ABC):
    """
    Opaque model runner.

    Takes one preprocessed [1, H, W, C] float32 tensor and returns the model's
    output tensors in [1, h, w, c] layout. Implementations are not reentrant;
    the weights they hold are read-only after construction.
    """

    input_size: Tuple[int, int]
    grayscale: bool = False
    normalized: bool = False

    @abstractmethod
    def infer(self, tensor: np.ndarray) -> List[np.ndarray]: ...

    def close(self) -> None:
        pass


class OpenCVDnnEngine(InferenceEngine):
    """Runs a TFLite / ONNX / TensorFlow model through OpenCV's DNN module."""

    def __init__(self, model_path: str, input_size: Tuple[int, int], grayscale: bool = False,
                 normalized: bool = False, layout: str = "NCHW"):
        if layout not in ("NCHW", "NHWC"):
            raise ValueError(f"Unsupported tensor layout: {layout}")
        self.input_size = tuple(input_size)
        self.grayscale = grayscale
        self.normalized = normalized
        self.layout = layout
        try:
            self._net = cv2.dnn.readNet(model_path)
        except cv2.error as e:
            raise IOError(f"Cannot load model: {model_path}") from e
        self._output_names = self._net.getUnconnectedOutLayersNames()
        logger.info("Loaded model %s (%s input %dx%d)", model_path, layout, *self.input_size)

    def infer(self, tensor: np.ndarray) -> List[np.ndarray]:
        blob = tensor.transpose(0, 3, 1, 2) if self.layout == "NCHW" else tensor
        try:
            self._net.setInput(np.ascontiguousarray(blob))
            outputs = self._net.forward(self._output_names)
        except cv2.error as e:
            raise EngineInferenceFailed(f"OpenCV DNN forward failed: {e}") from e

        if self.layout == "NCHW":
            return [out.transpose(0, 2, 3, 1) if out.ndim == 4 else out for out in outputs]
        return list(outputs)
