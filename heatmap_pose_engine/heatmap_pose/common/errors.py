# heatmap_pose_engine/heatmap_pose/common/errors.py


class PoseEstimationError(Exception):
    """Base class for failures that prevent a frame from being decoded."""


class InputConstructionFailed(PoseEstimationError):
    """The frame could not be converted or cropped into the engine's input tensor."""


class EngineInferenceFailed(PoseEstimationError):
    """The inference engine failed or returned tensors of an unexpected shape."""


class InvalidGeometryError(ValueError):
    """Raised for zero-area frames, crop rectangles or overlays."""


class ConfigError(Exception):
    """The configuration file is missing, unparsable or invalid."""
