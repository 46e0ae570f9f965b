# heatmap_pose_engine/heatmap_pose/common/config.py
import yaml
from pydantic import BaseModel, Field, ValidationError
from typing import Literal, Optional, Tuple, Union
from .enums import LogLevel, MergeConflictPolicy, ModelKind
from .errors import ConfigError
from .options import MultiPerson, PostprocessOptions, PreprocessOptions, Rect, SinglePerson
from .skeleton import BodyPart

class CameraConfig(BaseModel):
    """Capture device (index) or video file (path) settings."""
    source: Union[int, str] = 0
    resolution: Tuple[int, int] = (640, 480)
    target_fps: int = 30
    buffer_size: int = Field(default=5, ge=1)

class ModelConfig(BaseModel):
    path: str
    kind: ModelKind = ModelKind.OPENPOSE
    input_width: int = Field(gt=0)
    input_height: int = Field(gt=0)
    grayscale: bool = False
    normalized: bool = False
    layout: Literal["NCHW", "NHWC"] = "NCHW"

    @property
    def input_size(self) -> Tuple[int, int]:
        return self.input_width, self.input_height

class PoseConfig(BaseModel):
    """Decoding knobs. A null threshold disables that filter."""
    human_type: Literal["single", "multi"] = "single"
    part_threshold: Optional[float] = 0.1
    body_part: Optional[BodyPart] = None
    pair_threshold: Optional[float] = 3.4
    nms_filter_size: int = Field(default=3, ge=0)
    max_human_number: Optional[int] = Field(default=None, ge=1)
    peak_threshold: float = Field(default=0.1, ge=0.0)
    merge_conflict_policy: MergeConflictPolicy = MergeConflictPolicy.KEEP_SEPARATE
    crop_area: Optional[Rect] = None

    def preprocess_options(self) -> PreprocessOptions:
        return PreprocessOptions(crop_area=self.crop_area)

    def postprocess_options(self) -> PostprocessOptions:
        if self.human_type == "multi":
            human_type = MultiPerson(
                pair_threshold=self.pair_threshold,
                nms_filter_size=self.nms_filter_size,
                max_human_number=self.max_human_number,
                peak_threshold=self.peak_threshold,
                merge_conflict_policy=self.merge_conflict_policy,
            )
        else:
            human_type = SinglePerson()
        return PostprocessOptions(
            part_threshold=self.part_threshold,
            body_part=self.body_part,
            human_type=human_type,
        )

class VisualizationConfig(BaseModel):
    window_name: str = "Heatmap Pose Engine"
    draw_landmarks: bool = True
    draw_hud: bool = True
    adaptive_lod: bool = True
    lod_threshold_fps: float = 15.0
    keypoint_color: Tuple[int, int, int] = (0, 255, 0)
    line_color: Tuple[int, int, int] = (200, 200, 200)
    keypoint_radius: int = 4
    line_thickness: int = 2

class AppConfig(BaseModel):
    camera: CameraConfig = Field(default_factory=CameraConfig)
    model: ModelConfig
    pose: PoseConfig = Field(default_factory=PoseConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    log_level: LogLevel = LogLevel.INFO

def load_config(path: str) -> AppConfig:
    """Reads and validates a YAML configuration file."""
    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file '{path}' not found.") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse configuration file '{path}'. {e}") from e

    try:
        return AppConfig.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in '{path}': {e}") from e
