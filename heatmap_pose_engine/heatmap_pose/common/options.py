# heatmap_pose_engine/heatmap_pose/common/options.py
import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional, Tuple, Union
from .enums import MergeConflictPolicy
from .skeleton import BodyPart

class Rect(BaseModel):
    """Axis-aligned rectangle in pixel coordinates."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0.0
    y: float = 0.0
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def as_int_box(self) -> Tuple[int, int, int, int]:
        """(x0, y0, x1, y1) rounded to whole pixels."""
        return (int(round(self.x)), int(round(self.y)),
                int(round(self.max_x)), int(round(self.max_y)))

class PreprocessOptions(BaseModel):
    """How the raw frame maps onto the model input. `crop_area=None` uses the whole frame."""
    model_config = ConfigDict(frozen=True)

    crop_area: Optional[Rect] = None

class SinglePerson(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"

class MultiPerson(BaseModel):
    """
    Knobs for the multi-person path.

    `pair_threshold=None` keeps every candidate pair, `max_human_number=None`
    keeps every assembled person.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["multi"] = "multi"
    pair_threshold: Optional[float] = None
    nms_filter_size: int = Field(default=3, ge=0)
    max_human_number: Optional[int] = Field(default=None, ge=1)
    peak_threshold: float = Field(default=0.1, ge=0.0)
    merge_conflict_policy: MergeConflictPolicy = MergeConflictPolicy.KEEP_SEPARATE

HumanType = Union[SinglePerson, MultiPerson]

class PostprocessOptions(BaseModel):
    """
    Output filters applied after decoding.

    `part_threshold=None` keeps every keypoint and `body_part=None` keeps every
    part; neither uses a numeric sentinel for "disabled".
    """
    model_config = ConfigDict(frozen=True)

    part_threshold: Optional[float] = None
    body_part: Optional[BodyPart] = None
    human_type: HumanType = Field(default_factory=SinglePerson, discriminator="kind")

class PoseEstimationInput(BaseModel):
    """A raw frame plus the options used to prepare and decode it."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    frame: np.ndarray
    preprocess_options: PreprocessOptions = Field(default_factory=PreprocessOptions)
    postprocess_options: PostprocessOptions = Field(default_factory=PostprocessOptions)
