# heatmap_pose_engine/heatmap_pose/common/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Tuple, Dict, List
from .enums import PoseState
from .options import Rect
from .skeleton import BodyPart, NUM_PARTS, SKELETON_TOPOLOGY

class FrameMetadata(BaseModel):
    """Metadata associated with a single camera frame."""
    frame_id: int
    timestamp: float
    source_resolution: Tuple[int, int]

class Keypoint(BaseModel):
    """A decoded part location, normalized to the model's output grid."""
    model_config = ConfigDict(frozen=True)

    part: BodyPart
    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)
    score: float

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

class Line(BaseModel):
    """A realized topology edge for one person."""
    model_config = ConfigDict(frozen=True)

    start: Keypoint
    end: Keypoint

class Human(BaseModel):
    """One person's keypoints, indexed by BodyPart order. Absent parts are None."""
    model_config = ConfigDict(frozen=True)

    keypoints: Tuple[Optional[Keypoint], ...]

    @field_validator('keypoints')
    @classmethod
    def _one_slot_per_part(cls, value):
        if len(value) != NUM_PARTS:
            raise ValueError(f"expected {NUM_PARTS} keypoint slots, got {len(value)}")
        return value

    def keypoint(self, part: BodyPart) -> Optional[Keypoint]:
        return self.keypoints[part.channel]

    @property
    def present_keypoints(self) -> List[Keypoint]:
        return [kp for kp in self.keypoints if kp is not None]

    @property
    def score(self) -> float:
        """Total confidence over the present keypoints."""
        return float(sum(kp.score for kp in self.present_keypoints))

    @property
    def lines(self) -> List[Line]:
        """Topology edges whose two endpoints are both present."""
        lines = []
        for part_from, part_to in SKELETON_TOPOLOGY:
            start, end = self.keypoint(part_from), self.keypoint(part_to)
            if start is None or end is None:
                continue
            lines.append(Line(start=start, end=end))
        return lines

class PoseEstimationOutput(BaseModel):
    """All people decoded from one frame, in discovery order."""
    model_config = ConfigDict(frozen=True)

    humans: Tuple[Human, ...] = ()

    @property
    def keypoints(self) -> List[Keypoint]:
        return [kp for human in self.humans for kp in human.present_keypoints]

    @property
    def lines(self) -> List[Line]:
        return [line for human in self.humans for line in human.lines]

class PoseResult(BaseModel):
    """Encapsulates the complete result of a single frame's pose processing."""
    model_config = ConfigDict(frozen=True)

    timestamp: float
    frame_id: int
    processing_time_ms: float
    status: PoseState
    output: PoseEstimationOutput = Field(default_factory=PoseEstimationOutput)
    error: Optional[str] = None
    roi_bbox: Optional[Tuple[int, int, int, int]] = None
    crop: Optional[Rect] = None
    performance_metrics: Dict[str, float] = Field(default_factory=dict)
