# heatmap_pose_engine/heatmap_pose/common/skeleton.py
from enum import Enum
from typing import Tuple

class BodyPart(str, Enum):
    """Anatomical parts in heatmap channel order."""
    TOP = "top"
    NECK = "neck"
    RIGHT_SHOULDER = "right shoulder"
    RIGHT_ELBOW = "right elbow"
    RIGHT_WRIST = "right wrist"
    LEFT_SHOULDER = "left shoulder"
    LEFT_ELBOW = "left elbow"
    LEFT_WRIST = "left wrist"
    RIGHT_HIP = "right hip"
    RIGHT_KNEE = "right knee"
    RIGHT_ANKLE = "right ankle"
    LEFT_HIP = "left hip"
    LEFT_KNEE = "left knee"
    LEFT_ANKLE = "left ankle"

    @property
    def channel(self) -> int:
        return BODY_PARTS.index(self)


BODY_PARTS: Tuple[BodyPart, ...] = tuple(BodyPart)
NUM_PARTS = len(BODY_PARTS)

# Limb segments shared by every decoded person. The affinity tensor holds one
# (x, y) channel pair per edge, in this order.
SKELETON_TOPOLOGY: Tuple[Tuple[BodyPart, BodyPart], ...] = (
    (BodyPart.TOP, BodyPart.NECK),
    (BodyPart.NECK, BodyPart.RIGHT_SHOULDER),
    (BodyPart.NECK, BodyPart.LEFT_SHOULDER),
    (BodyPart.LEFT_WRIST, BodyPart.LEFT_ELBOW),
    (BodyPart.LEFT_ELBOW, BodyPart.LEFT_SHOULDER),
    (BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER),
    (BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_ELBOW),
    (BodyPart.RIGHT_ELBOW, BodyPart.RIGHT_WRIST),
    (BodyPart.LEFT_SHOULDER, BodyPart.LEFT_HIP),
    (BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP),
    (BodyPart.RIGHT_HIP, BodyPart.RIGHT_SHOULDER),
    (BodyPart.LEFT_HIP, BodyPart.LEFT_KNEE),
    (BodyPart.LEFT_KNEE, BodyPart.LEFT_ANKLE),
    (BodyPart.RIGHT_HIP, BodyPart.RIGHT_KNEE),
    (BodyPart.RIGHT_KNEE, BodyPart.RIGHT_ANKLE),
)

NUM_AFFINITY_CHANNELS = 2 * len(SKELETON_TOPOLOGY)


def edge_indices() -> Tuple[Tuple[int, int], ...]:
    """Topology edges as (from, to) channel indices."""
    return tuple((a.channel, b.channel) for a, b in SKELETON_TOPOLOGY)


def affinity_channels(edge: int) -> Tuple[int, int]:
    """Returns the (x, y) affinity channels for the edge at position `edge`."""
    return 2 * edge, 2 * edge + 1
