# heatmap_pose_engine/heatmap_pose/common/enums.py
from enum import Enum

class PoseState(str, Enum):
    """Outcome of processing a single frame."""
    SUCCESS = "SUCCESS"
    NO_HUMAN = "NO_HUMAN"
    INPUT_ERROR = "INPUT_ERROR"
    ENGINE_ERROR = "ENGINE_ERROR"
    DROPPED = "DROPPED"

class LogLevel(str, Enum):
    """Defines logging levels accepted by the configuration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class MergeConflictPolicy(str, Enum):
    """
    What the assembler does when joining two people would duplicate a part.

    KEEP_SEPARATE leaves both people untouched, so a conflicting link never
    moves a keypoint between people. REASSIGN applies the higher-total-confidence
    rule: the stronger person takes the linking keypoint if it has that part free.
    KEEP_SEPARATE is the default because it never rewrites an already
    assembled person on the strength of a single pair.
    """
    KEEP_SEPARATE = "KEEP_SEPARATE"
    REASSIGN = "REASSIGN"

class ModelKind(str, Enum):
    CPM = "cpm"
    OPENPOSE = "openpose"
