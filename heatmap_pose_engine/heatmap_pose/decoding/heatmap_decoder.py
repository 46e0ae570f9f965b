# heatmap_pose_engine/heatmap_pose/decoding/heatmap_decoder.py
import logging
import numpy as np
from ..common.models import Human, Keypoint, PoseEstimationOutput
from ..common.skeleton import BODY_PARTS, NUM_PARTS

logger = logging.getLogger(__name__)


def as_grid(tensor: np.ndarray, min_channels: int) -> np.ndarray:
    """Squeezes a leading batch dimension and checks the [H, W, C] layout."""
    grid = np.asarray(tensor, dtype=np.float32)
    if grid.ndim == 4 and grid.shape[0] == 1:
        grid = grid[0]
    if grid.ndim != 3 or grid.shape[2] < min_channels or 0 in grid.shape[:2]:
        raise ValueError(f"Expected a [H, W, >={min_channels}] tensor, got shape {np.shape(tensor)}")
    return grid


def cell_center(row: int, col: int, height: int, width: int):
    """Normalized (x, y) of a grid cell's center."""
    return (col + 0.5) / width, (row + 0.5) / height


class HeatmapDecoder:
    """Single-person decoding: one global maximum per part channel."""

    def decode(self, heatmap: np.ndarray) -> Human:
        grid = as_grid(heatmap, NUM_PARTS)[:, :, :NUM_PARTS]
        height, width, _ = grid.shape

        # argmax returns the first maximum, so ties resolve in row-major order.
        flat_indices = np.argmax(grid.reshape(-1, NUM_PARTS), axis=0)
        keypoints = []
        for part, flat_index in zip(BODY_PARTS, flat_indices):
            row, col = divmod(int(flat_index), width)
            x, y = cell_center(row, col, height, width)
            keypoints.append(Keypoint(part=part, x=x, y=y, score=float(grid[row, col, part.channel])))

        return Human(keypoints=tuple(keypoints))

    def __call__(self, heatmap: np.ndarray) -> PoseEstimationOutput:
        human = self.decode(heatmap)
        logger.debug("Single-person decode: mean score %.3f", human.score / NUM_PARTS)
        return PoseEstimationOutput(humans=(human,))
