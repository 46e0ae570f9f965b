# heatmap_pose_engine/heatmap_pose/decoding/peak_extractor.py
import logging
from dataclasses import dataclass
from typing import List
import numpy as np
from ..common.skeleton import BODY_PARTS, NUM_PARTS, BodyPart
from .heatmap_decoder import as_grid, cell_center

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Peak:
    """
    A candidate location for one part.

    `index` is the peak's position in its channel's row-major scan and, together
    with `part`, identifies the peak within one frame.
    """

    part: BodyPart
    index: int
    row: int
    col: int
    score: float
    x: float
    y: float

    @property
    def key(self):
        return self.part, self.index


def neighbourhood_max(grid: np.ndarray, radius: int) -> np.ndarray:
    """Per-cell maximum over the (2r+1)x(2r+1) window, excluding the cell itself."""
    height, width = grid.shape[:2]
    padded = np.pad(grid, ((radius, radius), (radius, radius), (0, 0)),
                    mode='constant', constant_values=-np.inf)
    result = np.full(grid.shape, -np.inf, dtype=grid.dtype)
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if dy == 0 and dx == 0:
                continue
            window = padded[radius + dy:radius + dy + height, radius + dx:radius + dx + width]
            np.maximum(result, window, out=result)
    return result


class PeakExtractor:
    """Multi-person candidate extraction by non-maximum suppression."""

    def __init__(self, nms_filter_size: int = 3, peak_threshold: float = 0.1):
        if nms_filter_size < 0:
            raise ValueError(f"nms_filter_size must be >= 0, got {nms_filter_size}")
        self.nms_filter_size = nms_filter_size
        self.peak_threshold = peak_threshold

    def extract(self, heatmap: np.ndarray) -> List[List[Peak]]:
        """Returns the candidate peaks of every part channel, each list in row-major order."""
        grid = as_grid(heatmap, NUM_PARTS)[:, :, :NUM_PARTS]
        height, width, _ = grid.shape

        is_peak = (grid > neighbourhood_max(grid, self.nms_filter_size)) & (grid > self.peak_threshold)

        peaks = []
        for part in BODY_PARTS:
            rows, cols = np.nonzero(is_peak[:, :, part.channel])
            channel_peaks = []
            for index, (row, col) in enumerate(zip(rows.tolist(), cols.tolist())):
                x, y = cell_center(row, col, height, width)
                channel_peaks.append(Peak(part=part, index=index, row=row, col=col,
                                          score=float(grid[row, col, part.channel]), x=x, y=y))
            peaks.append(channel_peaks)

        logger.debug("Extracted %d candidate peaks (window %d)",
                     sum(len(p) for p in peaks), 2 * self.nms_filter_size + 1)
        return peaks
