# heatmap_pose_engine/heatmap_pose/decoding/affinity_matcher.py
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import numpy as np
from ..common.skeleton import affinity_channels, edge_indices
from .heatmap_decoder import as_grid
from .peak_extractor import Peak

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartPair:
    """An accepted connection between two peaks along one topology edge."""

    edge: int
    peak_a: Peak
    peak_b: Peak
    score: float


def grid_position(peak: Peak, shape: Tuple[int, int]) -> Tuple[float, float]:
    """The peak's (col, row) position in a grid of the given (height, width)."""
    height, width = shape
    return peak.x * width - 0.5, peak.y * height - 0.5


def sample_cells(start, end, num_samples: int, shape: Tuple[int, int]):
    """Rows and cols of `num_samples` evenly spaced points from start to end, inclusive."""
    height, width = shape
    steps = np.linspace(0.0, 1.0, num_samples)
    xs = start[0] + steps * (end[0] - start[0])
    ys = start[1] + steps * (end[1] - start[1])
    cols = np.clip(np.rint(xs).astype(int), 0, width - 1)
    rows = np.clip(np.rint(ys).astype(int), 0, height - 1)
    return rows, cols


class PartAffinityMatcher:
    """
    Greedy per-edge pairing of candidate peaks scored by the affinity field.

    The affinity of a pair is the sum, over points sampled along the segment
    between the two peaks, of the field vector projected onto the segment's
    unit direction. Pairs below `pair_threshold` are dropped before sorting;
    the rest are consumed greedily in descending score, so each peak is used
    at most once per edge. The result is not a global optimum.
    """

    def __init__(self, pair_threshold: Optional[float] = None, num_samples: int = 10,
                 edges: Optional[Sequence[Tuple[int, int]]] = None):
        if num_samples < 2:
            raise ValueError(f"num_samples must be >= 2, got {num_samples}")
        self.pair_threshold = pair_threshold
        self.num_samples = num_samples
        self.edges = tuple(edges) if edges is not None else edge_indices()

    def affinity(self, field: np.ndarray, edge: int, peak_a: Peak, peak_b: Peak) -> float:
        shape = field.shape[:2]
        start, end = grid_position(peak_a, shape), grid_position(peak_b, shape)
        dx, dy = end[0] - start[0], end[1] - start[1]
        norm = float(np.hypot(dx, dy))
        if norm < 1e-6:
            return 0.0

        rows, cols = sample_cells(start, end, self.num_samples, shape)
        channel_x, channel_y = affinity_channels(edge)
        projected = field[rows, cols, channel_x] * (dx / norm) + field[rows, cols, channel_y] * (dy / norm)
        return float(np.sum(projected))

    def match_edge(self, field: np.ndarray, edge: int,
                   candidates_a: List[Peak], candidates_b: List[Peak]) -> List[PartPair]:
        scored = []
        for peak_a in candidates_a:
            for peak_b in candidates_b:
                score = self.affinity(field, edge, peak_a, peak_b)
                if self.pair_threshold is not None and score < self.pair_threshold:
                    continue
                scored.append(PartPair(edge=edge, peak_a=peak_a, peak_b=peak_b, score=score))

        # Stable sort: equal scores keep cross-product order.
        scored.sort(key=lambda pair: pair.score, reverse=True)

        used_a, used_b = set(), set()
        accepted = []
        for pair in scored:
            if pair.peak_a.index in used_a or pair.peak_b.index in used_b:
                continue
            used_a.add(pair.peak_a.index)
            used_b.add(pair.peak_b.index)
            accepted.append(pair)
        return accepted

    def match(self, peaks: List[List[Peak]], affinity_field: np.ndarray) -> List[PartPair]:
        """Accepted pairs for every edge, in edge order then descending score."""
        field = as_grid(affinity_field, 2 * len(self.edges))
        pairs = []
        for edge, (part_a, part_b) in enumerate(self.edges):
            pairs.extend(self.match_edge(field, edge, peaks[part_a], peaks[part_b]))
        logger.debug("Accepted %d part pairs over %d edges", len(pairs), len(self.edges))
        return pairs
