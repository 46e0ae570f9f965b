"""
Synthetic model outputs for decoding tests.

Heatmaps are [H, W, parts] grids with one sharp peak per part and person;
affinity fields are painted with the limb's unit direction on exactly the
cells the matcher samples, so a correct pair scores `NUM_SAMPLES`.
"""
from typing import Dict, List, Optional, Tuple
import numpy as np

from heatmap_pose.common.skeleton import NUM_AFFINITY_CHANNELS, NUM_PARTS, SKELETON_TOPOLOGY, BodyPart
from heatmap_pose.decoding.affinity_matcher import sample_cells
from heatmap_pose.inference.engine import InferenceEngine

GRID_HEIGHT = 32
GRID_WIDTH = 40
NUM_SAMPLES = 10

# (col, row) of every part for a standing person on the left half of the grid.
LEFT_PERSON: Dict[BodyPart, Tuple[int, int]] = {
    BodyPart.TOP: (6, 2),
    BodyPart.NECK: (6, 5),
    BodyPart.RIGHT_SHOULDER: (4, 6),
    BodyPart.RIGHT_ELBOW: (3, 10),
    BodyPart.RIGHT_WRIST: (2, 14),
    BodyPart.LEFT_SHOULDER: (8, 6),
    BodyPart.LEFT_ELBOW: (9, 10),
    BodyPart.LEFT_WRIST: (10, 14),
    BodyPart.RIGHT_HIP: (5, 16),
    BodyPart.RIGHT_KNEE: (5, 21),
    BodyPart.RIGHT_ANKLE: (5, 26),
    BodyPart.LEFT_HIP: (7, 16),
    BodyPart.LEFT_KNEE: (7, 21),
    BodyPart.LEFT_ANKLE: (7, 26),
}


def shifted(layout: Dict[BodyPart, Tuple[int, int]], dcol: int, drow: int = 0) -> Dict[BodyPart, Tuple[int, int]]:
    return {part: (col + dcol, row + drow) for part, (col, row) in layout.items()}


RIGHT_PERSON = shifted(LEFT_PERSON, 18)


def make_heatmap(people: List[Tuple[Dict[BodyPart, Tuple[int, int]], float]],
                 height: int = GRID_HEIGHT, width: int = GRID_WIDTH, channels: int = NUM_PARTS) -> np.ndarray:
    heatmap = np.zeros((height, width, channels), dtype=np.float32)
    for layout, score in people:
        for part, (col, row) in layout.items():
            heatmap[row, col, part.channel] = score
    return heatmap


def make_affinity_field(layouts: List[Dict[BodyPart, Tuple[int, int]]],
                        height: int = GRID_HEIGHT, width: int = GRID_WIDTH) -> np.ndarray:
    field = np.zeros((height, width, NUM_AFFINITY_CHANNELS), dtype=np.float32)
    for layout in layouts:
        for edge, (part_a, part_b) in enumerate(SKELETON_TOPOLOGY):
            paint_limb(field, edge, layout[part_a], layout[part_b])
    return field


def paint_limb(field: np.ndarray, edge: int, start: Tuple[int, int], end: Tuple[int, int]):
    dx, dy = end[0] - start[0], end[1] - start[1]
    norm = float(np.hypot(dx, dy))
    rows, cols = sample_cells(start, end, NUM_SAMPLES, field.shape[:2])
    field[rows, cols, 2 * edge] = dx / norm
    field[rows, cols, 2 * edge + 1] = dy / norm


def two_people_outputs(left_score: float = 0.9, right_score: float = 0.8):
    heatmap = make_heatmap([(LEFT_PERSON, left_score), (RIGHT_PERSON, right_score)])
    field = make_affinity_field([LEFT_PERSON, RIGHT_PERSON])
    return heatmap, field


class FakeEngine(InferenceEngine):
    """Returns canned output tensors and records the input tensors it received."""

    def __init__(self, outputs: Optional[List[np.ndarray]] = None, input_size=(64, 64),
                 error: Optional[Exception] = None, grayscale: bool = False, normalized: bool = False):
        self.outputs = outputs or []
        self.input_size = input_size
        self.error = error
        self.grayscale = grayscale
        self.normalized = normalized
        self.inputs = []
        self.closed = False

    def infer(self, tensor: np.ndarray) -> List[np.ndarray]:
        self.inputs.append(tensor)
        if self.error is not None:
            raise self.error
        return [out[np.newaxis] for out in self.outputs]

    def close(self):
        self.closed = True


def expected_position(col: int, row: int, width: int = GRID_WIDTH, height: int = GRID_HEIGHT):
    return (col + 0.5) / width, (row + 0.5) / height

