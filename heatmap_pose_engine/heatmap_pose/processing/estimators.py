# heatmap_pose_engine/heatmap_pose/processing/estimators.py
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple
import numpy as np
from ..common.enums import ModelKind
from ..common.errors import EngineInferenceFailed, PoseEstimationError
from ..common.models import PoseEstimationOutput
from ..common.options import MultiPerson, PoseEstimationInput, PostprocessOptions
from ..common.skeleton import NUM_AFFINITY_CHANNELS, NUM_PARTS
from ..decoding.affinity_matcher import PartAffinityMatcher
from ..decoding.heatmap_decoder import HeatmapDecoder, as_grid
from ..decoding.peak_extractor import PeakExtractor
from ..decoding.person_assembler import PersonAssembler
from ..decoding.postprocess import apply_postprocess
from ..inference.engine import InferenceEngine
from ..inference.preprocess import FramePreprocessor

logger = logging.getLogger(__name__)


class PoseEstimator(ABC):
    """
    One decoding strategy bound to one inference engine.

    `inference` raises `InputConstructionFailed` when the frame cannot be
    turned into the engine's input and `EngineInferenceFailed` when the engine
    fails or returns tensors of the wrong shape. Once valid tensors exist,
    decoding always succeeds, possibly with zero humans.
    """

    def __init__(self, engine: InferenceEngine):
        self.engine = engine
        self.preprocessor = FramePreprocessor(engine.input_size, engine.grayscale, engine.normalized)
        self.heatmap_decoder = HeatmapDecoder()

    def inference(self, pose_input: PoseEstimationInput) -> PoseEstimationOutput:
        tensor, _ = self.preprocessor(pose_input.frame, pose_input.preprocess_options)

        try:
            outputs = self.engine.infer(tensor)
        except PoseEstimationError:
            raise
        except Exception as e:
            raise EngineInferenceFailed(f"{type(e).__name__}: {e}") from e
        if not outputs:
            raise EngineInferenceFailed("Engine returned no output tensors")

        options = pose_input.postprocess_options
        output = self.decode(list(outputs), options)
        return apply_postprocess(output, options)

    @abstractmethod
    def decode(self, outputs: List[np.ndarray], options: PostprocessOptions) -> PoseEstimationOutput: ...

    def close(self):
        self.engine.close()


class CPMPoseEstimator(PoseEstimator):
    """Single-person heatmap model; always decodes exactly one person."""

    def decode(self, outputs: List[np.ndarray], options: PostprocessOptions) -> PoseEstimationOutput:
        try:
            heatmap = as_grid(outputs[0], NUM_PARTS)
        except ValueError as e:
            raise EngineInferenceFailed(str(e)) from e
        return self.heatmap_decoder(heatmap)


class OpenPosePoseEstimator(PoseEstimator):
    """Heatmap + affinity-field model; decodes one person or many depending on `human_type`."""

    def __init__(self, engine: InferenceEngine, num_samples: int = 10):
        super().__init__(engine)
        self.num_samples = num_samples

    @staticmethod
    def split_outputs(outputs: List[np.ndarray]) -> Tuple[np.ndarray, np.ndarray]:
        """Heatmap and affinity field, either as two tensors or one concatenated along channels."""
        try:
            if len(outputs) >= 2:
                return as_grid(outputs[0], NUM_PARTS), as_grid(outputs[1], NUM_AFFINITY_CHANNELS)
            combined = as_grid(outputs[0], NUM_PARTS + NUM_AFFINITY_CHANNELS)
        except ValueError as e:
            raise EngineInferenceFailed(str(e)) from e
        return combined[:, :, :NUM_PARTS], combined[:, :, -NUM_AFFINITY_CHANNELS:]

    def decode(self, outputs: List[np.ndarray], options: PostprocessOptions) -> PoseEstimationOutput:
        heatmap, affinity_field = self.split_outputs(outputs)
        if options.human_type.kind == "single":
            return self.heatmap_decoder(heatmap)
        return self.decode_multi(heatmap, affinity_field, options.human_type)

    def decode_multi(self, heatmap: np.ndarray, affinity_field: np.ndarray,
                     human_type: MultiPerson) -> PoseEstimationOutput:
        peaks = PeakExtractor(human_type.nms_filter_size, human_type.peak_threshold).extract(heatmap)
        pairs = PartAffinityMatcher(human_type.pair_threshold, self.num_samples).match(peaks, affinity_field)
        humans = PersonAssembler(human_type.max_human_number,
                                 human_type.merge_conflict_policy).assemble(pairs)
        return PoseEstimationOutput(humans=tuple(humans))


def create_estimator(kind: ModelKind, engine: InferenceEngine) -> PoseEstimator:
    """Selects the decoding strategy for a model at construction time."""
    if kind == ModelKind.CPM:
        return CPMPoseEstimator(engine)
    if kind == ModelKind.OPENPOSE:
        return OpenPosePoseEstimator(engine)
    raise ValueError(f"Unknown model kind: {kind}")
