# heatmap_pose_engine/heatmap_pose/decoding/postprocess.py
from ..common.models import Human, PoseEstimationOutput
from ..common.options import PostprocessOptions


def filter_human(human: Human, options: PostprocessOptions) -> Human:
    """Drops keypoints below `part_threshold` and, with `body_part` set, every other part."""
    keypoints = []
    for keypoint in human.keypoints:
        if keypoint is not None:
            if options.part_threshold is not None and keypoint.score < options.part_threshold:
                keypoint = None
            elif options.body_part is not None and keypoint.part != options.body_part:
                keypoint = None
        keypoints.append(keypoint)
    return Human(keypoints=tuple(keypoints))


def apply_postprocess(output: PoseEstimationOutput, options: PostprocessOptions) -> PoseEstimationOutput:
    if options.part_threshold is None and options.body_part is None:
        return output
    return PoseEstimationOutput(humans=tuple(filter_human(human, options) for human in output.humans))
