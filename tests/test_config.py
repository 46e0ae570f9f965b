"""YAML configuration loading."""
from pathlib import Path

import pytest

from heatmap_pose.common.config import PoseConfig, load_config
from heatmap_pose.common.enums import LogLevel, MergeConflictPolicy, ModelKind
from heatmap_pose.common.errors import ConfigError
from heatmap_pose.common.options import MultiPerson, SinglePerson
from heatmap_pose.common.skeleton import BodyPart

MINIMAL = """
model:
  path: models/cpm.tflite
  kind: cpm
  input_width: 192
  input_height: 192
"""


def write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


class TestLoadConfig:

    def test_minimal_config_uses_defaults(self, tmp_path):
        config = load_config(write(tmp_path, MINIMAL))

        assert config.model.kind == ModelKind.CPM
        assert config.model.input_size == (192, 192)
        assert config.model.layout == "NCHW"
        assert config.camera.source == 0
        assert config.log_level == LogLevel.INFO
        assert config.pose.human_type == "single"
        assert config.pose.part_threshold == 0.1
        assert config.pose.pair_threshold == 3.4

    def test_sample_config_in_repository_is_valid(self):
        config = load_config(str(Path(__file__).resolve().parents[1] / "config.yaml"))

        assert config.model.kind == ModelKind.OPENPOSE
        assert isinstance(config.pose.postprocess_options().human_type, MultiPerson)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "absent.yaml"))

    def test_unparsable_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="parse"):
            load_config(write(tmp_path, "model: [unclosed"))

    @pytest.mark.parametrize("text", [
        "",
        MINIMAL.replace("input_width: 192", "input_width: 0"),
        MINIMAL + "pose:\n  nms_filter_size: -2\n",
        MINIMAL + "pose:\n  body_part: tail\n",
    ])
    def test_invalid_values(self, tmp_path, text):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(write(tmp_path, text))


class TestPoseConfig:

    def test_single_person_options(self):
        options = PoseConfig(body_part="neck").postprocess_options()

        assert isinstance(options.human_type, SinglePerson)
        assert options.body_part == BodyPart.NECK
        assert options.part_threshold == 0.1

    def test_multi_person_options_carry_every_knob(self):
        config = PoseConfig(human_type="multi", pair_threshold=None, nms_filter_size=2, max_human_number=4,
                            merge_conflict_policy="REASSIGN", part_threshold=None)
        human_type = config.postprocess_options().human_type

        assert human_type == MultiPerson(pair_threshold=None, nms_filter_size=2, max_human_number=4,
                                         merge_conflict_policy=MergeConflictPolicy.REASSIGN)
        assert config.postprocess_options().part_threshold is None

    def test_crop_area_becomes_preprocess_option(self):
        config = PoseConfig(crop_area={"x": 10, "y": 20, "width": 100, "height": 50})
        assert config.preprocess_options().crop_area.max_x == 110
