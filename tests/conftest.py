"""Shared pytest fixtures for decoding, estimator and processor tests."""
import numpy as np
import pytest

from heatmap_pose.common.options import MultiPerson, PostprocessOptions
from fixtures import FakeEngine, LEFT_PERSON, make_heatmap, two_people_outputs


@pytest.fixture
def single_person_heatmap():
    """One sharp peak per channel at the left person's cells."""
    return make_heatmap([(LEFT_PERSON, 0.9)])


@pytest.fixture
def two_people():
    """(heatmap, affinity field) for two separated people scoring 0.9 and 0.8."""
    return two_people_outputs()


@pytest.fixture
def frame():
    return np.full((48, 64, 3), 127, dtype=np.uint8)


@pytest.fixture
def multi_options():
    return PostprocessOptions(human_type=MultiPerson(pair_threshold=5.0, nms_filter_size=1))


@pytest.fixture
def two_people_engine(two_people):
    heatmap, field = two_people
    return FakeEngine(outputs=[heatmap, field])
