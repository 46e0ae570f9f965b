"""Frame-to-tensor conversion tests."""
import numpy as np
import pytest

from heatmap_pose.common.errors import InputConstructionFailed
from heatmap_pose.common.options import PreprocessOptions, Rect
from heatmap_pose.inference.preprocess import FramePreprocessor


class TestFramePreprocessor:

    def test_default_crop_is_centered_aspect_fill(self, frame):
        tensor, crop = FramePreprocessor((64, 64))(frame, PreprocessOptions())

        assert tensor.shape == (1, 64, 64, 3)
        assert tensor.dtype == np.float32
        assert crop == Rect(x=8.0, y=0.0, width=48.0, height=48.0)

    def test_bgr_is_converted_to_rgb(self):
        bgr = np.zeros((32, 32, 3), dtype=np.uint8)
        bgr[:, :, 0] = 255  # blue
        tensor, _ = FramePreprocessor((16, 16))(bgr, PreprocessOptions())

        assert np.all(tensor[0, :, :, 2] == 255.0)
        assert np.all(tensor[0, :, :, 0] == 0.0)

    def test_normalized_input_is_scaled_to_unit_range(self, frame):
        tensor, _ = FramePreprocessor((16, 16), normalized=True)(frame, PreprocessOptions())
        assert tensor.max() == pytest.approx(127 / 255.0)

    def test_grayscale_input_has_one_channel(self, frame):
        tensor, _ = FramePreprocessor((16, 12), grayscale=True)(frame, PreprocessOptions())
        assert tensor.shape == (1, 12, 16, 1)

    @pytest.mark.parametrize("shape", [(32, 32), (32, 32, 1), (32, 32, 4)])
    def test_accepts_gray_and_bgra_frames(self, shape):
        tensor, _ = FramePreprocessor((16, 16))(np.zeros(shape, dtype=np.uint8), PreprocessOptions())
        assert tensor.shape == (1, 16, 16, 3)

    def test_crop_area_selects_region(self):
        frame = np.zeros((32, 64, 3), dtype=np.uint8)
        frame[:, 32:] = 200
        options = PreprocessOptions(crop_area=Rect(x=32, y=0, width=32, height=32))

        tensor, crop = FramePreprocessor((16, 16))(frame, options)
        assert np.all(tensor == 200.0)
        assert crop.x == 32.0

    @pytest.mark.parametrize("frame", [
        np.zeros((8, 8, 3), dtype=np.float32),
        np.zeros((8, 8, 2), dtype=np.uint8),
        np.zeros((2, 8, 8, 3), dtype=np.uint8),
        [[0, 0], [0, 0]],
    ])
    def test_unsupported_formats_rejected(self, frame):
        with pytest.raises(InputConstructionFailed):
            FramePreprocessor((16, 16))(frame, PreprocessOptions())

    def test_crop_outside_frame_rejected(self, frame):
        options = PreprocessOptions(crop_area=Rect(x=500, y=500, width=10, height=10))
        with pytest.raises(InputConstructionFailed):
            FramePreprocessor((16, 16))(frame, options)
