# heatmap_pose_engine/heatmap_pose/visualization/visualizer.py
import cv2
import numpy as np
from ..common.config import VisualizationConfig
from ..common.errors import InvalidGeometryError
from ..common.models import Keypoint, PoseResult
from ..common.options import Rect
from ..processing.geometry import GeometryMapper

class Visualizer:
    """Draws decoded skeletons and a HUD onto the camera frame."""

    def __init__(self, config: VisualizationConfig):
        self.config = config
        self.font = cv2.FONT_HERSHEY_SIMPLEX

    def render(self, frame: np.ndarray, result: PoseResult, current_fps: float) -> np.ndarray:
        """Renders the pose results and HUD onto a copy of the frame."""
        output_frame = frame.copy()

        # Adaptive Level of Detail (LOD)
        lod_reduced = self.config.adaptive_lod and current_fps < self.config.lod_threshold_fps

        if self.config.draw_landmarks and (result.crop is not None or result.roi_bbox is not None):
            self._draw_skeletons(output_frame, result, lod_reduced)

        if self.config.draw_hud:
            self._draw_hud(output_frame, result, current_fps, lod_reduced)

        return output_frame

    @staticmethod
    def source_crop(result: PoseResult) -> Rect:
        """The crop the tensor was cut from; the rounded ROI box only when no crop was recorded."""
        if result.crop is not None:
            return result.crop
        x0, y0, x1, y1 = result.roi_bbox
        return Rect(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

    def _draw_skeletons(self, frame: np.ndarray, result: PoseResult, lod_reduced: bool):
        crop = self.source_crop(result)
        height, width = frame.shape[:2]
        shown = Rect(width=width, height=height)

        def to_pixel(keypoint: Keypoint):
            x, y = GeometryMapper.to_overlay(keypoint.position, crop, (width, height), shown)
            return int(round(x)), int(round(y))

        line_color = self.config.line_color
        if lod_reduced:
            line_color = tuple(c // 2 for c in line_color)  # Dim connections on low perf

        try:
            for line in result.output.lines:
                cv2.line(frame, to_pixel(line.start), to_pixel(line.end),
                         line_color, self.config.line_thickness, cv2.LINE_AA)
            for keypoint in result.output.keypoints:
                cv2.circle(frame, to_pixel(keypoint), self.config.keypoint_radius,
                           self.config.keypoint_color, -1, cv2.LINE_AA)
        except InvalidGeometryError:
            # A degenerate ROI has nothing meaningful to draw.
            return

    def _draw_hud(self, frame: np.ndarray, result: PoseResult, fps: float, lod_reduced: bool):
        """Draws the Heads-Up Display with performance metrics."""
        hud_elements = [
            f"FPS: {fps:.1f}",
            f"Processing: {result.processing_time_ms:.1f} ms",
            f"State: {result.status.value}",
            f"Humans: {len(result.output.humans)}",
        ]
        if lod_reduced:
            hud_elements.append("LOD: REDUCED")

        for i, text in enumerate(hud_elements):
            cv2.putText(frame, text, (10, 30 + i * 30), self.font, 0.7, (240, 240, 240), 2, cv2.LINE_AA)
