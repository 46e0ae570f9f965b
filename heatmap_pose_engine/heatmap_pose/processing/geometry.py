# heatmap_pose_engine/heatmap_pose/processing/geometry.py
import math
from typing import Optional, Tuple
from ..common.errors import InvalidGeometryError
from ..common.options import Rect

Size = Tuple[float, float]
Point = Tuple[float, float]

def _require_finite(what: str, *values: float):
    if not all(math.isfinite(v) for v in values):
        raise InvalidGeometryError(f"{what} has non-finite coordinates: {values}")

def _rect_values(rect: Rect) -> Tuple[float, float, float, float]:
    return rect.x, rect.y, rect.width, rect.height

class GeometryMapper:
    """
    Maps between frame pixels, the model's fixed input space and an overlay.

    Crops are aspect-fill: the crop always has the model input's aspect ratio,
    so a uniform resize fills the input completely. Every method is pure.
    """

    def __init__(self, input_size: Size):
        in_w, in_h = input_size
        _require_finite("Model input size", in_w, in_h)
        if in_w <= 0 or in_h <= 0:
            raise InvalidGeometryError(f"Model input size must be positive, got {input_size}")
        self.input_size = (in_w, in_h)
        self.aspect = in_w / in_h

    def crop_rect(self, frame_size: Size, target_rect: Optional[Rect] = None) -> Rect:
        """Returns the source-pixel crop that fills the model input."""
        frame_w, frame_h = frame_size
        _require_finite("Frame size", frame_w, frame_h)
        if frame_w <= 0 or frame_h <= 0:
            raise InvalidGeometryError(f"Frame has zero area: {frame_size}")

        target = target_rect or Rect(width=frame_w, height=frame_h)
        _require_finite("Crop target", *_rect_values(target))
        if target.width <= 0 or target.height <= 0:
            raise InvalidGeometryError(f"Crop target has zero area: {target}")

        x0, y0 = max(target.x, 0.0), max(target.y, 0.0)
        x1, y1 = min(target.max_x, frame_w), min(target.max_y, frame_h)
        if x1 <= x0 or y1 <= y0:
            raise InvalidGeometryError(f"Crop target {target} lies outside the {frame_w}x{frame_h} frame")

        region_w, region_h = x1 - x0, y1 - y0
        if region_w / region_h > self.aspect:
            crop_w, crop_h = region_h * self.aspect, region_h
        else:
            crop_w, crop_h = region_w, region_w / self.aspect

        return Rect(
            x=x0 + (region_w - crop_w) / 2.0,
            y=y0 + (region_h - crop_h) / 2.0,
            width=crop_w,
            height=crop_h,
        )

    @staticmethod
    def scale_rect(rect: Rect, ratio: float) -> Rect:
        """Scales a view-space rectangle into pixel space."""
        _require_finite("Scaled rectangle", ratio, *_rect_values(rect))
        if ratio <= 0:
            raise InvalidGeometryError(f"Scaling ratio must be positive, got {ratio}")
        return Rect(x=rect.x * ratio, y=rect.y * ratio,
                    width=rect.width * ratio, height=rect.height * ratio)

    @staticmethod
    def to_source(point: Point, crop: Rect) -> Point:
        """Maps a normalized model-output point back into source pixels."""
        _require_finite("Point and crop", *point, *_rect_values(crop))
        if crop.width <= 0 or crop.height <= 0:
            raise InvalidGeometryError(f"Crop has zero area: {crop}")
        x, y = point
        return crop.x + x * crop.width, crop.y + y * crop.height

    @classmethod
    def to_overlay(cls, point: Point, crop: Rect, overlay_size: Size,
                   source_rect: Optional[Rect] = None) -> Point:
        """
        Maps a normalized model-output point into overlay coordinates.

        `source_rect` is the part of the frame the overlay displays; it defaults
        to the crop itself.
        """
        overlay_w, overlay_h = overlay_size
        _require_finite("Overlay size", overlay_w, overlay_h)
        if overlay_w <= 0 or overlay_h <= 0:
            raise InvalidGeometryError(f"Overlay has zero area: {overlay_size}")
        shown = source_rect or crop
        _require_finite("Displayed region", *_rect_values(shown))
        if shown.width <= 0 or shown.height <= 0:
            raise InvalidGeometryError(f"Displayed region has zero area: {shown}")

        src_x, src_y = cls.to_source(point, crop)
        return ((src_x - shown.x) / shown.width * overlay_w,
                (src_y - shown.y) / shown.height * overlay_h)
