"""Geometry resolver: clamp the crop and derive the sampling plan."""

import math
from typing import Optional, Tuple

from .exceptions import GeometryError, GeometryErrorKind
from .models import CropRect, ResolvedPlan, TargetDimensions


def clamp_crop(source_dims: Tuple[int, int], crop_rect: Optional[CropRect]) -> CropRect:
    """
    Intersect a crop rectangle with the source bounds.

    Clamping never expands the rectangle. An absent crop selects the whole
    source.

    Args:
        source_dims: ``(width, height)`` of the source image
        crop_rect: Requested crop in source-pixel coordinates, or None

    Returns:
        The clamped crop rectangle

    Raises:
        GeometryError: EMPTY_CROP if nothing of the rectangle is left
    """
    source_width, source_height = source_dims
    if crop_rect is None:
        return CropRect(x=0, y=0, width=source_width, height=source_height)

    values = (crop_rect.x, crop_rect.y, crop_rect.width, crop_rect.height)
    if not all(math.isfinite(v) for v in values):
        raise GeometryError(GeometryErrorKind.EMPTY_CROP, f"non-finite crop {values}")

    left = max(crop_rect.x, 0.0)
    top = max(crop_rect.y, 0.0)
    right = min(crop_rect.x + crop_rect.width, float(source_width))
    bottom = min(crop_rect.y + crop_rect.height, float(source_height))

    width = right - left
    height = bottom - top
    if width <= 0 or height <= 0:
        raise GeometryError(
            GeometryErrorKind.EMPTY_CROP,
            f"crop {values} does not overlap a {source_width}x{source_height} source",
        )
    return CropRect(x=left, y=top, width=width, height=height)


def resolve(
    source_dims: Tuple[int, int],
    crop_rect: Optional[CropRect],
    target: TargetDimensions,
) -> ResolvedPlan:
    """Combine crop and target size into a ``ResolvedPlan``.

    The aspect ratio is not enforced: ``sx`` and ``sy`` are independent.
    """
    if target.width <= 0 or target.height <= 0:
        raise GeometryError(
            GeometryErrorKind.INVALID_TARGET,
            f"target {target.width}x{target.height} must be at least 1x1",
        )

    crop = clamp_crop(source_dims, crop_rect)
    return ResolvedPlan(
        crop=crop,
        target=target,
        sx=target.width / crop.width,
        sy=target.height / crop.height,
    )
