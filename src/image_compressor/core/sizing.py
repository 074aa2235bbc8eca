"""Helpers for the boundary between the UI and the pipeline."""

import math
import posixpath
from typing import Optional, Tuple, Union

from .models import OutputFormat

FormatLike = Union[OutputFormat, str]

# The quality slider never sends a true zero to the encoder
MIN_UI_QUALITY = 0.01
DEFAULT_STEM = "image"


def quality_from_ui(percent: float, format: FormatLike) -> float:
    """
    Convert a 0-100 slider value into the pipeline's quality scale.

    PNG is lossless, so it always maps to 1.0.
    """
    if OutputFormat(format) is OutputFormat.PNG:
        return 1.0
    return min(max(percent / 100, MIN_UI_QUALITY), 1.0)


def locked_dimensions(
    natural_width: int,
    natural_height: int,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Complete a target size so it keeps the natural aspect ratio.

    Exactly one of ``width`` or ``height`` is expected. The partner value is
    rounded to the nearest pixel and is never smaller than 1.
    """
    if (width is None) == (height is None):
        raise ValueError("Provide exactly one of width or height")
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(
            f"Natural size must be positive, got {natural_width}x{natural_height}"
        )

    if width is not None:
        return width, max(1, round(width * natural_height / natural_width))
    return max(1, round(height * natural_width / natural_height)), height


def aspect_ratio_text(width: int, height: int) -> str:
    """Reduced aspect ratio such as ``"4:3"``; empty for degenerate sizes."""
    if width <= 0 or height <= 0:
        return ""
    divisor = math.gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def format_bytes(size: float) -> str:
    """Human readable byte count: ``"512 B"``, ``"1.50 KB"``, ``"12 MB"``."""
    if not isinstance(size, (int, float)) or not math.isfinite(size) or size < 0:
        return "-"
    units = ["B", "KB", "MB", "GB"]
    exponent = 0
    value = float(size)
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    decimals = 0 if value > 9 else 2
    return f"{value:.{decimals}f} {units[exponent]}"


def savings_percent(original_size: int, output_size: int) -> float:
    """Percentage saved relative to the original; 0.0 when unknown."""
    if original_size <= 0:
        return 0.0
    return (1 - output_size / original_size) * 100


def suggested_filename(original_filename: Optional[str], format: FormatLike) -> str:
    """
    Derive a download name from the original's stem and the new extension.

    Directory components are dropped, whether written with forward or
    backward slashes.
    """
    name = (original_filename or "").replace("\\", "/")
    base = posixpath.basename(name)
    stem, _ = posixpath.splitext(base)
    if not stem or stem.startswith("."):
        stem = stem.lstrip(".") or DEFAULT_STEM
    return f"{stem}.{OutputFormat(format).extension}"
