"""Resampler stage: draw the cropped region at the target size."""

from typing import Optional, Tuple

from PIL import Image

from .error_handling import with_error_handling
from .exceptions import ResampleError, ResampleErrorKind
from .logging_config import get_logger
from .models import DEFAULT_MAX_OUTPUT_PIXELS, PixelBuffer, ResolvedPlan, SourceImage

logger = get_logger("image-compressor.resampler")

# Bilinear with support widened by the scale factor: area-weighted when
# shrinking, plain bilinear when enlarging.
RESAMPLE_FILTER = Image.Resampling.BILINEAR


def draw_scaled(
    surface: Image.Image,
    box: Tuple[float, float, float, float],
    size: Tuple[int, int],
    reducing_gap: Optional[float] = None,
) -> Image.Image:
    """
    Scale the ``box`` region of an RGBA surface to exactly ``size``.

    Interpolation happens in premultiplied alpha so transparent pixels do not
    bleed their color into opaque neighbours.
    """
    premultiplied = surface.convert("RGBa")
    scaled = premultiplied.resize(
        size, resample=RESAMPLE_FILTER, box=box, reducing_gap=reducing_gap
    )
    return scaled.convert("RGBA")


@with_error_handling(ResampleError, ResampleErrorKind.OUT_OF_MEMORY, translate=(MemoryError,))
def resample(
    source: SourceImage,
    plan: ResolvedPlan,
    reducing_gap: Optional[float] = None,
    max_output_pixels: int = DEFAULT_MAX_OUTPUT_PIXELS,
) -> PixelBuffer:
    """
    Produce a ``PixelBuffer`` whose size is exactly ``plan.target``.

    Raises:
        ResampleError: OUT_OF_MEMORY when the target exceeds
            ``max_output_pixels`` or the allocation fails
    """
    size = (plan.target.width, plan.target.height)
    if size[0] * size[1] > max_output_pixels:
        raise ResampleError(
            ResampleErrorKind.OUT_OF_MEMORY,
            f"{size[0]}x{size[1]} exceeds the limit of {max_output_pixels} pixels",
        )

    logger.debug(
        f"Resampling box {plan.box} to {size[0]}x{size[1]} "
        f"(sx={plan.sx:.4f}, sy={plan.sy:.4f})"
    )
    scaled = draw_scaled(source.image, plan.box, size, reducing_gap=reducing_gap)
    return PixelBuffer(width=scaled.width, height=scaled.height, image=scaled)
