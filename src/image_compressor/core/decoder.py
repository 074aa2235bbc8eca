"""Decoder stage: opaque source bytes to an RGBA raster surface."""

import io
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .error_handling import with_error_handling
from .exceptions import DecodeError, DecodeErrorKind
from .logging_config import get_logger
from .models import SourceImage

logger = get_logger("image-compressor.decoder")

# Look like images to a file picker but are not rasters Pillow decodes.
REJECTED_MIME_TYPES = frozenset({"application/pdf", "image/svg+xml"})

# Integer modes Pillow uses for 16-bit samples; convert() would clip them
HIGH_BIT_DEPTH_MODES = frozenset({"I", "I;16", "I;16L", "I;16B", "I;16N"})


def _check_declared_type(declared_mime_type: Optional[str]) -> None:
    if not declared_mime_type:
        return
    mime = declared_mime_type.split(";")[0].strip().lower()
    if mime == "application/pdf":
        raise DecodeError(
            DecodeErrorKind.UNSUPPORTED,
            "PDF import is not supported yet. Please select an image format.",
        )
    if mime in REJECTED_MIME_TYPES or not mime.startswith("image/"):
        raise DecodeError(
            DecodeErrorKind.UNSUPPORTED, f"declared type {mime!r} is not a raster image"
        )


def _to_rgba(image: Image.Image) -> Image.Image:
    """Normalize any mode to RGBA8, scaling 16-bit samples instead of clipping."""
    if image.mode in HIGH_BIT_DEPTH_MODES:
        samples = np.clip(np.asarray(image), 0, 0xFFFF)
        image = Image.fromarray((samples >> 8).astype(np.uint8))
    return image.convert("RGBA")


def _open_first_frame(
    data: bytes, max_image_pixels: Optional[int]
) -> Tuple[Image.Image, str]:
    """Open and fully load the first frame, then release the input stream."""
    with io.BytesIO(data) as stream:
        with Image.open(stream) as image:
            # Header is parsed lazily; refuse oversized images before allocating
            width, height = image.size
            if max_image_pixels is not None and width * height > max_image_pixels:
                raise DecodeError(
                    DecodeErrorKind.UNSUPPORTED,
                    f"{width}x{height} exceeds the limit of {max_image_pixels} pixels",
                )
            image.load()
            detected = image.format or "unknown"
            return _to_rgba(image), detected


@with_error_handling(DecodeError, DecodeErrorKind.CORRUPT)
def decode(
    data: bytes,
    declared_mime_type: Optional[str] = None,
    max_image_pixels: Optional[int] = None,
) -> SourceImage:
    """
    Decode source bytes into an immutable ``SourceImage``.

    Any raster Pillow can open is accepted. Animated formats use their first
    frame. Palette, grayscale and 16-bit inputs are normalized to RGBA8.

    Args:
        data: Encoded image bytes as supplied by the caller
        declared_mime_type: MIME type reported by the file picker, if any
        max_image_pixels: Optional decompression-bomb limit

    Returns:
        Decoded ``SourceImage``

    Raises:
        DecodeError: UNSUPPORTED for non-image input, CORRUPT for damaged or
            zero-sized input
    """
    _check_declared_type(declared_mime_type)

    if not data:
        raise DecodeError(DecodeErrorKind.CORRUPT, "empty input")

    try:
        image, source_format = _open_first_frame(data, max_image_pixels)
    except UnidentifiedImageError as exc:
        raise DecodeError(DecodeErrorKind.UNSUPPORTED, str(exc)) from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(DecodeErrorKind.UNSUPPORTED, str(exc)) from exc
    except (OSError, SyntaxError, ValueError, EOFError) as exc:
        raise DecodeError(DecodeErrorKind.CORRUPT, str(exc)) from exc

    width, height = image.size
    if width <= 0 or height <= 0:
        raise DecodeError(DecodeErrorKind.CORRUPT, f"zero-sized image {width}x{height}")

    logger.debug(f"Decoded {source_format} image {width}x{height}")
    return SourceImage(
        width=width, height=height, image=image, source_format=source_format
    )
