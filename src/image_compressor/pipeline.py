"""In-process entry points: raw image bytes in, encoded export out."""

from typing import Mapping, Optional, Union

from pydantic import ValidationError

from .core.encoder import parse_format
from .core.exceptions import (
    DecodeError,
    DecodeErrorKind,
    EncodeError,
    EncodeErrorKind,
    GeometryError,
    GeometryErrorKind,
)
from .core.factories import ImagePipelineFactory
from .core.models import (
    CropRect,
    EncodedResult,
    OutputFormat,
    PipelineConfig,
    ProcessingRequest,
    TargetDimensions,
)

CropLike = Union[CropRect, Mapping[str, float], None]


def build_request(
    data: bytes,
    *,
    target_width: int,
    target_height: int,
    format: Union[OutputFormat, str],
    quality: float = 0.8,
    crop: CropLike = None,
    original_filename: str = "image",
    declared_mime_type: Optional[str] = None,
) -> ProcessingRequest:
    """
    Validate caller arguments into a ``ProcessingRequest``.

    Malformed values are reported through the pipeline's error taxonomy
    rather than as pydantic validation errors.
    """
    output_format = parse_format(format)

    try:
        target = TargetDimensions(width=target_width, height=target_height)
    except ValidationError as exc:
        raise GeometryError(
            GeometryErrorKind.INVALID_TARGET,
            f"target {target_width!r}x{target_height!r} is not a pixel size",
        ) from exc

    crop_rect = None
    if crop is not None:
        try:
            crop_rect = crop if isinstance(crop, CropRect) else CropRect(**crop)
        except (ValidationError, TypeError) as exc:
            raise GeometryError(
                GeometryErrorKind.EMPTY_CROP, f"crop {crop!r} is not a rectangle"
            ) from exc

    try:
        return ProcessingRequest(
            data=data,
            declared_mime_type=declared_mime_type,
            crop_rect=crop_rect,
            target=target,
            format=output_format,
            quality=quality,
            original_filename=original_filename or "image",
        )
    except ValidationError as exc:
        fields = {error["loc"][0] for error in exc.errors() if error["loc"]}
        if "quality" in fields:
            raise EncodeError(
                EncodeErrorKind.ENCODER_FAILURE, f"quality {quality!r} is not a number"
            ) from exc
        raise DecodeError(
            DecodeErrorKind.UNSUPPORTED, f"invalid source fields: {sorted(fields)}"
        ) from exc


def process_image(
    data: bytes,
    *,
    target_width: int,
    target_height: int,
    format: Union[OutputFormat, str],
    quality: float = 0.8,
    crop: CropLike = None,
    original_filename: str = "image",
    declared_mime_type: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
) -> EncodedResult:
    """
    Decode, crop, resize and encode one image.

    Args:
        data: Source image bytes
        target_width: Output width in pixels (>= 1)
        target_height: Output height in pixels (>= 1)
        format: "jpeg", "png", "webp" or "pdf"
        quality: Lossy quality in [0, 1]; values outside are clamped
        crop: Optional crop rectangle in source pixels (x, y, width, height)
        original_filename: Source file name, used for the suggested name
        declared_mime_type: MIME type reported by the file picker
        config: Optional encoder/decoder tuning

    Returns:
        EncodedResult with bytes, dimensions, size, MIME type and filename

    Raises:
        DecodeError, GeometryError, ResampleError, EncodeError
    """
    request = build_request(
        data,
        target_width=target_width,
        target_height=target_height,
        format=format,
        quality=quality,
        crop=crop,
        original_filename=original_filename,
        declared_mime_type=declared_mime_type,
    )
    service = ImagePipelineFactory.create_pipeline(config=config)
    return service.process(request)


async def process_image_async(
    data: bytes,
    *,
    target_width: int,
    target_height: int,
    format: Union[OutputFormat, str],
    quality: float = 0.8,
    crop: CropLike = None,
    original_filename: str = "image",
    declared_mime_type: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
) -> EncodedResult:
    """Awaitable variant of ``process_image`` with one suspension per stage."""
    request = build_request(
        data,
        target_width=target_width,
        target_height=target_height,
        format=format,
        quality=quality,
        crop=crop,
        original_filename=original_filename,
        declared_mime_type=declared_mime_type,
    )
    service = ImagePipelineFactory.create_pipeline(config=config)
    return await service.process_async(request)
