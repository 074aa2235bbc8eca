"""Encoder stage: serialize a pixel buffer into the requested container."""

import io
import math
import zlib
from typing import Any, Dict, Optional, Union

from PIL import Image, features

from .error_handling import with_error_handling
from .exceptions import EncodeError, EncodeErrorKind
from .logging_config import get_logger
from .models import EncodedResult, OutputFormat, PipelineConfig, PixelBuffer
from .pdf_writer import PdfImageStream, build_single_image_pdf
from .sizing import suggested_filename

logger = get_logger("image-compressor.encoder")

# Pillow feature needed for each raster format
_REQUIRED_FEATURES = {
    OutputFormat.JPEG: "jpg",
    OutputFormat.PNG: "zlib",
    OutputFormat.WEBP: "webp",
    OutputFormat.PDF: "jpg",
}


def parse_format(format: Union[OutputFormat, str]) -> OutputFormat:
    """Normalize a format name; unknown names raise UNSUPPORTED_FORMAT."""
    try:
        return OutputFormat(str(getattr(format, "value", format)).lower())
    except ValueError as exc:
        raise EncodeError(
            EncodeErrorKind.UNSUPPORTED_FORMAT, f"unknown output format {format!r}"
        ) from exc


def clamp_quality(quality: float) -> float:
    """
    Clamp quality to [0, 1].

    Out-of-range values are a caller contract violation: they are corrected,
    and the correction is logged at WARNING level.
    """
    if quality is None or math.isnan(quality):
        raise EncodeError(EncodeErrorKind.ENCODER_FAILURE, f"quality {quality!r} is not a number")
    clamped = min(max(float(quality), 0.0), 1.0)
    if clamped != quality:
        logger.warning(f"Quality {quality} outside [0, 1], clamped to {clamped}")
    return clamped


def quality_to_pillow(quality: float) -> int:
    """Map [0, 1] linearly onto Pillow's 0-100 quality scale."""
    return int(round(quality * 100))


def _flatten(image: Image.Image, background) -> Image.Image:
    """Composite RGBA over an opaque background and drop the alpha channel."""
    canvas = Image.new("RGBA", image.size, tuple(background) + (255,))
    return Image.alpha_composite(canvas, image).convert("RGB")


def _save(image: Image.Image, pil_format: str, **params: Any) -> bytes:
    with io.BytesIO() as output:
        image.save(output, format=pil_format, **params)
        return output.getvalue()


def encode_jpeg(buffer: PixelBuffer, quality: float, config: PipelineConfig) -> bytes:
    if buffer.has_alpha:
        rgb = _flatten(buffer.image, config.jpeg_background)
    else:
        rgb = buffer.image.convert("RGB")
    return _save(rgb, "JPEG", quality=quality_to_pillow(quality), optimize=False)


def encode_png(buffer: PixelBuffer, config: PipelineConfig) -> bytes:
    image = buffer.image if buffer.has_alpha else buffer.image.convert("RGB")
    return _save(image, "PNG", compress_level=config.png_compress_level)


def encode_webp(buffer: PixelBuffer, quality: float, config: PipelineConfig) -> bytes:
    image = buffer.image if buffer.has_alpha else buffer.image.convert("RGB")
    params: Dict[str, Any] = {"method": config.webp_method}
    if quality >= config.webp_lossless_threshold:
        params.update(lossless=True, quality=100)
    else:
        params.update(lossless=False, quality=quality_to_pillow(quality))
    return _save(image, "WEBP", **params)


def encode_pdf(buffer: PixelBuffer, quality: float, config: PipelineConfig) -> bytes:
    """
    Embed the buffer in a single-page PDF.

    Opaque buffers are stored as a JPEG (DCTDecode) stream. Buffers with
    transparency keep it losslessly: deflated RGB samples plus a deflated
    alpha plane as the image's soft mask.
    """
    if not buffer.has_alpha:
        stream = PdfImageStream(
            width=buffer.width,
            height=buffer.height,
            data=encode_jpeg(buffer, quality, config),
            filter_name="DCTDecode",
        )
    else:
        level = config.pdf_deflate_level
        alpha = buffer.image.getchannel("A")
        stream = PdfImageStream(
            width=buffer.width,
            height=buffer.height,
            data=zlib.compress(buffer.image.convert("RGB").tobytes(), level),
            filter_name="FlateDecode",
            soft_mask=PdfImageStream(
                width=buffer.width,
                height=buffer.height,
                data=zlib.compress(alpha.tobytes(), level),
                filter_name="FlateDecode",
                color_space="DeviceGray",
            ),
        )
    return build_single_image_pdf(stream)


def _require_codec(output_format: OutputFormat) -> None:
    feature = _REQUIRED_FEATURES[output_format]
    if not features.check(feature):
        raise EncodeError(
            EncodeErrorKind.UNSUPPORTED_FORMAT,
            f"this Pillow build has no {feature} support",
        )


@with_error_handling(EncodeError, EncodeErrorKind.ENCODER_FAILURE)
def encode(
    buffer: PixelBuffer,
    format: Union[OutputFormat, str],
    quality: float,
    original_filename: Optional[str] = "image",
    config: Optional[PipelineConfig] = None,
) -> EncodedResult:
    """
    Encode a pixel buffer into an ``EncodedResult``.

    Args:
        buffer: Resampled RGBA pixels
        format: One of jpeg, png, webp, pdf
        quality: Lossy quality in [0, 1], clamped if outside; ignored for png
        original_filename: Name of the source file, used for the suggestion
        config: Encoder tuning; defaults to ``PipelineConfig()``

    Returns:
        Encoded bytes with width, height, size, MIME type and filename

    Raises:
        EncodeError: UNSUPPORTED_FORMAT or ENCODER_FAILURE
    """
    config = config or PipelineConfig()
    output_format = parse_format(format)
    _require_codec(output_format)

    if output_format is OutputFormat.PNG:
        data = encode_png(buffer, config)
    else:
        quality = clamp_quality(quality)
        if output_format is OutputFormat.JPEG:
            data = encode_jpeg(buffer, quality, config)
        elif output_format is OutputFormat.WEBP:
            data = encode_webp(buffer, quality, config)
        else:
            data = encode_pdf(buffer, quality, config)

    logger.debug(
        f"Encoded {buffer.width}x{buffer.height} as {output_format.value} "
        f"({len(data)} bytes)"
    )
    return EncodedResult(
        data=data,
        width=buffer.width,
        height=buffer.height,
        byte_size=len(data),
        mime_type=output_format.mime_type,
        suggested_filename=suggested_filename(original_filename, output_format),
    )
