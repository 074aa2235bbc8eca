"""Fake implementations for testing purposes."""

import io
import time
from typing import Any, Dict, List, Optional, Union

from PIL import Image, ImageDraw

from ..core.exceptions import (
    DecodeError,
    DecodeErrorKind,
    EncodeError,
    EncodeErrorKind,
    ResampleError,
    ResampleErrorKind,
)
from ..core.models import (
    EncodedResult,
    OutputFormat,
    PixelBuffer,
    ResolvedPlan,
    SourceImage,
)
from ..core.services import PillowCodec


class FakeLogger:
    """In-memory logger that records each call as a flat dict."""

    def __init__(self, name: str = "test_logger"):
        self.name = name
        self.logs: List[Dict[str, Any]] = []

    def _log(self, level: str, message: str, context: Any = None, **fields: Any) -> None:
        entry: Dict[str, Any] = {"level": level, "message": message, "timestamp": time.time()}
        if context is not None:
            entry.update(
                correlation_id=context.correlation_id,
                operation=context.operation,
                component=context.component,
                **context.metadata,
            )
        entry.update(fields)
        self.logs.append(entry)

    def debug(self, message: str, context: Any = None, **fields: Any) -> None:
        self._log("DEBUG", message, context, **fields)

    def info(self, message: str, context: Any = None, **fields: Any) -> None:
        self._log("INFO", message, context, **fields)

    def warning(self, message: str, context: Any = None, **fields: Any) -> None:
        self._log("WARNING", message, context, **fields)

    def error(self, message: str, context: Any = None, **fields: Any) -> None:
        self._log("ERROR", message, context, **fields)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Recorded entries, optionally for one level."""
        return [log for log in self.logs if level is None or log["level"] == level]

    def clear_logs(self) -> None:
        self.logs.clear()


class FailingCodec(PillowCodec):
    """Pillow codec that fails at a chosen stage, for error-path tests."""

    def __init__(self, fail_stage: str, config=None):
        super().__init__(config)
        self.fail_stage = fail_stage
        self.calls: List[str] = []

    def decode(self, data: bytes, declared_mime_type: Optional[str] = None) -> SourceImage:
        self.calls.append("decode")
        if self.fail_stage == "decode":
            raise DecodeError(DecodeErrorKind.CORRUPT, "simulated decode failure")
        return super().decode(data, declared_mime_type)

    def draw_scaled(self, source: SourceImage, plan: ResolvedPlan) -> PixelBuffer:
        self.calls.append("draw_scaled")
        if self.fail_stage == "draw_scaled":
            raise ResampleError(ResampleErrorKind.OUT_OF_MEMORY, "simulated allocation failure")
        return super().draw_scaled(source, plan)

    def encode(
        self,
        buffer: PixelBuffer,
        format: Union[OutputFormat, str],
        quality: float,
        original_filename: Optional[str] = None,
    ) -> EncodedResult:
        self.calls.append("encode")
        if self.fail_stage == "encode":
            raise EncodeError(EncodeErrorKind.ENCODER_FAILURE, "simulated encoder failure")
        return super().encode(buffer, format, quality, original_filename)


def create_test_surface(width: int = 100, height: int = 100, alpha: bool = False) -> Image.Image:
    """Create a patterned RGBA surface; with ``alpha`` the left half is transparent."""
    image = Image.new("RGBA", (width, height), color=(255, 0, 0, 255))
    draw = ImageDraw.Draw(image)

    # Blue squares make resampling and cropping visible in the output
    for x in range(0, width, 20):
        for y in range(0, height, 20):
            if (x + y) % 40 == 0:
                draw.rectangle([x, y, x + 9, y + 9], fill=(0, 0, 255, 255))

    if alpha:
        draw.rectangle([0, 0, width // 2 - 1, height - 1], fill=(0, 255, 0, 0))
    return image


def create_test_image(
    width: int = 100,
    height: int = 100,
    format: str = "JPEG",
    alpha: bool = False,
    quality: int = 95,
) -> bytes:
    """Create an encoded test image in memory."""
    image = create_test_surface(width, height, alpha=alpha)
    if not alpha or format.upper() in ("JPEG", "BMP"):
        image = image.convert("RGB")

    img_bytes = io.BytesIO()
    params = {"quality": quality} if format.upper() in ("JPEG", "WEBP") else {}
    image.save(img_bytes, format=format.upper(), **params)
    return img_bytes.getvalue()


def create_pixel_buffer(width: int = 100, height: int = 100, alpha: bool = False) -> PixelBuffer:
    """Create a ``PixelBuffer`` without going through the decoder."""
    image = create_test_surface(width, height, alpha=alpha)
    return PixelBuffer(width=width, height=height, image=image)
