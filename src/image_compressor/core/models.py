"""Shared data models for the image transform pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, ValidationError

from .exceptions import ConfigurationError

# Largest output raster the resampler will allocate (1 GiB of RGBA8)
DEFAULT_MAX_OUTPUT_PIXELS = 1 << 28


class OutputFormat(str, Enum):
    """Container formats the encoder can produce."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    PDF = "pdf"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def extension(self) -> str:
        return "jpg" if self is OutputFormat.JPEG else self.value


_MIME_TYPES = {
    OutputFormat.JPEG: "image/jpeg",
    OutputFormat.PNG: "image/png",
    OutputFormat.WEBP: "image/webp",
    OutputFormat.PDF: "application/pdf",
}


@dataclass(frozen=True)
class PixelBuffer:
    """RGBA8 raster, row-major with a top-left origin."""

    width: int
    height: int
    image: Image.Image

    @property
    def pixels(self) -> np.ndarray:
        """Pixel data as a ``(height, width, 4)`` uint8 array."""
        return np.asarray(self.image, dtype=np.uint8)

    @property
    def has_alpha(self) -> bool:
        """True when at least one pixel is not fully opaque."""
        low, _ = self.image.getchannel("A").getextrema()
        return low < 255


@dataclass(frozen=True)
class SourceImage(PixelBuffer):
    """Decoded source surface; ``source_format`` is what the decoder detected."""

    source_format: str = "unknown"


class CropRect(BaseModel):
    """Crop rectangle in source-pixel coordinates."""

    x: float = 0.0
    y: float = 0.0
    width: float
    height: float


class TargetDimensions(BaseModel):
    """Requested output size in pixels."""

    width: int
    height: int


class ResolvedPlan(BaseModel):
    """Clamped crop plus independent scale factors for the resampler."""

    model_config = ConfigDict(frozen=True)

    crop: CropRect
    target: TargetDimensions
    sx: float
    sy: float

    @property
    def box(self) -> Tuple[float, float, float, float]:
        """Crop as a ``(left, upper, right, lower)`` box."""
        return (
            self.crop.x,
            self.crop.y,
            self.crop.x + self.crop.width,
            self.crop.y + self.crop.height,
        )


class OutputRequest(BaseModel):
    """A fully resolved request for one pipeline invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source_image: InstanceOf[SourceImage]
    crop_rect: Optional[CropRect] = None
    target: TargetDimensions
    format: OutputFormat
    quality: float = 0.8
    original_filename: str = "image"


class ProcessingRequest(BaseModel):
    """Raw input from the caller: source bytes plus export settings."""

    data: bytes = Field(repr=False)
    declared_mime_type: Optional[str] = None
    crop_rect: Optional[CropRect] = None
    target: TargetDimensions
    format: OutputFormat
    quality: float = 0.8
    original_filename: str = "image"


class EncodedResult(BaseModel):
    """Encoded output plus the metadata the caller displays."""

    data: bytes = Field(repr=False)
    width: int
    height: int
    byte_size: int
    mime_type: str
    suggested_filename: str


class PipelineConfig(BaseModel):
    """Encoder and decoder tuning for the pipeline."""

    jpeg_background: Tuple[int, int, int] = (255, 255, 255)
    png_compress_level: int = Field(default=6, ge=0, le=9)
    webp_method: int = Field(default=4, ge=0, le=6)
    webp_lossless_threshold: float = Field(default=0.999, ge=0.0, le=1.0)
    pdf_deflate_level: int = Field(default=6, ge=0, le=9)
    max_image_pixels: Optional[int] = Field(default=None, gt=0)
    max_output_pixels: int = Field(default=DEFAULT_MAX_OUTPUT_PIXELS, gt=0)
    reducing_gap: Optional[float] = Field(default=None, ge=1.0)
    debug: bool = False

    @classmethod
    def from_overrides(cls, **overrides) -> "PipelineConfig":
        """Build a config, reporting invalid values as ``ConfigurationError``."""
        try:
            config = cls(**overrides)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc
        if any(not 0 <= channel <= 255 for channel in config.jpeg_background):
            raise ConfigurationError(
                f"jpeg_background must be 8-bit RGB, got {config.jpeg_background}"
            )
        return config
