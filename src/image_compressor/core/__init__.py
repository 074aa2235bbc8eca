"""Core stages and shared components for the image compressor."""

from .decoder import decode
from .encoder import encode
from .exceptions import (
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    EncodeError,
    EncodeErrorKind,
    GeometryError,
    GeometryErrorKind,
    ImageCompressorError,
    ResampleError,
    ResampleErrorKind,
)
from .geometry import clamp_crop, resolve
from .logging_config import get_logger, set_log_level, setup_logger
from .models import (
    CropRect,
    EncodedResult,
    OutputFormat,
    OutputRequest,
    PipelineConfig,
    PixelBuffer,
    ProcessingRequest,
    ResolvedPlan,
    SourceImage,
    TargetDimensions,
)
from .resampler import draw_scaled, resample

__all__ = [
    "decode",
    "resolve",
    "clamp_crop",
    "resample",
    "draw_scaled",
    "encode",
    "setup_logger",
    "get_logger",
    "set_log_level",
    "CropRect",
    "EncodedResult",
    "OutputFormat",
    "OutputRequest",
    "PipelineConfig",
    "PixelBuffer",
    "ProcessingRequest",
    "ResolvedPlan",
    "SourceImage",
    "TargetDimensions",
    "ImageCompressorError",
    "ConfigurationError",
    "DecodeError",
    "DecodeErrorKind",
    "GeometryError",
    "GeometryErrorKind",
    "ResampleError",
    "ResampleErrorKind",
    "EncodeError",
    "EncodeErrorKind",
]
