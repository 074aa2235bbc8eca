"""Client-side image crop, resize and export pipeline."""

from .core import (
    ConfigurationError,
    CropRect,
    DecodeError,
    DecodeErrorKind,
    EncodedResult,
    EncodeError,
    EncodeErrorKind,
    GeometryError,
    GeometryErrorKind,
    ImageCompressorError,
    OutputFormat,
    PipelineConfig,
    ResampleError,
    ResampleErrorKind,
    TargetDimensions,
)
from .pipeline import process_image, process_image_async

__version__ = "0.1.0"

__all__ = [
    "process_image",
    "process_image_async",
    "CropRect",
    "EncodedResult",
    "OutputFormat",
    "PipelineConfig",
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
