"""Error taxonomy for the image transform pipeline."""

from __future__ import annotations

from enum import Enum


class ImageCompressorError(Exception):
    """Base exception for all image compressor errors."""

    @property
    def user_message(self) -> str:
        """Short message suitable for showing to an end user."""
        return "Something went wrong while processing the image"


class ConfigurationError(ImageCompressorError):
    """Error raised for invalid configuration options."""


class DecodeErrorKind(str, Enum):
    UNSUPPORTED = "unsupported"
    CORRUPT = "corrupt"


class GeometryErrorKind(str, Enum):
    EMPTY_CROP = "empty_crop"
    INVALID_TARGET = "invalid_target"


class ResampleErrorKind(str, Enum):
    OUT_OF_MEMORY = "out_of_memory"


class EncodeErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    ENCODER_FAILURE = "encoder_failure"


class PipelineStageError(ImageCompressorError):
    """Failure of one pipeline stage, classified by ``kind``."""

    stage = "pipeline"
    _messages: dict = {}

    def __init__(self, kind: Enum, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        message = f"{self.stage} failed ({kind.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return self._messages.get(self.kind, super().user_message)


class DecodeError(PipelineStageError):
    """Raised when source bytes cannot be turned into a raster surface."""

    stage = "decode"
    _messages = {
        DecodeErrorKind.UNSUPPORTED: "Please select a valid image file",
        DecodeErrorKind.CORRUPT: "Could not load the selected image.",
    }


class GeometryError(PipelineStageError):
    """Raised when the crop rectangle or target dimensions are unusable."""

    stage = "geometry"
    _messages = {
        GeometryErrorKind.EMPTY_CROP: "The selected crop area is empty",
        GeometryErrorKind.INVALID_TARGET: "Please provide valid output dimensions",
    }


class ResampleError(PipelineStageError):
    """Raised when the resized buffer cannot be allocated."""

    stage = "resample"
    _messages = {
        ResampleErrorKind.OUT_OF_MEMORY: "The requested output size is too large",
    }


class EncodeError(PipelineStageError):
    """Raised when the output container cannot be produced."""

    stage = "encode"
    _messages = {
        EncodeErrorKind.UNSUPPORTED_FORMAT: "The selected output format is not supported",
        EncodeErrorKind.ENCODER_FAILURE: "Could not encode the output image",
    }
