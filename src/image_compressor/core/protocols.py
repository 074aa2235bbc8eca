"""Protocol definitions for dependency injection and testability."""

from typing import Any, Optional, Protocol, Union

from .models import (
    EncodedResult,
    OutputFormat,
    PixelBuffer,
    ResolvedPlan,
    SourceImage,
)


class ImageCodecProtocol(Protocol):
    """Decode/draw/encode capabilities the pipeline relies on."""

    def decode(self, data: bytes, declared_mime_type: Optional[str] = None) -> SourceImage:
        """Turn encoded bytes into a raster surface."""
        ...

    def draw_scaled(self, source: SourceImage, plan: ResolvedPlan) -> PixelBuffer:
        """Draw the plan's crop region at the plan's target size."""
        ...

    def encode(
        self,
        buffer: PixelBuffer,
        format: Union[OutputFormat, str],
        quality: float,
        original_filename: Optional[str] = None,
    ) -> EncodedResult:
        """Serialize a raster surface into a container format."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""
        ...

