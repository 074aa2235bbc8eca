"""Testing utilities and fakes for the image compressor."""

from .fakes import (
    FailingCodec,
    FakeLogger,
    create_pixel_buffer,
    create_test_image,
    create_test_surface,
)

__all__ = [
    "FailingCodec",
    "FakeLogger",
    "create_pixel_buffer",
    "create_test_image",
    "create_test_surface",
]
