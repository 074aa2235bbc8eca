"""Unit tests for service implementations."""

import asyncio

import pytest

from image_compressor.core.exceptions import (
    DecodeError,
    EncodeError,
    GeometryError,
    GeometryErrorKind,
    ResampleError,
)
from image_compressor.core.factories import ImagePipelineFactory, LoggerFactory
from image_compressor.core.models import (
    CropRect,
    OutputFormat,
    OutputRequest,
    PipelineConfig,
    ProcessingRequest,
    TargetDimensions,
)
from image_compressor.core.observability import MetricsCollector, StructuredLogger
from image_compressor.core.services import ImagePipelineService, PillowCodec
from image_compressor.testing.fakes import FailingCodec, FakeLogger, create_test_image


def _request(**overrides) -> ProcessingRequest:
    values = dict(
        data=create_test_image(120, 80),
        target=TargetDimensions(width=60, height=40),
        format=OutputFormat.PNG,
        quality=0.8,
        original_filename="photo.jpg",
    )
    values.update(overrides)
    return ProcessingRequest(**values)


class TestPillowCodec:
    """Tests for PillowCodec."""

    def test_uses_config_for_decode_limit(self):
        """The decode pixel limit comes from the codec's config."""
        codec = PillowCodec(PipelineConfig(max_image_pixels=10))
        with pytest.raises(DecodeError):
            codec.decode(create_test_image(20, 20))

    def test_round_trip_through_protocol(self):
        """decode, draw_scaled and encode chain together."""
        codec = PillowCodec()
        source = codec.decode(create_test_image(30, 30))
        service = ImagePipelineService(codec, FakeLogger())
        request = OutputRequest(
            source_image=source,
            target=TargetDimensions(width=10, height=5),
            format="webp",
            quality=0.5,
        )

        result = service.run(request)

        assert (result.width, result.height) == (10, 5)
        assert result.mime_type == "image/webp"


class TestImagePipelineService:
    """Tests for ImagePipelineService."""

    def test_process_success(self):
        """A valid request produces a result and logs each stage."""
        logger = FakeLogger()
        service = ImagePipelineService(PillowCodec(), logger)

        result = service.process(_request())

        assert (result.width, result.height) == (60, 40)
        assert result.suggested_filename == "photo.png"
        operations = [log["operation"] for log in logger.get_logs("DEBUG")]
        for stage in ("decode", "resolve", "resample", "encode"):
            assert stage in operations
        info = logger.get_logs("INFO")
        assert info[-1]["message"] == "Successfully processed image"
        assert info[-1]["byte_size"] == result.byte_size

    def test_stages_run_in_order(self):
        """Stages run decode, draw, encode in that order."""
        codec = FailingCodec(fail_stage="none")
        ImagePipelineService(codec, FakeLogger()).process(_request())
        assert codec.calls == ["decode", "draw_scaled", "encode"]

    @pytest.mark.parametrize(
        "fail_stage, error_cls, expected_calls",
        [
            ("decode", DecodeError, ["decode"]),
            ("draw_scaled", ResampleError, ["decode", "draw_scaled"]),
            ("encode", EncodeError, ["decode", "draw_scaled", "encode"]),
        ],
    )
    def test_failure_aborts_later_stages(self, fail_stage, error_cls, expected_calls):
        """A failing stage raises and no later stage runs."""
        codec = FailingCodec(fail_stage=fail_stage)
        logger = FakeLogger()
        service = ImagePipelineService(codec, logger)

        with pytest.raises(error_cls):
            service.process(_request())

        assert codec.calls == expected_calls
        assert logger.get_logs("ERROR")
        assert not logger.get_logs("INFO")

    def test_geometry_failure_skips_resample(self):
        """An invalid crop stops before any drawing."""
        codec = FailingCodec(fail_stage="none")
        service = ImagePipelineService(codec, FakeLogger())

        with pytest.raises(GeometryError) as excinfo:
            service.process(_request(crop_rect=CropRect(x=500, y=500, width=10, height=10)))

        assert excinfo.value.kind is GeometryErrorKind.EMPTY_CROP
        assert codec.calls == ["decode"]

    def test_metrics_recorded_per_stage(self):
        """Each stage records one metric."""
        metrics = MetricsCollector()
        service = ImagePipelineService(PillowCodec(), FakeLogger(), metrics)

        service.process(_request())

        assert [m.operation for m in metrics.get_metrics()] == [
            "decode",
            "resolve",
            "resample",
            "encode",
        ]
        assert metrics.get_summary()["failed_operations"] == 0

    def test_failed_stage_metric(self):
        """A failing stage records an unsuccessful metric."""
        metrics = MetricsCollector()
        service = ImagePipelineService(FailingCodec("encode"), FakeLogger(), metrics)

        with pytest.raises(EncodeError):
            service.process(_request())

        failed = [m for m in metrics.get_metrics() if not m.success]
        assert [m.operation for m in failed] == ["encode"]
        assert "simulated encoder failure" in failed[0].error_message

    def test_process_async_matches_sync(self):
        """The awaitable pipeline yields the same bytes as the blocking one."""
        service = ImagePipelineService(PillowCodec(), FakeLogger())
        request = _request(format=OutputFormat.JPEG)

        sync_result = service.process(request)
        async_result = asyncio.run(service.process_async(request))

        assert async_result.data == sync_result.data

    def test_concurrent_async_invocations_are_independent(self):
        """Concurrent requests neither share nor corrupt each other's state."""
        service = ImagePipelineService(PillowCodec(), FakeLogger())
        sizes = [(10, 10), (31, 7), (64, 48), (5, 90)]

        async def run_all():
            return await asyncio.gather(
                *(
                    service.process_async(
                        _request(target=TargetDimensions(width=w, height=h))
                    )
                    for w, h in sizes
                )
            )

        results = asyncio.run(run_all())

        assert [(r.width, r.height) for r in results] == sizes


class TestFactories:
    """Tests for the factories."""

    def test_logger_factory_returns_structured_logger(self):
        """Loggers accept a LogContext argument."""
        logger = LoggerFactory.create_logger("image-compressor.test")
        assert isinstance(logger, StructuredLogger)
        assert logger.name == "image-compressor.test"

    def test_create_pipeline_defaults(self):
        """The default pipeline uses a PillowCodec."""
        service = ImagePipelineFactory.create_pipeline(logger=FakeLogger())
        result = service.process(_request())
        assert result.mime_type == "image/png"

    def test_create_pipeline_applies_overrides(self):
        """Config overrides reach the codec."""
        service = ImagePipelineFactory.create_pipeline(
            logger=FakeLogger(), config_overrides={"max_image_pixels": 10}
        )
        with pytest.raises(DecodeError):
            service.process(_request())
