"""Service implementations for the image transform pipeline."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from .decoder import decode
from .encoder import encode
from .geometry import resolve
from .models import (
    EncodedResult,
    OutputFormat,
    OutputRequest,
    PipelineConfig,
    PixelBuffer,
    ProcessingRequest,
    ResolvedPlan,
    SourceImage,
)
from .observability import LogContext, MetricsCollector, timed_stage
from .protocols import ImageCodecProtocol, LoggerProtocol
from .resampler import resample


@dataclass
class ProcessingContext:
    """Context for one pipeline invocation."""

    correlation_id: str
    start_time: float = field(default_factory=time.perf_counter)
    log_context: LogContext = field(default_factory=LogContext)


class PillowCodec:
    """Pillow-backed implementation of ``ImageCodecProtocol``."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def decode(self, data: bytes, declared_mime_type: Optional[str] = None) -> SourceImage:
        return decode(
            data,
            declared_mime_type=declared_mime_type,
            max_image_pixels=self.config.max_image_pixels,
        )

    def draw_scaled(self, source: SourceImage, plan: ResolvedPlan) -> PixelBuffer:
        return resample(
            source,
            plan,
            reducing_gap=self.config.reducing_gap,
            max_output_pixels=self.config.max_output_pixels,
        )

    def encode(
        self,
        buffer: PixelBuffer,
        format: Union[OutputFormat, str],
        quality: float,
        original_filename: Optional[str] = None,
    ) -> EncodedResult:
        return encode(
            buffer,
            format,
            quality,
            original_filename=original_filename,
            config=self.config,
        )


class ImagePipelineService:
    """
    Runs decode, resolve, resample and encode for one request.

    The service keeps no per-request state: every call builds its own
    context, so one instance may serve concurrent invocations.
    """

    def __init__(
        self,
        codec: ImageCodecProtocol,
        logger: LoggerProtocol,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self._codec = codec
        self._logger = logger
        self._metrics_collector = metrics_collector

    def _new_context(self, request: ProcessingRequest) -> ProcessingContext:
        correlation_id = f"img_{request.original_filename}_{time.time_ns()}"
        log_context = LogContext(
            correlation_id=correlation_id,
            operation="process_image",
            component="image_pipeline_service",
        ).with_metadata(
            format=request.format.value,
            target=f"{request.target.width}x{request.target.height}",
        )
        return ProcessingContext(correlation_id=correlation_id, log_context=log_context)

    def _stage(self, name: str, context: ProcessingContext):
        return timed_stage(name, self._logger, context.log_context, self._metrics_collector)

    def decode_source(
        self, request: ProcessingRequest, context: ProcessingContext
    ) -> OutputRequest:
        with self._stage("decode", context):
            source = self._codec.decode(request.data, request.declared_mime_type)
        return OutputRequest(
            source_image=source,
            crop_rect=request.crop_rect,
            target=request.target,
            format=request.format,
            quality=request.quality,
            original_filename=request.original_filename,
        )

    def resolve_plan(self, request: OutputRequest, context: ProcessingContext) -> ResolvedPlan:
        with self._stage("resolve", context):
            source = request.source_image
            return resolve((source.width, source.height), request.crop_rect, request.target)

    def draw(
        self, request: OutputRequest, plan: ResolvedPlan, context: ProcessingContext
    ) -> PixelBuffer:
        with self._stage("resample", context):
            return self._codec.draw_scaled(request.source_image, plan)

    def encode_output(
        self, request: OutputRequest, buffer: PixelBuffer, context: ProcessingContext
    ) -> EncodedResult:
        with self._stage("encode", context):
            return self._codec.encode(
                buffer, request.format, request.quality, request.original_filename
            )

    def run(self, request: OutputRequest, context: Optional[ProcessingContext] = None) -> EncodedResult:
        """Resolve, resample and encode an already decoded source."""
        if context is None:
            context = ProcessingContext(correlation_id=f"img_{time.time_ns()}")
        plan = self.resolve_plan(request, context)
        buffer = self.draw(request, plan, context)
        return self.encode_output(request, buffer, context)

    def process(self, request: ProcessingRequest) -> EncodedResult:
        """Process raw source bytes end to end."""
        context = self._new_context(request)
        output_request = self.decode_source(request, context)
        result = self.run(output_request, context)
        self._log_success(result, context)
        return result

    async def process_async(self, request: ProcessingRequest) -> EncodedResult:
        """
        Same pipeline as ``process`` as one awaitable unit.

        Each stage runs in a worker thread, so the event loop is released
        once per stage boundary. Cancelling the task discards the result.
        """
        context = self._new_context(request)
        output_request = await asyncio.to_thread(self.decode_source, request, context)
        plan = await asyncio.to_thread(self.resolve_plan, output_request, context)
        buffer = await asyncio.to_thread(self.draw, output_request, plan, context)
        result = await asyncio.to_thread(self.encode_output, output_request, buffer, context)
        self._log_success(result, context)
        return result

    def _log_success(self, result: EncodedResult, context: ProcessingContext) -> None:
        elapsed_ms = (time.perf_counter() - context.start_time) * 1000
        self._logger.info(
            "Successfully processed image",
            context.log_context,
            byte_size=result.byte_size,
            filename=result.suggested_filename,
            processing_time_ms=round(elapsed_ms, 2),
        )
