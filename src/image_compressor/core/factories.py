"""Factory classes for creating configured service instances."""

from typing import Any, Dict, Optional

from .logging_config import get_logger, set_log_level
from .models import PipelineConfig
from .observability import MetricsCollector, StructuredLogger
from .protocols import ImageCodecProtocol, LoggerProtocol
from .services import ImagePipelineService, PillowCodec


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "image-compressor", level: Optional[str] = None) -> LoggerProtocol:
        """
        Create a context-aware logger inside the package hierarchy.

        ``level`` applies to the package logger, so every stage follows it.
        """
        if level:
            set_log_level(level)
        return StructuredLogger(get_logger(name))


class ImagePipelineFactory:
    """Factory for creating the complete processing pipeline."""

    @staticmethod
    def create_pipeline(
        codec: Optional[ImageCodecProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
        config: Optional[PipelineConfig] = None,
        config_overrides: Optional[Dict[str, Any]] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> ImagePipelineService:
        """Create a fully configured pipeline service."""

        if config is None:
            config = PipelineConfig.from_overrides(**(config_overrides or {}))
        elif config_overrides:
            config = PipelineConfig.from_overrides(
                **{**config.model_dump(), **config_overrides}
            )

        if codec is None:
            codec = PillowCodec(config)

        if logger is None:
            logger = LoggerFactory.create_logger(
                "image-compressor.pipeline", level="DEBUG" if config.debug else None
            )

        return ImagePipelineService(
            codec=codec, logger=logger, metrics_collector=metrics_collector
        )
