"""Observability utilities: context-aware logging and per-stage timings."""

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class LogContext:
    """Correlation data attached to every log line of one invocation."""

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Copy of this context for a single stage."""
        return LogContext(
            correlation_id=self.correlation_id,
            operation=operation,
            component=self.component,
            metadata=dict(self.metadata),
        )

    def with_metadata(self, **kwargs) -> "LogContext":
        """Copy of this context with extra key/value pairs."""
        return LogContext(
            correlation_id=self.correlation_id,
            operation=self.operation,
            component=self.component,
            metadata={**self.metadata, **kwargs},
        )


class StructuredLogger:
    """
    Adapter that renders a ``LogContext`` into plain ``logging`` records.

    Lines look like ``[encode] [3f2a9c01d4e7] Completed encode (format=png)``.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _render(self, message: str, context: Optional[LogContext], fields: Dict[str, Any]) -> str:
        if context is None:
            return message
        prefix = f"[{context.operation}] " if context.operation else ""
        line = f"{prefix}[{context.correlation_id}] {message}"
        merged = {**context.metadata, **fields}
        if merged:
            line += " (" + ", ".join(f"{k}={v}" for k, v in merged.items()) + ")"
        return line

    def debug(self, message: str, context: Optional[LogContext] = None, **fields):
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._render(message, context, fields))

    def info(self, message: str, context: Optional[LogContext] = None, **fields):
        self._logger.info(self._render(message, context, fields))

    def warning(self, message: str, context: Optional[LogContext] = None, **fields):
        self._logger.warning(self._render(message, context, fields))

    def error(self, message: str, context: Optional[LogContext] = None, **fields):
        self._logger.error(self._render(message, context, fields))


@dataclass
class StageTiming:
    """Outcome and wall time of one pipeline stage."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.end_time - self.start_time


class MetricsCollector:
    """In-memory store of stage timings, for callers that want numbers."""

    def __init__(self):
        self._metrics: List[StageTiming] = []

    def record_metric(self, metric: StageTiming):
        self._metrics.append(metric)

    def get_metrics(self, operation: Optional[str] = None) -> List[StageTiming]:
        """Recorded timings, optionally for a single stage."""
        if operation:
            return [m for m in self._metrics if m.operation == operation]
        return list(self._metrics)

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Counts and durations over the recorded timings."""
        metrics = self.get_metrics(operation)
        if not metrics:
            return {}

        durations = [m.duration for m in metrics]
        failed = sum(1 for m in metrics if not m.success)
        return {
            "total_operations": len(metrics),
            "failed_operations": failed,
            "avg_duration": sum(durations) / len(durations),
            "max_duration": max(durations),
        }


@contextmanager
def timed_stage(
    operation: str,
    logger: Any,
    context: LogContext,
    metrics_collector: Optional[MetricsCollector] = None,
) -> Iterator[LogContext]:
    """Time a pipeline stage, log its outcome and record a metric."""
    stage_context = context.with_operation(operation)
    start_time = time.perf_counter()
    success = False
    error_message = None

    logger.debug(f"Starting {operation}", stage_context)
    try:
        yield stage_context
        success = True
    except Exception as e:
        error_message = str(e)
        raise
    finally:
        end_time = time.perf_counter()
        duration_ms = round((end_time - start_time) * 1000, 2)
        if success:
            logger.debug(f"Completed {operation}", stage_context, duration_ms=duration_ms)
        else:
            logger.error(
                f"Failed {operation}: {error_message}",
                stage_context,
                duration_ms=duration_ms,
            )

        if metrics_collector is not None:
            metrics_collector.record_metric(
                StageTiming(
                    operation=operation,
                    start_time=start_time,
                    end_time=end_time,
                    success=success,
                    error_message=error_message,
                )
            )
