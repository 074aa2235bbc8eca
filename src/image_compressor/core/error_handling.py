# src/image_compressor/core/error_handling.py

import functools
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Tuple, Type

from .exceptions import (
    ImageCompressorError,
    PipelineStageError,
    ResampleError,
    ResampleErrorKind,
)
from .logging_config import PACKAGE_LOGGER, get_logger


@contextmanager
def stage_errors(
    error_cls: Type[PipelineStageError],
    kind: Enum,
    translate: Tuple[Type[BaseException], ...] = (Exception,),
) -> Iterator[None]:
    """
    Translate stray exceptions raised inside a block into a typed stage error.

    Pipeline errors pass through unchanged, and so does anything that is not
    an instance of ``translate``. ``MemoryError`` is always reported as
    ``ResampleError(OUT_OF_MEMORY)`` when the stage is the resampler,
    otherwise as the given kind.
    """
    try:
        yield
    except ImageCompressorError:
        raise
    except MemoryError as exc:
        if error_cls is ResampleError:
            raise ResampleError(ResampleErrorKind.OUT_OF_MEMORY, "allocation failed") from exc
        raise error_cls(kind, "allocation failed") from exc
    except Exception as exc:
        if not isinstance(exc, translate):
            raise
        raise error_cls(kind, str(exc)) from exc


def with_error_handling(
    error_cls: Type[PipelineStageError],
    kind: Enum,
    translate: Tuple[Type[BaseException], ...] = (Exception,),
):
    """
    A decorator to wrap a pipeline stage with standardized error handling.

    Failures are logged with a traceback on the stage's logger
    (``image-compressor.<module>``) and re-raised, as ``error_cls(kind)``
    when they are instances of ``translate`` and not already part of the
    pipeline taxonomy.
    """

    def decorator(func):
        logger = get_logger(f"{PACKAGE_LOGGER}.{func.__module__.rsplit('.', 1)[-1]}")

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                with stage_errors(error_cls, kind, translate):
                    return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
                raise

        return wrapper

    return decorator
