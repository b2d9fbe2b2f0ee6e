"""Shared helpers for structured operation logging."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Dict, Generator, Tuple, Type

from .errors import NotFoundError, SizeLimitExceeded

# Outcomes callers are expected to handle; logged without a traceback.
_EXPECTED_ERRORS: Tuple[Type[BaseException], ...] = (NotFoundError, SizeLimitExceeded)


def _duration_ms(start: float) -> float:
    return round((perf_counter() - start) * 1000, 3)


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: object,
) -> Generator[Dict[str, object], None, None]:
    """Emit structured logs around an operation.

    Parameters
    ----------
    logger:
        Logger to emit records to.
    operation:
        Identifier for the operation (e.g. ``"store_leaves"``).
    context:
        Additional key/value pairs to include in the log context. The yielded
        mapping can be mutated to add dynamic values before completion.
    """

    start = perf_counter()
    base: Dict[str, object] = {"operation": operation, **context}

    try:
        yield base
    except _EXPECTED_ERRORS as exc:
        logger.warning(
            "%s failed",
            operation,
            extra={
                **base,
                "status": "error",
                "duration_ms": _duration_ms(start),
                "error": str(exc),
            },
        )
        raise
    except Exception as exc:
        logger.exception(
            "%s failed",
            operation,
            extra={
                **base,
                "status": "error",
                "duration_ms": _duration_ms(start),
                "error": str(exc),
            },
        )
        raise
    else:
        logger.info(
            "%s completed",
            operation,
            extra={**base, "status": "success", "duration_ms": _duration_ms(start)},
        )


__all__ = ["log_operation"]
