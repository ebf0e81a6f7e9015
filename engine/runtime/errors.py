"""Shared runtime exception policy helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterator


def error_sources(err: BaseException) -> Iterator[BaseException]:
    """Yield ``err`` followed by each exception in its cause chain."""
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def log_error(logger: logging.Logger, method_name: str, err: BaseException) -> None:
    """Log a failed backend call followed by one line per chained cause."""
    logger.error("%s() failed: %s", method_name, err)
    for index, source in enumerate(error_sources(err)):
        if index == 0:
            continue
        logger.error("  Caused by: %s", source)


__all__ = ["error_sources", "log_error"]
