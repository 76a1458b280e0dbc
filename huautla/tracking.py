"""
Access tracking for data-layer calls.

Usage:
    with track("GetSources", id=generation_id, cid=cid):
        rows = await conn.fetch(...)

Logs "starting work" on entry and "finished work" with the elapsed time on
exit. A failure is logged with its traceback and re-raised unchanged.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)


@contextmanager
def track(method: str, *, id: Any = None, cid: str | None = None) -> Iterator[None]:
    """Log the start, duration and outcome of one data-layer call."""
    start = time.perf_counter()
    logger.info("starting work method=%s cid=%s id=%s", method, cid, id)
    try:
        yield
    except Exception:
        logger.warning(
            "failed work method=%s cid=%s id=%s duration=%.3fs",
            method,
            cid,
            id,
            time.perf_counter() - start,
            exc_info=True,
        )
        raise
    logger.info(
        "finished work method=%s cid=%s id=%s duration=%.3fs",
        method,
        cid,
        id,
        time.perf_counter() - start,
    )
