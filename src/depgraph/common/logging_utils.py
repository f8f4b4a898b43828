"""Centralized logging helpers.

Provides one place to configure the root logger plus small helpers used by
the HTTP client, fetchers and resolver to attach structured context to
records without leaking credentials into logs.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from ..constants import Constants

_SENSITIVE_QUERY = re.compile(r"(?i)((?:access_)?token|key|secret|password|auth)=([^&]+)")
_BEARER = re.compile(r"(?i)(bearer|token)\s+[A-Za-z0-9._\-]+")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once for the process.

    The level is taken from ``level``, then ``DEPGRAPH_LOG_LEVEL``, then INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped so handlers only see populated fields.
    """
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Mask tokens and secrets embedded in free text."""
    if not text:
        return text
    text = _SENSITIVE_QUERY.sub(r"\1=[REDACTED]", text)
    return _BEARER.sub(r"\1 [REDACTED]", text)


def safe_url(url: str) -> str:
    """Return ``url`` with userinfo and secret query parameters masked."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, netloc, parts.path, redact(parts.query), parts.fragment))


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds so far (or in total once exited)."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
