"""Shared HTTP helpers used by the registry, VCS and URL fetchers.

Encapsulates request/timeout error handling so fetchers avoid duplicating
try/except blocks. Transport failures never raise: they come back as a zero
status so callers can fall through to the next source.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from ..constants import Constants
from .logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> Optional[requests.Response]:
    """Perform one GET request with DEBUG traces; None on transport failure."""
    safe_target = safe_url(url)
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                )
            )
        try:
            response = requests.get(url, timeout=effective_timeout, headers=headers, **kwargs)
        except requests.Timeout:
            logger.warning(
                "Request to %s timed out after %s seconds",
                safe_target,
                effective_timeout,
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="GET",
                    outcome="timeout",
                    target=safe_target,
                )
            )
            return None
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning(
                "Request to %s failed: %s",
                safe_target,
                exc,
                extra=extra_context(
                    event="http_exception",
                    component="http_client",
                    action="GET",
                    outcome="request_exception",
                    target=safe_target,
                )
            )
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=response.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                )
            )
        return response


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response.

    Args:
        url: Target URL
        headers: Optional request headers
        timeout: Seconds before the request is abandoned
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none); status is 0
        when no response was received.
    """
    response = _get(url, headers=headers, timeout=timeout, **kwargs)
    if response is None:
        return 0, {}, None
    response_headers = dict(response.headers)
    if response.status_code != 200 or not response.text:
        return response.status_code, response_headers, None
    try:
        return response.status_code, response_headers, json.loads(response.text)
    except json.JSONDecodeError:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    status_code=response.status_code,
                    target=safe_url(url),
                )
            )
        return response.status_code, response_headers, None


def get_bytes(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], bytes]:
    """Download a resource (following redirects).

    Returns:
        Tuple of (status_code, headers_dict, body); status is 0 and body empty
        when no response was received.
    """
    response = _get(url, headers=headers, timeout=timeout, allow_redirects=True, **kwargs)
    if response is None:
        return 0, {}, b""
    return response.status_code, dict(response.headers), response.content
