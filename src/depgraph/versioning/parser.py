"""Token parsing utilities for package requests."""

from typing import Optional, Tuple

from ..errors import InvalidVersionRangeSyntax
from .ranges import VersionRange, Wildcard, parse_range


def split_name_and_range(s: str) -> Tuple[str, Optional[str]]:
    """Return (name, range text or None) split on the first ``@`` after the name.

    A leading ``@`` is the npm scope marker, never a separator, so
    ``@scope/pkg@^1.0.0`` splits into ``@scope/pkg`` and ``^1.0.0``. Package
    names never contain ``@``, so range text such as ``git+ssh://git@host/..``
    stays intact.
    """
    s = s.strip()
    head, body = ("@", s[1:]) if s.startswith("@") else ("", s)
    if "@" not in body:
        return s, None
    name, spec = body.split("@", 1)
    spec = spec.strip()
    return head + name.strip(), spec if spec else None


def parse_request(token: str) -> Tuple[str, VersionRange]:
    """Parse a ``name[@range]`` token into a (name, range) request.

    A missing range means any version.

    Raises:
        InvalidVersionRangeSyntax: when the name is empty or the range is malformed.
    """
    name, spec = split_name_and_range(token)
    if not name or (name.startswith("@") and "/" not in name):
        raise InvalidVersionRangeSyntax(token, "missing package name")
    if spec is None:
        return name, Wildcard()
    return name, parse_range(spec)
