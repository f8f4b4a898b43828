"""Resolution engine, its session state and the run report."""

from .engine import Resolver, parse_requests
from .report import RequestOutcome, RunReport
from .session import ResolverSession

__all__ = [
    "Resolver",
    "ResolverSession",
    "RequestOutcome",
    "RunReport",
    "parse_requests",
]
