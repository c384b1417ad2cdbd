"""
Observability module: structured logging and request IDs.

Usage:
    from lib.observability import configure_logging, RequestContext

    configure_logging("INFO")

    with RequestContext() as ctx:
        logger.info("Reaping")  # carries ctx.request_id
"""

from .context import RequestContext, generate_request_id, get_request_id
from .logging import HumanFormatter, JSONFormatter, configure_logging
from .middleware import CorrelationIdMiddleware

__all__ = [
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    "RequestContext",
    "generate_request_id",
    "get_request_id",
    "CorrelationIdMiddleware",
]
