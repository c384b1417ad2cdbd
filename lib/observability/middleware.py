"""
ASGI middleware binding a request ID to every request.
"""

import logging

from .context import RequestContext

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware:
    """
    Reads X-Request-ID (or generates one), binds it for the request's logs,
    and echoes it on the response.

    Usage in server.py:
        app.add_middleware(CorrelationIdMiddleware)
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for key, value in scope.get("headers", []):
            if key.lower() == b"x-request-id":
                try:
                    request_id = value.decode("utf-8")
                except UnicodeDecodeError as e:
                    logger.warning(f"Could not decode X-Request-ID header: {e}")
                break

        with RequestContext(request_id=request_id) as ctx:

            async def send_with_request_id(message):
                if message["type"] == "http.response.start":
                    headers_list = list(message.get("headers", []))
                    headers_list.append((b"x-request-id", ctx.request_id.encode("utf-8")))
                    message["headers"] = headers_list
                await send(message)

            await self.app(scope, receive, send_with_request_id)
