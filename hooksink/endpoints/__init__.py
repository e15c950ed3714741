"""HTTP routes."""

from starlette.routing import request_response


class AnyMethod:
    """ASGI app handing every request to ``endpoint(request)``, whatever its method.

    Starlette limits plain function endpoints to GET when no methods are given;
    an ASGI object keeps ``methods=None``, so extension verbs are routed too.
    """

    def __init__(self, endpoint):
        self.endpoint = endpoint
        self.app = request_response(endpoint)

    async def __call__(self, scope, receive, send):
        await self.app(scope, receive, send)
