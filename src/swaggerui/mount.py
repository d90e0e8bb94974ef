"""Mount an ASGI app under a path prefix.

The Swagger UI handler expects paths relative to its own root.  Hosts
that route by prefix (Starlette's ``Mount``, uvicorn's ``--root-path``)
already arrange that; ``StripPrefix`` does it for everything else.

Follows the ASGI convention that ``path`` keeps the full request path
and ``root_path`` names the mount point: the wrapped app receives the
extended ``root_path`` and strips it itself (``Request.from_asgi``).
"""

from swaggerui._internal.asgi import ASGIApp, Receive, Scope, Send
from swaggerui.errors import NotFound
from swaggerui.handler import error_response
from swaggerui.http.response import Response
from swaggerui.server.sender import send_response


class StripPrefix:
    """ASGI wrapper that serves *app* only under *prefix*.

    Usage::

        app = StripPrefix(SwaggerUI(spec), "/docs")

    - ``/docs/...`` is forwarded with ``root_path`` extended by ``/docs``;
    - ``/docs`` redirects (301) to ``/docs/`` so relative asset URLs in
      the entry document resolve under the prefix;
    - anything else is a 404.

    A prefix of ``"/"`` (or ``""``) forwards everything unchanged.
    """

    __slots__ = ("_app", "_prefix")

    def __init__(self, app: ASGIApp, prefix: str) -> None:
        self._app = app
        # Normalize: leading slash, no trailing slash; root becomes "".
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket") or not self._prefix:
            await self._app(scope, receive, send)
            return

        root_path = scope.get("root_path", "") or ""
        path = scope.get("path", "/")
        relative = path[len(root_path) :] if root_path and path.startswith(root_path) else path

        if relative == self._prefix:
            if scope["type"] != "http":
                return
            location = root_path + self._prefix + "/"
            query = scope.get("query_string", b"")
            if query:
                location += "?" + query.decode("latin-1")
            await send_response(Response(body=b"", status=301).with_header("Location", location), send)
            return

        if not relative.startswith(self._prefix + "/"):
            if scope["type"] == "http":
                await send_response(error_response(NotFound()), send)
            return

        child = dict(scope)
        child["root_path"] = root_path + self._prefix
        child["path"] = root_path + relative
        await self._app(child, receive, send)
