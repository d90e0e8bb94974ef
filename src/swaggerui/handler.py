"""The Swagger UI handler — bundled viewer assets plus one spec endpoint.

Every request goes through one linear dispatch:

1. normalise the path into a lookup key (``..`` can never climb above
   the root, the leading ``/`` is dropped);
2. the spec key (``spec``) returns the specification bytes verbatim;
3. the empty key becomes the entry document (``index.html``);
4. anything else is opened from the asset filesystem, falling back to
   the entry document when the asset is missing and the key does not
   look like a script, stylesheet, or image (client-side routing deep
   links);
5. the opened asset is served with conditional-GET and range support;
   the entry document served for a deep link gets a ``<base>`` pointing
   back at the mount root so its relative URLs (``spec``) still resolve.

The handler holds no per-request state and is safe to call concurrently.
"""

import logging
import posixpath
import re
from collections.abc import Mapping

from swaggerui._internal.asgi import Receive, Scope, Send
from swaggerui.assets import AssetFile, AssetFS
from swaggerui.config import HandlerConfig
from swaggerui.errors import HTTPError, InternalFailure, NotFound
from swaggerui.http.content import content_type_for, serve_content
from swaggerui.http.headers import Headers
from swaggerui.http.request import Request
from swaggerui.http.response import Response
from swaggerui.server.sender import send_response

logger = logging.getLogger("swaggerui.server")

_HEAD_TAG_RE = re.compile(rb"<head(?:\s[^>]*)?>", re.IGNORECASE)
_BASE_TAG_RE = re.compile(rb"<base[\s>]", re.IGNORECASE)


def normalize_path(path: str) -> str:
    """Turn a request path into an asset lookup key.

    Cleans ``.``/``..``/repeated separators as if the path were rooted,
    then strips the leading separator::

        >>> normalize_path("/docs//./pets/../app.js")
        'docs/app.js'
        >>> normalize_path("/../../etc/passwd")
        'etc/passwd'
        >>> normalize_path("/")
        ''
    """
    return posixpath.normpath("/" + path).lstrip("/")


def mount_depth(path: str) -> int:
    """Directories between the request's URL directory and the mount root.

    A browser resolves relative URLs against the directory of the page's
    own path, so a deep link like ``/pets/123`` is one level below the
    root (``/pets/``) and ``/a//b`` is two (empty segments count)::

        >>> mount_depth("/")
        0
        >>> mount_depth("/pets")
        0
        >>> mount_depth("/pets/123")
        1
    """
    if not path.startswith("/"):
        path = "/" + path
    return path.count("/") - 1


def rebase_html(content: bytes, depth: int) -> bytes:
    """Insert ``<base href="../...">`` so relative URLs resolve at the mount root.

    Returns *content* unchanged when it is already at the root, declares
    its own ``<base>``, or has no ``<head>`` to put one in.
    """
    if depth <= 0 or _BASE_TAG_RE.search(content):
        return content
    match = _HEAD_TAG_RE.search(content)
    if match is None:
        return content
    tag = b'<base href="' + b"../" * depth + b'">'
    return content[: match.end()] + tag + content[match.end() :]


def error_response(exc: HTTPError) -> Response:
    """Plain-text response for an HTTP error. Only ``exc.detail`` is exposed."""
    response = Response(body=exc.detail or str(exc.status), status=exc.status).with_header(
        "X-Content-Type-Options", "nosniff"
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


class SwaggerUI:
    """ASGI handler serving a bundled Swagger UI and an OpenAPI document.

    The spec is an opaque byte buffer fixed at construction time; build a
    new handler to serve a different one.  Mount it so it only sees paths
    relative to its own root (see ``StripPrefix``)::

        spec = Path("openapi.json").read_bytes()
        app = StripPrefix(SwaggerUI(spec), "/docs")

    ``handle()`` is the synchronous core and is usable without ASGI::

        response = SwaggerUI(spec).handle("/spec")
        assert response.body == spec
    """

    __slots__ = ("_assets", "_config", "_spec")

    def __init__(
        self,
        spec: bytes,
        *,
        assets: AssetFS | None = None,
        config: HandlerConfig | None = None,
    ) -> None:
        if not isinstance(spec, bytes | bytearray | memoryview):
            msg = f"spec must be bytes, got {type(spec).__name__}"
            raise TypeError(msg)
        self._spec = bytes(spec)
        self._assets = assets if assets is not None else AssetFS.bundled()
        self._config = config or HandlerConfig()

    @property
    def spec(self) -> bytes:
        return self._spec

    @property
    def assets(self) -> AssetFS:
        return self._assets

    @property
    def config(self) -> HandlerConfig:
        return self._config

    # -- Per-request contract --

    def handle(
        self,
        path: str,
        method: str = "GET",
        headers: Headers | Mapping[str, str] | None = None,
    ) -> Response:
        """Resolve one request to a Response. Never raises for HTTP errors."""
        if not isinstance(headers, Headers):
            headers = Headers.from_dict(headers)
        method = method.upper()
        try:
            return self._dispatch(normalize_path(path), method, headers, mount_depth(path))
        except HTTPError as exc:
            if exc.status >= 500:
                logger.exception("%d %s %s", exc.status, method, path)
            else:
                logger.debug("%d %s %s — %s", exc.status, method, path, exc.detail)
            return error_response(exc)

    def handle_request(self, request: Request) -> Response:
        return self.handle(request.path, request.method, request.headers)

    def _dispatch(self, key: str, method: str, headers: Headers, depth: int = 0) -> Response:
        config = self._config
        if key == config.spec_key:
            return Response(body=self._spec, content_type=config.spec_content_type)
        if not key:
            key = config.index

        with self._open(key) as file:
            try:
                info = file.stat()
                content = file.read()
            except OSError as exc:
                raise InternalFailure() from exc

            etag = info.etag
            media_type = content_type_for(info.name, content)
            if file.asset is self._assets.get(config.index) and media_type.startswith("text/html"):
                # Deep links: relative URLs in the entry document must resolve at the mount root
                rebased = rebase_html(content, depth)
                if rebased is not content:
                    content = rebased
                    etag = f'{etag[:-1]}-{depth}"' if etag else etag

            return serve_content(
                method,
                headers,
                name=info.name,
                content=content,
                mtime=info.mtime,
                etag=etag,
                content_type=media_type,
                cache_control=config.cache_control,
            )

    def _open(self, key: str) -> AssetFile:
        """Open *key*, applying the SPA fallback when it is missing.

        Raises:
            NotFound: *key* is missing and either looks like a static asset
                or the entry document is missing too.
            InternalFailure: the filesystem failed for any other reason.
        """
        config = self._config
        try:
            return self._assets.open(key)
        except FileNotFoundError:
            if key == config.index or config.is_static_suffix(key):
                raise NotFound() from None
        except OSError as exc:
            raise InternalFailure() from exc

        try:
            return self._assets.open(config.index)
        except OSError:
            raise NotFound() from None

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request.from_asgi(scope)
        response = self.handle_request(request)
        await send_response(response, send, head=request.is_head)

    def __repr__(self) -> str:
        return f"SwaggerUI(spec={len(self._spec)} bytes, assets={len(self._assets)})"


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Acknowledge lifespan events; the handler has nothing to set up."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return
