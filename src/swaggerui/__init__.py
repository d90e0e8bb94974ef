"""swaggerui — serve a bundled Swagger UI and an OpenAPI document over ASGI.

Basic usage::

    from pathlib import Path

    from swaggerui import StripPrefix, SwaggerUI

    spec = Path("openapi.json").read_bytes()
    app = StripPrefix(SwaggerUI(spec), "/docs")

``GET /docs/spec`` returns the document verbatim, ``GET /docs/`` the
viewer, and any other non-asset path under ``/docs`` falls back to the
viewer's entry document so client-side deep links keep working.

Bring your own viewer build::

    from swaggerui import AssetFS

    app = SwaggerUI(spec, assets=AssetFS.from_directory("./swagger-dist"))
"""

__version__ = "0.1.0"
__all__ = [
    "Asset",
    "AssetFS",
    "ConfigurationError",
    "HTTPError",
    "HandlerConfig",
    "InternalFailure",
    "NotFound",
    "Response",
    "ServerConfig",
    "StripPrefix",
    "SwaggerUI",
    "SwaggerUIError",
    "normalize_path",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import swaggerui`` fast while providing a clean top-level API.
    """
    if name in ("SwaggerUI", "normalize_path"):
        from swaggerui import handler as _handler

        return getattr(_handler, name)

    if name == "StripPrefix":
        from swaggerui.mount import StripPrefix

        return StripPrefix

    if name in ("Asset", "AssetFS"):
        from swaggerui import assets as _assets

        return getattr(_assets, name)

    if name in ("HandlerConfig", "ServerConfig"):
        from swaggerui import config as _config

        return getattr(_config, name)

    if name == "Response":
        from swaggerui.http.response import Response

        return Response

    if name in ("ConfigurationError", "HTTPError", "InternalFailure", "NotFound", "SwaggerUIError"):
        from swaggerui import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
