"""Run a handler under uvicorn.

uvicorn is an optional dependency (``pip install swaggerui-asgi[server]``);
the library itself never imports it.
"""

import logging

from swaggerui._internal.asgi import ASGIApp
from swaggerui.config import ServerConfig
from swaggerui.errors import ConfigurationError

logger = logging.getLogger("swaggerui.server")


def run_server(app: ASGIApp, config: ServerConfig) -> None:
    """Serve *app* on ``config.host:config.port`` until interrupted."""
    try:
        import uvicorn
    except ImportError as exc:
        msg = (
            "swaggerui serve requires 'uvicorn'. "
            "Install it with: pip install swaggerui-asgi[server]"
        )
        raise ConfigurationError(msg) from exc

    logger.info(
        "Serving Swagger UI on http://%s:%d%s",
        config.host,
        config.port,
        config.prefix,
    )
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
        lifespan="on",
    )
