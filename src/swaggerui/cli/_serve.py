"""``swaggerui serve`` — run the viewer for one spec file under uvicorn."""

import argparse
import logging
import sys

from swaggerui.cli._load import load_assets, load_spec
from swaggerui.config import ServerConfig
from swaggerui.errors import ConfigurationError
from swaggerui.handler import SwaggerUI
from swaggerui.mount import StripPrefix


def run_serve(args: argparse.Namespace) -> None:
    """Build the handler from CLI arguments and start the server.

    Every setup failure (unreadable spec, bad asset directory, bad
    config, uvicorn missing) prints ``Error: ...`` and exits with 1.
    """
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ServerConfig(
            host=args.host,
            port=args.port,
            prefix=args.prefix,
            log_level=args.log_level,
        )
        spec = load_spec(args.spec)
        handler = SwaggerUI(spec, assets=load_assets(args.assets))
    except (OSError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app = StripPrefix(handler, config.prefix) if config.prefix != "/" else handler

    from swaggerui.server.run import run_server

    try:
        run_server(app, config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
