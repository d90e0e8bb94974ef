"""swaggerui CLI — serve a spec with the bundled viewer, inspect asset trees.

Entry point registered as ``swaggerui`` in ``pyproject.toml``::

    [project.scripts]
    swaggerui = "swaggerui.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``swaggerui`` command."""
    parser = argparse.ArgumentParser(
        prog="swaggerui",
        description="Serve an OpenAPI document with a bundled Swagger UI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- swaggerui serve ----------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve a spec file with the viewer")
    serve_parser.add_argument("spec", help="Path to the OpenAPI document (served verbatim)")
    serve_parser.add_argument(
        "--assets",
        default=None,
        help="Directory of viewer assets (default: the bundled viewer)",
    )
    serve_parser.add_argument("--prefix", default="/", help="Mount path, e.g. /docs")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port number")
    serve_parser.add_argument(
        "--log-level",
        default="info",
        choices=("critical", "error", "warning", "info", "debug"),
        help="Logging verbosity",
    )

    # -- swaggerui assets ---------------------------------------------------
    assets_parser = subparsers.add_parser("assets", help="List the assets a handler would serve")
    assets_parser.add_argument(
        "--assets",
        default=None,
        help="Directory of viewer assets (default: the bundled viewer)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from swaggerui.cli._serve import run_serve

        run_serve(args)
    elif args.command == "assets":
        from swaggerui.cli._assets import run_assets

        run_assets(args)
