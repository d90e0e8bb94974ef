"""``swaggerui assets`` — list the assets a handler would serve.

Prints a table of key, size, and content type for every file in the
asset tree (the bundled viewer unless ``--assets`` is given).
"""

import argparse
import sys

from swaggerui.cli._load import load_assets
from swaggerui.errors import ConfigurationError
from swaggerui.http.content import content_type_for


def run_assets(args: argparse.Namespace) -> None:
    try:
        assets = load_assets(args.assets)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not assets:
        print("No assets found.")
        return

    # Build rows: (key, size, content_type)
    rows: list[tuple[str, str, str]] = [
        (key, str(len(asset.content)), content_type_for(asset.name, asset.content))
        for key, asset in sorted(assets.items())
    ]

    max_key = max(max(len(r[0]) for r in rows), 4)  # "PATH" header
    max_size = max(max(len(r[1]) for r in rows), 4)  # "SIZE" header

    fmt = f"{{:<{max_key}}}  {{:>{max_size}}}  {{}}"
    print(fmt.format("PATH", "SIZE", "CONTENT-TYPE"))
    sep_len = max_key + max_size + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for key, size, content_type in rows:
        print(fmt.format(key, size, content_type))
