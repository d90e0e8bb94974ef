"""Shared fixtures: a small viewer bundle and a spec document."""

import pytest

from swaggerui.assets import AssetFS
from swaggerui.handler import SwaggerUI

INDEX_HTML = b"<!doctype html><html><body><div id='swagger-ui'></div></body></html>"
APP_JS = b"window.ui = SwaggerUIBundle({url: 'spec'});"
STYLE_CSS = b"body { margin: 0; }"
LOGO_PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
SPEC = b'{"openapi":"3.0.0"}'

# 2024-01-02T03:04:05Z
MTIME = 1704164645.0


@pytest.fixture
def spec() -> bytes:
    return SPEC


@pytest.fixture
def assets() -> AssetFS:
    return AssetFS(
        {
            "index.html": INDEX_HTML,
            "app.js": APP_JS,
            "style.css": STYLE_CSS,
            "logo.png": LOGO_PNG,
            "fonts/inter.woff2": b"wOF2\x00\x01",
            "LICENSE": b"Apache License 2.0\n",
        },
        mtime=MTIME,
    )


@pytest.fixture
def handler(spec: bytes, assets: AssetFS) -> SwaggerUI:
    return SwaggerUI(spec, assets=assets)
