"""Tests for the Swagger UI handler: dispatch, SPA fallback, and errors."""

import errno
import logging
import re
from urllib.parse import urljoin, urlsplit

import pytest

from conftest import APP_JS, INDEX_HTML, LOGO_PNG, SPEC, STYLE_CSS
from swaggerui.assets import AssetFile, AssetFS
from swaggerui.config import HandlerConfig
from swaggerui.handler import SwaggerUI, mount_depth, normalize_path, rebase_html


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("", ""),
            ("/", ""),
            (".", ""),
            ("/.", ""),
            ("//", ""),
            ("/spec", "spec"),
            ("spec", "spec"),
            ("/app.js", "app.js"),
            ("//app.js", "app.js"),
            ("/docs//pets/./123", "docs/pets/123"),
            ("/docs/pets/../app.js", "docs/app.js"),
            ("/docs/", "docs"),
        ],
    )
    def test_cleans_and_strips_leading_separator(self, path: str, expected: str) -> None:
        assert normalize_path(path) == expected

    @pytest.mark.parametrize(
        "path",
        ["/../../etc/passwd", "../etc/passwd", "/a/../../../etc/passwd", "/./../etc/passwd"],
    )
    def test_traversal_cannot_escape_root(self, path: str) -> None:
        key = normalize_path(path)
        assert key == "etc/passwd"
        assert not key.startswith(("/", ".."))


class TestConstruction:
    def test_spec_must_be_bytes(self, assets: AssetFS) -> None:
        with pytest.raises(TypeError, match="spec must be bytes"):
            SwaggerUI('{"openapi":"3.0.0"}', assets=assets)  # type: ignore[arg-type]

    def test_bytearray_is_copied(self, assets: AssetFS) -> None:
        buffer = bytearray(SPEC)
        handler = SwaggerUI(buffer, assets=assets)
        buffer[:] = b"changed"
        assert handler.handle("/spec").body == SPEC

    def test_defaults_to_bundled_viewer(self) -> None:
        handler = SwaggerUI(SPEC)
        assert "index.html" in handler.assets
        response = handler.handle("/")
        assert response.status == 200
        assert b"swagger-ui" in response.body_bytes

    def test_default_config(self, handler: SwaggerUI) -> None:
        assert handler.config == HandlerConfig()


class TestSpecEndpoint:
    def test_returns_exact_bytes(self, handler: SwaggerUI) -> None:
        response = handler.handle("/spec")
        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.body == b'{"openapi":"3.0.0"}'

    @pytest.mark.parametrize("path", ["/spec", "spec", "//spec", "/./spec", "/x/../spec"])
    def test_spec_path_variants(self, handler: SwaggerUI, path: str) -> None:
        assert handler.handle(path).body == SPEC

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "get"])
    def test_method_agnostic(self, handler: SwaggerUI, method: str) -> None:
        response = handler.handle("/spec", method)
        assert response.status == 200
        assert response.body == SPEC

    def test_spec_is_not_a_filesystem_lookup(self, spec: bytes) -> None:
        class ExplodingFS(AssetFS):
            def open(self, key: str) -> AssetFile:
                raise AssertionError(f"filesystem touched for {key!r}")

        handler = SwaggerUI(spec, assets=ExplodingFS({"index.html": INDEX_HTML}))
        assert handler.handle("/spec").status == 200

    def test_spec_shadows_an_asset_with_the_same_key(self, spec: bytes) -> None:
        handler = SwaggerUI(spec, assets=AssetFS({"index.html": INDEX_HTML, "spec": b"stale"}))
        assert handler.handle("/spec").body == spec

    def test_non_json_spec_is_served_verbatim(self, assets: AssetFS) -> None:
        yaml_spec = b"openapi: 3.0.0\ninfo:\n  title: Pets\n"
        handler = SwaggerUI(yaml_spec, assets=assets)
        response = handler.handle("/spec")
        assert response.body == yaml_spec
        assert response.content_type == "application/json"

    def test_spec_has_no_cache_validators(self, handler: SwaggerUI) -> None:
        response = handler.handle("/spec")
        assert response.header("ETag") is None
        assert response.header("Last-Modified") is None


class TestEntryDocument:
    def test_root_serves_index(self, handler: SwaggerUI) -> None:
        response = handler.handle("/")
        assert response.status == 200
        assert response.body == INDEX_HTML
        assert response.content_type.startswith("text/html")

    def test_root_and_empty_are_identical(self, handler: SwaggerUI) -> None:
        assert handler.handle("/") == handler.handle("")

    def test_index_by_name(self, handler: SwaggerUI) -> None:
        assert handler.handle("/index.html").body == INDEX_HTML


class TestAssets:
    def test_serves_script(self, handler: SwaggerUI) -> None:
        response = handler.handle("/app.js")
        assert response.status == 200
        assert response.content_type == "application/javascript"
        assert response.body == APP_JS

    def test_serves_stylesheet(self, handler: SwaggerUI) -> None:
        response = handler.handle("/style.css")
        assert response.status == 200
        assert response.content_type == "text/css"
        assert response.body == STYLE_CSS

    def test_serves_image(self, handler: SwaggerUI) -> None:
        response = handler.handle("/logo.png")
        assert response.status == 200
        assert response.content_type == "image/png"
        assert response.body == LOGO_PNG

    def test_serves_nested_asset(self, handler: SwaggerUI) -> None:
        response = handler.handle("/fonts/inter.woff2")
        assert response.status == 200
        assert response.body == b"wOF2\x00\x01"

    def test_unknown_extension_is_sniffed(self, handler: SwaggerUI) -> None:
        response = handler.handle("/LICENSE")
        assert response.status == 200
        assert response.content_type == "text/plain; charset=utf-8"

    def test_cache_control_from_config(self, spec: bytes, assets: AssetFS) -> None:
        config = HandlerConfig(cache_control="public, max-age=600")
        handler = SwaggerUI(spec, assets=assets, config=config)
        assert handler.handle("/app.js").header("Cache-Control") == "public, max-age=600"
        assert handler.handle("/spec").header("Cache-Control") is None

    def test_no_cache_control_by_default(self, handler: SwaggerUI) -> None:
        assert handler.handle("/app.js").header("Cache-Control") is None


class TestSPAFallback:
    @pytest.mark.parametrize(
        "path",
        ["/docs/pets/123", "/pets", "/operations/getPet", "/missing.html", "/v1.2", "/a/b/"],
    )
    def test_missing_non_asset_paths_get_index(self, handler: SwaggerUI, path: str) -> None:
        response = handler.handle(path)
        assert response.status == 200
        assert response.body == INDEX_HTML
        assert response.content_type.startswith("text/html")

    @pytest.mark.parametrize(
        "path",
        [
            "/missing.png",
            "/missing.js",
            "/missing.css",
            "/nested/dir/bundle.js",
            "/missing.mjs",
            "/swagger-ui-bundle.js.map",
            "/logo.svg",
            "/favicon.ico",
            "/photo.jpg",
            "/photo.jpeg",
            "/spinner.gif",
            "/hero.webp",
            "/fonts/inter.woff",
            "/fonts/missing.woff2",
        ],
    )
    def test_missing_static_assets_are_404(self, handler: SwaggerUI, path: str) -> None:
        response = handler.handle(path)
        assert response.status == 404
        assert response.body != INDEX_HTML

    def test_suffix_match_is_case_insensitive(self, handler: SwaggerUI) -> None:
        assert handler.handle("/MISSING.PNG").status == 404

    def test_traversal_falls_back_to_index(self, handler: SwaggerUI) -> None:
        response = handler.handle("/../../etc/passwd")
        assert response.status == 200
        assert response.body == INDEX_HTML

    def test_traversal_to_static_suffix_is_404(self, handler: SwaggerUI) -> None:
        assert handler.handle("/../../../app.js.png").status == 404

    def test_custom_exclusion_list(self, spec: bytes, assets: AssetFS) -> None:
        config = HandlerConfig(fallback_exclude_suffixes=(".svg",))
        handler = SwaggerUI(spec, assets=assets, config=config)
        assert handler.handle("/missing.svg").status == 404
        assert handler.handle("/missing.png").body == INDEX_HTML

    def test_empty_exclusion_list_always_falls_back(self, spec: bytes, assets: AssetFS) -> None:
        handler = SwaggerUI(
            spec, assets=assets, config=HandlerConfig(fallback_exclude_suffixes=())
        )
        assert handler.handle("/missing.js").body == INDEX_HTML

    def test_missing_index_is_404(self, spec: bytes) -> None:
        handler = SwaggerUI(spec, assets=AssetFS({"app.js": APP_JS}))
        assert handler.handle("/").status == 404
        assert handler.handle("/deep/link").status == 404
        assert handler.handle("/app.js").status == 200

    def test_custom_entry_document(self, spec: bytes) -> None:
        assets = AssetFS({"main.html": b"<html>main</html>"})
        handler = SwaggerUI(spec, assets=assets, config=HandlerConfig(index="main.html"))
        assert handler.handle("/").body == b"<html>main</html>"
        assert handler.handle("/deep/link").body == b"<html>main</html>"


HEADED_INDEX = b"<!doctype html><html><head><title>Docs</title></head><body></body></html>"


def _resolve_spec_path(page_path: str, body: bytes) -> str:
    """Path a browser on *page_path* would request for the relative URL ``spec``."""
    page = urljoin("http://testserver", page_path)
    match = re.search(rb'<base href="([^"]*)"', body)
    base = urljoin(page, match.group(1).decode()) if match else page
    return urlsplit(urljoin(base, "spec")).path


class TestDeepLinkBase:
    @pytest.mark.parametrize(
        ("path", "depth"),
        [("", 0), ("/", 0), ("/pets", 0), ("/pets/", 1), ("/pets/123", 1), ("/a//b", 2)],
    )
    def test_mount_depth(self, path: str, depth: int) -> None:
        assert mount_depth(path) == depth

    @pytest.mark.parametrize("path", ["/pets/123", "/a/b/c", "/operations/getPet/"])
    def test_bundled_viewer_finds_spec_from_deep_link(self, path: str) -> None:
        handler = SwaggerUI(SPEC)
        page = handler.handle(path)
        assert page.status == 200
        spec_path = _resolve_spec_path(path, page.body_bytes)
        assert spec_path == "/spec"
        assert handler.handle(spec_path).body == SPEC

    def test_root_entry_document_is_untouched(self, spec: bytes) -> None:
        handler = SwaggerUI(spec, assets=AssetFS({"index.html": HEADED_INDEX}))
        assert handler.handle("/").body == HEADED_INDEX
        assert handler.handle("/pets").body == HEADED_INDEX

    def test_deep_link_gets_base_in_head(self, spec: bytes) -> None:
        handler = SwaggerUI(spec, assets=AssetFS({"index.html": HEADED_INDEX}))
        body = handler.handle("/pets/123/edit").body_bytes
        assert b'<head><base href="../../"><title>' in body

    def test_rebased_document_has_its_own_etag(self, spec: bytes) -> None:
        handler = SwaggerUI(spec, assets=AssetFS({"index.html": HEADED_INDEX}))
        root = handler.handle("/")
        deep = handler.handle("/pets/123")
        assert deep.header("ETag") != root.header("ETag")
        assert handler.handle("/orders/9").header("ETag") == deep.header("ETag")
        cached = handler.handle("/pets/123", headers={"If-None-Match": deep.header("ETag")})
        assert cached.status == 304

    def test_existing_base_is_kept(self, spec: bytes) -> None:
        page = b'<html><head><base href="/static/"></head></html>'
        handler = SwaggerUI(spec, assets=AssetFS({"index.html": page}))
        assert handler.handle("/pets/123").body == page

    def test_other_html_assets_are_untouched(self, spec: bytes) -> None:
        handler = SwaggerUI(
            spec, assets=AssetFS({"index.html": HEADED_INDEX, "help/about.html": HEADED_INDEX})
        )
        assert handler.handle("/help/about.html").body == HEADED_INDEX

    def test_rebase_html(self) -> None:
        assert rebase_html(HEADED_INDEX, 0) == HEADED_INDEX
        assert rebase_html(b"<body>no head</body>", 2) == b"<body>no head</body>"
        assert rebase_html(b'<HEAD lang="en"></HEAD>', 1) == (
            b'<HEAD lang="en"><base href="../"></HEAD>'
        )


class _FailingFS(AssetFS):
    """Fails every open of *broken* with *error*."""

    def __init__(self, files, broken: str, error: OSError) -> None:
        super().__init__(files)
        self.broken = broken
        self.error = error

    def open(self, key: str) -> AssetFile:
        if key == self.broken:
            raise self.error
        return super().open(key)


class _BrokenStatFile(AssetFile):
    def stat(self):
        raise OSError(errno.EIO, "stat failed")


class TestFilesystemErrors:
    def test_open_error_is_500(self, spec: bytes) -> None:
        fs = _FailingFS(
            {"index.html": INDEX_HTML, "app.js": APP_JS},
            broken="app.js",
            error=PermissionError(errno.EACCES, "denied"),
        )
        response = SwaggerUI(spec, assets=fs).handle("/app.js")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_open_error_does_not_fall_back(self, spec: bytes) -> None:
        fs = _FailingFS(
            {"index.html": INDEX_HTML},
            broken="docs/pets",
            error=OSError(errno.EIO, "disk on fire"),
        )
        response = SwaggerUI(spec, assets=fs).handle("/docs/pets")
        assert response.status == 500

    def test_500_body_does_not_leak_detail(self, spec: bytes) -> None:
        fs = _FailingFS(
            {"index.html": INDEX_HTML},
            broken="index.html",
            error=OSError(errno.EIO, "/srv/secret/path exploded"),
        )
        response = SwaggerUI(spec, assets=fs).handle("/")
        assert response.status == 500
        assert "secret" not in response.text

    def test_fallback_open_error_is_404(self, spec: bytes) -> None:
        fs = _FailingFS(
            {"index.html": INDEX_HTML},
            broken="index.html",
            error=OSError(errno.EIO, "boom"),
        )
        assert SwaggerUI(spec, assets=fs).handle("/deep/link").status == 404

    def test_stat_error_is_500(self, spec: bytes) -> None:
        class StatFailFS(AssetFS):
            def open(self, key: str) -> AssetFile:
                return _BrokenStatFile(self[key])

        handler = SwaggerUI(spec, assets=StatFailFS({"index.html": INDEX_HTML}))
        assert handler.handle("/").status == 500

    def test_500_is_logged_with_traceback(
        self, spec: bytes, caplog: pytest.LogCaptureFixture
    ) -> None:
        fs = _FailingFS(
            {"index.html": INDEX_HTML, "app.js": APP_JS},
            broken="app.js",
            error=OSError(errno.EIO, "boom"),
        )
        with caplog.at_level(logging.ERROR, logger="swaggerui.server"):
            SwaggerUI(spec, assets=fs).handle("/app.js")
        assert any("500 GET /app.js" in r.getMessage() for r in caplog.records)
        assert caplog.records[-1].exc_info is not None

    def test_404_is_logged_at_debug(
        self, handler: SwaggerUI, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="swaggerui.server"):
            handler.handle("/missing.js")
        assert any(r.levelno == logging.DEBUG and "404" in r.getMessage() for r in caplog.records)


class _TrackingFS(AssetFS):
    """Records every handle it opens so tests can check they were closed."""

    def __init__(self, files) -> None:
        super().__init__(files)
        self.opened: list[AssetFile] = []

    def open(self, key: str) -> AssetFile:
        file = super().open(key)
        self.opened.append(file)
        return file


class TestHandleRelease:
    @pytest.mark.parametrize(
        ("path", "headers"),
        [
            ("/app.js", None),
            ("/", None),
            ("/deep/link", None),
            ("/app.js", {"Range": "bytes=0-3"}),
            ("/app.js", {"Range": "bytes=9999-"}),
            ("/app.js", {"If-Match": '"nope"'}),
        ],
    )
    def test_every_opened_handle_is_closed(self, spec: bytes, path: str, headers) -> None:
        fs = _TrackingFS({"index.html": INDEX_HTML, "app.js": APP_JS})
        SwaggerUI(spec, assets=fs).handle(path, headers=headers)
        assert fs.opened
        assert all(f.closed for f in fs.opened)

    def test_stat_failure_still_closes(self, spec: bytes) -> None:
        opened: list[AssetFile] = []

        class StatFailFS(AssetFS):
            def open(self, key: str) -> AssetFile:
                file = _BrokenStatFile(self[key])
                opened.append(file)
                return file

        SwaggerUI(spec, assets=StatFailFS({"index.html": INDEX_HTML})).handle("/")
        assert opened and opened[0].closed


class TestStatelessness:
    def test_repeated_requests_are_identical(self, handler: SwaggerUI) -> None:
        first = handler.handle("/app.js")
        handler.handle("/missing.png")
        handler.handle("/deep/link")
        assert handler.handle("/app.js") == first

    def test_assets_are_not_mutated(self, handler: SwaggerUI, assets: AssetFS) -> None:
        before = dict(assets)
        for path in ("/", "/spec", "/missing.js", "/deep/link", "/app.js"):
            handler.handle(path)
        assert dict(assets) == before
