"""Handler and server configuration.

Both configs are frozen dataclasses — immutable after creation,
IDE-autocompletable, validated once in ``__post_init__``.
"""

from dataclasses import dataclass

from swaggerui.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class HandlerConfig:
    """Routing knobs for a ``SwaggerUI`` handler. Immutable after creation.

    The defaults reproduce the stock layout: the spec at ``spec``, the
    entry document at ``index.html``, and no SPA fallback for missing
    scripts, stylesheets, or images::

        config = HandlerConfig(cache_control="public, max-age=600")
    """

    spec_key: str = "spec"
    index: str = "index.html"

    # Missing assets with these suffixes are a 404, never the entry document
    fallback_exclude_suffixes: tuple[str, ...] = (
        # Scripts and stylesheets
        ".js",
        ".mjs",
        ".map",
        ".css",
        # Images
        ".png",
        ".svg",
        ".ico",
        ".gif",
        ".jpg",
        ".jpeg",
        ".webp",
        # Fonts
        ".woff",
        ".woff2",
    )

    spec_content_type: str = "application/json"

    # Sent with every asset response when set; the spec endpoint never caches
    cache_control: str | None = None

    def __post_init__(self) -> None:
        if not self.spec_key or self.spec_key.startswith("/"):
            msg = f"spec_key must be a non-empty relative key, got {self.spec_key!r}"
            raise ConfigurationError(msg)
        if not self.index or self.index.startswith("/"):
            msg = f"index must be a non-empty relative key, got {self.index!r}"
            raise ConfigurationError(msg)
        for suffix in self.fallback_exclude_suffixes:
            if not suffix.startswith(".") or len(suffix) < 2:
                msg = f"fallback suffix must look like '.ext', got {suffix!r}"
                raise ConfigurationError(msg)

    def is_static_suffix(self, key: str) -> bool:
        """Whether *key* names a static asset that must not fall back."""
        lowered = key.lower()
        return any(lowered.endswith(s.lower()) for s in self.fallback_exclude_suffixes)


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Settings for ``swaggerui serve``."""

    host: str = "127.0.0.1"
    port: int = 8000
    prefix: str = "/"
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            msg = f"port out of range: {self.port}"
            raise ConfigurationError(msg)
        if not self.prefix.startswith("/"):
            msg = f"prefix must start with '/', got {self.prefix!r}"
            raise ConfigurationError(msg)
