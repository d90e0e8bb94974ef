"""Shared loading helpers for ``swaggerui serve`` and ``swaggerui assets``."""

from pathlib import Path

from swaggerui.assets import AssetFS


def load_assets(directory: str | None) -> AssetFS:
    """Asset tree from *directory*, or the bundled viewer when ``None``.

    Raises:
        ConfigurationError: *directory* does not exist.
    """
    if directory is None:
        return AssetFS.bundled()
    return AssetFS.from_directory(Path(directory))


def load_spec(path: str) -> bytes:
    """Read the spec file as raw bytes. No parsing, no validation.

    Raises:
        OSError: the file cannot be read.
    """
    return Path(path).read_bytes()
