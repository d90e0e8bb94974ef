"""Read-only asset filesystem.

An ``AssetFS`` is an immutable mapping from relative key to ``Asset``,
populated once (from memory, a directory, or package data) and shared by
every request.  Requests never touch the disk: ``open()`` hands out a
fresh in-memory read handle per call, so there is nothing to lock.

Keys use ``/`` separators and never start with one::

    fs = AssetFS.from_directory("./dist")
    with fs.open("index.html") as f:
        info = f.stat()
        body = f.read()
"""

import errno
import hashlib
import io
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType

from swaggerui.errors import ConfigurationError

logger = logging.getLogger("swaggerui.assets")


def _etag_for(content: bytes) -> str:
    return '"' + hashlib.blake2b(content, digest_size=16).hexdigest() + '"'


def _is_valid_key(key: str) -> bool:
    """Whether *key* is a clean relative path (no ``..``, ``.``, or empty segments)."""
    if not key or key.startswith("/"):
        return False
    return all(part not in ("", ".", "..") for part in key.split("/"))


@dataclass(frozen=True, slots=True)
class Asset:
    """One bundled file.

    ``mtime`` is a POSIX timestamp, or ``None`` when the source has no
    meaningful modification time (package data, in-memory trees).
    """

    name: str
    content: bytes
    mtime: float | None = None
    etag: str = ""

    @classmethod
    def build(cls, key: str, content: bytes, mtime: float | None = None) -> "Asset":
        """Create an asset, deriving ``name`` from *key* and computing the etag."""
        return cls(
            name=key.rsplit("/", 1)[-1],
            content=bytes(content),
            mtime=mtime,
            etag=_etag_for(content),
        )


@dataclass(frozen=True, slots=True)
class AssetInfo:
    """What ``AssetFile.stat()`` reports."""

    name: str
    size: int
    mtime: float | None
    etag: str


class AssetFile(io.BytesIO):
    """A per-request read handle over one asset's bytes."""

    def __init__(self, asset: Asset) -> None:
        super().__init__(asset.content)
        self._asset = asset

    @property
    def asset(self) -> Asset:
        return self._asset

    def stat(self) -> AssetInfo:
        if self.closed:
            raise OSError(errno.EBADF, "stat on closed asset", self._asset.name)
        return AssetInfo(
            name=self._asset.name,
            size=len(self._asset.content),
            mtime=self._asset.mtime,
            etag=self._asset.etag,
        )


class AssetFS(Mapping[str, Asset]):
    """Immutable mapping from relative key to ``Asset``.

    Accepts raw bytes or prebuilt ``Asset`` values::

        fs = AssetFS({"index.html": b"<html>...</html>", "app.js": b"..."})
    """

    __slots__ = ("_assets",)

    def __init__(
        self,
        files: Mapping[str, bytes | Asset] | None = None,
        *,
        mtime: float | None = None,
    ) -> None:
        assets: dict[str, Asset] = {}
        for key, value in (files or {}).items():
            if not _is_valid_key(key):
                msg = f"invalid asset key {key!r}: must be a clean relative path"
                raise ConfigurationError(msg)
            if isinstance(value, Asset):
                assets[key] = value
            else:
                assets[key] = Asset.build(key, value, mtime)
        self._assets = MappingProxyType(assets)

    # -- Constructors --

    @classmethod
    def from_directory(cls, directory: str | Path) -> "AssetFS":
        """Load every regular file under *directory* into memory.

        Symlinks resolving outside the directory are skipped so the tree
        can never expose files from elsewhere on disk.
        """
        root = Path(directory).resolve()
        if not root.is_dir():
            msg = f"asset directory does not exist: {directory}"
            raise ConfigurationError(msg)

        assets: dict[str, Asset] = {}
        for path in sorted(root.rglob("*")):
            resolved = path.resolve()
            if not resolved.is_relative_to(root):
                logger.debug("Skipping %s: resolves outside %s", path, root)
                continue
            if not resolved.is_file():
                continue
            key = path.relative_to(root).as_posix()
            stat = resolved.stat()
            assets[key] = Asset.build(key, resolved.read_bytes(), stat.st_mtime)

        logger.info("Loaded %d assets from %s", len(assets), root)
        return cls(assets)

    @classmethod
    def from_package(cls, package: str, subdir: str = "embed") -> "AssetFS":
        """Load a tree shipped as package data (``importlib.resources``)."""
        base = resources.files(package)
        for part in subdir.split("/"):
            if part:
                base = base.joinpath(part)
        if not base.is_dir():
            msg = f"package {package!r} has no asset directory {subdir!r}"
            raise ConfigurationError(msg)

        assets: dict[str, Asset] = {}
        for key, node in _walk(base, ""):
            assets[key] = Asset.build(key, node.read_bytes())

        logger.info("Loaded %d assets from %s/%s", len(assets), package, subdir)
        return cls(assets)

    @classmethod
    def bundled(cls) -> "AssetFS":
        """The default viewer shipped with this package."""
        return cls.from_package("swaggerui", "embed")

    # -- Filesystem API --

    def open(self, key: str) -> AssetFile:
        """Open *key* for reading.

        Raises:
            FileNotFoundError: No asset under *key*.
            OSError: *key* is not a clean relative path.
        """
        if not _is_valid_key(key):
            raise OSError(errno.EINVAL, "invalid asset key", key)
        try:
            asset = self._assets[key]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, "no such asset", key) from None
        return AssetFile(asset)

    # -- Mapping protocol --

    def __getitem__(self, key: str) -> Asset:
        return self._assets[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetFS({len(self._assets)} assets)"


def _walk(node: Traversable, prefix: str) -> Iterator[tuple[str, Traversable]]:
    for child in sorted(node.iterdir(), key=lambda c: c.name):
        key = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _walk(child, key + "/")
        elif child.is_file():
            yield key, child
