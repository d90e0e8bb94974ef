"""Immutable, case-insensitive request headers.

Stores the raw byte pairs from the ASGI scope and decodes on access.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Case-insensitive view over raw ASGI header pairs.

    ``headers["range"]`` returns the first value; repeated headers such as
    ``If-None-Match`` are joined with ``", "`` by ``get_joined``.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw

    @classmethod
    def from_dict(cls, headers: Mapping[str, str] | None) -> "Headers":
        """Build from a plain ``{name: value}`` dict (tests, direct ``handle()`` calls)."""
        if not headers:
            return cls()
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def _values(self, key: str) -> Iterator[str]:
        wanted = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == wanted:
                yield value.decode("latin-1")

    def __getitem__(self, key: str) -> str:
        for value in self._values(key):
            return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return next(self._values(key), None) is not None

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            lowered = name.decode("latin-1").lower()
            if lowered not in seen:
                seen.add(lowered)
                yield lowered

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        return f"Headers({dict(self)!r})"

    def get_joined(self, key: str) -> str | None:
        """All values for *key* joined by commas, or ``None`` when absent."""
        values = list(self._values(key))
        return ", ".join(values) if values else None
