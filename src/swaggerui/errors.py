"""swaggerui exception hierarchy.

Shared by the asset filesystem, the handler, and the mount wrapper so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class SwaggerUIError(Exception):
    """Base for all swaggerui-specific errors."""


class ConfigurationError(SwaggerUIError):
    """Raised when a handler or asset tree is configured incorrectly.

    Always raised at construction time, never while serving a request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SwaggerUIError):
    """An error that maps directly to an HTTP status code.

    The handler catches these and turns them into plain-text responses.
    ``detail`` is the only text a client ever sees.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — the asset does not exist and no fallback applies."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class InternalFailure(HTTPError):  # noqa: N818
    """500 — the asset filesystem failed for a reason other than absence.

    The detail is fixed so nothing about the failure leaks to the client;
    the cause is logged server-side instead.
    """

    def __init__(self) -> None:
        super().__init__(status=500, detail="Internal Server Error")


class PreconditionFailed(HTTPError):  # noqa: N818
    """412 — ``If-Match`` or ``If-Unmodified-Since`` did not hold."""

    def __init__(self, detail: str = "Precondition Failed") -> None:
        super().__init__(status=412, detail=detail)


class RangeNotSatisfiable(HTTPError):  # noqa: N818
    """416 — none of the requested byte ranges overlap the asset.

    Carries ``Content-Range: bytes */<size>`` so clients learn the length.
    """

    def __init__(self, size: int) -> None:
        super().__init__(
            status=416,
            detail="Requested Range Not Satisfiable",
            headers=(("Content-Range", f"bytes */{size}"),),
        )
