"""The request as the handler sees it.

Only the parts of an ASGI scope the handler needs: method, path,
root path, and headers.  There is no body; nothing here reads one.
"""

from dataclasses import dataclass, field

from swaggerui._internal.asgi import Scope
from swaggerui.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    method: str
    path: str
    root_path: str = ""
    headers: Headers = field(default_factory=Headers)

    @classmethod
    def from_asgi(cls, scope: Scope) -> "Request":
        """Build a Request from an ASGI ``http`` scope.

        Some servers (and routers that mount sub-applications) leave the
        mount prefix in ``path`` and record it in ``root_path``; the
        prefix is removed here so the handler always sees paths relative
        to its own root.
        """
        path = scope.get("path", "/") or "/"
        root_path = scope.get("root_path", "") or ""
        if root_path and path.startswith(root_path):
            rest = path[len(root_path) :]
            if not rest or rest.startswith("/"):
                path = rest or "/"
        return cls(
            method=scope.get("method", "GET").upper(),
            path=path,
            root_path=root_path,
            headers=Headers(tuple(scope.get("headers", ()))),
        )

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"
