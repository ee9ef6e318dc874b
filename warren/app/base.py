from __future__ import annotations

import dataclasses
import pathlib
import typing

EnvironDict = typing.Dict[str, object]
ResponseBody = typing.Iterable[bytes]


class Status:
    """
    Outcome of a single gopher request.

    Gopher has no status line, the protocol looks at this tag to decide what
    goes on the wire, so every value here must be handled by
    ``GopherProtocol.write_response``.
    """

    TEXT = "TEXT"
    BINARY = "BINARY"

    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    NO_GOPHERMAP = "NO_GOPHERMAP"
    NO_ENTRY = "NO_ENTRY"

    PATH_INJECTION = "PATH_INJECTION"

    # Rendered as an informational line followed by the end-of-response marker
    RECOVERABLE = frozenset([BAD_REQUEST, NOT_FOUND, NO_GOPHERMAP, NO_ENTRY])


class PathKind:
    DIRECTORY = "directory"
    FILE = "file"


@dataclasses.dataclass
class RequestContext:
    """
    Everything that has been learned about a request so far.

    The application fills this in one step at a time, fields that haven't
    been reached yet are left as None.
    """

    request_line: str
    selector: str = "/"
    path: typing.Optional[pathlib.Path] = None
    path_kind: typing.Optional[str] = None
    gophermap: typing.Optional[pathlib.Path] = None

    @classmethod
    def from_request_line(cls, request_line: str) -> RequestContext:
        return cls(request_line=request_line, selector=request_line or "/")


@dataclasses.dataclass
class Response:
    """
    Object that encapsulates information about a single gopher response.

    For the TEXT and BINARY statuses the body holds the resource bytes, for
    everything else the message explains what went wrong.
    """

    status: str
    message: str = ""
    body: typing.Optional[ResponseBody] = None


ApplicationCallable = typing.Callable[[EnvironDict], Response]
