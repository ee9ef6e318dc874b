"""
Exceptions raised while answering a single gopher request.

Every ``GopherError`` carries the client-visible message and the response
status it is rendered as. They are raised by the individual components and
converted into a ``Response`` at exactly one place, the application.
"""
from __future__ import annotations

import typing

from .app.base import Status


class FormatError(ValueError):
    """
    A gophermap line could not be turned into an entry.
    """


class GopherError(Exception):
    status: str = Status.NOT_FOUND
    message: str = "An unexpected error occurred."

    def __init__(self, message: typing.Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequestError(GopherError):
    status = Status.BAD_REQUEST
    message = (
        "The request line was not understood by the server. "
        "The request is aborted."
    )


class ResourceNotFoundError(GopherError):
    status = Status.NOT_FOUND
    message = "Resource could not be found."


class NoGophermapError(GopherError):
    status = Status.NO_GOPHERMAP
    message = "Internal error of the server. No gopher map was found."


class NoEntryInGophermapError(GopherError):
    status = Status.NO_ENTRY
    message = (
        "The requested resource exists, but it is not present in the gopher "
        "map. Therefore, no file type could be determined. "
        "The request is aborted."
    )


class PathInjectionError(GopherError):
    """
    The selector resolved to a location outside of the root directory.

    The message is only ever logged, the client gets nothing back.
    """

    status = Status.PATH_INJECTION
    message = "Path injection detected. The request is aborted."
