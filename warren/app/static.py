from __future__ import annotations

import os
import pathlib
import typing

from warren.app.base import (
    EnvironDict,
    PathKind,
    RequestContext,
    Response,
    Status,
)
from warren.classify import ResourceClassifier
from warren.errors import (
    BadRequestError,
    GopherError,
    NoGophermapError,
    ResourceNotFoundError,
)
from warren.gophermap import GophermapCache, GophermapIndex
from warren.paths import resolve_selector


class StaticGopherApplication:
    """
    Application for serving a static directory tree over gopher.

    Every directory that should be reachable must contain a file named
    "gophermap". Requesting a directory returns its gophermap, and requesting
    a file only works if the gophermap of the file's directory has an entry
    for it. The item type of that entry decides if the file is sent as text
    (with the "." terminator line) or as raw binary data.

    Only entries that point to this server are taken into account, which is
    why the application needs to know every host alias that the gophermaps
    use to refer to it, as well as the port.
    """

    # Chunk size for streaming files, taken from the twisted FileSender class
    CHUNK_SIZE = 2**14

    gophermap_name = "gophermap"

    root: pathlib.Path
    hosts: typing.FrozenSet[str]
    port: str
    gophermaps: GophermapCache
    classifier: ResourceClassifier

    def __init__(
        self,
        root_directory: str = "/var/gopher",
        hosts: typing.Iterable[str] = ("localhost", "127.0.0.1", "::1"),
        port: typing.Union[int, str] = 70,
        strict_gophermaps: bool = False,
        gophermaps: typing.Optional[GophermapCache] = None,
        classifier: typing.Optional[ResourceClassifier] = None,
    ):
        self.root = pathlib.Path(root_directory).resolve(strict=True)
        if not self.root.is_dir():
            raise NotADirectoryError(f"Root directory {self.root} is not a directory")

        self.hosts = frozenset(hosts)
        self.port = str(port)

        if gophermaps is None:
            gophermaps = GophermapCache(strict=strict_gophermaps)
        self.gophermaps = gophermaps
        self.classifier = classifier or ResourceClassifier()

    def __call__(self, environ: EnvironDict) -> Response:
        request_line = typing.cast(typing.Optional[str], environ["REQUEST_LINE"])
        try:
            if request_line is None:
                raise BadRequestError()
            request = RequestContext.from_request_line(request_line)
            return self.serve(request)
        except GopherError as e:
            return Response(e.status, e.message)

    def serve(self, request: RequestContext) -> Response:
        """
        Convert a selector into a filesystem path, and attempt to serve the
        file or directory that is represented at that path.
        """
        path = request.path = resolve_selector(self.root, request.selector)
        gophermap = self.locate_gophermap(request, path)

        if request.path_kind == PathKind.DIRECTORY:
            # Directories are always served as their gophermap
            return Response(Status.TEXT, body=self.load_file(gophermap))

        index = self.load_gophermap(gophermap)
        binary = self.classifier.is_binary(
            index, self.hosts, self.port, request.selector
        )
        status = Status.BINARY if binary else Status.TEXT
        return Response(status, body=self.load_file(path))

    def locate_gophermap(
        self, request: RequestContext, path: pathlib.Path
    ) -> pathlib.Path:
        """
        Find the gophermap that governs the resolved path.
        """
        try:
            if path.is_dir():
                request.path_kind = PathKind.DIRECTORY
                gophermap = path / self.gophermap_name
            elif path.is_file() and os.access(path, os.R_OK):
                request.path_kind = PathKind.FILE
                gophermap = path.parent / self.gophermap_name
            else:
                raise ResourceNotFoundError()

            if not gophermap.is_file() or not os.access(gophermap, os.R_OK):
                raise NoGophermapError()

            # Make sure that every spelling of the same file shares a cache slot
            request.gophermap = gophermap.resolve()
            return request.gophermap
        except OSError:
            # Filename too large, etc.
            raise ResourceNotFoundError()

    def load_gophermap(self, gophermap: pathlib.Path) -> GophermapIndex:
        try:
            return self.gophermaps.get(gophermap)
        except OSError:
            raise NoGophermapError()

    def load_file(self, filesystem_path: pathlib.Path) -> typing.Iterator[bytes]:
        """
        Load a file in chunks to allow streaming to the TCP socket.
        """
        with filesystem_path.open("rb") as fp:
            while True:
                data = fp.read(self.CHUNK_SIZE)
                if not data:
                    break
                yield data
