"""
Reading gophermap files.

A gophermap is a plain text file that lives next to the files it describes.
Every line is one menu entry in the RFC 1436 wire format:

    <type><description> TAB <selector> TAB <host> TAB <port>

The server uses the map for two things: it's sent verbatim to clients that
request the directory, and it's the only source of truth for the item type of
every file in that directory.
"""
from __future__ import annotations

import dataclasses
import os
import typing

from .cache import Cache, UnboundedCache
from .errors import FormatError

PathLike = typing.Union[str, "os.PathLike[str]"]


class ItemType:
    """
    Gopher item type codes (RFC 1436 section 3.8, plus common extensions).

    Gophermap authors may use characters that are not listed here, those are
    kept as-is on the parsed entry.
    """

    TEXT = "0"
    MENU = "1"
    CSO = "2"
    ERROR = "3"
    BINHEX = "4"
    DOS_BINARY = "5"
    UUENCODED = "6"
    SEARCH = "7"
    TELNET = "8"
    BINARY = "9"
    REDUNDANT = "+"
    TN3270 = "T"
    GIF = "g"
    IMAGE = "I"

    INFO = "i"
    HTML = "h"
    SOUND = "s"

    # Files that need to be sent without the end-of-response marker
    BINARY_TYPES = frozenset([DOS_BINARY, BINARY])


@dataclasses.dataclass(frozen=True)
class GopherEntry:
    """
    A single line of a gophermap.
    """

    item_type: str
    description: str = ""
    selector: str = ""
    host: str = ""
    port: str = ""

    @property
    def is_binary(self) -> bool:
        return self.item_type in ItemType.BINARY_TYPES


@dataclasses.dataclass(frozen=True)
class GophermapIndex:
    """
    All entries of a gophermap, in the same order as the file.
    """

    entries: typing.Tuple[GopherEntry, ...] = ()
    path: typing.Optional[str] = None

    def __iter__(self) -> typing.Iterator[GopherEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def parse_line(line: str, strict: bool = False) -> GopherEntry:
    """
    Parse one gophermap line (without the line ending) into an entry.

    Missing trailing fields are left empty. In strict mode, a line that points
    to a selector must also name the host and port that serve it.
    """
    if not line:
        raise FormatError("Empty gophermap line")

    fields = line.split("\t")
    item_type, description = fields[0][:1], fields[0][1:]
    selector, host, port = (fields[1:4] + ["", "", ""])[:3]

    if strict and selector and not (host and port):
        raise FormatError(f"Missing host or port for selector {selector!r}")

    return GopherEntry(item_type, description, selector, host, port)


def parse_gophermap(
    text: str, path: typing.Optional[str] = None, strict: bool = False
) -> GophermapIndex:
    """
    Parse the full contents of a gophermap.

        >>> index = parse_gophermap("iHello\\t(NULL)\\t(NULL)\\t0\\n")
        >>> index.entries[0].description
        'Hello'
    """
    entries = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if not line:
            continue
        entries.append(parse_line(line, strict=strict))
    return GophermapIndex(tuple(entries), path)


class GophermapCache:
    """
    Load gophermaps from disk and remember the parsed result.

    The cache is keyed by path, so callers need to canonicalize the path
    first (resolve symlinks and relative segments). Otherwise the same file
    will be read and parsed once for every different spelling of its name.
    """

    encoding = "utf-8"

    cache: Cache[str, GophermapIndex]

    def __init__(
        self,
        cache: typing.Optional[Cache[str, GophermapIndex]] = None,
        strict: bool = False,
    ):
        self.cache = UnboundedCache() if cache is None else cache
        self.strict = strict

    def get(self, canonical_path: PathLike) -> GophermapIndex:
        key = os.fspath(canonical_path)
        index = self.cache.get(key)
        if index is None:
            index = self.load(key)
            self.cache.set(key, index)
        return index

    def load(self, path: str) -> GophermapIndex:
        with open(path, encoding=self.encoding, errors="surrogateescape") as fp:
            text = fp.read()
        return parse_gophermap(text, path=path, strict=self.strict)
