from __future__ import annotations

import typing

from .cache import Cache, UnboundedCache
from .errors import NoEntryInGophermapError
from .gophermap import GophermapIndex


class ResourceClassifier:
    """
    Decide if a selector should be streamed as a binary file or as text.

    The filesystem can't tell us this, so the answer comes from the item
    type that the directory's gophermap declares for the selector. Only
    entries advertised under one of this server's own host aliases and port
    are considered.

    Answers are memoized by selector alone. If two gophermaps declare the
    same selector with different types, the first one to be looked up wins.
    """

    cache: Cache[str, bool]

    def __init__(self, cache: typing.Optional[Cache[str, bool]] = None):
        self.cache = UnboundedCache() if cache is None else cache

    def is_binary(
        self,
        index: GophermapIndex,
        hosts: typing.Collection[str],
        port: str,
        selector: str,
    ) -> bool:
        binary = self.cache.get(selector)
        if binary is None:
            for entry in index:
                if (
                    entry.host in hosts
                    and entry.port == port
                    and entry.selector == selector
                ):
                    break
            else:
                raise NoEntryInGophermapError()

            binary = entry.is_binary
            self.cache.set(selector, binary)

        return binary
