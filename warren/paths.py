from __future__ import annotations

import os
import pathlib
import typing

from .errors import PathInjectionError, ResourceNotFoundError


def resolve_selector(
    root_directory: typing.Union[str, pathlib.Path], selector: str
) -> pathlib.Path:
    """
    Convert a gopher selector into an absolute path inside of the root.

    The selector is appended to the root as text, so "/docs" and "docs" both
    point to <root>/docs. All ".." segments and symlinks are resolved before
    checking that the result is still inside of the root directory, this is
    the only thing that stands between a client and the rest of the
    filesystem.
    """
    root = pathlib.Path(root_directory).resolve()
    if "\x00" in selector:
        raise ResourceNotFoundError()

    try:
        path = root.joinpath(selector.lstrip("/")).resolve()
    except (OSError, RuntimeError, ValueError):
        # Filename too long, symlink loops, etc.
        raise ResourceNotFoundError()

    if os.path.commonpath([root, path]) != str(root):
        raise PathInjectionError(f"Selector {selector!r} escapes {root}")

    return path
