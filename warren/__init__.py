# ruff: noqa: F401
from .__version__ import __version__
from .app.base import PathKind, RequestContext, Response, Status
from .app.static import StaticGopherApplication
from .cache import Cache, UnboundedCache
from .classify import ResourceClassifier
from .errors import (
    BadRequestError,
    FormatError,
    GopherError,
    NoEntryInGophermapError,
    NoGophermapError,
    PathInjectionError,
    ResourceNotFoundError,
)
from .gophermap import (
    GopherEntry,
    GophermapCache,
    GophermapIndex,
    ItemType,
    parse_gophermap,
    parse_line,
)
from .paths import resolve_selector
from .protocol import GopherProtocol
from .server import GopherServer

__title__ = "Warren Gopher Server"
__license__ = "MIT"
