"""
Main entry point for running ``warren`` from the command line.

This will launch a gopher server running the StaticGopherApplication.
"""
# Black does not do a good job of formatting argparse code, IMHO.
# fmt: off
import argparse
import sys

from .__version__ import __version__
from .app.static import StaticGopherApplication
from .server import GopherServer

if sys.version_info < (3, 7):
    sys.exit("Fatal Error: warren requires Python 3.7+")


# noinspection PyTypeChecker
parser = argparse.ArgumentParser(
    prog="warren",
    description="A Gophermap Driven Gopher Protocol Server",
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
parser.add_argument(
    "-V", "--version",
    action="version",
    version="warren " + __version__
)
group = parser.add_argument_group("server configuration")
group.add_argument(
    "--host",
    help="Server address to bind to, leave empty to bind to all interfaces",
    default="127.0.0.1"
)
group.add_argument(
    "--port",
    help="Server port to bind to, also the port that gophermaps refer to",
    type=int,
    default=70
)
group = parser.add_argument_group("fileserver configuration")
group.add_argument(
    "--dir",
    help="Root directory on the filesystem to serve",
    default="/var/gopher",
    metavar="DIR",
    dest="root_directory",
)
group.add_argument(
    "--alias",
    help="Hostname that the gophermaps use for this server, "
         "may be repeated (default: localhost, 127.0.0.1, ::1)",
    action="append",
    metavar="HOST",
    dest="aliases",
)
group.add_argument(
    "--strict-gophermaps",
    help="Reject gophermap entries that have a selector but no host or port",
    action="store_true",
)


def main():
    args = parser.parse_args()
    app = StaticGopherApplication(
        root_directory=args.root_directory,
        hosts=args.aliases or ("localhost", "127.0.0.1", "::1"),
        port=args.port,
        strict_gophermaps=args.strict_gophermaps,
    )
    server = GopherServer(
        app=app,
        host=args.host,
        port=args.port,
    )
    server.run()


if __name__ == "__main__":
    main()
