from __future__ import annotations

import socket
import sys
import typing

from twisted.internet import reactor as _reactor
from twisted.internet.defer import Deferred
from twisted.internet.endpoints import TCP4ServerEndpoint
from twisted.internet.protocol import Factory
from twisted.internet.tcp import Port
from twisted.internet.threads import deferToThreadPool
from twisted.python.threadpool import ThreadPool

from warren.__version__ import __version__
from warren.app.base import ApplicationCallable, EnvironDict, Response
from warren.protocol import GopherProtocol

if sys.stderr.isatty():
    CYAN = "\033[36m\033[1m"
    RESET = "\033[0m"
else:
    CYAN = ""
    RESET = ""


ABOUT = rf"""
{CYAN}You are now tunneling through...
__      ____ _ _ __ _ __ ___ _ __
\ \ /\ / / _` | '__| '__/ _ \ '_ \
 \ V  V / (_| | |  | | |  __/ | | |
  \_/\_/ \__,_|_|  |_|  \___|_| |_|{RESET}

A Gophermap Driven Gopher Server, v{__version__}
"""


class GopherServer(Factory):
    """
    Wrapper around twisted's TCP server that handles most of the setup and
    plumbing for you.

    Every accepted connection gets its own ``GopherProtocol`` instance. The
    application is called through ``run_application``, which hands it to a
    thread pool so that slow disks don't stall the event loop. Pass in a
    different ``threadpool`` to change how many requests are worked on at
    the same time.
    """

    protocol_class = GopherProtocol

    def __init__(
        self,
        app: ApplicationCallable,
        reactor: typing.Any = _reactor,
        host: str = "127.0.0.1",
        port: int = 70,
        threadpool: typing.Optional[ThreadPool] = None,
    ):
        self.app = app
        self.reactor = reactor
        self.host = host
        self.port = port
        self.threadpool = threadpool

    def log_access(self, message: str) -> None:
        """
        Log standard "access log"-type information.
        """
        print(message, file=sys.stdout)

    def log_message(self, message: str) -> None:
        """
        Log special messages like startup info or a traceback error.
        """
        print(message, file=sys.stderr)

    def on_bind_interface(self, port: Port) -> None:
        """
        Log when the server binds to an interface.
        """
        sock_ip, sock_port, *_ = port.socket.getsockname()
        if port.addressFamily == socket.AF_INET:
            self.log_message(f"Listening on {sock_ip}:{sock_port}")
        else:
            self.log_message(f"Listening on [{sock_ip}]:{sock_port}")

    def buildProtocol(self, addr: typing.Any) -> GopherProtocol:
        """
        This method is invoked by twisted once for every incoming connection.

        It builds the instance of the protocol class, which is what actually
        implements the Gopher protocol.
        """
        return self.protocol_class(self, self.app)

    def run_application(
        self, app: ApplicationCallable, environ: EnvironDict
    ) -> Deferred[Response]:
        """
        Call the application outside of the event loop.
        """
        threadpool = self.threadpool or self.reactor.getThreadPool()
        return deferToThreadPool(self.reactor, threadpool, app, environ)

    def bind_interface(self, interface: str) -> None:
        """
        Binds the server to a twisted interface.
        """
        endpoint = TCP4ServerEndpoint(self.reactor, self.port, interface=interface)
        endpoint.listen(self).addCallback(self.on_bind_interface)

    def initialize(self) -> None:
        """
        Install the server into the twisted reactor.
        """
        if self.threadpool is not None and not self.threadpool.started:
            self.threadpool.start()
            self.reactor.addSystemEventTrigger(
                "during", "shutdown", self.threadpool.stop
            )

        interfaces = [self.host] if self.host else ["0.0.0.0", "::"]
        for interface in interfaces:
            self.bind_interface(interface)

    def run(self) -> None:
        """
        This is the main server loop.
        """
        self.log_message(ABOUT)
        self.log_message(f"Serving gopher on port {self.port}")
        self.initialize()
        self.reactor.run()
