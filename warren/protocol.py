from __future__ import annotations

import time
import traceback
import typing

from twisted.internet.address import IPv4Address, IPv6Address
from twisted.internet.defer import ensureDeferred
from twisted.internet.interfaces import IHalfCloseableProtocol
from twisted.internet.task import deferLater
from twisted.protocols.basic import LineOnlyReceiver
from zope.interface import implementer

from .__version__ import __version__
from .app.base import ApplicationCallable, Response, ResponseBody, Status

if typing.TYPE_CHECKING:
    from .server import GopherServer


@implementer(IHalfCloseableProtocol)
class GopherProtocol(LineOnlyReceiver):
    """
    Handle a single Gopher Protocol TCP request.

    The request handler manages the life of a single gopher request. It reads
    the selector line sent by the client, hands it to a configurable
    "application" inside of an ``environ`` dictionary, and writes the
    application's ``Response`` back to the socket. The connection is always
    closed by the server after one response, gopher has no persistent
    connections.

    What ends up on the wire depends on the response status:

        TEXT            the body followed by a line with a single "."
        BINARY          the body, the closed connection signals the end
        recoverable     an "i" info line with the message, then "."
        PATH_INJECTION  nothing at all
    """

    TIMESTAMP_FORMAT = "%d/%b/%Y:%H:%M:%S %z"

    # Clients may terminate the selector with either LF or CRLF
    delimiter = b"\n"
    MAX_LENGTH = 1024

    client_addr: typing.Union[IPv4Address, IPv6Address]
    connected_timestamp: time.struct_time
    request: typing.Optional[bytes]
    request_line: typing.Optional[str]
    received: bool
    status: typing.Optional[str]
    response_size: int
    last_byte: bytes

    def __init__(self, server: GopherServer, app: ApplicationCallable):
        self.server = server
        self.app = app

    def connectionMade(self):
        """
        This is invoked by twisted after the connection is first established.
        """
        self.connected_timestamp = time.localtime()
        self.client_addr = self.transport.getPeer()
        self.request = None
        self.request_line = None
        self.received = False
        self.status = None
        self.response_size = 0
        self.last_byte = b""

    def lineReceived(self, line):
        """
        This method is invoked by LineOnlyReceiver for every incoming line.

        Only the first line is a request, anything the client sends after it
        is ignored.
        """
        if self.received:
            return
        self.received = True
        self.request = line
        return ensureDeferred(self._handle_request_noblock())

    def lineLengthExceeded(self, line):
        """
        The client sent more data than any selector could reasonably need.
        """
        if self.received:
            return
        self.received = True
        ensureDeferred(self._handle_request_noblock())

    def readConnectionLost(self):
        """
        The client closed its side of the connection.

        Whatever arrived before the end of the stream is used as the request
        line, even without a line terminator. If nothing arrived at all, the
        request is answered as a bad request.
        """
        if self.received:
            return
        self.received = True
        if self._buffer:
            self.request = self._buffer
        ensureDeferred(self._handle_request_noblock())

    def writeConnectionLost(self):
        pass

    async def _handle_request_noblock(self):
        """
        Handle the gopher request and write the raw response to the socket.

        The application does blocking filesystem work, so the server runs it
        through its executor and we await the result. While streaming the
        response body, control of the event loop is yielded after every
        chunk so that other connections can be handled concurrently.
        """
        try:
            self.parse_request()
            environ = self.build_environ()
            response = await self.server.run_application(self.app, environ)
            self.status = response.status
            await self.write_response(response)
        except Exception:
            self.server.log_message(traceback.format_exc())
        finally:
            self.log_request()
            self.transport.loseConnection()

    def parse_request(self) -> None:
        """
        Parse the gopher request line.

        The request is a single line formatted as: <selector>\\r\\n

        The selector is not interpreted in any way, including a search string
        that may follow it after a TAB character. A missing request is left
        as None so that the application can reject it.
        """
        if self.request is None:
            self.request_line = None
            return

        line = self.request
        if line.endswith(b"\r"):
            line = line[:-1]
        self.request_line = line.decode(errors="surrogateescape")

    def build_environ(self) -> typing.Dict[str, typing.Any]:
        """
        Construct a dictionary that will be passed to the application handler.

        Variable names (mostly) conform to the CGI spec defined in RFC 3875.
        """
        return {
            "REQUEST_LINE": self.request_line,
            "REMOTE_ADDR": self.client_addr.host,
            "REMOTE_HOST": self.client_addr.host,
            "SERVER_PORT": self.server.port,
            "SERVER_PROTOCOL": "GOPHER",
            "SERVER_SOFTWARE": f"warren/{__version__}",
        }

    async def write_response(self, response: Response) -> None:
        """
        Put the response on the wire according to its status.
        """
        if response.status == Status.TEXT:
            await self.write_body(response.body)
            self.write_end_of_response()
        elif response.status == Status.BINARY:
            await self.write_body(response.body)
        elif response.status in Status.RECOVERABLE:
            self.write_error(response.message)
            self.write_end_of_response()
        elif response.status == Status.PATH_INJECTION:
            # Don't let a potential attacker know what happened
            self.server.log_message(
                f"Path injection attempt from {self.client_addr.host}: "
                f"{self.request_line!r}"
            )
        else:
            raise ValueError(f"Unknown response status: {response.status}")

    async def write_body(self, body: typing.Optional[ResponseBody]) -> None:
        """
        Stream the response body to the socket.
        """
        for data in body or ():
            self.write(data)
            # Yield control of the event loop
            await deferLater(self.server.reactor, 0)

    def write_error(self, message: str) -> None:
        """
        Write an error message as an informational gopher menu line.
        """
        self.write(f"i{message}\t\t(NULL)\t0\r\n")

    def write_end_of_response(self) -> None:
        """
        Write the line with a single "." that terminates text responses.
        """
        if self.response_size and self.last_byte != b"\n":
            self.write("\r\n")
        self.write(".\r\n")

    def write(self, data: typing.Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode(errors="surrogateescape")
        if not data:
            return

        self.response_size += len(data)
        self.last_byte = data[-1:]
        self.transport.write(data)

    def log_request(self) -> None:
        """
        Log a gopher request using a format derived from the Common Log Format.
        """
        try:
            message = '{} [{}] "{}" {} {}'.format(
                self.client_addr.host,
                time.strftime(self.TIMESTAMP_FORMAT, self.connected_timestamp),
                self.request_line,
                self.status or "-",
                self.response_size,
            )
        except AttributeError:
            # The connection ended before we got far enough to log anything
            pass
        else:
            self.server.log_access(message)
