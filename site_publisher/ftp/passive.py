"""Passive-mode data channel negotiation.

Parses the ``(h1,h2,h3,h4,p1,p2)`` tuple of a PASV reply and opens the
single-use data connection a STOR transfer is written to.
"""

import logging
import re
import socket
import ssl
from dataclasses import dataclass
from typing import Optional

from site_publisher.ftp.exceptions import (
    FTPConnectionError,
    FTPProtocolError,
    FTPTimeoutError,
    ProtocolErrorKind,
)
from site_publisher.ftp.tls import wrap_client_socket

logger = logging.getLogger("site_publisher.ftp.passive")


# First parenthesized group of six comma-separated numbers
PASV_PATTERN = re.compile(
    r"\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)"
)


@dataclass(frozen=True)
class DataChannelEndpoint:
    """Address the server is listening on for one transfer."""
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_passive_reply(message: str) -> DataChannelEndpoint:
    """
    Extract the data channel endpoint from a PASV reply.

    Args:
        message: Reply text, e.g. "Entering Passive Mode (192,168,1,10,19,136)."

    Returns:
        DataChannelEndpoint (the example above gives 192.168.1.10:5000)

    Raises:
        FTPProtocolError: If no six-number group is present or a value is out of range
    """
    match = PASV_PATTERN.search(message)
    if not match:
        raise FTPProtocolError(
            ProtocolErrorKind.MALFORMED_PASSIVE_REPLY,
            f"no address tuple in {message.strip()!r}"
        )

    numbers = [int(group) for group in match.groups()]
    if any(n > 255 for n in numbers):
        raise FTPProtocolError(
            ProtocolErrorKind.MALFORMED_PASSIVE_REPLY,
            f"value out of range in {match.group(0)}"
        )

    host = ".".join(str(n) for n in numbers[:4])
    port = numbers[4] * 256 + numbers[5]
    if not 1 <= port <= 65535:
        raise FTPProtocolError(
            ProtocolErrorKind.MALFORMED_PASSIVE_REPLY,
            f"invalid data port {port}"
        )

    return DataChannelEndpoint(host=host, port=port)


class DataConnection:
    """Single-use data connection for one transfer."""

    def __init__(self, sock: socket.socket, endpoint: DataChannelEndpoint):
        self._sock: Optional[socket.socket] = sock
        self._endpoint = endpoint
        self._bytes_written = 0

    @property
    def endpoint(self) -> DataChannelEndpoint:
        return self._endpoint

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def write(self, data: bytes) -> None:
        """
        Write all bytes to the server.

        Raises:
            FTPConnectionError: If the connection is closed or the write fails
            FTPTimeoutError: If the write times out
        """
        if self._sock is None:
            raise FTPConnectionError(
                self._endpoint.host,
                self._endpoint.port,
                RuntimeError("data connection already closed")
            )

        try:
            self._sock.sendall(data)
        except socket.timeout:
            raise FTPTimeoutError(
                "Data transfer",
                self._sock.gettimeout() or 0,
                self._endpoint.host,
                self._endpoint.port
            )
        except OSError as e:
            raise FTPConnectionError(self._endpoint.host, self._endpoint.port, e)

        self._bytes_written += len(data)

    def close(self) -> None:
        """Close the connection, signalling end-of-file to the server."""
        sock, self._sock = self._sock, None
        if sock is None:
            return

        if isinstance(sock, ssl.SSLSocket):
            try:
                sock = sock.unwrap()
            except (ssl.SSLError, OSError) as e:
                # Some servers drop the connection without a close_notify
                logger.debug(f"TLS shutdown on data channel failed: {e}")

        sock.close()

    def __enter__(self) -> "DataConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def open_data_connection(
    endpoint: DataChannelEndpoint,
    use_tls: bool = False,
    timeout: float = 120.0,
    tls_context: Optional[ssl.SSLContext] = None,
    server_hostname: Optional[str] = None
) -> DataConnection:
    """
    Connect to the endpoint announced by PASV.

    Must only be called after PASV's 227 reply has been read.

    Args:
        endpoint: Address from parse_passive_reply()
        use_tls: Protect the data channel like the control channel
        timeout: Timeout for connect and writes
        tls_context: Optional context override for the handshake
        server_hostname: Name used for certificate checks, normally the control host

    Returns:
        Open DataConnection

    Raises:
        FTPConnectionError: On socket or handshake failure
    """
    logger.debug(f"Opening data connection to {endpoint} (tls={use_tls})")

    try:
        sock = socket.create_connection((endpoint.host, endpoint.port), timeout=timeout)
    except socket.timeout:
        raise FTPTimeoutError("Data connection", timeout, endpoint.host, endpoint.port)
    except OSError as e:
        raise FTPConnectionError(endpoint.host, endpoint.port, e)

    if use_tls:
        try:
            sock = wrap_client_socket(sock, server_hostname or endpoint.host, tls_context)
        except OSError as e:
            sock.close()
            raise FTPConnectionError(endpoint.host, endpoint.port, e)

    return DataConnection(sock, endpoint)
