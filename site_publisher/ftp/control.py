"""FTP control channel for the static-site publisher.

Provides ChannelState enum and ControlChannel, which owns one TCP (or
TLS-wrapped TCP) connection and enforces strict command/reply
alternation: one command out, exactly one reply back.
"""

import logging
import socket
import ssl
from enum import Enum
from typing import Optional

from site_publisher.ftp.codec import (
    SECRET_VERBS,
    Reply,
    decode_reply,
    encode_command,
    find_reply_end,
)
from site_publisher.ftp.exceptions import (
    FTPConnectionError,
    FTPNotConnectedError,
    FTPProtocolError,
    FTPTimeoutError,
    ProtocolErrorKind,
)
from site_publisher.ftp.tls import wrap_client_socket

logger = logging.getLogger("site_publisher.ftp.control")


class ChannelState(Enum):
    """Control channel state."""
    CLOSED = "closed"
    CONNECTING = "connecting"
    READY = "ready"


class ControlChannel:
    """One-command-in, one-reply-out transport to an FTP server."""

    # Bytes requested per recv() call
    RECEIVE_CHUNK_SIZE = 4096

    # Give up on a reply that has not terminated after this many bytes
    MAX_REPLY_BYTES = 64 * 1024

    def __init__(self):
        """Initialize a closed channel."""
        self._sock: Optional[socket.socket] = None
        self._state = ChannelState.CLOSED
        self._buffer = b""
        self._host = ""
        self._port = 0
        self._timeout: float = 30.0
        self._use_tls = False

    @property
    def state(self) -> ChannelState:
        """Current channel state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        """True if commands can be sent."""
        return self._state == ChannelState.READY

    @property
    def host(self) -> str:
        """Host this channel is (or was last) connected to."""
        return self._host

    @property
    def port(self) -> int:
        """Port this channel is (or was last) connected to."""
        return self._port

    @property
    def uses_tls(self) -> bool:
        """True if the connection is TLS-wrapped."""
        return self._use_tls

    def connect(
        self,
        host: str,
        port: int,
        use_tls: bool = False,
        timeout: float = 30.0,
        tls_context: Optional[ssl.SSLContext] = None
    ) -> None:
        """
        Open the control connection.

        Args:
            host: Server host name or address
            port: Server port
            use_tls: Wrap the socket in TLS before anything is read
            timeout: Timeout for connect, handshake, send and receive
            tls_context: Optional context override for the handshake

        Raises:
            FTPConnectionError: On socket or handshake failure
            FTPTimeoutError: If connecting or the handshake times out
        """
        if self._state != ChannelState.CLOSED:
            raise FTPConnectionError(
                host, port, RuntimeError("control channel is already open")
            )

        self._host = host
        self._port = port
        self._timeout = timeout
        self._use_tls = use_tls
        self._buffer = b""
        self._state = ChannelState.CONNECTING

        logger.debug(f"Connecting to {host}:{port} (tls={use_tls})")

        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except socket.timeout:
            self._state = ChannelState.CLOSED
            raise FTPTimeoutError("Connection", timeout, host, port)
        except OSError as e:
            self._state = ChannelState.CLOSED
            raise FTPConnectionError(host, port, e)

        if use_tls:
            try:
                sock = wrap_client_socket(sock, host, tls_context)
            except socket.timeout:
                sock.close()
                self._state = ChannelState.CLOSED
                raise FTPTimeoutError("TLS handshake", timeout, host, port)
            except OSError as e:
                sock.close()
                self._state = ChannelState.CLOSED
                raise FTPConnectionError(host, port, e)

        self._sock = sock
        self._state = ChannelState.READY

    def send(self, verb: str, *args: str) -> None:
        """
        Write one command.

        Raises:
            FTPNotConnectedError: If the channel is not ready
            FTPConnectionError: If the write fails
        """
        if not self.is_ready or self._sock is None:
            raise FTPNotConnectedError(f"{verb} command")

        data = encode_command(verb, *args)
        if verb.upper() in SECRET_VERBS:
            logger.debug(f">>> {verb} ****")
        else:
            logger.debug(f">>> {' '.join([verb, *args])}")

        try:
            self._sock.sendall(data)
        except socket.timeout:
            self.close()
            raise FTPTimeoutError(f"Sending {verb}", self._timeout, self._host, self._port)
        except OSError as e:
            self.close()
            raise FTPConnectionError(self._host, self._port, e)

    def receive_reply(self, timeout: Optional[float] = None) -> Reply:
        """
        Read exactly one reply.

        Args:
            timeout: Optional timeout for this read only

        Returns:
            The decoded reply

        Raises:
            FTPNotConnectedError: If the channel is not ready
            FTPConnectionError: If the server closes the connection
            FTPTimeoutError: If no complete reply arrives in time
            FTPProtocolError: If the reply is malformed or never terminates
        """
        if not self.is_ready or self._sock is None:
            raise FTPNotConnectedError("Reading a reply")

        wait = timeout if timeout is not None else self._timeout
        if timeout is not None:
            self._sock.settimeout(timeout)

        try:
            while True:
                end = find_reply_end(self._buffer)
                if end is not None:
                    raw, self._buffer = self._buffer[:end], self._buffer[end:]
                    reply = decode_reply(raw)
                    logger.debug(f"<<< {reply}")
                    return reply

                if len(self._buffer) >= self.MAX_REPLY_BYTES:
                    raise FTPProtocolError(
                        ProtocolErrorKind.TIMEOUT,
                        f"no complete reply within {self.MAX_REPLY_BYTES} bytes"
                    )

                try:
                    chunk = self._sock.recv(self.RECEIVE_CHUNK_SIZE)
                except socket.timeout:
                    self.close()
                    raise FTPTimeoutError("Waiting for reply", wait, self._host, self._port)
                except OSError as e:
                    self.close()
                    raise FTPConnectionError(self._host, self._port, e)

                if not chunk:
                    self.close()
                    raise FTPConnectionError(
                        self._host,
                        self._port,
                        ConnectionResetError("connection closed by server")
                    )

                self._buffer += chunk
        except FTPProtocolError:
            # The buffered bytes cannot be resynchronised
            self.close()
            raise
        finally:
            if timeout is not None and self._sock is not None:
                self._sock.settimeout(self._timeout)

    def execute(self, verb: str, *args: str, timeout: Optional[float] = None) -> Reply:
        """Send one command and return its reply."""
        self.send(verb, *args)
        return self.receive_reply(timeout=timeout)

    def close(self) -> None:
        """Shut down the socket. Closing a closed channel is a no-op."""
        sock, self._sock = self._sock, None
        self._state = ChannelState.CLOSED
        self._buffer = b""

        if sock is None:
            return

        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer may already be gone
            pass
        sock.close()
        logger.debug(f"Control channel to {self._host}:{self._port} closed")

    def __enter__(self) -> "ControlChannel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
