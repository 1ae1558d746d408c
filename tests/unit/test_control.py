"""Unit tests for ControlChannel.

Tests connection lifecycle, state transitions, reply framing and error handling.
"""

import socket
import ssl
from unittest.mock import MagicMock, patch

import pytest

from site_publisher.ftp.control import ChannelState, ControlChannel
from site_publisher.ftp.exceptions import (
    FTPConnectionError,
    FTPNotConnectedError,
    FTPProtocolError,
    FTPTimeoutError,
    ProtocolErrorKind,
)


@pytest.fixture
def fake_socket():
    """Socket double returned by socket.create_connection."""
    sock = MagicMock()
    sock.recv.side_effect = [b"220 Welcome\r\n"]
    return sock


@pytest.fixture
def channel():
    return ControlChannel()


def connect(channel, fake_socket, **kwargs):
    with patch("site_publisher.ftp.control.socket.create_connection", return_value=fake_socket):
        channel.connect("ftp.example.com", 21, **kwargs)


class TestControlChannelConnect:
    """Tests for ControlChannel.connect()."""

    def test_initial_state_is_closed(self, channel):
        assert channel.state == ChannelState.CLOSED
        assert channel.is_ready is False

    def test_connect_success(self, channel, fake_socket):
        with patch(
            "site_publisher.ftp.control.socket.create_connection",
            return_value=fake_socket
        ) as mock_create:
            channel.connect("ftp.example.com", 21, timeout=15)

        mock_create.assert_called_once_with(("ftp.example.com", 21), timeout=15)
        assert channel.state == ChannelState.READY
        assert channel.host == "ftp.example.com"
        assert channel.port == 21
        assert channel.uses_tls is False

    @patch("site_publisher.ftp.control.socket.create_connection")
    def test_connect_refused(self, mock_create, channel):
        mock_create.side_effect = ConnectionRefusedError("Connection refused")

        with pytest.raises(FTPConnectionError) as exc_info:
            channel.connect("ftp.example.com", 21)

        assert channel.state == ChannelState.CLOSED
        assert "ftp.example.com:21" in str(exc_info.value)

    @patch("site_publisher.ftp.control.socket.create_connection")
    def test_connect_timeout(self, mock_create, channel):
        mock_create.side_effect = socket.timeout("timed out")

        with pytest.raises(FTPTimeoutError):
            channel.connect("ftp.example.com", 21, timeout=5)

        assert channel.state == ChannelState.CLOSED

    def test_timeout_is_a_connection_error(self):
        assert issubclass(FTPTimeoutError, FTPConnectionError)

    def test_connect_with_tls_wraps_socket(self, channel, fake_socket):
        wrapped = MagicMock()

        with patch(
            "site_publisher.ftp.control.wrap_client_socket",
            return_value=wrapped
        ) as mock_wrap:
            connect(channel, fake_socket, use_tls=True)

        mock_wrap.assert_called_once_with(fake_socket, "ftp.example.com", None)
        assert channel.uses_tls is True
        assert channel.is_ready is True

    def test_tls_handshake_failure(self, channel, fake_socket):
        with patch(
            "site_publisher.ftp.control.wrap_client_socket",
            side_effect=ssl.SSLError("handshake failure")
        ):
            with pytest.raises(FTPConnectionError):
                connect(channel, fake_socket, use_tls=True)

        fake_socket.close.assert_called_once()
        assert channel.state == ChannelState.CLOSED

    def test_connect_twice_rejected(self, channel, fake_socket):
        connect(channel, fake_socket)

        with pytest.raises(FTPConnectionError):
            connect(channel, fake_socket)


class TestControlChannelCommands:
    """Tests for send() and receive_reply()."""

    def test_send_before_connect(self, channel):
        with pytest.raises(FTPNotConnectedError):
            channel.send("USER", "bob")

    def test_receive_before_connect(self, channel):
        with pytest.raises(FTPNotConnectedError):
            channel.receive_reply()

    def test_send_writes_crlf_line(self, channel, fake_socket):
        connect(channel, fake_socket)

        channel.send("USER", "bob")

        fake_socket.sendall.assert_called_once_with(b"USER bob\r\n")

    def test_send_failure_closes_channel(self, channel, fake_socket):
        fake_socket.sendall.side_effect = BrokenPipeError("broken pipe")
        connect(channel, fake_socket)

        with pytest.raises(FTPConnectionError):
            channel.send("PASV")

        assert channel.state == ChannelState.CLOSED

    def test_receive_single_reply(self, channel, fake_socket):
        connect(channel, fake_socket)

        reply = channel.receive_reply()

        assert reply.code == 220
        assert reply.message == "Welcome"

    def test_receive_reply_split_across_reads(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b"22", b"0 Wel", b"come\r\n"]
        connect(channel, fake_socket)

        reply = channel.receive_reply()

        assert reply.code == 220
        assert fake_socket.recv.call_count == 3

    def test_receive_reads_4096_byte_chunks(self, channel, fake_socket):
        connect(channel, fake_socket)

        channel.receive_reply()

        fake_socket.recv.assert_called_with(ControlChannel.RECEIVE_CHUNK_SIZE)
        assert ControlChannel.RECEIVE_CHUNK_SIZE == 4096

    def test_two_replies_in_one_read(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b"331 Password required\r\n230 Logged in\r\n"]
        connect(channel, fake_socket)

        first = channel.receive_reply()
        second = channel.receive_reply()

        assert (first.code, second.code) == (331, 230)
        assert fake_socket.recv.call_count == 1

    def test_multi_line_reply_across_reads(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b"230-Welcome\r\n", b"230-line2\r\n", b"230 Logged in\r\n"]
        connect(channel, fake_socket)

        reply = channel.receive_reply()

        assert reply.code == 230
        assert "line2" in reply.message

    def test_execute_sends_then_reads(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b"250 OK\r\n"]
        connect(channel, fake_socket)

        reply = channel.execute("CWD", "/public_html")

        fake_socket.sendall.assert_called_once_with(b"CWD /public_html\r\n")
        assert reply.code == 250

    def test_server_closes_connection(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b""]
        connect(channel, fake_socket)

        with pytest.raises(FTPConnectionError):
            channel.receive_reply()

        assert channel.state == ChannelState.CLOSED

    def test_receive_timeout(self, channel, fake_socket):
        fake_socket.recv.side_effect = socket.timeout("timed out")
        connect(channel, fake_socket)

        with pytest.raises(FTPTimeoutError):
            channel.receive_reply()

        assert channel.state == ChannelState.CLOSED

    def test_reply_never_terminates(self, channel, fake_socket):
        fake_socket.recv.side_effect = None
        fake_socket.recv.return_value = b"2" * 4096
        connect(channel, fake_socket)

        with pytest.raises(FTPProtocolError) as exc_info:
            channel.receive_reply()

        assert exc_info.value.kind == ProtocolErrorKind.TIMEOUT
        assert channel.state == ChannelState.CLOSED
        fake_socket.close.assert_called_once()

    def test_malformed_reply(self, channel, fake_socket):
        fake_socket.recv.side_effect = [b"hello there\r\n"]
        connect(channel, fake_socket)

        with pytest.raises(FTPProtocolError):
            channel.receive_reply()

        assert channel.state == ChannelState.CLOSED
        with pytest.raises(FTPNotConnectedError):
            channel.receive_reply()

    def test_per_call_timeout_restored(self, channel, fake_socket):
        connect(channel, fake_socket, timeout=30)

        channel.receive_reply(timeout=120)

        assert fake_socket.settimeout.call_args_list[0].args == (120,)
        assert fake_socket.settimeout.call_args_list[-1].args == (30,)


class TestControlChannelClose:
    """Tests for close()."""

    def test_close(self, channel, fake_socket):
        connect(channel, fake_socket)

        channel.close()

        assert channel.state == ChannelState.CLOSED
        fake_socket.close.assert_called_once()

    def test_close_is_idempotent(self, channel, fake_socket):
        connect(channel, fake_socket)

        channel.close()
        channel.close()

        fake_socket.close.assert_called_once()

    def test_close_never_connected(self, channel):
        channel.close()  # Should not raise

        assert channel.state == ChannelState.CLOSED

    def test_close_ignores_shutdown_error(self, channel, fake_socket):
        fake_socket.shutdown.side_effect = OSError("not connected")
        connect(channel, fake_socket)

        channel.close()

        fake_socket.close.assert_called_once()

    def test_context_manager_closes(self, fake_socket):
        with ControlChannel() as channel:
            connect(channel, fake_socket)

        assert channel.state == ChannelState.CLOSED
