"""Unit tests for input validators and the value types built on them."""

import pytest

from site_publisher.ftp.models import FTPCredentials, UploaderConfig, UploadItem
from site_publisher.utils.validators import (
    validate_file_name,
    validate_host,
    validate_port,
    validate_remote_path,
    validate_timeout,
)


class TestValidators:
    """Tests for the validate_* functions."""

    @pytest.mark.parametrize("host", ["192.168.1.10", "ftp.example.com", "localhost", "ftp_server", "::1"])
    def test_valid_hosts(self, host):
        assert validate_host(host) == (True, None)

    @pytest.mark.parametrize("host", ["", "   ", "bad host", "ftp.example.com\r\nUSER x"])
    def test_invalid_hosts(self, host):
        is_valid, error = validate_host(host)
        assert is_valid is False
        assert error

    def test_port_range(self):
        assert validate_port(21)[0] is True
        assert validate_port("990")[0] is True
        assert validate_port(0)[0] is False
        assert validate_port(65536)[0] is False
        assert validate_port("abc") == (False, "Port must be a number")

    def test_timeout_range(self):
        assert validate_timeout(30)[0] is True
        assert validate_timeout(1)[0] is False
        assert validate_timeout(600, maximum=3600)[0] is True
        assert validate_timeout("x")[0] is False

    def test_remote_paths(self):
        assert validate_remote_path("/")[0] is True
        assert validate_remote_path("/public_html/ncdb")[0] is True
        assert validate_remote_path("public_html/ncdb")[0] is True
        assert validate_remote_path("/public_html\r\nDELE x")[0] is False
        assert validate_remote_path("")[0] is False

    def test_file_names(self):
        assert validate_file_name("index.html")[0] is True
        assert validate_file_name("css/style.css")[0] is False
        assert validate_file_name("..\\evil")[0] is False
        assert validate_file_name("..")[0] is False
        assert validate_file_name("")[0] is False


class TestFTPCredentials:
    """Tests for FTPCredentials validation."""

    def test_defaults(self):
        credentials = FTPCredentials(host="ftp.example.com", username="web")

        assert credentials.port == 21
        assert credentials.remote_path == "/"
        assert credentials.use_tls is True

    def test_password_hidden_from_repr(self):
        credentials = FTPCredentials(host="ftp.example.com", username="web", password="hunter2")

        assert "hunter2" not in repr(credentials)

    def test_empty_host_raises_error(self):
        with pytest.raises(ValueError, match="Host is required"):
            FTPCredentials(host="", username="web")

    def test_empty_username_raises_error(self):
        with pytest.raises(ValueError, match="Username is required"):
            FTPCredentials(host="ftp.example.com", username="")

    def test_invalid_port_raises_error(self):
        with pytest.raises(ValueError, match="Port must be between"):
            FTPCredentials(host="ftp.example.com", username="web", port=70000)

    @pytest.mark.parametrize("host", ["ftp_server", "::1", "fe80::1%eth0"])
    def test_any_resolvable_host_form_accepted(self, host):
        assert FTPCredentials(host=host, username="web").host == host

    def test_relative_remote_path_accepted(self):
        credentials = FTPCredentials(
            host="ftp.example.com", username="web", remote_path="public_html/ncdb"
        )

        assert credentials.remote_path == "public_html/ncdb"

    def test_line_breaks_rejected(self):
        with pytest.raises(ValueError, match="line breaks"):
            FTPCredentials(host="ftp.example.com", username="web\r\nDELE x")
        with pytest.raises(ValueError, match="line breaks"):
            FTPCredentials(host="ftp.example.com", username="web", remote_path="/a\nb")


class TestUploadItem:
    """Tests for UploadItem."""

    def test_from_text(self):
        item = UploadItem.from_text("index.html", "<p>é</p>")

        assert item.content == "<p>é</p>".encode("utf-8")
        assert item.content_type == "text/html"
        assert item.size == len(item.content)

    def test_default_content_type(self):
        assert UploadItem("data.json", b"{}").content_type == "application/octet-stream"

    def test_path_separator_rejected(self):
        with pytest.raises(ValueError):
            UploadItem("css/style.css", b"")


class TestUploaderConfig:
    """Tests for UploaderConfig."""

    def test_defaults(self):
        config = UploaderConfig()

        assert config.connection_timeout == 30
        assert config.transfer_timeout == 120
        assert config.strict_directory_creation is False
        assert config.tls_context is None

    def test_invalid_timeouts(self):
        with pytest.raises(ValueError, match="Connection timeout"):
            UploaderConfig(connection_timeout=1)
        with pytest.raises(ValueError, match="Transfer timeout"):
            UploaderConfig(transfer_timeout=5000)
