"""Pytest configuration and shared fixtures for the static-site publisher tests."""

import pytest
from pathlib import Path

from site_publisher.ftp.models import FTPCredentials, UploaderConfig, UploadItem


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_PORT = 2121
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"
TEST_REMOTE_PATH = "/public_html/ncdb"


@pytest.fixture
def credentials() -> FTPCredentials:
    """Plain-FTP credentials for the scripted test server."""
    return FTPCredentials(
        host=TEST_FTP_HOST,
        port=TEST_FTP_PORT,
        username=TEST_FTP_USER,
        password=TEST_FTP_PASS,
        remote_path=TEST_REMOTE_PATH,
        use_tls=False,
    )


@pytest.fixture
def uploader_config() -> UploaderConfig:
    """Default uploader configuration."""
    return UploaderConfig()


@pytest.fixture
def site_files() -> list:
    """The two files of a minimal exported site."""
    return [
        UploadItem.from_text("index.html", "<html><body>NCDB</body></html>"),
        UploadItem.from_text("style.css", "body { color: #333; }", content_type="text/css"),
    ]


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Path:
    """Provide a temporary settings file path for testing."""
    return tmp_path / "settings.json"
