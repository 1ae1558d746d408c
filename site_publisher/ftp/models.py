"""Value types shared by the FTP session and uploader.

Provides FTPCredentials, UploadItem, UploaderConfig and ConnectionResult.
"""

import ssl
from dataclasses import dataclass, field
from typing import Optional

from site_publisher.config.paths import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_FTP_PORT,
    DEFAULT_TRANSFER_TIMEOUT,
)
from site_publisher.utils.validators import (
    validate_file_name,
    validate_host,
    validate_port,
    validate_remote_path,
    validate_timeout,
)


@dataclass(frozen=True)
class FTPCredentials:
    """Server account and target directory for one publish run."""
    host: str
    username: str
    password: str = field(default="", repr=False)
    port: int = DEFAULT_FTP_PORT
    remote_path: str = "/"
    use_tls: bool = True

    def __post_init__(self):
        """Validate credentials after initialization."""
        is_valid, error = validate_host(self.host)
        if not is_valid:
            raise ValueError(error)
        if not self.username:
            raise ValueError("Username is required")
        if "\r" in self.username or "\n" in self.username:
            raise ValueError("Username cannot contain line breaks")
        is_valid, error = validate_port(self.port)
        if not is_valid:
            raise ValueError(error)
        is_valid, error = validate_remote_path(self.remote_path)
        if not is_valid:
            raise ValueError(error)


@dataclass(frozen=True)
class UploadItem:
    """A file to publish into the remote directory."""
    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    def __post_init__(self):
        is_valid, error = validate_file_name(self.name)
        if not is_valid:
            raise ValueError(error)

    @classmethod
    def from_text(
        cls,
        name: str,
        text: str,
        content_type: str = "text/html"
    ) -> "UploadItem":
        """Create an item from text, stored as UTF-8."""
        return cls(name=name, content=text.encode("utf-8"), content_type=content_type)

    @property
    def size(self) -> int:
        """Content length in bytes."""
        return len(self.content)


@dataclass
class UploaderConfig:
    """Timeouts and policy knobs for the network uploader."""
    connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT
    transfer_timeout: float = DEFAULT_TRANSFER_TIMEOUT
    strict_directory_creation: bool = False
    tls_context: Optional[ssl.SSLContext] = field(default=None, repr=False)

    def __post_init__(self):
        """Validate configuration after initialization."""
        is_valid, error = validate_timeout(self.connection_timeout, 5, 300)
        if not is_valid:
            raise ValueError(f"Connection timeout: {error}")
        is_valid, error = validate_timeout(self.transfer_timeout, 5, 3600)
        if not is_valid:
            raise ValueError(f"Transfer timeout: {error}")


@dataclass
class ConnectionResult:
    """Outcome of a connection test."""
    success: bool
    message: str
