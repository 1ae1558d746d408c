"""FTP-specific exceptions for the static-site publisher.

Custom exception hierarchy for FTP operations to provide
clear error handling and user-friendly messages.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from site_publisher.ftp.codec import Reply


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Socket or TLS failure on the control or data channel."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPConnectionError):
    """FTP network operation timed out."""

    def __init__(
        self,
        operation: str = "Operation",
        timeout: float = 30,
        host: str = "",
        port: int = 0
    ):
        super().__init__(host, port)
        self.operation = operation
        self.timeout = timeout
        self.message = f"{operation} timed out after {timeout:g} seconds"


class FTPNotConnectedError(FTPConnectionError):
    """Operation attempted without an open control channel."""

    def __init__(self, operation: str = "Operation"):
        super().__init__("", 0)
        self.operation = operation
        self.message = f"{operation} requires an active FTP connection"


class FTPAuthenticationError(FTPError):
    """USER/PASS exchange rejected by the server."""

    def __init__(self, username: str, reply: Optional["Reply"] = None):
        self.username = username
        self.reply = reply
        message = f"Authentication failed for user '{username}'"
        if reply is not None:
            message = f"{message} ({reply.code} {reply.message})"
        super().__init__(message)


class FTPDirectoryError(FTPError):
    """Remote directory could not be created or entered."""

    def __init__(
        self,
        path: str,
        operation: str,
        reply: Optional["Reply"] = None,
        original_error: Exception = None
    ):
        self.path = path
        self.operation = operation
        self.reply = reply
        message = f"Failed to {operation} remote directory '{path}'"
        if reply is not None:
            message = f"{message} ({reply.code} {reply.message})"
        super().__init__(message, original_error)


class ProtocolErrorKind(Enum):
    """Category of a protocol violation."""
    MALFORMED_REPLY = "malformed_reply"
    TIMEOUT = "timeout"
    MALFORMED_PASSIVE_REPLY = "malformed_passive_reply"


class FTPProtocolError(FTPError):
    """Server sent text that cannot be parsed as an FTP reply."""

    def __init__(self, kind: ProtocolErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        message = f"Protocol error ({kind.value})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FTPTransferError(FTPError):
    """Failed to upload a single file via FTP."""

    def __init__(
        self,
        file_name: str,
        reply: Optional["Reply"] = None,
        original_error: Exception = None
    ):
        self.file_name = file_name
        self.reply = reply
        message = f"Failed to upload '{file_name}'"
        if reply is not None:
            message = f"{message} ({reply.code} {reply.message})"
        super().__init__(message, original_error)


class FTPEncodingError(FTPError):
    """Command text cannot be sent on the control channel."""

    def __init__(self, text: str, original_error: Exception = None):
        self.text = text
        message = f"Cannot encode FTP command {text!r}"
        super().__init__(message, original_error)


class FTPCancelledError(FTPError):
    """Batch upload cancelled by the caller."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        message = f"Upload cancelled after {completed} of {total} files"
        super().__init__(message)
