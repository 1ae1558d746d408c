"""FTP session orchestration for the static-site publisher.

Provides SessionState enum and FTPSession, which drives one control
channel through the publish sequence: connect, login, ensure the remote
directory exists, then TYPE I / PASV / STOR / data / 226 per file, and
finally QUIT.

A session is single-use. Any failure closes the control channel and the
session cannot be reused; callers build a new one per publish run.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from site_publisher.ftp.codec import Reply
from site_publisher.ftp.control import ControlChannel
from site_publisher.ftp.exceptions import (
    FTPAuthenticationError,
    FTPCancelledError,
    FTPConnectionError,
    FTPDirectoryError,
    FTPError,
    FTPNotConnectedError,
    FTPTimeoutError,
    FTPTransferError,
)
from site_publisher.ftp.models import FTPCredentials, UploaderConfig, UploadItem
from site_publisher.ftp.passive import open_data_connection, parse_passive_reply

logger = logging.getLogger("site_publisher.ftp.session")


# Type alias for progress callback (completion fraction 0.0-1.0)
ProgressCallback = Callable[[float], None]

# MKD failure texts that mean the directory is already there
EXISTS_MARKERS = ("already exist", "file exists", "directory exists")


class SessionState(Enum):
    """Position in the publish sequence."""
    NEW = "new"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    DIRECTORY_READY = "directory_ready"
    TRANSFERRING_TYPE = "transferring_type"
    TRANSFERRING_DATA = "transferring_data"
    TRANSFER_COMPLETE = "transfer_complete"
    CLOSED = "closed"


class FTPSession:
    """Runs the FTP protocol sequence for one publish run."""

    # Replies to STOR meaning the server is ready for data
    STOR_READY_CODES = (125, 150)

    def __init__(
        self,
        credentials: FTPCredentials,
        config: Optional[UploaderConfig] = None,
        channel: Optional[ControlChannel] = None
    ):
        """
        Initialize the session.

        Args:
            credentials: Server account and target directory
            config: Timeouts and directory policy (defaults if omitted)
            channel: Control channel to drive, a new one if omitted
        """
        self._credentials = credentials
        self._config = config or UploaderConfig()
        self._channel = channel or ControlChannel()
        self._state = SessionState.NEW
        self._greeting: Optional[Reply] = None
        self._current_directory: Optional[str] = None
        self._is_authenticated = False

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def credentials(self) -> FTPCredentials:
        return self._credentials

    @property
    def greeting(self) -> Optional[Reply]:
        """Welcome reply read after connecting."""
        return self._greeting

    @property
    def current_directory(self) -> Optional[str]:
        """Remote directory entered by the last successful CWD."""
        return self._current_directory

    @property
    def is_authenticated(self) -> bool:
        """True after a successful USER/PASS exchange."""
        return self._is_authenticated

    @contextmanager
    def _closing_on_error(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            self.close()
            raise

    def _require_open(self, operation: str) -> None:
        if self._state in (SessionState.NEW, SessionState.CLOSED) or not self._channel.is_ready:
            raise FTPNotConnectedError(operation)

    def connect(self) -> None:
        """
        Open the control channel and read the server greeting.

        Raises:
            FTPConnectionError: If the connection or TLS handshake fails
            FTPError: If the session was already used
        """
        if self._state != SessionState.NEW:
            raise FTPError("FTP session is single-use and has already been started")

        credentials = self._credentials
        with self._closing_on_error():
            self._channel.connect(
                credentials.host,
                credentials.port,
                use_tls=credentials.use_tls,
                timeout=self._config.connection_timeout,
                tls_context=self._config.tls_context,
            )
            # Any greeting is accepted, it is only logged
            self._greeting = self._channel.receive_reply()

        logger.info(
            f"Connected to {credentials.host}:{credentials.port} "
            f"(tls={credentials.use_tls}): {self._greeting}"
        )
        self._state = SessionState.CONNECTED

    def login(self) -> None:
        """
        Authenticate with USER/PASS.

        Raises:
            FTPAuthenticationError: If USER is not answered with 331 or PASS with 230
        """
        self._require_open("Login")
        username = self._credentials.username

        with self._closing_on_error():
            reply = self._channel.execute("USER", username)
            if reply.code != 331:
                raise FTPAuthenticationError(username, reply)

            reply = self._channel.execute("PASS", self._credentials.password)
            if reply.code != 230:
                raise FTPAuthenticationError(username, reply)

        self._is_authenticated = True
        self._state = SessionState.AUTHENTICATED
        logger.info(f"Logged in as '{username}'")

    @staticmethod
    def _is_existing_directory_reply(reply: Reply) -> bool:
        """True if an MKD failure says the directory is already there."""
        message = reply.message.lower()
        return reply.code == 521 or any(marker in message for marker in EXISTS_MARKERS)

    def ensure_directory(self, path: str) -> None:
        """
        Create every level of a remote path and change into it.

        MKD is sent for each prefix of the path and its reply is not
        required to succeed: an existing directory and a created one are
        treated alike. With strict_directory_creation enabled, a failed
        MKD that does not report an existing directory is raised.

        Args:
            path: Remote directory, e.g. "/public_html/site"

        Raises:
            FTPDirectoryError: If CWD is rejected (or a strict MKD fails)
        """
        self._require_open("Changing directory")
        target = path.rstrip("/") or "/"
        absolute = target.startswith("/")
        segments = [segment for segment in target.split("/") if segment]

        with self._closing_on_error():
            prefix = ""
            for segment in segments:
                prefix = f"{prefix}/{segment}" if prefix or absolute else segment
                reply = self._channel.execute("MKD", prefix)

                if not reply.is_error:
                    logger.debug(f"Created remote directory {prefix}")
                elif self._is_existing_directory_reply(reply):
                    logger.debug(f"Remote directory {prefix} already exists")
                elif self._config.strict_directory_creation:
                    raise FTPDirectoryError(prefix, "create", reply)
                else:
                    logger.warning(f"MKD {prefix} failed, continuing: {reply}")

            reply = self._channel.execute("CWD", target)
            if reply.code != 250:
                raise FTPDirectoryError(target, "enter", reply)

        self._current_directory = target
        self._state = SessionState.DIRECTORY_READY
        logger.info(f"Remote directory ready: {target}")

    def upload_file(self, item: UploadItem) -> None:
        """
        Store one file in the current remote directory.

        Args:
            item: File name and content

        Raises:
            FTPTransferError: If TYPE, PASV, STOR or the final 226 is not as expected
            FTPProtocolError: If the PASV reply cannot be parsed
            FTPConnectionError: If the data connection cannot be opened
        """
        self._require_open(f"Uploading '{item.name}'")
        if not self._is_authenticated:
            raise FTPNotConnectedError(f"Uploading '{item.name}' before login")

        timeout = self._config.transfer_timeout
        credentials = self._credentials

        with self._closing_on_error():
            self._state = SessionState.TRANSFERRING_TYPE
            reply = self._channel.execute("TYPE", "I")
            if reply.code != 200:
                raise FTPTransferError(item.name, reply)

            reply = self._channel.execute("PASV")
            if reply.code != 227:
                raise FTPTransferError(item.name, reply)

            endpoint = parse_passive_reply(reply.message)
            data_connection = open_data_connection(
                endpoint,
                use_tls=credentials.use_tls,
                timeout=timeout,
                tls_context=self._config.tls_context,
                server_hostname=credentials.host,
            )

            # Closing the data connection marks end-of-file for the server
            with data_connection:
                reply = self._channel.execute("STOR", item.name)
                if reply.code not in self.STOR_READY_CODES:
                    raise FTPTransferError(item.name, reply)

                self._state = SessionState.TRANSFERRING_DATA
                try:
                    data_connection.write(item.content)
                except FTPConnectionError as e:
                    raise FTPTransferError(item.name, original_error=e)

            try:
                reply = self._channel.receive_reply(timeout=timeout)
            except FTPTimeoutError as e:
                raise FTPTransferError(item.name, original_error=e)
            if reply.code != 226:
                raise FTPTransferError(item.name, reply)

        self._state = SessionState.TRANSFER_COMPLETE
        logger.debug(f"Uploaded: {item.name} ({item.size} bytes)")

    def upload_all(
        self,
        items: Iterable[UploadItem],
        on_progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[Callable[[], bool]] = None
    ) -> None:
        """
        Store files in order, stopping at the first failure.

        Args:
            items: Files to upload, in upload order
            on_progress: Called with (index + 1) / total after each file
            should_cancel: Checked before each file; True stops the batch

        Raises:
            FTPCancelledError: If should_cancel returned True
            FTPError: The first failure; later files are not attempted
        """
        items = list(items)
        total = len(items)

        with self._closing_on_error():
            for index, item in enumerate(items):
                if should_cancel and should_cancel():
                    logger.info(f"Upload cancelled before '{item.name}'")
                    raise FTPCancelledError(index, total)

                self.upload_file(item)

                if on_progress:
                    on_progress((index + 1) / total)

    def quit(self) -> None:
        """Send QUIT and close the control channel whatever the outcome."""
        if not self._channel.is_ready:
            self.close()
            return

        try:
            self._channel.send("QUIT")
            reply = self._channel.receive_reply()
            logger.debug(f"QUIT acknowledged: {reply}")
        except FTPError as e:
            logger.debug(f"QUIT not acknowledged: {e}")
        finally:
            self.close()

    def close(self) -> None:
        """Close the control channel without QUIT. Idempotent."""
        self._channel.close()
        self._state = SessionState.CLOSED
        self._is_authenticated = False

    def __enter__(self) -> "FTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
