"""File uploader for the static-site publisher.

Public façade over FTPSession. Each call opens a fresh session, does its
work and closes the connection again, so no state survives between
uploads. MockUploader implements the same Uploader protocol in memory for
tests of calling code.
"""

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from site_publisher.ftp.exceptions import FTPError, FTPTransferError
from site_publisher.ftp.models import (
    ConnectionResult,
    FTPCredentials,
    UploaderConfig,
    UploadItem,
)
from site_publisher.ftp.session import FTPSession, ProgressCallback

logger = logging.getLogger("site_publisher.ftp.uploader")


# Builds the session for one call; replaced in tests
SessionFactory = Callable[[FTPCredentials, UploaderConfig], FTPSession]


class Uploader(Protocol):
    """Capability to publish files to a remote directory."""

    def test_connection(self, credentials: FTPCredentials) -> ConnectionResult:
        ...

    def upload(self, credentials: FTPCredentials, item: UploadItem) -> None:
        ...

    def upload_all(
        self,
        credentials: FTPCredentials,
        items: Iterable[UploadItem],
        on_progress: Optional[ProgressCallback] = None
    ) -> None:
        ...


class FTPUploader:
    """Publishes files over FTP/FTPS.

    Implements Uploader. Methods run sequentially in the calling thread;
    cancel() may be called from another thread.
    """

    def __init__(
        self,
        config: Optional[UploaderConfig] = None,
        session_factory: Optional[SessionFactory] = None
    ):
        """
        Initialize the uploader.

        Args:
            config: Timeouts and directory policy
            session_factory: Session constructor, FTPSession by default
        """
        self._config = config or UploaderConfig()
        self._session_factory = session_factory or FTPSession
        self._cancelled = threading.Event()

    @property
    def config(self) -> UploaderConfig:
        return self._config

    @property
    def is_cancelled(self) -> bool:
        """True if current operation was cancelled."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the running batch before its next file."""
        self._cancelled.set()
        logger.info("Upload cancellation requested")

    def reset_cancel(self) -> None:
        """Reset cancellation flag for new operation."""
        self._cancelled.clear()

    def test_connection(self, credentials: FTPCredentials) -> ConnectionResult:
        """
        Check that the server accepts the credentials.

        Runs connect, login and quit. Never raises: failures are
        reported in the returned result.

        Args:
            credentials: Server account to test

        Returns:
            ConnectionResult with success flag and a readable message
        """
        try:
            with self._session_factory(credentials, self._config) as session:
                session.connect()
                session.login()
                session.quit()
        except Exception as e:
            logger.warning(f"Connection test to {credentials.host} failed: {e}")
            return ConnectionResult(success=False, message=str(e))

        return ConnectionResult(success=True, message="Connection successful")

    def upload(self, credentials: FTPCredentials, item: UploadItem) -> None:
        """
        Upload one file to the credentials' remote path.

        Raises:
            FTPError: Any failure of the session sequence
        """
        self.upload_all(credentials, [item])

    def upload_all(
        self,
        credentials: FTPCredentials,
        items: Iterable[UploadItem],
        on_progress: Optional[ProgressCallback] = None
    ) -> None:
        """
        Upload files in order to the credentials' remote path.

        Stops at the first failing file; files uploaded before it stay
        on the server.

        Args:
            credentials: Server account and target directory
            items: Files in upload order
            on_progress: Called in this thread with the completed fraction
                after each file, ending at 1.0

        Raises:
            FTPCancelledError: If cancel() was called during the batch
            FTPError: The first failure of the session sequence
        """
        self.reset_cancel()
        items = list(items)

        logger.info(
            f"Publishing {len(items)} files to "
            f"{credentials.host}:{credentials.port}{credentials.remote_path}"
        )

        with self._session_factory(credentials, self._config) as session:
            session.connect()
            session.login()
            session.ensure_directory(credentials.remote_path)
            session.upload_all(items, on_progress, should_cancel=self._cancelled.is_set)
            session.quit()

        logger.info(f"Published {len(items)} files")


class MockUploader:
    """In-memory Uploader for tests of publishing code.

    Records uploads per remote path instead of touching the network.
    """

    def __init__(
        self,
        should_fail: bool = False,
        failure_error: Optional[FTPError] = None,
        fail_on: Optional[str] = None
    ):
        """
        Initialize the mock.

        Args:
            should_fail: Fail every call with failure_error
            failure_error: Error raised when should_fail is set
            fail_on: Name of a file whose upload fails with FTPTransferError
        """
        self.should_fail = should_fail
        self.failure_error = failure_error or FTPTransferError("mock failure")
        self.fail_on = fail_on
        self.uploaded_files: List[str] = []
        self.remote_files: Dict[str, Dict[str, bytes]] = {}
        self.connection_tests = 0

    def test_connection(self, credentials: FTPCredentials) -> ConnectionResult:
        self.connection_tests += 1
        if self.should_fail:
            return ConnectionResult(success=False, message=str(self.failure_error))
        return ConnectionResult(success=True, message="Connection successful")

    def upload(self, credentials: FTPCredentials, item: UploadItem) -> None:
        if self.should_fail:
            raise self.failure_error
        if item.name == self.fail_on:
            raise FTPTransferError(item.name)

        self.uploaded_files.append(item.name)
        directory = self.remote_files.setdefault(credentials.remote_path, {})
        directory[item.name] = item.content

    def upload_all(
        self,
        credentials: FTPCredentials,
        items: Iterable[UploadItem],
        on_progress: Optional[ProgressCallback] = None
    ) -> None:
        items = list(items)
        for index, item in enumerate(items):
            self.upload(credentials, item)
            if on_progress:
                on_progress((index + 1) / len(items))
