"""Secure credential storage for the static-site publisher.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) to securely store FTP passwords.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger("site_publisher.credentials")


class CredentialManager:
    """Secure credential storage using system keyring."""

    SERVICE_NAME = "site-publisher-ftp"

    def _make_key(self, host: str, username: str) -> str:
        """Create a unique key for the credential."""
        return f"{host}:{username}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Save FTP password securely.

        Args:
            host: FTP host
            username: FTP username
            password: Password to save

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host, username), password)
            return True
        except KeyringError as e:
            logger.warning(f"Could not store password in keyring: {e}")
            return False

    def get_password(self, host: str, username: str) -> Optional[str]:
        """
        Retrieve saved password.

        Returns:
            Password string or None if not found
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host, username))
        except KeyringError as e:
            logger.warning(f"Could not read password from keyring: {e}")
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove saved password.

        Returns:
            True if deleted successfully, False otherwise
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host, username))
            return True
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            logger.warning(f"Could not delete password from keyring: {e}")
            return False
