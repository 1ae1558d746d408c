"""Publisher settings management.

Provides PublisherSettings dataclass and SettingsManager for persistence.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from site_publisher.config.paths import (
    DEFAULT_CONNECTION_TIMEOUT,
    DEFAULT_FTP_PORT,
    DEFAULT_TRANSFER_TIMEOUT,
    get_settings_path,
)
from site_publisher.ftp.models import FTPCredentials, UploaderConfig


@dataclass
class PublisherSettings:
    """Publishing target and transfer settings that persist between runs."""

    # FTP server
    host: str = ""
    port: int = DEFAULT_FTP_PORT
    username: str = ""
    remote_path: str = "/"
    use_tls: bool = True

    # Transfer behaviour
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    transfer_timeout: int = DEFAULT_TRANSFER_TIMEOUT
    strict_directory_creation: bool = False

    @property
    def is_configured(self) -> bool:
        """True once a host and username have been set."""
        return bool(self.host and self.username)

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PublisherSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def to_credentials(self, password: str) -> FTPCredentials:
        """
        Build credentials for the saved server.

        Raises:
            ValueError: If the saved values are incomplete or invalid
        """
        return FTPCredentials(
            host=self.host,
            port=self.port,
            username=self.username,
            password=password,
            remote_path=self.remote_path,
            use_tls=self.use_tls,
        )

    def to_uploader_config(self) -> UploaderConfig:
        """Build the uploader configuration from the saved timeouts."""
        return UploaderConfig(
            connection_timeout=self.connection_timeout,
            transfer_timeout=self.transfer_timeout,
            strict_directory_creation=self.strict_directory_creation,
        )


class SettingsManager:
    """Manages publisher settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[PublisherSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> PublisherSettings:
        """
        Load settings from disk.

        Returns:
            PublisherSettings instance (defaults if file not found)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._settings = PublisherSettings.from_dict(data)
            except (json.JSONDecodeError, IOError):
                # Invalid or unreadable file, use defaults
                self._settings = PublisherSettings()
        else:
            self._settings = PublisherSettings()

        return self._settings

    def save(self, settings: PublisherSettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        self._settings = settings

        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def reset(self) -> PublisherSettings:
        """
        Reset to default settings.

        Returns:
            Default PublisherSettings instance
        """
        self._settings = PublisherSettings()

        if self._config_path.exists():
            self._config_path.unlink()

        return self._settings

    def update(self, **kwargs) -> PublisherSettings:
        """
        Update specific settings fields.

        Args:
            **kwargs: Field names and new values

        Returns:
            Updated PublisherSettings instance
        """
        if self._settings is None:
            self.load()

        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)

        self.save(self._settings)
        return self._settings
