"""Configuration module for the static-site publisher.

This module handles publisher settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure password storage via keyring
- Paths: Defaults and application data locations
- PublisherSettings: Settings dataclass
"""
