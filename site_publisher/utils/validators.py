"""Input validators for the static-site publisher.

Provides validation functions for user inputs like host names, ports,
timeouts, remote paths and upload file names.
"""

from typing import Optional, Tuple


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host (hostname, IPv4 or IPv6 address).

    Name resolution is left to the connection, so any non-empty value
    without whitespace is accepted.

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    if any(char.isspace() for char in host):
        return False, f"Invalid host: {host.strip()!r}. Host cannot contain whitespace."

    return True, None


def validate_port(port: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 1 or port > 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_timeout(
    timeout: float,
    minimum: float = 5,
    maximum: float = 300
) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds
        minimum: Smallest accepted value
        maximum: Largest accepted value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, (int, float)):
        try:
            timeout = float(timeout)
        except (ValueError, TypeError):
            return False, "Timeout must be a number"

    if timeout < minimum or timeout > maximum:
        return False, (
            f"Timeout must be between {minimum:g} and {maximum:g} seconds, "
            f"got {timeout:g}"
        )

    return True, None


def validate_remote_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote FTP directory path.

    Absolute paths are created from the server root, relative ones from
    the login directory.

    Args:
        path: Posix-style path, e.g. "/public_html/site" or "public_html"

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or not path.strip():
        return False, "Remote path is required"

    if "\r" in path or "\n" in path:
        return False, "Remote path cannot contain line breaks"

    return True, None


def validate_file_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote file name.

    Args:
        name: File name written with STOR into the current directory

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name or not name.strip():
        return False, "File name is required"

    if "/" in name or "\\" in name:
        return False, f"File name cannot contain path separators: {name}"

    if name in (".", ".."):
        return False, f"Invalid file name: {name}"

    if "\r" in name or "\n" in name:
        return False, "File name cannot contain line breaks"

    return True, None
