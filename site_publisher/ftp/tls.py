"""TLS helpers for FTPS connections."""

import socket
import ssl
from typing import Optional


MINIMUM_TLS_VERSION = ssl.TLSVersion.TLSv1_2


def create_tls_context(base: Optional[ssl.SSLContext] = None) -> ssl.SSLContext:
    """
    Build the client context used for both FTPS channels.

    A caller-supplied context is returned itself, not copied: if its
    minimum version is below TLS 1.2 it is raised in place.

    Args:
        base: Optional caller-supplied context (e.g. trusting a private CA)

    Returns:
        Context that refuses anything older than TLS 1.2
    """
    if base is not None:
        context = base
    else:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if context.minimum_version < MINIMUM_TLS_VERSION:
        context.minimum_version = MINIMUM_TLS_VERSION
    return context


def wrap_client_socket(
    sock: socket.socket,
    server_hostname: str,
    context: Optional[ssl.SSLContext] = None
) -> ssl.SSLSocket:
    """
    Perform the client handshake on a connected socket.

    Raises:
        ssl.SSLError: If the handshake fails
        OSError: On socket failure during the handshake
    """
    context = create_tls_context(context)
    return context.wrap_socket(sock, server_hostname=server_hostname)
