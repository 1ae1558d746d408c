"""Command-line entry point for the static-site publisher.

Wires settings, keyring credentials and the FTP uploader together:

    site-publisher configure --host example.com --username web --remote-path /public_html
    site-publisher test
    site-publisher publish build/index.html build/style.css
"""

import argparse
import getpass
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from .config.credentials import CredentialManager
from .config.paths import get_log_file_path
from .config.settings import PublisherSettings, SettingsManager
from .ftp.exceptions import FTPError, FTPTransferError
from .ftp.models import FTPCredentials, UploadItem
from .ftp.uploader import FTPUploader, Uploader
from .utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="site-publisher",
        description="Publish exported static-site files over FTP/FTPS."
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="Settings file (defaults to the per-user config directory)"
    )
    parser.add_argument(
        "--password", default=None,
        help="FTP password (defaults to the keyring, then a prompt)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log FTP traffic")

    commands = parser.add_subparsers(dest="command", required=True)

    configure = commands.add_parser("configure", help="Save the publishing target")
    configure.add_argument("--host")
    configure.add_argument("--port", type=int)
    configure.add_argument("--username")
    configure.add_argument("--remote-path")
    configure.add_argument("--tls", dest="use_tls", action="store_true", default=None)
    configure.add_argument("--no-tls", dest="use_tls", action="store_false")
    configure.add_argument("--connection-timeout", type=int)
    configure.add_argument("--transfer-timeout", type=int)
    configure.add_argument(
        "--strict-mkd", dest="strict_directory_creation",
        action="store_true", default=None,
        help="Fail when a directory cannot be created for reasons other than existing"
    )
    configure.add_argument(
        "--save-password", action="store_true",
        help="Store the password in the system keyring"
    )
    configure.add_argument(
        "--forget-password", action="store_true",
        help="Remove the saved password from the system keyring"
    )
    configure.add_argument(
        "--reset", action="store_true",
        help="Start from default settings before applying the options"
    )

    commands.add_parser("test", help="Test the connection and login")

    publish = commands.add_parser("publish", help="Upload files to the remote path")
    publish.add_argument("files", nargs="+", type=Path)

    return parser


def resolve_password(
    args: argparse.Namespace,
    settings: PublisherSettings,
    credentials: CredentialManager
) -> str:
    """Password from the command line, the keyring or an interactive prompt."""
    if args.password is not None:
        return args.password

    saved = credentials.get_password(settings.host, settings.username)
    if saved is not None:
        return saved

    return getpass.getpass(f"Password for {settings.username}@{settings.host}: ")


def load_items(paths: List[Path]) -> List[UploadItem]:
    """Read local files into upload items named by their basenames."""
    items = []
    for path in paths:
        content_type, _ = mimetypes.guess_type(path.name)
        items.append(UploadItem(
            name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        ))
    return items


def run_configure(
    args: argparse.Namespace,
    manager: SettingsManager,
    credentials: CredentialManager
) -> int:
    if args.reset:
        manager.reset()

    updates = {
        key: getattr(args, key)
        for key in (
            "host", "port", "username", "remote_path", "use_tls",
            "connection_timeout", "transfer_timeout", "strict_directory_creation",
        )
        if getattr(args, key) is not None
    }
    settings = manager.update(**updates)

    if args.save_password:
        password = resolve_password(args, settings, credentials)
        if not credentials.save_password(settings.host, settings.username, password):
            print("Could not store the password in the keyring", file=sys.stderr)
            return 1

    if args.forget_password:
        if credentials.delete_password(settings.host, settings.username):
            print("Saved password removed")
        else:
            print("No saved password to remove")

    print(f"Settings saved to {manager.config_path}")
    return 0


def run_test(uploader: Uploader, ftp_credentials: FTPCredentials) -> int:
    result = uploader.test_connection(ftp_credentials)
    print(result.message)
    return 0 if result.success else 1


def run_publish(
    uploader: Uploader,
    ftp_credentials: FTPCredentials,
    paths: List[Path]
) -> int:
    try:
        items = load_items(paths)
    except OSError as e:
        print(f"Cannot read file: {e}", file=sys.stderr)
        return 1

    def on_progress(fraction: float) -> None:
        print(f"\rUploading... {fraction * 100:5.1f}%", end="", flush=True)

    try:
        uploader.upload_all(ftp_credentials, items, on_progress)
    except FTPTransferError as e:
        print(f"\nUpload of '{e.file_name}' failed: {e}", file=sys.stderr)
        return 1
    except FTPError as e:
        print(f"\nPublish failed: {e}", file=sys.stderr)
        return 1

    print(f"\nPublished {len(items)} files to {ftp_credentials.remote_path}")
    return 0


def main(argv: Optional[List[str]] = None, uploader: Optional[Uploader] = None) -> int:
    """
    Application entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv)
        uploader: Uploader to use instead of the network one

    Returns:
        Exit code (0 for success)
    """
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=get_log_file_path(),
        console=args.verbose,
    )

    manager = SettingsManager(args.settings)
    settings = manager.load()
    credentials = CredentialManager()

    if args.command == "configure":
        return run_configure(args, manager, credentials)

    if not settings.is_configured:
        print("No publishing target configured, run 'configure' first", file=sys.stderr)
        return 1

    try:
        ftp_credentials = settings.to_credentials(
            resolve_password(args, settings, credentials)
        )
        config = settings.to_uploader_config()
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 1

    uploader = uploader or FTPUploader(config)
    logger.info(f"Running '{args.command}' against {settings.host}")

    if args.command == "test":
        return run_test(uploader, ftp_credentials)
    return run_publish(uploader, ftp_credentials, args.files)


if __name__ == "__main__":
    sys.exit(main())
