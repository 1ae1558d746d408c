"""FTP operations module for the static-site publisher.

This module handles all FTP-related functionality:
- codec: Command encoding and reply decoding
- ControlChannel: Command/reply transport with state tracking
- passive: PASV parsing and single-use data connections
- FTPSession: Protocol sequence for one publish run
- FTPUploader / MockUploader: Public upload façade and test double
- Exceptions: FTP-specific error types
"""
