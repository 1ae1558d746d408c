"""Wire codec for the FTP control channel.

Pure translation between protocol text and structured values:
commands are encoded as CRLF-terminated lines and server replies are
decoded into a three-digit code plus message text. Handles both
single-line and multi-line (``123-`` continued) replies.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from site_publisher.ftp.exceptions import (
    FTPEncodingError,
    FTPProtocolError,
    ProtocolErrorKind,
)


CRLF = b"\r\n"

# Reply code at the start of a line
REPLY_CODE_PATTERN = re.compile(r"^([0-9]{3})")

# Verbs whose arguments must never appear in logs or error messages
SECRET_VERBS = frozenset({"PASS"})


@dataclass(frozen=True)
class Reply:
    """A decoded server reply."""
    code: int
    message: str
    lines: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_preliminary(self) -> bool:
        """True for 1xx replies (transfer about to start)."""
        return 100 <= self.code < 200

    @property
    def is_success(self) -> bool:
        """True for the 1xx and 2xx replies this client proceeds on."""
        return 100 <= self.code < 300

    @property
    def is_intermediate(self) -> bool:
        """True for 3xx replies (more input needed, e.g. 331)."""
        return 300 <= self.code < 400

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx replies."""
        return self.code >= 400

    def __str__(self) -> str:
        return f"{self.code} {self.message}"


def encode_command(verb: str, *args: str) -> bytes:
    """
    Encode a command line for the control channel.

    Args:
        verb: FTP command verb (e.g. "STOR")
        *args: Arguments joined to the verb with single spaces

    Returns:
        The command as CRLF-terminated bytes

    Raises:
        FTPEncodingError: If the text contains line breaks or cannot be encoded
    """
    text = " ".join([verb, *args])
    shown = f"{verb} ****" if verb.upper() in SECRET_VERBS else text

    if "\r" in text or "\n" in text:
        raise FTPEncodingError(shown, ValueError("line break in command"))

    try:
        return text.encode("utf-8") + CRLF
    except UnicodeEncodeError as e:
        raise FTPEncodingError(shown, e)


def _split_lines(buffer: bytes) -> List[Tuple[bytes, int]]:
    """Return complete lines in buffer with the offset just past each one."""
    lines = []
    start = 0
    while True:
        end = buffer.find(b"\n", start)
        if end == -1:
            break
        lines.append((buffer[start:end].rstrip(b"\r"), end + 1))
        start = end + 1
    return lines


def _reply_code(line: str) -> str:
    match = REPLY_CODE_PATTERN.match(line)
    if not match or not 100 <= int(match.group(1)) <= 599:
        raise FTPProtocolError(
            ProtocolErrorKind.MALFORMED_REPLY,
            f"reply does not start with a status code: {line[:40]!r}"
        )
    return match.group(1)


def find_reply_end(buffer: bytes) -> Optional[int]:
    """
    Locate the end of the first complete reply in a receive buffer.

    Args:
        buffer: Bytes received so far on the control channel

    Returns:
        Offset just past the reply's final line, or None if more data is needed

    Raises:
        FTPProtocolError: If the first line does not start with a status code
    """
    lines = _split_lines(buffer)
    if not lines:
        return None

    first, first_end = lines[0]
    first_text = first.decode("utf-8", errors="replace")
    code = _reply_code(first_text)

    if first_text[3:4] != "-":
        return first_end

    terminator = f"{code} "
    for raw, end in lines[1:]:
        text = raw.decode("utf-8", errors="replace")
        if text.startswith(terminator) or text == code:
            return end

    return None


def decode_reply(raw: bytes) -> Reply:
    """
    Decode one server reply.

    Args:
        raw: Bytes of a complete reply, single or multi-line

    Returns:
        Reply with the parsed code and message text. Multi-line
        messages are joined with newlines.

    Raises:
        FTPProtocolError: If the code is missing or a multi-line reply
            never terminates
    """
    # Split on LF only, the same way find_reply_end frames replies
    lines = [
        line.rstrip(b"\r").decode("utf-8", errors="replace")
        for line in raw.split(b"\n")
    ]
    if lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise FTPProtocolError(ProtocolErrorKind.MALFORMED_REPLY, "empty reply")

    first = lines[0]
    code = _reply_code(first)

    if first[3:4] != "-":
        return Reply(code=int(code), message=first[4:].strip(), lines=(first,))

    parts = [first[4:]]
    terminator = f"{code} "
    for index, line in enumerate(lines[1:], start=1):
        if line.startswith(terminator) or line == code:
            parts.append(line[4:])
            message = "\n".join(part.strip() for part in parts)
            return Reply(
                code=int(code),
                message=message,
                lines=tuple(lines[:index + 1])
            )
        # Continuation lines may repeat the code with a dash or carry bare text
        parts.append(line[4:] if line.startswith(f"{code}-") else line)

    raise FTPProtocolError(
        ProtocolErrorKind.MALFORMED_REPLY,
        f"multi-line {code} reply is not terminated"
    )
