import sys
from typing import BinaryIO


class LineConsole:
    """
    Prints every received message on its own line, behind a prefix.
    """
    def __init__(
        self,
        out: BinaryIO | None = None,
        peer_prefix: str = "[peer] ",
        encoding: str = "utf-8",
    ) -> None:
        self._out = out or sys.stdout.buffer
        self._encoding = encoding
        self._prefix = peer_prefix.encode(encoding)

    def emit(self, message: bytes) -> None:
        self._write(self._prefix + message + b"\n")

    def echo(self, data: bytes) -> None:
        self._write(data)

    def notice(self, text: str) -> None:
        self._write(f"{text}\n".encode(self._encoding, errors="replace"))

    def _write(self, data: bytes) -> None:
        self._out.write(data)
        self._out.flush()


class StreamConsole(LineConsole):
    """
    Writes received bytes exactly as they arrive, for the keystroke mode.

    Notices start on a fresh line since the cursor is usually in the middle
    of what the peer is typing.
    """
    def emit(self, message: bytes) -> None:
        self._write(message)

    def notice(self, text: str) -> None:
        super().notice(f"\n{text}")
