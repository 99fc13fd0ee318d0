import asyncio
import contextlib
import logging
import os
import stat
from types import TracebackType
from typing import Self

from peerline.infra.terminal import raw_terminal


class FdInput:
    """
    Reads the local operator input from a file descriptor, usually stdin.

    Reads are readiness-driven: the descriptor is registered on the event
    loop with `add_reader` only while a read is waiting, and the read itself
    is a plain `os.read` issued once the loop reports data. The descriptor is
    never switched to non-blocking mode, so the terminal is left as found.

    Regular files, and devices the loop refuses to watch such as /dev/null,
    are always readable and are read directly.
    """
    hint = ""

    def __init__(
        self,
        fd: int,
        chunk_size: int = 4096,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._fd = fd
        self._chunk_size = chunk_size
        self._loop = loop or asyncio.get_event_loop()
        self._pollable = not stat.S_ISREG(os.fstat(fd).st_mode)
        self._logger = logging.getLogger("infra.stdin")

    async def read_unit(self) -> bytes | None:
        raise NotImplementedError

    async def _read(self, size: int) -> bytes:
        if self._pollable:
            await self._wait_readable()

        while True:
            try:
                return os.read(self._fd, size)
            except InterruptedError:
                continue
            except BlockingIOError:
                await self._wait_readable()

    async def _wait_readable(self) -> None:
        waiter = self._loop.create_future()

        def wake() -> None:
            if not waiter.done():
                waiter.set_result(None)

        try:
            self._loop.add_reader(self._fd, wake)
        except PermissionError:
            # epoll rejects devices such as /dev/null, they never block
            self._logger.debug(f"fd {self._fd} cannot be watched, reading it directly")
            self._pollable = False
            return

        try:
            await waiter
        finally:
            self._loop.remove_reader(self._fd)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None


class LineInput(FdInput):
    """
    One unit per line, as typed before pressing Enter.

    Lines are returned with their trailing newline. If the input ends in the
    middle of a line, that last partial line is returned first and the next
    call reports end-of-input.
    """
    hint = "type a message and press Enter to send; Ctrl+D to quit"

    def __init__(
        self,
        fd: int,
        chunk_size: int = 4096,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(fd, chunk_size, loop)
        self._pending = bytearray()
        self._eof = False

    async def read_unit(self) -> bytes | None:
        while True:
            end = self._pending.find(b"\n")
            if end >= 0:
                line = bytes(self._pending[:end + 1])
                del self._pending[:end + 1]
                return line

            if self._eof:
                if not self._pending:
                    return None
                line = bytes(self._pending)
                self._pending.clear()
                return line

            chunk = await self._read(self._chunk_size)
            if not chunk:
                self._logger.debug("End of local input")
                self._eof = True
            self._pending.extend(chunk)


class KeystrokeInput(FdInput):
    """
    One unit per key press.

    While the input is entered, the terminal is held in keystroke mode (no
    line buffering, no echo); the caller is responsible for echoing.
    """
    hint = "Real-time: type to send. Press Ctrl-C to quit."

    def __init__(
        self,
        fd: int,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        super().__init__(fd, chunk_size=1, loop=loop)
        self._stack = contextlib.ExitStack()

    async def read_unit(self) -> bytes | None:
        ch = await self._read(1)
        return ch or None

    def __enter__(self) -> Self:
        self._stack.enter_context(raw_terminal(self._fd))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._stack.close()
