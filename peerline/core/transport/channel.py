import asyncio
import logging
import socket
from types import TracebackType
from typing import Self

from peerline.core.errors import SendError


class Channel:
    """
    Readiness-driven byte I/O over the single connected socket.

    The socket is switched to non-blocking mode. Reads go through the event
    loop's `sock_recv`, which tries the system call first and only watches
    the socket when nothing is buffered yet.

    `send_all` implements the must-fully-send write: `socket.send` may
    accept fewer bytes than requested, so the offset is advanced and the
    call repeated until every byte is handed to the kernel. When the kernel
    reports that it would block, the Channel registers a one-shot writer on
    the event loop and suspends until the socket is writable again. A send
    that reports zero bytes, or fails with an OSError, raises SendError;
    nothing is retried at the message level.

    Signal-interrupted calls (InterruptedError) are retried immediately and
    never surface to the caller.
    """
    def __init__(
        self,
        sock: socket.socket,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._sock = sock
        self._sock.setblocking(False)
        self._loop = loop or asyncio.get_event_loop()
        self._closed = False
        self._logger = logging.getLogger("core.transport.channel")

    @property
    def closed(self) -> bool:
        return self._closed

    async def recv(self, size: int) -> bytes:
        """
        Return up to `size` bytes as soon as some are available.

        An empty result means that the peer closed its end of the connection.
        """
        return await self._loop.sock_recv(self._sock, size)

    async def send_all(self, data: bytes) -> int:
        """
        Transmit all of `data` and return the number of send calls it took.
        """
        view = memoryview(data)
        calls = 0

        while view:
            try:
                sent = self._sock.send(view)
            except InterruptedError:
                continue
            except BlockingIOError:
                await self._wait_writable()
                continue
            except OSError as ex:
                raise SendError(f"Failed to send to peer: {ex}") from ex
            finally:
                calls += 1

            if sent == 0:
                raise SendError("Connection closed by peer during send")

            view = view[sent:]

        self._logger.debug(f"Sent {len(data)} bytes in {calls} call(s)")
        return calls

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        try:
            self._sock.close()
        except OSError as ex:
            self._logger.debug(f"Error while closing socket: {ex}")

    async def _wait_writable(self) -> None:
        fd = self._sock.fileno()
        waiter = self._loop.create_future()
        self._loop.add_writer(fd, _wake, waiter)
        try:
            await waiter
        finally:
            self._loop.remove_writer(fd)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _wake(waiter: asyncio.Future[None]) -> None:
    if not waiter.done():
        waiter.set_result(None)
