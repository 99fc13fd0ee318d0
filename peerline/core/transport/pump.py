import asyncio
import logging
from typing import Any

from peerline.core.errors import MessageTooLarge, SessionTerminationError
from peerline.core.models.state import SessionState, Termination, TerminationReason
from peerline.core.ports.framer import Framer
from peerline.core.ports.io import LocalInput, OutputSink
from peerline.core.transport.channel import Channel


class DuplexPump:
    """
    Runs the duplex session over an established Channel.

    Each iteration waits on exactly two readiness sources, the local input
    and the channel, and suspends nowhere else. When the local input is
    ready, one unit is read, encoded by the Framer and written with a
    must-fully-send. When the channel is ready, one chunk is read, fed to
    the Framer and every complete message is emitted to the OutputSink in
    arrival order. Once readiness is signalled the corresponding action runs
    to completion before the next wait, so the two actions never interleave.

    The pump stays RUNNING until one terminal condition fires:
    - the local input reaches end-of-input
    - the peer closes the connection (zero-length read)
    - an unrecoverable I/O error occurs on either side
    - a send cannot be completed
    - the optional stop event is set by a signal handler

    The outcome is returned as a Termination. The pump never closes the
    channel itself: its owner releases it on every exit path.
    """
    def __init__(
        self,
        channel: Channel,
        local_input: LocalInput,
        sink: OutputSink,
        framer: Framer,
        read_chunk_size: int = 4096,
        echo_local: bool = False,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._channel = channel
        self._input = local_input
        self._sink = sink
        self._framer = framer
        self._read_chunk_size = read_chunk_size
        self._echo_local = echo_local
        self._loop = loop or asyncio.get_event_loop()
        self.state = SessionState.RUNNING
        self._logger = logging.getLogger("core.transport.pump")

    async def run(self, stop_event: asyncio.Event | None = None) -> Termination:
        local_read: asyncio.Task[bytes | None] | None = None
        remote_read: asyncio.Task[bytes] | None = None
        stop_wait: asyncio.Task[Any] | None = None

        if stop_event is not None:
            stop_wait = self._loop.create_task(stop_event.wait())

        try:
            while True:
                if local_read is None:
                    local_read = self._loop.create_task(self._input.read_unit())
                if remote_read is None:
                    remote_read = self._loop.create_task(
                        self._channel.recv(self._read_chunk_size)
                    )

                waiters: set[asyncio.Task[Any]] = {local_read, remote_read}
                if stop_wait is not None:
                    waiters.add(stop_wait)

                done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

                if stop_wait in done:
                    self._sink.notice("interrupted; closing connection")
                    return Termination(TerminationReason.INTERRUPTED)

                if local_read in done:
                    task, local_read = local_read, None
                    termination = await self._on_local_ready(task)
                    if termination is not None:
                        return termination

                if remote_read in done:
                    task, remote_read = remote_read, None
                    termination = self._on_channel_ready(task)
                    if termination is not None:
                        return termination
        finally:
            self.state = SessionState.TERMINATED
            await self._cancel(local_read, remote_read, stop_wait)

    async def _on_local_ready(self, task: asyncio.Task[bytes | None]) -> Termination | None:
        try:
            unit = task.result()
        except (OSError, SessionTerminationError) as ex:
            self._logger.error(f"Local input failed: {ex}")
            return Termination.failed(ex)

        if unit is None:
            self._sink.notice("stdin closed; goodbye")
            return Termination(TerminationReason.LOCAL_EOF)

        if self._echo_local:
            self._sink.echo(unit)

        try:
            await self._channel.send_all(self._framer.encode(unit))
        except SessionTerminationError as ex:
            self._logger.error(str(ex))
            self._sink.notice("failed to send to peer")
            return Termination.failed(ex)

        return None

    def _on_channel_ready(self, task: asyncio.Task[bytes]) -> Termination | None:
        try:
            data = task.result()
        except OSError as ex:
            self._logger.error(f"Failed to receive from peer: {ex}")
            return Termination.failed(ex)

        if not data:
            if pending := self._framer.pending:
                self._logger.warning(f"Discarding {pending} undelimited byte(s) left by the peer")
            self._sink.notice("peer disconnected")
            return Termination(TerminationReason.PEER_CLOSED)

        self._logger.debug(f"Received {len(data)} bytes")

        try:
            messages = self._framer.feed(data)
        except MessageTooLarge as ex:
            for message in ex.messages:
                self._sink.emit(message)
            self._logger.error(str(ex))
            return Termination.failed(ex)
        except SessionTerminationError as ex:
            self._logger.error(str(ex))
            return Termination.failed(ex)

        for message in messages:
            self._sink.emit(message)

        return None

    @staticmethod
    async def _cancel(*tasks: asyncio.Task[Any] | None) -> None:
        pending = []
        for task in tasks:
            if task is None:
                continue
            if not task.done():
                task.cancel()
                pending.append(task)
            elif not task.cancelled():
                # outcome is irrelevant once terminated, only mark it retrieved
                task.exception()

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
