import asyncio
import logging

from peerline.core.models.config import SessionConfig
from peerline.core.models.connection import Connection, Role
from peerline.core.models.state import Termination
from peerline.core.ports.framer import Framer
from peerline.core.ports.io import LocalInput, OutputSink
from peerline.core.transport.channel import Channel
from peerline.core.transport.establish import connect_to_peer, listen_and_accept
from peerline.core.transport.pump import DuplexPump


class PeerSession:
    """
    Owns one peerline run from connection setup to teardown.

    `establish()` opens the single connection according to the configured
    role; it is blocking and must be called once, before the event loop
    runs. `start()` hands the connection to a Channel and runs the
    DuplexPump until the session terminates. The channel and the local input
    are entered as context managers, so the socket is closed and the
    terminal restored whatever the outcome, including cancellation.
    """
    def __init__(
        self,
        config: SessionConfig,
        local_input: LocalInput,
        sink: OutputSink,
        framer: Framer,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._input = local_input
        self._sink = sink
        self._framer = framer
        self._loop = loop or asyncio.get_event_loop()
        self._logger = logging.getLogger("core.service.session")

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def establish(self) -> Connection:
        config = self._config

        if config.role is Role.LISTENER:
            connection = listen_and_accept(
                config.port,
                host=config.host,
                backlog=config.backlog,
                reuse_address=config.reuse_address,
                on_listening=self._on_listening,
            )
            self._sink.notice(f"connected to peer {connection.describe()}")
        else:
            connection = connect_to_peer(
                config.host,
                config.port,
                timeout=config.connect_timeout,
                resolve_names=config.resolve_names,
            )
            self._sink.notice(f"connected to {config.host}:{config.port}")

        self._logger.info(f"Session established with {connection.describe()} as {connection.role}")
        return connection

    async def start(
        self,
        connection: Connection,
        stop_event: asyncio.Event | None = None,
    ) -> Termination:
        config = self._config

        with Channel(connection.sock, loop=self._loop) as channel, self._input as local_input:
            self._sink.notice(local_input.hint)
            pump = DuplexPump(
                channel=channel,
                local_input=local_input,
                sink=self._sink,
                framer=self._framer,
                read_chunk_size=config.read_chunk_size,
                echo_local=config.echo_local,
                loop=self._loop,
            )
            termination = await pump.run(stop_event)

        self._logger.info(
            f"Session with {connection.describe()} ended: {termination.reason}"
        )
        return termination

    def _on_listening(self, address: tuple[str, int]) -> None:
        self._sink.notice(f"listening on port {address[1]} ... waiting for one peer")
