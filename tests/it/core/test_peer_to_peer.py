import asyncio
import queue

import pytest

from peerline.core.models.config import SessionConfig
from peerline.core.models.connection import Role
from peerline.core.models.state import TerminationReason
from peerline.core.service.session import PeerSession
from peerline.core.transport.framer import LineFramer
from tests.fake.fake_io import FakeLocalInput, FakeSink
from tests.helpers import eventually


class Peer:
    def __init__(self, role: Role, port: int, loop: asyncio.AbstractEventLoop) -> None:
        self.input = FakeLocalInput()
        self.sink = FakeSink()
        self.session = PeerSession(
            config=SessionConfig(role=role, host="127.0.0.1", port=port),
            local_input=self.input,
            sink=self.sink,
            framer=LineFramer(),
            loop=loop,
        )


async def connect_pair() -> tuple[Peer, Peer, tuple]:
    loop = asyncio.get_running_loop()
    listener = Peer(Role.LISTENER, 0, loop)
    bound: queue.Queue = queue.Queue()
    record = listener.sink.notice

    def announce(text: str) -> None:
        record(text)
        if text.startswith("listening"):
            bound.put(text)

    listener.sink.notice = announce

    accepted = loop.run_in_executor(None, listener.session.establish)
    notice = await loop.run_in_executor(None, bound.get, True, 5)
    port = int(notice.split()[3])

    dialer = Peer(Role.DIALER, port, loop)
    dialer_connection = await loop.run_in_executor(None, dialer.session.establish)
    listener_connection = await asyncio.wait_for(accepted, timeout=5)

    return listener, dialer, (listener_connection, dialer_connection)


@pytest.mark.it
@pytest.mark.asyncio
async def test_ping_round_trip_and_clean_close():
    listener, dialer, (listener_conn, dialer_conn) = await connect_pair()

    listener_run = asyncio.create_task(listener.session.start(listener_conn))
    dialer_run = asyncio.create_task(dialer.session.start(dialer_conn))

    listener.input.push(b"ping\n")
    await eventually(lambda: dialer.sink.messages == [b"ping"])

    dialer.input.push(b"pong")
    await eventually(lambda: listener.sink.messages == [b"pong"])

    listener.input.push(None)
    listener_end = await asyncio.wait_for(listener_run, timeout=5)
    dialer_end = await asyncio.wait_for(dialer_run, timeout=5)

    assert listener_end.reason is TerminationReason.LOCAL_EOF
    assert dialer_end.reason is TerminationReason.PEER_CLOSED
    assert listener_end.exit_code == dialer_end.exit_code == 0
    assert "peer disconnected" in dialer.sink.notices


@pytest.mark.it
@pytest.mark.asyncio
async def test_large_message_arrives_intact():
    listener, dialer, (listener_conn, dialer_conn) = await connect_pair()

    listener_run = asyncio.create_task(listener.session.start(listener_conn))
    dialer_run = asyncio.create_task(dialer.session.start(dialer_conn))

    payload = bytes(ord("a") + i % 26 for i in range(512 * 1024))
    dialer.input.push(payload + b"\n", None)

    await asyncio.wait_for(dialer_run, timeout=10)
    listener_end = await asyncio.wait_for(listener_run, timeout=10)

    assert listener.sink.messages == [payload]
    assert listener_end.reason is TerminationReason.PEER_CLOSED
