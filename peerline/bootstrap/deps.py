import asyncio
import json
import sys
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from peerline.bootstrap.config.loader import get_cli_args
from peerline.bootstrap.config.settings import PeerlineConfig
from peerline.core.models.config import SessionConfig
from peerline.core.models.connection import Role
from peerline.core.ports.framer import Framer
from peerline.core.ports.io import LocalInput, OutputSink
from peerline.core.service.session import PeerSession
from peerline.core.transport.framer import LineFramer, RawPassthrough
from peerline.infra.console import LineConsole, StreamConsole
from peerline.infra.stdin import KeystrokeInput, LineInput


@lru_cache
def get_session() -> PeerSession:
    config = get_config()
    loop = get_loop()

    return PeerSession(
        config=get_session_config(),
        local_input=get_local_input(),
        sink=get_sink(),
        framer=build_framer(config),
        loop=loop,
    )


@lru_cache
def get_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


@lru_cache
def get_session_config() -> SessionConfig:
    return build_session_config(get_config(), get_cli_args().__dict__)


@lru_cache
def get_local_input() -> LocalInput:
    config = get_config()
    fd = sys.stdin.fileno()

    if config.session.mode == "stream":
        return KeystrokeInput(fd, loop=get_loop())
    return LineInput(fd, chunk_size=config.session.read_chunk_size, loop=get_loop())


@lru_cache
def get_sink() -> OutputSink:
    config = get_config()
    console = StreamConsole if config.session.mode == "stream" else LineConsole
    return console(
        peer_prefix=config.output.peer_prefix,
        encoding=config.output.encoding,
    )


@lru_cache
def get_config() -> PeerlineConfig:
    overrides: dict[str, Any] = {}
    if mode := get_cli_args().mode:
        overrides["session"] = {"mode": mode}

    try:
        return PeerlineConfig(**overrides)
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))


def build_framer(config: PeerlineConfig) -> Framer:
    if config.session.mode == "stream":
        return RawPassthrough()
    return LineFramer(max_pending_size=config.session.max_pending_size)


def build_session_config(config: PeerlineConfig, args: dict[str, Any]) -> SessionConfig:
    session = config.session
    stream = session.mode == "stream"

    common: dict[str, Any] = dict(
        port=args["port"],
        read_chunk_size=session.read_chunk_size,
        max_pending_size=session.max_pending_size,
        echo_local=stream and session.echo,
    )

    if args["command"] == "listen":
        listener = config.listener
        return SessionConfig(
            role=Role.LISTENER,
            host=listener.host,
            backlog=listener.backlog,
            reuse_address=listener.reuse_address,
            **common,
        )

    connector = config.connector
    return SessionConfig(
        role=Role.DIALER,
        host=args["host"],
        connect_timeout=connector.timeout,
        resolve_names=connector.resolve_names,
        **common,
    )
