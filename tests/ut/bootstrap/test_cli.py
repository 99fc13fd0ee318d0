import asyncio
import sys
from unittest.mock import AsyncMock, Mock, patch

import pytest

from peerline.bootstrap import boot
from peerline.bootstrap.config.loader import build_parser, get_cli_args
from peerline.core.errors import BindError
from peerline.core.models.state import Termination, TerminationReason


@pytest.fixture
def argv(monkeypatch):
    def set_argv(*args: str) -> None:
        monkeypatch.setattr(sys, "argv", ["peerline", *args])
        get_cli_args.cache_clear()

    yield set_argv
    get_cli_args.cache_clear()


@pytest.mark.ut
@pytest.mark.parametrize(
    "args",
    [
        [],
        ["listen"],
        ["listen", "abc"],
        ["listen", "70000"],
        ["listen", "-1"],
        ["connect", "127.0.0.1"],
        ["connect", "127.0.0.1", "port"],
        ["serve", "7000"],
    ],
)
def test_malformed_invocation_exits_with_usage(args, argv, capsys):
    argv(*args)

    with patch("peerline.bootstrap.boot.get_session") as get_session:
        with pytest.raises(SystemExit) as info:
            boot.main()

    assert info.value.code == 1
    assert "usage: peerline" in capsys.readouterr().err
    get_session.assert_not_called()


@pytest.mark.ut
def test_listen_and_connect_arguments():
    parser = build_parser()

    listen = parser.parse_args(["listen", "7000"])
    assert listen.command == "listen"
    assert listen.port == 7000

    connect = parser.parse_args(["-m", "stream", "connect", "peer.local", "0"])
    assert connect.command == "connect"
    assert connect.host == "peer.local"
    assert connect.port == 0
    assert connect.mode == "stream"
    assert connect.log_level == "WARNING"


@pytest.mark.ut
def test_setup_failure_exits_with_one(argv, caplog):
    argv("listen", "7000")
    session = Mock()
    session.establish.side_effect = BindError("could not bind port 7000: address already in use")

    with patch("peerline.bootstrap.boot.get_session", return_value=session):
        assert boot.main() == 1

    assert [r.name for r in caplog.records if r.levelname == "ERROR"] == ["bootstrap.boot"]

    session.start.assert_not_called()
    session.loop.close.assert_called_once()


@pytest.mark.ut
@pytest.mark.parametrize(
    "reason,code",
    [
        (TerminationReason.PEER_CLOSED, 0),
        (TerminationReason.INTERRUPTED, 130),
    ],
)
def test_exit_code_follows_termination(reason, code, argv):
    argv("connect", "127.0.0.1", "7000")
    loop = asyncio.new_event_loop()
    session = Mock()
    session.loop = loop
    session.start = AsyncMock(return_value=Termination(reason))

    with patch("peerline.bootstrap.boot.get_session", return_value=session):
        assert boot.main() == code

    session.start.assert_awaited_once()
    assert loop.is_closed()
