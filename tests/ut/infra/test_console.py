import io

import pytest

from peerline.infra.console import LineConsole, StreamConsole


@pytest.mark.ut
def test_line_console_prints_messages_on_their_own_line():
    out = io.BytesIO()
    console = LineConsole(out=out, peer_prefix="<< ")

    console.emit(b"ping")
    console.emit(b"")
    console.notice("peer disconnected")

    assert out.getvalue() == b"<< ping\n<< \npeer disconnected\n"


@pytest.mark.ut
def test_line_console_passes_bytes_through_undecoded():
    out = io.BytesIO()
    console = LineConsole(out=out, peer_prefix="")

    console.emit(b"\xff\xfe")

    assert out.getvalue() == b"\xff\xfe\n"


@pytest.mark.ut
def test_stream_console_writes_raw_bytes():
    out = io.BytesIO()
    console = StreamConsole(out=out)

    console.emit(b"h")
    console.echo(b"i")
    console.notice("peer disconnected")

    assert out.getvalue() == b"hi\npeer disconnected\n"
