import os
import socket
from typing import Generator

import pytest
import yaml

from tests.fake.fake_io import FakeLocalInput, FakeSink
from tests.helpers import FakePeerlineConfig


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def local_input():
    return FakeLocalInput()


@pytest.fixture
def sockpair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    left, right = socket.socketpair()
    try:
        yield left, right
    finally:
        left.close()
        right.close()


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "peerline.yaml"

    data = {
        "session": {
            "mode": "line",
            "read_chunk_size": 1024,
            "max_pending_size": 2048,
        },
        "listener": {
            "host": "127.0.0.1",
            "backlog": 1,
        },
        "connector": {
            "timeout": 2.5,
            "resolve_names": False,
        },
        "output": {
            "peer_prefix": "<< ",
        },
    }

    file.write_text(yaml.dump(data))
    return file


@pytest.fixture
def peerline_config(config_file, monkeypatch) -> FakePeerlineConfig:
    for key in list(os.environ):
        if key.startswith("PEERLINE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("TEST_PEERLINECONFIG", str(config_file))
    return FakePeerlineConfig()
