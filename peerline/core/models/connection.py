import socket
from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    LISTENER = "listener"
    DIALER = "dialer"


@dataclass
class Connection:
    """
    The one TCP connection of a peerline run.

    Produced exactly once by the establisher and then owned by the session
    until it ends. Both roles behave identically once connected.
    """
    sock: socket.socket
    """
    Connected stream socket.
    """

    peer: tuple[str, int]
    """
    Remote address actually observed on the socket.
    """

    role: Role
    """
    How the connection was obtained. Informational only.
    """

    def describe(self) -> str:
        return "%s:%d" % self.peer
