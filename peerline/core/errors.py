class PeerlineError(Exception):
    """Base class for every error raised by peerline."""


class SetupError(PeerlineError):
    """
    The single connection could not be established.

    Setup errors are fatal: they are reported once and the process exits
    before any session starts.
    """


class BindError(SetupError):
    """The listening port is already in use or cannot be bound."""


class AcceptError(SetupError):
    """Accepting the incoming peer failed."""


class AddressError(SetupError):
    """The peer host text cannot be parsed or resolved."""


class ConnectError(SetupError):
    """The outgoing connection was refused, unreachable or timed out."""


class SessionTerminationError(PeerlineError):
    """
    A failure that ends the running session.

    The connection is torn down and the process exits, it is never retried
    at the session level.
    """


class SendError(SessionTerminationError):
    """A message could not be transmitted completely to the peer."""


class MessageTooLarge(SessionTerminationError):
    """
    The peer sent more undelimited bytes than the receive limit allows.

    `messages` holds the complete messages that arrived in the same read,
    ahead of the oversized tail; they are still owed to the output.
    """
    def __init__(self, size: int, limit: int, messages: list[bytes] | None = None) -> None:
        super().__init__(
            f"Pending message of {size} bytes exceeds the limit of {limit} bytes"
        )
        self.size = size
        self.limit = limit
        self.messages = messages or []
