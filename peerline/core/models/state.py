from dataclasses import dataclass
from enum import StrEnum


class SessionState(StrEnum):
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(StrEnum):
    PEER_CLOSED = "peer_closed"
    LOCAL_EOF = "local_eof"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


EXIT_CODES = {
    TerminationReason.PEER_CLOSED: 0,
    TerminationReason.LOCAL_EOF: 0,
    TerminationReason.INTERRUPTED: 130,
    TerminationReason.FAILED: 1,
}


@dataclass(frozen=True)
class Termination:
    """
    Outcome of a session.

    Returned by the DuplexPump when it leaves the RUNNING state. Peer close
    and local end-of-input are expected outcomes and carry no error.
    """
    reason: TerminationReason

    error: BaseException | None = None
    """
    The failure that ended the session, only set for FAILED.
    """

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.reason]

    @property
    def clean(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def failed(cls, error: BaseException) -> "Termination":
        return cls(reason=TerminationReason.FAILED, error=error)
