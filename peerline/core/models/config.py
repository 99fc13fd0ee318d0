from dataclasses import dataclass

from peerline.core.models.connection import Role


@dataclass
class SessionConfig:
    """
    Static configuration for one peerline run.

    This structure defines everything the session needs: which role to take
    when establishing the connection, where to listen or dial, and the
    resource limits applied while the duplex pump is running.
    """
    role: Role
    """
    LISTENER binds and accepts a single peer, DIALER connects out.
    """

    host: str
    """
    Bind address for a listener, peer host for a dialer.
    """

    port: int
    """
    TCP port to bind or dial. A listener given 0 lets the OS pick one.
    """

    backlog: int = 1
    """
    Pending connections allowed on the listening socket.
    """

    reuse_address: bool = True
    """
    Set SO_REUSEADDR so a restart on the same port does not fail.
    """

    connect_timeout: float | None = None
    """
    Seconds allowed for the outgoing connect. None blocks until the OS gives up.
    """

    resolve_names: bool = True
    """
    Resolve host names for a dialer. When False only numeric IPv4 is accepted.
    """

    read_chunk_size: int = 4096
    """
    Maximum number of bytes taken from the socket per readiness event.
    """

    max_pending_size: int = 1 * 1024 * 1024  # 1MB
    """
    Maximum number of undelimited bytes buffered while waiting for a newline.
    0 disables the limit.
    """

    echo_local: bool = False
    """
    Echo every local unit to the output sink before sending it.
    Used by the keystroke mode, where the terminal does not echo.
    """
