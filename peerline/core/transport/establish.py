import ipaddress
import logging
import socket
from collections.abc import Callable

from peerline.core.errors import AcceptError, AddressError, BindError, ConnectError
from peerline.core.models.connection import Connection, Role

logger = logging.getLogger("core.transport.establish")


def listen_and_accept(
    port: int,
    host: str = "0.0.0.0",
    backlog: int = 1,
    reuse_address: bool = True,
    on_listening: Callable[[tuple[str, int]], None] | None = None,
) -> Connection:
    """
    Wait for exactly one peer on `port` and return the connection to it.

    The listening socket only lives for the duration of this call: once a
    peer has been accepted it is closed, so no further connection can be
    queued. `on_listening` is called with the bound address right before
    blocking, which tells the caller the real port when `port` is 0.
    """
    try:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as ex:
        raise BindError(f"Unable to create a listening socket: {ex}") from ex

    with listener:
        try:
            if reuse_address:
                listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((host, port))
            listener.listen(backlog)
        except OSError as ex:
            raise BindError(f"Unable to listen on {host}:{port}: {ex}") from ex

        bound = listener.getsockname()[:2]
        logger.debug("Listening on %s:%d", *bound)
        if on_listening is not None:
            on_listening(bound)

        while True:
            try:
                sock, addr = listener.accept()
                break
            except InterruptedError:
                continue
            except OSError as ex:
                raise AcceptError(f"Unable to accept a peer on port {bound[1]}: {ex}") from ex

    peer = (addr[0], addr[1])
    logger.debug("Accepted peer %s:%d, listener released", *peer)
    return Connection(sock=sock, peer=peer, role=Role.LISTENER)


def resolve_host(host: str, port: int, resolve_names: bool = True) -> str:
    """
    Return the IPv4 address to dial for `host`.

    Numeric IPv4 text is used as is. Anything else goes through name
    resolution, unless `resolve_names` is False.
    """
    try:
        return str(ipaddress.IPv4Address(host))
    except ValueError:
        if not resolve_names:
            raise AddressError(f"Invalid IPv4 address: '{host}'") from None

    try:
        infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as ex:
        raise AddressError(f"Unable to resolve '{host}': {ex}") from ex

    if not infos:
        raise AddressError(f"No IPv4 address found for '{host}'")

    return infos[0][4][0]


def connect_to_peer(
    host: str,
    port: int,
    timeout: float | None = None,
    resolve_names: bool = True,
) -> Connection:
    address = resolve_host(host, port, resolve_names)

    try:
        sock = socket.create_connection((address, port), timeout=timeout)
    except OSError as ex:
        raise ConnectError(f"Unable to connect to {host}:{port}: {ex}") from ex

    sock.settimeout(None)
    try:
        peer = sock.getpeername()[:2]
    except OSError as ex:
        sock.close()
        raise ConnectError(f"Connection to {host}:{port} dropped: {ex}") from ex

    logger.debug("Connected to %s:%d", *peer)
    return Connection(sock=sock, peer=(peer[0], peer[1]), role=Role.DIALER)
