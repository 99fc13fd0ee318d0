import logging

from peerline.core.errors import MessageTooLarge

DELIMITER = b"\n"


def extract_messages(buffer: bytes | bytearray) -> tuple[list[bytes], bytes]:
    """
    Split a byte buffer into the complete newline-terminated messages it holds.

    Returns the messages, without their delimiter, in order, and the trailing
    bytes that are not terminated yet.
    """
    messages: list[bytes] = []
    start = 0

    while True:
        end = buffer.find(DELIMITER, start)
        if end < 0:
            break
        messages.append(bytes(buffer[start:end]))
        start = end + 1

    return messages, bytes(buffer[start:])


class LineFramer:
    """
    Reassembles newline-delimited messages from an unbounded byte stream.

    TCP has no message boundaries: a single read may hold several messages,
    a fraction of one, or both. LineFramer keeps the received bytes in an
    inbound buffer and, on every feed, drains all the messages that are
    complete so that the buffer never holds a complete message at rest.
    Whatever follows the last delimiter stays buffered for the next feed.

    The buffer is bounded by `max_pending_size`: if the undelimited tail
    grows beyond it, MessageTooLarge is raised and the caller is expected to
    end the session. A limit of 0 leaves the buffer unbounded.
    """
    def __init__(self, max_pending_size: int = 0) -> None:
        self._buffer = bytearray()
        self._max_pending_size = max_pending_size
        self._logger = logging.getLogger("core.transport.framer")

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def encode(self, unit: bytes) -> bytes:
        if unit.endswith(DELIMITER):
            return unit
        return unit + DELIMITER

    def feed(self, data: bytes) -> list[bytes]:
        self._buffer.extend(data)

        messages, remaining = extract_messages(self._buffer)
        if messages:
            del self._buffer[:len(self._buffer) - len(remaining)]

        if self._max_pending_size and len(self._buffer) > self._max_pending_size:
            self._logger.warning("Inbound buffer overflow, no delimiter in sight")
            raise MessageTooLarge(len(self._buffer), self._max_pending_size, messages)

        return messages


class RawPassthrough:
    """
    Framer for the keystroke mode: bytes go out as typed and come in as read.
    """

    @property
    def pending(self) -> int:
        return 0

    def encode(self, unit: bytes) -> bytes:
        return unit

    def feed(self, data: bytes) -> list[bytes]:
        return [data] if data else []
