from typing import Protocol


class Framer(Protocol):
    """
    Defines how application-level units are laid out on the byte stream.

    Implementations must:
    - turn one local unit into the exact bytes to transmit (encode)
    - accumulate received bytes and return the complete messages (feed)
    - keep any incomplete trailing bytes for the next call
    """

    def encode(self, unit: bytes) -> bytes:
        """Return the wire representation of a unit produced locally."""

    def feed(self, data: bytes) -> list[bytes]:
        """Append received bytes and return every message now complete."""

    @property
    def pending(self) -> int:
        """Number of received bytes not yet resolved into a message."""
