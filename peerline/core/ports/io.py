from types import TracebackType
from typing import Protocol, Self


class LocalInput(Protocol):
    """
    Source of the units typed by the local operator.

    A unit is either one line of text or one raw character, depending on the
    adapter. The source is used as a context manager so that any state it
    alters (a terminal mode, a loop registration) is restored on every exit
    path of the session.
    """

    hint: str
    """
    One-line usage hint shown once the session starts.
    """

    async def read_unit(self) -> bytes | None:
        """
        Wait for and return the next unit.

        Returns None once the input has reached end-of-input. An empty read
        caused by a transient interruption is never reported as None.
        """

    def __enter__(self) -> Self:
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        ...


class OutputSink(Protocol):
    """
    Destination for everything displayed to the local operator.
    """

    def emit(self, message: bytes) -> None:
        """Display one message received from the peer."""

    def echo(self, data: bytes) -> None:
        """Display a unit typed locally, when the terminal does not echo it."""

    def notice(self, text: str) -> None:
        """Display an informational line about the session."""
