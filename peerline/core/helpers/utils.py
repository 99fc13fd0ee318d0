import asyncio
import contextlib
import logging
import signal
import sys
import threading
from typing import Generator

SHUTDOWN_SIGNALS = (
    signal.SIGINT,
    signal.SIGTERM,
)


@contextlib.contextmanager
def setup_signal_handler(
    loop: asyncio.AbstractEventLoop,
) -> Generator[asyncio.Event, None, None]:
    """
    Turn shutdown signals into an event the session can wait on.

    The handlers are registered on the event loop so that a signal wakes the
    readiness wait immediately. Previous behaviour is restored on exit.
    Outside the main thread, or where the loop does not support signal
    handlers, the event is returned without any handler installed.
    """
    stop_event = asyncio.Event()

    if sys.platform == "win32" or threading.current_thread() is not threading.main_thread():
        yield stop_event
        return

    installed: list[signal.Signals] = []

    def handle(sig: signal.Signals) -> None:
        logging.getLogger("core.helpers.utils").info(f"Received {sig.name}, stopping")
        stop_event.set()

    try:
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, handle, sig)
            installed.append(sig)
        yield stop_event
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )
