import contextlib
import logging
import os
import sys
from typing import Generator

if sys.platform != "win32":
    import termios

logger = logging.getLogger("infra.terminal")


@contextlib.contextmanager
def raw_terminal(fd: int) -> Generator[bool, None, None]:
    """
    Put the terminal behind `fd` in keystroke mode for the duration of the block.

    Canonical line editing and echo are turned off so that every key is
    delivered as soon as it is pressed. ISIG is left untouched, Ctrl-C still
    interrupts. The previous settings are restored on every exit path.

    Yields False without touching anything when `fd` is not a terminal.
    """
    if sys.platform == "win32" or not os.isatty(fd):
        yield False
        return

    original = termios.tcgetattr(fd)
    raw = termios.tcgetattr(fd)
    raw[3] &= ~(termios.ICANON | termios.ECHO)
    raw[6][termios.VMIN] = 1
    raw[6][termios.VTIME] = 0

    termios.tcsetattr(fd, termios.TCSANOW, raw)
    logger.debug("Terminal switched to keystroke mode")
    try:
        yield True
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, original)
        logger.debug("Terminal settings restored")
