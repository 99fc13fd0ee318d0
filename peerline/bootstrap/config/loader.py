import argparse
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import NoReturn


class UsageArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser whose usage errors exit with status 1.
    """
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def port_number(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: '{raw}'") from None

    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")

    return port


def build_parser() -> UsageArgumentParser:
    parser = UsageArgumentParser(
        prog="peerline",
        description=(
            "Exchange newline-delimited messages with one peer over TCP.\n\n"
            "One side listens and accepts a single connection, the other one\n"
            "dials it. Once connected both sides are equal: type a line and\n"
            "press Enter to send it, received lines are printed as they arrive."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a peerline configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity, written to stderr.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n\n"
            "DEBUG    → every read, send and state change.\n"
            "INFO     → session start and end.\n"
            "WARNING  → only warnings and errors (default).\n"
            "ERROR    → only errors.\n"
            "CRITICAL → only critical failures.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    parser.add_argument(
        "-m", "--mode",
        type=str,
        choices=["line", "stream"],
        help=(
            "Input granularity, overrides the configuration file.\n"
            "line   → send one line per Enter key (default).\n"
            "stream → send every key as soon as it is pressed."
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True, metavar="command")

    listen = sub.add_parser("listen", help="Wait for one peer on PORT")
    listen.add_argument("port", type=port_number)

    connect = sub.add_parser("connect", help="Connect to a peer at HOST PORT")
    connect.add_argument("host", type=str)
    connect.add_argument("port", type=port_number)

    return parser


@lru_cache
def get_cli_args() -> argparse.Namespace:
    return build_parser().parse_args()


@lru_cache
def get_configfile() -> Path | None:
    args = get_cli_args()

    # Priority: CLI > ENV > default file in current working directory
    raw = args.config or os.getenv("PEERLINECONFIG")

    if raw is None:
        file = Path.cwd() / "peerline.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the PEERLINECONFIG environment variable\n"
            "  - Or place a 'peerline.yaml' file in the current working directory."
        )

    return file
