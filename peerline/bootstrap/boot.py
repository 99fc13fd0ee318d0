import logging

from peerline.bootstrap.config.loader import get_cli_args
from peerline.bootstrap.deps import get_session
from peerline.core.errors import SetupError
from peerline.core.helpers.utils import setup_signal_handler, setup_logging
from peerline.core.models.state import EXIT_CODES, TerminationReason


def main() -> int:
    cli = get_cli_args()

    setup_logging(cli.log_level)
    logger = logging.getLogger("bootstrap.boot")

    session = get_session()
    loop = session.loop

    try:
        try:
            connection = session.establish()
        except SetupError as ex:
            logger.error(str(ex))
            return 1
        except KeyboardInterrupt:
            return EXIT_CODES[TerminationReason.INTERRUPTED]

        with setup_signal_handler(loop) as stop_event:
            termination = loop.run_until_complete(session.start(connection, stop_event))

        return termination.exit_code
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()


if __name__ == "__main__":
    raise SystemExit(main())
