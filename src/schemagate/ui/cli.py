from __future__ import annotations

import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from schemagate.app import ensure_database_schema
from schemagate.config import configure_logging
from schemagate.domain import EXIT_ABORT

if TYPE_CHECKING:
    from types import FrameType

log = logging.getLogger(__name__)


def main() -> None:
    """Run the deployment schema gate and exit with its status."""
    configure_logging()
    try:
        outcome = ensure_database_schema()
    except Exception:
        log.exception("Fatal error during schema verification")
        sys.exit(EXIT_ABORT)
    sys.exit(outcome.exit_status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C); an interrupted gate never lets a deployment proceed."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(EXIT_ABORT)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
