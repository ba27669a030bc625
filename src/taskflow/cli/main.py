# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging_from_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_path = setup_logging_from_settings(settings)

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_path or "off")

    state = create_initial_state(settings=settings)
    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
