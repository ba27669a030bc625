# src/taskflow/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..cli.commands import durability_note, render_view
from ..core.errors import ValidationError
from ..core.state import AppState

logger = logging.getLogger(__name__)


def handle_line(state: AppState, line: str) -> str | None:
    """
    One console input -> reply text.

    Slash commands go to the registry; any other text adds a task with that title.
    Returns None for blank input.
    """
    line = line.strip()
    if not line:
        return None

    try:
        cmd_response = command_registry.handle(state, line)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if cmd_response is not None:
        return cmd_response

    try:
        task = state.repository.add(line)
    except ValidationError as e:
        return f"Error: {e}"
    return f"Added: {task.title}{durability_note(state)}"


def run_console_loop(
    state: AppState,
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    app_name = str(getattr(state.settings, "app_name", "taskflow"))
    logger.info("Console connector started.")
    write(f"[{app_name}] Type a title to add a task. Use /help for commands. Use /exit to quit.")
    if not state.storage_available:
        write("Warning: storage is not available; tasks will be lost when you quit.")
    write(render_view(state))

    while True:
        try:
            user_input = read(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input)
        if reply is not None:
            write(reply)
