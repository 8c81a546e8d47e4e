# src/taskshift/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import PersistenceIOError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_console_line(state: AppState, line: str, emit=None) -> str | None:
    """Run one console line as a command under state.lock; storage failures become a reply."""
    if not line.startswith("/"):
        # Bare text is a shortcut for adding an untimed task to today.
        line = f"/add today {line}"

    try:
        with state.lock:
            return command_registry.handle(state, line, emit=emit)
    except PersistenceIOError:
        logger.exception("Store unavailable while handling a command.")
        return "Could not save: task storage is unavailable (see log)."
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands, /list to see tasks, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        response = handle_console_line(state, user_input, emit=emit)
        if response is not None:
            print(f"[{_ts_local()}] {response}")

    logger.info("Console connector finished.")
