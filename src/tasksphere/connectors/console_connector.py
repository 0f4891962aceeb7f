# src/tasksphere/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..storage.kv_store import StorageError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str) -> str | None:
    """Run one console line through the command registry. Never raises."""

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        with state.lock:
            return command_registry.handle(state, line, emit=emit)
    except StorageError:
        logger.exception("Storage failure while handling %r.", line)
        return "Storage error: the change was not saved."
    except ValueError as e:
        return f"Invalid input: {e}"
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

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

        reply = handle_line(state, user_input)
        if reply is None:
            _print_ts("Commands start with '/'. Use /help to list them.")
            continue
        _print_ts(reply)

    logger.info("Console connector finished.")
