# src/tasklist/connectors/console_connector.py

from __future__ import annotations

import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.observable import Subscription
from ..core.state import AppState
from ..ui.render import format_task_list

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _ask_yes_no(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def attach_notifications(state: AppState, print_fn=_print_ts) -> list[Subscription]:
    """
    Show error/success signals as one-off notifications.

    Each message is cleared right after it is shown, so it is not shown again
    when an observer re-attaches and the same text can be posted again later.
    """
    vm = state.view_model
    print_lock = threading.Lock()

    def on_error(message: str | None) -> None:
        if message is None:
            return
        with print_lock:
            print_fn(f"[!] {message}")
        vm.clear_error()

    def on_success(message: str | None) -> None:
        if message is None:
            return
        with print_lock:
            print_fn(message)
        vm.clear_success()

    return [vm.last_error.subscribe(on_error), vm.last_success.subscribe(on_success)]


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "tasklist"))
    _print_ts(f"[{app_name}] Use /help for commands, /exit to quit.\n")

    # Keep the shared task list live while the console is open.
    subs: list[Subscription] = [state.view_model.tasks.subscribe(lambda _tasks: None)]
    subs.extend(attach_notifications(state))

    print(format_task_list(state.view_model.tasks.value))

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
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

            if not user_input.startswith("/"):
                # Plain text is a shortcut for /add.
                user_input = f"/add {user_input}"

            try:
                cmd_response = command_registry.handle(state, user_input, emit=emit, confirm=_ask_yes_no)
            except Exception:
                logger.exception("Command handler crashed.")
                cmd_response = "Internal error while handling a command."

            if cmd_response is not None:
                print(cmd_response)
    finally:
        for sub in subs:
            sub.cancel()

    logger.info("Console connector finished.")
