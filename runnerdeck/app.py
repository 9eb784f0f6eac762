"""The terminal application: two tabs, a header, a footer and a request loop."""

from __future__ import annotations

import argparse
import asyncio
import asyncio.queues
import logging
import queue
import sys
import threading
from concurrent.futures import Future
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from runnerdeck.api import ApiRepository
from runnerdeck.backend import Done, GroupRepos, RunnerGroupList, RunnerList, Worker
from runnerdeck.config import read_dot_env
from runnerdeck.groups_tab import GroupsTab
from runnerdeck.models import Runner, RunnerGroup
from runnerdeck.runners_tab import RunnersTab
from runnerdeck.widgets import KeyCode, KeyEvent

log = logging.getLogger(__name__)

FOOTER_TEXT = (
    "Use ↓↑ to move, ← to unselect, → to change status, g/G to go top/bottom."
)
TAB_DIVIDER = " "
POLL_SECONDS = 0.1

_NAMED_KEYS = {
    "KEY_LEFT": KeyCode.LEFT,
    "KEY_RIGHT": KeyCode.RIGHT,
    "KEY_UP": KeyCode.UP,
    "KEY_DOWN": KeyCode.DOWN,
    "KEY_HOME": KeyCode.HOME,
    "KEY_END": KeyCode.END,
    "KEY_ENTER": KeyCode.ENTER,
    "KEY_ESCAPE": KeyCode.ESC,
    "KEY_EXIT": KeyCode.ESC,
    "KEY_BACKSPACE": KeyCode.BACKSPACE,
    "KEY_DELETE": KeyCode.BACKSPACE,
    "KEY_TAB": KeyCode.TAB,
}

_RAW_KEYS = {
    "\t": KeyCode.TAB,
    "\n": KeyCode.ENTER,
    "\r": KeyCode.ENTER,
    "\x1b": KeyCode.ESC,
    "\x7f": KeyCode.BACKSPACE,
    "\x08": KeyCode.BACKSPACE,
}


class Tab(Enum):
    RUNNERS = " Runners "
    RUNNER_GROUPS = " Runner Groups "

    def title(self) -> str:
        return self.value


def translate_key(keystroke: Any) -> Optional[KeyEvent]:
    """Turn a terminal keystroke into a :class:`KeyEvent`; ``None`` if there was none."""
    text = str(keystroke)
    name = getattr(keystroke, "name", None)
    if name in _NAMED_KEYS:
        return KeyEvent(_NAMED_KEYS[name])
    if not text:
        return None
    if text in _RAW_KEYS:
        return KeyEvent(_RAW_KEYS[text])
    if getattr(keystroke, "is_sequence", False) or len(text) != 1:
        return KeyEvent(KeyCode.OTHER)
    return KeyEvent(KeyCode.CHAR, text)


def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width)


class AppState:
    """Holds both tabs, routes keys to the visible one and applies backend replies.

    ``sender`` takes requests through ``put_nowait``; ``receiver`` hands out
    replies through ``get_nowait``.
    """

    def __init__(
        self,
        runners: Iterable[Runner],
        runner_groups: Iterable[RunnerGroup],
        selected_tab: Tab,
        sender: Any,
        receiver: Any,
    ) -> None:
        self.runners_tab = RunnersTab(runners, sender)
        self.groups_tab = GroupsTab(runner_groups, sender)
        self.selected_tab = selected_tab
        self.should_exit = False
        self.sender = sender
        self.receiver = receiver

    def handle_key(self, key: KeyEvent) -> None:
        if not key.pressed:
            return
        if key.code is KeyCode.TAB:
            self.selected_tab = (
                Tab.RUNNER_GROUPS if self.selected_tab is Tab.RUNNERS else Tab.RUNNERS
            )
        if self.selected_tab is Tab.RUNNERS:
            self.should_exit = self.runners_tab.handle_input(key)
        else:
            self.should_exit = self.groups_tab.handle_input(key)

    def apply_message(self, message: Any) -> None:
        """Apply one reply from the backend to the tabs."""
        match message:
            case Done():
                self.groups_tab.toggle_loading()
            case RunnerList(runners):
                self.runners_tab.set_runners(runners)
                self.selected_tab = Tab.RUNNERS
            case RunnerGroupList(groups):
                self.groups_tab.set_groups(groups)
            case GroupRepos(repos):
                self._set_group_repos(repos)
            case _:
                raise TypeError(f"Unknown API message: {message!r}")

    def _set_group_repos(self, repos: List[ApiRepository]) -> None:
        self.groups_tab.set_group_repos(repos)

    def poll_messages(self) -> bool:
        """Apply at most one waiting reply; return whether one was applied."""
        try:
            message = self.receiver.get_nowait()
        except (queue.Empty, asyncio.QueueEmpty):
            return False
        self.apply_message(message)
        return True

    def header(self) -> str:
        return TAB_DIVIDER.join(tab.title() for tab in Tab)

    def render(self, width: int, height: int) -> List[str]:
        """Draw the whole screen as ``height`` lines of ``width`` characters."""
        if width <= 0 or height <= 0:
            return []
        main_height = max(height - 2, 0)
        if self.selected_tab is Tab.RUNNERS:
            main = self.runners_tab.render(width, main_height)
        else:
            main = self.groups_tab.render(width, main_height)
        main = [_fit(line, width) for line in main]
        main.extend(" " * width for _ in range(main_height - len(main)))
        lines = [_fit(self.header(), width)] + main[:main_height]
        if height >= 2:
            lines.append(_fit(FOOTER_TEXT.center(width), width))
        return lines[:height]

    def _styled_header(self, terminal: Any, width: int) -> str:
        plain = self.header()
        if len(plain) > width:
            return _fit(plain, width)
        parts = [
            terminal.reverse(tab.title()) if tab is self.selected_tab else tab.title()
            for tab in Tab
        ]
        return TAB_DIVIDER.join(parts) + " " * (width - len(plain))

    def _draw(self, terminal: Any) -> None:
        width, height = terminal.width, terminal.height
        lines = self.render(width, height)
        if lines:
            lines[0] = self._styled_header(terminal, width)
        out = "".join(terminal.move_xy(0, row) + line for row, line in enumerate(lines))
        sys.stdout.write(out)
        sys.stdout.flush()

    def run(self, terminal: Any) -> None:
        """Draw, read keys and apply replies until the user exits."""
        with terminal.fullscreen(), terminal.cbreak(), terminal.hidden_cursor():
            while not self.should_exit:
                self._draw(terminal)
                event = translate_key(terminal.inkey(timeout=POLL_SECONDS))
                if event is not None:
                    self.handle_key(event)
                self.poll_messages()


def _log_failure(future: Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        log.error("Backend worker stopped", exc_info=future.exception())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the runner manager in the current terminal."""
    parser = argparse.ArgumentParser(
        prog="runnerdeck", description="Manage self-hosted runners and runner groups."
    )
    parser.add_argument("--env-file", default=".env", help="file with organization and token")
    parser.add_argument("--log-file", help="write debug logs to this file")
    args = parser.parse_args(argv)

    if args.log_file:
        logging.basicConfig(filename=args.log_file, level=logging.DEBUG)

    try:
        config = read_dot_env(args.env_file)
    except OSError as exc:
        raise SystemExit(f"Something went wrong reading {args.env_file} file: {exc}") from None
    if config is None:
        raise SystemExit("Could not read config file")

    from blessed import Terminal

    requests: queue.Queue = queue.Queue()
    replies: queue.Queue = queue.Queue()
    worker = Worker(requests, replies, config)

    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        runners = asyncio.run_coroutine_threadsafe(worker.get_runners(None), loop).result()
        app_state = AppState(runners, [], Tab.RUNNERS, requests, replies)
        running = asyncio.run_coroutine_threadsafe(worker.run(), loop)
        running.add_done_callback(_log_failure)
        app_state.run(Terminal())
        requests.put(None)
        if not running.done():
            try:
                running.result(timeout=5)
            except Exception:  # already reported by the done callback
                pass
        asyncio.run_coroutine_threadsafe(worker.client.aclose(), loop).result(timeout=5)
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
    return 0


if __name__ == "__main__":
    sys.exit(main())