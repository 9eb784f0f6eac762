"""The tab listing runners and the operations that can be applied to them."""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Iterable, List, Optional

from runnerdeck.backend import AddLabel, ChangeGroup, DeleteLabel
from runnerdeck.models import Runner, RunnerOperation
from runnerdeck.widgets import (
    FilterableList,
    KeyCode,
    KeyEvent,
    PopupInfo,
    SelectableList,
    overlay_popup,
)


class _Stage(Enum):
    SELECT_RUNNER = auto()
    SELECT_OP = auto()
    REMOVE_LABELS = auto()


class RunnersTab:
    """Browse runners, filter them, and add or remove labels or change groups.

    ``sender`` receives backend requests through its ``put_nowait`` method.
    """

    def __init__(self, runners: Iterable[Runner], sender: Any) -> None:
        self.runners: FilterableList[Runner] = FilterableList(runners).with_first_selected()
        self.operations: SelectableList[RunnerOperation] = SelectableList(
            list(RunnerOperation)
        ).with_first_selected()
        self.dynamic_list: SelectableList[str] = SelectableList()
        self.stage = _Stage.SELECT_RUNNER
        self.input_buffer = ""
        self.popup_content: Optional[PopupInfo] = None
        self.sender = sender

    def toggle_loading(self) -> None:
        """Close the popup if it is the loading indicator."""
        if self.popup_content is not None and self.popup_content.is_loading:
            self.popup_content = None

    def set_runners(self, runners: Iterable[Runner]) -> None:
        self.runners.set_items(runners)
        self.toggle_loading()
        self.stage = _Stage.SELECT_RUNNER

    def selected(self) -> Optional[Runner]:
        return self.runners.selected()

    def _require_runner(self) -> Runner:
        runner = self.selected()
        if runner is None:
            raise LookupError("No runner selected")
        return runner

    def _drain_input(self) -> str:
        text, self.input_buffer = self.input_buffer, ""
        return text

    def _input_popup(self, title: str) -> PopupInfo:
        return PopupInfo.dynamic(title, lambda: f"{self.input_buffer}_")

    def render(self, width: int, height: int) -> List[str]:
        """Draw the tab as ``height`` lines of ``width`` characters."""
        if self.stage is _Stage.SELECT_RUNNER:
            title = "Runners - " + self.runners.input_buffer
            lines = self.runners.render(width, height, title)
        elif self.stage is _Stage.SELECT_OP:
            runner = self._require_runner()
            lines = self.operations.render(
                width, height, f"Select operation - {runner.name}"
            )
        else:
            runner = self._require_runner()
            lines = self.dynamic_list.render(
                width, height, f"Remove labels - {runner.name}"
            )
        return overlay_popup(self.popup_content, lines, width)

    def _add_label(self) -> None:
        self.popup_content = PopupInfo.loading()
        label = self._drain_input()
        runner = self._require_runner()
        self.sender.put_nowait(AddLabel(runner.id, label))

    def _remove_label(self) -> None:
        self.popup_content = PopupInfo.loading()
        runner = self._require_runner()
        label = self.dynamic_list.selected()
        if label is None:
            raise LookupError("No label selected")
        self.sender.put_nowait(DeleteLabel(runner.id, str(label)))

    def _add_to_group(self) -> None:
        self.popup_content = PopupInfo.loading()
        group_name = self._drain_input()
        runner = self._require_runner()
        self.sender.put_nowait(ChangeGroup(runner.id, group_name))

    def _confirm_operation(self) -> None:
        operation = self.operations.selected()
        if operation is RunnerOperation.ADD_LABEL:
            if self.popup_content is not None:
                self._add_label()
            else:
                self.popup_content = self._input_popup("Input new label:")
        elif operation is RunnerOperation.REMOVE_LABEL:
            runner = self._require_runner()
            self.dynamic_list.set_items(list(runner.labels))
            self.stage = _Stage.REMOVE_LABELS
        elif operation is RunnerOperation.CHANGE_GROUP:
            if self.popup_content is not None:
                self._add_to_group()
            else:
                self.popup_content = self._input_popup("Input group name:")

    def handle_input(self, event: KeyEvent) -> bool:
        """Apply a key press; return ``True`` when the application should exit."""
        code = event.code
        if code is KeyCode.ESC and self.popup_content is None:
            return True

        if self.stage is _Stage.SELECT_RUNNER:
            if code is KeyCode.LEFT:
                self.runners.select_none()
            elif code is KeyCode.DOWN:
                self.runners.select_next()
            elif code is KeyCode.UP:
                self.runners.select_previous()
            elif code is KeyCode.HOME:
                self.runners.select_first()
            elif code is KeyCode.END:
                self.runners.select_last()
            elif code in (KeyCode.RIGHT, KeyCode.ENTER):
                self.stage = _Stage.SELECT_OP
            elif code is KeyCode.BACKSPACE:
                self.runners.remove_last_input()
            elif code is KeyCode.CHAR:
                self.runners.update_filter(event.char)
        elif self.stage is _Stage.SELECT_OP:
            if code is KeyCode.UP:
                self.operations.select_previous()
            elif code is KeyCode.DOWN:
                self.operations.select_next()
            elif code is KeyCode.LEFT:
                self.stage = _Stage.SELECT_RUNNER
            elif code is KeyCode.CHAR:
                if self.popup_content is not None:
                    self.input_buffer += event.char
            elif code is KeyCode.BACKSPACE:
                self.input_buffer = self.input_buffer[:-1]
            elif code in (KeyCode.RIGHT, KeyCode.ENTER):
                self._confirm_operation()
        else:
            if code is KeyCode.UP:
                self.dynamic_list.select_previous()
            elif code is KeyCode.DOWN:
                self.dynamic_list.select_next()
            elif code is KeyCode.LEFT:
                self.stage = _Stage.SELECT_OP
            elif code is KeyCode.ENTER:
                self._remove_label()
        return False