"""The tab listing runner groups and the operations that can be applied to them."""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Any, Iterable, List, Optional

from runnerdeck.api import ApiRepository, ApiRunnerGroupCreate, RunnerGroupVisibility
from runnerdeck.backend import AddRepoToGroup, CreateRunnerGroup, GetGroupRepos
from runnerdeck.models import GroupOperation, RunnerGroup
from runnerdeck.widgets import (
    FilterableList,
    KeyCode,
    KeyEvent,
    PopupInfo,
    SelectableList,
    overlay_popup,
)

log = logging.getLogger(__name__)


class _Stage(Enum):
    SELECT_GROUP = auto()
    SELECT_OPERATION = auto()
    CREATE_GROUP = auto()
    ADD_REPO = auto()
    LIST_REPOS = auto()


class GroupsTab:
    """Browse runner groups, create groups and manage repository access.

    ``sender`` receives backend requests through its ``put_nowait`` method.
    """

    def __init__(self, groups: Iterable[RunnerGroup], sender: Any) -> None:
        self.groups: FilterableList[RunnerGroup] = FilterableList(groups).with_first_selected()
        self.operations: SelectableList[GroupOperation] = SelectableList(
            list(GroupOperation)
        ).with_first_selected()
        self.dynamic_list: SelectableList[ApiRepository] = SelectableList()
        self.stage = _Stage.SELECT_GROUP
        self.input_buffer = ""
        self.popup_content: Optional[PopupInfo] = None
        self.sender = sender

    def toggle_loading(self) -> None:
        """Close the popup if it is the loading indicator."""
        if self.popup_content is not None and self.popup_content.is_loading:
            self.popup_content = None

    def set_groups(self, groups: Iterable[RunnerGroup]) -> None:
        self.groups.set_items(groups)
        self.toggle_loading()
        self.stage = _Stage.SELECT_GROUP

    def set_group_repos(self, repos: Iterable[ApiRepository]) -> None:
        self.toggle_loading()
        self.dynamic_list.set_items(repos)
        self.stage = _Stage.LIST_REPOS

    def selected(self) -> Optional[RunnerGroup]:
        return self.groups.selected()

    def _require_group(self) -> RunnerGroup:
        group = self.selected()
        if group is None:
            raise LookupError("No runner group selected")
        return group

    def _drain_input(self) -> str:
        text, self.input_buffer = self.input_buffer, ""
        return text

    def _input_popup(self, title: str) -> PopupInfo:
        return PopupInfo.dynamic(title, lambda: f"{self.input_buffer}_")

    def _add_repo(self) -> None:
        self.popup_content = PopupInfo.loading()
        repo_name = self._drain_input()
        group = self._require_group()
        self.sender.put_nowait(AddRepoToGroup(repo_name, group.id))
        self.stage = _Stage.SELECT_GROUP

    def _get_repos(self) -> None:
        group = self._require_group()
        self.sender.put_nowait(GetGroupRepos(group.id))

    def _create_runner_group(self) -> None:
        group = ApiRunnerGroupCreate(
            name=self._drain_input(),
            visibility=RunnerGroupVisibility.SELECTED,
            selected_repository_ids=[],
            runners=[],
        )
        self.sender.put_nowait(CreateRunnerGroup(group))
        self.stage = _Stage.SELECT_GROUP

    def render(self, width: int, height: int) -> List[str]:
        """Draw the tab as ``height`` lines of ``width`` characters."""
        if self.stage is _Stage.SELECT_GROUP:
            lines = self.groups.render(width, height, "Runner Groups")
        elif self.stage in (_Stage.SELECT_OPERATION, _Stage.ADD_REPO):
            group = self._require_group()
            lines = self.operations.render(
                width, height, f"Select operation - {group.name}"
            )
        elif self.stage is _Stage.LIST_REPOS:
            group = self._require_group()
            lines = self.dynamic_list.render(
                width, height, f"Repos with access to group - {group.name}"
            )
        else:
            lines = [" " * max(width, 0) for _ in range(max(height, 0))]
        return overlay_popup(self.popup_content, lines, width)

    def _confirm_operation(self) -> None:
        operation = self.operations.selected()
        if operation is GroupOperation.ADD_REPO:
            self.popup_content = self._input_popup("Input repo name:")
            self.stage = _Stage.ADD_REPO
        elif operation is GroupOperation.CREATE_GROUP:
            self.popup_content = self._input_popup("Input group name:")
            self.stage = _Stage.CREATE_GROUP
        elif operation is GroupOperation.GET_REPOS:
            self._get_repos()

    def _handle_text_entry(self, event: KeyEvent, submit) -> None:
        code = event.code
        if code is KeyCode.ENTER:
            submit()
        elif code is KeyCode.ESC:
            self.popup_content = None
            self.stage = _Stage.SELECT_OPERATION
        elif code is KeyCode.CHAR:
            self.input_buffer += event.char
        elif code is KeyCode.BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]

    def handle_input(self, event: KeyEvent) -> bool:
        """Apply a key press; return ``True`` when the application should exit."""
        code = event.code
        if code is KeyCode.ESC and self.popup_content is None:
            return True

        if self.stage is _Stage.SELECT_GROUP:
            if code is KeyCode.LEFT:
                self.groups.select_none()
            elif code is KeyCode.DOWN:
                self.groups.select_next()
            elif code is KeyCode.UP:
                self.groups.select_previous()
            elif code is KeyCode.HOME:
                self.groups.select_first()
            elif code is KeyCode.END:
                self.groups.select_last()
            elif code in (KeyCode.RIGHT, KeyCode.ENTER):
                self.stage = _Stage.SELECT_OPERATION
            elif code is KeyCode.BACKSPACE:
                self.groups.remove_last_input()
            elif code is KeyCode.CHAR:
                self.groups.update_filter(event.char)
        elif self.stage is _Stage.SELECT_OPERATION:
            if code is KeyCode.UP:
                self.operations.select_previous()
            elif code is KeyCode.DOWN:
                self.operations.select_next()
            elif code is KeyCode.LEFT:
                self.stage = _Stage.SELECT_GROUP
            elif code is KeyCode.CHAR:
                if self.popup_content is not None:
                    self.input_buffer += event.char
            elif code is KeyCode.BACKSPACE:
                self.input_buffer = self.input_buffer[:-1]
            elif code in (KeyCode.RIGHT, KeyCode.ENTER):
                self._confirm_operation()
        elif self.stage is _Stage.ADD_REPO:
            self._handle_text_entry(event, self._add_repo)
        elif self.stage is _Stage.LIST_REPOS:
            if code is KeyCode.LEFT:
                self.stage = _Stage.SELECT_OPERATION
        else:
            self._handle_text_entry(event, self._create_runner_group)
        return False