import queue

import pytest

from runnerdeck.api import ApiRepository, ApiRunnerGroupCreate, RunnerGroupVisibility
from runnerdeck.backend import AddRepoToGroup, CreateRunnerGroup, GetGroupRepos
from runnerdeck.groups_tab import GroupsTab
from runnerdeck.models import RunnerGroup
from runnerdeck.widgets import KeyCode, KeyEvent

WIDTH = 48
HEIGHT = 9


def key(code, char=""):
    return KeyEvent(code, char)


def press(tab, *codes):
    return [tab.handle_input(key(code)) for code in codes]


def type_text(tab, text):
    for ch in text:
        tab.handle_input(key(KeyCode.CHAR, ch))


@pytest.fixture
def groups():
    return [
        RunnerGroup(id=5, name="build", visibility=RunnerGroupVisibility.SELECTED),
        RunnerGroup(id=7, name="deploy", visibility=RunnerGroupVisibility.ALL),
    ]


@pytest.fixture
def sender():
    return queue.Queue()


@pytest.fixture
def tab(groups, sender):
    return GroupsTab(groups, sender)


def test_escape_at_start_requests_exit(tab):
    assert tab.handle_input(key(KeyCode.ESC)) is True


def test_group_list_render(tab, groups):
    lines = tab.render(WIDTH, HEIGHT)
    assert len(lines) == HEIGHT
    assert lines[0].strip() == "Runner Groups"
    assert any(str(groups[0]) in line for line in lines)


def test_filter_and_navigation(tab, groups):
    press(tab, KeyCode.END)
    assert tab.selected() == groups[1]
    press(tab, KeyCode.HOME)
    assert tab.selected() == groups[0]
    type_text(tab, "dep")
    assert tab.groups.filtered_items() == [groups[1]]
    assert tab.selected() == groups[1]


def test_create_group_flow(tab, sender):
    press(tab, KeyCode.RIGHT)
    assert tab.render(WIDTH, HEIGHT)[0].strip() == "Select operation - build"
    press(tab, KeyCode.ENTER)
    lines = tab.render(WIDTH, HEIGHT)
    assert any("Input group name:" in line for line in lines)
    type_text(tab, "newer")
    press(tab, KeyCode.BACKSPACE)
    assert tab.popup_content.text() == "newe_"
    press(tab, KeyCode.ENTER)
    message = sender.get_nowait()
    assert message == CreateRunnerGroup(ApiRunnerGroupCreate(name="newe"))
    assert message.runner_group.visibility is RunnerGroupVisibility.SELECTED
    assert tab.input_buffer == ""


def test_get_repos_flow(tab, sender):
    press(tab, KeyCode.RIGHT, KeyCode.DOWN, KeyCode.ENTER)
    assert sender.get_nowait() == GetGroupRepos(5)
    tab.set_group_repos([ApiRepository(id=1, name="service")])
    lines = tab.render(WIDTH, HEIGHT)
    assert lines[0].strip() == "Repos with access to group - build"
    assert any("service" in line for line in lines)
    press(tab, KeyCode.LEFT)
    assert tab.render(WIDTH, HEIGHT)[0].strip() == "Select operation - build"


def test_add_repo_flow(tab, sender, groups):
    press(tab, KeyCode.RIGHT, KeyCode.DOWN, KeyCode.DOWN, KeyCode.ENTER)
    assert tab.popup_content.title == "Input repo name:"
    type_text(tab, "svc")
    press(tab, KeyCode.ENTER)
    assert sender.get_nowait() == AddRepoToGroup("svc", 5)
    assert tab.popup_content.is_loading
    assert tab.render(WIDTH, HEIGHT)[0].strip() == "Runner Groups"
    tab.toggle_loading()
    assert tab.popup_content is None


def test_escape_in_add_repo_closes_popup(tab, sender):
    press(tab, KeyCode.RIGHT, KeyCode.DOWN, KeyCode.DOWN, KeyCode.ENTER)
    assert press(tab, KeyCode.ESC) == [False]
    assert tab.popup_content is None
    assert tab.render(WIDTH, HEIGHT)[0].strip() == "Select operation - build"
    assert press(tab, KeyCode.ESC) == [True]
    assert sender.empty()


def test_set_groups_replaces_items_and_resets_stage(tab, groups):
    press(tab, KeyCode.RIGHT)
    replacement = [RunnerGroup(id=9, name="nightly", visibility=RunnerGroupVisibility.ALL)]
    tab.set_groups(replacement)
    assert tab.groups.filtered_items() == replacement
    assert tab.selected() == replacement[0]
    assert tab.render(WIDTH, HEIGHT)[0].strip() == "Runner Groups"


def test_set_group_repos_clears_loading_popup(tab):
    press(tab, KeyCode.RIGHT, KeyCode.DOWN, KeyCode.DOWN, KeyCode.ENTER)
    type_text(tab, "svc")
    press(tab, KeyCode.ENTER)
    tab.set_group_repos([])
    assert tab.popup_content is None
    assert tab.dynamic_list.selected() is None


def test_create_group_stage_renders_blank_under_popup(tab):
    press(tab, KeyCode.RIGHT, KeyCode.ENTER)
    lines = tab.render(WIDTH, HEIGHT)
    assert len(lines) == HEIGHT
    assert lines[0].strip() == ""
    assert any("_" in line for line in lines)


def test_operation_without_selected_group_raises(tab, sender):
    press(tab, KeyCode.LEFT, KeyCode.RIGHT, KeyCode.DOWN)
    with pytest.raises(LookupError):
        press(tab, KeyCode.ENTER)
    assert sender.empty()