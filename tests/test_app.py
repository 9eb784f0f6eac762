import queue

import pytest
from blessed.keyboard import Keystroke

from runnerdeck.api import ApiRepository, RunnerGroupVisibility
from runnerdeck.app import FOOTER_TEXT, AppState, Tab, main, translate_key
from runnerdeck.backend import AddLabel, Done, GroupRepos, RunnerGroupList, RunnerList
from runnerdeck.models import Runner, RunnerGroup, RunnerStatus
from runnerdeck.widgets import KeyCode, KeyEvent, PopupInfo


def make_runner(runner_id=1, name="alpha"):
    return Runner(
        id=runner_id, status=RunnerStatus.ONLINE, name=name, labels=["gpu"], group="ci"
    )


def make_group(group_id=5, name="ci"):
    return RunnerGroup(id=group_id, name=name, visibility=RunnerGroupVisibility.SELECTED)


@pytest.fixture
def channels():
    return queue.Queue(), queue.Queue()


@pytest.fixture
def app(channels):
    sender, receiver = channels
    return AppState([make_runner()], [make_group()], Tab.RUNNERS, sender, receiver)


def test_tab_titles():
    assert Tab.RUNNERS.title() == " Runners "
    assert Tab.RUNNER_GROUPS.title() == " Runner Groups "


def test_tab_key_switches_tabs(app):
    app.handle_key(KeyEvent(KeyCode.TAB))
    assert app.selected_tab is Tab.RUNNER_GROUPS
    app.handle_key(KeyEvent(KeyCode.TAB))
    assert app.selected_tab is Tab.RUNNERS


def test_released_key_is_ignored(app):
    app.handle_key(KeyEvent(KeyCode.TAB, pressed=False))
    assert app.selected_tab is Tab.RUNNERS


def test_escape_requests_exit(app):
    app.handle_key(KeyEvent(KeyCode.ESC))
    assert app.should_exit is True


def test_add_label_flow_sends_request(app, channels):
    sender, _ = channels
    app.handle_key(KeyEvent(KeyCode.ENTER))
    app.handle_key(KeyEvent(KeyCode.ENTER))
    for char in "xl":
        app.handle_key(KeyEvent(KeyCode.CHAR, char))
    app.handle_key(KeyEvent(KeyCode.ENTER))
    assert sender.get_nowait() == AddLabel(1, "xl")
    assert app.should_exit is False


def test_runner_list_switches_to_runners_tab(app):
    app.selected_tab = Tab.RUNNER_GROUPS
    fresh = [make_runner(2, "beta"), make_runner(3, "gamma")]
    app.apply_message(RunnerList(fresh))
    assert app.selected_tab is Tab.RUNNERS
    assert app.runners_tab.runners.filtered_items() == fresh


def test_group_list_replaces_groups(app):
    groups = [make_group(7, "linux"), make_group(8, "mac")]
    app.apply_message(RunnerGroupList(groups))
    assert app.groups_tab.groups.filtered_items() == groups
    assert app.selected_tab is Tab.RUNNERS


def test_group_repos_fill_repo_list(app):
    repos = [ApiRepository(id=11, name="site")]
    app.apply_message(GroupRepos(repos))
    assert app.groups_tab.dynamic_list.items == repos


def test_done_clears_loading_popup(app):
    app.groups_tab.popup_content = PopupInfo.loading()
    app.apply_message(Done())
    assert app.groups_tab.popup_content is None


def test_unknown_message_raises(app):
    with pytest.raises(TypeError):
        app.apply_message("nonsense")


def test_poll_messages_applies_one_at_a_time(app, channels):
    _, receiver = channels
    assert app.poll_messages() is False
    receiver.put(RunnerList([make_runner(2, "beta")]))
    receiver.put(RunnerList([make_runner(3, "gamma")]))
    assert app.poll_messages() is True
    assert [r.name for r in app.runners_tab.runners.filtered_items()] == ["beta"]
    assert receiver.qsize() == 1


def test_render_shape_and_frame(app):
    lines = app.render(100, 12)
    assert len(lines) == 12
    assert all(len(line) == 100 for line in lines)
    assert lines[0].startswith(" Runners   Runner Groups ")
    assert lines[-1].strip() == FOOTER_TEXT
    assert any("alpha" in line for line in lines[1:-1])


def test_render_empty_area(app):
    assert app.render(0, 5) == []


def test_translate_plain_character():
    assert translate_key(Keystroke("a")) == KeyEvent(KeyCode.CHAR, "a")


@pytest.mark.parametrize(
    "name, code",
    [
        ("KEY_LEFT", KeyCode.LEFT),
        ("KEY_DOWN", KeyCode.DOWN),
        ("KEY_ENTER", KeyCode.ENTER),
        ("KEY_ESCAPE", KeyCode.ESC),
        ("KEY_BACKSPACE", KeyCode.BACKSPACE),
    ],
)
def test_translate_named_keys(name, code):
    assert translate_key(Keystroke("\x1b[X", code=1, name=name)).code is code


@pytest.mark.parametrize(
    "raw, code", [("\t", KeyCode.TAB), ("\x1b", KeyCode.ESC), ("\r", KeyCode.ENTER)]
)
def test_translate_raw_control_characters(raw, code):
    assert translate_key(Keystroke(raw)).code is code


def test_translate_timeout_gives_none():
    assert translate_key(Keystroke("")) is None


def test_main_without_token_exits(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("organization=example\n")
    with pytest.raises(SystemExit) as info:
        main(["--env-file", str(env_file)])
    assert "Could not read config file" in str(info.value)


def test_main_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit) as info:
        main(["--env-file", str(tmp_path / "absent.env")])
    assert "absent.env" in str(info.value)