import pytest

from runnerdeck.api import ApiLabel, ApiRunner, ApiRunnerGroup, RunnerGroupVisibility
from runnerdeck.models import (
    GroupOperation,
    Runner,
    RunnerGroup,
    RunnerOperation,
    RunnerStatus,
)


def make_api_runner(status="online", busy=False):
    return ApiRunner(
        id=11,
        name="build-1",
        os="linux",
        status=status,
        busy=busy,
        ephemeral=None,
        labels=[
            ApiLabel(id=1, name="self-hosted", label_type="read-only"),
            ApiLabel(id=2, name="gpu", label_type="custom"),
            ApiLabel(id=3, name="large", label_type="custom"),
        ],
    )


@pytest.mark.parametrize("text", ["online", "offline", "busy"])
def test_status_parse_round_trip(text):
    assert str(RunnerStatus.parse(text)) == text


def test_status_parse_unknown():
    with pytest.raises(ValueError, match="Unknown runner status: idle"):
        RunnerStatus.parse("idle")


def test_runner_str_with_group():
    runner = Runner(1, RunnerStatus.ONLINE, "build-1", ["gpu", "linux"], "ci")
    assert str(runner) == "build-1 [online] (ci) | gpu | linux"


def test_runner_str_without_group_uses_default():
    runner = Runner(1, RunnerStatus.OFFLINE, "build-1", ["gpu"])
    assert "(default)" in str(runner)
    assert str(runner).startswith("build-1 [offline]")


def test_runner_from_api_keeps_only_custom_labels():
    runner = Runner.from_api(make_api_runner())
    assert runner.labels == ["gpu", "large"]
    assert runner.status is RunnerStatus.ONLINE
    assert runner.group is None
    assert runner.id == 11


def test_runner_from_api_busy_overrides_status():
    runner = Runner.from_api(make_api_runner(status="online", busy=True))
    assert runner.status is RunnerStatus.BUSY


def test_runner_from_api_unknown_status_raises():
    with pytest.raises(ValueError):
        Runner.from_api(make_api_runner(status="weird"))


def test_runner_group_from_api_and_str():
    api_group = ApiRunnerGroup(
        id=7,
        name="ci",
        visibility=RunnerGroupVisibility.ALL,
        default=False,
        selected_repositories_url=None,
        runners_url="https://api.example.com/groups/7/runners",
        inherited=False,
        allows_public_repositories=False,
        restricted_to_workflows=False,
        selected_workflows=[],
        workflow_restrictions_read_only=False,
    )
    group = RunnerGroup.from_api(api_group)
    assert group == RunnerGroup(7, "ci", RunnerGroupVisibility.ALL)
    assert str(group) == "ci ID: 7"


def test_runner_operations_order_and_text():
    operations = list(RunnerOperation)
    texts = [RunnerOperation.__str__(op) for op in operations]
    assert texts == [
        "Add label",
        "Remove label",
        "Change group",
    ]


def test_group_operations_order_and_text():
    operations = list(GroupOperation)
    texts = [GroupOperation.__str__(op) for op in operations]
    assert texts == [
        "Create group",
        "Get repos accesses",
        "Add repo",
    ]