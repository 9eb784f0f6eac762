"""Domain objects shown in the user interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from runnerdeck.api import ApiRunner, ApiRunnerGroup, RunnerGroupVisibility


class RunnerStatus(Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    BUSY = "busy"

    @classmethod
    def parse(cls, text: str) -> "RunnerStatus":
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown runner status: {text}") from None

    def __str__(self) -> str:
        return self.value


@dataclass
class Runner:
    id: int
    status: RunnerStatus
    name: str
    labels: List[str] = field(default_factory=list)
    group: Optional[str] = None

    @classmethod
    def from_api(cls, runner: ApiRunner) -> "Runner":
        status = RunnerStatus.BUSY if runner.busy else RunnerStatus.parse(runner.status)
        labels = [label.name for label in runner.labels if label.label_type == "custom"]
        return cls(id=runner.id, status=status, name=runner.name, labels=labels)

    def __str__(self) -> str:
        group = self.group if self.group is not None else "default"
        return f"{self.name} [{self.status}] ({group}) | {' | '.join(self.labels)}"


@dataclass
class RunnerGroup:
    id: int
    name: str
    visibility: RunnerGroupVisibility

    @classmethod
    def from_api(cls, group: ApiRunnerGroup) -> "RunnerGroup":
        return cls(id=group.id, name=group.name, visibility=group.visibility)

    def __str__(self) -> str:
        return f"{self.name} ID: {self.id}"


class RunnerOperation(Enum):
    ADD_LABEL = "Add label"
    REMOVE_LABEL = "Remove label"
    CHANGE_GROUP = "Change group"

    def __str__(self) -> str:
        return self.value


class GroupOperation(Enum):
    CREATE_GROUP = "Create group"
    GET_REPOS = "Get repos accesses"
    ADD_REPO = "Add repo"

    def __str__(self) -> str:
        return self.value