"""Background worker that carries out API requests on behalf of the interface."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import httpx

from runnerdeck.api import ApiRepository, ApiRunnerGroupCreate, Client
from runnerdeck.config import Config
from runnerdeck.models import Runner, RunnerGroup

log = logging.getLogger(__name__)

API_ROOT = "https://api.github.com/orgs/{organization}/"


# Requests sent from the interface to the worker.


@dataclass(frozen=True)
class FetchRunners:
    """Ask for the full list of runners."""


@dataclass(frozen=True)
class FetchGroups:
    """Ask for the list of runner groups."""


@dataclass(frozen=True)
class AddLabel:
    runner_id: int
    label: str


@dataclass(frozen=True)
class DeleteLabel:
    runner_id: int
    label: str


@dataclass(frozen=True)
class ChangeGroup:
    runner_id: int
    group_name: str


@dataclass(frozen=True)
class AddRepoToGroup:
    repo_name: str
    group_id: int


@dataclass(frozen=True)
class GetGroupRepos:
    group_id: int


@dataclass(frozen=True)
class CreateRunnerGroup:
    runner_group: ApiRunnerGroupCreate


BackendMessage = Union[
    FetchRunners,
    FetchGroups,
    AddLabel,
    DeleteLabel,
    ChangeGroup,
    AddRepoToGroup,
    GetGroupRepos,
    CreateRunnerGroup,
]


# Replies sent from the worker back to the interface.


@dataclass(frozen=True)
class Done:
    """An operation without a payload finished."""


@dataclass(frozen=True)
class RunnerList:
    runners: List[Runner]


@dataclass(frozen=True)
class RunnerGroupList:
    groups: List[RunnerGroup]


@dataclass(frozen=True)
class GroupRepos:
    repos: List[ApiRepository]


ApiMessage = Union[Done, RunnerList, RunnerGroupList, GroupRepos]


def build_client(
    config: Config, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Client:
    """Create an API client for the organisation named in ``config``."""
    headers = {
        "User-Agent": "curl",
        "Authorization": f"Bearer {config.token}",
    }
    return Client(
        API_ROOT.format(organization=config.organization), headers, transport
    )


class Worker:
    """Reads requests from ``inbox`` and posts replies to ``outbox``.

    ``inbox`` may be an :class:`asyncio.Queue` or a thread-safe
    :class:`queue.Queue`; a ``None`` item stops :meth:`run`. ``outbox`` needs
    only a ``put_nowait`` method.
    """

    def __init__(
        self,
        inbox: Any,
        outbox: Any,
        config: Config,
        client: Optional[Client] = None,
    ) -> None:
        self.inbox = inbox
        self.outbox = outbox
        self.config = config
        self.client = client if client is not None else build_client(config)

    def _send(self, message: ApiMessage) -> None:
        self.outbox.put_nowait(message)

    async def _receive(self) -> Optional[BackendMessage]:
        if isinstance(self.inbox, asyncio.Queue):
            return await self.inbox.get()
        return await asyncio.to_thread(self.inbox.get)

    async def get_runner_groups(self) -> List[RunnerGroup]:
        response = await self.client.runner_groups().get_all(False)
        return [RunnerGroup.from_api(group) for group in response.runner_groups]

    async def get_runners(self, skip_cache: Optional[bool] = None) -> List[Runner]:
        """Fetch runners of every group; also posts the group list to ``outbox``."""
        dirty = bool(skip_cache)
        endpoint = self.client.runner_groups()
        response = await endpoint.get_all(dirty)
        api_groups = response.runner_groups
        self._send(RunnerGroupList([RunnerGroup.from_api(g) for g in api_groups]))

        async def runners_of(group_id: int, group_name: str) -> List[Runner]:
            fetched = await self.client.runner_groups().get_runners(group_id, dirty)
            runners = []
            for api_runner in fetched.runners:
                runner = Runner.from_api(api_runner)
                runner.group = group_name
                runners.append(runner)
            return runners

        batches = await asyncio.gather(
            *(runners_of(group.id, group.name) for group in api_groups)
        )
        runners = [runner for batch in batches for runner in batch]
        log.debug("Fetched runners %r", runners)
        return runners

    async def refresh_runners(self) -> None:
        runners = await self.get_runners(True)
        self._send(RunnerList(runners))

    async def handle(self, message: BackendMessage) -> None:
        """Carry out one request and post its reply."""
        match message:
            case FetchGroups():
                self._send(RunnerGroupList(await self.get_runner_groups()))
            case FetchRunners():
                self._send(RunnerList(await self.get_runners(None)))
            case AddLabel(runner_id, label):
                log.debug("Updating label: %s for runner: %s", label, runner_id)
                await self.client.runners().add_label(runner_id, [label])
                await self.refresh_runners()
            case DeleteLabel(runner_id, label):
                log.debug("Removing label: %s for runner %s", label, runner_id)
                await self.client.runners().remove_label(runner_id, label)
                await self.refresh_runners()
            case ChangeGroup(runner_id, group_name):
                log.debug("Changing group of runner %s to group %s", runner_id, group_name)
                response = await self.client.runner_groups().get_all(False)
                group = next(
                    (g for g in response.runner_groups if g.name == group_name), None
                )
                if group is None:
                    raise LookupError(f"No runner group named {group_name!r}")
                await self.client.runner_groups().add_runner_to_group(runner_id, group.id)
                await self.refresh_runners()
            case AddRepoToGroup(repo_name, group_id):
                log.debug("Adding repo %s to group id %s", repo_name, group_id)
                repo = await self.client.repos().get_repo(
                    self.config.organization, repo_name
                )
                await self.client.runner_groups().add_repo_access(group_id, repo.id)
                self._send(Done())
            case CreateRunnerGroup(runner_group):
                log.debug("Creating runner group %r", runner_group)
                await self.client.runner_groups().create_runner_group(runner_group)
                await self.refresh_runners()
            case GetGroupRepos(group_id):
                log.debug("Getting group repos %s", group_id)
                result = await self.client.runner_groups().get_group_repos(group_id)
                log.debug("Fetched repos %r", result.repositories)
                self._send(GroupRepos(result.repositories))
            case _:
                raise TypeError(f"Unknown backend message: {message!r}")

    async def run(self) -> None:
        """Handle requests until a ``None`` item arrives."""
        while True:
            message = await self._receive()
            if message is None:
                return
            await self.handle(message)