"""Asynchronous client for the organisation's self-hosted runner API."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from runnerdeck.cache import Cache

log = logging.getLogger(__name__)


class RunnerGroupVisibility(Enum):
    SELECTED = "selected"
    ALL = "all"


@dataclass
class ApiLabel:
    id: int
    name: str
    label_type: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiLabel":
        return cls(id=data["id"], name=data["name"], label_type=data["type"])


@dataclass
class ApiRunner:
    id: int
    name: str
    os: str
    status: str
    busy: bool
    ephemeral: Optional[bool]
    labels: List[ApiLabel]
    group_id: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiRunner":
        return cls(
            id=data["id"],
            name=data["name"],
            os=data["os"],
            status=data["status"],
            busy=data["busy"],
            ephemeral=data.get("ephemeral"),
            labels=[ApiLabel.from_dict(label) for label in data["labels"]],
        )


@dataclass
class RunnersResponse:
    total_count: int
    runners: List[ApiRunner]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunnersResponse":
        return cls(
            total_count=data["total_count"],
            runners=[ApiRunner.from_dict(r) for r in data["runners"]],
        )


@dataclass
class ApiRunnerGroup:
    id: int
    name: str
    visibility: RunnerGroupVisibility
    default: bool
    selected_repositories_url: Optional[str]
    runners_url: str
    inherited: bool
    allows_public_repositories: bool
    restricted_to_workflows: bool
    selected_workflows: List[str]
    workflow_restrictions_read_only: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiRunnerGroup":
        return cls(
            id=data["id"],
            name=data["name"],
            visibility=RunnerGroupVisibility(data["visibility"]),
            default=data["default"],
            selected_repositories_url=data.get("selected_repositories_url"),
            runners_url=data["runners_url"],
            inherited=data["inherited"],
            allows_public_repositories=data["allows_public_repositories"],
            restricted_to_workflows=data["restricted_to_workflows"],
            selected_workflows=list(data["selected_workflows"]),
            workflow_restrictions_read_only=data["workflow_restrictions_read_only"],
        )


@dataclass
class RunnersGroupResponse:
    total_count: int
    runner_groups: List[ApiRunnerGroup]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunnersGroupResponse":
        return cls(
            total_count=data["total_count"],
            runner_groups=[ApiRunnerGroup.from_dict(g) for g in data["runner_groups"]],
        )


@dataclass
class ApiRunnerGroupCreate:
    name: str
    visibility: RunnerGroupVisibility = RunnerGroupVisibility.SELECTED
    selected_repository_ids: List[int] = field(default_factory=list)
    runners: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "visibility": self.visibility.value,
            "selected_repository_ids": list(self.selected_repository_ids),
            "runners": list(self.runners),
        }


@dataclass
class ApiRepository:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiRepository":
        return cls(id=data["id"], name=data["name"])

    def __str__(self) -> str:
        return self.name


@dataclass
class ApiRepositoriesResponse:
    total_count: int
    repositories: List[ApiRepository]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiRepositoriesResponse":
        return cls(
            total_count=data["total_count"],
            repositories=[ApiRepository.from_dict(r) for r in data["repositories"]],
        )


class Client:
    """HTTP client rooted at an organisation's API base URL."""

    def __init__(
        self,
        api_base: str,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        parts = urlsplit(api_base)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Invalid API base URL: {api_base!r}")
        self.api_base = api_base
        self._http = httpx.AsyncClient(headers=dict(headers or {}), transport=transport)
        self._runners_cache: Cache[RunnersResponse] = Cache()
        self._groups_cache: Cache[RunnersGroupResponse] = Cache()

    def _url(self, path: str) -> str:
        return urljoin(self.api_base, path)

    async def _get_json(self, url: str) -> Any:
        log.debug("GET %s", url)
        response = await self._http.get(url)
        response.raise_for_status()
        return response.json()

    def runners(self) -> "RunnersEndpoint":
        return RunnersEndpoint(self)

    def runner_groups(self) -> "RunnerGroupsEndpoint":
        return RunnerGroupsEndpoint(self)

    def repos(self) -> "RepoEndpoint":
        return RepoEndpoint(self)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


class RepoEndpoint:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get_repo(self, org: str, repo: str) -> ApiRepository:
        url = self._client._url(f"/repos/{org}/{repo}")
        return ApiRepository.from_dict(await self._client._get_json(url))


class RunnersEndpoint:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get_all(self) -> RunnersResponse:
        url = self._client._url("actions/runners")
        return RunnersResponse.from_dict(await self._client._get_json(url))

    async def add_label(self, runner_id: int, labels: List[str]) -> None:
        url = self._client._url(f"actions/runners/{runner_id}/labels")
        log.debug("POST %s", url)
        response = await self._client._http.post(url, json={"labels": list(labels)})
        response.raise_for_status()

    async def remove_label(self, runner_id: int, label: str) -> None:
        url = self._client._url(f"actions/runners/{runner_id}/labels/{label}")
        log.debug("DELETE %s", url)
        response = await self._client._http.delete(url)
        response.raise_for_status()


class RunnerGroupsEndpoint:
    def __init__(self, client: Client) -> None:
        self._client = client

    async def get_all(self, skip_cache: bool = False) -> RunnersGroupResponse:
        url = self._client._url("actions/runner-groups")
        cache = self._client._groups_cache
        if not skip_cache:
            cached = cache.get(url)
            if cached is not None:
                log.debug("Cache hit: %s", url)
                return copy.deepcopy(cached)
        result = RunnersGroupResponse.from_dict(await self._client._get_json(url))
        cache.insert(url, copy.deepcopy(result))
        return result

    async def get_runners(self, group_id: int, skip_cache: bool = False) -> RunnersResponse:
        url = self._client._url(f"actions/runner-groups/{group_id}/runners")
        cache = self._client._runners_cache
        if not skip_cache:
            cached = cache.get(url)
            if cached is not None:
                log.debug("Cache hit: %s", url)
                return copy.deepcopy(cached)
        result = RunnersResponse.from_dict(await self._client._get_json(url))
        cache.insert(url, copy.deepcopy(result))
        return result

    async def create_runner_group(self, runner_group: ApiRunnerGroupCreate) -> ApiRunnerGroup:
        url = self._client._url("actions/runner-groups")
        log.debug("POST %s : %r", url, runner_group)
        response = await self._client._http.post(url, json=runner_group.to_dict())
        response.raise_for_status()
        return ApiRunnerGroup.from_dict(response.json())

    async def add_runner_to_group(self, runner_id: int, runner_group_id: int) -> None:
        url = self._client._url(f"actions/runner-groups/{runner_group_id}/runners/{runner_id}")
        log.debug("PUT %s", url)
        response = await self._client._http.put(url)
        response.raise_for_status()

    async def add_repo_access(self, runner_group_id: int, repo_id: int) -> None:
        url = self._client._url(
            f"actions/runner-groups/{runner_group_id}/repositories/{repo_id}"
        )
        log.debug("PUT %s", url)
        response = await self._client._http.put(url)
        response.raise_for_status()

    async def get_group_repos(self, runner_group_id: int) -> ApiRepositoriesResponse:
        url = self._client._url(f"actions/runner-groups/{runner_group_id}/repositories")
        return ApiRepositoriesResponse.from_dict(await self._client._get_json(url))