"""공용 테스트 픽스처."""

import asyncio
from typing import Any

import httpx
import pytest

from gh_info.errors import UpstreamError
from gh_info.models import LatestReleaseSummary, Release, RepoInfo, ResourceKind


class FakeClock:
    """수동으로 진행하는 시계."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """Source 프로토콜을 따르는 테스트용 소스.

    호출마다 0부터 증가하는 번호를 매기고, 만들어진 RepoInfo의
    stargazers_count에 그 번호를 넣는다.
    """

    def __init__(self) -> None:
        self.failures: set[tuple[ResourceKind, str]] = set()
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[ResourceKind, str]] = []

    async def _call(self, kind: ResourceKind, owner: str, name: str) -> int:
        repo = f"{owner}/{name}"
        index = len(self.calls)
        self.calls.append((kind, repo))
        await asyncio.sleep(self.delays.get(repo, 0))
        if (kind, repo) in self.failures:
            raise UpstreamError(404, "GitHub API returned status 404")
        return index

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        index = await self._call(ResourceKind.repo_info, owner, name)
        return RepoInfo(
            repo=f"{owner}/{name}",
            name=name,
            full_name=f"{owner}/{name}",
            html_url=f"https://github.com/{owner}/{name}",
            stargazers_count=index,
            updated_at="2024-01-01T00:00:00Z",
        )

    async def fetch_releases(self, owner: str, name: str) -> list[Release]:
        await self._call(ResourceKind.releases, owner, name)
        return [Release(tag_name="v2.0.0"), Release(tag_name="v1.0.0")]

    async def fetch_latest_release(
        self, owner: str, name: str
    ) -> LatestReleaseSummary:
        await self._call(ResourceKind.latest_release, owner, name)
        return LatestReleaseSummary(repo=f"{owner}/{name}", latest_version="v2.0.0")


def repo_payload(owner: str, name: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "id": 1,
        "name": name,
        "full_name": f"{owner}/{name}",
        "html_url": f"https://github.com/{owner}/{name}",
        "description": "Test repo",
        "stargazers_count": 100,
        "forks_count": 50,
        "updated_at": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def release_payload(tag: str) -> dict[str, Any]:
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "body": f"Changelog for {tag}",
        "published_at": "2024-01-01T00:00:00Z",
        "prerelease": False,
        "assets": [
            {
                "name": f"app-{tag}.zip",
                "browser_download_url": f"https://example.com/app-{tag}.zip",
            }
        ],
    }


class MockGitHub:
    """httpx.MockTransport 기반 가짜 GitHub API.

    등록되지 않은 경로는 404를 반환한다.
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any] | Exception] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if isinstance(route, Exception):
            raise route
        status, body = route
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def calls(self, path: str) -> int:
        """해당 경로로 들어온 요청 수."""
        return sum(1 for request in self.requests if request.url.path == path)

    def add_repo(self, owner: str, name: str, **overrides: Any) -> None:
        self.routes[f"/repos/{owner}/{name}"] = (
            200,
            repo_payload(owner, name, **overrides),
        )

    def add_releases(self, owner: str, name: str, tags: list[str]) -> None:
        self.routes[f"/repos/{owner}/{name}/releases"] = (
            200,
            [release_payload(tag) for tag in tags],
        )

    def add_latest(self, owner: str, name: str, tag: str) -> None:
        self.routes[f"/repos/{owner}/{name}/releases/latest"] = (
            200,
            release_payload(tag),
        )

    def add_error(self, path: str, status: int, body: Any = None) -> None:
        self.routes[path] = (status, body if body is not None else {"message": "error"})


@pytest.fixture
def clock() -> FakeClock:
    """FakeClock 인스턴스를 반환한다."""
    return FakeClock()


@pytest.fixture
def fake_source() -> FakeSource:
    """FakeSource 인스턴스를 반환한다."""
    return FakeSource()


@pytest.fixture
def mock_github() -> MockGitHub:
    """MockGitHub 인스턴스를 반환한다."""
    return MockGitHub()
