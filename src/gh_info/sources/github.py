"""GitHub REST API 소스."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from gh_info.errors import UpstreamError
from gh_info.models import (
    Attachment,
    LatestReleaseSummary,
    Release,
    RepoInfo,
    ResourceKind,
)
from gh_info.storage import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "gh-info"


class _GitHubRepo(BaseModel):
    """GitHub 저장소 응답 스키마."""

    name: str
    full_name: str
    html_url: str
    description: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: str


class _GitHubAsset(BaseModel):
    """GitHub 릴리스 첨부 파일 스키마."""

    name: str
    download_url: str = Field(alias="browser_download_url")


class _GitHubRelease(BaseModel):
    """GitHub 릴리스 응답 스키마."""

    tag_name: str
    name: str | None = None
    body: str | None = None
    published_at: str | None = None
    assets: list[_GitHubAsset] = Field(default_factory=list)

    def attachments(self) -> list[Attachment]:
        return [(asset.name, asset.download_url) for asset in self.assets]


_RELEASE_LIST = TypeAdapter(list[_GitHubRelease])


class GitHubSource:
    """GitHub REST API에서 저장소 정보를 가져온다.

    cache가 주어지면 (리소스 종류, owner, name) 키로 결과를 캐시한다.
    실패한 호출은 캐시하지 않는다.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        cache: TTLCache | None = None,
        token: str | None = None,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        ttl: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            cache: 결과를 저장할 캐시. None이면 캐시를 쓰지 않는다.
            token: GitHub API 토큰. 있으면 Authorization 헤더를 보낸다.
            base_url: GitHub REST API 주소
            timeout: HTTP 요청 타임아웃 (초)
            ttl: 캐시 유효 시간 (초). None이면 캐시 기본값.
            transport: httpx 전송 계층. 테스트에서 교체한다.
        """
        self.cache = cache
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.ttl = ttl
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github.v3+json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get_json(self, path: str) -> Any:
        """GET 요청을 보내고 JSON 본문을 반환한다."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(path, headers=self._headers())
            except httpx.HTTPError as e:
                raise UpstreamError(None, f"GitHub API request failed: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                response.status_code,
                f"GitHub API returned status {response.status_code}",
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(None, "GitHub API returned malformed JSON") from e

    async def _cached(
        self,
        kind: ResourceKind,
        owner: str,
        name: str,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        """캐시를 먼저 확인하고, 없으면 loader 결과를 캐시에 넣는다."""
        if self.cache is None:
            return await loader()

        key = (kind.value, owner, name)
        return await self.cache.get_or_load(key, loader, ttl=self.ttl)

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        """저장소 기본 정보를 가져온다."""

        async def load() -> RepoInfo:
            logger.debug(f"Fetching repo info from GitHub: {owner}/{name}")
            data = await self._get_json(f"/repos/{owner}/{name}")
            try:
                repo = _GitHubRepo.model_validate(data)
            except ValidationError as e:
                raise UpstreamError(None, f"malformed repository payload: {e}") from e
            return RepoInfo(
                repo=f"{owner}/{name}",
                name=repo.name,
                full_name=repo.full_name,
                html_url=repo.html_url,
                description=repo.description,
                stargazers_count=repo.stargazers_count,
                forks_count=repo.forks_count,
                updated_at=repo.updated_at,
            )

        return await self._cached(ResourceKind.repo_info, owner, name, load)

    async def fetch_releases(self, owner: str, name: str) -> list[Release]:
        """릴리스 목록을 가져온다. 업스트림이 준 순서를 유지한다."""

        async def load() -> list[Release]:
            logger.debug(f"Fetching releases from GitHub: {owner}/{name}")
            data = await self._get_json(f"/repos/{owner}/{name}/releases")
            try:
                releases = _RELEASE_LIST.validate_python(data)
            except ValidationError as e:
                raise UpstreamError(None, f"malformed releases payload: {e}") from e
            return [
                Release(
                    tag_name=release.tag_name,
                    name=release.name,
                    changelog=release.body,
                    published_at=release.published_at,
                    attachments=release.attachments(),
                )
                for release in releases
            ]

        return await self._cached(ResourceKind.releases, owner, name, load)

    async def fetch_latest_release(
        self, owner: str, name: str
    ) -> LatestReleaseSummary:
        """GitHub의 latest 엔드포인트에서 최신 릴리스를 가져온다."""

        async def load() -> LatestReleaseSummary:
            logger.debug(f"Fetching latest release from GitHub: {owner}/{name}")
            data = await self._get_json(f"/repos/{owner}/{name}/releases/latest")
            try:
                release = _GitHubRelease.model_validate(data)
            except ValidationError as e:
                raise UpstreamError(None, f"malformed release payload: {e}") from e
            return LatestReleaseSummary(
                repo=f"{owner}/{name}",
                latest_version=release.tag_name,
                changelog=release.body,
                published_at=release.published_at,
                attachments=release.attachments(),
            )

        return await self._cached(ResourceKind.latest_release, owner, name, load)
