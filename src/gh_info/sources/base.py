"""소스 프로토콜 정의."""

from typing import Protocol

from gh_info.models import LatestReleaseSummary, Release, RepoInfo


class Source(Protocol):
    """저장소 정보 소스 프로토콜.

    각 메서드는 실패 시 UpstreamError를 던진다. 재시도는 하지 않는다.
    """

    async def fetch_repo_info(self, owner: str, name: str) -> RepoInfo:
        """저장소 기본 정보를 가져온다."""
        ...

    async def fetch_releases(self, owner: str, name: str) -> list[Release]:
        """릴리스 목록을 가져온다 (업스트림 순서 그대로)."""
        ...

    async def fetch_latest_release(
        self, owner: str, name: str
    ) -> LatestReleaseSummary:
        """최신 릴리스를 가져온다."""
        ...
