"""저장소 resolver 테스트."""

import pytest

from gh_info.enrichers import RepositoryResolver, build_outcome
from gh_info.enrichers.repository import INVALID_FORMAT_MESSAGE
from gh_info.errors import UpstreamError
from gh_info.filters import ALL_FIELDS
from gh_info.models import LatestReleaseSummary, Release, RepoInfo, ResourceKind

REPO_INFO = RepoInfo(
    repo="owner/repo",
    name="repo",
    full_name="owner/repo",
    html_url="https://github.com/owner/repo",
    updated_at="2024-01-01T00:00:00Z",
)
RELEASES = [Release(tag_name="v1.0.0")]
LATEST = LatestReleaseSummary(repo="owner/repo", latest_version="v1.0.0")


class TestBuildOutcome:
    """build_outcome 테스트 (I/O 없음)."""

    def test_all_succeeded(self) -> None:
        outcome = build_outcome(
            "owner/repo",
            {
                ResourceKind.repo_info: REPO_INFO,
                ResourceKind.releases: RELEASES,
                ResourceKind.latest_release: LATEST,
            },
        )
        assert outcome.success
        assert outcome.error is None
        assert outcome.repo_info == REPO_INFO
        assert outcome.releases == RELEASES
        assert outcome.latest_release == LATEST

    def test_only_requested_fields_populated(self) -> None:
        """요청하지 않은 리소스는 비어 있다."""
        outcome = build_outcome("owner/repo", {ResourceKind.latest_release: LATEST})
        assert outcome.success
        assert outcome.repo_info is None
        assert outcome.releases is None
        assert outcome.latest_release == LATEST

    def test_partial_failure_keeps_successful_data(self) -> None:
        """일부 실패 시 성공한 리소스는 그대로 남는다."""
        outcome = build_outcome(
            "owner/repo",
            {
                ResourceKind.repo_info: REPO_INFO,
                ResourceKind.latest_release: UpstreamError(404, "not found"),
            },
        )
        assert not outcome.success
        assert outcome.repo_info == REPO_INFO
        assert outcome.latest_release is None
        assert outcome.error == "latest release fetch failed"

    def test_error_message_in_kind_order(self) -> None:
        """오류 메시지는 리소스 정의 순서로 이어진다."""
        outcome = build_outcome(
            "owner/repo",
            {
                ResourceKind.latest_release: UpstreamError(500, "boom"),
                ResourceKind.releases: RELEASES,
                ResourceKind.repo_info: UpstreamError(None, "refused"),
            },
        )
        assert not outcome.success
        assert outcome.error == (
            "repository info fetch failed; latest release fetch failed"
        )
        assert outcome.releases == RELEASES


class TestRepositoryResolver:
    """RepositoryResolver 테스트."""

    @pytest.mark.asyncio
    async def test_invalid_identifier_skips_upstream(self, fake_source) -> None:
        """형식이 잘못된 식별자는 업스트림을 호출하지 않는다."""
        resolver = RepositoryResolver(fake_source)

        outcome = await resolver.resolve("bad-id", ALL_FIELDS)

        assert not outcome.success
        assert outcome.error == INVALID_FORMAT_MESSAGE
        assert outcome.repo_info is None
        assert outcome.releases is None
        assert outcome.latest_release is None
        assert fake_source.calls == []

    @pytest.mark.asyncio
    async def test_fetches_only_requested_kinds(self, fake_source) -> None:
        resolver = RepositoryResolver(fake_source)

        outcome = await resolver.resolve(
            "owner/repo", frozenset({ResourceKind.releases})
        )

        assert outcome.success
        assert [tag.tag_name for tag in outcome.releases] == ["v2.0.0", "v1.0.0"]
        assert fake_source.calls == [(ResourceKind.releases, "owner/repo")]

    @pytest.mark.asyncio
    async def test_partial_failure(self, fake_source) -> None:
        """repo_info 성공, latest_release 실패 시 부분 데이터가 남는다."""
        fake_source.failures.add((ResourceKind.latest_release, "owner/repo"))
        resolver = RepositoryResolver(fake_source)

        outcome = await resolver.resolve(
            "owner/repo",
            frozenset({ResourceKind.repo_info, ResourceKind.latest_release}),
        )

        assert not outcome.success
        assert outcome.repo_info is not None
        assert outcome.repo_info.full_name == "owner/repo"
        assert outcome.latest_release is None
        assert outcome.error == "latest release fetch failed"

    @pytest.mark.asyncio
    async def test_unexpected_exception_folded(self, fake_source) -> None:
        """UpstreamError가 아닌 예외도 항목 결과로 흡수된다."""

        async def broken(owner: str, name: str) -> RepoInfo:
            raise RuntimeError("unexpected")

        fake_source.fetch_repo_info = broken
        resolver = RepositoryResolver(fake_source)

        outcome = await resolver.resolve("owner/repo", ALL_FIELDS)

        assert not outcome.success
        assert outcome.error == "repository info fetch failed"
        assert outcome.releases is not None
        assert outcome.latest_release is not None
