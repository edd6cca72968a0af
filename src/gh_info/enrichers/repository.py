"""저장소 하나에 대한 리소스 수집 모듈."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

from gh_info.errors import InvalidFormatError
from gh_info.models import (
    FieldSet,
    ItemOutcome,
    RepositoryRef,
    ResourceKind,
    parse_repository,
)
from gh_info.sources.base import Source

logger = logging.getLogger(__name__)

INVALID_FORMAT_MESSAGE = "repository format invalid, expected 'owner/repo'"

FAILURE_MESSAGES: dict[ResourceKind, str] = {
    ResourceKind.repo_info: "repository info fetch failed",
    ResourceKind.releases: "releases fetch failed",
    ResourceKind.latest_release: "latest release fetch failed",
}

# 리소스별 결과: 가져온 값 또는 실패 원인 예외
FetchResults = Mapping[ResourceKind, object]


def build_outcome(repo: str, results: FetchResults) -> ItemOutcome:
    """리소스별 결과를 하나의 ItemOutcome으로 합친다.

    성공한 리소스는 실패한 리소스가 있어도 그대로 채운다. 오류 메시지는
    ResourceKind 정의 순서로 '; '로 잇는다.
    """
    data: dict[str, object] = {}
    failures: list[str] = []

    for kind in ResourceKind:
        if kind not in results:
            continue
        result = results[kind]
        if isinstance(result, Exception):
            failures.append(FAILURE_MESSAGES[kind])
        else:
            data[kind.value] = result

    return ItemOutcome(
        repo=repo,
        success=not failures,
        error="; ".join(failures) if failures else None,
        **data,
    )


def invalid_outcome(repo: str) -> ItemOutcome:
    """식별자 형식이 잘못된 항목의 결과."""
    return ItemOutcome(repo=repo, success=False, error=INVALID_FORMAT_MESSAGE)


class RepositoryResolver:
    """저장소 하나에 대해 요청된 리소스를 모두 가져온다."""

    def __init__(self, source: Source) -> None:
        """
        Args:
            source: 저장소 정보 소스
        """
        self.source = source

    def _fetcher(
        self, kind: ResourceKind
    ) -> Callable[[str, str], Awaitable[object]]:
        return {
            ResourceKind.repo_info: self.source.fetch_repo_info,
            ResourceKind.releases: self.source.fetch_releases,
            ResourceKind.latest_release: self.source.fetch_latest_release,
        }[kind]

    async def fetch_all(
        self, ref: RepositoryRef, fields: FieldSet
    ) -> dict[ResourceKind, object]:
        """요청된 리소스를 병렬로 가져온다. 실패는 예외 객체로 담아 반환한다."""
        kinds = [kind for kind in ResourceKind if kind in fields]
        tasks = [self._fetcher(kind)(ref.owner, ref.name) for kind in kinds]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for kind, result in zip(kinds, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    f"Failed to fetch {kind.value} for {ref.display}: {result}"
                )
            elif isinstance(result, BaseException):
                raise result
        return dict(zip(kinds, results, strict=True))

    async def resolve(self, raw: str, fields: FieldSet) -> ItemOutcome:
        """저장소 문자열 하나를 처리한다. 예외를 던지지 않고 항상 결과를 반환한다."""
        try:
            ref = parse_repository(raw)
        except InvalidFormatError:
            logger.info(f"Invalid repository identifier: {raw!r}")
            return invalid_outcome(raw)

        results = await self.fetch_all(ref, fields)
        return build_outcome(raw, results)
