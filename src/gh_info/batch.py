"""배치 집계 모듈.

저장소 목록을 받아 저장소마다 RepositoryResolver를 동시에 실행하고,
결과를 입력 순서 그대로의 리스트나 저장소별 딕셔너리로 모은다.
항목 하나의 실패나 지연은 다른 항목에 영향을 주지 않는다.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence

from gh_info.enrichers import RepositoryResolver
from gh_info.errors import InvalidFormatError
from gh_info.filters import select_fields
from gh_info.models import FieldSet, ItemOutcome, parse_repository

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 16


def mapping_key(raw: str) -> str:
    """매핑 형식의 키. 형식이 잘못된 식별자는 원래 문자열을 그대로 쓴다."""
    try:
        return parse_repository(raw).display
    except InvalidFormatError:
        return raw


class BatchAggregator:
    """여러 저장소의 정보를 병렬로 수집한다."""

    def __init__(
        self,
        resolver: RepositoryResolver,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """
        Args:
            resolver: 저장소 하나를 처리하는 resolver
            max_concurrency: 동시에 처리할 최대 저장소 수
        """
        self.resolver = resolver
        self.max_concurrency = max_concurrency

    async def _resolve_all(
        self, repos: Sequence[str], fields: FieldSet
    ) -> list[ItemOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def resolve_one(raw: str) -> ItemOutcome:
            async with semaphore:
                return await self.resolver.resolve(raw, fields)

        # gather는 완료 순서와 관계없이 입력 위치에 결과를 채운다
        return list(await asyncio.gather(*(resolve_one(raw) for raw in repos)))

    async def resolve(
        self,
        repos: Sequence[str],
        fields: Iterable[str] | None = None,
    ) -> list[ItemOutcome]:
        """입력 순서를 유지한 결과 리스트를 반환한다. 중복 항목도 그대로 남는다."""
        field_set = select_fields(fields)
        if not repos:
            return []
        logger.debug(
            f"Resolving {len(repos)} repositories "
            f"({', '.join(sorted(kind.value for kind in field_set))})"
        )
        return await self._resolve_all(repos, field_set)

    async def resolve_map(
        self,
        repos: Sequence[str],
        fields: Iterable[str] | None = None,
    ) -> dict[str, ItemOutcome]:
        """'owner/name'을 키로 하는 결과 딕셔너리를 반환한다.

        같은 저장소가 여러 번 있으면 뒤에 나온 항목의 결과가 남는다.
        """
        outcomes = await self.resolve(repos, fields)
        results_map: dict[str, ItemOutcome] = {}
        for raw, outcome in zip(repos, outcomes, strict=True):
            results_map[mapping_key(raw)] = outcome
        return results_map
