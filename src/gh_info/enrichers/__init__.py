"""저장소 리소스 수집 모듈."""

from gh_info.enrichers.repository import RepositoryResolver, build_outcome

__all__ = ["RepositoryResolver", "build_outcome"]
