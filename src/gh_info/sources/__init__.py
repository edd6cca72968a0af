"""데이터 소스 모듈."""

from gh_info.sources.base import Source
from gh_info.sources.github import GitHubSource

__all__ = ["GitHubSource", "Source"]
