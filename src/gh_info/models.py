"""데이터 모델 정의."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gh_info.errors import InvalidFormatError

# (파일 이름, 다운로드 URL)
Attachment = tuple[str, str]


class ResourceKind(str, Enum):
    """저장소 하위 리소스 종류. 정의 순서가 오류 메시지 순서다."""

    repo_info = "repo_info"
    releases = "releases"
    latest_release = "latest_release"


FieldSet = frozenset[ResourceKind]


class RepositoryRef(BaseModel):
    """'owner/name' 형식의 저장소 식별자."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1, description="저장소 소유자")
    name: str = Field(min_length=1, description="저장소 이름")

    @property
    def display(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repository(raw: str) -> RepositoryRef:
    """'owner/name' 문자열을 RepositoryRef로 변환한다.

    구분자 '/'는 정확히 하나여야 하고 양쪽 모두 비어 있으면 안 된다.

    Raises:
        InvalidFormatError: 형식이 맞지 않을 때
    """
    owner, sep, name = raw.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise InvalidFormatError(raw)
    return RepositoryRef(owner=owner, name=name)


class RepoInfo(BaseModel):
    """저장소 기본 정보."""

    model_config = ConfigDict(frozen=True)

    repo: str = Field(description="요청한 저장소 (owner/repo)")
    name: str = Field(description="저장소 이름")
    full_name: str = Field(description="저장소 전체 이름")
    html_url: str = Field(description="저장소 URL")
    description: str | None = Field(default=None, description="저장소 설명")
    stargazers_count: int = Field(default=0, description="스타 수")
    forks_count: int = Field(default=0, description="포크 수")
    updated_at: str = Field(description="마지막 갱신 시각")


class Release(BaseModel):
    """릴리스 정보."""

    model_config = ConfigDict(frozen=True)

    tag_name: str = Field(description="태그 이름")
    name: str | None = Field(default=None, description="릴리스 제목")
    changelog: str | None = Field(default=None, description="릴리스 노트")
    published_at: str | None = Field(default=None, description="게시 시각")
    attachments: list[Attachment] = Field(
        default_factory=list, description="첨부 파일 (이름, 다운로드 URL)"
    )


class LatestReleaseSummary(BaseModel):
    """최신 릴리스 요약."""

    model_config = ConfigDict(frozen=True)

    repo: str = Field(description="요청한 저장소 (owner/repo)")
    latest_version: str = Field(description="최신 버전 태그")
    changelog: str | None = Field(default=None, description="릴리스 노트")
    published_at: str | None = Field(default=None, description="게시 시각")
    attachments: list[Attachment] = Field(
        default_factory=list, description="첨부 파일 (이름, 다운로드 URL)"
    )


class ItemOutcome(BaseModel):
    """배치 요청에서 저장소 하나의 처리 결과."""

    model_config = ConfigDict(frozen=True)

    repo: str = Field(description="호출자가 보낸 저장소 문자열")
    success: bool = Field(description="요청한 리소스를 모두 가져왔는지 여부")
    error: str | None = Field(default=None, description="실패한 리소스 설명")
    repo_info: RepoInfo | None = None
    releases: list[Release] | None = None
    latest_release: LatestReleaseSummary | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON 응답용 딕셔너리. 비어 있는 최상위 필드는 생략한다."""
        data = self.model_dump(mode="json")
        return {key: value for key, value in data.items() if value is not None}


class BatchRequest(BaseModel):
    """배치 요청 본문."""

    repos: list[str] = Field(description="저장소 목록 (owner/repo)")
    fields: list[str] | None = Field(
        default=None,
        description="가져올 필드 (repo_info, releases, latest_release). 비어 있으면 전체.",
    )


class BatchResponse(BaseModel):
    """배치 응답 (입력 순서 유지)."""

    results: list[ItemOutcome] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"results": [item.to_dict() for item in self.results]}


class BatchResponseMap(BaseModel):
    """배치 응답 (저장소별 매핑)."""

    results_map: dict[str, ItemOutcome] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results_map": {
                key: item.to_dict() for key, item in self.results_map.items()
            }
        }


class HealthResponse(BaseModel):
    """헬스 체크 응답."""

    status: str = "ok"
    service: str
    version: str
