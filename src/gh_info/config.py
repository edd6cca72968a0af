"""설정 관리 모듈."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # GitHub
    github_token: str | None = Field(default=None, description="GitHub API 토큰")
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API 주소",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="HTTP 요청 타임아웃 (초)",
    )

    # 캐시
    cache_enabled: bool = Field(default=True, description="캐시 사용 여부")
    cache_ttl_seconds: float = Field(
        default=3600,
        ge=0,
        description="캐시 항목 유효 시간 (초)",
    )

    # 배치
    batch_concurrency: int = Field(
        default=16,
        ge=1,
        description="배치 요청에서 동시에 처리할 저장소 수",
    )

    # 서버
    host: str = Field(default="0.0.0.0", description="바인드 주소")
    port: int = Field(default=8080, ge=0, le=65535, description="바인드 포트")
    log_level: str = Field(default="INFO", description="로그 레벨")


settings = Settings()
