"""예외 정의."""


class GhInfoError(Exception):
    """gh-info 기본 예외."""


class InvalidFormatError(GhInfoError):
    """저장소 식별자가 'owner/repo' 형식이 아닐 때 발생한다."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"repository format invalid, expected 'owner/repo': {raw!r}")


class UpstreamError(GhInfoError):
    """GitHub API 호출이 실패했을 때 발생한다.

    네트워크 오류이면 status는 None이다.
    """

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        """업스트림이 404를 반환했는지 확인한다."""
        return self.status == 404


class BadRequestError(GhInfoError):
    """요청 본문이 잘못되었을 때 발생한다."""
