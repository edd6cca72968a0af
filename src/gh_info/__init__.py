"""GitHub 저장소 정보 수집 서비스."""

__version__ = "0.1.0"
