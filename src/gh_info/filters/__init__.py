"""필드 선택 모듈."""

from gh_info.filters.fields import ALL_FIELDS, select_fields

__all__ = ["ALL_FIELDS", "select_fields"]
