"""요청 필드 선택 모듈."""

from collections.abc import Iterable

from gh_info.models import FieldSet, ResourceKind

FIELD_NAMES: dict[str, ResourceKind] = {kind.value: kind for kind in ResourceKind}

ALL_FIELDS: FieldSet = frozenset(ResourceKind)


def select_fields(requested: Iterable[str] | None) -> FieldSet:
    """요청된 필드 이름을 가져올 리소스 집합으로 변환한다.

    알 수 없는 이름은 무시한다. 인식된 이름이 하나도 없으면 (요청이
    없거나 빈 목록인 경우 포함) 전체를 가져온다.
    """
    if not requested:
        return ALL_FIELDS
    selected = frozenset(
        FIELD_NAMES[name] for name in requested if name in FIELD_NAMES
    )
    return selected or ALL_FIELDS
