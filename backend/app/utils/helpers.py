"""시각/JSON 직렬화 공용 헬퍼입니다."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # DB에는 마이크로초 단위 naive UTC로 저장한다.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def dump_document(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def load_document(raw: str | None) -> Any:
    """저장된 JSON 문서를 복원한다. 파싱 실패는 호출자가 처리한다."""
    if raw is None:
        return None
    return json.loads(raw)
