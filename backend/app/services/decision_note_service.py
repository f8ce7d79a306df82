"""decision_notes(append-only 로그) 공용 접근 계층입니다. 노트 추가와 이벤트 문서 파싱만 담당합니다."""

import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from app.models.decision_note import DecisionNote
from app.schemas.decision_note import NoteEvent
from app.utils.helpers import dump_document, load_document, new_id, to_naive_utc, utcnow

SHOT_PARENT_TYPE = "shot"

_event_adapter = TypeAdapter(NoteEvent)


def list_shot_notes(db: Session, shot_id: str) -> List[DecisionNote]:
    return (
        db.query(DecisionNote)
        .filter(
            DecisionNote.parent_type == SHOT_PARENT_TYPE,
            DecisionNote.parent_id == shot_id,
        )
        .order_by(DecisionNote.created_at.asc())
        .all()
    )


def parse_event(note: DecisionNote):
    """노트 body를 이벤트 모델로 해석한다. 해석할 수 없으면 None."""
    try:
        raw = load_document(note.body)
        return _event_adapter.validate_python(raw)
    except (json.JSONDecodeError, ValidationError):
        return None


def build_note(
    *,
    shot_id: str,
    project_id: Optional[str],
    event: BaseModel,
    selection_number: Optional[int] = None,
    note_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> DecisionNote:
    # 새 행만 만든다. 기존 노트를 수정/삭제하는 경로는 없다.
    return DecisionNote(
        id=note_id or new_id(),
        project_id=project_id,
        parent_type=SHOT_PARENT_TYPE,
        parent_id=shot_id,
        body=dump_document(event.model_dump(mode="json", by_alias=True, exclude_none=True)),
        selection_number=selection_number,
        created_at=to_naive_utc(created_at) if created_at else utcnow(),
    )


def to_response(note: DecisionNote) -> dict:
    try:
        body = load_document(note.body)
    except json.JSONDecodeError:
        body = note.body
    event = body.get("event") if isinstance(body, dict) else None
    return {
        "id": note.id,
        "project_id": note.project_id,
        "parent_type": note.parent_type,
        "parent_id": note.parent_id,
        "event": event if isinstance(event, str) else None,
        "body": body,
        "created_at": note.created_at,
    }
