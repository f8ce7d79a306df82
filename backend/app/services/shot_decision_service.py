"""Shot 결정 저장 어댑터입니다. 도메인이 결정하고, 이 계층은 기억만 합니다.

DB는 UNDECIDED와 DECIDED만 안다. GRACE는 이 계층에 도달하지 않는다.
"""

import logging
from typing import List

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.schemas.decision_note import DecisionLockEvent
from app.services import decision_note_service
from app.services.shot_decision_machine import (
    ApprovalNote,
    Decided,
    ImpossibleStateError,
    PersistDecisionParams,
    ShotDecision,
    Undecided,
    assert_invariants,
)
from app.services.take_service import get_shot

logger = logging.getLogger(__name__)


def persist_decision(db: Session, params: PersistDecisionParams) -> None:
    """approved_take_id 갱신과 승인 노트 추가를 하나의 트랜잭션으로 기록한다."""
    if not str(params.project_id or "").strip():
        raise HTTPException(status_code=400, detail="project_id가 필요합니다.")
    if not str(params.approved_take_id or "").strip():
        raise HTTPException(status_code=400, detail="approved_take_id가 필요합니다.")
    if not str(params.note_text or "").strip():
        raise HTTPException(status_code=400, detail="결정 노트 내용이 비어 있습니다.")

    shot = get_shot(db, params.shot_id)
    note = decision_note_service.build_note(
        shot_id=shot.id,
        project_id=params.project_id,
        event=DecisionLockEvent(approved_take_id=params.approved_take_id, text=params.note_text),
        note_id=params.note_id,
        created_at=params.note_created_at,
    )
    shot.approved_take_id = params.approved_take_id
    shot.decided_at = note.created_at
    db.add(note)
    try:
        db.commit()
    except SQLAlchemyError:
        # 둘 중 하나라도 실패하면 둘 다 되돌린다. 노트 없는 approved_take_id는 관찰될 수 없다.
        db.rollback()
        raise
    logger.info("[decision] shot %s locked on take %s (note %s)", shot.id, params.approved_take_id, note.id)


def _approval_notes(db: Session, shot_id: str) -> List[ApprovalNote]:
    notes = []
    for row in decision_note_service.list_shot_notes(db, shot_id):
        event = decision_note_service.parse_event(row)
        if not isinstance(event, DecisionLockEvent):
            continue
        notes.append(
            ApprovalNote(
                id=row.id,
                shot_id=row.parent_id,
                text=event.text,
                created_at=row.created_at,
                approved_take_id=event.approved_take_id,
            )
        )
    return notes


def load_decision(db: Session, shot_id: str) -> ShotDecision:
    """저장소에서 결정 상태를 읽는다. 결과는 항상 UNDECIDED 또는 DECIDED다.

    approved_take_id가 있는데 승인 노트가 하나도 없으면 ImpossibleStateError를 던진다.
    이 오류는 UNDECIDED로 대체하거나 삼키지 않는다.
    """
    shot = get_shot(db, shot_id)
    if not shot.approved_take_id:
        return Undecided()

    notes = _approval_notes(db, shot.id)
    if not notes:
        logger.error(
            "[decision] shot %s has approved_take_id %s but zero decision notes",
            shot.id, shot.approved_take_id,
        )
        raise ImpossibleStateError(
            f"Shot {shot.id} has approved_take_id but zero decision notes. "
            "This is a data integrity violation."
        )

    decision = Decided(approved_take_id=shot.approved_take_id, notes=tuple(notes))
    assert_invariants(decision)
    return decision


def revoke_decision(db: Session, shot_id: str) -> None:
    """approved_take_id만 비운다. 승인 노트는 기록으로 남는다."""
    shot = get_shot(db, shot_id)
    previous = shot.approved_take_id
    shot.approved_take_id = None
    shot.decided_at = None
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("[decision] shot %s approval revoked (was %s)", shot.id, previous)


def list_decision_notes(db: Session, shot_id: str) -> List[dict]:
    get_shot(db, shot_id)
    return [decision_note_service.to_response(row) for row in decision_note_service.list_shot_notes(db, shot_id)]


def to_response(decision: ShotDecision) -> dict:
    return {
        "state": decision.state.value,
        "approved_take_id": decision.approved_take_id,
        "notes": [
            {
                "id": note.id,
                "shot_id": note.shot_id,
                "approved_take_id": note.approved_take_id,
                "text": note.text,
                "created_at": note.created_at,
            }
            for note in decision.notes
        ],
    }
