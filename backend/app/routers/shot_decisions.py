"""Shot 결정(승인 잠금/해제) API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.decision_note import DecisionNoteOut
from app.schemas.shot_decision import PersistDecisionRequest, ShotDecisionOut
from app.services import shot_decision_service
from app.services.shot_decision_machine import PersistDecisionParams
from app.utils.helpers import new_id, utcnow

router = APIRouter(tags=["shot_decisions"])


@router.post("/api/shots/{shot_id}/decision", response_model=ShotDecisionOut)
def persist_decision(shot_id: str, data: PersistDecisionRequest, db: Session = Depends(get_db)):
    # 호출 측 상태 머신이 이미 GRACE → DECIDED 잠금을 마친 값만 들어온다.
    params = PersistDecisionParams(
        shot_id=shot_id,
        project_id=data.project_id,
        approved_take_id=data.approved_take_id,
        note_id=data.note.id or new_id(),
        note_text=data.note.text,
        note_created_at=data.note.created_at or utcnow(),
    )
    shot_decision_service.persist_decision(db, params)
    return shot_decision_service.to_response(shot_decision_service.load_decision(db, shot_id))


@router.get("/api/shots/{shot_id}/decision", response_model=ShotDecisionOut)
def load_decision(shot_id: str, db: Session = Depends(get_db)):
    return shot_decision_service.to_response(shot_decision_service.load_decision(db, shot_id))


@router.delete("/api/shots/{shot_id}/decision", response_model=ShotDecisionOut)
def revoke_decision(shot_id: str, db: Session = Depends(get_db)):
    shot_decision_service.revoke_decision(db, shot_id)
    return shot_decision_service.to_response(shot_decision_service.load_decision(db, shot_id))


@router.get("/api/shots/{shot_id}/decision-notes", response_model=List[DecisionNoteOut])
def list_decision_notes(shot_id: str, db: Session = Depends(get_db)):
    return shot_decision_service.list_decision_notes(db, shot_id)
