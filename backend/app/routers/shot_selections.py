"""Shot 에셋 선택 원장 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.shot_selection import (
    PromoteSelectionRequest, PromoteSelectionResult, DiscardSelectionRequest,
    ActiveSelectionOut, FinalVisualRequest, FinalVisualOut, FinalVisualSelectionOut,
)
from app.services import selection_service

router = APIRouter(tags=["shot_selections"])


@router.post("/api/shots/{shot_id}/selections", response_model=PromoteSelectionResult)
def promote_selection(shot_id: str, data: PromoteSelectionRequest, db: Session = Depends(get_db)):
    return selection_service.promote_selection(db, shot_id, data)


@router.post("/api/shots/{shot_id}/selections/{selection_id}/discard")
def discard_selection(
    shot_id: str,
    selection_id: str,
    data: DiscardSelectionRequest,
    db: Session = Depends(get_db),
):
    selection_service.discard_selection(db, shot_id, selection_id, data)
    return {"message": "선택이 폐기되었습니다."}


@router.get("/api/shots/{shot_id}/selections", response_model=List[ActiveSelectionOut])
def list_active_selections(shot_id: str, db: Session = Depends(get_db)):
    return selection_service.list_active_selections(db, shot_id)


@router.put("/api/shots/{shot_id}/final-visual", response_model=FinalVisualOut)
def set_final_visual(shot_id: str, data: FinalVisualRequest, db: Session = Depends(get_db)):
    return selection_service.set_final_visual(db, shot_id, data.selection_id)


@router.delete("/api/shots/{shot_id}/final-visual", response_model=FinalVisualOut)
def clear_final_visual(shot_id: str, db: Session = Depends(get_db)):
    return selection_service.clear_final_visual(db, shot_id)


@router.get("/api/shots/{shot_id}/final-visual", response_model=Optional[FinalVisualSelectionOut])
def get_final_visual(shot_id: str, db: Session = Depends(get_db)):
    return selection_service.get_final_visual(db, shot_id)
