"""Take 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.schemas.take import TakeCreate, TakeOut, TakeStatusCounts
from app.services import take_service

router = APIRouter(tags=["takes"])


@router.get("/api/shots/{shot_id}/takes", response_model=List[TakeOut])
def list_takes(shot_id: str, db: Session = Depends(get_db)):
    take_service.get_shot(db, shot_id)
    return take_service.list_shot_takes(db, shot_id)


@router.post("/api/shots/{shot_id}/takes", response_model=TakeOut)
def create_take(shot_id: str, data: TakeCreate, db: Session = Depends(get_db)):
    return take_service.create_take(db, shot_id, data)


@router.get("/api/shots/{shot_id}/takes/status-counts", response_model=TakeStatusCounts)
def count_takes_by_status(shot_id: str, db: Session = Depends(get_db)):
    take_service.get_shot(db, shot_id)
    return take_service.count_shot_takes_by_status(db, shot_id)


@router.get("/api/takes/{take_id}", response_model=TakeOut)
def get_take(take_id: str, db: Session = Depends(get_db)):
    return take_service.get_take(db, take_id)
