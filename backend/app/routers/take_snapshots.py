"""Take Snapshot 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.schemas.take_snapshot import (
    TakeSnapshotCreate, TakeSnapshotSaved, TakeSnapshotOut, TakeSnapshotHistoryItem,
    BranchFromSnapshotRequest, BranchFromSnapshotResult,
)
from app.services import snapshot_service, branch_service

router = APIRouter(tags=["take_snapshots"])


@router.post("/api/take-snapshots", response_model=TakeSnapshotSaved)
def save_snapshot(data: TakeSnapshotCreate, db: Session = Depends(get_db)):
    row = snapshot_service.save_snapshot(db, data)
    return {"id": row.id, "created_at": row.created_at}


@router.get("/api/takes/{take_id}/snapshots/latest", response_model=Optional[TakeSnapshotOut])
def load_latest_snapshot(take_id: str, db: Session = Depends(get_db)):
    row = snapshot_service.load_latest_snapshot(db, take_id)
    return snapshot_service.to_response(row) if row else None


@router.get("/api/takes/{take_id}/snapshots", response_model=List[TakeSnapshotHistoryItem])
def list_snapshot_history(
    take_id: str,
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return snapshot_service.list_snapshot_history(db, take_id, limit)


@router.get("/api/take-snapshots/{snapshot_id}", response_model=Optional[TakeSnapshotOut])
def load_snapshot(snapshot_id: str, db: Session = Depends(get_db)):
    row = snapshot_service.load_snapshot_by_id(db, snapshot_id)
    return snapshot_service.to_response(row) if row else None


@router.post("/api/take-snapshots/{snapshot_id}/branch", response_model=BranchFromSnapshotResult)
def branch_from_snapshot(
    snapshot_id: str,
    data: Optional[BranchFromSnapshotRequest] = None,
    db: Session = Depends(get_db),
):
    data = data or BranchFromSnapshotRequest()
    return branch_service.branch_from_snapshot(db, snapshot_id, data.custom_name, data.created_by)
