"""테이크 스냅샷 저장/조회/분기 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Any, Optional, Literal
from datetime import datetime

from app.schemas.take import TakeOut

SnapshotReason = Literal[
    "manual_save",
    "publish",
    "checkpoint",
    "duplicate_seed",
    "restore_from_snapshot",
]


class TakeSnapshotCreate(BaseModel):
    project_id: str
    scene_id: str
    shot_id: str
    take_id: str
    payload: Any = None
    reason: SnapshotReason = "manual_save"
    created_by: Optional[str] = None


class TakeSnapshotSaved(BaseModel):
    id: str
    created_at: datetime


class TakeSnapshotOut(BaseModel):
    id: str
    project_id: str
    scene_id: str
    shot_id: str
    take_id: str
    payload: Any
    reason: SnapshotReason
    created_at: datetime
    created_by: Optional[str] = None


class TakeSnapshotHistoryItem(BaseModel):
    id: str
    reason: SnapshotReason
    created_at: datetime

    model_config = {"from_attributes": True}


class BranchFromSnapshotRequest(BaseModel):
    custom_name: Optional[str] = None
    created_by: Optional[str] = None


class BranchSnapshotOut(BaseModel):
    id: str
    payload: Any
    created_at: datetime
    reason: SnapshotReason


class BranchFromSnapshotResult(BaseModel):
    take: TakeOut
    snapshot: BranchSnapshotOut
    source_snapshot_id: str
