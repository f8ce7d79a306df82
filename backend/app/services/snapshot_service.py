"""테이크 스냅샷(append-only 이력) 저장/조회 도메인 서비스입니다.

스냅샷 행은 INSERT와 SELECT만 허용한다. 수정/삭제 함수는 의도적으로 두지 않는다.
"""

import json
import logging
from typing import Any, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.take_snapshot import SNAPSHOT_REASONS, TakeSnapshot
from app.schemas.take_snapshot import TakeSnapshotCreate
from app.utils.helpers import dump_document, load_document, utcnow

logger = logging.getLogger(__name__)

_REQUIRED_IDS = ("project_id", "scene_id", "shot_id", "take_id")


def _validate_create(data: TakeSnapshotCreate) -> None:
    missing = [name for name in _REQUIRED_IDS if not str(getattr(data, name) or "").strip()]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"스냅샷 저장에는 project/scene/shot/take ID가 모두 필요합니다. (누락: {', '.join(missing)})",
        )
    # 빈 배열/객체는 유효한 캔버스 상태다. None만 거부한다.
    if data.payload is None:
        raise HTTPException(status_code=400, detail="스냅샷 payload가 필요합니다.")
    if data.reason not in SNAPSHOT_REASONS:
        raise HTTPException(status_code=400, detail=f"지원하지 않는 스냅샷 reason입니다: {data.reason}")


def save_snapshot(db: Session, data: TakeSnapshotCreate) -> TakeSnapshot:
    _validate_create(data)
    row = TakeSnapshot(
        project_id=data.project_id,
        scene_id=data.scene_id,
        shot_id=data.shot_id,
        take_id=data.take_id,
        payload=dump_document(data.payload),
        reason=data.reason,
        created_at=utcnow(),
        created_by=data.created_by,
    )
    db.add(row)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(row)
    logger.debug("[snapshot] saved %s for take %s (reason=%s)", row.id, row.take_id, row.reason)
    return row


def load_latest_snapshot(db: Session, take_id: str) -> Optional[TakeSnapshot]:
    """테이크의 가장 최근 스냅샷. 한 번도 저장되지 않았으면 None (캔버스는 빈 상태로 시작)."""
    if not take_id:
        raise HTTPException(status_code=400, detail="take_id가 필요합니다.")
    return (
        db.query(TakeSnapshot)
        .filter(TakeSnapshot.take_id == take_id)
        .order_by(TakeSnapshot.created_at.desc())
        .first()
    )


def load_snapshot_by_id(db: Session, snapshot_id: str) -> Optional[TakeSnapshot]:
    if not snapshot_id:
        raise HTTPException(status_code=400, detail="snapshot_id가 필요합니다.")
    return db.query(TakeSnapshot).filter(TakeSnapshot.id == snapshot_id).first()


def list_snapshot_history(db: Session, take_id: str, limit: Optional[int] = None) -> List[TakeSnapshot]:
    if not take_id:
        raise HTTPException(status_code=400, detail="take_id가 필요합니다.")
    if limit is None:
        limit = settings.SNAPSHOT_HISTORY_DEFAULT_LIMIT
    if limit < 1 or limit > settings.SNAPSHOT_HISTORY_MAX_LIMIT:
        raise HTTPException(
            status_code=400,
            detail=f"limit은 1~{settings.SNAPSHOT_HISTORY_MAX_LIMIT} 사이여야 합니다.",
        )
    return (
        db.query(TakeSnapshot)
        .filter(TakeSnapshot.take_id == take_id)
        .order_by(TakeSnapshot.created_at.desc())
        .limit(limit)
        .all()
    )


def parse_payload(row: TakeSnapshot) -> Any:
    try:
        return load_document(row.payload)
    except json.JSONDecodeError:
        # payload는 저장 시 항상 JSON으로 직렬화되므로 여기 도달하면 저장소가 손상된 것이다.
        logger.error("[snapshot] payload of %s is not valid JSON", row.id)
        raise


def to_response(row: TakeSnapshot) -> dict:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "scene_id": row.scene_id,
        "shot_id": row.shot_id,
        "take_id": row.take_id,
        "payload": parse_payload(row),
        "reason": row.reason,
        "created_at": row.created_at,
        "created_by": row.created_by,
    }
