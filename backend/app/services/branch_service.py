"""스냅샷에서 새 테이크를 분기(restore-as-branch)하는 도메인 서비스입니다.

복원은 덮어쓰기가 아니라 분기다. 원본 테이크와 그 스냅샷은 읽기만 한다.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.schemas.take_snapshot import TakeSnapshotCreate
from app.services import snapshot_service, take_service

logger = logging.getLogger(__name__)

RESTORE_REASON = "restore_from_snapshot"
FALLBACK_REASON = "manual_save"


def default_branch_name(created_at: datetime) -> str:
    return f"Take (from {created_at.strftime(settings.BRANCH_LABEL_TIME_FORMAT)})"


def branch_from_snapshot(
    db: Session,
    snapshot_id: str,
    custom_name: Optional[str] = None,
    created_by: Optional[str] = None,
) -> dict:
    source = snapshot_service.load_snapshot_by_id(db, snapshot_id)
    if not source:
        raise HTTPException(status_code=404, detail="스냅샷을 찾을 수 없습니다.")

    name = (custom_name or "").strip() or default_branch_name(source.created_at)
    payload = snapshot_service.parse_payload(source)

    # 같은 shot의 takes만 조회하므로 원본 테이크 행은 변경되지 않는다.
    take = take_service.insert_take(
        db,
        shot_id=source.shot_id,
        name=name,
        description=f"Restored from snapshot {source.id}",
        status="draft",
    )

    def _save(reason: str):
        return snapshot_service.save_snapshot(
            db,
            TakeSnapshotCreate(
                project_id=source.project_id,
                scene_id=source.scene_id,
                shot_id=source.shot_id,
                take_id=take.id,
                payload=payload,
                reason=reason,
                created_by=created_by,
            ),
        )

    try:
        snapshot = _save(RESTORE_REASON)
    except (IntegrityError, DataError) as exc:
        # 구 스키마는 restore_from_snapshot reason을 허용하지 않는다. manual_save로 한 번만 재시도한다.
        logger.warning(
            "[branch] reason %s rejected by storage for take %s (source snapshot %s), retrying with %s: %s",
            RESTORE_REASON, take.id, source.id, FALLBACK_REASON, exc.orig,
        )
        snapshot = _save(FALLBACK_REASON)

    logger.info(
        "[branch] take %s created from snapshot %s (new snapshot %s, reason=%s)",
        take.id, source.id, snapshot.id, snapshot.reason,
    )
    return {
        "take": take_service.to_response(take),
        "snapshot": {
            "id": snapshot.id,
            "payload": snapshot_service.parse_payload(snapshot),
            "created_at": snapshot.created_at,
            "reason": snapshot.reason,
        },
        "source_snapshot_id": source.id,
    }
