"""Take 생명주기 도메인 서비스 레이어입니다. 테이크 생성과 조회, order_index 할당을 담당합니다."""

import logging
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.shot import Shot
from app.models.take import TAKE_STATUSES, Take
from app.schemas.take import TakeCreate
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

STATUS_PRIORITY = {"selected": 0, "candidate": 1, "draft": 2, "rejected": 3}


def get_shot(db: Session, shot_id: str) -> Shot:
    shot = db.query(Shot).filter(Shot.id == shot_id).first()
    if not shot:
        raise HTTPException(status_code=404, detail="샷을 찾을 수 없습니다.")
    return shot


def _next_order_index(db: Session, shot_id: str) -> int:
    current_max = (
        db.query(func.max(Take.order_index))
        .filter(Take.shot_id == shot_id)
        .scalar()
    )
    return 0 if current_max is None else current_max + 1


def insert_take(
    db: Session,
    *,
    shot_id: str,
    name: str,
    description: Optional[str] = None,
    status: str = "draft",
) -> Take:
    """order_index를 max+1로 잡아 테이크를 추가한다.

    (shot_id, order_index) 유니크 제약이 동시 생성 충돌을 막고,
    충돌하면 인덱스를 다시 계산해 APPEND_RETRY_LIMIT 회까지 재시도한다.
    """
    if status not in TAKE_STATUSES:
        raise HTTPException(status_code=400, detail=f"지원하지 않는 테이크 상태입니다: {status}")
    for attempt in range(1, settings.APPEND_RETRY_LIMIT + 1):
        order_index = _next_order_index(db, shot_id)
        now = utcnow()
        take = Take(
            shot_id=shot_id,
            name=name,
            description=description,
            status=status,
            order_index=order_index,
            created_at=now,
            updated_at=now,
        )
        db.add(take)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "[take] order_index %s already taken for shot %s (attempt %s/%s)",
                order_index, shot_id, attempt, settings.APPEND_RETRY_LIMIT,
            )
            continue
        db.refresh(take)
        return take
    raise HTTPException(status_code=409, detail="테이크 순번 할당이 반복 충돌했습니다. 다시 시도해 주세요.")


def create_take(db: Session, shot_id: str, data: TakeCreate) -> Take:
    get_shot(db, shot_id)
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="테이크 이름이 필요합니다.")
    return insert_take(db, shot_id=shot_id, name=name, description=data.description, status=data.status)


def get_take(db: Session, take_id: str) -> Take:
    take = db.query(Take).filter(Take.id == take_id).first()
    if not take:
        raise HTTPException(status_code=404, detail="테이크를 찾을 수 없습니다.")
    return take


def list_shot_takes(db: Session, shot_id: str) -> List[Take]:
    # selected → candidate → draft → rejected, 같은 상태 안에서는 order_index 순
    takes = db.query(Take).filter(Take.shot_id == shot_id).order_by(Take.order_index.asc()).all()
    return sorted(takes, key=lambda t: (STATUS_PRIORITY.get(t.status, len(STATUS_PRIORITY)), t.order_index))


def count_shot_takes_by_status(db: Session, shot_id: str) -> Dict[str, int]:
    counts = {status: 0 for status in TAKE_STATUSES}
    rows = (
        db.query(Take.status, func.count(Take.id))
        .filter(Take.shot_id == shot_id)
        .group_by(Take.status)
        .all()
    )
    for status, count in rows:
        if status in counts:
            counts[status] = count
    return counts


def to_response(take: Take) -> dict:
    return {
        "id": take.id,
        "shot_id": take.shot_id,
        "name": take.name,
        "description": take.description,
        "status": take.status,
        "order_index": take.order_index,
        "created_at": take.created_at,
        "updated_at": take.updated_at,
    }
