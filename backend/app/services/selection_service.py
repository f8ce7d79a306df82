"""Shot 에셋 선택 원장(promote/discard 이벤트 로그) 도메인 서비스입니다.

활성 선택은 저장된 값이 아니라 전체 이벤트 로그를 재생해 계산한 투영이다.
promote와 discard 모두 새 노트를 추가할 뿐, 기존 노트를 수정하거나 삭제하지 않는다.
"""

import logging
from typing import Dict, List, Optional, Set

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.decision_note import DecisionNote
from app.schemas.decision_note import DiscardPromoteAssetEvent, PromoteAssetEvent
from app.schemas.shot_selection import DiscardSelectionRequest, PromoteSelectionRequest
from app.services import decision_note_service
from app.services.take_service import get_shot
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def _require(value, field: str) -> None:
    if not str(value or "").strip():
        raise HTTPException(status_code=400, detail=f"{field}가 필요합니다.")


def _count_promotions(db: Session, shot_id: str) -> int:
    # 해석할 수 없는 body는 세지 않는다.
    return sum(
        1
        for row in decision_note_service.list_shot_notes(db, shot_id)
        if isinstance(decision_note_service.parse_event(row), PromoteAssetEvent)
    )


def promote_selection(db: Session, shot_id: str, data: PromoteSelectionRequest) -> dict:
    """promote_asset 이벤트를 추가하고 {selection_id, selection_number}를 돌려준다.

    selection_number는 기존 promote 이벤트 수 + 1이다. (parent, selection_number)
    유니크 제약이 동시 promote의 번호 중복을 막고, 충돌하면 다시 세어 재시도한다.
    """
    _require(shot_id, "shot_id")
    _require(data.project_id, "project_id")
    _require(data.image_snapshot.src, "image_snapshot.src")
    get_shot(db, shot_id)

    for attempt in range(1, settings.APPEND_RETRY_LIMIT + 1):
        selection_number = _count_promotions(db, shot_id) + 1
        now = utcnow()
        note = decision_note_service.build_note(
            shot_id=shot_id,
            project_id=data.project_id,
            event=PromoteAssetEvent(
                selection_number=selection_number,
                take_id=data.take_id,
                image_node_id=data.image_node_id,
                image_snapshot=data.image_snapshot,
                prompt_snapshot=data.prompt_snapshot,
                created_at=now,
            ),
            selection_number=selection_number,
            created_at=now,
        )
        db.add(note)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "[selection] selection_number %s already taken for shot %s (attempt %s/%s)",
                selection_number, shot_id, attempt, settings.APPEND_RETRY_LIMIT,
            )
            continue
        return {"selection_id": note.id, "selection_number": selection_number}
    raise HTTPException(status_code=409, detail="선택 번호 할당이 반복 충돌했습니다. 다시 시도해 주세요.")


def discard_selection(db: Session, shot_id: str, selection_id: str, data: DiscardSelectionRequest) -> None:
    """discard 이벤트를 추가한다. 원래 promote 노트는 그대로 둔다."""
    _require(shot_id, "shot_id")
    _require(data.project_id, "project_id")
    _require(selection_id, "selection_id")
    get_shot(db, shot_id)
    now = utcnow()
    note = decision_note_service.build_note(
        shot_id=shot_id,
        project_id=data.project_id,
        event=DiscardPromoteAssetEvent(selection_id=selection_id, reason=data.reason, timestamp=now.isoformat()),
        created_at=now,
    )
    db.add(note)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_active_selections(db: Session, shot_id: str) -> List[dict]:
    """promote된 선택 중 discard 이벤트가 없는 것들을 promote 순서대로 돌려준다."""
    promotes: Dict[str, dict] = {}
    discarded: Set[str] = set()

    for row in decision_note_service.list_shot_notes(db, shot_id):
        event = decision_note_service.parse_event(row)
        if isinstance(event, PromoteAssetEvent):
            promotes[row.id] = {
                "selection_id": row.id,
                "selection_number": event.selection_number,
                "storage_path": event.image_snapshot.storage_path,
                "src": event.image_snapshot.src,
                "take_id": event.take_id,
                "node_id": event.image_node_id,
                "created_at": row.created_at,
            }
        elif isinstance(event, DiscardPromoteAssetEvent):
            # 중복 discard나 promote 이전의 discard도 결과에는 영향이 없다.
            discarded.add(event.selection_id)

    return [entry for selection_id, entry in promotes.items() if selection_id not in discarded]


def set_final_visual(db: Session, shot_id: str, selection_id: str) -> dict:
    """Shot의 최종 비주얼을 활성 promote_asset 선택으로 지정한다."""
    _require(selection_id, "selection_id")
    shot = get_shot(db, shot_id)
    note = db.query(DecisionNote).filter(DecisionNote.id == selection_id).first()
    if not note:
        raise HTTPException(status_code=404, detail="선택 노트를 찾을 수 없습니다.")
    if note.parent_type != decision_note_service.SHOT_PARENT_TYPE or note.parent_id != shot.id:
        raise HTTPException(status_code=400, detail="다른 샷의 선택은 지정할 수 없습니다.")
    if not isinstance(decision_note_service.parse_event(note), PromoteAssetEvent):
        raise HTTPException(status_code=400, detail="promote_asset 이벤트만 최종 비주얼로 지정할 수 있습니다.")
    active_ids = {entry["selection_id"] for entry in list_active_selections(db, shot.id)}
    if selection_id not in active_ids:
        raise HTTPException(status_code=400, detail="폐기된 선택은 최종 비주얼로 지정할 수 없습니다.")

    shot.final_visual_selection_id = selection_id
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return {"shot_id": shot.id, "final_visual_selection_id": shot.final_visual_selection_id}


def get_final_visual(db: Session, shot_id: str) -> Optional[dict]:
    """최종 비주얼로 지정된 promote_asset 노트의 이미지 정보를 돌려준다.

    지정되지 않았거나 노트가 없거나 promote_asset이 아니면 None.
    """
    shot = get_shot(db, shot_id)
    if not shot.final_visual_selection_id:
        return None
    note = db.query(DecisionNote).filter(DecisionNote.id == shot.final_visual_selection_id).first()
    if not note:
        return None
    event = decision_note_service.parse_event(note)
    if not isinstance(event, PromoteAssetEvent):
        return None
    return {
        "selection_id": note.id,
        "src": event.image_snapshot.src,
        "storage_path": event.image_snapshot.storage_path,
        "selection_number": event.selection_number,
        "take_id": event.take_id,
    }


def clear_final_visual(db: Session, shot_id: str) -> dict:
    shot = get_shot(db, shot_id)
    shot.final_visual_selection_id = None
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return {"shot_id": shot.id, "final_visual_selection_id": None}
