"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    decision_note_service,
    snapshot_service,
    take_service,
    branch_service,
    shot_decision_machine,
    shot_decision_service,
    selection_service,
)
