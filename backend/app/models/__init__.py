"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.shot import Shot
from app.models.take import Take
from app.models.take_snapshot import TakeSnapshot
from app.models.decision_note import DecisionNote

__all__ = [
    "Shot",
    "Take",
    "TakeSnapshot",
    "DecisionNote",
]
