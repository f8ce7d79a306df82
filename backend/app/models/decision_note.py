"""Shot 결정/선택 이벤트를 기록하는 append-only decision_notes 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index, UniqueConstraint

from app.database import Base
from app.utils.helpers import new_id, utcnow


class DecisionNote(Base):
    __tablename__ = "decision_notes"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), nullable=True)
    parent_type = Column(String(20), nullable=False, default="shot")
    parent_id = Column(String(36), nullable=False)
    body = Column(Text, nullable=False)  # JSON string (event + fields)
    # promote_asset 이벤트에만 채워진다. NULL은 유니크 제약에서 제외된다.
    selection_number = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("parent_type", "parent_id", "selection_number", name="uq_decision_note_selection"),
        Index("idx_decision_note_parent", "parent_type", "parent_id", "created_at"),
    )
