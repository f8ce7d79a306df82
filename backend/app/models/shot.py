"""Shot 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.helpers import new_id, utcnow


class Shot(Base):
    __tablename__ = "shots"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), nullable=False)
    scene_id = Column(String(36), nullable=False)
    title = Column(String(200))
    # 확정된 결정. GRACE(임시 승인)는 절대 이 컬럼에 기록되지 않는다.
    approved_take_id = Column(String(36), nullable=True)
    decided_at = Column(DateTime, nullable=True)
    final_visual_selection_id = Column(String(36), nullable=True)  # decision_notes.id (promote_asset)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    takes = relationship("Take", back_populates="shot")
