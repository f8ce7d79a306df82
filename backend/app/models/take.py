"""Take 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.helpers import new_id, utcnow

TAKE_STATUSES = ("draft", "candidate", "selected", "rejected")


class Take(Base):
    __tablename__ = "takes"

    id = Column(String(36), primary_key=True, default=new_id)
    shot_id = Column(String(36), ForeignKey("shots.id"), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="draft")  # draft/candidate/selected/rejected
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    shot = relationship("Shot", back_populates="takes")

    __table_args__ = (
        # 같은 shot 안에서 order_index 중복 할당을 저장소 레벨에서 막는다.
        UniqueConstraint("shot_id", "order_index", name="uq_take_shot_order"),
        Index("idx_take_shot", "shot_id", "order_index"),
    )
