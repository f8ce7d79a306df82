"""테이크 캔버스의 불변 스냅샷(append-only 이력) 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, CheckConstraint, Index

from app.database import Base
from app.utils.helpers import new_id, utcnow

SNAPSHOT_REASONS = (
    "manual_save",
    "publish",
    "checkpoint",
    "duplicate_seed",
    "restore_from_snapshot",
)


class TakeSnapshot(Base):
    __tablename__ = "take_snapshots"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), nullable=False)
    scene_id = Column(String(36), nullable=False)
    shot_id = Column(String(36), nullable=False)
    take_id = Column(String(36), nullable=False)
    payload = Column(Text, nullable=False)  # JSON string
    reason = Column(String(32), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    created_by = Column(String(64))

    __table_args__ = (
        CheckConstraint(
            "reason IN ({})".format(", ".join(f"'{r}'" for r in SNAPSHOT_REASONS)),
            name="ck_take_snapshot_reason",
        ),
        Index("idx_take_snapshot_take", "take_id", "created_at"),
    )
