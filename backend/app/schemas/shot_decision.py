"""Shot 결정(승인 잠금) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import List, Optional, Literal
from datetime import datetime


class DecisionNoteIn(BaseModel):
    id: Optional[str] = None
    text: str
    created_at: Optional[datetime] = None


class PersistDecisionRequest(BaseModel):
    project_id: str
    approved_take_id: str
    note: DecisionNoteIn


class ApprovalNoteOut(BaseModel):
    id: str
    shot_id: str
    approved_take_id: Optional[str] = None
    text: str
    created_at: datetime


class ShotDecisionOut(BaseModel):
    # DB에서 읽은 상태는 UNDECIDED/DECIDED 뿐이다.
    state: Literal["UNDECIDED", "DECIDED"]
    approved_take_id: Optional[str] = None
    notes: List[ApprovalNoteOut] = []
