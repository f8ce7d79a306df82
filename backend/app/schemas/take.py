"""Take 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

TakeStatus = Literal["draft", "candidate", "selected", "rejected"]


class TakeCreate(BaseModel):
    name: str
    description: Optional[str] = None
    status: TakeStatus = "draft"


class TakeOut(BaseModel):
    id: str
    shot_id: str
    name: str
    description: Optional[str] = None
    status: TakeStatus
    order_index: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TakeStatusCounts(BaseModel):
    draft: int = 0
    candidate: int = 0
    selected: int = 0
    rejected: int = 0
