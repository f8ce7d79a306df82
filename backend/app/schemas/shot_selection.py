"""Shot 에셋 선택(promote/discard) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

from app.schemas.decision_note import ImageSnapshot, PromptSnapshot


class PromoteSelectionRequest(BaseModel):
    project_id: str
    image_snapshot: ImageSnapshot
    take_id: Optional[str] = None
    image_node_id: Optional[str] = None
    prompt_snapshot: Optional[PromptSnapshot] = None


class PromoteSelectionResult(BaseModel):
    selection_id: str
    selection_number: int


class DiscardSelectionRequest(BaseModel):
    project_id: str
    reason: Literal["undo", "manual"] = "manual"


class ActiveSelectionOut(BaseModel):
    selection_id: str
    selection_number: int
    storage_path: str
    src: str
    take_id: Optional[str] = None
    node_id: Optional[str] = None
    created_at: datetime


class FinalVisualRequest(BaseModel):
    selection_id: str


class FinalVisualOut(BaseModel):
    shot_id: str
    final_visual_selection_id: Optional[str] = None


class FinalVisualSelectionOut(BaseModel):
    selection_id: str
    src: str
    storage_path: str
    selection_number: int
    take_id: Optional[str] = None
