"""decision_notes.body에 기록되는 이벤트 문서와 노트 응답 스키마입니다.

body는 ``event`` 태그로 구분되는 문서이며 ``schema_version``을 함께 싣는다.
알 수 없는 태그나 형식이 깨진 문서는 투영(projection) 계산 시 건너뛴다.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

NOTE_SCHEMA_VERSION = 1


class ImageSnapshot(BaseModel):
    src: str
    storage_path: str = ""
    natural_width: Optional[int] = Field(default=None, alias="naturalWidth")
    natural_height: Optional[int] = Field(default=None, alias="naturalHeight")

    model_config = {"populate_by_name": True}


class PromptSnapshot(BaseModel):
    body: str
    prompt_type: Optional[str] = Field(default=None, alias="promptType")
    origin: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    model_config = {"populate_by_name": True}


class PromoteAssetEvent(BaseModel):
    event: Literal["promote_asset"] = "promote_asset"
    schema_version: int = NOTE_SCHEMA_VERSION
    selection_number: int
    take_id: Optional[str] = None
    image_node_id: Optional[str] = None
    image_snapshot: ImageSnapshot
    prompt_snapshot: Optional[PromptSnapshot] = None
    created_at: Optional[datetime] = None


class DiscardPromoteAssetEvent(BaseModel):
    event: Literal["discard_promote_asset"] = "discard_promote_asset"
    schema_version: int = NOTE_SCHEMA_VERSION
    selection_id: str = Field(min_length=1)
    # 요청 단계에서만 undo/manual로 제한한다. 기록된 discard는 selection_id만 있으면 유효하다.
    reason: Optional[str] = None
    timestamp: Any = None


class DecisionLockEvent(BaseModel):
    event: Literal["decision_lock"] = "decision_lock"
    schema_version: int = NOTE_SCHEMA_VERSION
    approved_take_id: str = Field(min_length=1)
    text: str


NoteEvent = Annotated[
    Union[PromoteAssetEvent, DiscardPromoteAssetEvent, DecisionLockEvent],
    Field(discriminator="event"),
]


class DecisionNoteOut(BaseModel):
    id: str
    project_id: Optional[str] = None
    parent_type: str
    parent_id: str
    event: Optional[str] = None
    body: Any
    created_at: datetime
