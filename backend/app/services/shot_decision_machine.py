"""Shot 결정 상태 머신(순수 함수)입니다.

상태는 세 가지뿐이다.

- UNDECIDED: 승인된 테이크가 없다.
- GRACE: 테이크를 임시로 승인했지만 아직 잠그지 않았다. 호출 측 메모리에만 존재한다.
- DECIDED: 승인 테이크와 승인 노트가 영구 저장되었다.

모든 전이는 새 값을 반환하며 입력을 변경하지 않는다. DB 접근은 없다.
저장 계층은 ``PersistDecisionParams``만 받으며, 이 값은 ``Decided``에서만 만들 수 있다.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from app.utils.helpers import new_id, utcnow

# 잠금 전 유예 시간. 타이머는 UI 책임이며 여기서는 강제하지 않는다.
GRACE_PERIOD_SECONDS = 60


class ShotDecisionError(Exception):
    """Shot 결정 도메인 위반의 공통 부모."""


class InvalidTransitionError(ShotDecisionError):
    """상태 머신이 허용하지 않는 전이를 시도했다."""


class ImpossibleStateError(ShotDecisionError):
    """저장소 불변식 위반. 복구 대상이 아니라 버그/데이터 손상이다."""


class DecisionState(str, Enum):
    UNDECIDED = "UNDECIDED"
    GRACE = "GRACE"
    DECIDED = "DECIDED"


@dataclass(frozen=True)
class ApprovalNote:
    id: str
    shot_id: str
    text: str
    created_at: datetime
    approved_take_id: Optional[str] = None


@dataclass(frozen=True)
class Undecided:
    # 과거 결정 사이클의 노트는 기억으로 남는다.
    notes: Tuple[ApprovalNote, ...] = ()

    state: ClassVar[DecisionState] = DecisionState.UNDECIDED
    approved_take_id: ClassVar[None] = None


@dataclass(frozen=True)
class Grace:
    pending_take_id: str
    notes: Tuple[ApprovalNote, ...] = ()

    state: ClassVar[DecisionState] = DecisionState.GRACE
    approved_take_id: ClassVar[None] = None


@dataclass(frozen=True)
class Decided:
    approved_take_id: str
    notes: Tuple[ApprovalNote, ...]

    state: ClassVar[DecisionState] = DecisionState.DECIDED


ShotDecision = Union[Undecided, Grace, Decided]


@dataclass(frozen=True)
class PersistDecisionParams:
    shot_id: str
    project_id: str
    approved_take_id: str
    note_id: str
    note_text: str
    note_created_at: datetime


def initial_decision() -> Undecided:
    return Undecided()


def approve_take(decision: ShotDecision, take_id: str) -> Grace:
    """임시 승인. UNDECIDED/GRACE/DECIDED 어디서든 GRACE로 간다. 아무것도 저장하지 않는다."""
    if not take_id:
        raise InvalidTransitionError("approve_take: take_id is required")
    if isinstance(decision, (Undecided, Grace, Decided)):
        # DECIDED에서 오면 새 결정 사이클이 시작된다. 이전 결정은 notes에만 남는다.
        return Grace(pending_take_id=take_id, notes=decision.notes)
    raise InvalidTransitionError(f"approve_take: unknown state {decision!r}")


def undo_approval(decision: ShotDecision) -> Undecided:
    """GRACE에서만 허용된다. 의도는 취소할 수 있어도 기록은 지울 수 없다."""
    if not isinstance(decision, Grace):
        raise InvalidTransitionError(
            f"undo_approval: only allowed during GRACE, current state is {decision.state.value}"
        )
    return Undecided(notes=decision.notes)


def lock_decision(
    decision: ShotDecision,
    shot_id: str,
    note_text: str,
    note_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Decided:
    if not isinstance(decision, Grace):
        raise InvalidTransitionError(
            f"lock_decision: only allowed during GRACE, current state is {decision.state.value}"
        )
    if not decision.pending_take_id:
        raise ImpossibleStateError("lock_decision: GRACE without pending take")
    if not note_text or not note_text.strip():
        raise InvalidTransitionError("lock_decision: decision note text cannot be empty")

    note = ApprovalNote(
        id=note_id or new_id(),
        shot_id=shot_id,
        text=note_text,
        created_at=now or utcnow(),
        approved_take_id=decision.pending_take_id,
    )
    return Decided(approved_take_id=decision.pending_take_id, notes=decision.notes + (note,))


def assert_invariants(decision: ShotDecision) -> None:
    if isinstance(decision, Decided):
        if not decision.approved_take_id:
            raise ImpossibleStateError("DECIDED without approved take")
        if not decision.notes:
            raise ImpossibleStateError("DECIDED without decision notes")
    elif isinstance(decision, Grace):
        if not decision.pending_take_id:
            raise ImpossibleStateError("GRACE without pending take")
    elif not isinstance(decision, Undecided):
        raise ImpossibleStateError(f"unknown decision state {decision!r}")


def to_persist_params(decision: Decided, project_id: str) -> PersistDecisionParams:
    """잠긴 결정에서 저장 파라미터를 만든다. GRACE/UNDECIDED는 여기서 거부된다."""
    if not isinstance(decision, Decided):
        raise InvalidTransitionError(
            f"only a DECIDED state can be persisted, got {decision.state.value}"
        )
    assert_invariants(decision)
    note = decision.notes[-1]
    return PersistDecisionParams(
        shot_id=note.shot_id,
        project_id=project_id,
        approved_take_id=decision.approved_take_id,
        note_id=note.id,
        note_text=note.text,
        note_created_at=note.created_at,
    )
