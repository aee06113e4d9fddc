"""
분개 모델

JournalLine / JournalEntry 불변 데이터 구조와 분개 상태 머신.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable
from uuid import uuid4

from accounting.constants import Tolerance
from accounting.types import EntryStatus, EntryType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """금액 변환 (None/빈 문자열은 0)

    float는 str을 거쳐 변환하여 이진 오차 유입을 막는다.

    Raises:
        ValueError: 숫자로 해석할 수 없는 값, NaN/Infinity
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"금액으로 변환할 수 없습니다: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"유한한 금액이 아닙니다: {value!r}")
    return amount


def to_date(value: date | str) -> date:
    """날짜 변환 (YYYY-MM-DD 문자열 허용)"""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass(frozen=True)
class JournalLine:
    """분개 라인

    debit_amount / credit_amount 중 정확히 하나만 양수 (단면 라인).
    account_name은 전기 시점의 계정명 스냅샷.
    """

    account_code: str
    account_name: str
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    description: str | None = None
    reference: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "debit_amount", to_decimal(self.debit_amount))
        object.__setattr__(self, "credit_amount", to_decimal(self.credit_amount))

    @classmethod
    def debit(
        cls,
        account_code: str,
        account_name: str,
        amount: Any,
        description: str | None = None,
    ) -> JournalLine:
        """차변 라인 생성"""
        return cls(account_code, account_name, debit_amount=amount, description=description)

    @classmethod
    def credit(
        cls,
        account_code: str,
        account_name: str,
        amount: Any,
        description: str | None = None,
    ) -> JournalLine:
        """대변 라인 생성"""
        return cls(account_code, account_name, credit_amount=amount, description=description)

    @property
    def is_single_sided(self) -> bool:
        has_debit = self.debit_amount > 0
        has_credit = self.credit_amount > 0
        if self.debit_amount < 0 or self.credit_amount < 0:
            return False
        return has_debit != has_credit

    @property
    def signed_amount(self) -> Decimal:
        """차변 양수 기준 금액"""
        return self.debit_amount - self.credit_amount


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class EntryStateMachine:
    """분개 상태 머신

    전이 규칙:
    - draft → approved
    - approved → reversed
    reversed는 종료 상태.
    """

    TRANSITIONS: dict[str, list[str]] = {
        EntryStatus.DRAFT.value: [EntryStatus.APPROVED.value],
        EntryStatus.APPROVED.value: [EntryStatus.REVERSED.value],
    }

    @classmethod
    def can_transition(cls, from_state: EntryStatus | str, to_state: EntryStatus | str) -> bool:
        source = EntryStatus(from_state).value
        target = EntryStatus(to_state).value
        return target in cls.TRANSITIONS.get(source, [])

    @classmethod
    def transition(cls, from_state: EntryStatus | str, to_state: EntryStatus | str) -> EntryStatus:
        """상태 전이 검증

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        source = EntryStatus(from_state)
        target = EntryStatus(to_state)
        if not cls.can_transition(source, target):
            allowed = cls.TRANSITIONS.get(source.value, [])
            raise StateMachineError(
                f"EntryStateMachine: Cannot transition from {source.value} to {target.value}. "
                f"Allowed: {allowed}"
            )
        logger.debug(f"EntryStateMachine: {source.value} → {target.value}")
        return target


@dataclass(frozen=True)
class JournalEntry:
    """분개

    하나의 거래에 대한 복식부기 기록.
    total_debit / total_credit는 라인에서 유도되며 저장하지 않는다.
    """

    entry_date: date
    lines: tuple[JournalLine, ...]
    description: str = ""
    reference: str | None = None
    entry_type: EntryType = EntryType.MANUAL
    status: EntryStatus = EntryStatus.DRAFT
    entry_id: str = field(default_factory=lambda: str(uuid4()))
    entry_number: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_date", to_date(self.entry_date))
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "entry_type", EntryType(self.entry_type))
        object.__setattr__(self, "status", EntryStatus(self.status))

    @classmethod
    def create(
        cls,
        entry_date: date | str,
        lines: Iterable[JournalLine],
        **kwargs: Any,
    ) -> JournalEntry:
        return cls(entry_date=entry_date, lines=tuple(lines), **kwargs)

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), ZERO)

    def is_balanced(self) -> bool:
        """차변 합계 ≈ 대변 합계 (0.01 미만 차이 허용)"""
        return abs(self.total_debit - self.total_credit) < Tolerance.EPSILON

    @property
    def is_posted(self) -> bool:
        """원장 집계 대상 여부 (역분개 제외)"""
        return self.status in (EntryStatus.APPROVED, EntryStatus.DRAFT)

    @property
    def is_editable(self) -> bool:
        """수정/물리 삭제 가능 여부 (미승인 + 가져온 분개 아님)"""
        return (
            self.status == EntryStatus.DRAFT
            and self.entry_type != EntryType.IMPORTED_REGISTER
        )

    def with_status(self, status: EntryStatus | str) -> JournalEntry:
        """상태 변경된 새 분개 반환

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = EntryStateMachine.transition(self.status, status)
        return replace(self, status=target)

    def approve(self) -> JournalEntry:
        return self.with_status(EntryStatus.APPROVED)

    def reverse(self) -> JournalEntry:
        return self.with_status(EntryStatus.REVERSED)
