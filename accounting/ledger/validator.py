"""
분개 검증기

분개가 원장에 들어가기 전 형식과 균형을 검증한다.
순수 함수: 부작용 없음. 결과는 ValidationResult 값으로 반환.

검증 순서:
1. 라인 2개 이상 (InsufficientLines)
2. 모든 라인에 계정 코드/계정명 (MissingAccountReference)
3. 모든 라인이 단면 (AmbiguousLineSign)
4. |차변 합계 - 대변 합계| < ε (Unbalanced)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from accounting.constants import Tolerance
from accounting.ledger.entry import ZERO, JournalEntry
from accounting.ledger.errors import (
    AmbiguousLineSign,
    InsufficientLines,
    MissingAccountReference,
    Unbalanced,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_LINES = 2


@dataclass(frozen=True)
class ValidatedEntry:
    """검증 통과 분개 + 계산된 합계"""

    entry: JournalEntry
    total_debit: Decimal
    total_credit: Decimal


@dataclass(frozen=True)
class ValidationResult:
    """검증 결과 (entry 또는 error 중 하나)"""

    validated: ValidatedEntry | None = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ValidatedEntry:
        """검증된 분개 반환

        Raises:
            ValidationError: 검증 실패 시 담긴 오류
        """
        if self.error is not None:
            raise self.error
        assert self.validated is not None
        return self.validated


class JournalEntryValidator:
    """분개 검증기

    Args:
        tolerance: 균형 허용 오차 (기본 0.01)
    """

    def __init__(self, tolerance: Decimal = Tolerance.EPSILON):
        self.tolerance = tolerance

    def validate(self, candidate: JournalEntry) -> ValidationResult:
        lines = candidate.lines

        if len(lines) < MIN_LINES:
            return self._fail(candidate, InsufficientLines(len(lines)))

        for index, line in enumerate(lines):
            if not (line.account_code or "").strip() or not (line.account_name or "").strip():
                return self._fail(candidate, MissingAccountReference(index))

        for index, line in enumerate(lines):
            if not line.is_single_sided:
                return self._fail(
                    candidate,
                    AmbiguousLineSign(index, line.debit_amount, line.credit_amount),
                )

        total_debit = sum((line.debit_amount for line in lines), ZERO)
        total_credit = sum((line.credit_amount for line in lines), ZERO)

        if abs(total_debit - total_credit) >= self.tolerance:
            return self._fail(candidate, Unbalanced(total_debit, total_credit))

        return ValidationResult(
            validated=ValidatedEntry(
                entry=candidate,
                total_debit=total_debit,
                total_credit=total_credit,
            )
        )

    @staticmethod
    def _fail(candidate: JournalEntry, error: ValidationError) -> ValidationResult:
        logger.debug(f"분개 검증 실패 ({candidate.entry_id}): {error}")
        return ValidationResult(error=error)


_default_validator = JournalEntryValidator()


def validate_entry(entry: JournalEntry) -> ValidationResult:
    """기본 허용 오차로 분개 검증"""
    return _default_validator.validate(entry)
