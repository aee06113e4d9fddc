"""
원장 오류 분류

검증/분류 오류는 값으로 반환되는 것이 기본이다 (ValidationResult, Worksheet).
모두 Exception을 상속하므로 unwrap() / ensure_integrity()로 발생시킬 수도 있다.
to_dict()는 화면에 정확한 불균형 금액을 보여주기 위한 구조화된 상세를 반환.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """원장 오류 기본 클래스"""

    kind: str = "LedgerError"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": str(self)}


class ValidationError(LedgerError):
    """분개 검증 오류"""

    kind = "ValidationError"


class InsufficientLines(ValidationError):
    """분개 라인이 2개 미만"""

    kind = "InsufficientLines"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(f"분개에는 최소 2개 라인이 필요합니다 (현재 {line_count}개)")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "line_count": self.line_count}


class MissingAccountReference(ValidationError):
    """계정 코드/이름 누락"""

    kind = "MissingAccountReference"

    def __init__(self, line_index: int):
        self.line_index = line_index
        super().__init__(f"라인 {line_index}: 계정 코드 또는 계정명이 없습니다")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "line_index": self.line_index}


class AmbiguousLineSign(ValidationError):
    """차변/대변 중 정확히 하나만 양수여야 함"""

    kind = "AmbiguousLineSign"

    def __init__(self, line_index: int, debit_amount: Decimal, credit_amount: Decimal):
        self.line_index = line_index
        self.debit_amount = debit_amount
        self.credit_amount = credit_amount
        super().__init__(
            f"라인 {line_index}: 차변/대변 중 하나만 양수여야 합니다 "
            f"(차변={debit_amount}, 대변={credit_amount})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "line_index": self.line_index,
            "debit_amount": str(self.debit_amount),
            "credit_amount": str(self.credit_amount),
        }


class Unbalanced(ValidationError):
    """차변 합계 ≠ 대변 합계"""

    kind = "Unbalanced"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.difference = total_debit - total_credit
        super().__init__(
            f"분개 불균형: 차변={total_debit}, 대변={total_credit}, 차이={self.difference}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "total_debit": str(self.total_debit),
            "total_credit": str(self.total_credit),
            "difference": str(self.difference),
        }


class BuildError(LedgerError):
    """집계 분개 생성 오류"""

    kind = "BuildError"


class MissingAccountRole(BuildError):
    """필수 계정 역할이 매핑되지 않음"""

    kind = "MissingAccountRole"

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"계정 역할 '{role}'에 매핑된 계정이 없습니다")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "role": self.role}


class WorksheetIntegrityViolation(LedgerError):
    """정산표 컬럼 쌍 불균형 (보고서 생성 중단 대상)"""

    kind = "WorksheetIntegrityViolation"

    def __init__(self, column: str, expected: Decimal, actual: Decimal):
        self.column = column
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"정산표 무결성 위반 [{column}]: 차변측={expected}, 대변측={actual}, "
            f"차이={expected - actual}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "column": self.column,
            "expected": str(self.expected),
            "actual": str(self.actual),
        }


class EntryNotFound(LedgerError):
    """분개 없음"""

    kind = "EntryNotFound"


class EntryNotEditable(LedgerError):
    """수정/삭제 불가 분개 (승인됨, 역분개됨, 가져온 분개)"""

    kind = "EntryNotEditable"


class AccountNotFound(LedgerError):
    """계정과목표에 없는 계정"""

    kind = "AccountNotFound"
