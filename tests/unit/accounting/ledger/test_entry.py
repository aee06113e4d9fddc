"""분개 모델 / 상태 머신 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.ledger.entry import (
    EntryStateMachine,
    JournalEntry,
    JournalLine,
    StateMachineError,
    to_decimal,
)
from accounting.types import EntryStatus, EntryType


def _entry(**kwargs) -> JournalEntry:
    return JournalEntry.create(
        "2024-03-15",
        [
            JournalLine.debit("1.1.1.001", "Caja", "1000"),
            JournalLine.credit("4.1.1.001", "Ventas del Giro", "1000"),
        ],
        **kwargs,
    )


class TestToDecimal:
    """금액 변환 테스트"""

    def test_none_and_empty_are_zero(self) -> None:
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_float_via_str(self) -> None:
        """float는 문자열 경유 변환"""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            to_decimal("abc")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", Decimal("NaN"), float("inf")])
    def test_non_finite_rejected(self, value) -> None:
        """NaN/Infinity는 금액이 아님"""
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_nan_line_rejected_at_construction(self) -> None:
        """검증기까지 가지 않고 라인 생성에서 ValueError"""
        with pytest.raises(ValueError):
            JournalLine("1.1.1.001", "Caja", debit_amount="NaN")


class TestJournalLine:
    """JournalLine 테스트"""

    def test_debit_factory(self) -> None:
        line = JournalLine.debit("1.1.1.001", "Caja", "150.50")

        assert line.debit_amount == Decimal("150.50")
        assert line.credit_amount == Decimal("0")
        assert line.is_single_sided
        assert line.signed_amount == Decimal("150.50")

    def test_credit_signed_amount(self) -> None:
        line = JournalLine.credit("4.1.1.001", "Ventas del Giro", 80)

        assert line.signed_amount == Decimal("-80")

    def test_both_sides_not_single_sided(self) -> None:
        line = JournalLine("1.1.1.001", "Caja", debit_amount="10", credit_amount="5")

        assert not line.is_single_sided

    def test_zero_line_not_single_sided(self) -> None:
        assert not JournalLine("1.1.1.001", "Caja").is_single_sided

    def test_negative_not_single_sided(self) -> None:
        line = JournalLine("1.1.1.001", "Caja", debit_amount="-10")

        assert not line.is_single_sided


class TestJournalEntry:
    """JournalEntry 테스트"""

    def test_date_string_parsed(self) -> None:
        entry = _entry()

        assert entry.entry_date == date(2024, 3, 15)
        assert isinstance(entry.lines, tuple)

    def test_totals_derived(self) -> None:
        entry = _entry()

        assert entry.total_debit == Decimal("1000")
        assert entry.total_credit == Decimal("1000")
        assert entry.is_balanced()

    def test_enum_coercion(self) -> None:
        entry = _entry(entry_type="tax-form", status="approved")

        assert entry.entry_type == EntryType.TAX_FORM
        assert entry.status == EntryStatus.APPROVED

    def test_unique_entry_ids(self) -> None:
        assert _entry().entry_id != _entry().entry_id

    def test_editable_only_draft_non_imported(self) -> None:
        assert _entry().is_editable
        assert not _entry(status=EntryStatus.APPROVED).is_editable
        assert not _entry(entry_type=EntryType.IMPORTED_REGISTER).is_editable

    def test_is_posted_excludes_reversed(self) -> None:
        assert _entry().is_posted
        assert _entry(status=EntryStatus.APPROVED).is_posted
        assert not _entry(status=EntryStatus.REVERSED).is_posted


class TestEntryStateMachine:
    """분개 상태 머신 테스트"""

    def test_draft_to_approved(self) -> None:
        entry = _entry()
        approved = entry.approve()

        assert approved.status == EntryStatus.APPROVED
        assert entry.status == EntryStatus.DRAFT
        assert approved.entry_id == entry.entry_id

    def test_approved_to_reversed(self) -> None:
        reversed_entry = _entry().approve().reverse()

        assert reversed_entry.status == EntryStatus.REVERSED

    def test_draft_to_reversed_fails(self) -> None:
        with pytest.raises(StateMachineError):
            _entry().reverse()

    def test_reversed_is_terminal(self) -> None:
        reversed_entry = _entry().approve().reverse()

        with pytest.raises(StateMachineError):
            reversed_entry.approve()

    @pytest.mark.parametrize(
        "source, target, expected",
        [
            ("draft", "approved", True),
            ("approved", "reversed", True),
            ("draft", "reversed", False),
            ("approved", "draft", False),
            ("reversed", "approved", False),
        ],
    )
    def test_can_transition(self, source: str, target: str, expected: bool) -> None:
        assert EntryStateMachine.can_transition(source, target) is expected
