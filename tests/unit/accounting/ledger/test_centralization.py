"""CentralizationEntryBuilder 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.ledger.centralization import (
    AccountRef,
    AccountRoleMap,
    CentralizationEntryBuilder,
    TaxTotals,
    build_centralization_entry,
    format_period,
    period_end,
)
from accounting.ledger.chart import Account, ChartOfAccounts
from accounting.ledger.errors import InsufficientLines, MissingAccountRole, Unbalanced
from accounting.types import AccountRole, EntryStatus, EntryType


@pytest.fixture
def account_map() -> AccountRoleMap:
    return AccountRoleMap.create({
        "output-tax": ("2.1.3.002", "IVA Débito Fiscal"),
        "tax-payable": ("2.1.3.003", "Impuesto por Pagar"),
        "input-tax": ("1.3.1.001", "Remanente Crédito Fiscal"),
    })


def _amounts(entry, code: str) -> tuple[Decimal, Decimal]:
    debit = sum((l.debit_amount for l in entry.lines if l.account_code == code), Decimal("0"))
    credit = sum((l.credit_amount for l in entry.lines if l.account_code == code), Decimal("0"))
    return debit, credit


class TestPeriodHelpers:
    """기간 표시 테스트"""

    @pytest.mark.parametrize(
        "period, expected",
        [
            ("202403", "Marzo 2024"),
            ("202401", "Enero 2024"),
            ("202312", "Diciembre 2023"),
            ("2024-03", "2024-03"),
            ("202413", "202413"),
            ("", ""),
        ],
    )
    def test_format_period(self, period: str, expected: str) -> None:
        assert format_period(period) == expected

    def test_period_end(self) -> None:
        assert period_end("202402") == date(2024, 2, 29)
        assert period_end("202311") == date(2023, 11, 30)


class TestTaxTotals:
    """TaxTotals 테스트"""

    def test_derived_payable(self) -> None:
        totals = TaxTotals("202403", output_tax="190000", input_tax="100000", ppm="5000")

        assert totals.determined_tax == Decimal("90000")
        assert totals.payable == Decimal("95000")
        assert totals.carry_forward == Decimal("0")
        assert totals.result_type == "payable"

    def test_explicit_payable_preferred(self) -> None:
        totals = TaxTotals("202403", output_tax="190000", input_tax="100000", total_payable="80000")

        assert totals.payable == Decimal("80000")

    def test_carry_forward(self) -> None:
        totals = TaxTotals("202403", output_tax="50000", input_tax="80000")

        assert totals.derived_payable == Decimal("-30000")
        assert totals.carry_forward == Decimal("30000")
        assert totals.result_type == "carry_forward"

    def test_invalid_period(self) -> None:
        with pytest.raises(ValueError):
            TaxTotals("2024-03")

    def test_negative_amount(self) -> None:
        with pytest.raises(ValueError):
            TaxTotals("202403", output_tax="-1")


class TestAccountRoleMap:
    """AccountRoleMap 테스트"""

    def test_from_chart(self, chart: ChartOfAccounts) -> None:
        account_map = AccountRoleMap.from_chart(chart)

        assert account_map.missing_roles() == []
        assert account_map.get(AccountRole.OUTPUT_TAX) == AccountRef("2.1.3.002", "IVA Débito Fiscal")

    def test_from_chart_skips_inactive(self) -> None:
        chart = ChartOfAccounts([
            Account("2.1.3.002", "IVA Débito Fiscal"),
            Account("2.1.3.003", "Impuesto por Pagar", is_active=False),
        ])

        account_map = AccountRoleMap.from_chart(chart)

        assert account_map.missing_roles() == [AccountRole.INPUT_TAX, AccountRole.TAX_PAYABLE]

    def test_custom_role_codes(self, chart: ChartOfAccounts) -> None:
        account_map = AccountRoleMap.from_chart(
            chart, {AccountRole.OUTPUT_TAX: "2.1.1.001"}
        )

        assert account_map.get(AccountRole.OUTPUT_TAX).name == "Proveedores"
        assert AccountRole.INPUT_TAX in account_map.missing_roles()


class TestBuild:
    """분개 생성 테스트"""

    def test_payable_period(self, account_map: AccountRoleMap) -> None:
        totals = TaxTotals("202403", output_tax="190000", input_tax="100000", ppm="5000")

        result = build_centralization_entry(totals, account_map)

        assert result.ok
        entry = result.unwrap()
        assert entry.is_balanced()
        assert entry.total_debit == Decimal("195000")
        assert entry.entry_type == EntryType.TAX_FORM
        assert entry.status == EntryStatus.DRAFT
        assert entry.reference == "IVA-CENTRAL-202403"
        assert entry.description == "Centralización IVA Marzo 2024"
        assert entry.entry_date == date(2024, 3, 31)

        assert _amounts(entry, "2.1.3.002") == (Decimal("190000"), Decimal("0"))
        assert _amounts(entry, "1.3.1.001") == (Decimal("5000"), Decimal("100000"))
        assert _amounts(entry, "2.1.3.003") == (Decimal("0"), Decimal("95000"))

    def test_line_descriptions(self, account_map: AccountRoleMap) -> None:
        totals = TaxTotals("202403", output_tax="1900", input_tax="1000")

        entry = build_centralization_entry(totals, account_map).unwrap()

        assert [line.description for line in entry.lines] == [
            "Centralizar IVA Débito Marzo 2024",
            "Centralizar IVA Crédito Marzo 2024",
            "Impuesto por pagar Marzo 2024",
        ]

    def test_single_tax(self, account_map: AccountRoleMap) -> None:
        totals = TaxTotals("202403", output_tax="1900", input_tax="1000", single_tax="300")

        entry = build_centralization_entry(totals, account_map).unwrap()

        assert _amounts(entry, "2.1.3.003") == (Decimal("300"), Decimal("1200"))
        assert entry.is_balanced()

    def test_carry_forward_period(self, account_map: AccountRoleMap) -> None:
        """매입세액이 더 크면 이월 공제액 차변"""
        totals = TaxTotals("202403", output_tax="50000", input_tax="80000")

        entry = build_centralization_entry(totals, account_map).unwrap()

        assert entry.is_balanced()
        assert _amounts(entry, "1.3.1.001") == (Decimal("30000"), Decimal("80000"))
        assert _amounts(entry, "2.1.3.003") == (Decimal("0"), Decimal("0"))
        assert entry.lines[-1].description == "Remanente Crédito Fiscal Marzo 2024"

    def test_explicit_payable_mismatch_unbalanced(self, account_map: AccountRoleMap) -> None:
        totals = TaxTotals("202403", output_tax="190000", input_tax="100000", total_payable="80000")

        result = build_centralization_entry(totals, account_map)

        assert not result.ok
        assert isinstance(result.error, Unbalanced)
        assert result.error.difference == Decimal("10000")
        with pytest.raises(Unbalanced):
            result.unwrap()

    def test_missing_role(self) -> None:
        account_map = AccountRoleMap.create({"output-tax": ("2.1.3.002", "IVA Débito Fiscal")})
        totals = TaxTotals("202403", output_tax="100")

        result = build_centralization_entry(totals, account_map)

        assert isinstance(result.error, MissingAccountRole)
        assert result.error.role == "input-tax"
        assert result.to_dict()["error"]["kind"] == "MissingAccountRole"

    def test_all_zero_insufficient_lines(self, account_map: AccountRoleMap) -> None:
        result = build_centralization_entry(TaxTotals("202403"), account_map)

        assert isinstance(result.error, InsufficientLines)

    def test_custom_entry_date(self, account_map: AccountRoleMap) -> None:
        totals = TaxTotals("202403", output_tax="100", input_tax="40")

        entry = CentralizationEntryBuilder().build(
            totals, account_map, entry_date=date(2024, 4, 12)
        ).unwrap()

        assert entry.entry_date == date(2024, 4, 12)
