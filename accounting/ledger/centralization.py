"""
IVA 집계 분개 생성기 (Centralización IVA)

외부에서 계산된 기간 세액 합계(F29 신고서 값)로 균형 분개 1건을 조립한다.
세액 계산은 하지 않는다. 호출자가 준 값을 역할별 계정에 배치하고
납부세액(total_payable) 기본값만 차액으로 채운다.

분개 레이아웃:
    차변 output-tax   매출세액 (output_tax)
    차변 input-tax    PPM (ppm)
    차변 tax-payable  단일세 (single_tax)
    대변 input-tax    매입세액 (input_tax)
    대변 tax-payable  납부세액 (total_payable)
    차변 input-tax    이월 공제액 (파생 납부세액이 음수일 때만)
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from accounting.ledger.chart import ChartLookup
from accounting.ledger.entry import ZERO, JournalEntry, JournalLine, to_decimal
from accounting.ledger.errors import BuildError, LedgerError, MissingAccountRole
from accounting.ledger.validator import JournalEntryValidator
from accounting.types import AccountRole, EntryStatus, EntryType

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
)

PERIOD_PATTERN = re.compile(r"^\d{4}(0[1-9]|1[0-2])$")

REFERENCE_PREFIX = "IVA-CENTRAL-"

# 역할별 기본 계정 (설정 파일로 재정의 가능)
DEFAULT_ROLE_CODES: dict[AccountRole, str] = {
    AccountRole.OUTPUT_TAX: "2.1.3.002",  # IVA Débito Fiscal
    AccountRole.TAX_PAYABLE: "2.1.3.003",  # Impuesto por Pagar
    AccountRole.INPUT_TAX: "1.3.1.001",  # Remanente Crédito Fiscal
}


def format_period(period: str) -> str:
    """YYYYMM → "Mes Año" (형식이 다르면 원문 반환)

    Example:
        >>> format_period("202403")
        'Marzo 2024'
    """
    if not period or not PERIOD_PATTERN.match(period):
        return period
    return f"{MONTH_NAMES[int(period[4:6]) - 1]} {period[:4]}"


def period_end(period: str) -> date:
    """기간 말일"""
    year, month = int(period[:4]), int(period[4:6])
    return date(year, month, calendar.monthrange(year, month)[1])


@dataclass(frozen=True)
class TaxTotals:
    """기간 세액 합계 (F29 신고서 값)

    total_payable이 None이면 output_tax - input_tax + ppm + single_tax로 유도.
    """

    period: str
    output_tax: Decimal = ZERO
    input_tax: Decimal = ZERO
    single_tax: Decimal = ZERO
    ppm: Decimal = ZERO
    total_payable: Decimal | None = None

    def __post_init__(self) -> None:
        if not PERIOD_PATTERN.match(self.period or ""):
            raise ValueError(f"기간은 YYYYMM 형식이어야 합니다: {self.period!r}")

        for name in ("output_tax", "input_tax", "single_tax", "ppm"):
            value = to_decimal(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name}은(는) 음수일 수 없습니다: {value}")
            object.__setattr__(self, name, value)

        if self.total_payable is not None:
            object.__setattr__(self, "total_payable", to_decimal(self.total_payable))

    @property
    def determined_tax(self) -> Decimal:
        """IVA 확정액 (매출세액 - 매입세액)"""
        return self.output_tax - self.input_tax

    @property
    def derived_payable(self) -> Decimal:
        return self.determined_tax + self.ppm + self.single_tax

    @property
    def payable(self) -> Decimal:
        """분개에 사용할 납부세액 (명시값 우선)"""
        if self.total_payable is not None:
            return self.total_payable
        return self.derived_payable

    @property
    def carry_forward(self) -> Decimal:
        """이월 공제액 (명시 납부세액이 없고 파생값이 음수일 때)"""
        if self.total_payable is not None or self.derived_payable >= 0:
            return ZERO
        return -self.derived_payable

    @property
    def result_type(self) -> str:
        """"payable" (납부) 또는 "carry_forward" (이월)"""
        return "payable" if self.output_tax > self.input_tax else "carry_forward"


@dataclass(frozen=True)
class AccountRef:
    """역할에 매핑된 계정"""

    code: str
    name: str


@dataclass(frozen=True)
class AccountRoleMap:
    """계정 역할 → 계정"""

    accounts: Mapping[AccountRole, AccountRef] = field(default_factory=dict)

    @classmethod
    def create(cls, mapping: Mapping[AccountRole | str, AccountRef | tuple[str, str]]) -> AccountRoleMap:
        """("output-tax": ("2.1.3.002", "IVA Débito Fiscal")) 형태도 허용"""
        accounts = {}
        for role, ref in mapping.items():
            if not isinstance(ref, AccountRef):
                ref = AccountRef(*ref)
            accounts[AccountRole(role)] = ref
        return cls(accounts=accounts)

    @classmethod
    def from_chart(
        cls,
        chart: ChartLookup,
        role_codes: Mapping[AccountRole, str] | None = None,
    ) -> AccountRoleMap:
        """계정과목표에서 활성 계정을 찾아 역할 매핑 (없는 역할은 생략)"""
        role_codes = role_codes or DEFAULT_ROLE_CODES
        accounts = {}
        for role, code in role_codes.items():
            account = chart.get(code)
            if account is not None and account.is_active:
                accounts[AccountRole(role)] = AccountRef(account.code, account.name)
        return cls(accounts=accounts)

    def get(self, role: AccountRole) -> AccountRef | None:
        return self.accounts.get(role)

    def missing_roles(self) -> list[AccountRole]:
        return [role for role in AccountRole if role not in self.accounts]


@dataclass(frozen=True)
class BuildResult:
    """생성 결과 (entry 또는 error 중 하나)"""

    entry: JournalEntry | None = None
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> JournalEntry:
        """
        Raises:
            LedgerError: MissingAccountRole 또는 검증 오류
        """
        if self.error is not None:
            raise self.error
        assert self.entry is not None
        return self.entry

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "error": self.error.to_dict()}
        return {"ok": True, "entry_id": self.entry.entry_id}


class CentralizationEntryBuilder:
    """IVA 집계 분개 생성기

    Args:
        validator: 분개 검증기 (None이면 기본 허용 오차)
    """

    def __init__(self, validator: JournalEntryValidator | None = None):
        self.validator = validator or JournalEntryValidator()

    def build(
        self,
        tax_totals: TaxTotals,
        account_map: AccountRoleMap,
        entry_date: date | None = None,
    ) -> BuildResult:
        """세액 합계 → 초안 분개

        Args:
            tax_totals: 기간 세액 합계
            account_map: 역할별 계정
            entry_date: 분개 일자 (None이면 기간 말일)
        """
        missing = account_map.missing_roles()
        if missing:
            error: BuildError = MissingAccountRole(missing[0].value)
            logger.warning(f"IVA 집계 분개 생성 불가: {error}")
            return BuildResult(error=error)

        label = format_period(tax_totals.period)
        output_account = account_map.get(AccountRole.OUTPUT_TAX)
        input_account = account_map.get(AccountRole.INPUT_TAX)
        payable_account = account_map.get(AccountRole.TAX_PAYABLE)

        layout = [
            (output_account, "debit", tax_totals.output_tax, f"Centralizar IVA Débito {label}"),
            (input_account, "debit", tax_totals.ppm, f"PPM {label}"),
            (payable_account, "debit", tax_totals.single_tax, f"Impuesto Único {label}"),
            (input_account, "credit", tax_totals.input_tax, f"Centralizar IVA Crédito {label}"),
            (payable_account, "credit", tax_totals.payable, f"Impuesto por pagar {label}"),
            (input_account, "debit", tax_totals.carry_forward, f"Remanente Crédito Fiscal {label}"),
        ]

        lines = []
        for account, side, amount, description in layout:
            # 0 이하 금액 라인은 생략
            if amount <= 0:
                continue
            factory = JournalLine.debit if side == "debit" else JournalLine.credit
            lines.append(factory(account.code, account.name, amount, description=description))

        entry = JournalEntry.create(
            entry_date or period_end(tax_totals.period),
            lines,
            description=f"Centralización IVA {label}",
            reference=f"{REFERENCE_PREFIX}{tax_totals.period}",
            entry_type=EntryType.TAX_FORM,
            status=EntryStatus.DRAFT,
        )

        result = self.validator.validate(entry)
        if not result.ok:
            logger.warning(f"IVA 집계 분개 검증 실패 ({tax_totals.period}): {result.error}")
            return BuildResult(error=result.error)

        logger.info(
            f"IVA 집계 분개 생성: {tax_totals.period} "
            f"라인={len(lines)} 차변={entry.total_debit} 대변={entry.total_credit}"
        )
        return BuildResult(entry=entry)


def build_centralization_entry(
    tax_totals: TaxTotals,
    account_map: AccountRoleMap,
    entry_date: date | None = None,
) -> BuildResult:
    """세액 합계 → 초안 분개 (기본 검증기)"""
    return CentralizationEntryBuilder().build(tax_totals, account_map, entry_date)
