"""
8열 정산표 분류기 (Balance de 8 Columnas)

시산표 총액을 계정별로 다음 컬럼에 배치한다:
    시산표(차/대) → 수정분개(차/대) → 수정후 잔액(차/대)
    → 손익계산서(손실/이익) → 재무상태표(자산/부채·자본)

분류는 2단계 데이터 테이블로 결정된다.
1. 대분류 테이블: 코드 첫 세그먼트 → MajorClass (MajorClassTable)
2. 예외 규칙 테이블: 특정 계정 + 잔액 방향 → 목표 컬럼 (OverrideRule)
예외 규칙이 먼저 평가되며, 일치하면 기본 라우팅을 대체한다.

사후 조건 (허용 오차 ε):
- Σ 시산표 차변 = Σ 시산표 대변
- Σ 수정분개 차변 = Σ 수정분개 대변
- Σ 수정후 차변 = Σ 수정후 대변
- Σ 손익 차변 + max(순이익, 0) = Σ 손익 대변 + max(-순이익, 0)
- Σ 재무상태표 차변 + max(-순이익, 0) = Σ 재무상태표 대변 + max(순이익, 0)
위반은 Worksheet.violations에 기록되며 ensure_integrity()가 첫 위반을 발생시킨다.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from accounting.constants import Tolerance
from accounting.ledger.aggregator import TrialBalanceLine
from accounting.ledger.chart import ChartLookup, ChartOfAccounts
from accounting.ledger.codes import AccountCode, code_sort_key
from accounting.ledger.entry import ZERO
from accounting.ledger.errors import WorksheetIntegrityViolation
from accounting.types import MajorClass, OverrideCondition, WorksheetColumn

logger = logging.getLogger(__name__)


# 대분류별 기본 라우팅: (차변 잔액 목표, 대변 잔액 목표)
# None은 해당 방향 잔액을 어느 최종 컬럼에도 배치하지 않음 (기여 0)
DEFAULT_ROUTING: dict[MajorClass, tuple[WorksheetColumn | None, WorksheetColumn | None]] = {
    MajorClass.ASSET: (WorksheetColumn.BALANCE_SHEET_DEBIT, None),
    MajorClass.LIABILITY: (None, WorksheetColumn.BALANCE_SHEET_CREDIT),
    MajorClass.EQUITY: (None, WorksheetColumn.BALANCE_SHEET_CREDIT),
    MajorClass.INCOME: (
        WorksheetColumn.INCOME_STATEMENT_DEBIT,
        WorksheetColumn.INCOME_STATEMENT_CREDIT,
    ),
    MajorClass.EXPENSE: (
        WorksheetColumn.INCOME_STATEMENT_DEBIT,
        WorksheetColumn.INCOME_STATEMENT_CREDIT,
    ),
    MajorClass.OTHER: (None, None),
}


@dataclass(frozen=True)
class OverrideRule:
    """계정별 예외 분류 규칙

    예: 이월 공제 세액(자산)이 대변 잔액이면 부채 컬럼으로 재분류.
    """

    account_code: str
    condition: OverrideCondition
    target_column: WorksheetColumn
    include_descendants: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "condition", OverrideCondition(self.condition))
        object.__setattr__(self, "target_column", WorksheetColumn(self.target_column))

    def applies_to(self, account_code: str) -> bool:
        if account_code == self.account_code:
            return True
        if not self.include_descendants:
            return False
        try:
            return AccountCode.parse(account_code).is_descendant_of(
                AccountCode.parse(self.account_code)
            )
        except ValueError:
            return False

    def matches(self, account_code: str, adjusted_debit: Decimal, adjusted_credit: Decimal) -> bool:
        if not self.applies_to(account_code):
            return False
        if self.condition == OverrideCondition.CREDIT_BALANCE:
            return adjusted_credit > 0
        return adjusted_debit > 0


# 기본 예외 규칙: 이월 공제 세액(Remanente Crédito Fiscal)의 대변 잔액은 부채
DEFAULT_OVERRIDES: tuple[OverrideRule, ...] = (
    OverrideRule(
        account_code="1.3.1.001",
        condition=OverrideCondition.CREDIT_BALANCE,
        target_column=WorksheetColumn.BALANCE_SHEET_CREDIT,
    ),
)


@dataclass(frozen=True)
class WorksheetRow:
    """정산표 1행

    최종 4개 컬럼 중 최대 하나만 채워진다.
    """

    account_code: str
    account_name: str
    major_class: MajorClass
    in_chart: bool
    trial_balance_debit: Decimal = ZERO
    trial_balance_credit: Decimal = ZERO
    adjustments_debit: Decimal = ZERO
    adjustments_credit: Decimal = ZERO
    adjusted_balance_debit: Decimal = ZERO
    adjusted_balance_credit: Decimal = ZERO
    income_statement_debit: Decimal = ZERO
    income_statement_credit: Decimal = ZERO
    balance_sheet_debit: Decimal = ZERO
    balance_sheet_credit: Decimal = ZERO
    routed_to: WorksheetColumn | None = None
    override_applied: bool = False


AMOUNT_FIELDS: tuple[str, ...] = (
    "trial_balance_debit",
    "trial_balance_credit",
    "adjustments_debit",
    "adjustments_credit",
    "adjusted_balance_debit",
    "adjusted_balance_credit",
    "income_statement_debit",
    "income_statement_credit",
    "balance_sheet_debit",
    "balance_sheet_credit",
)


@dataclass(frozen=True)
class WorksheetTotals:
    """컬럼별 합계 + 당기순이익"""

    trial_balance_debit: Decimal = ZERO
    trial_balance_credit: Decimal = ZERO
    adjustments_debit: Decimal = ZERO
    adjustments_credit: Decimal = ZERO
    adjusted_balance_debit: Decimal = ZERO
    adjusted_balance_credit: Decimal = ZERO
    income_statement_debit: Decimal = ZERO
    income_statement_credit: Decimal = ZERO
    balance_sheet_debit: Decimal = ZERO
    balance_sheet_credit: Decimal = ZERO

    @classmethod
    def from_rows(cls, rows: Iterable[WorksheetRow]) -> WorksheetTotals:
        sums: dict[str, Decimal] = {name: ZERO for name in AMOUNT_FIELDS}
        for row in rows:
            for name in AMOUNT_FIELDS:
                sums[name] += getattr(row, name)
        return cls(**sums)

    @property
    def net_income(self) -> Decimal:
        """당기순이익 (양수 이익, 음수 손실)"""
        return self.income_statement_credit - self.income_statement_debit


@dataclass(frozen=True)
class Worksheet:
    """8열 정산표"""

    rows: tuple[WorksheetRow, ...]
    totals: WorksheetTotals
    violations: tuple[WorksheetIntegrityViolation, ...] = field(default_factory=tuple)

    @property
    def net_income(self) -> Decimal:
        return self.totals.net_income

    @property
    def is_balanced(self) -> bool:
        return not self.violations

    def row(self, account_code: str) -> WorksheetRow | None:
        for row in self.rows:
            if row.account_code == account_code:
                return row
        return None

    def ensure_integrity(self) -> Worksheet:
        """무결성 위반 시 보고서 생성 중단

        Raises:
            WorksheetIntegrityViolation: 첫 번째 위반
        """
        if self.violations:
            raise self.violations[0]
        return self


def _merge(items: Iterable[TrialBalanceLine | tuple]) -> dict[str, tuple[Decimal, Decimal, str | None]]:
    merged: dict[str, list] = defaultdict(lambda: [ZERO, ZERO, None])
    for item in items:
        line = TrialBalanceLine.coerce(item)
        bucket = merged[line.account_code]
        bucket[0] += line.debit
        bucket[1] += line.credit
        if line.account_name and not bucket[2]:
            bucket[2] = line.account_name
    return {code: (d, c, name) for code, (d, c, name) in merged.items()}


class WorksheetClassifier:
    """8열 정산표 분류기

    Args:
        routing: 대분류별 기본 라우팅 테이블 (None이면 DEFAULT_ROUTING)
        tolerance: 컬럼 균형 허용 오차
    """

    def __init__(
        self,
        routing: Mapping[MajorClass, tuple[WorksheetColumn | None, WorksheetColumn | None]] | None = None,
        tolerance: Decimal = Tolerance.EPSILON,
    ):
        self.routing = dict(routing or DEFAULT_ROUTING)
        self.tolerance = tolerance

    def classify(
        self,
        trial_totals: Iterable[TrialBalanceLine | tuple],
        chart: ChartLookup | None = None,
        overrides: Iterable[OverrideRule] = DEFAULT_OVERRIDES,
        adjustments: Iterable[TrialBalanceLine | tuple] = (),
        include_accounts: bool = False,
    ) -> Worksheet:
        """시산표 → 8열 정산표

        Args:
            trial_totals: 계정별 (코드, 차변 총액, 대변 총액) 목록
            chart: 계정과목표 (없는 코드는 첫 세그먼트로 대분류 합성)
            overrides: 예외 규칙 (순서대로 평가, 첫 일치 적용)
            adjustments: 수정분개 총액 (기본 0)
            include_accounts: 움직임 없는 활성 계정도 0행으로 포함
        """
        chart = chart if chart is not None else ChartOfAccounts()
        overrides = tuple(overrides)

        trial = _merge(trial_totals)
        adjusted = _merge(adjustments)

        codes = set(trial) | set(adjusted)
        if include_accounts:
            codes |= {account.code for account in chart.accounts()}

        rows = [
            self._classify_row(code, trial.get(code), adjusted.get(code), chart, overrides)
            for code in codes
        ]
        rows.sort(key=lambda r: code_sort_key(r.account_code))

        totals = WorksheetTotals.from_rows(rows)
        violations = self._check(totals)

        for violation in violations:
            logger.warning(str(violation))

        logger.debug(
            f"정산표 분류 완료: {len(rows)}개 계정, 순이익={totals.net_income}, "
            f"위반={len(violations)}건"
        )
        return Worksheet(rows=tuple(rows), totals=totals, violations=tuple(violations))

    def _classify_row(
        self,
        code: str,
        trial: tuple[Decimal, Decimal, str | None] | None,
        adjustment: tuple[Decimal, Decimal, str | None] | None,
        chart: ChartLookup,
        overrides: tuple[OverrideRule, ...],
    ) -> WorksheetRow:
        trial_debit, trial_credit, trial_name = trial or (ZERO, ZERO, None)
        adj_debit, adj_credit, adj_name = adjustment or (ZERO, ZERO, None)

        account = chart.get(code)
        name = (account.name if account else None) or trial_name or adj_name or code
        major_class = chart.major_class_of(code)

        # 1. 순잔액 → 수정후 잔액 (항상 단면)
        net = trial_debit + adj_debit - trial_credit - adj_credit
        adjusted_debit = net if net > 0 else ZERO
        adjusted_credit = -net if net < 0 else ZERO

        # 2~4. 예외 규칙 → 기본 라우팅
        target, amount, override_applied = self._route(
            code, major_class, adjusted_debit, adjusted_credit, overrides
        )

        columns: dict[str, Decimal] = {}
        if target is not None and amount > 0:
            columns[target.value] = amount
        else:
            target = None

        return WorksheetRow(
            account_code=code,
            account_name=name,
            major_class=major_class,
            in_chart=account is not None,
            trial_balance_debit=trial_debit,
            trial_balance_credit=trial_credit,
            adjustments_debit=adj_debit,
            adjustments_credit=adj_credit,
            adjusted_balance_debit=adjusted_debit,
            adjusted_balance_credit=adjusted_credit,
            routed_to=target,
            override_applied=override_applied,
            **columns,
        )

    def _route(
        self,
        code: str,
        major_class: MajorClass,
        adjusted_debit: Decimal,
        adjusted_credit: Decimal,
        overrides: tuple[OverrideRule, ...],
    ) -> tuple[WorksheetColumn | None, Decimal, bool]:
        if adjusted_debit == 0 and adjusted_credit == 0:
            return None, ZERO, False

        amount = adjusted_debit if adjusted_debit > 0 else adjusted_credit

        for rule in overrides:
            if rule.matches(code, adjusted_debit, adjusted_credit):
                logger.debug(f"예외 규칙 적용: {code} → {rule.target_column.value}")
                return rule.target_column, amount, True

        debit_target, credit_target = self.routing.get(major_class, (None, None))
        target = debit_target if adjusted_debit > 0 else credit_target
        if target is None:
            logger.info(
                f"기본 라우팅 대상 없음 (기여 0): {code} [{major_class.value}] "
                f"차변잔액={adjusted_debit} 대변잔액={adjusted_credit}"
            )
        return target, amount, False

    def _check(self, totals: WorksheetTotals) -> list[WorksheetIntegrityViolation]:
        net_income = totals.net_income
        profit = max(net_income, ZERO)
        loss = max(-net_income, ZERO)

        pairs = [
            ("trial_balance", totals.trial_balance_debit, totals.trial_balance_credit),
            ("adjustments", totals.adjustments_debit, totals.adjustments_credit),
            ("adjusted_balance", totals.adjusted_balance_debit, totals.adjusted_balance_credit),
            (
                "income_statement",
                totals.income_statement_debit + profit,
                totals.income_statement_credit + loss,
            ),
            (
                "balance_sheet",
                totals.balance_sheet_debit + loss,
                totals.balance_sheet_credit + profit,
            ),
        ]

        return [
            WorksheetIntegrityViolation(column, debit_side, credit_side)
            for column, debit_side, credit_side in pairs
            if abs(debit_side - credit_side) >= self.tolerance
        ]


def classify_worksheet(
    trial_totals: Iterable[TrialBalanceLine | tuple],
    chart: ChartLookup | None = None,
    overrides: Iterable[OverrideRule] = DEFAULT_OVERRIDES,
    adjustments: Iterable[TrialBalanceLine | tuple] = (),
    include_accounts: bool = False,
) -> Worksheet:
    """시산표 → 8열 정산표 (기본 라우팅)"""
    return WorksheetClassifier().classify(
        trial_totals,
        chart=chart,
        overrides=overrides,
        adjustments=adjustments,
        include_accounts=include_accounts,
    )
