"""
원장 집계기 (General Ledger)

전기된 분개 스냅샷에서 계정별 거래 내역, 합계, 누적 잔액을 계산한다.
증분 갱신 없음: 분개 집합이 바뀌면 전체를 다시 계산.

잔액 부호: 차변 양수 (balance = total_debit - total_credit).
자산/비용 계정은 보통 양수, 부채/자본/수익 계정은 보통 음수.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from accounting.constants import Tolerance
from accounting.ledger.chart import ChartLookup
from accounting.ledger.codes import code_sort_key, ordering_conflicts
from accounting.ledger.entry import ZERO, JournalEntry, JournalLine, to_date, to_decimal
from accounting.types import EntryType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerFilter:
    """원장 조회 필터 (모든 날짜 경계 포함)"""

    date_from: date | None = None
    date_to: date | None = None
    account_code: str | None = None

    @classmethod
    def create(
        cls,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        account_code: str | None = None,
    ) -> LedgerFilter:
        return cls(
            date_from=to_date(date_from) if date_from else None,
            date_to=to_date(date_to) if date_to else None,
            account_code=account_code or None,
        )

    def includes_date(self, value: date) -> bool:
        if self.date_from is not None and value < self.date_from:
            return False
        if self.date_to is not None and value > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class Movement:
    """계정 거래 내역 1건"""

    date: date
    entry_number: int | None
    entry_id: str
    description: str
    reference: str | None
    entry_type: EntryType
    debit: Decimal
    credit: Decimal
    running_balance: Decimal


@dataclass(frozen=True)
class LedgerAccountAggregate:
    """계정별 원장 (파생값, 저장하지 않음)"""

    account_code: str
    account_name: str
    movements: tuple[Movement, ...]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_debit - self.total_credit


@dataclass(frozen=True)
class LedgerSummary:
    """원장 요약"""

    total_accounts: int
    total_debit: Decimal
    total_credit: Decimal
    balance_check: bool


@dataclass(frozen=True)
class TrialBalanceLine:
    """시산표 1행 (계정별 총액)"""

    account_code: str
    debit: Decimal
    credit: Decimal
    account_name: str | None = None

    @classmethod
    def coerce(cls, item: TrialBalanceLine | tuple) -> TrialBalanceLine:
        """(code, debit, credit[, name]) 튜플 허용 (None 금액은 0)"""
        if isinstance(item, TrialBalanceLine):
            return item
        code, debit, credit, *rest = item
        return cls(
            account_code=code,
            debit=to_decimal(debit),
            credit=to_decimal(credit),
            account_name=rest[0] if rest else None,
        )


def _movement_order(pair: tuple[JournalEntry, int, JournalLine]) -> tuple:
    entry, index, _ = pair
    # entry_number 미지정 분개는 같은 날짜 내에서 뒤로
    number = entry.entry_number if entry.entry_number is not None else float("inf")
    return (entry.entry_date, number, entry.entry_id, index)


class LedgerAggregator:
    """원장 집계기

    Args:
        chart: 계정명 조회용 (선택). 없는 계정은 라인의 스냅샷 계정명 사용.
    """

    def __init__(self, chart: ChartLookup | None = None):
        self.chart = chart

    def aggregate(
        self,
        entries: Iterable[JournalEntry],
        ledger_filter: LedgerFilter | None = None,
    ) -> list[LedgerAccountAggregate]:
        ledger_filter = ledger_filter or LedgerFilter()

        # 1~2. 상태/기간 필터 후 (분개, 라인) 평탄화
        grouped: dict[str, list[tuple[JournalEntry, int, JournalLine]]] = defaultdict(list)
        for entry in entries:
            if not entry.is_posted or not ledger_filter.includes_date(entry.entry_date):
                continue
            for index, line in enumerate(entry.lines):
                if ledger_filter.account_code and line.account_code != ledger_filter.account_code:
                    continue
                grouped[line.account_code].append((entry, index, line))

        # 3~5. 계정별 정렬 + 누적 잔액
        aggregates = [
            self._aggregate_account(code, pairs) for code, pairs in grouped.items()
        ]

        # 6. 계정 코드 순
        aggregates.sort(key=lambda a: code_sort_key(a.account_code))

        conflicts = ordering_conflicts(a.account_code for a in aggregates)
        if conflicts:
            logger.warning(
                f"계정 코드 세그먼트 폭이 섞여 있어 문자열 정렬과 순서가 다릅니다: {conflicts[:5]}"
            )

        logger.debug(f"원장 집계 완료: {len(aggregates)}개 계정")
        return aggregates

    def _aggregate_account(
        self,
        account_code: str,
        pairs: list[tuple[JournalEntry, int, JournalLine]],
    ) -> LedgerAccountAggregate:
        pairs = sorted(pairs, key=_movement_order)

        total_debit = sum((line.debit_amount for _, _, line in pairs), ZERO)
        total_credit = sum((line.credit_amount for _, _, line in pairs), ZERO)

        running = ZERO
        movements = []
        for entry, _, line in pairs:
            running += line.debit_amount - line.credit_amount
            movements.append(
                Movement(
                    date=entry.entry_date,
                    entry_number=entry.entry_number,
                    entry_id=entry.entry_id,
                    description=line.description or entry.description,
                    reference=line.reference or entry.reference,
                    entry_type=entry.entry_type,
                    debit=line.debit_amount,
                    credit=line.credit_amount,
                    running_balance=running,
                )
            )

        return LedgerAccountAggregate(
            account_code=account_code,
            account_name=self._account_name(account_code, pairs),
            movements=tuple(movements),
            total_debit=total_debit,
            total_credit=total_credit,
        )

    def _account_name(
        self,
        account_code: str,
        pairs: list[tuple[JournalEntry, int, JournalLine]],
    ) -> str:
        if self.chart is not None:
            account = self.chart.get(account_code)
            if account is not None:
                return account.name
        # 계정과목표에 없으면 가장 최근 전기 시점의 계정명
        for _, _, line in reversed(pairs):
            if line.account_name:
                return line.account_name
        return account_code


def aggregate_ledger(
    entries: Iterable[JournalEntry],
    ledger_filter: LedgerFilter | None = None,
    chart: ChartLookup | None = None,
) -> list[LedgerAccountAggregate]:
    """분개 스냅샷 → 계정별 원장"""
    return LedgerAggregator(chart).aggregate(entries, ledger_filter)


def summarize(aggregates: Iterable[LedgerAccountAggregate]) -> LedgerSummary:
    """원장 요약 (전체 차변/대변 합계와 균형 여부)"""
    aggregates = list(aggregates)
    total_debit = sum((a.total_debit for a in aggregates), ZERO)
    total_credit = sum((a.total_credit for a in aggregates), ZERO)
    return LedgerSummary(
        total_accounts=len(aggregates),
        total_debit=total_debit,
        total_credit=total_credit,
        balance_check=abs(total_debit - total_credit) < Tolerance.EPSILON,
    )


def to_trial_totals(aggregates: Iterable[LedgerAccountAggregate]) -> list[TrialBalanceLine]:
    """원장 → 시산표 (계정당 1행)"""
    return [
        TrialBalanceLine(
            account_code=a.account_code,
            debit=a.total_debit,
            credit=a.total_credit,
            account_name=a.account_name,
        )
        for a in aggregates
    ]
