"""
보고서 서비스

원장(Libro Mayor)과 8열 정산표(Balance de 8 Columnas)
매 요청마다 저장된 분개 스냅샷에서 다시 계산한다 (캐시 없음).
"""

import logging
from typing import Any

from accounting.config.loader import Settings
from accounting.ledger.aggregator import (
    LedgerAccountAggregate,
    LedgerFilter,
    aggregate_ledger,
    summarize,
    to_trial_totals,
)
from accounting.ledger.store import LedgerStore
from accounting.ledger.worksheet import AMOUNT_FIELDS, Worksheet, WorksheetClassifier
from accounting.types import EntryStatus, Scope
from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

# 원장 집계 대상 상태 (역분개 제외)
POSTED_STATUSES = (EntryStatus.APPROVED, EntryStatus.DRAFT)


def aggregate_to_dict(aggregate: LedgerAccountAggregate) -> dict[str, Any]:
    return {
        "account_code": aggregate.account_code,
        "account_name": aggregate.account_name,
        "total_debit": str(aggregate.total_debit),
        "total_credit": str(aggregate.total_credit),
        "balance": str(aggregate.balance),
        "movements": [
            {
                "date": m.date.isoformat(),
                "entry_number": m.entry_number,
                "entry_id": m.entry_id,
                "description": m.description,
                "reference": m.reference,
                "entry_type": m.entry_type.value,
                "debit": str(m.debit),
                "credit": str(m.credit),
                "running_balance": str(m.running_balance),
            }
            for m in aggregate.movements
        ],
    }


def worksheet_to_dict(worksheet: Worksheet) -> dict[str, Any]:
    return {
        "rows": [
            {
                "account_code": row.account_code,
                "account_name": row.account_name,
                "major_class": row.major_class.value,
                "in_chart": row.in_chart,
                "override_applied": row.override_applied,
                **{name: str(getattr(row, name)) for name in AMOUNT_FIELDS},
            }
            for row in worksheet.rows
        ],
        "totals": {name: str(getattr(worksheet.totals, name)) for name in AMOUNT_FIELDS},
        "net_income": str(worksheet.net_income),
        "is_balanced": worksheet.is_balanced,
        "violations": [v.to_dict() for v in worksheet.violations],
    }


class ReportService:
    """보고서 서비스

    Args:
        db: SQLite 어댑터
        settings: 설정 (대분류 테이블, 예외 규칙, 허용 오차)
    """

    def __init__(self, db: SQLiteAdapter, settings: Settings):
        self.db = db
        self.settings = settings
        self.store = LedgerStore(db)

    async def _aggregate(
        self,
        scope: Scope,
        date_from: str | None,
        date_to: str | None,
        account_code: str | None = None,
    ):
        ledger_filter = LedgerFilter.create(date_from, date_to, account_code)
        chart = await self.store.load_chart(scope, self.settings.major_classes)
        entries = await self.store.list_entries(
            scope,
            date_from=ledger_filter.date_from,
            date_to=ledger_filter.date_to,
            account_code=ledger_filter.account_code,
            statuses=POSTED_STATUSES,
        )
        return chart, aggregate_ledger(entries, ledger_filter, chart)

    async def general_ledger(
        self,
        scope: Scope,
        date_from: str | None = None,
        date_to: str | None = None,
        account_code: str | None = None,
    ) -> dict[str, Any]:
        """계정별 원장 + 요약"""
        _, aggregates = await self._aggregate(scope, date_from, date_to, account_code)
        summary = summarize(aggregates)

        return {
            "accounts": [aggregate_to_dict(a) for a in aggregates],
            "summary": {
                "total_accounts": summary.total_accounts,
                "total_debit": str(summary.total_debit),
                "total_credit": str(summary.total_credit),
                "balance_check": summary.balance_check,
            },
            "filters": {
                "date_from": date_from,
                "date_to": date_to,
                "account_code": account_code,
            },
        }

    async def build_worksheet(
        self,
        scope: Scope,
        date_from: str | None = None,
        date_to: str | None = None,
        include_accounts: bool = False,
    ) -> Worksheet:
        """8열 정산표 (무결성 위반은 Worksheet.violations에 기록)"""
        chart, aggregates = await self._aggregate(scope, date_from, date_to)
        classifier = WorksheetClassifier(tolerance=self.settings.tolerance)
        worksheet = classifier.classify(
            to_trial_totals(aggregates),
            chart,
            overrides=self.settings.overrides,
            include_accounts=include_accounts,
        )

        if not worksheet.is_balanced:
            logger.error(
                f"정산표 무결성 위반: company={scope.company_id} "
                f"{[v.column for v in worksheet.violations]}"
            )
        return worksheet
