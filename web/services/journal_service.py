"""
분개 서비스

분개 입력/수정/승인/역분개/삭제
요청 → JournalEntry 변환 후 LedgerStore에 위임 (검증은 저장소가 수행)
"""

import logging
from decimal import Decimal
from typing import Any

from accounting.constants import Tolerance
from accounting.ledger.chart import ChartOfAccounts
from accounting.ledger.entry import JournalEntry, JournalLine
from accounting.ledger.errors import EntryNotFound
from accounting.ledger.store import LedgerStore
from accounting.ledger.validator import JournalEntryValidator
from accounting.types import EntryStatus, Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.models.requests import (
    JournalEntryCreateRequest,
    JournalEntryUpdateRequest,
    JournalLineRequest,
)

logger = logging.getLogger(__name__)


def line_to_dict(line: JournalLine) -> dict[str, Any]:
    return {
        "account_code": line.account_code,
        "account_name": line.account_name,
        "debit_amount": str(line.debit_amount),
        "credit_amount": str(line.credit_amount),
        "description": line.description,
        "reference": line.reference,
    }


def entry_to_dict(entry: JournalEntry) -> dict[str, Any]:
    """JournalEntry → 응답 dict (금액은 문자열)"""
    return {
        "entry_id": entry.entry_id,
        "entry_number": entry.entry_number,
        "entry_date": entry.entry_date.isoformat(),
        "description": entry.description,
        "reference": entry.reference,
        "entry_type": entry.entry_type.value,
        "status": entry.status.value,
        "total_debit": str(entry.total_debit),
        "total_credit": str(entry.total_credit),
        "is_balanced": entry.is_balanced(),
        "lines": [line_to_dict(line) for line in entry.lines],
    }


class JournalService:
    """분개 서비스

    Args:
        db: SQLite 어댑터
        tolerance: 균형 허용 오차
    """

    def __init__(self, db: SQLiteAdapter, tolerance: Decimal = Tolerance.EPSILON):
        self.db = db
        self.store = LedgerStore(db, JournalEntryValidator(tolerance))

    async def _build_lines(
        self,
        scope: Scope,
        requests: list[JournalLineRequest],
    ) -> list[JournalLine]:
        """요청 라인 → JournalLine (계정명이 비면 계정과목표에서 채움)"""
        chart: ChartOfAccounts | None = None
        if any(not (r.account_name or "").strip() for r in requests):
            chart = await self.store.load_chart(scope)

        lines = []
        for r in requests:
            name = (r.account_name or "").strip()
            if not name and chart is not None:
                account = chart.get(r.account_code)
                name = account.name if account else ""
            lines.append(
                JournalLine(
                    account_code=r.account_code.strip(),
                    account_name=name,
                    debit_amount=r.debit_amount,
                    credit_amount=r.credit_amount,
                    description=r.description,
                    reference=r.reference,
                )
            )
        return lines

    async def create_entry(
        self,
        scope: Scope,
        request: JournalEntryCreateRequest,
    ) -> dict[str, Any]:
        """분개 생성

        Raises:
            ValueError: 초기 상태가 reversed
            ValidationError: 검증 실패
        """
        if request.status == EntryStatus.REVERSED:
            raise ValueError("역분개 상태로 분개를 생성할 수 없습니다")

        entry = JournalEntry.create(
            request.entry_date,
            await self._build_lines(scope, request.lines),
            description=request.description,
            reference=request.reference,
            entry_type=request.entry_type,
            status=request.status,
        )
        saved = await self.store.save_entry(scope, entry)
        return entry_to_dict(saved)

    async def update_entry(
        self,
        scope: Scope,
        entry_id: str,
        request: JournalEntryUpdateRequest,
    ) -> dict[str, Any]:
        lines = None
        if request.lines is not None:
            lines = await self._build_lines(scope, request.lines)

        updated = await self.store.update_entry(
            scope,
            entry_id,
            entry_date=request.entry_date,
            lines=lines,
            description=request.description,
            reference=request.reference,
        )
        return entry_to_dict(updated)

    async def get_entry(self, scope: Scope, entry_id: str) -> dict[str, Any]:
        """
        Raises:
            EntryNotFound: 분개 없음
        """
        entry = await self.store.get_entry(scope, entry_id)
        if entry is None:
            raise EntryNotFound(f"분개를 찾을 수 없습니다: {entry_id}")
        return entry_to_dict(entry)

    async def list_entries(
        self,
        scope: Scope,
        date_from: str | None = None,
        date_to: str | None = None,
        account_code: str | None = None,
        status: EntryStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        """분개 목록 (일자, 번호 순)"""
        entries = await self.store.list_entries(
            scope,
            date_from=date_from,
            date_to=date_to,
            account_code=account_code,
            statuses=[status] if status else None,
            limit=limit,
            offset=offset,
        )
        return {
            "entries": [entry_to_dict(e) for e in entries],
            "total": await self.store.count_entries(
                scope,
                date_from=date_from,
                date_to=date_to,
                account_code=account_code,
                statuses=[status] if status else None,
            ),
            "limit": limit,
            "offset": offset,
        }

    async def approve_entry(self, scope: Scope, entry_id: str) -> dict[str, Any]:
        return entry_to_dict(await self.store.approve_entry(scope, entry_id))

    async def reverse_entry(self, scope: Scope, entry_id: str) -> dict[str, Any]:
        return entry_to_dict(await self.store.reverse_entry(scope, entry_id))

    async def delete_entry(self, scope: Scope, entry_id: str) -> None:
        await self.store.delete_entry(scope, entry_id)
