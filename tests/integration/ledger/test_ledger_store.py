"""LedgerStore 통합 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from accounting.ledger.aggregator import aggregate_ledger
from accounting.ledger.chart import DEFAULT_CHART, Account
from accounting.ledger.entry import JournalEntry, JournalLine, StateMachineError
from accounting.ledger.errors import (
    AccountNotFound,
    EntryNotEditable,
    EntryNotFound,
    InsufficientLines,
    Unbalanced,
)
from accounting.ledger.store import LedgerStore
from accounting.types import EntryStatus, EntryType, MajorClass, RemovalMode, Scope
from adapters.db.sqlite_adapter import SQLiteAdapter


@pytest.fixture
def ledger_store(db: SQLiteAdapter) -> LedgerStore:
    """LedgerStore 인스턴스"""
    return LedgerStore(db)


def _sale(entry_date: str = "2024-03-10", amount: str = "1190", **kwargs) -> JournalEntry:
    """매출 분개 (Caja / Ventas + IVA)"""
    net = (Decimal(amount) / Decimal("1.19")).quantize(Decimal("1"))
    tax = Decimal(amount) - net
    return JournalEntry.create(
        entry_date,
        [
            JournalLine.debit("1.1.1.001", "Caja", amount),
            JournalLine.credit("4.1.1.001", "Ventas del Giro", net),
            JournalLine.credit("2.1.3.002", "IVA Débito Fiscal", tax),
        ],
        description="Venta mostrador",
        **kwargs,
    )


def _rent(entry_date: str = "2024-03-15") -> JournalEntry:
    return JournalEntry.create(
        entry_date,
        [
            JournalLine.debit("5.1.1.002", "Arriendos", "300"),
            JournalLine.credit("1.1.1.002", "Banco Estado", "300"),
        ],
        description="Arriendo oficina",
    )


class TestLedgerStoreSaveEntry:
    """분개 저장 테스트"""

    @pytest.mark.asyncio
    async def test_save_assigns_sequential_numbers(
        self, ledger_store: LedgerStore, scope: Scope
    ) -> None:
        """회사별 entry_number 순차 부여"""
        first = await ledger_store.save_entry(scope, _sale())
        second = await ledger_store.save_entry(scope, _rent())

        assert first.entry_number == 1
        assert second.entry_number == 2

    @pytest.mark.asyncio
    async def test_numbers_isolated_per_company(self, ledger_store: LedgerStore, scope: Scope) -> None:
        other = Scope.create("company-b")

        await ledger_store.save_entry(scope, _sale())
        saved = await ledger_store.save_entry(other, _rent())

        assert saved.entry_number == 1
        assert await ledger_store.get_entry(scope, saved.entry_id) is None
        assert await ledger_store.count_entries(scope) == 1

    @pytest.mark.asyncio
    async def test_round_trip(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """저장 후 조회 시 Decimal 금액 보존"""
        saved = await ledger_store.save_entry(scope, _sale(amount="1190.50"))

        loaded = await ledger_store.get_entry(scope, saved.entry_id)

        assert loaded == saved
        assert loaded.lines[0].debit_amount == Decimal("1190.50")
        assert loaded.entry_date == date(2024, 3, 10)

    @pytest.mark.asyncio
    async def test_reject_unbalanced_entry(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """불균형 분개 거부 (저장되지 않음)"""
        entry = JournalEntry.create(
            "2024-03-01",
            [
                JournalLine.debit("1.1.1.001", "Caja", "100"),
                JournalLine.credit("3.1.1.001", "Capital Pagado", "50"),
            ],
        )

        with pytest.raises(Unbalanced):
            await ledger_store.save_entry(scope, entry)

        assert await ledger_store.count_entries(scope) == 0

    @pytest.mark.asyncio
    async def test_reject_single_line(self, ledger_store: LedgerStore, scope: Scope) -> None:
        entry = JournalEntry.create("2024-03-01", [JournalLine.debit("1.1.1.001", "Caja", "100")])

        with pytest.raises(InsufficientLines):
            await ledger_store.save_entry(scope, entry)


class TestLedgerStoreEditing:
    """분개 수정/삭제/상태 변경 테스트"""

    @pytest.mark.asyncio
    async def test_update_draft(self, ledger_store: LedgerStore, scope: Scope) -> None:
        saved = await ledger_store.save_entry(scope, _rent())

        updated = await ledger_store.update_entry(
            scope,
            saved.entry_id,
            lines=[
                JournalLine.debit("5.1.1.002", "Arriendos", "350"),
                JournalLine.credit("1.1.1.002", "Banco Estado", "350"),
            ],
            description="Arriendo marzo",
        )
        loaded = await ledger_store.get_entry(scope, saved.entry_id)

        assert updated.entry_number == saved.entry_number
        assert loaded.total_debit == Decimal("350")
        assert loaded.description == "Arriendo marzo"
        assert len(loaded.lines) == 2

    @pytest.mark.asyncio
    async def test_update_unbalanced_keeps_original(
        self, ledger_store: LedgerStore, scope: Scope
    ) -> None:
        saved = await ledger_store.save_entry(scope, _rent())

        with pytest.raises(Unbalanced):
            await ledger_store.update_entry(
                scope,
                saved.entry_id,
                lines=[
                    JournalLine.debit("5.1.1.002", "Arriendos", "350"),
                    JournalLine.credit("1.1.1.002", "Banco Estado", "300"),
                ],
            )

        loaded = await ledger_store.get_entry(scope, saved.entry_id)
        assert loaded.total_debit == Decimal("300")

    @pytest.mark.asyncio
    async def test_update_approved_rejected(self, ledger_store: LedgerStore, scope: Scope) -> None:
        saved = await ledger_store.save_entry(scope, _rent())
        await ledger_store.approve_entry(scope, saved.entry_id)

        with pytest.raises(EntryNotEditable):
            await ledger_store.update_entry(scope, saved.entry_id, description="x")

    @pytest.mark.asyncio
    async def test_update_missing(self, ledger_store: LedgerStore, scope: Scope) -> None:
        with pytest.raises(EntryNotFound):
            await ledger_store.update_entry(scope, "missing", description="x")

    @pytest.mark.asyncio
    async def test_delete_draft(self, ledger_store: LedgerStore, scope: Scope, db: SQLiteAdapter) -> None:
        saved = await ledger_store.save_entry(scope, _rent())

        await ledger_store.delete_entry(scope, saved.entry_id)

        assert await ledger_store.get_entry(scope, saved.entry_id) is None
        rows = await db.fetchall(
            "SELECT 1 FROM journal_line WHERE entry_id = ?", (saved.entry_id,)
        )
        assert rows == []

    @pytest.mark.asyncio
    async def test_delete_imported_rejected(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """가져온 분개는 삭제 불가"""
        saved = await ledger_store.save_entry(
            scope, _sale(entry_type=EntryType.IMPORTED_REGISTER)
        )

        with pytest.raises(EntryNotEditable):
            await ledger_store.delete_entry(scope, saved.entry_id)

    @pytest.mark.asyncio
    async def test_approve_then_reverse(self, ledger_store: LedgerStore, scope: Scope) -> None:
        saved = await ledger_store.save_entry(scope, _rent())

        approved = await ledger_store.approve_entry(scope, saved.entry_id)
        reversed_entry = await ledger_store.reverse_entry(scope, saved.entry_id)
        loaded = await ledger_store.get_entry(scope, saved.entry_id)

        assert approved.status == EntryStatus.APPROVED
        assert reversed_entry.status == EntryStatus.REVERSED
        assert loaded.status == EntryStatus.REVERSED

    @pytest.mark.asyncio
    async def test_reverse_draft_rejected(self, ledger_store: LedgerStore, scope: Scope) -> None:
        saved = await ledger_store.save_entry(scope, _rent())

        with pytest.raises(StateMachineError):
            await ledger_store.reverse_entry(scope, saved.entry_id)

    @pytest.mark.asyncio
    async def test_delete_approved_rejected(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """승인된 분개는 역분개만 가능"""
        saved = await ledger_store.save_entry(scope, _rent())
        await ledger_store.approve_entry(scope, saved.entry_id)

        with pytest.raises(EntryNotEditable):
            await ledger_store.delete_entry(scope, saved.entry_id)


class TestLedgerStoreQueries:
    """조회 테스트"""

    @pytest.mark.asyncio
    async def test_list_ordered_by_date(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.save_entry(scope, _rent("2024-03-20"))
        await ledger_store.save_entry(scope, _sale("2024-03-05"))

        entries = await ledger_store.list_entries(scope)

        assert [e.entry_date for e in entries] == [date(2024, 3, 5), date(2024, 3, 20)]
        assert all(len(e.lines) >= 2 for e in entries)

    @pytest.mark.asyncio
    async def test_list_filters(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.save_entry(scope, _sale("2024-02-28"))
        await ledger_store.save_entry(scope, _sale("2024-03-10"))
        rent = await ledger_store.save_entry(scope, _rent("2024-03-15"))
        await ledger_store.approve_entry(scope, rent.entry_id)

        march = await ledger_store.list_entries(scope, date_from="2024-03-01", date_to="2024-03-31")
        by_account = await ledger_store.list_entries(scope, account_code="5.1.1.002")
        approved = await ledger_store.list_entries(scope, statuses=[EntryStatus.APPROVED])
        none = await ledger_store.list_entries(scope, statuses=[])

        assert len(march) == 2
        assert [e.entry_id for e in by_account] == [rent.entry_id]
        assert [e.entry_id for e in approved] == [rent.entry_id]
        assert none == []
        assert await ledger_store.count_entries(scope, date_from="2024-03-01", date_to="2024-03-31") == 2
        assert await ledger_store.count_entries(scope, account_code="5.1.1.002") == 1
        assert await ledger_store.count_entries(scope, statuses=[EntryStatus.APPROVED]) == 1
        assert await ledger_store.count_entries(scope, statuses=[]) == 0
        assert await ledger_store.count_entries(scope) == 3

    @pytest.mark.asyncio
    async def test_list_pagination(self, ledger_store: LedgerStore, scope: Scope) -> None:
        for day in range(1, 6):
            await ledger_store.save_entry(scope, _rent(f"2024-03-{day:02d}"))

        page = await ledger_store.list_entries(scope, limit=2, offset=2)

        assert [e.entry_number for e in page] == [3, 4]

    @pytest.mark.asyncio
    async def test_stored_entries_feed_aggregator(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """저장된 분개 → 원장 집계"""
        await ledger_store.save_entry(scope, _sale("2024-03-10", "1190"))
        await ledger_store.save_entry(scope, _sale("2024-03-12", "2380"))

        aggregates = aggregate_ledger(await ledger_store.list_entries(scope))
        cash = next(a for a in aggregates if a.account_code == "1.1.1.001")

        assert cash.balance == Decimal("3570")
        assert [m.running_balance for m in cash.movements] == [Decimal("1190"), Decimal("3570")]


class TestLedgerStoreChart:
    """계정과목표 저장 테스트"""

    @pytest.mark.asyncio
    async def test_ensure_default_chart(self, ledger_store: LedgerStore, scope: Scope) -> None:
        inserted = await ledger_store.ensure_default_chart(scope)
        again = await ledger_store.ensure_default_chart(scope)

        assert inserted == len(DEFAULT_CHART)
        assert again == 0

    @pytest.mark.asyncio
    async def test_load_chart(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.ensure_default_chart(scope)

        chart = await ledger_store.load_chart(scope)

        assert chart.get("1.3.1.001").name == "Remanente Crédito Fiscal"
        assert chart.major_class_of("2.1.3.002") == MajorClass.LIABILITY
        assert await ledger_store.list_accounts(Scope.create("company-b")) == []

    @pytest.mark.asyncio
    async def test_save_account_upsert(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.save_account(scope, Account("1.1.1.003", "Banco Chile", MajorClass.ASSET))
        await ledger_store.save_account(scope, Account("1.1.1.003", "Banco de Chile", MajorClass.ASSET))

        account = await ledger_store.get_account(scope, "1.1.1.003")

        assert account.name == "Banco de Chile"
        assert account.account_type == MajorClass.ASSET

    @pytest.mark.asyncio
    async def test_save_account_invalid_code(self, ledger_store: LedgerStore, scope: Scope) -> None:
        with pytest.raises(ValueError):
            await ledger_store.save_account(scope, Account("1..3", "Inválida"))

    @pytest.mark.asyncio
    async def test_remove_unused_leaf_hard(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.ensure_default_chart(scope)

        mode = await ledger_store.remove_account(scope, "5.1.1.001")

        assert mode == RemovalMode.HARD
        assert await ledger_store.get_account(scope, "5.1.1.001") is None

    @pytest.mark.asyncio
    async def test_remove_posted_account_soft(self, ledger_store: LedgerStore, scope: Scope) -> None:
        """전기 내역이 있으면 비활성화"""
        await ledger_store.ensure_default_chart(scope)
        await ledger_store.save_entry(scope, _rent())

        mode = await ledger_store.remove_account(scope, "5.1.1.002")
        account = await ledger_store.get_account(scope, "5.1.1.002")
        active_codes = [a.code for a in await ledger_store.list_accounts(scope)]

        assert mode == RemovalMode.SOFT
        assert account.is_active is False
        assert "5.1.1.002" not in active_codes

    @pytest.mark.asyncio
    async def test_remove_summary_account_soft(self, ledger_store: LedgerStore, scope: Scope) -> None:
        await ledger_store.ensure_default_chart(scope)

        assert await ledger_store.remove_account(scope, "5.1.1") == RemovalMode.SOFT

    @pytest.mark.asyncio
    async def test_remove_missing_account(self, ledger_store: LedgerStore, scope: Scope) -> None:
        with pytest.raises(AccountNotFound):
            await ledger_store.remove_account(scope, "9.9.9")
