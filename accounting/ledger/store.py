"""
원장 저장소

분개/계정과목표 저장 및 조회.
모든 메서드는 Scope(company_id)를 명시적으로 받는다.

불변 규칙:
- 저장 전 JournalEntryValidator 통과 필수 (실패 시 ValidationError 발생)
- 승인된 분개는 삭제하지 않고 역분개(상태 변경)
- 수정/삭제는 draft + 가져오지 않은 분개만 가능
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable

from accounting.ledger.chart import DEFAULT_CHART, Account, ChartOfAccounts, MajorClassTable
from accounting.ledger.codes import AccountCode
from accounting.ledger.entry import JournalEntry, JournalLine, to_date
from accounting.ledger.errors import AccountNotFound, EntryNotEditable, EntryNotFound
from accounting.ledger.schema import seed_chart
from accounting.ledger.validator import JournalEntryValidator
from accounting.types import EntryStatus, MajorClass, RemovalMode, Scope

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = """
    entry_id, entry_number, entry_date, description, reference,
    entry_type, status
"""

LINE_COLUMNS = """
    entry_id, account_code, account_name, debit_amount, credit_amount,
    description, reference
"""

ACCOUNT_COLUMNS = "code, name, account_type, is_postable, parent_code, is_active"

# IN 절 파라미터 분할 크기
ID_CHUNK_SIZE = 500


def _row_to_line(row: tuple[Any, ...]) -> JournalLine:
    return JournalLine(
        account_code=row[1],
        account_name=row[2],
        debit_amount=Decimal(row[3]),
        credit_amount=Decimal(row[4]),
        description=row[5],
        reference=row[6],
    )


def _row_to_entry(row: tuple[Any, ...], lines: Iterable[JournalLine]) -> JournalEntry:
    return JournalEntry(
        entry_id=row[0],
        entry_number=row[1],
        entry_date=to_date(row[2]),
        description=row[3] or "",
        reference=row[4],
        entry_type=row[5],
        status=row[6],
        lines=tuple(lines),
    )


def _row_to_account(row: tuple[Any, ...]) -> Account:
    return Account(
        code=row[0],
        name=row[1],
        account_type=MajorClass(row[2]) if row[2] else None,
        is_postable=bool(row[3]),
        parent_code=row[4],
        is_active=bool(row[5]),
    )


def _entry_filter(
    scope: Scope,
    date_from: date | str | None,
    date_to: date | str | None,
    account_code: str | None,
    statuses: Iterable[EntryStatus | str] | None,
) -> tuple[str, list[Any]] | None:
    """분개 조회 WHERE 절 생성

    Returns:
        (WHERE 절, 파라미터). 빈 상태 필터면 None (결과 없음)
    """
    clauses = ["company_id = ?"]
    params: list[Any] = [scope.company_id]

    if date_from:
        clauses.append("entry_date >= ?")
        params.append(to_date(date_from).isoformat())

    if date_to:
        clauses.append("entry_date <= ?")
        params.append(to_date(date_to).isoformat())

    if account_code:
        clauses.append("entry_id IN (SELECT entry_id FROM journal_line WHERE account_code = ?)")
        params.append(account_code)

    if statuses is not None:
        values = [EntryStatus(s).value for s in statuses]
        if not values:
            return None
        clauses.append(f"status IN ({', '.join('?' for _ in values)})")
        params.extend(values)

    return " AND ".join(clauses), params


class LedgerStore:
    """원장 저장소

    Args:
        db: SQLite 어댑터
        validator: 분개 검증기 (None이면 기본 허용 오차)
    """

    def __init__(self, db: SQLiteAdapter, validator: JournalEntryValidator | None = None):
        self.db = db
        self.validator = validator or JournalEntryValidator()

    # =====================================
    # 분개
    # =====================================

    async def save_entry(self, scope: Scope, entry: JournalEntry) -> JournalEntry:
        """분개 저장

        검증 후 회사별 다음 entry_number를 부여하고
        트랜잭션 내에서 journal_entry + journal_line 저장.

        Args:
            scope: 회사 범위
            entry: 저장할 분개

        Returns:
            entry_number가 부여된 분개

        Raises:
            ValidationError: 검증 실패 (InsufficientLines, Unbalanced 등)
        """
        validated = self.validator.validate(entry).unwrap()

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO journal_entry (
                    entry_id, company_id, entry_number, entry_date,
                    description, reference, entry_type, status,
                    total_debit, total_credit
                ) VALUES (
                    ?, ?,
                    (SELECT COALESCE(MAX(entry_number), 0) + 1
                     FROM journal_entry WHERE company_id = ?),
                    ?, ?, ?, ?, ?, ?, ?
                )
                """,
                (
                    entry.entry_id,
                    scope.company_id,
                    scope.company_id,
                    entry.entry_date.isoformat(),
                    entry.description,
                    entry.reference,
                    entry.entry_type.value,
                    entry.status.value,
                    str(validated.total_debit),
                    str(validated.total_credit),
                ),
            )
            await self._insert_lines(entry)

            entry_number = await self.db.scalar(
                "SELECT entry_number FROM journal_entry WHERE entry_id = ?",
                (entry.entry_id,),
            )

        saved = replace(entry, entry_number=entry_number)
        logger.info(
            f"분개 저장: company={scope.company_id} #{saved.entry_number} "
            f"({saved.entry_id}) 차변={validated.total_debit}"
        )
        return saved

    async def _insert_lines(self, entry: JournalEntry) -> None:
        await self.db.executemany(
            """
            INSERT INTO journal_line (
                entry_id, line_order, account_code, account_name,
                debit_amount, credit_amount, description, reference
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    entry.entry_id,
                    i,
                    line.account_code,
                    line.account_name,
                    str(line.debit_amount),
                    str(line.credit_amount),
                    line.description,
                    line.reference,
                )
                for i, line in enumerate(entry.lines)
            ],
        )

    async def update_entry(
        self,
        scope: Scope,
        entry_id: str,
        entry_date: date | str | None = None,
        lines: Iterable[JournalLine] | None = None,
        description: str | None = None,
        reference: str | None = None,
    ) -> JournalEntry:
        """초안 분개 수정 (None 인자는 기존 값 유지)

        Raises:
            EntryNotFound: 분개 없음
            EntryNotEditable: 승인/역분개/가져온 분개
            ValidationError: 수정 결과 검증 실패
        """
        current = await self._require_entry(scope, entry_id)
        if not current.is_editable:
            raise EntryNotEditable(
                f"수정할 수 없는 분개입니다: {entry_id} "
                f"(status={current.status.value}, type={current.entry_type.value})"
            )

        updated = replace(
            current,
            entry_date=to_date(entry_date) if entry_date else current.entry_date,
            lines=tuple(lines) if lines is not None else current.lines,
            description=description if description is not None else current.description,
            reference=reference if reference is not None else current.reference,
        )
        validated = self.validator.validate(updated).unwrap()

        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE journal_entry
                SET entry_date = ?, description = ?, reference = ?,
                    total_debit = ?, total_credit = ?, updated_at = datetime('now')
                WHERE entry_id = ? AND company_id = ?
                """,
                (
                    updated.entry_date.isoformat(),
                    updated.description,
                    updated.reference,
                    str(validated.total_debit),
                    str(validated.total_credit),
                    entry_id,
                    scope.company_id,
                ),
            )
            await self.db.execute("DELETE FROM journal_line WHERE entry_id = ?", (entry_id,))
            await self._insert_lines(updated)

        logger.info(f"분개 수정: company={scope.company_id} #{updated.entry_number}")
        return updated

    async def get_entry(self, scope: Scope, entry_id: str) -> JournalEntry | None:
        """분개 단건 조회 (없으면 None)"""
        row = await self.db.fetchone(
            f"""
            SELECT {ENTRY_COLUMNS}
            FROM journal_entry
            WHERE entry_id = ? AND company_id = ?
            """,
            (entry_id, scope.company_id),
        )
        if not row:
            return None

        lines = await self.db.fetchall(
            f"""
            SELECT {LINE_COLUMNS}
            FROM journal_line
            WHERE entry_id = ?
            ORDER BY line_order
            """,
            (entry_id,),
        )
        return _row_to_entry(row, (_row_to_line(line) for line in lines))

    async def _require_entry(self, scope: Scope, entry_id: str) -> JournalEntry:
        entry = await self.get_entry(scope, entry_id)
        if entry is None:
            raise EntryNotFound(f"분개를 찾을 수 없습니다: {entry_id}")
        return entry

    async def list_entries(
        self,
        scope: Scope,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        account_code: str | None = None,
        statuses: Iterable[EntryStatus | str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[JournalEntry]:
        """분개 목록 조회 (일자, 번호 순)

        Args:
            scope: 회사 범위
            date_from: 시작일 (포함)
            date_to: 종료일 (포함)
            account_code: 해당 계정 라인이 있는 분개만
            statuses: 상태 필터 (None이면 전체)
            limit: 최대 건수 (None이면 전체)
            offset: 건너뛸 건수
        """
        where = _entry_filter(scope, date_from, date_to, account_code, statuses)
        if where is None:
            return []

        clause, params = where
        sql = f"SELECT {ENTRY_COLUMNS} FROM journal_entry WHERE {clause} ORDER BY entry_date, entry_number"

        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        rows = await self.db.fetchall(sql, tuple(params))
        lines_by_entry = await self._fetch_lines([row[0] for row in rows])

        return [_row_to_entry(row, lines_by_entry.get(row[0], [])) for row in rows]

    async def _fetch_lines(self, entry_ids: list[str]) -> dict[str, list[JournalLine]]:
        result: dict[str, list[JournalLine]] = {}
        for start in range(0, len(entry_ids), ID_CHUNK_SIZE):
            chunk = entry_ids[start:start + ID_CHUNK_SIZE]
            rows = await self.db.fetchall(
                f"""
                SELECT {LINE_COLUMNS}
                FROM journal_line
                WHERE entry_id IN ({', '.join('?' for _ in chunk)})
                ORDER BY entry_id, line_order
                """,
                tuple(chunk),
            )
            for row in rows:
                result.setdefault(row[0], []).append(_row_to_line(row))
        return result

    async def count_entries(
        self,
        scope: Scope,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        account_code: str | None = None,
        statuses: Iterable[EntryStatus | str] | None = None,
    ) -> int:
        """list_entries와 같은 필터의 전체 건수 (페이지 무시)"""
        where = _entry_filter(scope, date_from, date_to, account_code, statuses)
        if where is None:
            return 0

        clause, params = where
        return await self.db.scalar(
            f"SELECT COUNT(*) FROM journal_entry WHERE {clause}",
            params,
            default=0,
        )

    async def _set_status(self, scope: Scope, entry_id: str, target: EntryStatus) -> JournalEntry:
        current = await self._require_entry(scope, entry_id)
        # StateMachineError: 허용되지 않은 전이
        updated = current.with_status(target)

        async with self.db.transaction():
            await self.db.execute(
                """
                UPDATE journal_entry
                SET status = ?, updated_at = datetime('now')
                WHERE entry_id = ? AND company_id = ?
                """,
                (target.value, entry_id, scope.company_id),
            )

        logger.info(
            f"분개 상태 변경: company={scope.company_id} #{updated.entry_number} "
            f"{current.status.value} → {target.value}"
        )
        return updated

    async def approve_entry(self, scope: Scope, entry_id: str) -> JournalEntry:
        """분개 승인 (draft → approved)"""
        return await self._set_status(scope, entry_id, EntryStatus.APPROVED)

    async def reverse_entry(self, scope: Scope, entry_id: str) -> JournalEntry:
        """역분개 (approved → reversed). 이력은 보존되고 원장 집계에서 제외된다."""
        return await self._set_status(scope, entry_id, EntryStatus.REVERSED)

    async def delete_entry(self, scope: Scope, entry_id: str) -> None:
        """초안 분개 물리 삭제

        Raises:
            EntryNotFound: 분개 없음
            EntryNotEditable: 승인/역분개/가져온 분개
        """
        current = await self._require_entry(scope, entry_id)
        if not current.is_editable:
            raise EntryNotEditable(
                f"삭제할 수 없는 분개입니다: {entry_id} "
                f"(status={current.status.value}, type={current.entry_type.value}). "
                f"승인된 분개는 역분개하세요"
            )

        async with self.db.transaction():
            await self.db.execute("DELETE FROM journal_line WHERE entry_id = ?", (entry_id,))
            await self.db.execute(
                "DELETE FROM journal_entry WHERE entry_id = ? AND company_id = ?",
                (entry_id, scope.company_id),
            )

        logger.info(f"분개 삭제: company={scope.company_id} #{current.entry_number}")

    # =====================================
    # 계정과목표
    # =====================================

    async def list_accounts(self, scope: Scope, active_only: bool = True) -> list[Account]:
        """계정 목록 조회 (코드 순)"""
        sql = f"SELECT {ACCOUNT_COLUMNS} FROM chart_of_accounts WHERE company_id = ?"
        if active_only:
            sql += " AND is_active = 1"

        rows = await self.db.fetchall(sql, (scope.company_id,))
        return ChartOfAccounts(_row_to_account(row) for row in rows).accounts(
            active_only=active_only
        )

    async def load_chart(
        self,
        scope: Scope,
        major_classes: MajorClassTable | None = None,
    ) -> ChartOfAccounts:
        """회사 계정과목표 로드 (비활성 계정 포함)"""
        accounts = await self.list_accounts(scope, active_only=False)
        return ChartOfAccounts(accounts, major_classes)

    async def get_account(self, scope: Scope, code: str) -> Account | None:
        row = await self.db.fetchone(
            f"SELECT {ACCOUNT_COLUMNS} FROM chart_of_accounts WHERE company_id = ? AND code = ?",
            (scope.company_id, code),
        )
        return _row_to_account(row) if row else None

    async def save_account(self, scope: Scope, account: Account) -> Account:
        """계정 추가/수정 (코드 기준 upsert)

        Raises:
            ValueError: 잘못된 계정 코드 형식
        """
        AccountCode.parse(account.code)

        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO chart_of_accounts (
                    company_id, code, name, account_type, is_postable, parent_code, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(company_id, code) DO UPDATE SET
                    name = excluded.name,
                    account_type = excluded.account_type,
                    is_postable = excluded.is_postable,
                    parent_code = excluded.parent_code,
                    is_active = excluded.is_active,
                    updated_at = datetime('now')
                """,
                (
                    scope.company_id,
                    account.code,
                    account.name,
                    account.account_type.value if account.account_type else None,
                    int(account.is_postable),
                    account.parent_code,
                    int(account.is_active),
                ),
            )

        logger.info(f"계정 저장: company={scope.company_id} {account.code} {account.name}")
        return account

    async def has_postings(self, scope: Scope, code: str) -> bool:
        """계정에 전기된 라인이 있는지 (역분개 포함)"""
        found = await self.db.scalar(
            """
            SELECT 1
            FROM journal_line jl
            JOIN journal_entry je ON je.entry_id = jl.entry_id
            WHERE je.company_id = ? AND jl.account_code = ?
            LIMIT 1
            """,
            (scope.company_id, code),
        )
        return found is not None

    async def remove_account(self, scope: Scope, code: str) -> RemovalMode:
        """계정 삭제

        전기 내역 또는 하위 계정이 있으면 비활성화, 아니면 물리 삭제.

        Raises:
            AccountNotFound: 계정 없음
        """
        if await self.get_account(scope, code) is None:
            raise AccountNotFound(f"계정을 찾을 수 없습니다: {code}")

        chart = await self.load_chart(scope)
        mode = chart.removal_mode(code, await self.has_postings(scope, code))

        async with self.db.transaction():
            if mode == RemovalMode.SOFT:
                await self.db.execute(
                    """
                    UPDATE chart_of_accounts
                    SET is_active = 0, updated_at = datetime('now')
                    WHERE company_id = ? AND code = ?
                    """,
                    (scope.company_id, code),
                )
            else:
                await self.db.execute(
                    "DELETE FROM chart_of_accounts WHERE company_id = ? AND code = ?",
                    (scope.company_id, code),
                )

        logger.info(f"계정 삭제 ({mode.value}): company={scope.company_id} {code}")
        return mode

    async def ensure_default_chart(self, scope: Scope) -> int:
        """계정이 하나도 없는 회사에 기본 계정과목표 입력

        Returns:
            추가된 계정 수
        """
        existing = await self.db.scalar(
            "SELECT COUNT(*) FROM chart_of_accounts WHERE company_id = ?",
            (scope.company_id,),
            default=0,
        )
        if existing > 0:
            return 0
        return await seed_chart(self.db, scope.company_id, DEFAULT_CHART)
