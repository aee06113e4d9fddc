"""
원장 스키마 초기화

Web 시작 시 자동으로 계정과목표/분개 테이블 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.

모든 테이블은 company_id로 범위가 나뉜다.
금액 컬럼은 TEXT (Decimal 문자열).
"""

import logging
from typing import TYPE_CHECKING, Iterable

from accounting.ledger.chart import DEFAULT_CHART, Account

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

LEDGER_TABLES: tuple[str, ...] = ("chart_of_accounts", "journal_entry", "journal_line")


async def missing_ledger_tables(db: "SQLiteAdapter") -> list[str]:
    """아직 없는 원장 테이블 (LEDGER_TABLES 순서)"""
    rows = await db.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")
    present = {row[0] for row in rows}
    return [name for name in LEDGER_TABLES if name not in present]


async def init_ledger_schema(db: "SQLiteAdapter") -> list[str]:
    """원장 스키마 초기화

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스 (쓰기 연결)

    Returns:
        이번 호출에서 새로 만든 테이블 이름
    """
    missing = await missing_ledger_tables(db)

    async with db.transaction():
        await _create_ledger_tables(db)
        await _create_ledger_indexes(db)

    if missing:
        logger.info(f"원장 스키마 초기화 완료: 생성={missing}")
    else:
        logger.debug("원장 스키마 이미 존재")
    return missing


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """원장 테이블 생성"""

    # chart_of_accounts 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS chart_of_accounts (
            company_id       TEXT NOT NULL,
            code             TEXT NOT NULL,
            name             TEXT NOT NULL,
            account_type     TEXT,
            is_postable      INTEGER NOT NULL DEFAULT 1,
            parent_code      TEXT,
            is_active        INTEGER NOT NULL DEFAULT 1,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (company_id, code)
        )
    """)

    # journal_entry 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entry (
            entry_id         TEXT PRIMARY KEY,
            company_id       TEXT NOT NULL,
            entry_number     INTEGER NOT NULL,
            entry_date       TEXT NOT NULL,
            description      TEXT NOT NULL DEFAULT '',
            reference        TEXT,
            entry_type       TEXT NOT NULL,
            status           TEXT NOT NULL DEFAULT 'draft',
            total_debit      TEXT NOT NULL,
            total_credit     TEXT NOT NULL,
            created_at       TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at       TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE(company_id, entry_number)
        )
    """)

    # journal_line 테이블 (분개 삭제 시 함께 삭제)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_line (
            line_id          INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL,
            line_order       INTEGER NOT NULL DEFAULT 0,
            account_code     TEXT NOT NULL,
            account_name     TEXT NOT NULL,
            debit_amount     TEXT NOT NULL DEFAULT '0',
            credit_amount    TEXT NOT NULL DEFAULT '0',
            description      TEXT,
            reference        TEXT,
            FOREIGN KEY (entry_id) REFERENCES journal_entry(entry_id) ON DELETE CASCADE
        )
    """)


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """조회용 인덱스 생성"""
    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entry_company_date
        ON journal_entry(company_id, entry_date, entry_number)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_entry_company_status
        ON journal_entry(company_id, status)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_line_entry
        ON journal_line(entry_id, line_order)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_journal_line_account
        ON journal_line(account_code)
    """)


async def seed_chart(
    db: "SQLiteAdapter",
    company_id: str,
    accounts: Iterable[Account] = DEFAULT_CHART,
) -> int:
    """회사 계정과목표 초기 데이터 입력

    INSERT OR IGNORE: 이미 있는 코드는 건너뜀.

    Returns:
        새로 추가된 계정 수
    """
    inserted = 0
    async with db.transaction():
        for account in accounts:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO chart_of_accounts (
                    company_id, code, name, account_type, is_postable, parent_code, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    company_id,
                    account.code,
                    account.name,
                    account.account_type.value if account.account_type else None,
                    int(account.is_postable),
                    account.parent_code,
                    int(account.is_active),
                ),
            )
            inserted += cursor.rowcount

    logger.info(f"기본 계정과목표 입력: company={company_id}, 추가={inserted}개")
    return inserted
