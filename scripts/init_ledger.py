#!/usr/bin/env python3
"""
원장 DB 초기화 스크립트

스키마 생성 후 지정한 회사에 기본 계정과목표를 입력한다.
이미 계정이 있는 회사는 건너뛴다.

실행 방법:
    python scripts/init_ledger.py --company demo
    python scripts/init_ledger.py --company demo --config config/accounting.yaml
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from accounting.config.loader import get_settings
from accounting.ledger.schema import init_ledger_schema
from accounting.ledger.store import LedgerStore
from accounting.logging import setup_logging
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def main(company_id: str, config_path: Path | None = None) -> int:
    settings = get_settings(config_path)
    scope = Scope.create(company_id)

    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)

        store = LedgerStore(db)
        inserted = await store.ensure_default_chart(scope)
        accounts = await store.list_accounts(scope)
        entries = await store.count_entries(scope)

    logger.info(
        "원장 초기화 완료",
        extra={"company_id": scope.company_id, "inserted": inserted},
    )

    print(f"DB Path: {settings.db_path}")
    print(f"Company: {scope.company_id}")
    print(f"Accounts inserted: {inserted}")
    print(f"Active accounts: {len(accounts)}")
    print(f"Journal entries: {entries}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="원장 DB 초기화 및 기본 계정과목표 입력")
    parser.add_argument("--company", required=True, help="회사 ID")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="accounting.yaml 경로 (기본: config/accounting.yaml)",
    )
    args = parser.parse_args()

    setup_logging("init_ledger")
    sys.exit(asyncio.run(main(args.company, args.config)))
