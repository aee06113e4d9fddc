"""
계정과목표 서비스

계정 조회/추가/삭제
"""

import logging
from typing import Any

from accounting.config.loader import Settings
from accounting.ledger.chart import Account, ChartOfAccounts
from accounting.ledger.store import LedgerStore
from accounting.types import RemovalMode, Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.models.requests import AccountRequest

logger = logging.getLogger(__name__)


def account_to_dict(account: Account, chart: ChartOfAccounts) -> dict[str, Any]:
    return {
        "code": account.code,
        "name": account.name,
        "account_type": chart.major_class_of(account.code).value,
        "is_postable": account.is_postable,
        "parent_code": account.parent_code,
        "is_active": account.is_active,
    }


class ChartService:
    """계정과목표 서비스

    Args:
        db: SQLite 어댑터
        settings: 설정 (대분류 테이블)
    """

    def __init__(self, db: SQLiteAdapter, settings: Settings):
        self.db = db
        self.settings = settings
        self.store = LedgerStore(db)

    async def list_accounts(self, scope: Scope, active_only: bool = True) -> list[dict[str, Any]]:
        chart = await self.store.load_chart(scope, self.settings.major_classes)
        return [account_to_dict(a, chart) for a in chart.accounts(active_only=active_only)]

    async def save_account(self, scope: Scope, request: AccountRequest) -> dict[str, Any]:
        """
        Raises:
            ValueError: 잘못된 계정 코드 형식
        """
        account = Account(
            code=request.code.strip(),
            name=request.name.strip(),
            account_type=request.account_type,
            is_postable=request.is_postable,
            parent_code=request.parent_code,
            is_active=request.is_active,
        )
        await self.store.save_account(scope, account)
        chart = ChartOfAccounts([account], self.settings.major_classes)
        return account_to_dict(account, chart)

    async def remove_account(self, scope: Scope, code: str) -> RemovalMode:
        return await self.store.remove_account(scope, code)

    async def seed_defaults(self, scope: Scope) -> int:
        """계정이 없는 회사에 기본 계정과목표 입력"""
        return await self.store.ensure_default_chart(scope)
