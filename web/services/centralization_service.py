"""
IVA 집계 분개 서비스

F29 신고서 값 → 집계 분개 미리보기 또는 저장
역할별 계정은 설정(centralization_roles)의 코드로 회사 계정과목표에서 찾는다.
"""

import logging
from typing import Any

from accounting.config.loader import Settings
from accounting.ledger.centralization import (
    AccountRoleMap,
    CentralizationEntryBuilder,
    TaxTotals,
)
from accounting.ledger.store import LedgerStore
from accounting.ledger.validator import JournalEntryValidator
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.models.requests import IvaCentralizationRequest
from web.services.journal_service import entry_to_dict

logger = logging.getLogger(__name__)


class CentralizationService:
    """IVA 집계 분개 서비스

    Args:
        db: SQLite 어댑터
        settings: 설정 (역할별 계정 코드, 허용 오차)
    """

    def __init__(self, db: SQLiteAdapter, settings: Settings):
        self.db = db
        self.settings = settings
        validator = JournalEntryValidator(settings.tolerance)
        self.store = LedgerStore(db, validator)
        self.builder = CentralizationEntryBuilder(validator)

    async def centralize(
        self,
        scope: Scope,
        request: IvaCentralizationRequest,
    ) -> dict[str, Any]:
        """집계 분개 생성

        Raises:
            ValueError: 기간 형식 오류, 음수 세액
            MissingAccountRole: 역할 계정이 계정과목표에 없음
            ValidationError: 명시 납부세액이 맞지 않아 불균형
        """
        totals = TaxTotals(
            period=request.period,
            output_tax=request.output_tax,
            input_tax=request.input_tax,
            single_tax=request.single_tax,
            ppm=request.ppm,
            total_payable=request.total_payable,
        )

        chart = await self.store.load_chart(scope)
        account_map = AccountRoleMap.from_chart(chart, self.settings.role_codes)

        entry = self.builder.build(totals, account_map, request.entry_date).unwrap()

        if not request.preview:
            entry = await self.store.save_entry(scope, entry)
            logger.info(
                f"IVA 집계 분개 저장: company={scope.company_id} "
                f"{request.period} #{entry.entry_number}"
            )

        return {
            "period": request.period,
            "preview": request.preview,
            "entry": entry_to_dict(entry),
            "calculation": {
                "output_tax": str(totals.output_tax),
                "input_tax": str(totals.input_tax),
                "determined_tax": str(totals.determined_tax),
                "single_tax": str(totals.single_tax),
                "ppm": str(totals.ppm),
                "total_payable": str(totals.payable),
                "carry_forward": str(totals.carry_forward),
                "result_type": totals.result_type,
            },
        }
