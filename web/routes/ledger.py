"""
원장 보고서 라우트

GET /api/ledger/general-ledger - 계정별 원장 (Libro Mayor)
GET /api/ledger/worksheet      - 8열 정산표 (Balance de 8 Columnas)
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from accounting.config.loader import Settings
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_app_settings, get_db, get_scope
from web.services.report_service import ReportService, worksheet_to_dict

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("/general-ledger")
async def get_general_ledger(
    scope: Scope = Depends(get_scope),
    date_from: str | None = Query(default=None, description="시작일 (YYYY-MM-DD, 포함)"),
    date_to: str | None = Query(default=None, description="종료일 (YYYY-MM-DD, 포함)"),
    account_code: str | None = Query(default=None, description="계정 코드"),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """계정별 원장

    역분개 제외, 일자/분개 번호 순 누적 잔액 (차변 양수).
    """
    service = ReportService(db, settings)
    try:
        return await service.general_ledger(scope, date_from, date_to, account_code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/worksheet")
async def get_worksheet(
    scope: Scope = Depends(get_scope),
    date_from: str | None = Query(default=None, description="시작일 (YYYY-MM-DD, 포함)"),
    date_to: str | None = Query(default=None, description="종료일 (YYYY-MM-DD, 포함)"),
    include_accounts: bool = Query(default=False, description="움직임 없는 계정 포함"),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """8열 정산표

    컬럼 쌍 균형이 깨지면 보고서를 반환하지 않고 422.
    """
    service = ReportService(db, settings)
    try:
        worksheet = await service.build_worksheet(scope, date_from, date_to, include_accounts)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    if not worksheet.is_balanced:
        raise HTTPException(
            status_code=422,
            detail={
                "kind": "WorksheetIntegrityViolation",
                "violations": [v.to_dict() for v in worksheet.violations],
            },
        )

    return worksheet_to_dict(worksheet)
