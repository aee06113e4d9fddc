"""
계정과목표 라우트

계정 조회/추가/삭제 API
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from accounting.config.loader import Settings
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_app_settings, get_db, get_db_write, get_scope, to_scope
from web.models.requests import AccountRequest
from web.models.responses import AccountRemovalResponse, AccountResponse
from web.services.chart_service import ChartService

router = APIRouter(prefix="/api/chart-of-accounts", tags=["Chart of Accounts"])


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    scope: Scope = Depends(get_scope),
    active_only: bool = Query(default=True, description="활성 계정만"),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """계정 목록 (코드 순)"""
    service = ChartService(db, settings)
    return await service.list_accounts(scope, active_only)


@router.post("", response_model=AccountResponse, status_code=201)
async def save_account(
    request: AccountRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """계정 추가/수정 (코드 기준)"""
    service = ChartService(db, settings)
    try:
        return await service.save_account(to_scope(request.company_id), request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/defaults")
async def seed_default_accounts(
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """계정이 없는 회사에 기본 계정과목표 입력"""
    service = ChartService(db, settings)
    return {"inserted": await service.seed_defaults(scope)}


@router.delete("/{code}", response_model=AccountRemovalResponse)
async def remove_account(
    code: str = Path(..., description="계정 코드"),
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """계정 삭제

    전기 내역 또는 하위 계정이 있으면 비활성화(soft), 아니면 물리 삭제(hard).
    """
    service = ChartService(db, settings)
    mode = await service.remove_account(scope, code)
    return AccountRemovalResponse(code=code, mode=mode.value)
