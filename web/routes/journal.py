"""
분개(Libro Diario) 라우트

분개 입력/조회/수정/승인/역분개/삭제 API
검증 오류는 app의 예외 핸들러가 400으로 변환 (구조화된 상세 포함)
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from accounting.config.loader import Settings
from accounting.constants import Defaults
from accounting.types import EntryStatus, Scope
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_app_settings, get_db, get_db_write, get_scope, to_scope
from web.models.requests import JournalEntryCreateRequest, JournalEntryUpdateRequest
from web.models.responses import JournalEntryListResponse, JournalEntryResponse
from web.services.journal_service import JournalService

router = APIRouter(prefix="/api/journal", tags=["Journal"])


@router.get("", response_model=JournalEntryListResponse)
async def list_entries(
    scope: Scope = Depends(get_scope),
    date_from: str | None = Query(default=None, description="시작일 (YYYY-MM-DD)"),
    date_to: str | None = Query(default=None, description="종료일 (YYYY-MM-DD)"),
    account_code: str | None = Query(default=None, description="계정 코드"),
    status: EntryStatus | None = Query(default=None, description="상태"),
    limit: int = Query(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """분개 목록 조회 (일자, 번호 순)"""
    service = JournalService(db, settings.tolerance)
    try:
        return await service.list_entries(
            scope, date_from, date_to, account_code, status, limit, offset
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("", response_model=JournalEntryResponse, status_code=201)
async def create_entry(
    request: JournalEntryCreateRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """분개 생성

    차변 합계 = 대변 합계 (허용 오차 0.01), 라인 2개 이상, 라인별 단면.
    회사별 다음 분개 번호가 부여된다.
    """
    service = JournalService(db, settings.tolerance)
    try:
        return await service.create_entry(to_scope(request.company_id), request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(
    entry_id: str = Path(..., description="분개 ID"),
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """분개 단건 조회"""
    service = JournalService(db, settings.tolerance)
    return await service.get_entry(scope, entry_id)


@router.put("/{entry_id}", response_model=JournalEntryResponse)
async def update_entry(
    request: JournalEntryUpdateRequest,
    entry_id: str = Path(..., description="분개 ID"),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """초안 분개 수정 (승인/역분개/가져온 분개는 409)"""
    service = JournalService(db, settings.tolerance)
    return await service.update_entry(to_scope(request.company_id), entry_id, request)


@router.post("/{entry_id}/approve", response_model=JournalEntryResponse)
async def approve_entry(
    entry_id: str = Path(..., description="분개 ID"),
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """분개 승인 (draft → approved)"""
    service = JournalService(db, settings.tolerance)
    return await service.approve_entry(scope, entry_id)


@router.post("/{entry_id}/reverse", response_model=JournalEntryResponse)
async def reverse_entry(
    entry_id: str = Path(..., description="분개 ID"),
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """역분개 (approved → reversed). 원장 집계에서 제외되고 이력은 보존."""
    service = JournalService(db, settings.tolerance)
    return await service.reverse_entry(scope, entry_id)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(
    entry_id: str = Path(..., description="분개 ID"),
    scope: Scope = Depends(get_scope),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """초안 분개 삭제 (승인된 분개는 역분개)"""
    service = JournalService(db, settings.tolerance)
    await service.delete_entry(scope, entry_id)
