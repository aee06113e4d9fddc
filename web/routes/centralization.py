"""
IVA 집계 분개 라우트

POST /api/centralization/iva - F29 값으로 집계 분개 미리보기/저장
"""

from fastapi import APIRouter, Depends, HTTPException

from accounting.config.loader import Settings
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_app_settings, get_db_write, to_scope
from web.models.requests import IvaCentralizationRequest
from web.models.responses import CentralizationResponse
from web.services.centralization_service import CentralizationService

router = APIRouter(prefix="/api/centralization", tags=["Centralization"])


@router.post("/iva", response_model=CentralizationResponse)
async def centralize_iva(
    request: IvaCentralizationRequest,
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
):
    """IVA 집계 분개

    preview=true면 저장하지 않고 분개만 반환.
    역할 계정이 없으면 400 (MissingAccountRole), 명시 납부세액 불일치는 400 (Unbalanced).
    """
    service = CentralizationService(db, settings)
    try:
        return await service.centralize(to_scope(request.company_id), request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
