"""
FastAPI 애플리케이션

라우터 등록, 원장 오류 → HTTP 상태 매핑, 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounting.config.loader import get_settings
from accounting.ledger.entry import StateMachineError
from accounting.ledger.errors import (
    AccountNotFound,
    BuildError,
    EntryNotEditable,
    EntryNotFound,
    LedgerError,
    ValidationError,
    WorksheetIntegrityViolation,
)
from accounting.logging import setup_logging

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import centralization, chart, health, journal, ledger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from accounting.ledger.schema import init_ledger_schema
    from adapters.db.sqlite_adapter import SQLiteAdapter

    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)

    logger.info(f"Web: 원장 DB 준비 완료 ({settings.db_path})")
    yield


app = FastAPI(
    title="PyME Ledger API",
    description="복식부기 원장, 8열 정산표, IVA 집계 분개 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 원장 오류 → HTTP 상태
# =========================================================================

def _status_for(error: LedgerError) -> int:
    if isinstance(error, (ValidationError, BuildError)):
        return 400
    if isinstance(error, (EntryNotFound, AccountNotFound)):
        return 404
    if isinstance(error, EntryNotEditable):
        return 409
    if isinstance(error, WorksheetIntegrityViolation):
        return 422
    return 500


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(f"원장 오류: {exc}", exc_info=exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


@app.exception_handler(StateMachineError)
async def state_machine_error_handler(request: Request, exc: StateMachineError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"detail": {"kind": "StateMachineError", "message": str(exc)}},
    )


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(journal.router)
app.include_router(ledger.router)
app.include_router(centralization.router)
app.include_router(chart.router)
