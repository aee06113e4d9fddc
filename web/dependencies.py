"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import HTTPException, Query

from accounting.config.loader import Settings, get_settings
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    원장/정산표 조회용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    분개 입력/상태 변경, 계정과목표 수정 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


def to_scope(company_id: str) -> Scope:
    """company_id → Scope (비어 있으면 400)"""
    try:
        return Scope.create(company_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def get_scope(
    company_id: str = Query(..., description="회사 ID"),
) -> Scope:
    """쿼리 파라미터의 회사 범위"""
    return to_scope(company_id)
