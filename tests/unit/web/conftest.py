"""
Web API 테스트 fixture

임시 DB와 임시 설정으로 의존성을 교체한 비동기 HTTP 클라이언트
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from accounting.config.loader import Settings
from adapters.db.sqlite_adapter import SQLiteAdapter
from web.app import app
from web.dependencies import get_app_settings, get_db, get_db_write


@pytest_asyncio.fixture
async def client(db: SQLiteAdapter, settings: Settings) -> AsyncClient:
    """의존성이 교체된 API 클라이언트 (lifespan 미실행)"""

    async def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_db_write] = override_db
    app.dependency_overrides[get_app_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded_client(client: AsyncClient) -> AsyncClient:
    """기본 계정과목표가 입력된 company-a"""
    response = await client.post(
        "/api/chart-of-accounts/defaults", params={"company_id": "company-a"}
    )
    assert response.status_code == 200
    return client
