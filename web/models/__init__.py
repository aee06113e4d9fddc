"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountRequest,
    IvaCentralizationRequest,
    JournalEntryCreateRequest,
    JournalEntryUpdateRequest,
    JournalLineRequest,
)
from web.models.responses import (
    AccountRemovalResponse,
    AccountResponse,
    CentralizationResponse,
    HealthResponse,
    JournalEntryListResponse,
    JournalEntryResponse,
    JournalLineResponse,
)

__all__ = [
    # Requests
    "AccountRequest",
    "IvaCentralizationRequest",
    "JournalEntryCreateRequest",
    "JournalEntryUpdateRequest",
    "JournalLineRequest",
    # Responses
    "AccountRemovalResponse",
    "AccountResponse",
    "CentralizationResponse",
    "HealthResponse",
    "JournalEntryListResponse",
    "JournalEntryResponse",
    "JournalLineResponse",
]
