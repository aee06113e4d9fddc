"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
금액은 문자열 (Decimal 정밀도 유지)
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    database: str = Field(..., description="DB 파일 경로")


class JournalLineResponse(BaseModel):
    """분개 라인 응답"""

    account_code: str = Field(..., description="계정 코드")
    account_name: str = Field(..., description="계정명 (전기 시점)")
    debit_amount: str = Field(..., description="차변 금액")
    credit_amount: str = Field(..., description="대변 금액")
    description: str | None = Field(default=None, description="라인 적요")
    reference: str | None = Field(default=None, description="라인 참조")


class JournalEntryResponse(BaseModel):
    """분개 응답"""

    entry_id: str = Field(..., description="분개 ID")
    entry_number: int | None = Field(default=None, description="회사별 분개 번호")
    entry_date: str = Field(..., description="분개 일자")
    description: str = Field(..., description="적요")
    reference: str | None = Field(default=None, description="참조 번호")
    entry_type: str = Field(..., description="분개 유형")
    status: str = Field(..., description="상태 (draft/approved/reversed)")
    total_debit: str = Field(..., description="차변 합계")
    total_credit: str = Field(..., description="대변 합계")
    is_balanced: bool = Field(..., description="균형 여부")
    lines: list[JournalLineResponse] = Field(default_factory=list, description="라인")


class JournalEntryListResponse(BaseModel):
    """분개 목록 응답"""

    entries: list[JournalEntryResponse] = Field(..., description="분개 목록")
    total: int = Field(..., description="회사 전체 분개 수")
    limit: int = Field(..., description="페이지 크기")
    offset: int = Field(..., description="오프셋")


class AccountResponse(BaseModel):
    """계정 응답"""

    code: str = Field(..., description="계정 코드")
    name: str = Field(..., description="계정명")
    account_type: str = Field(..., description="대분류 (선언값 또는 코드 판정)")
    is_postable: bool = Field(..., description="전기 가능 여부")
    parent_code: str | None = Field(default=None, description="상위 계정 코드")
    is_active: bool = Field(..., description="활성 여부")


class AccountRemovalResponse(BaseModel):
    """계정 삭제 응답"""

    code: str = Field(..., description="계정 코드")
    mode: str = Field(..., description="삭제 방식 (soft: 비활성화, hard: 물리 삭제)")


class CentralizationResponse(BaseModel):
    """IVA 집계 분개 응답"""

    period: str = Field(..., description="기간 (YYYYMM)")
    preview: bool = Field(..., description="미리보기 여부")
    entry: JournalEntryResponse = Field(..., description="생성된 분개")
    calculation: dict[str, Any] = Field(..., description="세액 계산 요약")
