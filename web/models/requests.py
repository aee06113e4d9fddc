"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증
금액은 Decimal로 받는다 (float 오차 방지). 부호/균형 검증은 원장 코어가 담당.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from accounting.types import EntryStatus, EntryType, MajorClass


class JournalLineRequest(BaseModel):
    """분개 라인 요청"""

    account_code: str = Field(..., description="계정 코드 (예: 1.1.1.001)")
    account_name: str | None = Field(
        default=None,
        description="계정명 (비우면 계정과목표에서 채움)",
    )
    debit_amount: Decimal = Field(default=Decimal("0"), description="차변 금액")
    credit_amount: Decimal = Field(default=Decimal("0"), description="대변 금액")
    description: str | None = Field(default=None, description="라인 적요")
    reference: str | None = Field(default=None, description="라인 참조")


class JournalEntryCreateRequest(BaseModel):
    """분개 생성 요청"""

    company_id: str = Field(..., min_length=1, description="회사 ID")
    entry_date: date = Field(..., description="분개 일자")
    description: str = Field(default="", description="적요")
    reference: str | None = Field(default=None, description="참조 번호")
    entry_type: EntryType = Field(default=EntryType.MANUAL, description="분개 유형")
    status: EntryStatus = Field(
        default=EntryStatus.DRAFT,
        description="초기 상태 (draft 또는 approved)",
    )
    lines: list[JournalLineRequest] = Field(default_factory=list, description="분개 라인")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "company_id": "demo",
                    "entry_date": "2024-03-01",
                    "description": "Venta al contado",
                    "lines": [
                        {"account_code": "1.1.1.001", "debit_amount": "100000"},
                        {"account_code": "4.1.1.001", "credit_amount": "100000"},
                    ],
                }
            ]
        }
    }


class JournalEntryUpdateRequest(BaseModel):
    """분개 수정 요청 (None 필드는 기존 값 유지)"""

    company_id: str = Field(..., min_length=1, description="회사 ID")
    entry_date: date | None = Field(default=None, description="분개 일자")
    description: str | None = Field(default=None, description="적요")
    reference: str | None = Field(default=None, description="참조 번호")
    lines: list[JournalLineRequest] | None = Field(default=None, description="분개 라인 전체")


class AccountRequest(BaseModel):
    """계정 추가/수정 요청"""

    company_id: str = Field(..., min_length=1, description="회사 ID")
    code: str = Field(..., min_length=1, description="계정 코드")
    name: str = Field(..., min_length=1, description="계정명")
    account_type: MajorClass | None = Field(
        default=None,
        description="대분류 (비우면 코드 첫 세그먼트로 판정)",
    )
    is_postable: bool = Field(default=True, description="전기 가능 여부 (요약 계정은 False)")
    parent_code: str | None = Field(default=None, description="상위 계정 코드")
    is_active: bool = Field(default=True, description="활성 여부")


class IvaCentralizationRequest(BaseModel):
    """IVA 집계 분개 요청 (F29 신고서 값)"""

    company_id: str = Field(..., min_length=1, description="회사 ID")
    period: str = Field(..., pattern=r"^\d{6}$", description="기간 (YYYYMM)")
    output_tax: Decimal = Field(default=Decimal("0"), description="IVA 매출세액 (código 538)")
    input_tax: Decimal = Field(default=Decimal("0"), description="IVA 매입세액 (código 537)")
    single_tax: Decimal = Field(default=Decimal("0"), description="단일세 (código 048)")
    ppm: Decimal = Field(default=Decimal("0"), description="PPM (código 062)")
    total_payable: Decimal | None = Field(
        default=None,
        description="납부세액 (비우면 차액으로 계산)",
    )
    entry_date: date | None = Field(default=None, description="분개 일자 (비우면 기간 말일)")
    preview: bool = Field(default=False, description="True면 저장하지 않고 미리보기")
