"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum


class MajorClass(str, Enum):
    """계정 대분류 (계정 코드 첫 세그먼트로 결정)"""

    ASSET = "asset"  # 자산 (1)
    LIABILITY = "liability"  # 부채 (2)
    EQUITY = "equity"  # 자본 (3)
    INCOME = "income"  # 수익 (4)
    EXPENSE = "expense"  # 비용 (5, 6)
    OTHER = "other"  # 분류 불가 (표에 없는 접두사)


class EntryStatus(str, Enum):
    """분개 상태

    전이 규칙:
    - draft → approved: 승인
    - approved → reversed: 역분개 (삭제 대신 상태 변경)
    """

    DRAFT = "draft"
    APPROVED = "approved"
    REVERSED = "reversed"


class EntryType(str, Enum):
    """분개 출처 유형"""

    MANUAL = "manual"  # 수기 입력
    IMPORTED_REGISTER = "imported-purchase-sales-register"  # 매입/매출 장부 가져오기
    TAX_FORM = "tax-form"  # 세무 신고서 (F29 등)
    AUTOMATIC = "automatic"  # 시스템 자동 생성


class WorksheetColumn(str, Enum):
    """8열 정산표 최종 분류 컬럼"""

    INCOME_STATEMENT_DEBIT = "income_statement_debit"  # 손실
    INCOME_STATEMENT_CREDIT = "income_statement_credit"  # 이익
    BALANCE_SHEET_DEBIT = "balance_sheet_debit"  # 자산
    BALANCE_SHEET_CREDIT = "balance_sheet_credit"  # 부채/자본


class OverrideCondition(str, Enum):
    """예외 규칙 적용 조건 (수정 후 잔액 방향)"""

    DEBIT_BALANCE = "debit_balance"
    CREDIT_BALANCE = "credit_balance"


class AccountRole(str, Enum):
    """IVA 집계 분개에서 사용하는 계정 역할"""

    OUTPUT_TAX = "output-tax"  # IVA 매출세액 (Débito Fiscal)
    INPUT_TAX = "input-tax"  # IVA 매입세액 / 이월 공제액 (Remanente Crédito Fiscal)
    TAX_PAYABLE = "tax-payable"  # 납부할 세액 (Impuesto por Pagar)


class RemovalMode(str, Enum):
    """계정 삭제 방식"""

    SOFT = "soft"  # 비활성화 (전기 내역 또는 하위 계정 존재)
    HARD = "hard"  # 물리 삭제


@dataclass(frozen=True)
class Scope:
    """테넌트 범위 (불변)

    모든 저장소 호출에 명시적으로 전달되는 회사 컨텍스트
    """

    company_id: str

    @classmethod
    def create(cls, company_id: str) -> "Scope":
        """Scope 생성 헬퍼

        공백 제거 후 빈 문자열이면 ValueError
        """
        company_id = (company_id or "").strip()
        if not company_id:
            raise ValueError("company_id는 비어 있을 수 없습니다")
        return cls(company_id=company_id)
