"""
계정과목표 (Chart of Accounts)

계정 코드 → 계정 메타데이터 조회 테이블과
대분류 판정 테이블 (코드 첫 세그먼트 → MajorClass).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol

from accounting.ledger.codes import AccountCode, code_sort_key, major_segment
from accounting.types import MajorClass, RemovalMode

logger = logging.getLogger(__name__)


# 기본 대분류 테이블 (설정 파일로 재정의 가능)
DEFAULT_MAJOR_CLASSES: dict[str, MajorClass] = {
    "1": MajorClass.ASSET,
    "2": MajorClass.LIABILITY,
    "3": MajorClass.EQUITY,
    "4": MajorClass.INCOME,
    "5": MajorClass.EXPENSE,
    "6": MajorClass.EXPENSE,
}


@dataclass(frozen=True)
class Account:
    """계정

    parent_code는 약한 참조 (소유 관계 아님).
    account_type이 None이면 코드에서 대분류를 유도한다.
    """

    code: str
    name: str
    account_type: MajorClass | None = None
    is_postable: bool = True
    parent_code: str | None = None
    is_active: bool = True

    @property
    def key(self) -> AccountCode:
        return AccountCode.parse(self.code)


class ChartLookup(Protocol):
    """계정 조회 인터페이스

    없는 코드는 None 반환 (예외 금지).
    """

    def get(self, code: str) -> Account | None:
        ...

    def major_class_of(self, code: str) -> MajorClass:
        ...

    def accounts(self, active_only: bool = True) -> list[Account]:
        ...


@dataclass(frozen=True)
class MajorClassTable:
    """대분류 판정 테이블

    접두사(첫 세그먼트) → MajorClass. 새 대분류 추가는 설정 변경만으로 가능.
    """

    prefixes: Mapping[str, MajorClass] = field(
        default_factory=lambda: dict(DEFAULT_MAJOR_CLASSES)
    )

    def classify(self, code: str) -> MajorClass:
        """코드의 대분류 (표에 없으면 OTHER)"""
        return self.prefixes.get(major_segment(code), MajorClass.OTHER)


class ChartOfAccounts:
    """계정과목표 (ChartLookup 구현)

    Args:
        accounts: 계정 목록
        major_classes: 대분류 판정 테이블 (None이면 기본 테이블)
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        major_classes: MajorClassTable | None = None,
    ):
        self.major_classes = major_classes or MajorClassTable()
        self._accounts: dict[str, Account] = {}
        for account in accounts:
            self._accounts[account.code] = account

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, code: object) -> bool:
        return code in self._accounts

    def get(self, code: str) -> Account | None:
        return self._accounts.get(code)

    def major_class_of(self, code: str) -> MajorClass:
        """계정의 대분류

        계정과목표에 선언된 유형이 있으면 우선, 없으면 코드 첫 세그먼트로 판정.
        """
        account = self._accounts.get(code)
        if account is not None and account.account_type is not None:
            return account.account_type
        return self.major_classes.classify(code)

    def accounts(self, active_only: bool = True) -> list[Account]:
        """코드 순 계정 목록"""
        items = [
            a for a in self._accounts.values()
            if a.is_active or not active_only
        ]
        return sorted(items, key=lambda a: code_sort_key(a.code))

    def children_of(self, code: str) -> list[Account]:
        """직속 하위 계정 (parent_code 기준)"""
        return [a for a in self.accounts(active_only=False) if a.parent_code == code]

    def descendants_of(self, code: str) -> list[Account]:
        """코드 계층상 모든 하위 계정"""
        try:
            root = AccountCode.parse(code)
        except ValueError:
            return []

        result = []
        for account in self.accounts(active_only=False):
            try:
                if AccountCode.parse(account.code).is_descendant_of(root):
                    result.append(account)
            except ValueError:
                continue
        return result

    def removal_mode(self, code: str, has_postings: bool) -> RemovalMode:
        """계정 삭제 방식 결정

        전기 내역 또는 하위 계정이 있으면 비활성화, 아니면 물리 삭제.
        """
        has_descendants = bool(self.children_of(code) or self.descendants_of(code))
        if has_postings or has_descendants:
            return RemovalMode.SOFT
        return RemovalMode.HARD


def _seed(code: str, name: str, account_type: MajorClass, is_postable: bool = True) -> Account:
    parent = AccountCode.parse(code).parent
    return Account(
        code=code,
        name=name,
        account_type=account_type,
        is_postable=is_postable,
        parent_code=str(parent) if parent else None,
    )


# 신규 회사 기본 계정과목표 (요약 계정은 전기 불가)
DEFAULT_CHART: tuple[Account, ...] = (
    _seed("1", "ACTIVOS", MajorClass.ASSET, False),
    _seed("1.1", "ACTIVOS CORRIENTES", MajorClass.ASSET, False),
    _seed("1.1.1", "Efectivo y Equivalentes", MajorClass.ASSET, False),
    _seed("1.1.1.001", "Caja", MajorClass.ASSET),
    _seed("1.1.1.002", "Banco Estado", MajorClass.ASSET),
    _seed("1.1.2", "Deudores Comerciales", MajorClass.ASSET, False),
    _seed("1.1.2.001", "Clientes", MajorClass.ASSET),
    _seed("1.3", "IMPUESTOS POR RECUPERAR", MajorClass.ASSET, False),
    _seed("1.3.1", "Créditos Fiscales", MajorClass.ASSET, False),
    _seed("1.3.1.001", "Remanente Crédito Fiscal", MajorClass.ASSET),
    _seed("2", "PASIVOS", MajorClass.LIABILITY, False),
    _seed("2.1", "PASIVOS CORRIENTES", MajorClass.LIABILITY, False),
    _seed("2.1.1", "Cuentas por Pagar", MajorClass.LIABILITY, False),
    _seed("2.1.1.001", "Proveedores", MajorClass.LIABILITY),
    _seed("2.1.3", "Pasivos por Impuestos", MajorClass.LIABILITY, False),
    _seed("2.1.3.002", "IVA Débito Fiscal", MajorClass.LIABILITY),
    _seed("2.1.3.003", "Impuesto por Pagar", MajorClass.LIABILITY),
    _seed("3", "PATRIMONIO", MajorClass.EQUITY, False),
    _seed("3.1", "CAPITAL", MajorClass.EQUITY, False),
    _seed("3.1.1", "Capital Social", MajorClass.EQUITY, False),
    _seed("3.1.1.001", "Capital Pagado", MajorClass.EQUITY),
    _seed("4", "INGRESOS", MajorClass.INCOME, False),
    _seed("4.1", "INGRESOS OPERACIONALES", MajorClass.INCOME, False),
    _seed("4.1.1", "Ventas", MajorClass.INCOME, False),
    _seed("4.1.1.001", "Ventas del Giro", MajorClass.INCOME),
    _seed("5", "GASTOS", MajorClass.EXPENSE, False),
    _seed("5.1", "GASTOS OPERACIONALES", MajorClass.EXPENSE, False),
    _seed("5.1.1", "Gastos de Administración", MajorClass.EXPENSE, False),
    _seed("5.1.1.001", "Remuneraciones", MajorClass.EXPENSE),
    _seed("5.1.1.002", "Arriendos", MajorClass.EXPENSE),
)
