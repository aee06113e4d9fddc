"""
설정 로더

accounting.yaml 로드: DB 경로, 허용 오차, 대분류 테이블, 정산표 예외 규칙, IVA 계정 역할
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from accounting.constants import PROJECT_ROOT, Paths, Tolerance
from accounting.ledger.centralization import DEFAULT_ROLE_CODES
from accounting.ledger.chart import DEFAULT_MAJOR_CLASSES, MajorClassTable
from accounting.ledger.worksheet import DEFAULT_OVERRIDES, OverrideRule
from accounting.types import AccountRole, MajorClass, OverrideCondition, WorksheetColumn


@dataclass(frozen=True)
class AccountingConfig:
    """회계 설정 (accounting.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path = Paths.DEFAULT_DB
    tolerance: Decimal = Tolerance.EPSILON
    major_classes: MajorClassTable = field(default_factory=MajorClassTable)
    overrides: tuple[OverrideRule, ...] = DEFAULT_OVERRIDES
    role_codes: dict[AccountRole, str] = field(
        default_factory=lambda: dict(DEFAULT_ROLE_CODES)
    )


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _enum_value(enum_cls: type, raw: Any, field_name: str) -> Any:
    try:
        return enum_cls(raw)
    except ValueError as e:
        valid = [m.value for m in enum_cls]
        raise ValueError(
            f"유효하지 않은 {field_name}입니다: '{raw}'. 유효한 값: {valid}"
        ) from e


def _parse_db_path(data: dict) -> Path:
    raw = (data.get("database") or {}).get("path")
    if not raw:
        return Paths.DEFAULT_DB
    path = Path(raw)
    # 상대 경로는 프로젝트 루트 기준
    return path if path.is_absolute() else PROJECT_ROOT / path


def _parse_tolerance(data: dict) -> Decimal:
    raw = data.get("tolerance")
    if raw is None:
        return Tolerance.EPSILON
    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ConfigLoadError(f"tolerance 값이 숫자가 아닙니다: {raw!r}") from e
    if value <= 0:
        raise ConfigLoadError(f"tolerance는 양수여야 합니다: {value}")
    return value


def _parse_major_classes(data: dict) -> MajorClassTable:
    raw = data.get("major_classes")
    if raw is None:
        return MajorClassTable()
    if not isinstance(raw, dict):
        raise ConfigLoadError("major_classes는 '접두사: 대분류' 매핑이어야 합니다")

    prefixes = {
        str(prefix): _enum_value(MajorClass, value, "major_class")
        for prefix, value in raw.items()
    }
    return MajorClassTable(prefixes=prefixes)


def _parse_overrides(data: dict) -> tuple[OverrideRule, ...]:
    raw = data.get("worksheet_overrides")
    if raw is None:
        return DEFAULT_OVERRIDES
    if not isinstance(raw, list):
        raise ConfigLoadError("worksheet_overrides는 목록이어야 합니다")

    rules = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigLoadError(f"worksheet_overrides[{index}]는 매핑이어야 합니다: {item!r}")
        code = item.get("account_code")
        if not code:
            raise ConfigLoadError(f"worksheet_overrides[{index}]에 'account_code'가 없습니다")
        rules.append(
            OverrideRule(
                account_code=str(code),
                condition=_enum_value(OverrideCondition, item.get("condition"), "condition"),
                target_column=_enum_value(
                    WorksheetColumn, item.get("target_column"), "target_column"
                ),
                include_descendants=bool(item.get("include_descendants", False)),
            )
        )
    return tuple(rules)


def _parse_roles(data: dict) -> dict[AccountRole, str]:
    raw = data.get("centralization_roles")
    if raw is None:
        return dict(DEFAULT_ROLE_CODES)
    if not isinstance(raw, dict):
        raise ConfigLoadError("centralization_roles는 '역할: 계정 코드' 매핑이어야 합니다")

    roles = dict(DEFAULT_ROLE_CODES)
    for role, code in raw.items():
        roles[_enum_value(AccountRole, role, "account role")] = str(code)
    return roles


def load_config(path: Path | None = None) -> AccountingConfig:
    """accounting.yaml 파일 로드

    Args:
        path: accounting.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AccountingConfig 인스턴스

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 Enum 값인 경우
    """
    if path is None:
        path = Paths.CONFIG_FILE

    if not path.exists():
        raise ConfigLoadError(f"accounting.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"accounting.yaml 파싱 실패: {e}") from e

    if data is None:
        raise ConfigLoadError("accounting.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise ConfigLoadError("accounting.yaml 최상위는 매핑이어야 합니다")

    return AccountingConfig(
        db_path=_parse_db_path(data),
        tolerance=_parse_tolerance(data),
        major_classes=_parse_major_classes(data),
        overrides=_parse_overrides(data),
        role_codes=_parse_roles(data),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    accounting.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AccountingConfig | None = None

    def __new__(cls, config_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(config_path)

    @property
    def config(self) -> AccountingConfig:
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 파일 경로"""
        return self.config.db_path

    @property
    def tolerance(self) -> Decimal:
        """차변/대변 균형 허용 오차"""
        return self.config.tolerance

    @property
    def major_classes(self) -> MajorClassTable:
        return self.config.major_classes

    @property
    def overrides(self) -> tuple[OverrideRule, ...]:
        """정산표 예외 규칙"""
        return self.config.overrides

    @property
    def role_codes(self) -> dict[AccountRole, str]:
        """IVA 집계 분개 역할별 계정 코드"""
        return self.config.role_codes

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(config_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        config_path: accounting.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(config_path)
