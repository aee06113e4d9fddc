"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: accounting/constants.py → pyme-ledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 조회 페이지 크기
    PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 500


class Tolerance:
    """금액 비교 허용 오차"""

    # 차변/대변 균형 허용 오차 (0.01 통화 단위 미만)
    EPSILON: Decimal = Decimal("0.01")


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    CONFIG_FILE: Path = CONFIG_DIR / "accounting.yaml"

    # DB 파일
    DEFAULT_DB: Path = DATA_DIR / "ledger.db"
