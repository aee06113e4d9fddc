"""
accounting/constants.py 테스트

경로가 pathlib.Path 타입이고 허용 오차 상수가 정확한지 확인
"""

from decimal import Decimal
from pathlib import Path

from accounting.constants import PROJECT_ROOT, Defaults, Paths, Tolerance


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_absolute(self) -> None:
        assert isinstance(PROJECT_ROOT, Path)
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_accounting_directory(self) -> None:
        assert (PROJECT_ROOT / "accounting").exists()


class TestPaths:
    """Paths 테스트"""

    def test_paths_under_project_root(self) -> None:
        assert Paths.CONFIG_FILE == PROJECT_ROOT / "config" / "accounting.yaml"
        assert Paths.DEFAULT_DB.parent == Paths.DATA_DIR
        assert Paths.WEB_LOGS_DIR.parent == Paths.LOGS_DIR

    def test_default_config_file_exists(self) -> None:
        assert Paths.CONFIG_FILE.exists()


class TestTolerance:
    """Tolerance 테스트"""

    def test_epsilon(self) -> None:
        """0.01 통화 단위, Decimal 타입"""
        assert Tolerance.EPSILON == Decimal("0.01")
        assert isinstance(Tolerance.EPSILON, Decimal)


class TestDefaults:
    """Defaults 테스트"""

    def test_page_limits(self) -> None:
        assert 0 < Defaults.PAGE_LIMIT <= Defaults.MAX_PAGE_LIMIT
