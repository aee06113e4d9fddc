"""
pytest 공통 fixture 정의

원장 코어/저장소/웹 테스트용 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from accounting.config.loader import Settings
from accounting.ledger.chart import DEFAULT_CHART, ChartOfAccounts
from accounting.ledger.schema import init_ledger_schema
from accounting.types import Scope
from adapters.db.sqlite_adapter import SQLiteAdapter


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """테스트용 accounting.yaml 파일 생성"""
    db_path = (temp_dir / "ledger.db").as_posix()
    config_content = f"""# 테스트용 accounting.yaml
database:
  path: "{db_path}"

tolerance: "0.01"

major_classes:
  "1": asset
  "2": liability
  "3": equity
  "4": income
  "5": expense
  "6": expense
  "9": other

worksheet_overrides:
  - account_code: "1.3.1.001"
    condition: credit_balance
    target_column: balance_sheet_credit

centralization_roles:
  output-tax: "2.1.3.002"
  tax-payable: "2.1.3.003"
  input-tax: "1.3.1.001"
"""
    config_path = temp_dir / "accounting.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


@pytest.fixture
def temp_config_file_invalid_class(temp_dir: Path) -> Path:
    """잘못된 대분류 값의 accounting.yaml 파일 생성"""
    config_content = """major_classes:
  "1": activo
"""
    config_path = temp_dir / "accounting_invalid.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


@pytest.fixture
def settings(temp_config_file: Path) -> Settings:
    """임시 설정 파일로 초기화된 Settings (테스트 후 초기화)"""
    Settings.reset()
    yield Settings(temp_config_file)
    Settings.reset()


@pytest.fixture
def chart() -> ChartOfAccounts:
    """기본 계정과목표"""
    return ChartOfAccounts(DEFAULT_CHART)


@pytest.fixture
def scope() -> Scope:
    return Scope.create("company-a")


@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(temp_dir / "test_ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()
