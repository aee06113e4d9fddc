"""
복식부기 원장 엔진

분개 검증, 원장 집계, 8열 정산표 분류, IVA 집계 분개 생성.
코어는 순수 함수: 불변 스냅샷을 받아 새 결과 값을 반환한다.
저장소(LedgerStore)만 DB에 접근한다.

사용 예시:
```python
from accounting.ledger import (
    JournalEntry, JournalLine, LedgerStore,
    aggregate_ledger, classify_worksheet, to_trial_totals, validate_entry,
)

# 분개 생성 + 검증
entry = JournalEntry.create("2024-03-01", [
    JournalLine.debit("1.1.1.001", "Caja", 100000),
    JournalLine.credit("4.1.1.001", "Ventas del Giro", 100000),
])
result = validate_entry(entry)
if not result.ok:
    print(result.error.to_dict())

# 저장
store = LedgerStore(db)
saved = await store.save_entry(scope, entry)

# 원장 → 정산표
entries = await store.list_entries(scope, date_to="2024-03-31")
chart = await store.load_chart(scope)
ledger = aggregate_ledger(entries, chart=chart)
worksheet = classify_worksheet(to_trial_totals(ledger), chart).ensure_integrity()
```
"""

from accounting.ledger.aggregator import (
    LedgerAccountAggregate,
    LedgerAggregator,
    LedgerFilter,
    LedgerSummary,
    Movement,
    TrialBalanceLine,
    aggregate_ledger,
    summarize,
    to_trial_totals,
)
from accounting.ledger.centralization import (
    AccountRef,
    AccountRoleMap,
    BuildResult,
    CentralizationEntryBuilder,
    TaxTotals,
    build_centralization_entry,
    format_period,
)
from accounting.ledger.chart import (
    DEFAULT_CHART,
    Account,
    ChartLookup,
    ChartOfAccounts,
    MajorClassTable,
)
from accounting.ledger.codes import AccountCode, code_sort_key, ordering_conflicts
from accounting.ledger.entry import EntryStateMachine, JournalEntry, JournalLine, StateMachineError
from accounting.ledger.errors import (
    AccountNotFound,
    AmbiguousLineSign,
    BuildError,
    EntryNotEditable,
    EntryNotFound,
    InsufficientLines,
    LedgerError,
    MissingAccountReference,
    MissingAccountRole,
    Unbalanced,
    ValidationError,
    WorksheetIntegrityViolation,
)
from accounting.ledger.store import LedgerStore
from accounting.ledger.validator import (
    JournalEntryValidator,
    ValidatedEntry,
    ValidationResult,
    validate_entry,
)
from accounting.ledger.worksheet import (
    DEFAULT_OVERRIDES,
    OverrideRule,
    Worksheet,
    WorksheetClassifier,
    WorksheetRow,
    WorksheetTotals,
    classify_worksheet,
)

__all__ = [
    # 핵심 클래스
    "JournalEntry",
    "JournalLine",
    "JournalEntryValidator",
    "LedgerAggregator",
    "WorksheetClassifier",
    "CentralizationEntryBuilder",
    "LedgerStore",
    # 계정과목표
    "Account",
    "AccountCode",
    "ChartLookup",
    "ChartOfAccounts",
    "MajorClassTable",
    "DEFAULT_CHART",
    # 결과 값
    "ValidatedEntry",
    "ValidationResult",
    "LedgerFilter",
    "Movement",
    "LedgerAccountAggregate",
    "LedgerSummary",
    "TrialBalanceLine",
    "OverrideRule",
    "Worksheet",
    "WorksheetRow",
    "WorksheetTotals",
    "TaxTotals",
    "AccountRef",
    "AccountRoleMap",
    "BuildResult",
    "DEFAULT_OVERRIDES",
    # 상태 머신
    "EntryStateMachine",
    "StateMachineError",
    # 오류
    "LedgerError",
    "ValidationError",
    "InsufficientLines",
    "MissingAccountReference",
    "AmbiguousLineSign",
    "Unbalanced",
    "BuildError",
    "MissingAccountRole",
    "WorksheetIntegrityViolation",
    "EntryNotFound",
    "EntryNotEditable",
    "AccountNotFound",
    # 함수
    "validate_entry",
    "aggregate_ledger",
    "summarize",
    "to_trial_totals",
    "classify_worksheet",
    "build_centralization_entry",
    "format_period",
    "code_sort_key",
    "ordering_conflicts",
]
