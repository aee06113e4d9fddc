"""
어댑터 레이어

외부 저장소와의 연동을 담당.
원장 코어는 어댑터를 모르며, 저장소(LedgerStore)만 어댑터를 사용한다.
"""

from adapters.db import SQLiteAdapter, open_ledger_db

__all__ = [
    "SQLiteAdapter",
    "open_ledger_db",
]
