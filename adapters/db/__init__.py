"""
데이터베이스 어댑터

원장 SQLite (WAL) 연결 관리.
"""

from adapters.db.sqlite_adapter import SQLiteAdapter, open_ledger_db

__all__ = [
    "SQLiteAdapter",
    "open_ledger_db",
]
