"""
원장 DB 연결 (aiosqlite)

회사별 원장이 하나의 SQLite 파일을 공유한다. WAL 모드라서 원장/정산표 조회
(읽기 전용 연결)와 분개 입력(쓰기 연결)이 서로 막지 않는다.

쓰기는 transaction() 블록 안에서만 커밋한다. 분개 헤더와 라인은 한 블록에서
기록되므로 라인 없는 헤더가 남지 않는다.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Sequence

import aiosqlite

logger = logging.getLogger(__name__)

Params = Sequence[Any]

# 연결마다 적용. journal_line의 ON DELETE CASCADE는 foreign_keys 필요
SESSION_PRAGMAS: tuple[str, ...] = (
    "PRAGMA busy_timeout=30000",
    "PRAGMA foreign_keys=ON",
)

# 쓰기 연결에만 적용 (읽기 전용 연결은 journal_mode를 바꿀 수 없음)
WRITER_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
)


async def open_ledger_db(db_path: Path | str, readonly: bool = False) -> aiosqlite.Connection:
    """원장 DB 연결 열기

    쓰기 연결은 상위 디렉토리를 만들고 WAL 모드로 전환한다.
    읽기 전용 연결은 이미 초기화된 파일이 있어야 한다.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 API용)
    """
    path = Path(db_path)

    if readonly:
        conn = await aiosqlite.connect(f"file:{path.as_posix()}?mode=ro", uri=True)
        pragmas = SESSION_PRAGMAS
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(path))
        pragmas = WRITER_PRAGMAS + SESSION_PRAGMAS

    for pragma in pragmas:
        await conn.execute(pragma)

    logger.debug(f"원장 DB 연결: {path} ({'읽기 전용' if readonly else '쓰기'})")
    return conn


class SQLiteAdapter:
    """원장 DB 세션

    요청 또는 스크립트 한 번에 하나의 연결을 연다.
    LedgerStore와 스키마 초기화만 이 클래스를 사용한다.

    사용 예시:
    ```python
    async with SQLiteAdapter(settings.db_path) as db:
        async with db.transaction():
            await db.execute("INSERT INTO journal_entry ...")
            await db.executemany("INSERT INTO journal_line ...", rows)

        count = await db.scalar("SELECT COUNT(*) FROM journal_entry", default=0)
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        """열린 연결 (미연결이면 RuntimeError)"""
        if self._conn is None:
            raise RuntimeError(f"원장 DB가 연결되지 않았습니다: {self.db_path}")
        return self._conn

    async def connect(self) -> None:
        if self._conn is None:
            self._conn = await open_ledger_db(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await conn.close()
        logger.debug(f"원장 DB 연결 종료: {self.db_path}")

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def execute(self, sql: str, params: Params = ()) -> aiosqlite.Cursor:
        return await self.conn.execute(sql, tuple(params))

    async def executemany(self, sql: str, rows: Iterable[Params]) -> aiosqlite.Cursor:
        return await self.conn.executemany(sql, [tuple(row) for row in rows])

    async def fetchone(self, sql: str, params: Params = ()) -> tuple[Any, ...] | None:
        cursor = await self.execute(sql, params)
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: Params = ()) -> list[tuple[Any, ...]]:
        cursor = await self.execute(sql, params)
        return list(await cursor.fetchall())

    async def scalar(self, sql: str, params: Params = (), default: Any = None) -> Any:
        """첫 행 첫 컬럼 (COUNT, MAX, 존재 확인용). 행이 없으면 default"""
        row = await self.fetchone(sql, params)
        return row[0] if row is not None else default

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLiteAdapter"]:
        """쓰기 트랜잭션

        블록이 정상 종료되면 커밋, 예외가 나면 롤백 후 다시 던진다.

        Raises:
            RuntimeError: 읽기 전용 연결
        """
        if self.readonly:
            raise RuntimeError(f"읽기 전용 연결에서는 기록할 수 없습니다: {self.db_path}")

        conn = self.conn
        try:
            yield self
        except Exception:
            await conn.rollback()
            logger.warning("원장 트랜잭션 롤백")
            raise
        await conn.commit()

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
