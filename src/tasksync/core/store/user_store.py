"""UserStore SQLite 实现"""

from datetime import UTC, datetime

import aiosqlite
from ulid import ULID

from ..exceptions import ConflictError
from ..models.user import User
from .task_store import to_db_time


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create(self, email: str, name: str, password_hash: str) -> User:
        """创建用户并提交

        Raises:
            ConflictError: 邮箱已注册
        """
        now = datetime.now(UTC)
        user = User(
            id=str(ULID()),
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._conn.execute(
                """
                INSERT INTO users (id, email, name, password_hash, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user.id,
                    user.email,
                    user.name,
                    user.password_hash,
                    to_db_time(user.created_at),
                    to_db_time(user.updated_at),
                ),
            )
            await self._conn.commit()
        except aiosqlite.IntegrityError as e:
            await self._conn.rollback()
            raise ConflictError(
                "Email already registered", code="EMAIL_ALREADY_REGISTERED"
            ) from e
        except Exception:
            await self._conn.rollback()
            raise
        return user

    async def find_by_id(self, user_id: str) -> User | None:
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return self._row_to_user(row) if row else None

    async def find_by_email(self, email: str) -> User | None:
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (email.lower(),),
        )
        row = await cursor.fetchone()
        return self._row_to_user(row) if row else None

    async def find_all(self) -> list[User]:
        """查询所有用户，按名称正序"""
        cursor = await self._conn.execute("SELECT * FROM users ORDER BY name ASC, id ASC")
        rows = await cursor.fetchall()
        return [self._row_to_user(row) for row in rows]

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        return User(
            id=row[0],
            email=row[1],
            name=row[2],
            password_hash=row[3],
            created_at=datetime.fromisoformat(row[4]),
            updated_at=datetime.fromisoformat(row[5]),
        )
