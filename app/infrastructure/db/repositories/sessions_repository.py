from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from app.application.ports.session_port import SessionPort
from app.infrastructure.db.mappers.accounts_mapper import (
    map_joined_row_to_session_and_user,
    map_row_to_session,
)

from .sql_base import SqlRepository


_SESSION_COLUMNS = "id, user_id, expires_at, created_at, ip_address, user_agent"

_INSERT_SESSION_SQL = f"""
    INSERT INTO sessions (
        id, token_hash, user_id, expires_at, ip_address, user_agent, created_at, updated_at
    ) VALUES (
        :id, :token_hash, :user_id, :expires_at, :ip_address, :user_agent, :created_at, :created_at
    )
    RETURNING {_SESSION_COLUMNS}
"""


class SqlSessionsRepository(SqlRepository, SessionPort):
    def create_session(
        self,
        *,
        session_id: str,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None,
        user_agent: str | None,
        created_at: datetime,
    ):
        params = {
            "id": session_id,
            "token_hash": token_hash,
            "user_id": user_id,
            "expires_at": expires_at,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "created_at": created_at,
        }
        with self._connect(write=True) as conn:
            row = conn.execute(text(_INSERT_SESSION_SQL), params).mappings().one()
        return map_row_to_session(row)

    def replace_user_sessions(
        self,
        *,
        session_id: str,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None,
        user_agent: str | None,
        created_at: datetime,
    ):
        params = {
            "id": session_id,
            "token_hash": token_hash,
            "user_id": user_id,
            "expires_at": expires_at,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "created_at": created_at,
        }
        with self._connect(write=True) as conn:
            conn.execute(text("DELETE FROM sessions WHERE user_id = :user_id"), {"user_id": user_id})
            row = conn.execute(text(_INSERT_SESSION_SQL), params).mappings().one()
        return map_row_to_session(row)

    def get_session_with_user(self, *, token_hash: str):
        sql = """
            SELECT
                s.id AS session_id,
                s.user_id,
                s.expires_at AS session_expires_at,
                s.created_at AS session_created_at,
                s.ip_address,
                s.user_agent,
                u.name,
                u.email,
                u.email_verified,
                u.image,
                u.created_at AS user_created_at,
                u.updated_at AS user_updated_at
            FROM sessions s
            JOIN users u
              ON u.id = s.user_id
            WHERE s.token_hash = :token_hash
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"token_hash": token_hash}).mappings().first()
        if row is None:
            return None
        return map_joined_row_to_session_and_user(row)

    def delete_session_by_token_hash(self, *, token_hash: str):
        sql = f"""
            DELETE FROM sessions
            WHERE token_hash = :token_hash
            RETURNING {_SESSION_COLUMNS}
        """
        with self._connect(write=True) as conn:
            row = conn.execute(text(sql), {"token_hash": token_hash}).mappings().first()
        if row is None:
            return None
        return map_row_to_session(row)

    def delete_user_session(self, *, user_id: str, session_id: str):
        sql = f"""
            DELETE FROM sessions
            WHERE id = :session_id
              AND user_id = :user_id
            RETURNING {_SESSION_COLUMNS}
        """
        with self._connect(write=True) as conn:
            row = conn.execute(
                text(sql),
                {
                    "session_id": session_id,
                    "user_id": user_id,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_session(row)

    def delete_user_sessions_except(self, *, user_id: str, keep_session_id: str) -> int:
        sql = """
            DELETE FROM sessions
            WHERE user_id = :user_id
              AND id <> :keep_session_id
        """
        with self._connect(write=True) as conn:
            result = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "keep_session_id": keep_session_id,
                },
            )
        return int(result.rowcount or 0)

    def list_active_sessions(self, *, user_id: str, now: datetime):
        sql = f"""
            SELECT {_SESSION_COLUMNS}
            FROM sessions
            WHERE user_id = :user_id
              AND expires_at > :now
            ORDER BY created_at
        """
        with self._connect() as conn:
            rows = conn.execute(text(sql), {"user_id": user_id, "now": now}).mappings().all()
        return [map_row_to_session(row) for row in rows]

    def count_sessions(self, *, now: datetime) -> tuple[int, int]:
        sql = """
            SELECT
                count(*) AS total,
                COALESCE(SUM(CASE WHEN expires_at <= :now THEN 1 ELSE 0 END), 0) AS expired
            FROM sessions
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"now": now}).mappings().one()
        return int(row["total"]), int(row["expired"])

    def delete_expired_sessions(self, *, now: datetime) -> int:
        with self._connect(write=True) as conn:
            expired = conn.execute(
                text("SELECT count(*) FROM sessions WHERE expires_at < :now"),
                {"now": now},
            ).scalar_one()
            if not expired:
                return 0
            result = conn.execute(
                text("DELETE FROM sessions WHERE expires_at < :now"),
                {"now": now},
            )
        return int(result.rowcount or 0)
