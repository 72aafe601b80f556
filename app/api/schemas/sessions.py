from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .auth import CamelModel, SessionResponse


class SessionItemResponse(SessionResponse):
    current: bool


class SessionListResponse(CamelModel):
    message: str
    sessions: list[SessionItemResponse]
    count: int


class RevokeSessionResponse(CamelModel):
    message: str
    session_id: str = Field(..., alias="sessionId")


class RevokeAllSessionsResponse(CamelModel):
    message: str
    revoked_count: int = Field(..., alias="revokedCount")


class SessionStatsResponse(CamelModel):
    total: int
    active: int
    expired: int
    timestamp: datetime


class CleanupSessionsResponse(CamelModel):
    message: str
    deleted_count: int = Field(..., alias="deletedCount")
    timestamp: datetime
