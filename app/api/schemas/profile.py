from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .auth import CamelModel, SessionResponse, UserResponse


class ProfileResponse(CamelModel):
    message: str
    user: UserResponse
    session: SessionResponse
    timestamp: datetime


class UpdateProfileRequest(CamelModel):
    name: str | None = Field(None, max_length=120)
    image: str | None = Field(None, max_length=2048)


class UpdateProfileResponse(CamelModel):
    message: str
    user: UserResponse
