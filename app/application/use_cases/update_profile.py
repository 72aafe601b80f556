from __future__ import annotations

from datetime import datetime
from typing import Callable

from app.application.ports.auth_port import AuthPort
from app.domain.entities.user import User
from app.domain.exceptions import ValidationError

from .auth_common import utcnow


class UpdateProfileUseCase:
    def __init__(self, *, auth_port: AuthPort, clock: Callable[[], datetime] = utcnow):
        self._auth_port = auth_port
        self._clock = clock

    def execute(self, *, user: User, name: str | None, image: str | None) -> User | None:
        name = name.strip() if name else None
        image = image.strip() if image else None
        if not name and not image:
            raise ValidationError("At least one field (name or image) is required.")

        return self._auth_port.update_user_profile(
            user_id=user.id,
            name=name or user.name,
            image=image or user.image,
            email_verified=user.email_verified,
            updated_at=self._clock(),
        )
