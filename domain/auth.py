"""Phone number login and the tokens that come out of it.

Tokens are HS256 JWTs carrying `{id, phone, name}`. Nothing is kept server
side, so a token is good until it expires. There is no revocation.
"""

from datetime import datetime, timedelta, timezone
import logging
import re
from typing import Any, Callable

import jwt

from domain.errors import Forbidden, Unauthorized, ValidationError
from domain.models import User
from domain.repository import Store


logger = logging.getLogger(__name__)


ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=24)
PHONE_PATTERN = re.compile(r"^\d{10}$")


def validate_login(name: Any, phone: Any) -> tuple[str, str]:
    if not isinstance(name, str) or not isinstance(phone, str):
        raise ValidationError("Invalid input")
    if not name.strip() or not phone:
        raise ValidationError("Invalid input")
    if not PHONE_PATTERN.match(phone):
        raise ValidationError("Phone number must be exactly 10 digits")
    return name.strip(), phone


class AuthService:
    def __init__(
        self,
        store: Store,
        *,
        secret: str,
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.secret = secret
        self.ttl = ttl
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def issue_token(self, user: User) -> tuple[str, datetime]:
        now = self.clock()
        expires_at = now + self.ttl
        payload = {
            "id": user.id,
            "phone": user.phone,
            "name": user.name,
            "iat": now,
            "exp": expires_at,
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM), expires_at

    async def register_or_login(self, name: Any, phone: Any) -> dict[str, Any]:
        name, phone = validate_login(name, phone)

        user = await self.store.find_user_by_phone(phone)
        if user is None:
            user = await self.store.create_user(name=name, phone=phone)
            logger.info("Registered user %s", user.phone)

        token, expires_at = self.issue_token(user)
        return {"token": token, "user": user, "expires_at": expires_at}

    def verify(self, token: str | None) -> dict[str, Any]:
        if not token:
            raise Unauthorized("Access Denied")
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "phone"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Forbidden("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise Forbidden("Invalid Token") from e
