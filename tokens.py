"""
Signed identity tokens.

Tokens are HS256 JWTs carrying the user id, username and role. They are
stateless: nothing is stored server side, so a token stays valid until its
expiry instant.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from jose import jwt
from jose.exceptions import JOSEError

from config import DEFAULT_JWT_ALGORITHM, DEFAULT_TOKEN_ISSUER, DEFAULT_TOKEN_TTL_SECONDS
from errors import InternalError, InvalidToken

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _system_clock() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Claims:
    """Decoded payload of a verified token."""

    user_id: uuid.UUID
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime
    issuer: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": str(self.user_id),
            "username": self.username,
            "role": self.role,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
            "iss": self.issuer,
        }


class TokenIssuer:
    """Issue and verify signed, time-bounded identity tokens."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = DEFAULT_JWT_ALGORITHM,
        issuer: str = DEFAULT_TOKEN_ISSUER,
        ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS),
        clock: Optional[Clock] = None,
    ) -> None:
        if not secret:
            raise ValueError("A token signing secret must be provided")
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._ttl = ttl
        self._clock = clock or _system_clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: uuid.UUID, username: str, role: str) -> str:
        """
        Build a signed token for the given identity, valid for ``ttl``
        from now.
        """
        now = self._clock()
        payload = {
            "userId": str(user_id),
            "username": username,
            "role": role,
            "iss": self._issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except JOSEError as exc:
            logger.error("Failed to sign token for user %s: %s", user_id, exc)
            raise InternalError("Failed to issue access token") from exc

    def verify(self, token: str) -> Claims:
        """
        Check the signature, issuer and expiry of ``token`` and return its
        claims.

        Raises:
            InvalidToken: if any of the checks fail or the payload is
                missing required fields.
        """
        if not token:
            raise InvalidToken("Missing token")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                # expiry is checked below against the injected clock
                options={"verify_exp": False},
            )
        except JOSEError as exc:
            logger.info("JWT validation failed: %s", exc)
            raise InvalidToken("JWT validation failed") from exc

        try:
            claims = Claims(
                user_id=uuid.UUID(str(payload["userId"])),
                username=str(payload["username"]),
                role=str(payload.get("role", "")),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
                issuer=str(payload["iss"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
            logger.info("JWT payload is incomplete: %s", exc)
            raise InvalidToken("JWT is not valid") from exc

        if claims.expires_at <= self._clock():
            raise InvalidToken("JWT has expired")
        return claims
