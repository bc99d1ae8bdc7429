from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

import jwt

from ..common.datetime_utils import utc_now
from ..core.constants import DEFAULT_JWT_ALGORITHM, DEFAULT_TOKEN_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import AuthenticatedPrincipal, Principal


class TokenService:
    """Issue and verify signed, time-limited assertions (JWT).

    Claims: ``sub`` (principal id as string), ``email``, ``name``, ``role``,
    ``iat`` and ``exp``.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = DEFAULT_JWT_ALGORITHM,
        expires_minutes: int = DEFAULT_TOKEN_MINUTES,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=int(expires_minutes))
        self._clock = clock or utc_now

    def issue(self, principal: Principal) -> str:
        now = self._clock()
        payload = {
            "sub": str(principal.principal_id),
            "email": principal.email,
            "name": principal.name,
            "role": principal.role.value,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> AuthenticatedPrincipal:
        if not token:
            raise AuthenticationError("Unauthorized: Missing or invalid token")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "role"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Unauthorized: Token expired")
        except jwt.PyJWTError:
            raise AuthenticationError("Unauthorized: Invalid or expired token")

        try:
            role = Role(claims["role"])
        except ValueError:
            raise AuthenticationError("Unauthorized: Invalid or expired token")

        return AuthenticatedPrincipal(
            principal_id=str(claims["sub"]),
            email=str(claims.get("email", "")),
            name=str(claims.get("name", "")),
            role=role,
        )

    @staticmethod
    def from_authorization_header(header: Optional[str]) -> Optional[str]:
        if not header or not header.startswith("Bearer "):
            return None
        token = header[len("Bearer "):].strip()
        return token or None
