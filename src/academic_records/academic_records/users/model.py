from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Principal:
    """Domain entity: an account that can authenticate (admin, faculty or student).

    Note: Plain data object, no DB access code.
    """

    principal_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None

    def summary(self) -> dict:
        return {"id": self.principal_id, "name": self.name, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Who is calling, as asserted by a verified token.

    ``principal_id`` stays a string (the token ``sub`` claim); compare it with
    stored ids through ``common.ids.same_id`` only.
    """

    principal_id: str
    email: str
    name: str
    role: Role

    def summary(self) -> dict:
        return {"id": self.principal_id, "name": self.name, "email": self.email, "role": self.role.value}
