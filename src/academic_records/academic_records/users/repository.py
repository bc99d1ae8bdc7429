from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Principal


class PrincipalRepository(Protocol):
    """Repository interface for principals.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, principal_id: int) -> Optional[Principal]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Principal]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Principal]:
        """Sorted by name."""
        raise NotImplementedError

    def create(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def update(
        self,
        principal_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, principal_id: int) -> bool:
        raise NotImplementedError
