from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.ids import canonical_id
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DuplicateError, ValidationError
from ..core.logger import get_logger
from .model import AuthenticatedPrincipal, Principal
from .repository import PrincipalRepository
from .tokens import TokenService

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    principal: Principal

    def to_dict(self) -> dict:
        return {"token": self.token, "user": self.principal.summary()}


class AccountFactory:
    """Create principals with a hashed credential and a unique email.

    Shared by registration, faculty provisioning and student enrolment.
    """

    def __init__(self, principals: PrincipalRepository):
        self._principals = principals

    def ensure_email_free(self, email: str, *, except_id: Optional[int] = None) -> None:
        existing = self._principals.get_by_email(email)
        if existing and (except_id is None or existing.principal_id != except_id):
            raise DuplicateError("Email already exists")

    def create(self, *, name: str, email: str, password: str, role: Role) -> Principal:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        self.ensure_email_free(email)

        principal_id = self._principals.create(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
        )
        created = self._principals.get_by_id(principal_id)
        if not created:
            raise ValidationError("Account creation failed")
        logger.info("created %s account id=%s", role.value, principal_id)
        return created


class AuthService:
    """Use cases: register, login, verify token, change password."""

    def __init__(
        self,
        principals: PrincipalRepository,
        tokens: TokenService,
        *,
        allow_privileged_registration: bool = False,
    ):
        self._principals = principals
        self._tokens = tokens
        self._accounts = AccountFactory(principals)
        self._allow_privileged = bool(allow_privileged_registration)

    def register(self, *, name: str, email: str, password: str, role: Optional[str] = None) -> LoginResult:
        try:
            wanted = Role(role) if role else Role.STUDENT
        except ValueError:
            raise ValidationError("Invalid role")

        if wanted != Role.STUDENT and not self._allow_privileged:
            raise AuthorizationError("Only student accounts can self-register")

        principal = self._accounts.create(name=name, email=email, password=password, role=wanted)
        return LoginResult(token=self._tokens.issue(principal), principal=principal)

    def login(self, email: str, password: str) -> LoginResult:
        principal = self._principals.get_by_email((email or "").strip().lower())
        if not principal or not self._password_matches(principal, password):
            raise AuthenticationError("Invalid credentials")
        return LoginResult(token=self._tokens.issue(principal), principal=principal)

    def authenticate_header(self, authorization: Optional[str]) -> AuthenticatedPrincipal:
        token = self._tokens.from_authorization_header(authorization)
        caller = self._tokens.verify(token)
        # Deleted accounts and changed roles invalidate outstanding tokens.
        self.verify(caller)
        return caller

    def verify(self, caller: AuthenticatedPrincipal) -> Principal:
        principal = self._load(caller)
        if principal.role != caller.role:
            raise AuthenticationError("Unauthorized: Invalid or expired token")
        return principal

    def change_password(self, caller: AuthenticatedPrincipal, *, current_password: str, new_password: str) -> None:
        principal = self._load(caller)
        if not self._password_matches(principal, current_password):
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        if not self._principals.update(principal.principal_id, password_hash=generate_password_hash(new_password)):
            raise ValidationError("Password change failed")
        logger.info("password changed for principal id=%s", principal.principal_id)

    def _load(self, caller: AuthenticatedPrincipal) -> Principal:
        key = canonical_id(caller.principal_id)
        principal = self._principals.get_by_id(int(key)) if key and key.isdigit() else None
        if not principal:
            # The account behind a still-valid token is gone.
            raise AuthenticationError("Unauthorized: Invalid or expired token")
        return principal

    @staticmethod
    def _password_matches(principal: Principal, password: Optional[str]) -> bool:
        if not password:
            return False
        try:
            return check_password_hash(principal.password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False
