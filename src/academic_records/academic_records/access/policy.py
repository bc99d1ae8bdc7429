"""Role-based access control.

Every service asks the policy before it fetches protected records or mutates
anything. Decisions come in two steps:

* ``role_may`` answers whether the role can *ever* perform the action. Services
  call it first so a denied role short-circuits before any lookup.
* ``can_access`` answers for a concrete target once the owning ids are known
  (the student's faculty, the student's own account, the marks author).

Listing is not a yes/no question; ``list_scope`` tells the service which slice
of the collection a role sees.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..common.ids import same_id
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import AuthenticatedPrincipal


class Resource(str, Enum):
    COURSE = "course"
    STUDENT = "student"
    ATTENDANCE = "attendance"
    MARKS = "marks"
    FACULTY = "faculty"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RECONCILE = "reconcile"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class Scope(str, Enum):
    ALL = "all"
    ASSIGNED = "assigned"  # students whose faculty is the caller
    OWN = "own"  # the caller's own student record
    NONE = "none"


class Ownership(str, Enum):
    ANY = "any"
    ASSIGNED_FACULTY = "assigned_faculty"
    SELF_STUDENT = "self_student"
    AUTHOR = "author"


@dataclass(frozen=True)
class Target:
    """Ownership facts about the record being touched."""

    faculty_id: Any = None
    student_user_id: Any = None
    author_id: Any = None


_A, _F, _S = Role.ADMIN, Role.FACULTY, Role.STUDENT

# (resource, action) -> {role: ownership requirement}; a missing role is denied.
_RULES: dict[tuple[Resource, Action], dict[Role, Ownership]] = {
    (Resource.COURSE, Action.READ): {_A: Ownership.ANY, _F: Ownership.ANY, _S: Ownership.ANY},
    (Resource.COURSE, Action.CREATE): {_A: Ownership.ANY},
    (Resource.COURSE, Action.UPDATE): {_A: Ownership.ANY},
    (Resource.COURSE, Action.DELETE): {_A: Ownership.ANY},
    (Resource.STUDENT, Action.READ): {
        _A: Ownership.ANY,
        _F: Ownership.ASSIGNED_FACULTY,
        _S: Ownership.SELF_STUDENT,
    },
    (Resource.STUDENT, Action.CREATE): {_A: Ownership.ANY},
    (Resource.STUDENT, Action.UPDATE): {_A: Ownership.ANY, _F: Ownership.ASSIGNED_FACULTY},
    (Resource.STUDENT, Action.DELETE): {_A: Ownership.ANY},
    (Resource.STUDENT, Action.RECONCILE): {_A: Ownership.ANY},
    (Resource.ATTENDANCE, Action.READ): {
        _A: Ownership.ANY,
        _F: Ownership.ASSIGNED_FACULTY,
        _S: Ownership.SELF_STUDENT,
    },
    (Resource.ATTENDANCE, Action.CREATE): {_F: Ownership.ASSIGNED_FACULTY},
    (Resource.ATTENDANCE, Action.UPDATE): {_A: Ownership.ANY, _F: Ownership.ASSIGNED_FACULTY},
    (Resource.ATTENDANCE, Action.DELETE): {_A: Ownership.ANY, _F: Ownership.ASSIGNED_FACULTY},
    (Resource.MARKS, Action.READ): {
        _A: Ownership.ANY,
        _F: Ownership.ASSIGNED_FACULTY,
        _S: Ownership.SELF_STUDENT,
    },
    (Resource.MARKS, Action.CREATE): {_F: Ownership.ASSIGNED_FACULTY},
    (Resource.MARKS, Action.UPDATE): {_F: Ownership.AUTHOR},
    (Resource.MARKS, Action.DELETE): {_F: Ownership.AUTHOR},
    (Resource.FACULTY, Action.READ): {_A: Ownership.ANY},
    (Resource.FACULTY, Action.CREATE): {_A: Ownership.ANY},
    (Resource.FACULTY, Action.UPDATE): {_A: Ownership.ANY},
    (Resource.FACULTY, Action.DELETE): {_A: Ownership.ANY},
}

_LIST_SCOPES: dict[Resource, dict[Role, Scope]] = {
    Resource.COURSE: {_A: Scope.ALL, _F: Scope.ALL, _S: Scope.ALL},
    Resource.STUDENT: {_A: Scope.ALL, _F: Scope.ASSIGNED, _S: Scope.OWN},
    Resource.ATTENDANCE: {_A: Scope.ALL, _F: Scope.ASSIGNED, _S: Scope.OWN},
    # Faculty additionally only see marks they authored.
    Resource.MARKS: {_A: Scope.ALL, _F: Scope.ASSIGNED, _S: Scope.OWN},
    Resource.FACULTY: {_A: Scope.ALL},
}


class AccessPolicy:
    def role_may(self, principal: AuthenticatedPrincipal, resource: Resource, action: Action) -> bool:
        return principal.role in _RULES.get((resource, action), {})

    def can_access(
        self,
        principal: AuthenticatedPrincipal,
        resource: Resource,
        action: Action,
        target: Optional[Target] = None,
    ) -> Decision:
        requirement = _RULES.get((resource, action), {}).get(principal.role)
        if requirement is None:
            return Decision.DENY
        if requirement == Ownership.ANY:
            return Decision.ALLOW

        target = target or Target()
        owner = {
            Ownership.ASSIGNED_FACULTY: target.faculty_id,
            Ownership.SELF_STUDENT: target.student_user_id,
            Ownership.AUTHOR: target.author_id,
        }[requirement]
        return Decision.ALLOW if same_id(owner, principal.principal_id) else Decision.DENY

    def list_scope(self, principal: AuthenticatedPrincipal, resource: Resource) -> Scope:
        return _LIST_SCOPES.get(resource, {}).get(principal.role, Scope.NONE)

    def require_role(self, principal: AuthenticatedPrincipal, resource: Resource, action: Action) -> None:
        if not self.role_may(principal, resource, action):
            raise AuthorizationError(f"Forbidden: {principal.role.value} cannot {action.value} {resource.value}")

    def require(
        self,
        principal: AuthenticatedPrincipal,
        resource: Resource,
        action: Action,
        target: Optional[Target] = None,
    ) -> None:
        if self.can_access(principal, resource, action, target) is Decision.DENY:
            raise AuthorizationError(f"Forbidden: you don't have access to this {resource.value}")

    def require_list(self, principal: AuthenticatedPrincipal, resource: Resource) -> Scope:
        scope = self.list_scope(principal, resource)
        if scope is Scope.NONE:
            raise AuthorizationError(f"Forbidden: {principal.role.value} cannot list {resource.value}")
        return scope
