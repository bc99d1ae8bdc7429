class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DuplicateError(ValidationError):
    """Raised when a write would break a uniqueness rule (email, course name, attendance day)."""


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a principal lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ReassignmentRequiredError(DomainError):
    """Faculty still owns students and no reassignment target was given."""

    def __init__(self, student_count: int):
        self.student_count = int(student_count)
        super().__init__(
            f"This faculty has {self.student_count} student(s). "
            "Please select another faculty to reassign them to."
        )


class RecomputationError(DomainError):
    """Raised when derived student metrics could not be rebuilt."""

    def __init__(self, student_id: int, message: str):
        self.student_id = student_id
        super().__init__(message)
