"""Academic Records package.

Feature modules (users, courses, students, attendance, marks, faculty) follow the
same split: a frozen dataclass model, a repository Protocol, a MySQL repository,
a service holding the business rules and a thin Flask controller.

Derived student metrics are owned by ``metrics`` and access decisions by
``access``; no controller writes either directly.
"""
