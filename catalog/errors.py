"""
Failure kinds a repository may report.

The set is closed: every backend translates its own failures into
``Missing`` or ``ServerError`` before they leave the backend, so callers
never see a driver- or ORM-specific exception.
"""


class RepoError(Exception):
    """Base class for repository failures."""


class Missing(RepoError):
    """No record matches the requested identifier."""

    def __init__(self, service_id: int) -> None:
        super().__init__(f"no service with id={service_id}")
        self.service_id = service_id


class ServerError(RepoError):
    """The backend could not complete the operation."""
