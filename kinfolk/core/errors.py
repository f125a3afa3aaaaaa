"""Error taxonomy for the collaboration and sharing engine.

Every error carries a message that can be shown to the user as-is, and the
HTTP status the API layer should answer with. Store errors raised by
SQLAlchemy are not wrapped and propagate unchanged.
"""
from __future__ import annotations


class KinfolkError(Exception):
    """Base class for caller-facing engine errors."""

    status_code: int = 400
    default_message = "The request could not be completed."

    def __init__(self, message: str | None = None, **context: object) -> None:
        self.message = message or self.default_message
        self.context = {k: v for k, v in context.items() if v is not None}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class MissingEmail(KinfolkError):
    """Sharing was attempted on a Person without an email address."""

    status_code = 422
    default_message = (
        "Profile must have an email address before sharing. "
        "Please add an email to this profile."
    )


class InvalidTarget(KinfolkError):
    """A collaboration request named neither an account nor an email."""

    status_code = 422
    default_message = "Choose an account or enter an email address to invite."


class PersonNotFound(KinfolkError):
    status_code = 404
    default_message = "Person not found."


class RequestNotFound(KinfolkError):
    status_code = 404
    default_message = "Collaboration request not found."


class RecordNotFound(KinfolkError):
    status_code = 404
    default_message = "Record not found."


class RequestAlreadyResolved(KinfolkError):
    """The request left PENDING before this accept/decline could apply."""

    status_code = 409
    default_message = (
        "This invitation has already been answered. Refresh to see its current state."
    )


class GrantInconsistency(KinfolkError):
    """The reciprocal grant or the profile link of an acceptance failed."""

    status_code = 503
    default_message = "Failed to link profiles. Please try again."


__all__ = [
    "GrantInconsistency",
    "InvalidTarget",
    "KinfolkError",
    "MissingEmail",
    "PersonNotFound",
    "RecordNotFound",
    "RequestAlreadyResolved",
    "RequestNotFound",
]
