"""
FlagArchive Backend: Error Taxonomy
===================================

What:  The closed set of errors a resource operation can end with.
Why:   Callers need to tell "fix your input" from "pick another key" from
       "that id does not exist" from "our side failed", without parsing
       messages and without any knowledge of HTTP.
How:   Each exception class carries an `ErrorKind`, a user-safe message and
       an optional context dict. Only the dispatch layer (main.py) maps a
       kind to a transport status code.
Who:   Raised by services; caught by the global handlers in main.py.

Exception Hierarchy:
    FlagArchiveError (base)
    ├── BadInputError    kind=bad_input   (caller can fix the payload)
    ├── ConflictError    kind=conflict    (caller can choose another key)
    ├── NotFoundError    kind=not_found   (caller targeted a missing id)
    └── InternalError    kind=internal    (not caller-recoverable)

Exactly one of these is raised per failed operation.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorKind(str, Enum):
    """Closed set of failure kinds. The value doubles as the wire error code."""

    BAD_INPUT = "bad_input"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class FlagArchiveError(Exception):
    """
    Base exception for all FlagArchive application errors.

    Attributes:
        kind:     Which branch of the taxonomy this error belongs to
        message:  User-facing error description (safe to return in API response)
        context:  Additional info; returned as `details` for caller-recoverable
                  kinds, logged only for INTERNAL
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadInputError(FlagArchiveError):
    """
    Raised when caller input is malformed or incomplete.

    Carries the field-level violations found by the validator, verbatim, so
    the caller can fix every problem in one round trip.
    """

    kind = ErrorKind.BAD_INPUT

    def __init__(
        self,
        message: str = "Invalid input",
        violations: Optional[Sequence[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        self.violations: List[Dict[str, str]] = list(violations or [])
        if self.violations:
            ctx["violations"] = self.violations
        super().__init__(message=message, context=ctx)


class ConflictError(FlagArchiveError):
    """Raised when a write would break the external-key uniqueness invariant."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        resource: str = "resource",
        field: str = "unique_id",
        value: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} with this {field} already exists"
        if value is not None:
            message = f"{resource} with {field} '{value}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        ctx["field"] = field
        if value is not None:
            ctx["value"] = value
        super().__init__(message=message, context=ctx)


class NotFoundError(FlagArchiveError):
    """
    Raised when an operation targets an identifier that does not exist.

    The repositories return None for a missing row; the service layer turns
    that None into this exception.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InternalError(FlagArchiveError):
    """
    Raised when the storage layer fails in a way the caller cannot fix.

    Security Note:
        The message is always generic. Driver errors, SQL text and constraint
        names go into `context`, which is logged server-side and never
        returned to the caller.
    """

    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
