"""
FlagArchive Backend: Entity Input Validation
============================================

What:  Business-rule checks on create/update requests.
Why:   Everything that can be rejected without touching the database is
       rejected here, before the service opens a single statement.
How:   Pure functions. Each returns the full list of violations (empty list
       means valid) so a caller can fix every field in one round trip.

Rules:
    name           required on create, may not be cleared on update, 1-255 chars
    unique_id      required on create, 1-100 chars, [A-Za-z0-9][A-Za-z0-9_.-]*
                   on update only the stored value is accepted
    id             on update only the id being updated is accepted
    category       <= 100 chars
    alt_parent_id  <= 100 chars
    description    <= 2000 chars

Blank strings count as missing for the required fields.
"""

import re
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from flagarchive.models.entity import (
    ALT_PARENT_ID_MAX_LENGTH,
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    UNIQUE_ID_MAX_LENGTH,
)
from flagarchive.schemas.entity import EntityCreate, EntityUpdate

UNIQUE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")

_OPTIONAL_LIMITS = (
    ("category", CATEGORY_MAX_LENGTH),
    ("alt_parent_id", ALT_PARENT_ID_MAX_LENGTH),
    ("description", DESCRIPTION_MAX_LENGTH),
)


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


def _check_length(field: str, value: Optional[str], limit: int) -> List[FieldViolation]:
    if value is not None and len(value) > limit:
        return [FieldViolation(field, f"must be at most {limit} characters")]
    return []


def _check_name(value: Optional[str]) -> List[FieldViolation]:
    if value is None or not value.strip():
        return [FieldViolation("name", "is required")]
    return _check_length("name", value, NAME_MAX_LENGTH)


def _check_unique_id(value: Optional[str]) -> List[FieldViolation]:
    if value is None or not value.strip():
        return [FieldViolation("unique_id", "is required")]
    if len(value) > UNIQUE_ID_MAX_LENGTH:
        return [FieldViolation("unique_id", f"must be at most {UNIQUE_ID_MAX_LENGTH} characters")]
    if not UNIQUE_ID_PATTERN.match(value):
        return [
            FieldViolation(
                "unique_id",
                "must start with a letter or digit and contain only letters, "
                "digits, '_', '-' or '.'",
            )
        ]
    return []


def validate_create(request: EntityCreate) -> List[FieldViolation]:
    """Violations for a create request, in field order."""
    violations = _check_name(request.name)
    violations += _check_unique_id(request.unique_id)
    for field, limit in _OPTIONAL_LIMITS:
        violations += _check_length(field, getattr(request, field), limit)
    return violations


def validate_update(request: EntityUpdate, entity_id: int) -> List[FieldViolation]:
    """
    Violations for a partial update of entity `entity_id`. Only fields the
    caller actually sent are checked.

    A sent unique_id needs the stored record to compare against; see
    validate_key_unchanged().
    """
    present = request.model_fields_set
    violations: List[FieldViolation] = []

    if "id" in present and request.id != entity_id:
        violations.append(FieldViolation("id", "cannot be changed"))
    if "name" in present:
        violations += _check_name(request.name)
    for field, limit in _OPTIONAL_LIMITS:
        if field in present:
            violations += _check_length(field, getattr(request, field), limit)
    return violations


def validate_key_unchanged(request: EntityUpdate, stored_unique_id: str) -> List[FieldViolation]:
    """A unique_id in an update must equal the stored one; echoing it is fine."""
    if "unique_id" in request.model_fields_set and request.unique_id != stored_unique_id:
        return [FieldViolation("unique_id", "cannot be changed after creation")]
    return []
