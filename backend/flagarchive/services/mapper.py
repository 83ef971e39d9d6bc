"""
FlagArchive Backend: Record <-> Representation Mapping
======================================================

What:  Hand-written transforms between ORM records and API schemas.
Why:   Each field is listed explicitly, so the exposed shape changes only
       when this file changes. Nothing is discovered at runtime.
How:   Pure functions; no I/O, no clock, no exceptions of their own.

Deliberate narrowings (outbound):
    - FlagEntity.created_at / updated_at are storage metadata, not exposed
    - User.password is never exposed

Inbound:
    - Nothing is invented. New records get no id and no timestamps; the
      repository assigns them.
    - Updates carry exactly the fields the caller sent.
"""

from typing import Any, Dict

from flagarchive.models.entity import FlagEntity
from flagarchive.models.user import User
from flagarchive.schemas.entity import EntityCreate, EntityResponse, EntityUpdate
from flagarchive.schemas.user import UserResponse

# Fields an update may touch. id and unique_id are fixed for a record's life.
UPDATABLE_FIELDS = ("name", "category", "alt_parent_id", "description")


def to_response(entity: FlagEntity) -> EntityResponse:
    return EntityResponse(
        id=entity.id,
        name=entity.name,
        unique_id=entity.unique_id,
        category=entity.category,
        alt_parent_id=entity.alt_parent_id,
        description=entity.description,
    )


def to_new_record(request: EntityCreate) -> FlagEntity:
    """Build an unsaved FlagEntity from a validated create request."""
    return FlagEntity(
        name=request.name,
        unique_id=request.unique_id,
        category=request.category,
        alt_parent_id=request.alt_parent_id,
        description=request.description,
    )


def update_fields(request: EntityUpdate) -> Dict[str, Any]:
    """
    The fields the caller sent, with their values.

    A field sent as null is included (it clears the column); a field that was
    not sent is absent from the result.
    """
    present = request.model_fields_set
    return {field: getattr(request, field) for field in UPDATABLE_FIELDS if field in present}


def apply_update(entity: FlagEntity, fields: Dict[str, Any]) -> FlagEntity:
    for field, value in fields.items():
        setattr(entity, field, value)
    return entity


def to_update_request(response: EntityResponse) -> EntityUpdate:
    """
    The representation sent back as an update: every field at its current
    value, keys included. Applying it changes nothing.
    """
    return EntityUpdate(
        id=response.id,
        unique_id=response.unique_id,
        name=response.name,
        category=response.category,
        alt_parent_id=response.alt_parent_id,
        description=response.description,
    )


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
    )
