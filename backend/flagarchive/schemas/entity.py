"""
FlagArchive Backend: Entity Request/Response Schemas
====================================================

What:  Pydantic models defining the entity API contract.
Why:   Request bodies are decoded into these models by FastAPI; responses are
       serialized from them. They are deliberately separate from the ORM model
       so the exposed shape never drifts with the table.
How:   Request models only describe *shape* (types). Business rules such as
       required fields, length bounds and key format live in
       services/validator.py so that every violation is reported as a
       field-level bad_input error, not as a framework 422.

Partial Updates:
    EntityUpdate relies on pydantic's `model_fields_set` to tell an absent
    field from a field explicitly sent as null:

        {"name": "Japan"}              → only name changes
        {"description": null}          → description is cleared
        {}                             → nothing changes
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class EntityCreate(BaseModel):
    """Body of POST /entities. name and unique_id are required (see validator)."""

    name: Optional[str] = Field(default=None, description="Display name (required)")
    unique_id: Optional[str] = Field(
        default=None,
        description="Caller-chosen business key, unique across all entities (required)",
    )
    category: Optional[str] = Field(default=None, description="Entity category, e.g. 'country'")
    alt_parent_id: Optional[str] = Field(
        default=None,
        description="Opaque reference to a parent; not checked against other entities",
    )
    description: Optional[str] = Field(default=None, description="Free-text note")


class EntityUpdate(BaseModel):
    """
    Body of PATCH /entities/{id}.

    `id` and `unique_id` may be sent back exactly as they were received (so a
    fetched representation can be PATCHed as is); any other value is a
    violation rather than being silently ignored.
    """

    id: Optional[int] = Field(default=None, description="Must match the stored value")
    unique_id: Optional[str] = Field(default=None, description="Must match the stored value")
    name: Optional[str] = Field(default=None, description="New display name")
    category: Optional[str] = Field(default=None, description="New category (null clears)")
    alt_parent_id: Optional[str] = Field(
        default=None, description="New parent reference (null clears)"
    )
    description: Optional[str] = Field(default=None, description="New note (null clears)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class EntityResponse(BaseModel):
    """
    What:  External representation of an entity.
    Why these fields:
        Everything a client can set, plus the storage-assigned id.
        created_at/updated_at are storage metadata and are not exposed.
    """

    id: int = Field(description="Storage-assigned identifier")
    name: str = Field(description="Display name")
    unique_id: str = Field(description="Business key")
    category: Optional[str] = Field(default=None, description="Entity category")
    alt_parent_id: Optional[str] = Field(default=None, description="Parent reference")
    description: Optional[str] = Field(default=None, description="Free-text note")


class EntityPage(BaseModel):
    """
    One page of entities, ordered by id ascending.

    Pages are offset-addressed and not isolated from concurrent writes: a row
    inserted between two fetches can shift later pages by one.
    """

    items: List[EntityResponse] = Field(description="Entities on this page")
    page: int = Field(description="Zero-based page index")
    size: int = Field(description="Effective page size after clamping")
    total_count: int = Field(description="Total number of entities")
    has_more: bool = Field(description="Whether a later page has items")
