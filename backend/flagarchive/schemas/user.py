"""
FlagArchive Backend: User Response Schemas
==========================================

Users are read-only through the API, so only response models exist.
"""

from typing import List

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """External representation of a user. Never carries the password."""

    id: int = Field(description="Storage-assigned identifier")
    email: str = Field(description="Contact e-mail")
    first_name: str = Field(description="Given name")
    last_name: str = Field(description="Family name")
    username: str = Field(description="Login name")


class UserPage(BaseModel):
    items: List[UserResponse]
    page: int
    size: int
    total_count: int
    has_more: bool
