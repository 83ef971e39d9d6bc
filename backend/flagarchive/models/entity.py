"""
FlagArchive Backend: Entity SQLAlchemy Model
============================================

What:  ORM model representing the `entities` table.
Why:   The canonical stored form of an archive entity (a flag, a country,
       a region...).
How:   Inherits from the declarative Base; `init_models()` creates the table.
Who:   Used by SQLEntityRepository and by the mapper.

Table Design:
    - Integer identity primary key, assigned by the store on insert
    - unique_id: the caller's business key. The UNIQUE index is what makes
      concurrent inserts of the same key safe; the service-level lookup
      before insert is only a fast path.
    - created_at / updated_at are written by the repository, never by callers
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flagarchive.database import Base

NAME_MAX_LENGTH = 255
CATEGORY_MAX_LENGTH = 100
UNIQUE_ID_MAX_LENGTH = 100
ALT_PARENT_ID_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 2000


class FlagEntity(Base):
    """
    Represents one archive entity.

    Lifecycle:
        1. Inserted from a validated create request (id and timestamps assigned)
        2. Patched field-by-field from validated update requests
        3. Deleted outright; there is no tombstone
    """

    __tablename__ = "entities"

    # sqlite_autoincrement keeps SQLite from reusing the id of a deleted row
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    # "type" in the archive's vocabulary; renamed to avoid the builtin
    category: Mapped[str | None] = mapped_column(String(CATEGORY_MAX_LENGTH), nullable=True)

    unique_id: Mapped[str] = mapped_column(
        String(UNIQUE_ID_MAX_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )

    # Opaque reference; no foreign key and no cascade policy
    alt_parent_id: Mapped[str | None] = mapped_column(
        String(ALT_PARENT_ID_MAX_LENGTH), nullable=True
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<FlagEntity(id={self.id}, unique_id='{self.unique_id}', name='{self.name}')>"
