"""
FlagArchive Backend: User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Why:   Archive users are served read-only next to the entities.

The password column exists in the table but is never mapped into any API
response (see services/mapper.py).
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from flagarchive.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
