"""
FlagArchive Backend: Application Package Initializer
====================================================

What: Marks the `flagarchive` directory as a Python package.
Why:  Enables module imports like `from flagarchive.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin stack around one resource core:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Validator, Mapper,      │  ← Invariants, error taxonomy
    │             Resource Service)       │
    ├─────────────────────────────────────┤
    │   Repositories (Storage Gateway)    │  ← The only code that talks SQL
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes never touch the database; services never build HTTP responses.
"""

__version__ = "1.0.0"
