"""
Dionysus Backend — Application Package Initializer
===================================================

What: Marks the `dionysus` directory as a Python package.
Why:  Enables module imports like `from dionysus.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← User sync, auth notifications
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The notification dispatcher (services/auth_notification.py) never touches
    the database; it receives an already-resolved AuthEvent from the caller.
"""

__version__ = "1.0.0"
