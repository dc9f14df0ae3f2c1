# app/db/base_class.py
from __future__ import annotations

"""
# Lesson Video API • SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (stable constraint names for migrations)
- Helpful `__repr__` for debugging
- `UUIDPKMixin` / `CreatedAtMixin` shared by the catalog tables

Usage:
    from app.db.base_class import Base, UUIDPKMixin, CreatedAtMixin

    class Topic(UUIDPKMixin, CreatedAtMixin, Base):
        __tablename__ = "topics"
        title = Column(String(255), nullable=False)

Notes:
- Ids use the generic `Uuid` type: native UUID on PostgreSQL, CHAR(32)
  elsewhere (SQLite in tests).
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase

# ──────────────────────────────────────────────────────────────────────────────
# 🏷️ Naming conventions
# ──────────────────────────────────────────────────────────────────────────────

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ──────────────────────────────────────────────────────────────────────────────
# 🧱 Declarative Base
# ──────────────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Global declarative base for the catalog models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover (repr convenience)
        attrs = [f"{key}={getattr(self, key)!r}" for key in ("id", "title") if hasattr(self, key)]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


# ──────────────────────────────────────────────────────────────────────────────
# 🧩 Common mixins
# ──────────────────────────────────────────────────────────────────────────────

class UUIDPKMixin:
    """UUIDv4 primary key generated client-side."""
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)


class CreatedAtMixin:
    """Server-side insert timestamp (UTC)."""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


__all__ = [
    "Base",
    "UUIDPKMixin",
    "CreatedAtMixin",
    "NAMING_CONVENTION",
]
