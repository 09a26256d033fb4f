"""
Module: stock_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Provides
    the integer primary key convention and the type annotation map for
    consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Monotonic integer primary keys: movement ids double as the paging
      cursor, so every model uses an autoincrementing integer id.
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(38, 9).  NEVER use float for quantities.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
IdType = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model inherits from Base.  Base provides an integer primary
        key and a type_annotation_map that enforces consistent column types
        across the schema.

    Guarantees:
        - id is an autoincrementing integer (BIGINT on PostgreSQL).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        int: IdType,
    }

    id: Mapped[int] = mapped_column(
        IdType,
        primary_key=True,
        autoincrement=True,
    )
