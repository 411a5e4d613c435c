"""
Declarative base shared by the slot and swap tables.
"""

from typing import ClassVar, Tuple

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Stable constraint names, so Postgres and SQLite schemas match
NAMING_CONVENTION: dict[str, str] = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj: MetaData = MetaData(naming_convention=NAMING_CONVENTION)


class SlotSwapBase(DeclarativeBase):
    """Base class for all ORM models of the slot swap service."""

    metadata = metadata_obj

    # Columns shown by __repr__ next to the primary key; keeps log lines short
    repr_columns: ClassVar[Tuple[str, ...]] = ("status",)

    def __repr__(self) -> str:
        """e.g. <Slot(slot_id='a1b2c3', status=<SlotStatus.SWAPPABLE: ...>)>"""
        names = [col.name for col in self.__table__.primary_key.columns]
        names += [name for name in self.repr_columns if name not in names]
        values = ", ".join(
            f"{name}={getattr(self, name, None)!r}" for name in names
        )
        return f"<{self.__class__.__name__}({values})>"
