"""ResourceRecord ORM — one row per stored resource, any resource type.

Invariants:
    - (resource_type, id) is the primary key: ids are unique per type, not globally
    - attrs holds the resource's serialized fields (JSON), id excluded

Design Decisions:
    - One generic table over one table per type: the existence check only needs
      (resource_type, id), and attrs filters go through JSON indexing
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from quark_rest.db.base import Base


class ResourceRecord(Base):
    __tablename__ = "resources"

    resource_type: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    attrs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
