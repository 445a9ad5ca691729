"""
CatAPI Backend — Cat SQLAlchemy Model
=======================================

What:  ORM model for the `cats` table.
Who:   Used by CatRepository and Alembic.

Location storage:
    The point is stored as two float columns (latitude, longitude) with a
    composite index; bounding-box queries filter on both ranges. The GeoJSON
    shape clients see is built by the `location` property, coordinates in
    GeoJSON order [longitude, latitude].

Owner:
    owner_id references users.id. The row only stores the key; reads expand
    it through an explicit join in CatRepository.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict

from sqlalchemy import Date, DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catapi.database import Base


class Cat(Base):
    """A cat record with an uploaded photo and a geographic point."""

    __tablename__ = "cats"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    cat_name: Mapped[str] = mapped_column(String(100), nullable=False)

    weight: Mapped[float] = mapped_column(Float, nullable=False)

    birthdate: Mapped[date] = mapped_column(Date, nullable=False)

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Stored name of the uploaded image under the storage root",
    )

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_cats_location", "latitude", "longitude"),
    )

    @property
    def location(self) -> Dict[str, Any]:
        """GeoJSON point for this cat."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    def __repr__(self) -> str:
        return f"<Cat(id={self.id}, cat_name='{self.cat_name}', owner_id={self.owner_id})>"
