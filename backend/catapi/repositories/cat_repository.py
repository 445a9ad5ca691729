"""
CatAPI Backend — Cat Repository
=================================

What:  All queries against the cats table.
How:   Reads select `(Cat, User)` pairs through an explicit join on
       cats.owner_id = users.id and return them as CatView. The stored Cat
       row is never modified to embed its owner.

Bounding-box query plan:
    1. Range filter on the indexed latitude/longitude columns using the
       envelope of the area (SQL, uses idx_cats_location)
    2. Exact containment test of each candidate against the area geometry
       (shapely), boundary inclusive
    For a rectangle step 2 keeps every candidate; it makes the method correct
    for any polygon the caller passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping
from uuid import UUID

from shapely.geometry.base import BaseGeometry
from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.models.cat import Cat
from catapi.models.user import User
from catapi.utils.geo import covers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatView:
    """A cat row together with the user row it references."""

    cat: Cat
    owner: User

    @property
    def owner_id(self) -> UUID:
        return self.cat.owner_id


class CatRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _joined() -> Select:
        return (
            select(Cat, User)
            .join(User, Cat.owner_id == User.id)
            .order_by(Cat.created_at)
        )

    async def _fetch_views(self, query: Select) -> list[CatView]:
        result = await self._session.execute(query)
        return [CatView(cat=cat, owner=owner) for cat, owner in result.all()]

    async def list_all(self) -> list[CatView]:
        return await self._fetch_views(self._joined())

    async def get(self, cat_id: UUID) -> CatView | None:
        views = await self._fetch_views(self._joined().where(Cat.id == cat_id))
        return views[0] if views else None

    async def list_by_owner(self, owner_id: UUID) -> list[CatView]:
        return await self._fetch_views(self._joined().where(Cat.owner_id == owner_id))

    async def list_within(self, area: BaseGeometry) -> list[CatView]:
        """Cats whose location lies inside `area` (x = longitude, y = latitude)."""
        min_lng, min_lat, max_lng, max_lat = area.bounds
        query = self._joined().where(
            Cat.latitude.between(min_lat, max_lat),
            Cat.longitude.between(min_lng, max_lng),
        )
        candidates = await self._fetch_views(query)
        return [v for v in candidates if covers(area, v.cat.latitude, v.cat.longitude)]

    async def add(self, cat: Cat) -> CatView:
        self._session.add(cat)
        await self._session.flush()
        view = await self.get(cat.id)
        if view is None:
            # owner row vanished between insert and read
            raise LookupError(f"Owner {cat.owner_id} of new cat {cat.id} not found")
        return view

    async def update(self, cat_id: UUID, values: Mapping[str, Any]) -> CatView | None:
        """Apply column values to the cat and return the refreshed view."""
        cat = await self._session.get(Cat, cat_id)
        if cat is None:
            return None
        for key, value in values.items():
            setattr(cat, key, value)
        await self._session.flush()
        return await self.get(cat_id)

    async def delete(self, cat_id: UUID) -> CatView | None:
        """Delete the cat, returning the view as it was before deletion."""
        view = await self.get(cat_id)
        if view is None:
            return None
        await self._session.delete(view.cat)
        await self._session.flush()
        return view

    async def delete_by_owner(self, owner_id: UUID) -> int:
        """Delete every cat of an owner; returns how many were removed."""
        result = await self._session.execute(delete(Cat).where(Cat.owner_id == owner_id))
        await self._session.flush()
        logger.info("Deleted %d cats of owner %s", result.rowcount, owner_id)
        return result.rowcount
