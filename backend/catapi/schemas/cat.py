"""
CatAPI Backend — Cat Request/Response Schemas
===============================================

What:  The API contract for cat records.

Read shape:
    {
        "id": "…",
        "cat_name": "Miso",
        "weight": 4.2,
        "birthdate": "2020-05-01",
        "filename": "3f7c….jpg",
        "location": {"type": "Point", "coordinates": [24.94, 60.17]},
        "owner": {"id": "…", "user_name": "alice", "email": "a@x.com"}
    }

    `owner` is the composed view produced by CatRepository's join, not a
    stored sub-document.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catapi.security.principal import Principal
from catapi.utils.geo import Coordinates

if TYPE_CHECKING:
    from catapi.repositories.cat_repository import CatView


class Location(BaseModel):
    """GeoJSON point; coordinates are [longitude, latitude]."""
    type: Literal["Point"] = "Point"
    coordinates: Tuple[float, float]

    @field_validator("coordinates")
    @classmethod
    def validate_range(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        lng, lat = v
        if not -180.0 <= lng <= 180.0:
            raise ValueError("longitude must be between -180 and 180")
        if not -90.0 <= lat <= 90.0:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @property
    def lat(self) -> float:
        return self.coordinates[1]

    @property
    def lng(self) -> float:
        return self.coordinates[0]


class OwnerSummary(BaseModel):
    id: uuid.UUID
    user_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class CatResponse(BaseModel):
    """A cat together with its expanded owner."""
    id: uuid.UUID
    cat_name: str
    weight: float
    birthdate: date
    filename: str
    location: Location
    owner: OwnerSummary

    @classmethod
    def from_view(cls, view: "CatView") -> "CatResponse":
        cat = view.cat
        return cls(
            id=cat.id,
            cat_name=cat.cat_name,
            weight=cat.weight,
            birthdate=cat.birthdate,
            filename=cat.filename,
            location=Location(coordinates=(cat.longitude, cat.latitude)),
            owner=OwnerSummary.model_validate(view.owner),
        )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CatCreate(BaseModel):
    """Client-writable fields of a new cat (sent as multipart form fields)."""
    cat_name: str = Field(min_length=1, max_length=100)
    weight: float = Field(gt=0)
    birthdate: date


class CatUpdate(BaseModel):
    """
    Fields an owner may change. `owner` is not among them; sending it is a
    validation error rather than a silent no-op.
    """
    cat_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    weight: Optional[float] = Field(default=None, gt=0)
    birthdate: Optional[date] = None
    location: Optional[Location] = None

    model_config = ConfigDict(extra="forbid")


class CatAdminUpdate(CatUpdate):
    """Admins may additionally reassign the owner."""
    owner: Optional[uuid.UUID] = None


@dataclass(frozen=True)
class CatCreateCommand:
    """
    Everything create_cat needs, gathered by the route: who is creating,
    what they sent, where the upload was stored and the resolved location.
    """
    principal: Principal
    data: CatCreate
    filename: str
    coordinates: Coordinates
