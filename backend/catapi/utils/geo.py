"""Coordinate parsing and bounding-box geometry helpers.

Every coordinate string the API accepts uses the same ``"lat,lng"`` order, for
both corners of a bounding box. Geometries built here follow GeoJSON, so
their x axis is longitude and their y axis is latitude.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from shapely.geometry import Point, box, mapping, shape
from shapely.geometry.base import BaseGeometry

from catapi.exceptions import ValidationError


class Coordinates(NamedTuple):
    """A WGS84 position in decimal degrees."""

    lat: float
    lng: float


def validate_coordinates(lat: float, lng: float, field: str = "location") -> Coordinates:
    """Return ``Coordinates`` or raise ValidationError when out of range."""
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f"Latitude must be between -90 and 90: {field}", field=field)
    if not -180.0 <= lng <= 180.0:
        raise ValidationError(f"Longitude must be between -180 and 180: {field}", field=field)
    return Coordinates(lat=lat, lng=lng)


def parse_lat_lng(value: str, field: str) -> Coordinates:
    """Parse a ``"lat,lng"`` string such as ``"60.17,24.94"``.

    Raises:
        ValidationError: if the string is not two comma separated numbers or
            the numbers are outside the valid latitude/longitude ranges.
    """
    parts = [part.strip() for part in (value or "").split(",")]
    if len(parts) != 2:
        raise ValidationError(f"Expected 'lat,lng' coordinates: {field}", field=field)
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValidationError(f"Coordinates must be numbers: {field}", field=field)
    return validate_coordinates(lat, lng, field)


def rectangle_bounds(corner_a: Coordinates, corner_b: Coordinates) -> dict[str, Any]:
    """Build a GeoJSON Polygon covering the rectangle spanned by two corners.

    The corners may be given in any order (top-right/bottom-left or
    top-left/bottom-right); the min and max of each axis are used.
    """
    rectangle = box(
        min(corner_a.lng, corner_b.lng),
        min(corner_a.lat, corner_b.lat),
        max(corner_a.lng, corner_b.lng),
        max(corner_a.lat, corner_b.lat),
    )
    return mapping(rectangle)


def to_geometry(geojson: dict[str, Any]) -> BaseGeometry:
    """Convert a GeoJSON mapping into a shapely geometry."""
    return shape(geojson)


def covers(area: BaseGeometry, lat: float, lng: float) -> bool:
    """True if the point lies inside ``area`` or on its boundary."""
    return area.covers(Point(lng, lat))
