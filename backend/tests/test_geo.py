"""
CatAPI Backend — Coordinate Helper Tests
==========================================

What:  "lat,lng" parsing and rectangle construction for bounding-box queries.
"""

import pytest

from catapi.exceptions import ValidationError
from catapi.utils.geo import (
    Coordinates,
    covers,
    parse_lat_lng,
    rectangle_bounds,
    to_geometry,
)


class TestParseLatLng:
    def test_parses_lat_then_lng(self):
        assert parse_lat_lng("60.17, 24.94", "topRight") == Coordinates(lat=60.17, lng=24.94)

    @pytest.mark.parametrize("value", ["60.17", "1,2,3", "", "abc,def"])
    def test_malformed_strings(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_lat_lng(value, "topRight")
        assert exc_info.value.message.endswith(": topRight")

    @pytest.mark.parametrize("value", ["91,0", "-91,0", "0,181", "0,-181"])
    def test_out_of_range(self, value):
        with pytest.raises(ValidationError):
            parse_lat_lng(value, "bottomLeft")


class TestRectangleBounds:
    def test_polygon_uses_lng_as_x(self):
        polygon = rectangle_bounds(Coordinates(61.0, 25.0), Coordinates(60.0, 24.0))
        assert polygon["type"] == "Polygon"
        xs = {x for x, _ in polygon["coordinates"][0]}
        ys = {y for _, y in polygon["coordinates"][0]}
        assert xs == {24.0, 25.0}
        assert ys == {60.0, 61.0}

    def test_corner_order_does_not_matter(self):
        a, b = Coordinates(61.0, 24.0), Coordinates(60.0, 25.0)
        assert to_geometry(rectangle_bounds(a, b)).equals(to_geometry(rectangle_bounds(b, a)))

    def test_covers_inside_outside_and_edge(self):
        area = to_geometry(rectangle_bounds(Coordinates(61.0, 25.0), Coordinates(60.0, 24.0)))
        assert covers(area, 60.5, 24.5)
        assert not covers(area, 62.0, 24.5)
        assert not covers(area, 60.5, 26.0)
        assert covers(area, 60.0, 24.0)
