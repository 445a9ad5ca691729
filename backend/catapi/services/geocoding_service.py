"""
CatAPI Backend — Geocoding Service
====================================

What:  Resolves a free-form address into Coordinates.
How:   One GET to a Nominatim-compatible `/search` endpoint with httpx.
       The first match wins. No retries: a failure surfaces immediately.
Who:   Called by the `resolve_coordinates` dependency of the cat routes when
       the client sends an address instead of explicit lat/lng.

Failure mapping:
    empty result list        → ValidationError (field "address", 400)
    timeout / network error  → GeocodingError (502)
    non-2xx / bad payload    → GeocodingError (502)
"""

import logging
from typing import Optional

import httpx

from catapi.config import settings
from catapi.exceptions import GeocodingError, ValidationError
from catapi.utils.geo import Coordinates, validate_coordinates

logger = logging.getLogger(__name__)


class GeocodingService:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Override settings.geocoder_url.
            timeout: Override settings.geocoder_timeout (seconds).
            transport: Custom httpx transport (tests pass httpx.MockTransport).
        """
        self.base_url = (base_url or settings.geocoder_url).rstrip("/")
        self.timeout = timeout or settings.geocoder_timeout
        self._transport = transport

    async def geocode(self, address: str) -> Coordinates:
        """
        Resolve `address` to the coordinates of the best match.

        Raises:
            ValidationError: address is blank or has no match.
            GeocodingError: provider unreachable or answered with an error.
        """
        query = (address or "").strip()
        if not query:
            raise ValidationError("Address must not be empty: address", field="address")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": settings.geocoder_user_agent},
            ) as client:
                response = await client.get(
                    "/search",
                    params={"q": query, "format": "json", "limit": 1},
                )
                response.raise_for_status()
                results = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Geocoder returned HTTP %d for '%s'", e.response.status_code, query)
            raise GeocodingError(context={"status_code": e.response.status_code})
        except httpx.HTTPError as e:
            logger.error("Geocoder request failed: %s", str(e))
            raise GeocodingError(context={"error_type": type(e).__name__})
        except ValueError as e:
            logger.error("Geocoder returned invalid JSON: %s", str(e))
            raise GeocodingError(context={"error_type": "invalid_json"})

        if not isinstance(results, list) or not results:
            raise ValidationError(
                "Address could not be located: address",
                field="address",
                context={"address": query},
            )

        first = results[0]
        try:
            lat, lng = float(first["lat"]), float(first["lon"])
        except (KeyError, TypeError, ValueError):
            logger.error("Geocoder match without usable coordinates: %r", first)
            raise GeocodingError(context={"error_type": "malformed_result"})

        logger.info("Geocoded '%s' to (%.5f, %.5f)", query, lat, lng)
        return validate_coordinates(lat, lng, field="address")


geocoding_service = GeocodingService()
