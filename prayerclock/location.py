"""Place search, free-text location resolution and device location."""

import logging
import time

import requests

from prayerclock.config import (
    GEOCODE_CACHE_TTL,
    HTTP_TIMEOUT,
    IPAPI_URL,
    MIN_QUERY_LENGTH,
    NOMINATIM_URL,
    RESOLVE_LIMIT,
    SUGGESTION_LIMIT,
    USER_AGENT,
)
from prayerclock.errors import GeolocationDeniedError, NotFoundError, UpstreamError
from prayerclock.models import ResolvedLocation
from prayerclock.ranker import has_coordinates, importance_of, rank_candidates

logger = logging.getLogger(__name__)

CITY_TYPES = ("city", "town", "village", "municipality")
MIN_BEST_MATCH_IMPORTANCE = 0.3
CITY_ADDRESS_KEYS = ("city", "town", "village", "municipality", "county", "state_district")


def search_places(text: str, limit: int, timeout: int = HTTP_TIMEOUT) -> list:
    """
    Query the place search service.

    Returns the raw list of hits, each with name, type, class, importance,
    lat, lon, address and display_name. Raises UpstreamError on transport
    failure, non-success status or a body that is not a list.
    """
    try:
        resp = requests.get(
            NOMINATIM_URL,
            params={
                "q": text,
                "format": "json",
                "addressdetails": "1",
                "limit": str(limit),
                "accept-language": "en",
            },
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamError(f"Place search failed: {exc}") from exc
    if not isinstance(data, list):
        raise UpstreamError("Place search returned an unexpected payload")
    return data


def normalize_query(text: str) -> str:
    return text.strip().lower()


def is_city_like(hit: dict) -> bool:
    place_type = (hit.get("type") or "").lower()
    place_class = (hit.get("class") or "").lower()
    return any(word in place_type for word in CITY_TYPES) or place_class == "place"


def _first_city_like(hits: list):
    return next(
        (h for h in hits if is_city_like(h) and importance_of(h) > MIN_BEST_MATCH_IMPORTANCE),
        None,
    )


def _most_important(hits: list):
    return max(hits, key=importance_of) if hits else None


def best_match(hits: list):
    """Pick the hit a full search resolves to, or None when there are no hits."""
    for tier in (_first_city_like, _most_important):
        hit = tier(hits)
        if hit is not None:
            return hit
    return None


def extract_city_name(hit: dict, query_text: str) -> str:
    address = hit.get("address") or {}
    display_head = (hit.get("display_name") or "").split(",")[0].strip()
    choices = [address.get(key) for key in CITY_ADDRESS_KEYS]
    choices += [display_head, query_text]
    return next((c for c in choices if c), query_text)


class LocationResolver:
    """
    Resolves free text to coordinates, remembering answers for a day.

    The cache is keyed by the trimmed, lower-cased query and is never
    evicted; entries older than the TTL are simply re-resolved.
    """

    def __init__(self, search=search_places, now_fn=time.time, ttl: float = GEOCODE_CACHE_TTL):
        self._search = search
        self._now = now_fn
        self.ttl = ttl
        self.cache: dict = {}

    def cached(self, query_text: str):
        entry = self.cache.get(normalize_query(query_text))
        if entry is not None and self._now() - entry.resolved_at < self.ttl:
            return entry
        return None

    def resolve(self, query_text: str) -> ResolvedLocation:
        key = normalize_query(query_text)
        entry = self.cached(query_text)
        if entry is not None:
            logger.debug("Geocode cache hit for %r", key)
            return entry

        logger.info("Resolving %r", query_text)
        hits = [h for h in self._search(query_text.strip(), RESOLVE_LIMIT) if has_coordinates(h)]
        hit = best_match(hits)
        if hit is None:
            raise NotFoundError(f"No place found for {query_text!r}")

        location = ResolvedLocation(
            latitude=float(hit["lat"]),
            longitude=float(hit["lon"]),
            city_name=extract_city_name(hit, query_text.strip()),
            resolved_at=self._now(),
        )
        self.cache[key] = location
        return location

    def suggest(self, query_text: str) -> list:
        """Ranked candidates for interactive search; [] without a network call for short text."""
        query = query_text.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        return rank_candidates(self._search(query, SUGGESTION_LIMIT))


def get_device_location(timeout: int = HTTP_TIMEOUT) -> tuple:
    """
    Detect the device's coordinates via IP geolocation.

    Returns (lat, lon). Raises GeolocationDeniedError when the lookup fails.
    """
    try:
        resp = requests.get(
            IPAPI_URL,
            params={"fields": "lat,lon,status,message"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise GeolocationDeniedError(f"Location lookup failed: {exc}") from exc
    if data.get("status") != "success" or data.get("lat") is None or data.get("lon") is None:
        raise GeolocationDeniedError(data.get("message") or "Location unavailable")
    return float(data["lat"]), float(data["lon"])
