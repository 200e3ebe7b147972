"""Score, filter and order raw place-search hits."""

import logging
import math

from prayerclock.config import MAX_CANDIDATES
from prayerclock.models import GeoCandidate

logger = logging.getLogger(__name__)

# (substrings of the hit type, base priority), checked in order
TYPE_TIERS = (
    (("city", "town", "village", "municipality"), 100),
    (("administrative", "suburb", "district", "county"), 30),
    (("hamlet", "locality", "neighbourhood"), 20),
)
PLACE_CLASS_PRIORITY = 50
DEFAULT_PRIORITY = 10

EXCLUDED_TYPES = ("building", "house", "road", "street", "path", "bridge", "tunnel")
MIN_IMPORTANCE = 0.05


def _coord(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def has_coordinates(hit: dict) -> bool:
    return _coord(hit.get("lat")) is not None and _coord(hit.get("lon")) is not None


def importance_of(hit: dict) -> float:
    try:
        return float(hit.get("importance") or 0)
    except (TypeError, ValueError):
        return 0.0


def base_priority(place_type: str, place_class: str) -> int:
    """Priority tier of a hit before the importance boost."""
    if any(word in place_type for word in TYPE_TIERS[0][0]):
        return TYPE_TIERS[0][1]
    if place_class == "place":
        return PLACE_CLASS_PRIORITY
    for words, priority in TYPE_TIERS[1:]:
        if any(word in place_type for word in words):
            return priority
    return DEFAULT_PRIORITY


def score(hit: dict) -> float:
    place_type = (hit.get("type") or "").lower()
    place_class = (hit.get("class") or "").lower()
    return base_priority(place_type, place_class) + importance_of(hit) * 10


def is_eligible(hit: dict) -> bool:
    place_type = (hit.get("type") or "").lower()
    if any(word in place_type for word in EXCLUDED_TYPES):
        return False
    return has_coordinates(hit) and importance_of(hit) > MIN_IMPORTANCE


def to_candidate(hit: dict, priority: float = 0.0) -> GeoCandidate:
    address = hit.get("address") or {}
    return GeoCandidate(
        name=hit.get("name") or (hit.get("display_name") or "").split(",")[0].strip(),
        country=address.get("country", ""),
        region=address.get("state") or address.get("region") or address.get("county") or "",
        latitude=_coord(hit.get("lat")),
        longitude=_coord(hit.get("lon")),
        priority=priority,
        place_type=(hit.get("type") or "").lower(),
        place_class=(hit.get("class") or "").lower(),
        importance=importance_of(hit),
        display_name=hit.get("display_name", ""),
    )


def _ranked(hits: list, limit: int) -> list:
    scored = [(score(hit), hit) for hit in hits if is_eligible(hit)]
    # sorted() is stable, so equal scores keep upstream order
    scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [to_candidate(hit, priority) for priority, hit in scored[:limit]]


def _unranked(hits: list, limit: int) -> list:
    return [to_candidate(hit) for hit in hits if has_coordinates(hit)][:limit]


def rank_candidates(hits: list, limit: int = MAX_CANDIDATES) -> list:
    """
    Turn raw search hits into at most `limit` GeoCandidates, best first.

    When filtering leaves nothing but the upstream did return hits, fall back
    to every hit that has coordinates, in upstream order.
    """
    for tier in (_ranked, _unranked):
        candidates = tier(hits, limit)
        if candidates:
            return candidates
        if hits:
            logger.debug("No candidates from %s over %d hits", tier.__name__, len(hits))
    return []
