"""Fetch one day's prayer schedule and Hijri date from the Aladhan API."""

import datetime
import logging
import re

import requests

from prayerclock.config import ALADHAN_BASE, DEFAULT_METHOD, HTTP_TIMEOUT
from prayerclock.errors import UpstreamError
from prayerclock.models import PRAYER_NAMES, HijriDate, PrayerSchedule

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d")


def _request_date(date: datetime.date = None) -> str:
    # The caller's local calendar date, not the destination's.
    if date is None:
        date = datetime.date.today()
    return date.strftime("%d-%m-%Y")


def _get(url: str, params: dict) -> dict:
    logger.debug("GET %s %s", url, params)
    try:
        resp = requests.get(url, params=params, timeout=HTTP_TIMEOUT)
        resp.raise_for_status()
        body = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpstreamError(f"Aladhan request failed: {exc}") from exc
    if not isinstance(body, dict) or body.get("code") != 200:
        status = body.get("status") if isinstance(body, dict) else None
        raise UpstreamError(f"Aladhan API error: {status}")
    return body


def parse_schedule(body: dict, label: str = None, method: int = None,
                   date: datetime.date = None) -> PrayerSchedule:
    """
    Canonicalize an Aladhan timings response into a PrayerSchedule.

    Raises UpstreamError when timings, timezone or Hijri date are missing.
    """
    try:
        data = body["data"]
        raw_timings = data["timings"]
        timezone = data["meta"]["timezone"]
        hijri_data = data["date"]["hijri"]
        hijri = HijriDate(
            day=str(hijri_data["day"]),
            month_name=hijri_data["month"]["en"],
            year=str(hijri_data["year"]),
        )
    except (KeyError, TypeError) as exc:
        raise UpstreamError(f"Incomplete timings payload: missing {exc}") from exc
    if not timezone:
        raise UpstreamError("Incomplete timings payload: empty timezone")

    prayers = []
    for name in PRAYER_NAMES:
        raw = str(raw_timings.get(name) or "")
        match = _HHMM.match(raw)
        if not match:
            raise UpstreamError(f"Bad or missing time for {name}: {raw!r}")
        prayers.append((name, match.group(0)))  # strip " (PKT)" style suffixes

    return PrayerSchedule(
        prayers=tuple(prayers),
        timezone=timezone,
        hijri=hijri,
        location_label=label,
        calc_method=method,
        fetched_for=date,
    )


def fetch_by_coordinates(lat: float, lon: float, method: int = DEFAULT_METHOD,
                         date: datetime.date = None, label: str = None) -> PrayerSchedule:
    """Fetch today's schedule for the given coordinates."""
    if date is None:
        date = datetime.date.today()
    url = f"{ALADHAN_BASE}/timings/{_request_date(date)}"
    body = _get(url, {"latitude": lat, "longitude": lon, "method": method})
    schedule = parse_schedule(body, label=label, method=method, date=date)
    logger.info("Fetched schedule for %.4f,%.4f (%s)", lat, lon, schedule.timezone)
    return schedule


def fetch_by_city(city: str, method: int = DEFAULT_METHOD,
                  date: datetime.date = None) -> PrayerSchedule:
    """Fetch today's schedule letting the timings service geocode the city itself."""
    if date is None:
        date = datetime.date.today()
    url = f"{ALADHAN_BASE}/timingsByCity/{_request_date(date)}"
    body = _get(url, {"city": city, "country": "", "method": method})
    schedule = parse_schedule(body, label=city, method=method, date=date)
    logger.info("Fetched schedule for city %r (%s)", city, schedule.timezone)
    return schedule
