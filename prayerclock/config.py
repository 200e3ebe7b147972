"""Runtime settings. Every constant can be overridden by a PRAYERCLOCK_* env var."""

import os


def _env(name: str, default):
    raw = os.environ.get(f"PRAYERCLOCK_{name}")
    if raw is None or raw == "":
        return default
    return type(default)(raw)


ALADHAN_BASE = _env("ALADHAN_BASE", "https://api.aladhan.com/v1")
NOMINATIM_URL = _env("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
IPAPI_URL = _env("IPAPI_URL", "http://ip-api.com/json/")
USER_AGENT = _env("USER_AGENT", "PrayerClock/1.0")
HTTP_TIMEOUT = _env("HTTP_TIMEOUT", 10)

# 2 = ISNA is the Aladhan default
DEFAULT_METHOD = _env("DEFAULT_METHOD", 2)
CALCULATION_METHODS = {
    1: "University of Islamic Sciences, Karachi",
    2: "Islamic Society of North America (ISNA)",
    3: "Muslim World League",
    4: "Umm Al-Qura University, Makkah",
    5: "Egyptian General Authority of Survey",
    7: "Institute of Geophysics, University of Tehran",
    8: "Gulf Region",
    9: "Kuwait",
    10: "Qatar",
    11: "Majlis Ugama Islam Singapura",
    12: "Union Organization Islamic de France",
    13: "Diyanet İşleri Başkanlığı, Turkey",
    14: "Spiritual Administration of Muslims of Russia",
    15: "Moonsighting Committee Worldwide",
    16: "Dubai",
    20: "KEMENAG, Indonesia",
}

GEOCODE_CACHE_TTL = _env("GEOCODE_CACHE_TTL", 24 * 60 * 60)  # seconds
SUGGESTION_LIMIT = 15
RESOLVE_LIMIT = 5
MAX_CANDIDATES = 8
MIN_QUERY_LENGTH = 2

DEBOUNCE_MS = _env("DEBOUNCE_MS", 300)
REFRESH_MS = 1000  # both tickers run once a second

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".prayerclock")
PREFERENCES_FILE = os.path.join(CONFIG_DIR, "preferences.json")

LOG_LEVEL = _env("LOG_LEVEL", "INFO")
