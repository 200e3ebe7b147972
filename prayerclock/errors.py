"""Error types raised by the location, timings and clock layers."""


class PrayerClockError(Exception):
    """Base class for every failure the session reports to the user."""


class NotFoundError(PrayerClockError):
    """Place search returned no usable match."""


class UpstreamError(PrayerClockError):
    """A remote service failed or returned a malformed payload."""


class GeolocationDeniedError(PrayerClockError):
    """Device location is unavailable or was refused."""


class InvalidTimezoneError(PrayerClockError):
    """Timezone string cannot be used for formatting."""
