"""
Pure time arithmetic over a PrayerSchedule.

Times of day are placed on the calendar day of `now`, in `now`'s tzinfo
(naive `now` means device-local wall clock), and rolled to the next day
where a rule says so.
"""

import datetime

from prayerclock.models import ClockState, PrayerSchedule

ONE_DAY = datetime.timedelta(days=1)


def parse_time_of_day(time_str: str) -> datetime.time:
    hour, minute = map(int, time_str[:5].split(":"))
    return datetime.time(hour, minute)


def at_time_of_day(now: datetime.datetime, time_str: str) -> datetime.datetime:
    """Datetime on now's calendar day at the given "HH:MM"."""
    t = parse_time_of_day(time_str)
    return now.replace(hour=t.hour, minute=t.minute, second=0, microsecond=0)


def seconds_until(target_dt: datetime.datetime, now: datetime.datetime) -> int:
    """Whole seconds from now until target_dt (negative if past)."""
    return int((target_dt - now).total_seconds() // 1)


def next_prayer(schedule: PrayerSchedule, now: datetime.datetime) -> tuple:
    """
    Return (prayer_name, prayer_datetime) of the next upcoming prayer.

    A prayer whose time today is not after `now` counts at the same time
    tomorrow, so there is always an answer.
    """
    best = None
    for name, time_str in schedule.prayers:
        at = at_time_of_day(now, time_str)
        if at <= now:
            at += ONE_DAY
        if at > now and (best is None or at < best[1]):
            best = (name, at)
    if best is None:
        raise RuntimeError("no upcoming prayer found; schedule invariant broken")
    return best


def interval_bounds(schedule: PrayerSchedule, index: int, day_of: datetime.datetime) -> tuple:
    """
    [start, end) of the interval that begins at prayer `index` on day_of's date.

    The end is pushed to the following day when it would not be after the
    start; that is how Isha's interval reaches tomorrow's Fajr.
    """
    count = len(schedule.prayers)
    start = at_time_of_day(day_of, schedule.prayers[index][1])
    end = at_time_of_day(day_of, schedule.prayers[(index + 1) % count][1])
    if end <= start:
        end += ONE_DAY
    return start, end


def active_interval(schedule: PrayerSchedule, now: datetime.datetime) -> int:
    """Index i such that now falls in [prayer[i], prayer[i+1]) cyclically."""
    count = len(schedule.prayers)
    # An interval that started yesterday (Isha before midnight) may still be open.
    for day_of in (now, now - ONE_DAY):
        for i in range(count):
            start, end = interval_bounds(schedule, i, day_of)
            if start <= now < end:
                return i
    raise RuntimeError("active interval not found; schedule invariant broken")


def last_third_of_night(schedule: PrayerSchedule) -> str:
    """
    Start of the last third of the night between Maghrib and the next Fajr, as "HH:MM".

    The result is truncated to the minute, so a night of a single minute
    reports Maghrib itself; there is no whole minute strictly inside it.
    """
    base = datetime.datetime(2000, 1, 1)
    maghrib = at_time_of_day(base, schedule.time_of("Maghrib"))
    fajr = at_time_of_day(base, schedule.time_of("Fajr"))
    if fajr <= maghrib:
        fajr += ONE_DAY
    start = maghrib + (fajr - maghrib) * 2 / 3
    return start.strftime("%H:%M")


def format_countdown(seconds: int) -> str:
    """Format whole seconds as "1h 2m 3s", "2m 3s" or "3s"."""
    seconds = max(int(seconds), 0)
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


def format_time_12h(time_str: str) -> str:
    """'18:05' -> '6:05 PM'"""
    t = parse_time_of_day(time_str)
    suffix = "PM" if t.hour >= 12 else "AM"
    return f"{t.hour % 12 or 12}:{t.minute:02d} {suffix}"


def clock_state(schedule: PrayerSchedule, now: datetime.datetime) -> ClockState:
    name, at = next_prayer(schedule, now)
    return state_for(schedule, now, name, at, active_interval(schedule, now))


def state_for(schedule: PrayerSchedule, now: datetime.datetime, name: str,
              at: datetime.datetime, active: int) -> ClockState:
    remaining = seconds_until(at, now)
    return ClockState(
        next_prayer_name=name,
        next_prayer_at=at,
        seconds_until_next=remaining,
        countdown=format_countdown(remaining),
        active_index=active,
        active_prayer_name=schedule.prayers[active][0],
        last_third_of_night=last_third_of_night(schedule),
    )
