"""
UI-facing orchestration: turns user intents into lookups and keeps the
countdown and wall clock running.

All state lives in an explicit SessionState; the view only receives what
to show. Every error from the lower layers stops here and becomes one
user-visible message.
"""

import datetime
import logging
import time

from prayerclock import preferences
from prayerclock.config import DEFAULT_METHOD, MIN_QUERY_LENGTH, REFRESH_MS
from prayerclock.errors import NotFoundError, PrayerClockError, UpstreamError
from prayerclock.location import LocationResolver, get_device_location
from prayerclock.models import ResolvedLocation, SessionState
from prayerclock.prayer_api import fetch_by_city, fetch_by_coordinates
from prayerclock.scheduler import (
    CountdownTicker,
    Debouncer,
    PeriodicTask,
    TaskSlot,
    ThreadedRunner,
    WallClockTicker,
)

logger = logging.getLogger(__name__)

MSG_EMPTY_QUERY = "Please enter a city name"
MSG_SEARCH_FAILED = "Failed to fetch prayer times. Please check the city name and try again."
MSG_LOCATION_DENIED = "Unable to get your location. Please allow location access or search by city name."
MSG_LOCATION_FETCH_FAILED = "Failed to fetch prayer times for your location"
MSG_SUGGESTIONS_SEARCHING = "Searching..."
MSG_SUGGESTIONS_FAILED = "Search failed"


class SessionView:
    """What the session needs from the presentation layer. Defaults do nothing."""

    def show_loading(self):
        pass

    def show_error(self, message: str):
        pass

    def show_schedule(self, schedule):
        pass

    def show_clock_state(self, state):
        pass

    def show_wall_clock(self, text: str):
        pass

    def show_suggestions(self, candidates: list):
        pass

    def show_suggestion_status(self, message: str):
        pass

    def clear_suggestions(self):
        pass


class Session:
    def __init__(
        self,
        scheduler,
        view: SessionView,
        resolver: LocationResolver = None,
        prefs: preferences.PreferenceStore = None,
        runner=None,
        now_fn=datetime.datetime.now,
        fetch_coordinates=fetch_by_coordinates,
        fetch_city=fetch_by_city,
        locate=get_device_location,
    ):
        self.scheduler = scheduler
        self.view = view
        self.resolver = resolver or LocationResolver()
        self.prefs = prefs or preferences.PreferenceStore()
        self.runner = runner or ThreadedRunner(scheduler)
        self._now = now_fn
        self._fetch_coordinates = fetch_coordinates
        self._fetch_city = fetch_city
        self._locate = locate

        self.state = SessionState(
            calc_method=self._saved_method(),
            dark_mode=bool(self.prefs.get(preferences.DARK_MODE, False)),
        )
        self.countdown_slot = TaskSlot("countdown")
        self.wall_clock_slot = TaskSlot("wall clock")
        self.debouncer = Debouncer(scheduler)
        self._last_input = ""

    def _saved_method(self) -> int:
        saved = self.prefs.get(preferences.CALC_METHOD, DEFAULT_METHOD)
        try:
            return int(saved)
        except (TypeError, ValueError):
            logger.warning("Ignoring saved calculation method %r", saved)
            return DEFAULT_METHOD

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self):
        """Start the wall clock and reload the last city, if any. Returns that city."""
        self._start_wall_clock(None)
        city = self.prefs.get(preferences.CITY)
        if city:
            self.search(city)
        return city

    def stop(self):
        self.debouncer.cancel()
        self.countdown_slot.cancel()
        self.wall_clock_slot.cancel()

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------
    def on_input(self, text: str):
        """Search-box edit. Keystrokes that leave the text unchanged are ignored."""
        query = text.strip()
        if query == self._last_input:
            return
        self._last_input = query
        if len(query) < MIN_QUERY_LENGTH:
            self.debouncer.cancel()
            self.clear_suggestions()
            return
        self.debouncer.trigger(lambda: self._fetch_suggestions(query))

    def _fetch_suggestions(self, query: str):
        self.view.show_suggestion_status(MSG_SUGGESTIONS_SEARCHING)
        self.runner.submit(
            lambda: self.resolver.suggest(query),
            self._apply_suggestions,
            self._suggestions_failed,
        )

    def _apply_suggestions(self, candidates: list):
        self.state.suggestions = list(candidates)
        self.view.show_suggestions(self.state.suggestions)

    def _suggestions_failed(self, exc: Exception):
        logger.warning("City search failed: %s", exc)
        self.view.show_suggestion_status(MSG_SUGGESTIONS_FAILED)

    def clear_suggestions(self):
        self.state.suggestions = []
        self.view.clear_suggestions()

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------
    def submit(self, text: str):
        """Enter in the search box: take the top suggestion, else search the text."""
        if self.state.suggestions:
            self.select_candidate(self.state.suggestions[0])
        else:
            self.search(text)

    def search(self, text: str):
        city = text.strip()
        if not city:
            self._report(MSG_EMPTY_QUERY)
            return

        match = next(
            (s for s in self.state.suggestions if s.name.lower() == city.lower()),
            None,
        )
        if match is not None:
            self.select_candidate(match)
            return

        self.prefs.set(preferences.CITY, city)
        self.view.show_loading()
        self.clear_suggestions()
        method = self.state.calc_method
        self.runner.submit(
            lambda: self._lookup_city(city, method),
            self._apply,
            lambda exc: self._failed(exc, MSG_SEARCH_FAILED),
        )

    def _lookup_city(self, city: str, method: int):
        try:
            location = self.resolver.resolve(city)
            schedule = self._fetch_coordinates(
                location.latitude, location.longitude, method, label=city
            )
        except (NotFoundError, UpstreamError) as exc:
            logger.warning("Lookup of %r failed (%s), asking timings service directly", city, exc)
            return None, self._fetch_city(city, method)
        return location, schedule

    def select_candidate(self, candidate):
        self.clear_suggestions()
        self.prefs.set(preferences.CITY, candidate.name)
        self.view.show_loading()
        location = ResolvedLocation(
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            city_name=candidate.name,
            resolved_at=time.time(),
        )
        method = self.state.calc_method
        self.runner.submit(
            lambda: self._fetch_coordinates(
                location.latitude, location.longitude, method, label=candidate.name
            ),
            lambda schedule: self._apply((location, schedule)),
            lambda exc: self._failed(exc, MSG_SEARCH_FAILED),
        )

    def resolve_current_location(self):
        self.view.show_loading()
        self.runner.submit(
            self._locate,
            self._fetch_for_device,
            lambda exc: self._failed(exc, MSG_LOCATION_DENIED),
        )

    def _fetch_for_device(self, coords: tuple):
        lat, lon = coords
        method = self.state.calc_method

        def on_schedule(schedule):
            location = ResolvedLocation(lat, lon, schedule.display_name, time.time())
            self._apply((location, schedule))

        self.runner.submit(
            lambda: self._fetch_coordinates(lat, lon, method, label=None),
            on_schedule,
            lambda exc: self._failed(exc, MSG_LOCATION_FETCH_FAILED),
        )

    def change_method(self, method_id, current_text: str = ""):
        self.state.calc_method = int(method_id)
        self.prefs.set(preferences.CALC_METHOD, self.state.calc_method)
        if current_text.strip():
            self.search(current_text)

    def toggle_dark_mode(self) -> bool:
        self.state.dark_mode = not self.state.dark_mode
        self.prefs.set(preferences.DARK_MODE, self.state.dark_mode)
        return self.state.dark_mode

    # ------------------------------------------------------------------
    # Applying results
    # ------------------------------------------------------------------
    def _apply(self, result: tuple):
        location, schedule = result
        if location is not None:
            self.state.location = location
        self.apply_schedule(schedule)

    def apply_schedule(self, schedule):
        """Install a fully validated schedule and restart both tickers around it."""
        self.state.schedule = schedule
        self.state.last_error = None
        logger.info("Showing %s (%s)", schedule.display_name, schedule.timezone)
        self.view.show_schedule(schedule)
        self._start_wall_clock(schedule.timezone)
        ticker = CountdownTicker(schedule, self.view.show_clock_state, self._now)
        self.countdown_slot.replace(PeriodicTask(self.scheduler, REFRESH_MS, ticker.tick))

    def _start_wall_clock(self, timezone_name):
        ticker = WallClockTicker(timezone_name, self.view.show_wall_clock)
        self.wall_clock_slot.replace(PeriodicTask(self.scheduler, REFRESH_MS, ticker.tick))

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------
    def _failed(self, exc: Exception, message: str):
        if isinstance(exc, PrayerClockError):
            logger.warning("%s: %s", message, exc)
        else:
            logger.error("%s", message, exc_info=exc)
        self._report(message)

    def _report(self, message: str):
        self.state.last_error = message
        self.view.show_error(message)
