"""Tests for the prayer_api module."""

import copy
import datetime
import unittest
from unittest.mock import MagicMock, patch

import requests

from prayerclock.errors import UpstreamError
from prayerclock.models import PRAYER_NAMES
from prayerclock.prayer_api import fetch_by_city, fetch_by_coordinates, parse_schedule

MOCK_RESPONSE = {
    "code": 200,
    "status": "OK",
    "data": {
        "timings": {
            "Fajr": "04:30",
            "Sunrise": "05:55",
            "Dhuhr": "12:00",
            "Asr": "15:30",
            "Maghrib": "18:15",
            "Isha": "19:30",
            "Midnight": "00:00",
            "Imsak": "04:20",
        },
        "date": {
            "gregorian": {
                "date": "01-03-2025",
                "weekday": {"en": "Saturday"},
            },
            "hijri": {
                "day": "1",
                "month": {"en": "Ramadan", "ar": "رَمَضان"},
                "year": "1446",
            },
        },
        "meta": {"timezone": "Asia/Jakarta"},
    },
}


def _mock_get(mock_get, payload):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()
    mock_get.return_value = mock_resp


class TestFetchByCoordinates(unittest.TestCase):
    @patch("prayerclock.prayer_api.requests.get")
    def test_returns_ordered_schedule(self, mock_get):
        _mock_get(mock_get, MOCK_RESPONSE)

        schedule = fetch_by_coordinates(-6.2, 106.8, 11, datetime.date(2025, 3, 1), label="Jakarta")

        self.assertEqual([name for name, _ in schedule.prayers], list(PRAYER_NAMES))
        self.assertEqual(schedule.time_of("Fajr"), "04:30")
        self.assertEqual(schedule.time_of("Maghrib"), "18:15")
        self.assertEqual(schedule.timezone, "Asia/Jakarta")
        self.assertEqual(schedule.hijri.month_name, "Ramadan")
        self.assertEqual(str(schedule.hijri), "1 Ramadan 1446 AH")
        self.assertEqual(schedule.display_name, "Jakarta")
        self.assertEqual(schedule.calc_method, 11)

    @patch("prayerclock.prayer_api.requests.get")
    def test_request_uses_given_date_and_method(self, mock_get):
        _mock_get(mock_get, MOCK_RESPONSE)
        fetch_by_coordinates(-6.2, 106.8, 3, datetime.date(2025, 3, 1))
        url = mock_get.call_args.args[0]
        self.assertTrue(url.endswith("/timings/01-03-2025"))
        self.assertEqual(
            mock_get.call_args.kwargs["params"],
            {"latitude": -6.2, "longitude": 106.8, "method": 3},
        )

    @patch("prayerclock.prayer_api.datetime")
    @patch("prayerclock.prayer_api.requests.get")
    def test_defaults_to_local_today(self, mock_get, mock_datetime):
        _mock_get(mock_get, MOCK_RESPONSE)
        mock_datetime.date.today.return_value = datetime.date(2024, 12, 31)
        schedule = fetch_by_coordinates(51.5, -0.1, 2)
        self.assertTrue(mock_get.call_args.args[0].endswith("/31-12-2024"))
        self.assertEqual(schedule.fetched_for, datetime.date(2024, 12, 31))

    @patch("prayerclock.prayer_api.requests.get")
    def test_strips_timezone_suffix(self, mock_get):
        response = copy.deepcopy(MOCK_RESPONSE)
        response["data"]["timings"]["Fajr"] = "04:30 (PKT)"
        _mock_get(mock_get, response)

        schedule = fetch_by_coordinates(-6.2, 106.8)
        self.assertEqual(schedule.time_of("Fajr"), "04:30")

    @patch("prayerclock.prayer_api.requests.get")
    def test_raises_on_api_error(self, mock_get):
        _mock_get(mock_get, {"code": 400, "status": "Bad Request"})
        with self.assertRaises(UpstreamError):
            fetch_by_coordinates(-6.2, 106.8)

    @patch("prayerclock.prayer_api.requests.get")
    def test_raises_on_transport_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(UpstreamError):
            fetch_by_coordinates(-6.2, 106.8)

    @patch("prayerclock.prayer_api.requests.get")
    def test_raises_on_missing_timezone(self, mock_get):
        response = copy.deepcopy(MOCK_RESPONSE)
        del response["data"]["meta"]
        _mock_get(mock_get, response)
        with self.assertRaises(UpstreamError):
            fetch_by_coordinates(-6.2, 106.8)


class TestParseSchedule(unittest.TestCase):
    def test_missing_prayer_is_incomplete(self):
        response = copy.deepcopy(MOCK_RESPONSE)
        del response["data"]["timings"]["Asr"]
        with self.assertRaises(UpstreamError):
            parse_schedule(response)

    def test_missing_hijri_is_incomplete(self):
        response = copy.deepcopy(MOCK_RESPONSE)
        del response["data"]["date"]["hijri"]
        with self.assertRaises(UpstreamError):
            parse_schedule(response)

    def test_garbage_time_is_rejected(self):
        response = copy.deepcopy(MOCK_RESPONSE)
        response["data"]["timings"]["Isha"] = "late"
        with self.assertRaises(UpstreamError):
            parse_schedule(response)

    def test_display_name_from_timezone_without_label(self):
        response = copy.deepcopy(MOCK_RESPONSE)
        response["data"]["meta"]["timezone"] = "America/New_York"
        self.assertEqual(parse_schedule(response).display_name, "New York")


class TestFetchByCity(unittest.TestCase):
    @patch("prayerclock.prayer_api.requests.get")
    def test_queries_timings_by_city(self, mock_get):
        _mock_get(mock_get, MOCK_RESPONSE)
        schedule = fetch_by_city("Bogor", 20, datetime.date(2025, 3, 1))
        self.assertTrue(mock_get.call_args.args[0].endswith("/timingsByCity/01-03-2025"))
        self.assertEqual(mock_get.call_args.kwargs["params"]["city"], "Bogor")
        self.assertEqual(schedule.location_label, "Bogor")


if __name__ == "__main__":
    unittest.main()
