"""Tests for the preferences module."""

import os
import shutil
import tempfile
import unittest

from prayerclock import preferences
from prayerclock.preferences import PreferenceStore


class TestPreferenceStore(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self._tmpdir, "nested", "preferences.json")
        self.store = PreferenceStore(self.path)

    def tearDown(self):
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def test_get_default_when_no_file(self):
        self.assertIsNone(self.store.get(preferences.CITY))
        self.assertEqual(self.store.get(preferences.CALC_METHOD, 2), 2)

    def test_set_and_get(self):
        self.store.set(preferences.CITY, "Ciseeng")
        self.store.set(preferences.CALC_METHOD, 20)
        self.store.set(preferences.DARK_MODE, True)
        reloaded = PreferenceStore(self.path)
        self.assertEqual(reloaded.get(preferences.CITY), "Ciseeng")
        self.assertEqual(reloaded.get(preferences.CALC_METHOD), 20)
        self.assertTrue(reloaded.get(preferences.DARK_MODE))

    def test_set_overwrites(self):
        self.store.set(preferences.CITY, "Bogor")
        self.store.set(preferences.CITY, "Depok")
        self.assertEqual(self.store.get(preferences.CITY), "Depok")

    def test_invalid_json_reads_as_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("not valid json")
        with self.assertLogs("prayerclock.preferences", level="WARNING"):
            self.assertIsNone(self.store.get(preferences.CITY))


if __name__ == "__main__":
    unittest.main()
