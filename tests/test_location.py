"""Tests for the location module."""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

import prayer_times.location as loc_mod
from prayer_times.location import (
    FALLBACK_LOCATION,
    Accuracy,
    Coordinate,
    IPLocationProvider,
    LocationProvider,
    LocationUnavailable,
    ManualLocationProvider,
    PermissionStatus,
    clear_manual_location,
    default_provider,
    get_fallback_location,
    load_manual_location,
    resolve_location,
    save_manual_location,
)

MANUAL = {
    "city": "Ciseeng",
    "region": "Bogor",
    "country": "ID",
    "lat": -6.5567,
    "lon": 106.5614,
    "timezone": "Asia/Jakarta",
}


class _StubProvider(LocationProvider):
    def __init__(self, permission=PermissionStatus.GRANTED, position=None, error=None, permission_error=None):
        self.permission = permission
        self.position = position
        self.error = error
        self.permission_error = permission_error
        self.reads = []

    def request_permission(self):
        if self.permission_error:
            raise self.permission_error
        return self.permission

    def get_current_position(self, accuracy=Accuracy.BALANCED, timeout=10.0):
        self.reads.append((accuracy, timeout))
        if self.error:
            raise self.error
        return self.position


class _TempConfigMixin:
    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self._orig_config_dir = loc_mod.CONFIG_DIR
        self._orig_config_file = loc_mod.CONFIG_FILE
        loc_mod.CONFIG_DIR = self._tmpdir
        loc_mod.CONFIG_FILE = os.path.join(self._tmpdir, "location.json")

    def tearDown(self):
        loc_mod.CONFIG_DIR = self._orig_config_dir
        loc_mod.CONFIG_FILE = self._orig_config_file
        shutil.rmtree(self._tmpdir, ignore_errors=True)


class TestResolveLocation(unittest.TestCase):
    def test_returns_device_position(self):
        provider = _StubProvider(position=Coordinate(51.5074, -0.1278))
        result = resolve_location(provider, timeout=5)
        self.assertEqual(result.coordinate, Coordinate(51.5074, -0.1278))
        self.assertFalse(result.used_fallback)
        self.assertEqual(provider.reads, [(Accuracy.BALANCED, 5)])

    def test_permission_denied_uses_fallback(self):
        provider = _StubProvider(permission=PermissionStatus.DENIED)
        result = resolve_location(provider)
        self.assertEqual(result.coordinate, Coordinate(21.4225, 39.8262))
        self.assertTrue(result.used_fallback)
        self.assertEqual(provider.reads, [])

    def test_permission_request_error_uses_fallback(self):
        provider = _StubProvider(permission_error=RuntimeError("no location service"))
        result = resolve_location(provider)
        self.assertEqual(result, (FALLBACK_LOCATION, True))

    def test_position_error_uses_fallback(self):
        for error in (LocationUnavailable("sensor"), requests.Timeout("slow"), OSError("gone")):
            result = resolve_location(_StubProvider(error=error))
            self.assertEqual(result, (FALLBACK_LOCATION, True))

    def test_fallback_location_is_mecca(self):
        self.assertEqual(get_fallback_location(), Coordinate(latitude=21.4225, longitude=39.8262))


class TestIPLocationProvider(unittest.TestCase):
    @patch("prayer_times.location.requests.get")
    def test_returns_coordinate_on_success(self, mock_get):
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"status": "success", "lat": -6.2, "lon": 106.8}
        mock_resp.raise_for_status = MagicMock()
        mock_get.return_value = mock_resp

        coordinate = IPLocationProvider().get_current_position(timeout=3)
        self.assertEqual(coordinate, Coordinate(-6.2, 106.8))
        self.assertEqual(mock_get.call_args[1]["timeout"], 3)

    @patch("prayer_times.location.requests.get")
    def test_raises_on_api_error_status(self, mock_get):
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"status": "fail", "message": "reserved range"}
        mock_resp.raise_for_status = MagicMock()
        mock_get.return_value = mock_resp

        with self.assertRaises(LocationUnavailable):
            IPLocationProvider().get_current_position()

    @patch("prayer_times.location.requests.get")
    def test_raises_on_missing_coordinates(self, mock_get):
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"status": "success"}
        mock_get.return_value = mock_resp

        with self.assertRaises(LocationUnavailable):
            IPLocationProvider().get_current_position()

    def test_permission_follows_consent(self):
        self.assertEqual(IPLocationProvider(consent=True).request_permission(), PermissionStatus.GRANTED)
        self.assertEqual(IPLocationProvider(consent=False).request_permission(), PermissionStatus.DENIED)

    @patch("prayer_times.location.requests.get")
    def test_resolve_falls_back_on_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("Network error")
        result = resolve_location(IPLocationProvider())
        self.assertEqual(result, (FALLBACK_LOCATION, True))

    @patch("prayer_times.location.requests.get")
    def test_no_consent_skips_request(self, mock_get):
        result = resolve_location(IPLocationProvider(consent=False))
        self.assertTrue(result.used_fallback)
        mock_get.assert_not_called()


class TestManualLocation(_TempConfigMixin, unittest.TestCase):
    def test_save_and_load_manual_location(self):
        save_manual_location(MANUAL)
        loaded = load_manual_location()
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded["city"], "Ciseeng")
        self.assertAlmostEqual(loaded["lat"], -6.5567)

    def test_load_returns_none_when_no_file(self):
        self.assertIsNone(load_manual_location())

    def test_clear_manual_location(self):
        save_manual_location(MANUAL)
        self.assertIsNotNone(load_manual_location())
        clear_manual_location()
        self.assertIsNone(load_manual_location())

    def test_load_returns_none_for_invalid_json(self):
        with open(loc_mod.CONFIG_FILE, "w") as f:
            f.write("not valid json")
        self.assertIsNone(load_manual_location())

    def test_load_returns_none_for_missing_keys(self):
        with open(loc_mod.CONFIG_FILE, "w") as f:
            json.dump({"city": "Test"}, f)
        self.assertIsNone(load_manual_location())


class TestManualLocationProvider(_TempConfigMixin, unittest.TestCase):
    def test_denied_without_saved_location(self):
        result = resolve_location(ManualLocationProvider())
        self.assertEqual(result, (FALLBACK_LOCATION, True))

    def test_uses_saved_location(self):
        save_manual_location(MANUAL)
        result = resolve_location(ManualLocationProvider())
        self.assertEqual(result, (Coordinate(-6.5567, 106.5614), False))

    def test_default_provider_prefers_manual(self):
        self.assertIsInstance(default_provider({}), IPLocationProvider)
        save_manual_location(MANUAL)
        self.assertIsInstance(default_provider({}), ManualLocationProvider)

    def test_default_provider_passes_consent(self):
        provider = default_provider({"use_ip_location": False})
        self.assertEqual(provider.request_permission(), PermissionStatus.DENIED)


if __name__ == "__main__":
    unittest.main()
