"""Tests for the notifier module."""

import unittest
from unittest.mock import MagicMock, patch

from prayer_times.notifier import _send_plyer, notify_prayer_time, schedule_prayer_alert


class TestNotifyPrayerTime(unittest.TestCase):
    @patch("prayer_times.notifier._send_plyer")
    def test_calls_send_plyer(self, mock_plyer):
        notify_prayer_time("Maghrib")
        mock_plyer.assert_called_once()
        args = mock_plyer.call_args[0]
        self.assertIn("Maghrib", args[0])
        self.assertIn("time for Maghrib", args[1])

    @patch("prayer_times.notifier._send_plyer")
    def test_calls_callback(self, mock_plyer):
        cb = MagicMock()
        notify_prayer_time("Isha", callback=cb)
        cb.assert_called_once()
        self.assertIn("Isha", cb.call_args[0][0])


class TestSendPlyer(unittest.TestCase):
    @patch("prayer_times.notifier.plyer_notification")
    def test_backend_failure_is_logged(self, mock_notification):
        mock_notification.notify.side_effect = NotImplementedError("no usable implementation")
        with self.assertLogs("prayer_times.notifier", level="WARNING"):
            _send_plyer("title", "message")


class TestSchedulePrayerAlert(unittest.TestCase):
    def test_no_timer_for_past_prayer(self):
        self.assertIsNone(schedule_prayer_alert("Fajr", -100))
        self.assertIsNone(schedule_prayer_alert("Fajr", 0))

    def test_starts_daemon_timer(self):
        with patch("prayer_times.notifier.threading.Timer") as mock_timer_cls:
            mock_timer = MagicMock()
            mock_timer_cls.return_value = mock_timer
            cb = MagicMock()
            timer = schedule_prayer_alert("Asr", 700, callback=cb)

        self.assertIs(timer, mock_timer)
        self.assertEqual(mock_timer_cls.call_args[0][0], 700)
        self.assertEqual(mock_timer_cls.call_args[1]["args"], ("Asr", cb))
        self.assertTrue(mock_timer.daemon)
        mock_timer.start.assert_called_once()


if __name__ == "__main__":
    unittest.main()
