"""Tests for the render module."""

import datetime
import unittest

from prayer_times.prayer_api import FetchOutcome, HijriDate, PrayerMeta, PrayerTimeRecord, PrayerTimings
from prayer_times.render import ERROR_MESSAGE, FALLBACK_WARNING, render_text

RECORD = PrayerTimeRecord(
    timings=PrayerTimings(
        Fajr="05:00",
        Sunrise="06:30",
        Dhuhr="12:15",
        Asr="15:45",
        Maghrib="18:20",
        Isha="19:50",
    ),
    readable_date="01 Mar 2025",
    hijri=HijriDate(date="01-09-1446", day="1", month_en="Ramadan", month_ar="رَمَضان", year="1446"),
    meta=PrayerMeta(latitude=21.4225, longitude=39.8262, timezone="Asia/Riyadh"),
)


class TestRenderText(unittest.TestCase):
    def test_marks_next_prayer(self):
        text = render_text(FetchOutcome(RECORD, False), datetime.time(13, 0))
        lines = text.splitlines()
        self.assertIn("01 Mar 2025", lines)
        self.assertTrue(any(line.startswith(">") and "Asr" in line and "3:45 PM" in line for line in lines))
        self.assertEqual(sum(1 for line in lines if line.startswith(">")), 1)
        self.assertIn("Next: Asr at 3:45 PM", text)
        self.assertNotIn(FALLBACK_WARNING, text)

    def test_all_times_in_12_hour_format(self):
        text = render_text(FetchOutcome(RECORD, False), datetime.time(13, 0))
        for formatted in ("5:00 AM", "6:30 AM", "12:15 PM", "3:45 PM", "6:20 PM", "7:50 PM"):
            self.assertIn(formatted, text)

    def test_fallback_warning(self):
        text = render_text(FetchOutcome(RECORD, True), datetime.time(13, 0))
        self.assertIn(FALLBACK_WARNING, text)

    def test_after_isha_shows_tomorrow(self):
        text = render_text(FetchOutcome(RECORD, False), datetime.time(22, 0))
        self.assertIn("Next: Fajr at 5:00 AM (tomorrow)", text)
        self.assertFalse(any(line.startswith(">") for line in text.splitlines()))

    def test_error_message(self):
        self.assertEqual(ERROR_MESSAGE, "Unable to fetch prayer times. Please try again later.")


if __name__ == "__main__":
    unittest.main()
