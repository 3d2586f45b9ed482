#!/usr/bin/env python3
"""
Prayer Times Card
Small always-on-top window with the day's prayer times for the current
location and a countdown to the next prayer.
Run with --text to print the timings instead of opening the window.
"""

import sys

from prayer_times.cli import main

if __name__ == "__main__":
    sys.exit(main())
