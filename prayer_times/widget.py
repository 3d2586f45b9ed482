"""
Prayer Times Card
Small always-on-top window showing:
  - Gregorian and Hijri date for the resolved location
  - A warning when the default location (Mecca) is in use
  - The six daily timings in 12-hour format, next prayer highlighted
  - Countdown to the next prayer and a desktop alert when it arrives
"""

import threading
import tkinter as tk

from prayer_times.config import get_method
from prayer_times.location import default_provider
from prayer_times.notifier import schedule_prayer_alert
from prayer_times.prayer_api import (
    PRAYER_NAMES,
    format_12_hour,
    format_countdown,
    get_prayer_times_for_current_location,
    local_now,
    next_prayer,
    next_prayer_datetime,
    seconds_until,
)
from prayer_times.render import ERROR_MESSAGE, FALLBACK_WARNING

# ──────────────────────────────────────────────────────────────────────────────
# Theme constants
# ──────────────────────────────────────────────────────────────────────────────
BG_DARK = "#1a1a1a"
BG_CARD = "#242424"
BG_HEADER = "#2d5f3f"
BG_NEXT = "#1a3a2a"
BG_WARNING = "#4a3c1f"
ACCENT_GREEN = "#4CAF50"
TEXT_WHITE = "#ffffff"
TEXT_DIM = "#9e9e9e"
TEXT_WARNING = "#ffc107"
TEXT_RED = "#ff6b6b"

FONT = ("Helvetica", 11)
FONT_BOLD = ("Helvetica", 11, "bold")
FONT_TITLE = ("Helvetica", 16, "bold")
FONT_COUNTDOWN = ("Courier", 18, "bold")

WINDOW_W = 360
WINDOW_H = 520

REFRESH_MS = 1000

PRAYER_ICONS = {
    "Fajr": "🌅",
    "Sunrise": "☀️",
    "Dhuhr": "🌞",
    "Asr": "🌤️",
    "Maghrib": "🌆",
    "Isha": "🌙",
}


# ──────────────────────────────────────────────────────────────────────────────
# Main App
# ──────────────────────────────────────────────────────────────────────────────
class PrayerTimesCard:
    def __init__(self, root: tk.Tk, settings: dict):
        self.root = root
        self.settings = settings
        self.method = get_method(settings)
        self.outcome = None
        self.alert_timer = None
        self._alert_for = None

        self._setup_window()
        self._build_ui()
        self._start_data_load()
        self._tick()

    def _setup_window(self):
        root = self.root
        root.title("Prayer Times")
        root.configure(bg=BG_DARK)
        root.resizable(False, False)
        root.attributes("-topmost", True)
        x = root.winfo_screenwidth() - WINDOW_W - 40
        y = (root.winfo_screenheight() - WINDOW_H) // 2
        root.geometry(f"{WINDOW_W}x{WINDOW_H}+{x}+{y}")

    # ──────────────────────────────────────────────────────────────────────
    # UI construction
    # ──────────────────────────────────────────────────────────────────────
    def _build_ui(self):
        header = tk.Frame(self.root, bg=BG_HEADER, pady=8)
        header.pack(fill=tk.X)
        tk.Label(header, text="Prayer Times", font=FONT_TITLE, fg=TEXT_WHITE, bg=BG_HEADER).pack()
        self.lbl_date = tk.Label(header, text="", font=FONT, fg=TEXT_WHITE, bg=BG_HEADER)
        self.lbl_date.pack()
        self.lbl_hijri = tk.Label(header, text="", font=FONT, fg=TEXT_WHITE, bg=BG_HEADER)
        self.lbl_hijri.pack()

        self.warning_frame = tk.Frame(self.root, bg=BG_WARNING, pady=4)
        tk.Label(
            self.warning_frame,
            text=f"⚠️ {FALLBACK_WARNING}",
            font=FONT,
            fg=TEXT_WARNING,
            bg=BG_WARNING,
            wraplength=WINDOW_W - 20,
        ).pack(padx=8)
        # packed only when the fallback location is in use

        self.body = tk.Frame(self.root, bg=BG_DARK)
        self.body.pack(fill=tk.BOTH, expand=True, padx=10, pady=6)

        self.lbl_status = tk.Label(self.body, text="Loading prayer times...", font=FONT, fg=TEXT_DIM, bg=BG_DARK)
        self.lbl_status.pack(pady=20)

        self.btn_retry = tk.Button(
            self.body,
            text="Retry",
            font=FONT_BOLD,
            fg=TEXT_WHITE,
            bg=ACCENT_GREEN,
            bd=0,
            cursor="hand2",
            command=self._reload_data,
        )
        # packed only in the error state

        self.rows_frame = tk.Frame(self.body, bg=BG_DARK)
        self.prayer_rows: dict = {}
        for name in PRAYER_NAMES:
            row = tk.Frame(self.rows_frame, bg=BG_CARD, pady=4)
            row.pack(fill=tk.X, pady=2)
            lbl_name = tk.Label(row, text=f" {PRAYER_ICONS[name]}  {name}", font=FONT, fg=TEXT_WHITE, bg=BG_CARD, anchor="w")
            lbl_name.pack(side=tk.LEFT, padx=4)
            lbl_time = tk.Label(row, text="--:--", font=FONT_BOLD, fg=TEXT_WHITE, bg=BG_CARD, anchor="e")
            lbl_time.pack(side=tk.RIGHT, padx=4)
            self.prayer_rows[name] = {"row": row, "lbl_name": lbl_name, "lbl_time": lbl_time}

        self.lbl_next = tk.Label(self.rows_frame, text="", font=FONT_BOLD, fg=ACCENT_GREEN, bg=BG_DARK)
        self.lbl_next.pack(pady=(10, 0))
        self.lbl_countdown = tk.Label(self.rows_frame, text="--:--:--", font=FONT_COUNTDOWN, fg=ACCENT_GREEN, bg=BG_DARK)
        self.lbl_countdown.pack()

        footer = tk.Frame(self.root, bg=BG_DARK)
        footer.pack(fill=tk.X, side=tk.BOTTOM, pady=6)
        self.lbl_location = tk.Label(footer, text="", font=FONT, fg=TEXT_DIM, bg=BG_DARK)
        self.lbl_location.pack(side=tk.LEFT, padx=10)
        tk.Button(
            footer,
            text="⟳ Refresh",
            font=FONT,
            fg=ACCENT_GREEN,
            bg=BG_DARK,
            bd=0,
            cursor="hand2",
            command=self._reload_data,
        ).pack(side=tk.RIGHT, padx=10)

    # ──────────────────────────────────────────────────────────────────────
    # Data loading (runs in background thread)
    # ──────────────────────────────────────────────────────────────────────
    def _start_data_load(self):
        t = threading.Thread(target=self._load_data, daemon=True)
        t.start()

    def _load_data(self):
        """Resolve location and fetch prayer times in a background thread."""
        outcome = get_prayer_times_for_current_location(
            default_provider(self.settings),
            self.method,
            timeout=self.settings.get("timeout", 10),
        )
        if outcome is None:
            self.root.after(0, self._on_data_error)
        else:
            self.root.after(0, lambda: self._on_data_loaded(outcome))

    def _on_data_loaded(self, outcome):
        """Called in main thread once data is ready."""
        self.outcome = outcome
        record = outcome.record
        self.btn_retry.pack_forget()
        self.lbl_status.pack_forget()
        self.rows_frame.pack(fill=tk.BOTH, expand=True)

        self.lbl_date.config(text=record.readable_date)
        self.lbl_hijri.config(text=f"{record.hijri.date} {record.hijri.month_en} {record.hijri.year}")
        self.lbl_location.config(text=f"📍 {record.meta.timezone}")
        if outcome.used_fallback_location:
            self.warning_frame.pack(fill=tk.X, after=self.lbl_hijri.master)
        else:
            self.warning_frame.pack_forget()

        for name, time_str in record.timings.items():
            self.prayer_rows[name]["lbl_time"].config(text=format_12_hour(time_str))
        self._update_next_prayer()

    def _on_data_error(self):
        """Called in main thread when the fetch failed; drops the previous record."""
        self.outcome = None
        self._cancel_alert()
        self.lbl_date.config(text="")
        self.lbl_hijri.config(text="")
        self.lbl_location.config(text="")
        self.warning_frame.pack_forget()
        self.rows_frame.pack_forget()
        self.lbl_status.config(text=ERROR_MESSAGE, fg=TEXT_RED)
        self.lbl_status.pack(pady=20)
        self.btn_retry.pack()

    def _reload_data(self):
        """Refresh location and prayer times."""
        self.lbl_status.config(text="Loading prayer times...", fg=TEXT_DIM)
        self._start_data_load()

    # ──────────────────────────────────────────────────────────────────────
    # Next prayer highlight + countdown
    # ──────────────────────────────────────────────────────────────────────
    def _tick(self):
        """Called every second to update the next prayer and countdown."""
        if self.outcome is not None:
            self._update_next_prayer()
        self.root.after(REFRESH_MS, self._tick)

    def _update_next_prayer(self):
        now = local_now(self.outcome.record)
        upcoming = next_prayer(self.outcome.record.timings, now)
        secs = seconds_until(next_prayer_datetime(upcoming, now), now)

        for name, widgets in self.prayer_rows.items():
            bg = BG_NEXT if name == upcoming.name and not upcoming.tomorrow else BG_CARD
            for widget in widgets.values():
                widget.config(bg=bg)

        when = " (tomorrow)" if upcoming.tomorrow else ""
        self.lbl_next.config(text=f"Next: {upcoming.name} at {format_12_hour(upcoming.time)}{when}")
        self.lbl_countdown.config(text=format_countdown(secs))

        if self._alert_for != upcoming:
            self._cancel_alert()
            self.alert_timer = schedule_prayer_alert(upcoming.name, secs, callback=self._on_notification)
            self._alert_for = upcoming

    def _cancel_alert(self):
        if self.alert_timer is not None:
            self.alert_timer.cancel()
        self.alert_timer = None
        self._alert_for = None

    def _on_notification(self, title: str, message: str):
        """Called from a timer thread; ring the bell in the main thread."""
        self.root.after(0, self.root.bell)




def run_card(settings: dict) -> None:
    root = tk.Tk()
    PrayerTimesCard(root, settings)
    root.mainloop()
