"""Desktop notification when the next prayer time arrives."""

import logging
import threading

from plyer import notification as plyer_notification

logger = logging.getLogger(__name__)

APP_NAME = "Prayer Times"


def _send_plyer(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification via plyer (cross-platform)."""
    try:
        plyer_notification.notify(
            app_name=APP_NAME,
            title=title,
            message=message,
            timeout=timeout,
        )
    except Exception as exc:
        # No notification backend on this desktop; the in-app banner still shows.
        logger.warning("Desktop notification failed: %s", exc)


def notify_prayer_time(prayer_name: str, callback=None) -> None:
    """
    Send a desktop notification that ``prayer_name`` has arrived.
    Optionally calls callback(title, message), e.g. to update the GUI.
    """
    title = f"🕌 {prayer_name}"
    message = f"It is now time for {prayer_name}."
    _send_plyer(title, message, timeout=30)
    if callback:
        callback(title, message)


def schedule_prayer_alert(prayer_name: str, seconds_until_prayer: int, callback=None) -> threading.Timer | None:
    """
    Start a daemon timer that calls notify_prayer_time() when the prayer arrives.

    Returns the started Timer so it can be cancelled on refresh, or None if
    the prayer time is not in the future.
    """
    if seconds_until_prayer <= 0:
        return None
    t = threading.Timer(
        seconds_until_prayer,
        notify_prayer_time,
        args=(prayer_name, callback),
    )
    t.daemon = True
    t.start()
    logger.debug("Alert for %s scheduled in %s seconds", prayer_name, seconds_until_prayer)
    return t
