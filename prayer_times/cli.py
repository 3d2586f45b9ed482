"""Command-line entry point: print the timings or open the card window."""

import argparse
import logging
import sys

from prayer_times.config import get_method, load_settings, save_settings
from prayer_times.location import clear_manual_location, default_provider, save_manual_location
from prayer_times.prayer_api import CalculationMethod, get_prayer_times_for_current_location, local_now
from prayer_times.render import ERROR_MESSAGE, render_text


def setup_logging(level: str = "WARNING") -> None:
    """Attach a stderr handler to the root logger (once) and set its level."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Islamic prayer times for your current location")
    parser.add_argument("--method", help="Calculation method (see --list-methods); saved as the default")
    parser.add_argument("--text", action="store_true", help="Print prayer times instead of opening the window")
    parser.add_argument("--list-methods", action="store_true", help="List calculation methods")
    parser.add_argument("--set-location", nargs=2, type=float, metavar=("LAT", "LON"), help="Save a manual location")
    parser.add_argument("--clear-location", action="store_true", help="Forget the manual location")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging("DEBUG" if args.debug else settings["log_level"].upper())

    if args.list_methods:
        for method in CalculationMethod:
            print(f"{method.value}: {method.description} (code {method.code})")
        return 0

    if args.method:
        try:
            settings["method"] = CalculationMethod.from_name(args.method).value
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 2
        save_settings(settings)

    if args.clear_location:
        clear_manual_location()
        return 0

    if args.set_location:
        lat, lon = args.set_location
        save_manual_location({"lat": lat, "lon": lon})
        return 0

    if args.text:
        outcome = get_prayer_times_for_current_location(
            default_provider(settings),
            get_method(settings),
            timeout=settings["timeout"],
        )
        if outcome is None:
            print(ERROR_MESSAGE, file=sys.stderr)
            return 1
        print(render_text(outcome, local_now(outcome.record)))
        return 0

    # tkinter is only needed for the window
    from prayer_times.widget import run_card

    run_card(settings)
    return 0
