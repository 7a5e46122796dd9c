"""
Offline console demo: renders a room's day pickers and books against them.

Uses the real engine and the in-memory bookings store. No database, no
network calls.

Usage:
    python console_demo.py
    python console_demo.py --booked 10:00-12:00 --start 09:30
    python console_demo.py --booked 10:00-12:00 --book 09:00-10:00 --book 09:30-10:30
"""

import argparse
import sys
from typing import Optional

from dayroom.config import settings
from dayroom.engine.slots import SlotOption
from dayroom.engine.timepoints import minutes_to_time_value, parse_time_to_minutes
from dayroom.schemas.booking_schema import BookingRequest
from dayroom.tools import booking as store
from dayroom.tools.availability import get_day_availability
from dayroom.utils import format_duration, format_price

GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_ROOM = "room-1"
DEMO_DATE = "2025-06-02"
DEMO_RATE = 25.0


def _parse_range(text: str) -> tuple[str, str]:
    try:
        start, end = text.split("-", 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected HH:MM-HH:MM, got {text!r}") from None
    return start.strip(), end.strip()


class ConsoleSession:
    """Prints pickers and booking outcomes for one room and date."""

    def __init__(self, room_id: str = DEMO_ROOM, date: str = DEMO_DATE) -> None:
        self.room_id = room_id
        self.date = date

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def book(self, start: str, end: str) -> bool:
        request = BookingRequest(
            room_id=self.room_id, booking_date=self.date, start_time=start, end_time=end
        )
        result = store.create_booking(request, price_per_hour=DEMO_RATE)
        if result["success"]:
            details = result["details"]
            print(
                f"{GREEN}{BOLD}[booked]{RESET} {GREEN}{start}-{end} "
                f"({format_duration(*self._minutes(details))}, "
                f"{format_price(details.get('total_price'))}) -> {result['booking_id']}{RESET}"
            )
            return True
        print(f"{RED}{BOLD}[rejected]{RESET} {RED}{start}-{end}: {result['message']}{RESET}")
        return False

    @staticmethod
    def _minutes(details: dict) -> tuple[int, int]:
        return parse_time_to_minutes(details["start_time"]), parse_time_to_minutes(details["end_time"])

    def _render(self, title: str, options: list[SlotOption], selected: Optional[SlotOption]) -> None:
        print(f"{BOLD}{title}{RESET}")
        for option in options:
            marker = ">" if selected is not None and option.minutes == selected.minutes else " "
            if option.disabled:
                print(f"  {marker} {DIM}{option.label:>9}  (unavailable){RESET}")
            else:
                print(f"  {marker} {option.label:>9}")

    def show(self, start: Optional[str] = None) -> None:
        view = get_day_availability(self.room_id, self.date, start=start)
        policy = settings.policy
        print(
            f"\n{YELLOW}{BOLD}{self.room_id} on {self.date}{RESET} "
            f"{YELLOW}({policy.daytime_start}-{policy.daytime_end}, "
            f"{policy.time_step_minutes} min steps){RESET}"
        )
        for interval in view["booked"]:
            self.system_log(
                f"booked {minutes_to_time_value(interval.start)}-"
                f"{minutes_to_time_value(interval.end)} ({interval.id})"
            )
        self._render("Start", view["start_options"], view["selected_start"])
        self._render("End", view["end_options"], view["selected_end"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline booking slot demo")
    parser.add_argument(
        "--booked",
        type=_parse_range,
        action="append",
        default=[],
        help="Existing booking to seed, HH:MM-HH:MM (repeatable)",
    )
    parser.add_argument("--start", default=None, help="Selected start time, HH:MM")
    parser.add_argument(
        "--book",
        type=_parse_range,
        action="append",
        default=[],
        help="Booking to attempt after rendering, HH:MM-HH:MM (repeatable)",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    for start, end in args.booked:
        if not session.book(start, end):
            sys.exit(1)

    session.show(args.start)
    for start, end in args.book:
        session.book(start, end)
    if args.book:
        session.show(args.start)


if __name__ == "__main__":
    main()
