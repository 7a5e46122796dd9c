"""Integration tests: bookings store + engine + availability view together."""

import logging
import threading

from dayroom.schemas.booking_schema import BookingRequest, BookingStatus
from dayroom.tools import booking as store
from dayroom.tools.availability import get_day_availability
from dayroom.tools.lifecycle import StatusTrigger
from tests.conftest import DAY, ROOM, book


class TestCreateBooking:
    def test_happy_path(self):
        result = book("10:00", "12:00")
        assert result["success"]
        assert result["booking_id"].startswith("BK-")
        details = result["details"]
        assert details["status"] == BookingStatus.PAYMENT_PENDING
        assert details["billable_hours"] == 2.0

    def test_accepts_request_model_and_prices(self):
        request = BookingRequest(
            room_id=ROOM, booking_date=DAY, start_time="09:00", end_time="10:30"
        )
        result = store.create_booking(request, price_per_hour=20.0)
        assert result["details"]["total_price"] == 30.0
        assert result["details"]["price_per_hour"] == 20.0

    def test_overlap_rejected(self):
        book("10:00", "12:00")
        result = book("11:00", "13:00")
        assert not result["success"]
        assert result["reason"] == "overlap"

    def test_back_to_back_allowed(self):
        assert book("10:00", "12:00")["success"]
        assert book("12:00", "13:00")["success"]
        assert book("09:00", "10:00")["success"]

    def test_other_room_or_day_unaffected(self):
        book("10:00", "12:00")
        assert book("10:00", "12:00", room_id="room-2")["success"]
        assert book("10:00", "12:00", booking_date="2025-06-03")["success"]

    def test_missing_date(self):
        result = store.create_booking(
            {"room_id": ROOM, "start_time": "10:00", "end_time": "11:00"}
        )
        assert result["reason"] == "missing_date"

    def test_outside_hours(self):
        assert book("16:30", "17:30")["reason"] == "end_out_of_hours"

    def test_concurrent_submissions_admit_one(self):
        results = []
        barrier = threading.Barrier(8)

        def submit():
            barrier.wait()
            results.append(book("14:00", "15:00"))

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r["success"]) == 1
        assert len(store.list_bookings(ROOM, DAY)) == 1

    def test_conflict_logged_with_request_id(self, monkeypatch, caplog):
        validate = store.validate_booking_request

        def rival_books_first(*args, **kwargs):
            monkeypatch.setattr(store, "validate_booking_request", validate)
            assert book("14:00", "15:00")["success"]
            return validate(*args, **kwargs)

        monkeypatch.setattr(store, "validate_booking_request", rival_books_first)
        request = {"room_id": ROOM, "booking_date": DAY, "start_time": "14:00", "end_time": "15:00"}
        with caplog.at_level(logging.INFO, logger="dayroom.tools.booking"):
            result = store.create_booking(request, request_id="REQ-late")

        assert result["reason"] == "conflict"
        assert result["request_id"] == "REQ-late"
        conflicts = [
            r for r in caplog.records
            if r.name == "dayroom.tools.booking" and r.levelno == logging.WARNING
        ]
        assert len(conflicts) == 1
        assert conflicts[0].request_id == "REQ-late"
        assert "REQ-late" in conflicts[0].getMessage()

    def test_request_id_generated_per_submission(self):
        first = book("09:00", "10:00")
        second = book("10:00", "11:00")
        assert first["request_id"].startswith("REQ-")
        assert first["request_id"] != second["request_id"]


class TestListBookings:
    def test_sorted_by_time_not_text(self):
        book("10:00", "11:00")
        book("9:00", "9:30")
        assert [r.start_time for r in store.list_bookings(ROOM, DAY)] == ["9:00", "10:00"]

    def test_reads_survive_concurrent_writes(self):
        errors = []
        done = threading.Event()

        def read():
            while not done.is_set():
                try:
                    store.list_bookings(ROOM, DAY)
                    get_day_availability(ROOM, DAY)
                except Exception as exc:
                    errors.append(exc)
                    return

        def write():
            try:
                for i in range(200):
                    book("10:00", "11:00", room_id=f"room-w{i}")
            finally:
                done.set()

        readers = [threading.Thread(target=read) for _ in range(4)]
        writer = threading.Thread(target=write)
        for t in readers:
            t.start()
        writer.start()
        writer.join()
        for t in readers:
            t.join()

        assert errors == []
        assert len(store.list_bookings("room-w199", DAY)) == 1


class TestUpdateBooking:
    def test_move_within_own_slot(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        result = store.update_booking(booking_id, DAY, "10:30", "12:30")
        assert result["success"]
        assert store.get_booking(booking_id).start_time == "10:30"

    def test_move_onto_another_booking(self):
        book("13:00", "15:00")
        booking_id = book("10:00", "12:00")["booking_id"]
        result = store.update_booking(booking_id, DAY, "12:00", "14:00")
        assert result["reason"] == "overlap"
        assert store.get_booking(booking_id).start_time == "10:00"

    def test_edit_minimum_duration(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        result = store.update_booking(booking_id, DAY, "10:00", "11:00")
        assert result["reason"] == "below_min_duration"

    def test_reprices_with_existing_rate(self):
        request = {"room_id": ROOM, "booking_date": DAY, "start_time": "09:00", "end_time": "11:00"}
        booking_id = store.create_booking(request, price_per_hour=10.0)["booking_id"]
        result = store.update_booking(booking_id, DAY, "09:00", "12:00")
        assert result["details"]["total_price"] == 30.0

    def test_unknown_booking(self):
        assert store.update_booking("BK-NOPE", DAY, "09:00", "11:00")["reason"] == "not_found"

    def test_cancelled_booking_cannot_be_moved(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        store.cancel_booking(booking_id)
        result = store.update_booking(booking_id, DAY, "13:00", "15:00")
        assert result["reason"] == "invalid_transition"
        assert store.get_booking(booking_id).start_time == "10:00"

    def test_rejected_booking_cannot_be_moved(self):
        request = {"room_id": ROOM, "booking_date": DAY, "start_time": "09:00", "end_time": "11:00"}
        booking_id = store.create_booking(request, price_per_hour=10.0)["booking_id"]
        store.advance_status(booking_id, StatusTrigger.PAYMENT_CONFIRMED)
        store.advance_status(booking_id, StatusTrigger.REJECT)
        result = store.update_booking(booking_id, DAY, "13:00", "16:00", price_per_hour=50.0)
        assert not result["success"]
        assert store.get_booking(booking_id).total_price == 20.0

    def test_cancelled_during_validation_stays_cancelled(self, monkeypatch):
        booking_id = book("10:00", "12:00")["booking_id"]
        validate = store.validate_booking_request

        def cancel_then_validate(*args, **kwargs):
            store.cancel_booking(booking_id)
            return validate(*args, **kwargs)

        monkeypatch.setattr(store, "validate_booking_request", cancel_then_validate)
        result = store.update_booking(booking_id, DAY, "13:00", "15:00")

        assert result["reason"] == "invalid_transition"
        assert store.get_booking(booking_id).status == BookingStatus.CANCELLED
        assert store.list_bookings(ROOM, DAY) == []


class TestStatusChanges:
    def test_cancel_frees_slot(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        assert store.cancel_booking(booking_id)["success"]
        assert store.get_booking(booking_id).status == BookingStatus.CANCELLED
        assert book("10:00", "12:00")["success"]

    def test_rejected_booking_frees_slot(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        store.advance_status(booking_id, StatusTrigger.PAYMENT_CONFIRMED)
        store.advance_status(booking_id, StatusTrigger.REJECT)
        assert store.list_bookings(ROOM, DAY) == []
        assert len(store.list_bookings(ROOM, DAY, blocking_only=False)) == 1

    def test_approved_booking_still_blocks(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        store.advance_status(booking_id, StatusTrigger.PAYMENT_CONFIRMED)
        store.advance_status(booking_id, StatusTrigger.APPROVE)
        assert not book("11:00", "12:00")["success"]

    def test_invalid_transition(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        result = store.advance_status(booking_id, StatusTrigger.APPROVE)
        assert result["reason"] == "invalid_transition"

    def test_cancel_unknown(self):
        assert not store.cancel_booking("BK-NOPE")["success"]


class TestDayAvailability:
    def test_empty_day(self):
        view = get_day_availability(ROOM, DAY)
        assert len(view["start_options"]) == 18
        assert not any(o.disabled for o in view["start_options"])
        assert view["selected_start"].value == "08:00"
        assert view["selected_end"].value == "08:30"

    def test_booked_day_for_requested_start(self):
        book("10:00", "12:00")
        view = get_day_availability(ROOM, DAY, start="09:30")
        assert view["selected_start"].value == "09:30"
        flags = {o.value: o.disabled for o in view["end_options"]}
        assert flags["10:00"] is False
        assert flags["10:30"] is True

    def test_disabled_start_snaps_to_first_open(self):
        book("08:00", "09:00")
        view = get_day_availability(ROOM, DAY, start="08:30")
        assert view["selected_start"].value == "09:00"

    def test_disabled_end_snaps_to_first_open(self):
        book("10:00", "12:00")
        view = get_day_availability(ROOM, DAY, start="09:00", end="11:00")
        assert view["selected_end"].value == "09:30"

    def test_editing_ignores_own_booking(self):
        booking_id = book("10:00", "12:00")["booking_id"]
        view = get_day_availability(ROOM, DAY, start="10:00", exclude_id=booking_id)
        assert view["selected_start"].value == "10:00"
        assert view["booked"] == []

    def test_no_date_selected(self):
        view = get_day_availability(ROOM, None)
        assert all(o.disabled for o in view["start_options"])
        assert view["selected_start"] is None
        assert view["end_options"] == []
