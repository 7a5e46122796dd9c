"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestEngineImports:
    def test_engine_reexports(self):
        import dayroom.engine as engine

        for name in engine.__all__:
            assert hasattr(engine, name), name

    def test_engine_does_not_load_settings(self):
        import dayroom.engine.availability as availability

        assert not hasattr(availability, "settings")

    def test_import_validation(self):
        from dayroom.engine import ValidationReason

        assert ValidationReason.CONFLICT == "conflict"


class TestSchemaImports:
    def test_import_booking_schema(self):
        from dayroom.schemas.booking_schema import BookingRow, BookingStatus

        row = BookingRow(
            id=1, room_id="r1", booking_date="2025-06-02", start_time="09:00", end_time="10:00",
            unexpected_column="ignored",
        )
        assert row.status == BookingStatus.PENDING
        assert not hasattr(row, "unexpected_column")


class TestToolImports:
    def test_import_booking(self):
        from dayroom.tools.booking import cancel_booking, create_booking, update_booking

        assert callable(create_booking)
        assert callable(update_booking)
        assert callable(cancel_booking)

    def test_import_availability(self):
        from dayroom.tools.availability import get_day_availability

        assert callable(get_day_availability)


class TestLoggingContext:
    def test_request_id_filter(self):
        import logging

        from dayroom.logging_context import RequestIdFilter, get_request_id, get_request_logger, request_context

        logger = get_request_logger("dayroom.test")
        get_request_logger("dayroom.test")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1

        record = logging.LogRecord("dayroom.test", logging.INFO, __file__, 1, "msg", None, None)
        with request_context("REQ-1"):
            assert logger.filter(record)
        assert record.request_id == "REQ-1"
        assert get_request_id() == "NO_REQUEST_ID"
