from dayroom.engine.availability import (
    BookingInterval,
    booking_row_to_interval,
    bookings_to_intervals,
    build_end_options,
    build_start_options,
    compute_end_options_disabled,
    filter_rooms_by_bookings,
    first_enabled,
    get_disabled_time_slots,
    range_overlaps_any,
    ranges_overlap,
    start_has_any_valid_end,
)
from dayroom.engine.slots import (
    OperatingWindow,
    SlotOption,
    build_time_options,
    end_candidates,
    normalize_step,
    start_candidates,
)
from dayroom.engine.timepoints import (
    format_time_label,
    minutes_to_label,
    minutes_to_time_value,
    parse_time_to_minutes,
)
from dayroom.engine.validation import (
    BookingConflictError,
    BookingValidationError,
    ValidationReason,
    ValidationResult,
    recheck_before_write,
    validate_booking_request,
)

__all__ = [
    "parse_time_to_minutes",
    "minutes_to_time_value",
    "minutes_to_label",
    "format_time_label",
    "OperatingWindow",
    "SlotOption",
    "build_time_options",
    "normalize_step",
    "start_candidates",
    "end_candidates",
    "BookingInterval",
    "ranges_overlap",
    "booking_row_to_interval",
    "bookings_to_intervals",
    "range_overlaps_any",
    "get_disabled_time_slots",
    "compute_end_options_disabled",
    "start_has_any_valid_end",
    "build_start_options",
    "build_end_options",
    "first_enabled",
    "filter_rooms_by_bookings",
    "ValidationReason",
    "ValidationResult",
    "BookingValidationError",
    "BookingConflictError",
    "validate_booking_request",
    "recheck_before_write",
]
