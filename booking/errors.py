"""
booking/errors.py
Failures of the lead workflow that are not pricing errors.
"""


class BookingError(Exception):
    code = "booking_error"


class ListingNotFound(BookingError):
    code = "listing_not_found"


class LeadNotFound(BookingError):
    code = "lead_not_found"


class InvalidStatus(BookingError):
    code = "invalid_status"


class SubmissionInvalid(BookingError):
    """Booking form is incomplete; nothing has been priced or written."""
    code = "submission_invalid"

    def __init__(self, issues: list[str]) -> None:
        super().__init__("; ".join(issues))
        self.issues = issues
