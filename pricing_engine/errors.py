"""
pricing_engine/errors.py
Named failures of the quote engine. All are local validation errors raised
before any write; none of them is transient.
"""


class QuoteError(Exception):
    """Base class. ``code`` is the stable name surfaced to API clients."""
    code = "quote_error"

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ModeUnavailable(QuoteError):
    """The requested charter mode is not offered (inactive or unpriced) on the listing."""
    code = "mode_unavailable"


class InvalidRange(QuoteError):
    """End missing or not after start, or a non-positive computed quantity."""
    code = "invalid_range"


class NoActiveModes(QuoteError):
    """The listing has no bookable charter mode at all."""
    code = "no_active_modes"


class InvalidCommissionRate(QuoteError):
    code = "invalid_commission_rate"


class InconsistentQuote(QuoteError):
    """A finished quote failed its arithmetic sanity checks; it is never persisted."""
    code = "inconsistent_quote"
