"""pricing_engine package"""
from .catalog import (
    FALLBACK_ORDER, HOUR_OPTIONS, active_modes, default_mode, end_hour_options,
    parse_mode, propose_checkout, require_bookable,
)
from .calculators import DailyCalculator, HourlyCalculator, StayCalculator, split_commission
from .engine import QuoteEngine, compute_quote
from .errors import (
    InconsistentQuote, InvalidCommissionRate, InvalidRange, ModeUnavailable, NoActiveModes, QuoteError,
)
from .models import (
    ChargeRequest, Mode, PricingBasis, Quote, RateCatalog, RateCatalogEntry, UNIT_LABELS,
)
__all__ = [
    "FALLBACK_ORDER", "HOUR_OPTIONS", "active_modes", "default_mode", "end_hour_options",
    "parse_mode", "propose_checkout", "require_bookable",
    "DailyCalculator", "HourlyCalculator", "StayCalculator", "split_commission",
    "QuoteEngine", "compute_quote",
    "InconsistentQuote", "InvalidCommissionRate", "InvalidRange", "ModeUnavailable", "NoActiveModes",
    "QuoteError",
    "ChargeRequest", "Mode", "PricingBasis", "Quote", "RateCatalog", "RateCatalogEntry", "UNIT_LABELS",
]
