"""
pricing_engine/catalog.py
Which charter modes a listing can currently be booked in, and which one the
booking form preselects.
"""
from datetime import date, timedelta
from typing import Iterable, Optional

from pricing_engine.errors import ModeUnavailable, NoActiveModes
from pricing_engine.models import Mode, RateCatalog, RateCatalogEntry

# Daily charters are the most common product, so they win the fallback
FALLBACK_ORDER: tuple[Mode, ...] = (Mode.DAILY, Mode.HOURLY, Mode.STAY)

# Hours the booking form offers for hourly charters (08:00 - 20:00)
HOUR_OPTIONS: tuple[int, ...] = tuple(range(8, 21))


def active_modes(catalog: RateCatalog) -> set[Mode]:
    """Modes that are switched on AND carry a positive price."""
    return {entry.mode for entry in catalog if entry.bookable}


def default_mode(catalog: RateCatalog, requested: Optional[Mode] = None) -> Mode:
    """
    Honour ``requested`` when it is bookable, otherwise fall back through
    Daily → Hourly → Stay. Raises NoActiveModes when nothing is bookable.
    """
    modes = active_modes(catalog)
    if not modes:
        raise NoActiveModes("No rental option is available for this listing")
    if requested is not None and requested in modes:
        return requested
    for mode in FALLBACK_ORDER:
        if mode in modes:
            return mode
    raise NoActiveModes("No rental option is available for this listing")  # pragma: no cover


def require_bookable(catalog: RateCatalog, mode: Mode) -> RateCatalogEntry:
    entry = catalog[mode]
    if not entry.bookable:
        raise ModeUnavailable(
            f"The {mode.value} rental option is not offered for this boat",
            mode=mode.value,
        )
    return entry


def parse_mode(value: Optional[str]) -> Optional[Mode]:
    """Map a URL ``type`` parameter to a Mode; unknown values are ignored."""
    if not value:
        return None
    try:
        return Mode(value.strip().lower())
    except ValueError:
        return None


def end_hour_options(start_hour: int, hours: Iterable[int] = HOUR_OPTIONS) -> list[int]:
    return [h for h in hours if h > start_hour]


def propose_checkout(checkin: date, entry: RateCatalogEntry) -> date:
    """Checkout the Stay form suggests when only a checkin date is chosen."""
    return checkin + timedelta(days=entry.effective_minimum)
