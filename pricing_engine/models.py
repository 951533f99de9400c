"""
pricing_engine/models.py
Rate Catalog, ChargeRequest and Quote types shared by the calculators, the
booking flow, reporting and the notification composer. Kept in a separate
module to avoid circular imports.
"""
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Mode(str, Enum):
    """Charter mode. Values are the wire names used by leads and URLs."""
    HOURLY = "hourly"
    DAILY  = "daily"
    STAY   = "stay"


UNIT_LABELS: dict[Mode, str] = {
    Mode.HOURLY: "hour",
    Mode.DAILY:  "day",
    Mode.STAY:   "night",
}

# Minimum hours / nights applied when a listing leaves the minimum unset
DEFAULT_MINIMUMS: dict[Mode, int] = {
    Mode.HOURLY: 2,
    Mode.STAY:   3,
}


class PricingBasis(str, Enum):
    """
    How reporting views price a historical lead.

    CURRENT: recompute from the listing's catalog and commission rate as they
    are now (a changed commission rate alters old payouts).
    SNAPSHOT: report the quote stored on the lead at submission time.
    """
    CURRENT  = "current"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class RateCatalogEntry:
    mode: Mode
    active: bool = False
    unit_price: int = 0
    minimum_duration: Optional[int] = None

    def __post_init__(self) -> None:
        if self.unit_price < 0:
            raise ValueError(f"unit_price must be >= 0, got {self.unit_price}")
        if self.minimum_duration is not None and self.minimum_duration <= 0:
            raise ValueError(f"minimum_duration must be positive, got {self.minimum_duration}")

    @property
    def bookable(self) -> bool:
        return self.active and self.unit_price > 0

    @property
    def effective_minimum(self) -> int:
        """Minimum hours (Hourly) or nights (Stay); Daily is always one unit."""
        if self.mode is Mode.DAILY:
            return 1
        return self.minimum_duration or DEFAULT_MINIMUMS[self.mode]


class RateCatalog:
    """
    Fixed-size mapping Mode → RateCatalogEntry for one listing.
    Modes the listing does not configure read as inactive and unpriced.
    """

    def __init__(self, entries: Optional[Mapping[Mode, RateCatalogEntry]] = None) -> None:
        resolved: dict[Mode, RateCatalogEntry] = {}
        for mode in Mode:
            entry = (entries or {}).get(mode) or RateCatalogEntry(mode=mode)
            if entry.mode is not mode:
                raise ValueError(f"Entry for {mode.value} is configured as {entry.mode.value}")
            resolved[mode] = entry
        self._entries = MappingProxyType(resolved)

    def __getitem__(self, mode: Mode) -> RateCatalogEntry:
        return self._entries[Mode(mode)]

    def __iter__(self):
        return iter(self._entries.values())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RateCatalog) and dict(self._entries) == dict(other._entries)

    def __repr__(self) -> str:
        return f"RateCatalog({list(self._entries.values())!r})"

    @classmethod
    def from_listing(cls, row: Mapping[str, Any]) -> "RateCatalog":
        """Build a catalog from the flat listing columns (price_hourly, min_hours, ...)."""
        def _int(value: Any) -> int:
            return int(value) if value not in (None, "") else 0

        def _minimum(value: Any) -> Optional[int]:
            return int(value) if value not in (None, "", 0) else None

        return cls({
            Mode.HOURLY: RateCatalogEntry(
                mode=Mode.HOURLY,
                active=bool(row.get("is_hourly_active")),
                unit_price=_int(row.get("price_hourly")),
                minimum_duration=_minimum(row.get("min_hours")),
            ),
            Mode.DAILY: RateCatalogEntry(
                mode=Mode.DAILY,
                active=bool(row.get("is_daily_active")),
                # legacy listings only carry a single "price" column
                unit_price=_int(row.get("price_daily") or row.get("price")),
            ),
            Mode.STAY: RateCatalogEntry(
                mode=Mode.STAY,
                active=bool(row.get("is_stay_active")),
                unit_price=_int(row.get("price_stay_per_night")),
                minimum_duration=_minimum(row.get("min_stay_days")),
            ),
        })


@dataclass(frozen=True)
class ChargeRequest:
    """
    A customer's requested charter. ``start`` is a date (Daily/Stay) or a
    datetime on a whole hour (Hourly); ``end`` is the end hour for Hourly and
    the checkout date for Stay, ignored for Daily.
    """
    mode: Mode
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def hourly(cls, day: date, start_hour: int, end_hour: int) -> "ChargeRequest":
        base = datetime(day.year, day.month, day.day)
        return cls(
            mode=Mode.HOURLY,
            start=base + timedelta(hours=start_hour),
            end=base + timedelta(hours=end_hour),
        )

    @classmethod
    def daily(cls, day: date) -> "ChargeRequest":
        return cls(mode=Mode.DAILY, start=day)

    @classmethod
    def stay(cls, checkin: date, checkout: Optional[date]) -> "ChargeRequest":
        return cls(mode=Mode.STAY, start=checkin, end=checkout)


@dataclass(frozen=True)
class Quote:
    """Derived price breakdown for one charter request."""
    mode: Mode
    unit_price: int
    quantity: int
    unit_label: str
    total_price: int
    commission_rate: int
    commission_amount: int
    payout_amount: int
    currency: str = ""
    breakdown: list[dict] = field(default_factory=list, compare=False)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        data.pop("breakdown")
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Quote":
        return cls(
            mode=Mode(data["mode"]),
            unit_price=data["unit_price"],
            quantity=data["quantity"],
            unit_label=data["unit_label"],
            total_price=data["total_price"],
            commission_rate=data["commission_rate"],
            commission_amount=data["commission_amount"],
            payout_amount=data["payout_amount"],
            currency=data.get("currency", ""),
        )
