"""
pricing_engine/calculators.py
Pure per-mode quote calculators.

Every calculator follows the same three steps:
  1. quantity: hours / 1 day / nights, floored at the listing minimum
  2. total: unit_price × quantity (integers, so exact)
  3. split: commission = round_half_up(total × rate / 100),
            payout = total − commission
"""
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from monitoring import get_logger
from pricing_engine.errors import InvalidCommissionRate, InvalidRange, ModeUnavailable
from pricing_engine.models import UNIT_LABELS, ChargeRequest, Mode, Quote, RateCatalogEntry

log = get_logger(__name__)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_commission(total_price: int, commission_rate: int) -> tuple[int, int]:
    """Return (commission_amount, payout_amount); the two always sum to total_price."""
    commission = round_half_up(Decimal(total_price) * Decimal(commission_rate) / Decimal(100))
    return commission, total_price - commission


def hours_between(start: date, end: date) -> int:
    """Whole calendar hours from start to end; minutes and seconds are dropped."""
    return _hour_index(end) - _hour_index(start)


def days_between(start: date, end: date) -> int:
    """Calendar-day difference, checkout minus checkin."""
    return (_as_date(end) - _as_date(start)).days


def _hour_index(value: date) -> int:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.toordinal() * 24 + value.hour
    return value.toordinal() * 24


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


# ─────────────────────────────────────────────────────────────────────────────
# Shared base class
# ─────────────────────────────────────────────────────────────────────────────
class _Base:
    """Shared base: mode checks, commission validation, and finalisation."""

    MODE: Mode

    def calculate(
        self,
        entry: RateCatalogEntry,
        request: ChargeRequest,
        commission_rate: int,
        currency: str = "",
    ) -> Quote:
        self._check_entry(entry, request)
        self._check_commission_rate(commission_rate)
        quantity, breakdown = self._quantity(entry, request)
        return self._finalise(entry, quantity, commission_rate, currency, breakdown)

    def _quantity(self, entry: RateCatalogEntry, request: ChargeRequest) -> tuple[int, list[dict]]:
        raise NotImplementedError

    def _check_entry(self, entry: RateCatalogEntry, request: ChargeRequest) -> None:
        if request.mode is not self.MODE or entry.mode is not self.MODE:
            raise ModeUnavailable(
                f"Catalog entry for {entry.mode.value} cannot price a {request.mode.value} request",
                mode=request.mode.value,
            )
        if not entry.active:
            raise ModeUnavailable(
                f"The {self.MODE.value} rental option is not offered for this boat",
                mode=self.MODE.value,
            )

    @staticmethod
    def _check_commission_rate(rate: int) -> None:
        if isinstance(rate, bool) or not isinstance(rate, int) or not 0 <= rate <= 100:
            raise InvalidCommissionRate(
                f"commission_rate must be an integer percent in 0..100, got {rate!r}",
                commission_rate=rate,
            )

    @staticmethod
    def _require_end(request: ChargeRequest, what: str) -> None:
        if request.start is None:
            raise InvalidRange("A start date is required", mode=request.mode.value)
        if request.end is None:
            raise InvalidRange(f"{what} is required", mode=request.mode.value)

    def _floor(self, entry: RateCatalogEntry, raw: int, breakdown: list[dict]) -> int:
        if raw <= 0:
            raise InvalidRange(
                f"{self.MODE.value} range must end after it starts (got {raw} {UNIT_LABELS[self.MODE]}s)",
                mode=self.MODE.value,
                quantity=raw,
            )
        minimum = entry.effective_minimum
        if raw < minimum:
            breakdown.append({"item": f"Minimum {minimum} {UNIT_LABELS[self.MODE]}s applied", "quantity": minimum})
            return minimum
        return raw

    def _finalise(
        self,
        entry: RateCatalogEntry,
        quantity: int,
        commission_rate: int,
        currency: str,
        breakdown: Optional[list[dict]] = None,
    ) -> Quote:
        total = entry.unit_price * quantity
        commission, payout = split_commission(total, commission_rate)
        label = UNIT_LABELS[self.MODE]
        lines = list(breakdown or [])
        lines.append({"item": f"{entry.unit_price} × {quantity} {label}", "amount": total})
        lines.append({"item": f"Commission {commission_rate}%", "amount": commission})
        lines.append({"item": "Captain payout", "amount": payout})
        log.debug("Quote finalised", mode=self.MODE.value, quantity=quantity, total=total)
        return Quote(
            mode=self.MODE,
            unit_price=entry.unit_price,
            quantity=quantity,
            unit_label=label,
            total_price=total,
            commission_rate=commission_rate,
            commission_amount=commission,
            payout_amount=payout,
            currency=currency,
            breakdown=lines,
        )


# ─────────────────────────────────────────────────────────────────────────────
# 1. HOURLY
# ─────────────────────────────────────────────────────────────────────────────
class HourlyCalculator(_Base):
    """
    end_hour − start_hour whole hours, at least the listing minimum (default 2).
    Verified: 1000/hour, 10:00–14:00, 15% → 4000 total, 600 commission, 3400 payout.
    """
    MODE = Mode.HOURLY

    def _quantity(self, entry: RateCatalogEntry, request: ChargeRequest) -> tuple[int, list[dict]]:
        self._require_end(request, "An end hour")
        raw = hours_between(request.start, request.end)
        breakdown = [{"item": f"Requested {raw} hours", "quantity": raw}]
        return self._floor(entry, raw, breakdown), breakdown


# ─────────────────────────────────────────────────────────────────────────────
# 2. DAILY
# ─────────────────────────────────────────────────────────────────────────────
class DailyCalculator(_Base):
    """Always one day at the daily price; any supplied end date is ignored."""
    MODE = Mode.DAILY

    def _quantity(self, entry: RateCatalogEntry, request: ChargeRequest) -> tuple[int, list[dict]]:
        return 1, []


# ─────────────────────────────────────────────────────────────────────────────
# 3. STAY
# ─────────────────────────────────────────────────────────────────────────────
class StayCalculator(_Base):
    """
    Nights = checkout − checkin in calendar days, at least the listing minimum
    (default 3).
    """
    MODE = Mode.STAY

    def _quantity(self, entry: RateCatalogEntry, request: ChargeRequest) -> tuple[int, list[dict]]:
        self._require_end(request, "A checkout date")
        raw = days_between(request.start, request.end)
        breakdown = [{"item": f"Requested {raw} nights", "quantity": raw}]
        return self._floor(entry, raw, breakdown), breakdown
