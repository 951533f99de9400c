"""
booking/records.py
Plain records for listings and leads as the store hands them out, plus the
customer-facing LeadSubmission. The pricing engine never sees these; callers
turn them into a RateCatalog / ChargeRequest first.
"""
import json
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from pricing_engine.models import ChargeRequest, Mode, Quote, RateCatalog

LEAD_STATUSES: tuple[str, ...] = ("new", "contacted", "confirmed", "cancelled", "completed")


def naive_utc(value: datetime) -> datetime:
    """Aware timestamps become naive UTC; naive ones are taken as already UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def build_charge_request(
    mode: Mode,
    day: Optional[date],
    start_hour: Optional[int] = None,
    end_hour: Optional[int] = None,
    checkout: Optional[date] = None,
) -> ChargeRequest:
    """Form fields to ChargeRequest. Missing hourly fields leave start/end empty."""
    if mode is Mode.HOURLY:
        if day is None or start_hour is None or end_hour is None:
            return ChargeRequest(mode=Mode.HOURLY)
        return ChargeRequest.hourly(day, start_hour, end_hour)
    if mode is Mode.DAILY:
        return ChargeRequest.daily(day)
    return ChargeRequest.stay(day, checkout)


def _parse_ts(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return naive_utc(value)


@dataclass
class ListingRecord:
    id: str
    title: str = ""
    location: str = ""
    currency: str = "TRY"
    capacity: Optional[int] = None
    captain_name: Optional[str] = None
    captain_phone: Optional[str] = None
    captain_email: Optional[str] = None
    commission_rate: Optional[int] = None
    is_active: bool = True
    catalog: RateCatalog = field(default_factory=RateCatalog)
    created_at: Optional[datetime] = None

    def commission_or(self, default: int) -> int:
        return self.commission_rate if self.commission_rate is not None else default

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ListingRecord":
        return cls(
            id              =str(row["id"]),
            title           =row.get("title") or "",
            location        =row.get("location") or "",
            currency        =row.get("currency") or "TRY",
            capacity        =row.get("capacity"),
            captain_name    =row.get("captain_name"),
            captain_phone   =row.get("captain_phone"),
            captain_email   =row.get("captain_email"),
            commission_rate =row.get("commission_rate"),
            is_active       =bool(row.get("is_active", True)),
            catalog         =RateCatalog.from_listing(row),
            created_at      =_parse_ts(row.get("created_at")),
        )


@dataclass
class LeadRecord:
    id: str
    listing_id: str
    customer_name: str
    customer_phone: str
    mode: Mode
    start_timestamp: datetime
    end_timestamp: Optional[datetime] = None
    guest_count: int = 1
    extra_notes: Optional[str] = None
    status: str = "new"
    admin_status_note: Optional[str] = None
    quote_snapshot: Optional[Quote] = None
    created_at: Optional[datetime] = None

    def charge_request(self) -> ChargeRequest:
        """Rebuild the charge request the customer submitted."""
        if self.mode is Mode.HOURLY:
            return ChargeRequest(mode=Mode.HOURLY, start=self.start_timestamp, end=self.end_timestamp)
        if self.mode is Mode.DAILY:
            return ChargeRequest.daily(self.start_timestamp.date())
        end = self.end_timestamp.date() if self.end_timestamp else None
        return ChargeRequest.stay(self.start_timestamp.date(), end)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LeadRecord":
        snapshot = row.get("quote_snapshot")
        return cls(
            id                =str(row["id"]),
            listing_id        =str(row["listing_id"]),
            customer_name     =row.get("customer_name") or "",
            customer_phone    =row.get("customer_phone") or "",
            mode              =Mode(row["requested_charter_type"]),
            start_timestamp   =_parse_ts(row["start_timestamp"]),
            end_timestamp     =_parse_ts(row.get("end_timestamp")),
            guest_count       =int(row.get("guest_count") or 1),
            extra_notes       =row.get("extra_notes"),
            status            =row.get("status") or "new",
            admin_status_note =row.get("admin_status_note"),
            quote_snapshot    =Quote.from_dict(json.loads(snapshot)) if snapshot else None,
            created_at        =_parse_ts(row.get("created_at")),
        )


@dataclass
class LeadSubmission:
    """What the booking form posts. Hours apply to Hourly, checkout to Stay."""
    listing_id: str
    customer_name: str
    customer_phone: str
    mode: Mode
    day: Optional[date] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    checkout: Optional[date] = None
    guest_count: Optional[int] = None
    extra_notes: Optional[str] = None

    def charge_request(self) -> ChargeRequest:
        return build_charge_request(self.mode, self.day, self.start_hour, self.end_hour, self.checkout)

    def start_timestamp(self) -> Optional[datetime]:
        if self.day is None:
            return None
        base = datetime(self.day.year, self.day.month, self.day.day)
        if self.mode is Mode.HOURLY and self.start_hour is not None:
            return base + timedelta(hours=self.start_hour)
        return base

    def end_timestamp(self) -> Optional[datetime]:
        if self.mode is Mode.HOURLY:
            if self.day is None or self.end_hour is None:
                return None
            return datetime(self.day.year, self.day.month, self.day.day) + timedelta(hours=self.end_hour)
        if self.mode is Mode.STAY and self.checkout is not None:
            return datetime(self.checkout.year, self.checkout.month, self.checkout.day)
        return None
