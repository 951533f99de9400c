"""
reporting/lead_report.py
Admin lead report. Prices every lead through the shared quote engine so the
list, the detail view and the dashboard totals always agree with the
booking form.
"""
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from booking.records import LEAD_STATUSES, LeadRecord, ListingRecord, naive_utc
from monitoring import get_logger
from pricing_engine.engine import QuoteEngine
from pricing_engine.errors import QuoteError
from pricing_engine.models import PricingBasis, Quote

log = get_logger(__name__)

PRICE_RANGES: tuple[tuple[str, int], ...] = (
    ("0-5K",    5_000),
    ("5K-10K",  10_000),
    ("10K-20K", 20_000),
)
TOP_RANGE = "20K+"

SORT_KEYS = (
    "newest", "oldest", "name_asc", "name_desc", "date_asc", "date_desc",
    "price_asc", "price_desc", "captain_asc", "captain_desc",
)


def _created_key(row: "LeadRow") -> str:
    created = row.lead.created_at
    return naive_utc(created).isoformat() if created else ""


def _start_key(row: "LeadRow"):
    return naive_utc(row.lead.start_timestamp)


def quote_for_lead(
    lead: LeadRecord,
    listing: ListingRecord,
    basis: PricingBasis = PricingBasis.CURRENT,
    default_commission_rate: int = 0,
    engine: Optional[QuoteEngine] = None,
) -> Quote:
    """
    Price a stored lead. SNAPSHOT returns the quote saved at submission when
    there is one; otherwise the lead is recomputed from the listing's current
    catalog and commission rate. Raises QuoteError when it cannot be priced.
    """
    if basis is PricingBasis.SNAPSHOT and lead.quote_snapshot is not None:
        return lead.quote_snapshot
    engine = engine or QuoteEngine()
    return engine.quote_catalog(
        listing.catalog,
        lead.charge_request(),
        listing.commission_or(default_commission_rate),
        listing.currency,
    )


@dataclass
class LeadRow:
    lead: LeadRecord
    listing: Optional[ListingRecord]
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @property
    def total_price(self) -> int:
        return self.quote.total_price if self.quote else 0

    @property
    def captain_name(self) -> str:
        return (self.listing.captain_name if self.listing else None) or ""

    @property
    def currency(self) -> str:
        if self.quote and self.quote.currency:
            return self.quote.currency
        return self.listing.currency if self.listing else ""

    def to_dict(self) -> dict:
        lead = self.lead
        return {
            "id":              lead.id,
            "listing_id":      lead.listing_id,
            "listing_title":   self.listing.title if self.listing else None,
            "captain_name":    self.captain_name or None,
            "customer_name":   lead.customer_name,
            "customer_phone":  lead.customer_phone,
            "mode":            lead.mode.value,
            "start_timestamp": lead.start_timestamp.isoformat(),
            "end_timestamp":   lead.end_timestamp.isoformat() if lead.end_timestamp else None,
            "guest_count":     lead.guest_count,
            "status":          lead.status,
            "created_at":      lead.created_at.isoformat() if lead.created_at else None,
            "quote":           self.quote.to_dict() if self.quote else None,
            "quote_error":     self.error,
        }


def price_range(total: int) -> str:
    for label, upper in PRICE_RANGES:
        if total < upper:
            return label
    return TOP_RANGE


class LeadReport:

    def __init__(
        self,
        leads: Iterable[LeadRecord],
        listings: Mapping[str, ListingRecord],
        basis: PricingBasis = PricingBasis.CURRENT,
        default_commission_rate: int = 0,
        engine: Optional[QuoteEngine] = None,
    ) -> None:
        self.basis = basis
        self._engine = engine or QuoteEngine()
        self._rows = [
            self._price(lead, listings.get(lead.listing_id), default_commission_rate)
            for lead in leads
        ]

    def _price(
        self, lead: LeadRecord, listing: Optional[ListingRecord], default_rate: int
    ) -> LeadRow:
        if listing is None:
            if self.basis is PricingBasis.SNAPSHOT and lead.quote_snapshot is not None:
                return LeadRow(lead=lead, listing=None, quote=lead.quote_snapshot)
            return LeadRow(lead=lead, listing=None, error="listing_missing")
        try:
            quote = quote_for_lead(lead, listing, self.basis, default_rate, self._engine)
        except QuoteError as exc:
            log.debug("Lead cannot be priced", lead_id=lead.id, error=exc.code)
            return LeadRow(lead=lead, listing=listing, error=exc.code)
        return LeadRow(lead=lead, listing=listing, quote=quote)

    # ── Views ─────────────────────────────────────────────────────────────────

    def rows(self, sort: str = "newest") -> list[LeadRow]:
        rows = list(self._rows)
        if sort == "price_asc":
            rows.sort(key=lambda r: r.total_price)
        elif sort == "price_desc":
            rows.sort(key=lambda r: r.total_price, reverse=True)
        elif sort == "captain_asc":
            rows.sort(key=lambda r: r.captain_name.casefold())
        elif sort == "captain_desc":
            rows.sort(key=lambda r: r.captain_name.casefold(), reverse=True)
        elif sort == "oldest":
            rows.sort(key=_created_key)
        elif sort == "name_asc":
            rows.sort(key=lambda r: r.lead.customer_name.casefold())
        elif sort == "name_desc":
            rows.sort(key=lambda r: r.lead.customer_name.casefold(), reverse=True)
        elif sort == "date_asc":
            rows.sort(key=_start_key)
        elif sort == "date_desc":
            rows.sort(key=_start_key, reverse=True)
        else:
            rows.sort(key=_created_key, reverse=True)
        return rows

    def group_by_price_range(self) -> dict[str, list[LeadRow]]:
        grouped: dict[str, list[LeadRow]] = defaultdict(list)
        for row in self._rows:
            grouped[price_range(row.total_price)].append(row)
        return dict(grouped)

    def status_counts(self) -> dict[str, int]:
        counts = Counter(row.lead.status for row in self._rows)
        return {status: counts.get(status, 0) for status in LEAD_STATUSES}

    def counts_by_listing(self) -> dict[str, dict[str, int]]:
        result: dict[str, dict[str, int]] = {}
        for row in self._rows:
            bucket = result.setdefault(
                row.lead.listing_id, {"total": 0, "new": 0, "contacted": 0, "confirmed": 0}
            )
            bucket["total"] += 1
            if row.lead.status in bucket:
                bucket[row.lead.status] += 1
        return result

    def confirmed_totals(self) -> dict[str, dict[str, int]]:
        """Revenue, commission and payout of confirmed leads, per currency."""
        totals: dict[str, dict[str, int]] = {}
        for row in self._rows:
            if row.lead.status != "confirmed" or row.quote is None:
                continue
            bucket = totals.setdefault(
                row.currency, {"leads": 0, "total": 0, "commission": 0, "payout": 0}
            )
            bucket["leads"]      += 1
            bucket["total"]      += row.quote.total_price
            bucket["commission"] += row.quote.commission_amount
            bucket["payout"]     += row.quote.payout_amount
        return totals
