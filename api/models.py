"""
api/models.py
Pydantic request/response models.

Dates are calendar dates; hourly charters add whole start/end hours on that
date, stays add a checkout date.
"""
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from pricing_engine.models import Mode, PricingBasis


class ChargeFields(BaseModel):
    mode:       Mode
    day:        Optional[date] = Field(default=None, description="Charter date / check-in date")
    start_hour: Optional[int]  = Field(default=None, ge=0, le=24, description="Hourly only")
    end_hour:   Optional[int]  = Field(default=None, ge=0, le=24, description="Hourly only")
    checkout:   Optional[date] = Field(default=None, description="Stay only")


class CatalogEntryIn(BaseModel):
    active:           bool          = False
    unit_price:       int           = Field(default=0, ge=0)
    minimum_duration: Optional[int] = Field(default=None, gt=0)


class QuoteRequest(ChargeFields):
    entry:           CatalogEntryIn
    commission_rate: int = Field(default=0, description="Integer percent, 0-100")
    currency:        str = ""


class ListingQuoteRequest(ChargeFields):
    pass


class LeadCreateRequest(ChargeFields):
    listing_id:     str
    customer_name:  str
    customer_phone: str
    guest_count:    Optional[int] = None
    extra_notes:    Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str
    note:   Optional[str] = None


class QuoteResponse(BaseModel):
    mode:              Mode
    unit_price:        int
    quantity:          int
    unit_label:        str
    total_price:       int
    commission_rate:   int
    commission_amount: int
    payout_amount:     int
    currency:          str
    breakdown:         list[dict[str, Any]] = []


class LeadCreateResponse(BaseModel):
    success:  bool = True
    lead_id:  str
    status:   str
    quote:    QuoteResponse
    warnings: list[str] = []


class LeadReportResponse(BaseModel):
    success:           bool = True
    basis:             PricingBasis
    sort:              str
    timestamp:         str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    leads:             list[dict[str, Any]]
    status_counts:     dict[str, int]
    price_ranges:      dict[str, int]
    counts_by_listing: dict[str, dict[str, int]]
    confirmed_totals:  dict[str, dict[str, int]]


class ErrorResponse(BaseModel):
    success: bool          = False
    error:   str
    detail:  Optional[Any] = None
