"""
api/routes.py
REST endpoints.
"""
import time
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.concurrency import run_in_threadpool

from api.models import (
    ErrorResponse,
    LeadCreateRequest,
    LeadCreateResponse,
    LeadReportResponse,
    ListingQuoteRequest,
    QuoteRequest,
    QuoteResponse,
    StatusUpdateRequest,
)
from booking.errors import LeadNotFound
from booking.records import LeadSubmission, build_charge_request
from booking.service import BookingService
from monitoring import get_logger
from pricing_engine.catalog import active_modes, parse_mode
from pricing_engine.engine import QuoteEngine
from pricing_engine.models import PricingBasis, Quote, RateCatalogEntry
from reporting.lead_report import SORT_KEYS, LeadReport
from storage.sqlite_store import SQLiteStore

router = APIRouter()

_engine = QuoteEngine()

log = get_logger(__name__)

_QUOTE_ERRORS   = {422: {"model": ErrorResponse}}
_LOOKUP_ERRORS  = {404: {"model": ErrorResponse}}
_BOOKING_ERRORS = {**_LOOKUP_ERRORS, **_QUOTE_ERRORS}


def get_store(request: Request) -> SQLiteStore:
    return request.app.state.store


def get_booking(request: Request) -> BookingService:
    return request.app.state.booking


def _quote_response(quote: Quote) -> QuoteResponse:
    return QuoteResponse(**quote.to_dict(), breakdown=quote.breakdown)


# POST /quote

@router.post(
    "/quote",
    response_model=QuoteResponse,
    responses=_QUOTE_ERRORS,
    summary="Price a charter against an explicit rate entry",
    description="""
Stateless quote: pass the catalog entry, the requested charter and the commission rate.

```json
{ "mode": "hourly", "day": "2024-06-01", "start_hour": 10, "end_hour": 14,
  "entry": { "active": true, "unit_price": 1000, "minimum_duration": 2 },
  "commission_rate": 15, "currency": "TRY" }
```
""",
)
async def quote(body: QuoteRequest) -> QuoteResponse:
    entry = RateCatalogEntry(
        mode=body.mode,
        active=body.entry.active,
        unit_price=body.entry.unit_price,
        minimum_duration=body.entry.minimum_duration,
    )
    request = build_charge_request(body.mode, body.day, body.start_hour, body.end_hour, body.checkout)
    result = _engine.compute_quote(entry, request, body.commission_rate, body.currency)
    return _quote_response(result)


# GET /listings

@router.get("/listings", summary="List active listings with their bookable modes")
async def list_listings(store: SQLiteStore = Depends(get_store)) -> dict:
    listings = await run_in_threadpool(store.list_listings, True)
    return {
        "listings": [
            {
                "id":       listing.id,
                "title":    listing.title,
                "location": listing.location,
                "currency": listing.currency,
                "modes":    sorted(m.value for m in active_modes(listing.catalog)),
            }
            for listing in listings
        ]
    }


# GET /listings/{id}/booking-options

@router.get("/listings/{listing_id}/booking-options", responses=_LOOKUP_ERRORS, summary="Modes the booking form may offer")
async def booking_options(
    listing_id: str,
    type: Optional[str] = None,
    checkin: Optional[date] = None,
    booking: BookingService = Depends(get_booking),
) -> dict:
    return await run_in_threadpool(booking.booking_options, listing_id, parse_mode(type), checkin)


# POST /listings/{id}/quote

@router.post("/listings/{listing_id}/quote", response_model=QuoteResponse, responses=_BOOKING_ERRORS,
             summary="Live quote for a stored listing")
async def listing_quote(
    listing_id: str,
    body: ListingQuoteRequest,
    booking: BookingService = Depends(get_booking),
) -> QuoteResponse:
    listing = await run_in_threadpool(booking.load_listing, listing_id)
    request = build_charge_request(body.mode, body.day, body.start_hour, body.end_hour, body.checkout)
    return _quote_response(booking.quote(listing, request))


# POST /leads

@router.post("/leads", response_model=LeadCreateResponse, status_code=201, responses=_BOOKING_ERRORS,
             summary="Submit a booking request")
async def create_lead(
    body: LeadCreateRequest,
    background_tasks: BackgroundTasks,
    booking: BookingService = Depends(get_booking),
) -> LeadCreateResponse:
    request_id = str(uuid.uuid4())[:8]
    t0 = time.perf_counter()
    log.info("Lead submission", request_id=request_id, listing_id=body.listing_id, mode=body.mode.value)

    submission = LeadSubmission(
        listing_id     =body.listing_id,
        customer_name  =body.customer_name,
        customer_phone =body.customer_phone,
        mode           =body.mode,
        day            =body.day,
        start_hour     =body.start_hour,
        end_hour       =body.end_hour,
        checkout       =body.checkout,
        guest_count    =body.guest_count,
        extra_notes    =body.extra_notes,
    )
    result = await run_in_threadpool(booking.submit, submission)

    # runs after the response is sent; failures are contained in notify()
    background_tasks.add_task(booking.notify, result)

    log.info(
        "Lead submission complete",
        request_id=request_id,
        lead_id=result.lead.id,
        elapsed_ms=round((time.perf_counter() - t0) * 1000),
    )
    return LeadCreateResponse(
        lead_id=result.lead.id,
        status=result.lead.status,
        quote=_quote_response(result.quote),
        warnings=result.warnings,
    )


# GET /leads

@router.get("/leads", response_model=LeadReportResponse, summary="Admin lead report")
async def lead_report(
    request: Request,
    status: Optional[str] = None,
    listing_id: Optional[str] = None,
    sort: str = "newest",
    basis: Optional[PricingBasis] = None,
    store: SQLiteStore = Depends(get_store),
) -> LeadReportResponse:
    settings = request.app.state.settings
    basis = basis or PricingBasis(settings.report_pricing_basis)
    sort = sort if sort in SORT_KEYS else "newest"

    listings = {item.id: item for item in await run_in_threadpool(store.list_listings)}
    all_leads = await run_in_threadpool(store.list_leads)
    leads = await run_in_threadpool(store.list_leads, status, listing_id, sort)

    full = LeadReport(all_leads, listings, basis, settings.default_commission_rate, _engine)
    report = LeadReport(leads, listings, basis, settings.default_commission_rate, _engine)

    return LeadReportResponse(
        basis=basis,
        sort=sort,
        leads=[row.to_dict() for row in report.rows(sort)],
        status_counts=full.status_counts(),
        price_ranges={label: len(rows) for label, rows in report.group_by_price_range().items()},
        counts_by_listing=full.counts_by_listing(),
        confirmed_totals=full.confirmed_totals(),
    )


# GET /leads/{id}

@router.get("/leads/{lead_id}", responses=_LOOKUP_ERRORS, summary="Lead detail with its quote")
async def lead_detail(
    lead_id: str,
    request: Request,
    basis: Optional[PricingBasis] = None,
    store: SQLiteStore = Depends(get_store),
) -> dict:
    settings = request.app.state.settings
    basis = basis or PricingBasis(settings.report_pricing_basis)
    lead = await run_in_threadpool(store.get_lead, lead_id)
    if lead is None:
        raise LeadNotFound(f"Lead '{lead_id}' not found")
    listing = await run_in_threadpool(store.get_listing, lead.listing_id)
    report = LeadReport([lead], {listing.id: listing} if listing else {}, basis,
                        settings.default_commission_rate, _engine)
    row = report.rows()[0]
    detail = row.to_dict()
    detail["basis"] = basis.value
    if listing:
        detail["captain_phone"] = listing.captain_phone
        detail["captain_email"] = listing.captain_email
    return detail


# PATCH /leads/{id}/status

@router.patch("/leads/{lead_id}/status", responses=_BOOKING_ERRORS,
              summary="Move a lead through its status lifecycle")
async def update_lead_status(
    lead_id: str,
    body: StatusUpdateRequest,
    booking: BookingService = Depends(get_booking),
) -> dict:
    lead = await run_in_threadpool(booking.update_status, lead_id, body.status, body.note)
    return {"success": True, "lead_id": lead.id, "status": lead.status}


# GET /health

@router.get("/health", summary="Health check")
async def health(store: SQLiteStore = Depends(get_store)) -> dict:
    stats = await run_in_threadpool(store.stats)
    return {
        "status": "healthy",
        "database": {"path": str(store.db_path), "rows": stats},
        "modes": ["hourly", "daily", "stay"],
    }
