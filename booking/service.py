"""
booking/service.py
Lead workflow: load listing → price → persist lead → best-effort notify.

The store and the email sender are injected once at process start; the
service never builds its own clients.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from booking.errors import InvalidStatus, LeadNotFound, ListingNotFound, SubmissionInvalid
from booking.records import LEAD_STATUSES, LeadRecord, LeadSubmission, ListingRecord
from config.settings import settings
from guardrails.guardrail_layer import GuardrailLayer
from monitoring import LEADS_CREATED, NOTIFICATION_FAILURES, get_logger
from notifications.composer import compose_lead_email
from notifications.sender import NotificationError
from pricing_engine.catalog import (
    HOUR_OPTIONS, active_modes, default_mode, end_hour_options, propose_checkout, require_bookable,
)
from pricing_engine.engine import QuoteEngine
from pricing_engine.errors import InconsistentQuote, NoActiveModes
from pricing_engine.models import ChargeRequest, Mode, Quote

log = get_logger(__name__)


@dataclass
class SubmissionResult:
    lead: LeadRecord
    listing: ListingRecord
    submission: LeadSubmission
    quote: Quote
    warnings: list[str] = field(default_factory=list)


class BookingService:

    def __init__(
        self,
        store,
        sender,
        engine: Optional[QuoteEngine] = None,
        guardrail: Optional[GuardrailLayer] = None,
        default_commission_rate: Optional[int] = None,
    ) -> None:
        self._store     = store
        self._sender    = sender
        self._engine    = engine or QuoteEngine()
        self._guardrail = guardrail or GuardrailLayer()
        self._default_commission_rate = (
            settings.default_commission_rate
            if default_commission_rate is None
            else default_commission_rate
        )

    # ── Listing lookups ───────────────────────────────────────────────────────

    def load_listing(self, listing_id: str) -> ListingRecord:
        listing = self._store.get_listing(listing_id)
        if listing is None or not listing.is_active:
            raise ListingNotFound(f"Listing '{listing_id}' not found")
        return listing

    def booking_options(
        self, listing_id: str, requested: Optional[Mode] = None, checkin: Optional[date] = None
    ) -> dict[str, Any]:
        """Everything the booking form needs to render its mode selector."""
        listing = self.load_listing(listing_id)
        modes = active_modes(listing.catalog)
        try:
            selected: Optional[Mode] = default_mode(listing.catalog, requested)
        except NoActiveModes:
            selected = None

        options = []
        for entry in listing.catalog:
            if entry.mode not in modes:
                continue
            option = {
                "mode":       entry.mode.value,
                "unit_price": entry.unit_price,
                "minimum":    entry.effective_minimum,
            }
            if entry.mode is Mode.STAY and checkin is not None:
                option["proposed_checkout"] = propose_checkout(checkin, entry).isoformat()
            options.append(option)

        return {
            "listing_id":   listing.id,
            "currency":     listing.currency,
            "bookable":     selected is not None,
            "default_mode": selected.value if selected else None,
            "options":      options,
            "hour_options": list(HOUR_OPTIONS),
            "end_hour_options": {h: end_hour_options(h) for h in HOUR_OPTIONS[:-1]},
        }

    # ── Pricing ───────────────────────────────────────────────────────────────

    def quote(self, listing: ListingRecord, request: ChargeRequest) -> Quote:
        """
        Live quote for the booking form; unpriced modes count as unavailable.
        A quote that fails the sanity checks raises InconsistentQuote.
        """
        entry = require_bookable(listing.catalog, request.mode)
        quote = self._engine.compute_quote(
            entry,
            request,
            listing.commission_or(self._default_commission_rate),
            listing.currency,
        )
        report = self._guardrail.validate_quote(quote)
        if not report.passed:
            raise InconsistentQuote(
                "Quote failed sanity checks: " + "; ".join(report.issues),
                listing_id=listing.id,
                mode=request.mode.value,
            )
        return quote

    # ── Submission ────────────────────────────────────────────────────────────

    def submit(self, submission: LeadSubmission) -> SubmissionResult:
        """
        Validate, price and persist a lead. Any failure here happens before
        the write, so nothing is stored and no email goes out.
        """
        listing = self.load_listing(submission.listing_id)

        report = self._guardrail.validate_submission(submission, listing)
        if not report.passed:
            raise SubmissionInvalid(report.issues)

        quote = self.quote(listing, submission.charge_request())

        lead = self._store.insert_lead(
            listing_id      =listing.id,
            customer_name   =submission.customer_name.strip(),
            customer_phone  =submission.customer_phone.strip(),
            mode            =submission.mode.value,
            start_timestamp =submission.start_timestamp(),
            end_timestamp   =submission.end_timestamp(),
            guest_count     =submission.guest_count or 1,
            extra_notes     =submission.extra_notes,
            quote           =quote,
        )
        LEADS_CREATED.labels(mode=submission.mode.value).inc()
        log.info(
            "Lead created",
            lead_id=lead.id,
            listing_id=listing.id,
            mode=submission.mode.value,
            total=quote.total_price,
        )
        return SubmissionResult(
            lead=lead, listing=listing, submission=submission, quote=quote, warnings=report.warnings
        )

    def notify(self, result: SubmissionResult) -> bool:
        """
        Fire-and-forget email for a stored lead. Failures are logged and
        counted; the lead is never rolled back and nothing is retried.
        """
        try:
            message = compose_lead_email(result.listing, result.submission, result.quote)
            self._sender.send(message)
        except NotificationError as exc:
            NOTIFICATION_FAILURES.inc()
            log.warning("Lead email failed", lead_id=result.lead.id, error=str(exc))
            return False
        except Exception as exc:
            # runs as a background task after the lead is committed
            NOTIFICATION_FAILURES.inc()
            log.error("Lead email crashed", lead_id=result.lead.id, error=repr(exc), exc_info=True)
            return False
        return True

    # ── Status ────────────────────────────────────────────────────────────────

    def update_status(self, lead_id: str, status: str, note: Optional[str] = None) -> LeadRecord:
        if status not in LEAD_STATUSES:
            raise InvalidStatus(f"Unknown status '{status}'. Valid: {', '.join(LEAD_STATUSES)}")
        if not self._store.update_lead_status(lead_id, status, note):
            raise LeadNotFound(f"Lead '{lead_id}' not found")
        return self._store.get_lead(lead_id)
