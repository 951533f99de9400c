"""
tests/test_booking_service.py
Lead submission workflow: load listing, price, persist, notify.
"""
import sys
from datetime import date, datetime
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
from prometheus_client import REGISTRY

sys.path.insert(0, str(Path(__file__).parent.parent))

from booking.errors import InvalidStatus, LeadNotFound, ListingNotFound, SubmissionInvalid
from booking.records import LeadSubmission
from booking.service import BookingService
from guardrails.guardrail_layer import ValidationReport
from notifications.sender import NotificationError, ResendEmailSender
from pricing_engine.errors import InconsistentQuote, InvalidRange, ModeUnavailable
from pricing_engine.models import ChargeRequest, Mode


@pytest.fixture
def service(store, sender) -> BookingService:
    return BookingService(store=store, sender=sender, default_commission_rate=10)


def _sample(name: str) -> float:
    return REGISTRY.get_sample_value(name) or 0.0


def _submission(listing_id, mode=Mode.HOURLY, **kw) -> LeadSubmission:
    fields = dict(
        listing_id=listing_id,
        customer_name="Ayse",
        customer_phone="+90 555 111 2233",
        mode=mode,
        day=date(2024, 6, 1),
        guest_count=4,
    )
    if mode is Mode.HOURLY:
        fields.update(start_hour=10, end_hour=14)
    if mode is Mode.STAY:
        fields.update(checkout=date(2024, 6, 4))
    fields.update(kw)
    return LeadSubmission(**fields)


class TestSubmit:

    def test_hourly_lead_is_priced_and_stored(self, service, store, gulet):
        result = service.submit(_submission(gulet.id))

        assert result.quote.total_price == 4000
        assert result.quote.commission_amount == 600
        assert result.quote.payout_amount == 3400

        stored = store.get_lead(result.lead.id)
        assert stored.status == "new"
        assert stored.mode is Mode.HOURLY
        assert stored.start_timestamp == datetime(2024, 6, 1, 10)
        assert stored.end_timestamp == datetime(2024, 6, 1, 14)
        assert stored.quote_snapshot == result.quote

    def test_stay_lead(self, service, store, gulet):
        result = service.submit(_submission(gulet.id, Mode.STAY))
        assert result.quote.quantity == 3
        assert result.quote.total_price == 12_000
        assert store.get_lead(result.lead.id).end_timestamp == datetime(2024, 6, 4)

    def test_listing_without_rate_uses_default(self, service, speedboat):
        result = service.submit(_submission(speedboat.id, start_hour=9, end_hour=12))
        assert result.quote.commission_rate == 10
        assert result.quote.currency == "EUR"
        assert result.quote.commission_amount == 90

    def test_inactive_mode_writes_nothing(self, service, store, speedboat):
        with pytest.raises(ModeUnavailable):
            service.submit(_submission(speedboat.id, Mode.DAILY))
        assert store.list_leads() == []

    def test_bad_range_writes_nothing(self, service, store, gulet):
        with pytest.raises(InvalidRange):
            service.submit(_submission(gulet.id, start_hour=14, end_hour=10))
        assert store.list_leads() == []

    def test_incomplete_form(self, service, store, gulet):
        with pytest.raises(SubmissionInvalid) as exc:
            service.submit(_submission(gulet.id, customer_phone=" "))
        assert exc.value.issues
        assert store.list_leads() == []

    def test_unknown_listing(self, service):
        with pytest.raises(ListingNotFound):
            service.submit(_submission("nope"))

    def test_inactive_listing(self, service, store):
        listing = store.insert_listing({"title": "Retired", "is_active": False, "is_daily_active": 1, "price_daily": 10})
        with pytest.raises(ListingNotFound):
            service.submit(_submission(listing.id, Mode.DAILY))

    def test_capacity_warning_is_returned(self, service, gulet):
        result = service.submit(_submission(gulet.id, guest_count=20))
        assert result.warnings


class TestNotify:

    def test_email_sent(self, service, sender, gulet):
        result = service.submit(_submission(gulet.id))
        assert service.notify(result) is True
        sender.send.assert_called_once()
        message = sender.send.call_args.args[0]
        assert "Ayse" in message.subject
        assert "4,000.00 TRY" in message.subject

    def test_failed_email_keeps_lead(self, service, store, sender, gulet):
        sender.send.side_effect = NotificationError("provider down")
        result = service.submit(_submission(gulet.id))
        assert service.notify(result) is False
        assert store.get_lead(result.lead.id) is not None

    def test_unexpected_sender_error_is_contained(self, service, store, sender, gulet):
        sender.send.side_effect = RuntimeError("boom")
        result = service.submit(_submission(gulet.id))
        before = _sample("charter_notification_failures_total")
        assert service.notify(result) is False
        assert _sample("charter_notification_failures_total") == before + 1
        assert store.get_lead(result.lead.id) is not None

    def test_accepted_email_without_json_body(self, store, gulet):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text="OK")))
        resend = ResendEmailSender(
            api_key="re_test",
            recipients=["ops@example.com"],
            sender="Charter <noreply@example.com>",
            client=client,
        )
        service = BookingService(store=store, sender=resend, default_commission_rate=10)
        result = service.submit(_submission(gulet.id))
        assert service.notify(result) is True
        assert store.get_lead(result.lead.id) is not None

    def test_compose_failure_is_contained(self, service, sender, gulet, monkeypatch):
        result = service.submit(_submission(gulet.id))

        def _broken(*args):
            raise KeyError("mode")

        monkeypatch.setattr("booking.service.compose_lead_email", _broken)
        assert service.notify(result) is False
        sender.send.assert_not_called()


class TestQuoteSanity:

    def test_inconsistent_quote_blocks_lead(self, store, sender, gulet):
        guardrail = MagicMock()
        guardrail.validate_submission.return_value = ValidationReport(passed=True)
        guardrail.validate_quote.return_value = ValidationReport(passed=False, issues=["total 1 != 1000 × 4"])
        service = BookingService(store=store, sender=sender, guardrail=guardrail)

        with pytest.raises(InconsistentQuote) as exc:
            service.submit(_submission(gulet.id))
        assert exc.value.code == "inconsistent_quote"
        assert store.list_leads() == []
        sender.send.assert_not_called()


class TestQuote:

    def test_live_quote(self, service, gulet):
        quote = service.quote(gulet, ChargeRequest.daily(date(2024, 6, 1)))
        assert quote.total_price == 7500
        assert quote.commission_amount == 1125

    def test_unpriced_mode_unavailable(self, service, store):
        listing = store.insert_listing({"title": "Free", "is_daily_active": 1, "price_daily": 0, "is_hourly_active": 1, "price_hourly": 100})
        with pytest.raises(ModeUnavailable):
            service.quote(listing, ChargeRequest.daily(date(2024, 6, 1)))


class TestBookingOptions:

    def test_all_modes(self, service, gulet):
        options = service.booking_options(gulet.id, checkin=date(2024, 6, 1))
        assert options["bookable"] is True
        assert options["default_mode"] == "daily"
        assert {o["mode"] for o in options["options"]} == {"hourly", "daily", "stay"}
        stay = next(o for o in options["options"] if o["mode"] == "stay")
        assert stay["proposed_checkout"] == "2024-06-04"
        assert options["end_hour_options"][19] == [20]

    def test_requested_mode(self, service, gulet):
        assert service.booking_options(gulet.id, Mode.STAY)["default_mode"] == "stay"

    def test_nothing_bookable(self, service, store):
        listing = store.insert_listing({"title": "Empty"})
        options = service.booking_options(listing.id)
        assert options["bookable"] is False
        assert options["default_mode"] is None
        assert options["options"] == []


class TestUpdateStatus:

    def test_status_change(self, service, gulet):
        lead = service.submit(_submission(gulet.id)).lead
        updated = service.update_status(lead.id, "contacted", "left voicemail")
        assert updated.status == "contacted"
        assert updated.admin_status_note == "left voicemail"

    def test_invalid_status(self, service, gulet):
        lead = service.submit(_submission(gulet.id)).lead
        with pytest.raises(InvalidStatus):
            service.update_status(lead.id, "archived")

    def test_unknown_lead(self, service):
        with pytest.raises(LeadNotFound):
            service.update_status("missing", "contacted")
