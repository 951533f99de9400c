"""
tests/test_notifications.py
New-lead email composition and Resend delivery (HTTP mocked with httpx.MockTransport).
"""
import json
import sys
from datetime import date
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from booking.records import LeadSubmission, ListingRecord
from config.settings import Settings
from notifications.composer import EmailMessage, compose_lead_email, format_amount
from notifications.sender import NotificationError, NullSender, ResendEmailSender, build_sender
from pricing_engine.models import Mode, Quote


@pytest.fixture
def listing() -> ListingRecord:
    return ListingRecord(
        id="gulet-1",
        title="Gulet <Deniz>",
        currency="TRY",
        captain_name="Ahmet",
        captain_phone="+90 555 000 0001",
    )


@pytest.fixture
def stay_submission() -> LeadSubmission:
    return LeadSubmission(
        listing_id="gulet-1",
        customer_name="Ayse",
        customer_phone="+90 555 111 2233",
        mode=Mode.STAY,
        day=date(2024, 6, 1),
        checkout=date(2024, 6, 4),
        guest_count=6,
    )


@pytest.fixture
def stay_quote() -> Quote:
    return Quote(
        mode=Mode.STAY, unit_price=4000, quantity=3, unit_label="night",
        total_price=12_000, commission_rate=10, commission_amount=1200,
        payout_amount=10_800, currency="TRY",
    )


class TestComposer:

    def test_format_amount(self):
        assert format_amount(12_000, "TRY") == "12,000.00 TRY"

    def test_subject(self, listing, stay_submission, stay_quote):
        msg = compose_lead_email(listing, stay_submission, stay_quote)
        assert msg.subject == "NEW REQUEST: Ayse - Gulet <Deniz> (12,000.00 TRY)"

    def test_body_carries_quote_fields(self, listing, stay_submission, stay_quote):
        html = compose_lead_email(listing, stay_submission, stay_quote).html
        assert "3 nights" in html
        assert "01 Jun 2024" in html
        assert "04 Jun 2024" in html
        assert "1,200.00 TRY" in html
        assert "10,800.00 TRY" in html
        assert "Ahmet" in html

    def test_body_escapes_html(self, listing, stay_submission, stay_quote):
        html = compose_lead_email(listing, stay_submission, stay_quote).html
        assert "Gulet &lt;Deniz&gt;" in html
        assert "<Deniz>" not in html

    def test_hourly_body_shows_hours(self, listing):
        sub = LeadSubmission(
            listing_id="gulet-1", customer_name="Ayse", customer_phone="1",
            mode=Mode.HOURLY, day=date(2024, 6, 1), start_hour=10, end_hour=14,
        )
        quote = Quote(
            mode=Mode.HOURLY, unit_price=1000, quantity=4, unit_label="hour",
            total_price=4000, commission_rate=15, commission_amount=600, payout_amount=3400, currency="TRY",
        )
        html = compose_lead_email(listing, sub, quote).html
        assert "10:00 - 14:00" in html
        assert "Not specified" in html

    def test_missing_captain(self, stay_submission, stay_quote):
        html = compose_lead_email(ListingRecord(id="x", title="Boat"), stay_submission, stay_quote).html
        assert "Not provided" in html


class TestResendSender:

    MESSAGE = EmailMessage(subject="NEW REQUEST: test", html="<p>hi</p>")

    def _sender(self, handler) -> ResendEmailSender:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return ResendEmailSender(
            api_key="re_test",
            recipients=["ops@example.com"],
            sender="Charter <noreply@example.com>",
            client=client,
        )

    def test_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "email-123"})

        assert self._sender(handler).send(self.MESSAGE) == "email-123"
        assert seen["auth"] == "Bearer re_test"
        assert seen["body"]["to"] == ["ops@example.com"]
        assert seen["body"]["subject"] == "NEW REQUEST: test"

    def test_accepted_without_json_body(self):
        sender = self._sender(lambda request: httpx.Response(200, text="OK"))
        assert sender.send(self.MESSAGE) is None

    def test_rejected_request(self):
        sender = self._sender(lambda request: httpx.Response(422, json={"message": "bad from"}))
        with pytest.raises(NotificationError, match="422"):
            sender.send(self.MESSAGE)

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NotificationError):
            self._sender(handler).send(self.MESSAGE)


class TestBuildSender:

    def test_null_sender_without_key(self, monkeypatch):
        monkeypatch.setenv("RESEND_API_KEY", "")
        monkeypatch.setenv("NOTIFY_TO", "")
        assert isinstance(build_sender(Settings()), NullSender)

    def test_resend_sender_when_configured(self, monkeypatch):
        monkeypatch.setenv("RESEND_API_KEY", "re_live")
        monkeypatch.setenv("NOTIFY_TO", "a@example.com, b@example.com")
        sender = build_sender(Settings())
        assert isinstance(sender, ResendEmailSender)

    def test_null_sender_send(self):
        assert NullSender().send(TestResendSender.MESSAGE) is None
