"""
notifications/composer.py
Builds the new-lead email sent to the platform operator: customer, charter
details, the quote and the captain to call back.
"""
from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Optional

from booking.records import ListingRecord, LeadSubmission
from pricing_engine.models import Mode, Quote

_MODE_TITLES = {
    Mode.HOURLY: "Hourly",
    Mode.DAILY:  "Day charter",
    Mode.STAY:   "Overnight stay",
}


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str


def format_amount(amount: int, currency: str) -> str:
    """Plain grouping only; locale-aware formatting is left to the mail client."""
    return f"{amount:,.2f} {currency}".strip()


def _fmt_date(value: Optional[date]) -> str:
    return value.strftime("%d %b %Y") if value else "-"


def _date_details(submission: LeadSubmission, quote: Quote) -> str:
    if submission.mode is Mode.HOURLY:
        return (
            f"<p><strong>Date:</strong> {_fmt_date(submission.day)}</p>"
            f"<p><strong>Hours:</strong> {submission.start_hour:02d}:00 - {submission.end_hour:02d}:00 "
            f"({quote.quantity} {quote.unit_label}s)</p>"
        )
    if submission.mode is Mode.STAY:
        return (
            f"<p><strong>Check-in:</strong> {_fmt_date(submission.day)}</p>"
            f"<p><strong>Check-out:</strong> {_fmt_date(submission.checkout)}</p>"
            f"<p><strong>Duration:</strong> {quote.quantity} {quote.unit_label}s</p>"
        )
    return f"<p><strong>Date:</strong> {_fmt_date(submission.day)}</p>"


def compose_lead_email(
    listing: ListingRecord, submission: LeadSubmission, quote: Quote
) -> EmailMessage:
    cur = quote.currency or listing.currency
    boat = escape(listing.title)
    customer = escape(submission.customer_name)
    phone = escape(submission.customer_phone)
    captain = escape(listing.captain_name or "Not provided")
    captain_phone = escape(listing.captain_phone or "Not provided")

    subject = (
        f"NEW REQUEST: {submission.customer_name} - {listing.title} "
        f"({format_amount(quote.total_price, cur)})"
    )

    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1>New charter request</h1>
  <p>{boat}</p>

  <h2>Customer</h2>
  <p><strong>Name:</strong> {customer}</p>
  <p><strong>Phone:</strong> <a href="tel:{phone}">{phone}</a></p>
  <p><strong>Guests:</strong> {submission.guest_count or 'Not specified'}</p>

  <h2>Booking</h2>
  <p><strong>Charter type:</strong> {_MODE_TITLES[submission.mode]}</p>
  {_date_details(submission, quote)}

  <h2>Price</h2>
  <table style="width: 100%; border-collapse: collapse;">
    <tr><td>Unit price:</td><td style="text-align: right;">{format_amount(quote.unit_price, cur)} / {quote.unit_label}</td></tr>
    <tr><td>Quantity:</td><td style="text-align: right;">{quote.quantity} {quote.unit_label}</td></tr>
    <tr><td><strong>TOTAL:</strong></td><td style="text-align: right;"><strong>{format_amount(quote.total_price, cur)}</strong></td></tr>
  </table>

  <h2>Commission</h2>
  <table style="width: 100%; border-collapse: collapse;">
    <tr><td>Total:</td><td style="text-align: right;">{format_amount(quote.total_price, cur)}</td></tr>
    <tr><td>Commission rate:</td><td style="text-align: right;">%{quote.commission_rate}</td></tr>
    <tr><td><strong>Your commission:</strong></td><td style="text-align: right;"><strong>{format_amount(quote.commission_amount, cur)}</strong></td></tr>
    <tr><td>Captain payout:</td><td style="text-align: right;">{format_amount(quote.payout_amount, cur)}</td></tr>
  </table>

  <h2>Captain</h2>
  <p><strong>Name:</strong> {captain}</p>
  <p><strong>Phone:</strong> {captain_phone}</p>
</div>
"""
    return EmailMessage(subject=subject, html=html)
