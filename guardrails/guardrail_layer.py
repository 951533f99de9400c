"""
guardrails/guardrail_layer.py
Checks that run around the quote engine:
  1. SubmissionValidator: required booking-form fields before any pricing or write
  2. QuoteSanityChecker: arithmetic invariants on a finished quote
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from booking.records import ListingRecord, LeadSubmission
from monitoring import GUARDRAIL_FAILURES, get_logger
from pricing_engine.catalog import HOUR_OPTIONS
from pricing_engine.models import Mode, Quote

log = get_logger(__name__)


@dataclass
class ValidationReport:
    passed: bool
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"passed": self.passed, "issues": self.issues, "warnings": self.warnings}


# ── 1. Submission Validator ───────────────────────────────────────────────────

class SubmissionValidator:

    def validate(
        self, submission: LeadSubmission, listing: Optional[ListingRecord] = None
    ) -> ValidationReport:
        issues: list[str] = []
        warnings: list[str] = []

        if not (submission.customer_name or "").strip():
            issues.append("customer_name is required")
        if not (submission.customer_phone or "").strip():
            issues.append("customer_phone is required")
        if submission.day is None:
            issues.append("a charter date is required")

        if submission.mode is Mode.HOURLY:
            if submission.start_hour is None or submission.end_hour is None:
                issues.append("start_hour and end_hour are required for hourly charters")
            else:
                for name, hour in (("start_hour", submission.start_hour), ("end_hour", submission.end_hour)):
                    if not 0 <= hour <= 24:
                        issues.append(f"{name} must be between 0 and 24, got {hour}")
                    elif hour not in HOUR_OPTIONS:
                        warnings.append(
                            f"{name} {hour:02d}:00 is outside the usual "
                            f"{HOUR_OPTIONS[0]:02d}:00-{HOUR_OPTIONS[-1]:02d}:00 window"
                        )

        if submission.mode is Mode.STAY and submission.checkout is None:
            issues.append("a checkout date is required for stay charters")

        if submission.guest_count is not None:
            if submission.guest_count < 1:
                issues.append("guest_count must be at least 1")
            elif listing and listing.capacity and submission.guest_count > listing.capacity:
                warnings.append(
                    f"{submission.guest_count} guests exceeds the boat capacity of {listing.capacity}"
                )

        return ValidationReport(passed=len(issues) == 0, issues=issues, warnings=warnings)


# ── 2. Quote Sanity Checker ───────────────────────────────────────────────────

class QuoteSanityChecker:

    def check(self, quote: Quote) -> ValidationReport:
        issues: list[str] = []

        if quote.total_price != quote.unit_price * quote.quantity:
            issues.append(
                f"total {quote.total_price} != {quote.unit_price} × {quote.quantity}"
            )
        if quote.commission_amount + quote.payout_amount != quote.total_price:
            issues.append(
                f"commission {quote.commission_amount} + payout {quote.payout_amount} "
                f"!= total {quote.total_price}"
            )
        if min(quote.total_price, quote.commission_amount, quote.payout_amount) < 0:
            issues.append("quote amounts cannot be negative")
        if quote.quantity < 1:
            issues.append(f"quantity must be positive, got {quote.quantity}")

        return ValidationReport(passed=len(issues) == 0, issues=issues)


# ── Guardrail Orchestrator ────────────────────────────────────────────────────

class GuardrailLayer:

    def __init__(self) -> None:
        self._submission_validator = SubmissionValidator()
        self._quote_checker        = QuoteSanityChecker()

    def validate_submission(
        self, submission: LeadSubmission, listing: Optional[ListingRecord] = None
    ) -> ValidationReport:
        report = self._submission_validator.validate(submission, listing)
        if not report.passed:
            log.warning("Submission validation failed", issues=report.issues)
            GUARDRAIL_FAILURES.labels(check_type="submission").inc()
        elif report.warnings:
            log.info("Submission accepted with warnings", warnings=report.warnings)
        return report

    def validate_quote(self, quote: Quote) -> ValidationReport:
        report = self._quote_checker.check(quote)
        if not report.passed:
            log.error("Quote failed sanity check", issues=report.issues, quote=quote.to_dict())
            GUARDRAIL_FAILURES.labels(check_type="quote").inc()
        return report
