"""
pricing_engine/engine.py
Single entry point every caller (booking form, lead submission, admin
reports) uses to price a charter.
"""
import time

from monitoring import QUOTE_LATENCY, QUOTE_REQUESTS, get_logger
from pricing_engine.calculators import DailyCalculator, HourlyCalculator, StayCalculator
from pricing_engine.errors import QuoteError
from pricing_engine.models import ChargeRequest, Mode, Quote, RateCatalog, RateCatalogEntry

log = get_logger(__name__)


class QuoteEngine:
    """
    Dispatches to the per-mode calculator. Stateless: one instance can be
    shared by any number of concurrent callers.
    """

    _CALCULATOR_MAP: dict[Mode, type] = {
        Mode.HOURLY: HourlyCalculator,
        Mode.DAILY:  DailyCalculator,
        Mode.STAY:   StayCalculator,
    }

    def __init__(self) -> None:
        self._calculators = {mode: cls() for mode, cls in self._CALCULATOR_MAP.items()}

    def compute_quote(
        self,
        entry: RateCatalogEntry,
        request: ChargeRequest,
        commission_rate: int,
        currency: str = "",
    ) -> Quote:
        """
        Price ``request`` against one catalog entry.

        Raises:
            ModeUnavailable:       entry inactive or for a different mode.
            InvalidRange:          end missing or not after start.
            InvalidCommissionRate: rate outside 0..100.
        """
        mode = Mode(request.mode)
        t0 = time.perf_counter()
        try:
            quote = self._calculators[mode].calculate(entry, request, commission_rate, currency)
        except QuoteError as exc:
            QUOTE_REQUESTS.labels(mode=mode.value, status=exc.code).inc()
            log.info("Quote refused", mode=mode.value, error=exc.code, reason=exc.message)
            raise
        finally:
            QUOTE_LATENCY.labels(mode=mode.value).observe(time.perf_counter() - t0)

        QUOTE_REQUESTS.labels(mode=mode.value, status="ok").inc()
        log.debug(
            "Quote computed",
            mode=mode.value,
            quantity=quote.quantity,
            total=quote.total_price,
            commission=quote.commission_amount,
            payout=quote.payout_amount,
        )
        return quote

    def quote_catalog(
        self,
        catalog: RateCatalog,
        request: ChargeRequest,
        commission_rate: int,
        currency: str = "",
    ) -> Quote:
        """Same as compute_quote, looking the entry up by the request's mode."""
        return self.compute_quote(catalog[request.mode], request, commission_rate, currency)


_default_engine = QuoteEngine()


def compute_quote(
    entry: RateCatalogEntry,
    request: ChargeRequest,
    commission_rate: int,
    currency: str = "",
) -> Quote:
    return _default_engine.compute_quote(entry, request, commission_rate, currency)
