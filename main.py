"""
main.py
CLI entry point for the charter quote service.

Usage:
  python main.py demo
  python main.py quote --mode hourly --date 2024-06-01 --start-hour 10 --end-hour 14 --price 1000 --commission 15
  python main.py quote --mode stay --date 2024-06-01 --checkout 2024-06-04 --price 2500 --minimum 3
  python main.py api
"""
import argparse
import json
import sys
from datetime import date
from pathlib import Path

# Ensure project root is on sys.path when running directly
sys.path.insert(0, str(Path(__file__).parent))

# ── Reference listing used by the demo ────────────────────────────────────────
DEMO_LISTING = {
    "id":                   "demo-gulet",
    "title":                "Gulet Deniz",
    "currency":             "TRY",
    "commission_rate":      15,
    "is_hourly_active":     1,
    "price_hourly":         1000,
    "min_hours":            2,
    "is_daily_active":      1,
    "price_daily":          7500,
    "is_stay_active":       1,
    "price_stay_per_night": 4000,
    "min_stay_days":        3,
}

DEMO_REQUESTS = [
    ("Hourly 10:00-14:00",        "hourly", dict(day=date(2024, 6, 1), start_hour=10, end_hour=14)),
    ("Hourly 10:00-11:00 (min)",  "hourly", dict(day=date(2024, 6, 1), start_hour=10, end_hour=11)),
    ("Daily",                     "daily",  dict(day=date(2024, 6, 1))),
    ("Stay 3 nights",             "stay",   dict(day=date(2024, 6, 1), checkout=date(2024, 6, 4))),
    ("Stay 1 night (min)",        "stay",   dict(day=date(2024, 6, 1), checkout=date(2024, 6, 2))),
    ("Hourly 14:00-10:00",        "hourly", dict(day=date(2024, 6, 1), start_hour=14, end_hour=10)),
]


# Demo mode

def run_demo() -> None:
    from rich import box
    from rich.console import Console
    from rich.table import Table

    from booking.records import ListingRecord, build_charge_request
    from pricing_engine import QuoteEngine, QuoteError, active_modes, default_mode
    from pricing_engine.models import Mode

    console = Console()
    console.print("\n[bold blue]═══ CHARTER QUOTE ENGINE: DEMO ═══[/bold blue]\n")

    listing = ListingRecord.from_row(DEMO_LISTING)
    engine  = QuoteEngine()

    console.print(f"  [bold]Listing:[/bold]     {listing.title}")
    console.print(f"  [bold]Modes:[/bold]       {', '.join(sorted(m.value for m in active_modes(listing.catalog)))}")
    console.print(f"  [bold]Default:[/bold]     {default_mode(listing.catalog).value}")
    console.print(f"  [bold]Commission:[/bold]  {listing.commission_rate}%")
    console.print()

    table = Table(title=f"Quotes for {listing.title}", box=box.ROUNDED, show_lines=True)
    table.add_column("Request",    style="cyan", width=26)
    table.add_column("Quantity",   justify="right", width=10)
    table.add_column("Unit price", justify="right", width=12)
    table.add_column("Total",      justify="right", style="green", width=12)
    table.add_column("Commission", justify="right", style="yellow", width=12)
    table.add_column("Payout",     justify="right", width=12)

    for label, mode, fields in DEMO_REQUESTS:
        request = build_charge_request(Mode(mode), **fields)
        try:
            quote = engine.quote_catalog(listing.catalog, request, listing.commission_rate, listing.currency)
        except QuoteError as exc:
            table.add_row(label, "[red]-[/red]", "", f"[red]{exc.code}[/red]", "", "")
            continue
        table.add_row(
            label,
            f"{quote.quantity} {quote.unit_label}",
            f"{quote.unit_price:,}",
            f"{quote.total_price:,}",
            f"{quote.commission_amount:,}",
            f"{quote.payout_amount:,}",
        )

    console.print(table)
    console.print()


# Quote mode

def run_quote(args: argparse.Namespace) -> int:
    from booking.records import build_charge_request
    from pricing_engine import QuoteError, compute_quote
    from pricing_engine.models import Mode, RateCatalogEntry

    mode  = Mode(args.mode)
    entry = RateCatalogEntry(
        mode=mode,
        active=True,
        unit_price=args.price,
        minimum_duration=args.minimum,
    )
    request = build_charge_request(
        mode,
        date.fromisoformat(args.date),
        args.start_hour,
        args.end_hour,
        date.fromisoformat(args.checkout) if args.checkout else None,
    )
    try:
        quote = compute_quote(entry, request, args.commission, args.currency)
    except QuoteError as exc:
        print(json.dumps({"error": exc.code, "detail": exc.message}, indent=2))
        return 1
    print(json.dumps(quote.to_dict(), indent=2))
    return 0


# ── API mode ──────────────────────────────────────────────────────────────────

def run_api() -> None:
    import uvicorn
    from config.settings import settings
    from monitoring import start_metrics_server
    start_metrics_server(settings.metrics_port)
    uvicorn.run(
        "api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Charter quote service")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("demo", help="Print sample quotes for a demo listing")

    q = sub.add_parser("quote", help="Price one charter request")
    q.add_argument("--mode", choices=["hourly", "daily", "stay"], required=True)
    q.add_argument("--date", required=True, help="Charter / check-in date, YYYY-MM-DD")
    q.add_argument("--start-hour", type=int)
    q.add_argument("--end-hour", type=int)
    q.add_argument("--checkout", help="Checkout date for stays, YYYY-MM-DD")
    q.add_argument("--price", type=int, required=True, help="Unit price in whole currency units")
    q.add_argument("--minimum", type=int, help="Minimum hours / nights")
    q.add_argument("--commission", type=int, default=0, help="Commission rate, integer percent")
    q.add_argument("--currency", default="TRY")

    sub.add_parser("api", help="Run the REST API")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    if args.command == "demo":
        run_demo()
    elif args.command == "quote":
        sys.exit(run_quote(args))
    else:
        run_api()
