"""
storage/sqlite_store.py
SQLite data-access layer for listings and leads.

One configured instance is created at process start and passed to every
collaborator that needs it (booking service, API routes, reports).
"""
import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from booking.records import LEAD_STATUSES, LeadRecord, ListingRecord
from config.settings import settings
from monitoring import get_logger
from pricing_engine.models import Quote

log = get_logger(__name__)

DB_PATH = Path(settings.sqlite_db_path)


SCHEMA = """
-- ─────────────────────────────────────────────────────────────────
-- listings: one boat, with its three charter-mode rate settings
-- ─────────────────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS listings (
    id                   TEXT PRIMARY KEY,
    title                TEXT NOT NULL,
    location             TEXT DEFAULT '',
    currency             TEXT DEFAULT 'TRY',
    capacity             INTEGER,
    captain_name         TEXT,
    captain_phone        TEXT,
    captain_email        TEXT,
    commission_rate      INTEGER,             -- 0..100, NULL = platform default
    is_active            INTEGER DEFAULT 1,   -- listing visible / bookable at all
    is_hourly_active     INTEGER DEFAULT 0,
    price_hourly         INTEGER,
    min_hours            INTEGER DEFAULT 2,
    is_daily_active      INTEGER DEFAULT 0,
    price_daily          INTEGER,
    is_stay_active       INTEGER DEFAULT 0,
    price_stay_per_night INTEGER,
    min_stay_days        INTEGER DEFAULT 3,
    created_at           TEXT NOT NULL
);

-- ─────────────────────────────────────────────────────────────────
-- leads: customer booking requests
-- ─────────────────────────────────────────────────────────────────
CREATE TABLE IF NOT EXISTS leads (
    id                     TEXT PRIMARY KEY,
    listing_id             TEXT NOT NULL REFERENCES listings(id),
    customer_name          TEXT NOT NULL,
    customer_phone         TEXT NOT NULL,
    requested_charter_type TEXT NOT NULL,     -- hourly | daily | stay
    start_timestamp        TEXT NOT NULL,
    end_timestamp          TEXT,
    guest_count            INTEGER DEFAULT 1,
    extra_notes            TEXT,
    status                 TEXT DEFAULT 'new',
    admin_status_note      TEXT,
    quote_snapshot         TEXT,              -- JSON quote at submission time
    created_at             TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_leads_listing ON leads(listing_id);
CREATE INDEX IF NOT EXISTS idx_leads_status  ON leads(status);
"""

_LISTING_COLUMNS = (
    "id", "title", "location", "currency", "capacity", "captain_name",
    "captain_phone", "captain_email", "commission_rate", "is_active",
    "is_hourly_active", "price_hourly", "min_hours",
    "is_daily_active", "price_daily",
    "is_stay_active", "price_stay_per_night", "min_stay_days", "created_at",
)

_LEAD_ORDER = {
    "newest":    "created_at DESC",
    "oldest":    "created_at ASC",
    "name_asc":  "customer_name ASC",
    "name_desc": "customer_name DESC",
    "date_asc":  "start_timestamp ASC",
    "date_desc": "start_timestamp DESC",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStore:
    """
    Read/write interface to the listings and leads tables.
    Used by:
      - BookingService (write): inserts leads
      - API routes / reports (read): listings, leads, status updates
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path) if db_path else DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        log.info("SQLite store ready", path=str(self.db_path))

    # ── Schema ────────────────────────────────────────────────────────────────

    def _init_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ── Listings ──────────────────────────────────────────────────────────────

    def insert_listing(self, row: dict[str, Any]) -> ListingRecord:
        """Insert a listing given its flat columns; ``id`` is generated when absent."""
        data = {col: row.get(col) for col in _LISTING_COLUMNS}
        data["id"] = str(row.get("id") or uuid.uuid4())
        data["created_at"] = row.get("created_at") or _now()
        data["is_active"] = int(bool(row.get("is_active", True)))
        for flag in ("is_hourly_active", "is_daily_active", "is_stay_active"):
            data[flag] = int(bool(row.get(flag)))
        data["currency"] = row.get("currency") or settings.default_currency
        data["min_hours"] = row.get("min_hours") or 2
        data["min_stay_days"] = row.get("min_stay_days") or 3

        cols = ", ".join(_LISTING_COLUMNS)
        params = ", ".join(f":{c}" for c in _LISTING_COLUMNS)
        with self._conn() as conn:
            conn.execute(f"INSERT INTO listings ({cols}) VALUES ({params})", data)
        log.info("Listing inserted", listing_id=data["id"], title=data["title"])
        return ListingRecord.from_row(data)

    def get_listing(self, listing_id: str) -> Optional[ListingRecord]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM listings WHERE id = ?", (listing_id,)).fetchone()
            return ListingRecord.from_row(dict(row)) if row else None

    def list_listings(self, active_only: bool = False) -> list[ListingRecord]:
        sql = "SELECT * FROM listings"
        if active_only:
            sql += " WHERE is_active = 1"
        with self._conn() as conn:
            rows = conn.execute(sql + " ORDER BY title").fetchall()
            return [ListingRecord.from_row(dict(r)) for r in rows]

    # ── Leads ─────────────────────────────────────────────────────────────────

    def insert_lead(
        self,
        listing_id: str,
        customer_name: str,
        customer_phone: str,
        mode: str,
        start_timestamp: datetime,
        end_timestamp: Optional[datetime] = None,
        guest_count: int = 1,
        extra_notes: Optional[str] = None,
        quote: Optional[Quote] = None,
        created_at: Optional[str] = None,
    ) -> LeadRecord:
        """Single atomic insert; the lead always starts in status 'new'."""
        data = {
            "id":                     str(uuid.uuid4()),
            "listing_id":             listing_id,
            "customer_name":          customer_name,
            "customer_phone":         customer_phone,
            "requested_charter_type": mode,
            "start_timestamp":        start_timestamp.isoformat(),
            "end_timestamp":          end_timestamp.isoformat() if end_timestamp else None,
            "guest_count":            guest_count,
            "extra_notes":            extra_notes,
            "status":                 "new",
            "quote_snapshot":         json.dumps(quote.to_dict()) if quote else None,
            "created_at":             created_at or _now(),
        }
        with self._conn() as conn:
            conn.execute("""
                INSERT INTO leads (id, listing_id, customer_name, customer_phone,
                                   requested_charter_type, start_timestamp, end_timestamp,
                                   guest_count, extra_notes, status, quote_snapshot, created_at)
                VALUES (:id, :listing_id, :customer_name, :customer_phone,
                        :requested_charter_type, :start_timestamp, :end_timestamp,
                        :guest_count, :extra_notes, :status, :quote_snapshot, :created_at)
            """, data)
        return LeadRecord.from_row(data)

    def get_lead(self, lead_id: str) -> Optional[LeadRecord]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM leads WHERE id = ?", (lead_id,)).fetchone()
            return LeadRecord.from_row(dict(row)) if row else None

    def list_leads(
        self,
        status: Optional[str] = None,
        listing_id: Optional[str] = None,
        order: str = "newest",
    ) -> list[LeadRecord]:
        """Filter by status / listing; price and captain orders are applied by the report."""
        clauses, params = [], []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if listing_id:
            clauses.append("listing_id = ?")
            params.append(listing_id)
        sql = "SELECT * FROM leads"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += f" ORDER BY {_LEAD_ORDER.get(order, _LEAD_ORDER['newest'])}"
        with self._conn() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [LeadRecord.from_row(dict(r)) for r in rows]

    def update_lead_status(self, lead_id: str, status: str, note: Optional[str] = None) -> bool:
        """Return False when no lead has ``lead_id``."""
        if status not in LEAD_STATUSES:
            raise ValueError(f"Unknown lead status '{status}'")
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE leads SET status = ?, admin_status_note = COALESCE(?, admin_status_note) WHERE id = ?",
                (status, note, lead_id),
            )
            updated = cur.rowcount > 0
        if updated:
            log.info("Lead status updated", lead_id=lead_id, status=status)
        return updated

    def stats(self) -> dict:
        """Return row counts per table."""
        tables = ["listings", "leads"]
        result = {}
        with self._conn() as conn:
            for t in tables:
                result[t] = conn.execute(f"SELECT COUNT(*) as n FROM {t}").fetchone()["n"]
        return result
