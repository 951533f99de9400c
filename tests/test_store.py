"""
tests/test_store.py
SQLiteStore against a temporary database file.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pricing_engine.models import Mode, Quote


def _lead(store, listing_id, name="Ayse", created_at=None, start=datetime(2024, 6, 1, 10), **kw):
    return store.insert_lead(
        listing_id=listing_id,
        customer_name=name,
        customer_phone="+90 555 111 2233",
        mode=kw.pop("mode", "hourly"),
        start_timestamp=start,
        end_timestamp=kw.pop("end", datetime(2024, 6, 1, 14)),
        created_at=created_at,
        **kw,
    )


class TestListings:

    def test_insert_and_get(self, store, gulet):
        loaded = store.get_listing(gulet.id)
        assert loaded.title == "Gulet Deniz"
        assert loaded.commission_rate == 15
        assert loaded.catalog == gulet.catalog
        assert loaded.catalog[Mode.STAY].unit_price == 4000

    def test_missing_listing(self, store):
        assert store.get_listing("nope") is None

    def test_generated_id_and_defaults(self, store):
        listing = store.insert_listing({"title": "Dinghy"})
        assert listing.id
        assert listing.currency == "TRY"
        assert listing.is_active is True
        assert listing.commission_rate is None

    def test_active_only(self, store, gulet):
        store.insert_listing({"id": "old", "title": "Retired", "is_active": False})
        assert [l.id for l in store.list_listings(active_only=True)] == [gulet.id]
        assert len(store.list_listings()) == 2


class TestLeads:

    def test_insert_starts_new(self, store, gulet):
        lead = _lead(store, gulet.id)
        assert lead.status == "new"
        assert lead.mode is Mode.HOURLY
        assert store.get_lead(lead.id).customer_name == "Ayse"

    def test_quote_snapshot_round_trip(self, store, gulet):
        quote = Quote(
            mode=Mode.HOURLY, unit_price=1000, quantity=4, unit_label="hour",
            total_price=4000, commission_rate=15, commission_amount=600,
            payout_amount=3400, currency="TRY",
        )
        lead = _lead(store, gulet.id, quote=quote)
        assert store.get_lead(lead.id).quote_snapshot == quote

    def test_filter_by_status_and_listing(self, store, gulet, speedboat):
        a = _lead(store, gulet.id, name="A")
        _lead(store, speedboat.id, name="B")
        store.update_lead_status(a.id, "confirmed")

        assert [l.id for l in store.list_leads(status="confirmed")] == [a.id]
        assert len(store.list_leads(listing_id=speedboat.id)) == 1
        assert len(store.list_leads()) == 2

    def test_orders(self, store, gulet):
        _lead(store, gulet.id, name="Zeki", created_at="2024-05-01T10:00:00+00:00",
              start=datetime(2024, 7, 1, 10), end=datetime(2024, 7, 1, 12))
        _lead(store, gulet.id, name="ali", created_at="2024-05-02T10:00:00+00:00",
              start=datetime(2024, 6, 1, 10), end=datetime(2024, 6, 1, 12))

        assert [l.customer_name for l in store.list_leads(order="newest")] == ["ali", "Zeki"]
        assert [l.customer_name for l in store.list_leads(order="oldest")] == ["Zeki", "ali"]
        assert [l.customer_name for l in store.list_leads(order="date_asc")] == ["ali", "Zeki"]
        assert [l.customer_name for l in store.list_leads(order="date_desc")] == ["Zeki", "ali"]

    def test_update_status_keeps_note(self, store, gulet):
        lead = _lead(store, gulet.id)
        assert store.update_lead_status(lead.id, "contacted", "called back")
        assert store.update_lead_status(lead.id, "confirmed")
        updated = store.get_lead(lead.id)
        assert updated.status == "confirmed"
        assert updated.admin_status_note == "called back"

    def test_update_unknown_lead(self, store):
        assert store.update_lead_status("missing", "contacted") is False

    def test_update_rejects_unknown_status(self, store, gulet):
        lead = _lead(store, gulet.id)
        with pytest.raises(ValueError):
            store.update_lead_status(lead.id, "archived")

    def test_stats(self, store, gulet):
        _lead(store, gulet.id)
        assert store.stats() == {"listings": 1, "leads": 1}
