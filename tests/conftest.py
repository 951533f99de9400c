"""
tests/conftest.py
Shared fixtures: a throwaway SQLite store and a few listing rows.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from storage.sqlite_store import SQLiteStore

GULET_ROW = {
    "id":                   "gulet-1",
    "title":                "Gulet Deniz",
    "location":             "Bodrum",
    "currency":             "TRY",
    "capacity":             12,
    "captain_name":         "Ahmet",
    "captain_phone":        "+90 555 000 0001",
    "captain_email":        "ahmet@example.com",
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

SPEEDBOAT_ROW = {
    "id":               "speed-1",
    "title":            "Speedboat Mavi",
    "currency":         "EUR",
    "captain_name":     "Zeynep",
    "commission_rate":  None,
    "is_hourly_active": 1,
    "price_hourly":     300,
}


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(db_path=tmp_path / "charter.db")


@pytest.fixture
def gulet(store):
    return store.insert_listing(GULET_ROW)


@pytest.fixture
def speedboat(store):
    return store.insert_listing(SPEEDBOAT_ROW)


@pytest.fixture
def sender():
    s = MagicMock()
    s.send.return_value = "msg-1"
    return s
