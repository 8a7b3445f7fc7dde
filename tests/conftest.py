"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from pulse.airtable import AirtableClient


@pytest.fixture
def now() -> datetime:
    """Fixed reference time at local midnight."""
    return datetime(2026, 3, 1)


@pytest.fixture
def days_from(now):
    """ISO date string N days from the reference time (negative = past)."""
    def _days_from(days):
        return (now + timedelta(days=days)).date().isoformat()
    return _days_from


@pytest.fixture
def fake_airtable():
    """AirtableClient stand-in; configure list_records etc. per test."""
    airtable = MagicMock(spec=AirtableClient)
    airtable.list_records.return_value = []
    airtable.first.return_value = None
    return airtable


@pytest.fixture
def tables(fake_airtable):
    """Route list_records calls by table name: tables['Clients'] = [...]"""
    data = {}

    def list_records(table, **kwargs):
        return data.get(table, [])

    fake_airtable.list_records.side_effect = list_records
    return data


def make_record(record_id, **fields):
    """Raw Airtable record with the given fields."""
    return {'id': record_id, 'createdTime': '2026-01-01T00:00:00.000Z', 'fields': fields}
