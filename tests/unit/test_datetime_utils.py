"""Unit tests for UTC datetime helpers."""

from datetime import datetime, timedelta, timezone

import pytest
from libs.common.datetime_utils import ensure_utc, months_ago, utc_now


@pytest.mark.unit
def test_utc_now_is_aware():
    assert utc_now().tzinfo is timezone.utc


@pytest.mark.unit
def test_ensure_utc_tags_naive_values():
    naive = datetime(2026, 3, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.unit
def test_ensure_utc_converts_offsets():
    plus_one = timezone(timedelta(hours=1))
    value = datetime(2026, 3, 1, 13, 0, tzinfo=plus_one)
    assert ensure_utc(value) == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.unit
def test_ensure_utc_passes_none():
    assert ensure_utc(None) is None


@pytest.mark.unit
def test_months_ago_crosses_year_and_clamps_day():
    value = datetime(2026, 3, 31, tzinfo=timezone.utc)
    assert months_ago(value, 6) == datetime(2025, 9, 28, tzinfo=timezone.utc)
