from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.services.order_trend import build_trend, empty_trend, month_window, window_bounds
from tests.helpers.orders import make_record

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def test_month_window_crosses_year():
    win = month_window(NOW, 12)
    assert len(win) == 12
    assert win[0] == (2025, 10)  # 2025-11
    assert win[-1] == (2026, 9)  # 2026-10


def test_month_window_rejects_zero():
    with pytest.raises(ValueError):
        month_window(NOW, 0)


def test_window_bounds():
    start, end = window_bounds(NOW, 12)
    assert start == datetime(2025, 11, 1, tzinfo=UTC)
    assert end == datetime(2026, 11, 1, tzinfo=UTC)

    start, end = window_bounds(datetime(2026, 12, 5, tzinfo=UTC), 1)
    assert start == datetime(2026, 12, 1, tzinfo=UTC)
    assert end == datetime(2027, 1, 1, tzinfo=UTC)


def test_empty_trend_zero_filled_and_labelled():
    trend = empty_trend("created", NOW, 12)
    assert [b.month for b in trend.months][:2] == ["2025-11", "2025-12"]
    assert trend.months[-1].month == "2026-10"
    assert trend.months[-1].label == "10月"
    assert all(b.count == 0 and b.weight == 0 and b.volume == 0 for b in trend.months)
    assert trend.summary.count == 0


def test_thirteen_months_ago_is_excluded():
    recs = [
        make_record(created_at=NOW - timedelta(days=400), weight=Decimal("9")),
        make_record(created_at=NOW, weight=Decimal("1")),
    ]
    trend = build_trend(recs, "created", now=NOW, months=12)
    assert trend.summary.count == 1
    assert trend.summary.weight == Decimal("1")
    assert trend.months[-1].count == 1


def test_missing_date_is_skipped_not_bucketed():
    recs = [
        make_record(created_at=None, weight=Decimal("5")),
        make_record(created_at=datetime(2026, 5, 3, tzinfo=UTC), weight=Decimal("2")),
    ]
    trend = build_trend(recs, "created", now=NOW)
    assert trend.summary.count == 1
    assert sum(b.count for b in trend.months) == 1


def test_customs_field_uses_release_time():
    recs = [
        make_record(created_at=NOW, customs_release_time=None),
        make_record(
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
            customs_release_time=datetime(2026, 9, 30, 23, 0, tzinfo=UTC),
            volume=Decimal("3.25"),
        ),
    ]
    trend = build_trend(recs, "customs", now=NOW)
    by_month = {b.month: b for b in trend.months}
    assert by_month["2026-09"].count == 1
    assert by_month["2026-09"].volume == Decimal("3.25")
    assert trend.summary.count == 1
    assert trend.date_field == "customs"


def test_bucketing_is_by_utc_month():
    # 北京时间 10-01 02:00 = UTC 09-30 18:00
    cst = timezone(timedelta(hours=8))
    rec = make_record(created_at=datetime(2026, 10, 1, 2, 0, tzinfo=cst))
    trend = build_trend([rec], "created", now=NOW)
    by_month = {b.month: b for b in trend.months}
    assert by_month["2026-09"].count == 1
    assert by_month["2026-10"].count == 0


def test_summary_equals_sum_of_buckets():
    recs = [
        make_record(
            created_at=datetime(2026, m, 10, tzinfo=UTC),
            weight=Decimal(m),
            volume=Decimal("0.5"),
        )
        for m in range(1, 11)
    ] + [make_record(created_at=None, weight=Decimal("100"))]
    trend = build_trend(recs, "created", now=NOW)
    assert trend.summary.count == sum(b.count for b in trend.months) == 10
    assert trend.summary.weight == sum((b.weight for b in trend.months), Decimal("0"))
    assert trend.summary.volume == sum((b.volume for b in trend.months), Decimal("0"))


def test_unsupported_date_field():
    with pytest.raises(ValueError):
        build_trend([], "shipped", now=NOW)  # type: ignore[arg-type]
