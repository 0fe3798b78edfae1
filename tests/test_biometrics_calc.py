# tests/test_biometrics_calc.py
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal as D

import pytest

from core.biometrics_calc import (
    body_fat_by_gender,
    compute_age,
    compute_bmi,
    earliest_record,
    gender_distribution,
    heart_rate_drop,
    latest_record,
    metric_trend,
    trend,
)
from core.common import MISSING_VALUE, Observation, is_undefined
from core.errors import DivisionByZero, InvalidDate, MalformedRecord
from core.models import BiometricRecord
from scripts.demo_data import BIOMETRICS, USERS

JOHN = [b for b in BIOMETRICS if b.user_id == 1]
DAY0 = date(2024, 1, 1)


def _bio(id_: int, day: date, hr: str | None = "60", user_id: int = 1) -> BiometricRecord:
    return BiometricRecord(
        id=id_, user_id=user_id, record_date=day,
        resting_heart_rate=D(hr) if hr is not None else None,
    )


# ── age ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "born, as_of, years",
    [
        (date(1990, 5, 15), date(2023, 10, 16), 33),
        (date(1990, 5, 15), date(2024, 5, 14), 33),   # day before birthday
        (date(1990, 5, 15), date(2024, 5, 15), 34),
        (date(2000, 2, 29), date(2001, 2, 28), 0),
        (date(2000, 2, 29), date(2001, 3, 1), 1),
        (date(2020, 1, 1), date(2020, 1, 1), 0),
    ],
)
def test_compute_age_floors_whole_years(born, as_of, years):
    assert compute_age(born, as_of) == years


def test_compute_age_rejects_future_birth_date():
    with pytest.raises(InvalidDate):
        compute_age(date(2030, 1, 1), date(2024, 1, 1))


# ── BMI ─────────────────────────────────────────────────────────────
def test_bmi_rounds_to_two_decimals():
    assert compute_bmi(D("175.26"), D("77.8")) == D("25.33")
    assert compute_bmi(180, 81) == D("25.00")


@pytest.mark.parametrize("height", [0, D("-170")])
def test_bmi_non_positive_height_raises(height):
    with pytest.raises(DivisionByZero):
        compute_bmi(height, D("70"))
    with pytest.raises(ZeroDivisionError):
        compute_bmi(height, D("70"))


def test_bmi_without_weight_is_undefined():
    bmi = compute_bmi(D("170"), None)
    assert is_undefined(bmi)
    assert bmi == MISSING_VALUE
    assert bmi != D(0)


def test_bmi_monotonic():
    weights = [D(w) for w in ("50", "60", "70", "80", "90")]
    heights = [D(h) for h in ("150", "160", "170", "180", "190")]
    by_weight = [compute_bmi(D("170"), w) for w in weights]
    by_height = [compute_bmi(h, D("70")) for h in heights]
    assert by_weight == sorted(by_weight) and len(set(by_weight)) == len(weights)
    assert by_height == sorted(by_height, reverse=True) and len(set(by_height)) == len(heights)


# ── first / latest ──────────────────────────────────────────────────
def test_latest_and_earliest_break_same_day_ties_by_id():
    recs = [_bio(5, DAY0), _bio(7, DAY0), _bio(6, DAY0)]
    assert latest_record(recs).id == 7
    assert earliest_record(recs).id == 5


def test_latest_record_of_nothing_is_none():
    assert latest_record([]) is None
    assert earliest_record([]) is None


# ── trend ───────────────────────────────────────────────────────────
def test_weight_trend_of_demo_user():
    points = metric_trend(JOHN, "weight_kg")
    assert [p.delta for p in points] == [None, D("-0.70")]
    assert points[1].value == D("77.8")


def test_trend_single_observation():
    assert [(p.on, p.value, p.delta) for p in trend([Observation(DAY0, D("80"), 1)])] == [
        (DAY0, D("80"), None)
    ]


def test_trend_uses_previous_row_across_date_gaps():
    obs = [
        Observation(DAY0 + timedelta(days=30), D("81.25"), 3),
        Observation(DAY0, D("80"), 1),
        Observation(DAY0 + timedelta(days=1), D("79.5"), 2),
    ]
    points = trend(obs)
    assert len(points) == 3
    assert [p.delta for p in points] == [None, D("-0.50"), D("1.75")]


def test_trend_missing_value_nulls_neighbouring_deltas():
    obs = [
        Observation(DAY0, D("80"), 1),
        Observation(DAY0 + timedelta(days=7), None, 2),
        Observation(DAY0 + timedelta(days=14), D("79"), 3),
        Observation(DAY0 + timedelta(days=21), D("78"), 4),
    ]
    assert [p.delta for p in trend(obs)] == [None, None, None, D("-1.00")]


def test_metric_trend_rejects_unknown_column():
    with pytest.raises(MalformedRecord):
        metric_trend(JOHN, "shoe_size")


# ── heart-rate drop ─────────────────────────────────────────────────
def test_demo_user_two_weeks_does_not_qualify():
    hr = heart_rate_drop(JOHN, min_span_days=30, min_drop_bpm=5)
    assert not hr.qualifies
    assert hr.span_days == 14
    assert hr.drop_bpm == D("2.00")


def test_single_record_never_qualifies():
    hr = heart_rate_drop([_bio(1, DAY0, "70")], min_span_days=0, min_drop_bpm=-100)
    assert not hr.qualifies
    assert hr.span_days == 0


def test_same_day_readings_never_qualify():
    recs = [_bio(1, DAY0, "70"), _bio(2, DAY0, "50")]
    hr = heart_rate_drop(recs, min_span_days=0, min_drop_bpm=-100)
    assert not hr.qualifies
    assert hr.span_days == 0


def test_drop_compares_global_first_and_last():
    recs = [
        _bio(1, DAY0, "62"),
        _bio(2, DAY0 + timedelta(days=10), "70"),     # ignored middle record
        _bio(3, DAY0 + timedelta(days=30), "55"),
    ]
    hr = heart_rate_drop(recs, min_span_days=30, min_drop_bpm=5)
    assert hr.qualifies
    assert hr.drop_bpm == D("7.00")
    assert (hr.earliest.id, hr.latest.id) == (1, 3)


def test_drop_threshold_is_strict():
    recs = [_bio(1, DAY0, "60"), _bio(2, DAY0 + timedelta(days=40), "55")]
    assert not heart_rate_drop(recs, 30, 5).qualifies
    assert heart_rate_drop(recs, 30, D("4.99")).qualifies


def test_drop_requires_single_user():
    with pytest.raises(MalformedRecord):
        heart_rate_drop([_bio(1, DAY0), _bio(2, DAY0, user_id=2)], 30, 5)


def test_drop_with_missing_rate_is_undefined():
    hr = heart_rate_drop([_bio(1, DAY0, None), _bio(2, DAY0 + timedelta(days=60), "50")], 30, 5)
    assert not hr.qualifies
    assert is_undefined(hr.drop_bpm)


# ── population aggregates ───────────────────────────────────────────
def test_gender_distribution_of_demo_users():
    shares = gender_distribution(USERS)
    assert [(s.gender, s.user_count, s.percentage) for s in shares] == [
        ("Female", 1, D("33.33")),
        ("Male", 2, D("66.67")),
    ]


def test_body_fat_by_gender_averages_every_record():
    avg = body_fat_by_gender(USERS, BIOMETRICS)
    assert avg["Male"] == D("17.27")      # (18.2 + 17.8 + 15.8) / 3
    assert avg["Female"] == D("22.50")
