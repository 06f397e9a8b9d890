from datetime import date

import pytest

from smo_leave.utilities import utils
from smo_leave.utilities.models import ExtractionConfig


def test_add_months_clamps_to_month_end():
    assert utils.add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert utils.add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)


def test_add_months_rolls_over_year():
    assert utils.add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
    assert utils.add_months(date(2026, 3, 15), -3) == date(2025, 12, 15)


def test_create_date_window_is_months_ahead():
    window = utils.create_date_window(6, today=date(2026, 1, 15))
    assert window.start == date(2026, 1, 15)
    assert window.end == date(2026, 7, 15)
    assert "6 months" in window.description


def test_encode_date():
    assert utils.encode_date(date(2026, 3, 7)) == 20260307


def test_config_from_defaults_ignores_none():
    cfg = ExtractionConfig.from_defaults(months_ahead=None, top_n=3)
    assert cfg.months_ahead == 6
    assert cfg.top_n == 3


@pytest.mark.parametrize(
    "overrides, field_name",
    [
        ({"months_ahead": 0}, "months_ahead"),
        ({"leave_patterns": []}, "leave_patterns"),
        ({"leave_patterns": ["leave%", "  "]}, "leave_patterns"),
        ({"qualification": "guess"}, "qualification"),
        ({"min_smo_shifts": 0}, "min_smo_shifts"),
        ({"smo_marker": " "}, "smo_marker"),
        ({"qualification": "profile", "smo_category": ""}, "smo_category"),
        ({"leave_day_policy": "hourly"}, "leave_day_policy"),
        ({"query_timeout": 0}, "query_timeout"),
        ({"top_n": 0}, "top_n"),
        ({"db_url": " "}, "db_url"),
        ({"output_path": ""}, "output_path"),
    ],
)
def test_config_validate_rejects_bad_fields(overrides, field_name):
    with pytest.raises(ValueError, match=field_name):
        ExtractionConfig.from_defaults(**overrides).validate()


def test_config_validate_returns_self():
    cfg = ExtractionConfig.from_defaults()
    assert cfg.validate() is cfg
