from datetime import date
from types import SimpleNamespace

import pytest

from constants import ComportoStatus
from utils_comporto import (
    used_days, remaining_days, employee_remaining_days, classify_status,
    get_status_info, calendar_days_between, working_days_between,
)


def absence(days):
    return SimpleNamespace(days_counted=days)


def test_remaining_days_without_absences_is_full_budget():
    assert remaining_days(180, []) == 180
    assert remaining_days(180, None) == 180
    assert used_days([]) == 0


def test_remaining_days_subtracts_all_counted_days():
    assert remaining_days(180, [absence(30), absence(0), absence(45)]) == 105


def test_remaining_days_can_go_negative():
    assert remaining_days(180, [absence(150), absence(40)]) == -10


def test_employee_remaining_days_uses_ccnl_budget():
    employee = SimpleNamespace(ccnl=SimpleNamespace(comporto_days=120), absences=[absence(20)])
    assert employee_remaining_days(employee) == 100


@pytest.mark.parametrize('remaining, expected', [
    (-1, ComportoStatus.EXPIRED),
    (-200, ComportoStatus.EXPIRED),
    (0, ComportoStatus.CRITICAL),
    (10, ComportoStatus.CRITICAL),
    (11, ComportoStatus.WARNING),
    (30, ComportoStatus.WARNING),
    (31, ComportoStatus.COMPLIANT),
    (180, ComportoStatus.COMPLIANT),
])
def test_classify_status_bands(remaining, expected):
    assert classify_status(remaining) == expected


def test_status_info_carries_label_and_status():
    info = get_status_info(5)
    assert info['status'] == ComportoStatus.CRITICAL
    assert info['label'] == 'Critico'
    assert get_status_info(25)['label'] == 'Attenzione'
    assert get_status_info(-3)['label'] == 'Scaduto'
    assert get_status_info(90)['label'] == 'OK'


def test_calendar_days_between_is_inclusive_and_order_independent():
    assert calendar_days_between(date(2024, 1, 1), date(2024, 1, 1)) == 1
    assert calendar_days_between(date(2024, 1, 1), date(2024, 1, 10)) == 10
    assert calendar_days_between(date(2024, 1, 10), date(2024, 1, 1)) == 10


def test_working_days_between_skips_weekends():
    # lunedì 1 gennaio 2024 -> domenica 7 gennaio 2024
    assert working_days_between(date(2024, 1, 1), date(2024, 1, 7)) == 5
    assert working_days_between(date(2024, 1, 6), date(2024, 1, 7)) == 0
    assert working_days_between(date(2024, 1, 1), date(2024, 1, 14)) == 10


def test_working_days_between_reversed_range_is_zero():
    assert working_days_between(date(2024, 1, 10), date(2024, 1, 1)) == 0
