from datetime import date

import pytest

from agenda.services.holidays import get_brazilian_holidays, get_holidays_for_month, is_holiday


def test_year_has_fixed_and_movable_holidays() -> None:
    holidays = {h.date: h for h in get_brazilian_holidays(2025)}

    assert len(holidays) == 13
    assert holidays["2025-12-25"].name == "Natal"
    assert holidays["2025-01-01"].type == "national"
    assert holidays["2025-04-20"].name == "Páscoa"
    assert holidays["2025-04-18"].name == "Sexta-feira Santa"
    assert holidays["2025-03-04"].name == "Carnaval"
    assert holidays["2025-06-19"].name == "Corpus Christi"
    assert holidays["2025-06-19"].type == "optional"


def test_holidays_are_sorted_by_date() -> None:
    dates = [h.date for h in get_brazilian_holidays(2024)]

    assert dates == sorted(dates)


@pytest.mark.parametrize(
    "year,easter_sunday",
    [(2024, "2024-03-31"), (2025, "2025-04-20"), (2026, "2026-04-05")],
)
def test_easter_follows_the_calendar(year: int, easter_sunday: str) -> None:
    assert is_holiday(easter_sunday).name == "Páscoa"


def test_month_filter() -> None:
    november = get_holidays_for_month(2025, 11)

    assert [h.name for h in november] == [
        "Finados",
        "Proclamação da República",
        "Dia da Consciência Negra",
    ]
    assert get_holidays_for_month(2025, 8) == []


def test_is_holiday_accepts_dates_and_strings() -> None:
    assert is_holiday(date(2025, 9, 7)).name == "Independência do Brasil"
    assert is_holiday("2025-01-15") is None
