"""
Brazilian holiday table.

Fixed national holidays plus the Easter-relative movable feasts. The table
is advisory: it marks dates on the agenda and never blocks a booking.
"""

from datetime import date, timedelta
from functools import lru_cache
from typing import Literal, Optional

from dateutil.easter import easter
from pydantic import BaseModel, ConfigDict

from ..utils.helpers import parse_date

HolidayType = Literal["national", "optional"]

FIXED_HOLIDAYS: list[tuple[int, int, str, HolidayType]] = [
    (1, 1, "Ano Novo", "national"),
    (4, 21, "Tiradentes", "national"),
    (5, 1, "Dia do Trabalho", "national"),
    (9, 7, "Independência do Brasil", "national"),
    (10, 12, "Nossa Senhora Aparecida", "national"),
    (11, 2, "Finados", "national"),
    (11, 15, "Proclamação da República", "national"),
    (11, 20, "Dia da Consciência Negra", "national"),
    (12, 25, "Natal", "national"),
]

# Offsets in days from Easter Sunday
MOVABLE_HOLIDAYS: list[tuple[int, str, HolidayType]] = [
    (-47, "Carnaval", "optional"),
    (-2, "Sexta-feira Santa", "national"),
    (0, "Páscoa", "optional"),
    (60, "Corpus Christi", "optional"),
]


class Holiday(BaseModel):
    """A dated holiday."""
    date: str
    name: str
    type: HolidayType

    model_config = ConfigDict(frozen=True)


@lru_cache(maxsize=32)
def _holidays_for_year(year: int) -> tuple[Holiday, ...]:
    holidays = [
        Holiday(date=date(year, month, day).isoformat(), name=name, type=kind)
        for month, day, name, kind in FIXED_HOLIDAYS
    ]

    easter_sunday = easter(year)
    holidays.extend(
        Holiday(date=(easter_sunday + timedelta(days=offset)).isoformat(), name=name, type=kind)
        for offset, name, kind in MOVABLE_HOLIDAYS
    )

    return tuple(sorted(holidays, key=lambda h: h.date))


def get_brazilian_holidays(year: int) -> list[Holiday]:
    """All holidays of ``year`` ordered by date."""
    return list(_holidays_for_year(year))


def get_holidays_for_month(year: int, month: int) -> list[Holiday]:
    """Holidays of a month (1-12)."""
    prefix = f"{year:04d}-{month:02d}-"
    return [h for h in _holidays_for_year(year) if h.date.startswith(prefix)]


def is_holiday(value) -> Optional[Holiday]:
    """The holiday falling on ``value`` (date or ISO string), if any."""
    target = parse_date(value)
    key = target.isoformat()
    for holiday in _holidays_for_year(target.year):
        if holiday.date == key:
            return holiday
    return None
