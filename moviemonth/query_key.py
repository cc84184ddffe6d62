"""Derive the cache identity for a birthdate.

The key only depends on the month and year of the date *after* it has been
shifted forward by one day, so every day of a calendar month (bar the last,
which rolls into the next month) maps onto the same ``movie-<month>-<year>``
string.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Tuple

MONTH_NAMES: Dict[str, List[str]] = {
    "es": [
        "enero",
        "febrero",
        "marzo",
        "abril",
        "mayo",
        "junio",
        "julio",
        "agosto",
        "septiembre",
        "octubre",
        "noviembre",
        "diciembre",
    ],
    "en": [
        "january",
        "february",
        "march",
        "april",
        "may",
        "june",
        "july",
        "august",
        "september",
        "october",
        "november",
        "december",
    ],
}

KEY_PREFIX = "movie"


@dataclass(frozen=True)
class QueryKey:
    month: str
    year: int

    @property
    def key(self) -> str:
        return f"{KEY_PREFIX}-{self.month}-{self.year}"

    def __str__(self) -> str:
        return self.key


def shift_date(value: date) -> date:
    # Dates read as UTC midnight can fall on the previous local day.
    return value + timedelta(days=1)


def month_year(value: date, locale: str = "es") -> Tuple[str, int]:
    names = MONTH_NAMES.get(locale)
    if names is None:
        raise ValueError(f"Unsupported locale: {locale!r}")
    shifted = shift_date(value)
    return names[shifted.month - 1], shifted.year


def derive_query_key(value: date, locale: str = "es") -> QueryKey:
    """Return the :class:`QueryKey` for ``value``, e.g. 2024-01-15 -> movie-enero-2024."""
    month, year = month_year(value, locale)
    return QueryKey(month=month, year=year)
