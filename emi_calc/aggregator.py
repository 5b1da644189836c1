"""Calendar views of an amortization schedule.

The engine numbers installments 1..n. This module dates them from a start
date and rolls the dated rows up into one bucket per calendar year.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

from .data_models import DatedPeriodRow, PeriodRow, YearBucket
from .utils import ROLL, date_for_period


def attach_dates(schedule: Iterable[PeriodRow], start: date, overflow: str = ROLL) -> List[DatedPeriodRow]:
    """Return the schedule rows with the installment date of each attached."""
    return [
        DatedPeriodRow.from_row(row, date_for_period(start, row.index, overflow))
        for row in schedule
    ]


def group_by_year(rows: Iterable[DatedPeriodRow]) -> List[YearBucket]:
    """Group dated schedule rows by calendar year.

    Principal and interest are summed per year; the bucket's ending balance is
    the balance of the last row seen for that year. Years appear in the order
    they are first encountered, which is ascending for a date-ordered
    schedule. An empty input yields an empty list.
    """
    groups: Dict[int, Dict[str, float]] = {}
    for row in rows:
        year = row.calendar_date.year
        acc = groups.get(year)
        if acc is None:
            acc = {"principal": 0.0, "interest": 0.0, "balance": row.ending_balance}
            groups[year] = acc
        acc["principal"] += row.principal_component
        acc["interest"] += row.interest_component
        acc["balance"] = row.ending_balance
    return [
        YearBucket(
            year=year,
            principal_sum=acc["principal"],
            interest_sum=acc["interest"],
            ending_balance=acc["balance"],
        )
        for year, acc in groups.items()
    ]
