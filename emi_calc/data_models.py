"""Data models for the EMI calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan terms entered by the user, individual schedule rows, the
complete amortization result and the derived dated and yearly views. All of
them are frozen; a result is recomputed wholesale whenever the terms change.
"""

from dataclasses import dataclass
from datetime import date
from typing import Tuple


@dataclass(frozen=True)
class LoanTerms:
    """Inputs of a fixed-rate, fixed-tenure loan.

    Attributes
    ----------
    principal: float
        The amount borrowed.
    annual_rate_pct: float
        Annual nominal interest rate in percent (``10.5`` means 10.5 %).
    tenure_months: int
        Number of monthly installments. Values below 1 are clamped to 1 by the
        engine rather than rejected.
    """

    principal: float
    annual_rate_pct: float
    tenure_months: int


@dataclass(frozen=True)
class PeriodRow:
    """One month of the amortization schedule.

    ``principal_component + interest_component`` equals the installment for
    every row except possibly the last one, where the principal part is
    truncated so that ``ending_balance`` never goes negative.
    """

    index: int
    principal_component: float
    interest_component: float
    ending_balance: float


@dataclass(frozen=True)
class AmortizationResult:
    """Outcome of a schedule computation.

    ``total_payment`` and ``total_interest`` are derived from the nominal
    installment times the number of periods, not from summing ``schedule``.
    ``tenure_clamped`` is set when the requested tenure had to be coerced to
    a whole number of at least one month.
    """

    installment_amount: float
    total_payment: float
    total_interest: float
    schedule: Tuple[PeriodRow, ...]
    tenure_months: int
    tenure_clamped: bool = False


@dataclass(frozen=True)
class DatedPeriodRow:
    """A schedule row together with the calendar date of its installment."""

    index: int
    principal_component: float
    interest_component: float
    ending_balance: float
    calendar_date: date

    @classmethod
    def from_row(cls, row: PeriodRow, calendar_date: date) -> "DatedPeriodRow":
        return cls(
            index=row.index,
            principal_component=row.principal_component,
            interest_component=row.interest_component,
            ending_balance=row.ending_balance,
            calendar_date=calendar_date,
        )


@dataclass(frozen=True)
class YearBucket:
    """Totals of all installments falling in one calendar year.

    ``ending_balance`` is the balance after the last installment of the year.
    """

    year: int
    principal_sum: float
    interest_sum: float
    ending_balance: float
