"""Core calculation engine for the EMI calculator.

This module implements the financial logic of a fixed-rate personal loan: the
equated monthly installment (EMI) and the month-by-month split of each
installment into principal and interest. Results are returned as an
``AmortizationResult`` holding the installment, the totals and the schedule.

All arithmetic is carried out in double precision without intermediate
rounding; rounding for display belongs to :mod:`emi_calc.formatter`.
"""

from __future__ import annotations

import logging
import math
from typing import List

from .data_models import AmortizationResult, LoanTerms, PeriodRow

logger = logging.getLogger(__name__)


def _normalize_tenure(tenure_months: float) -> int:
    """Return the tenure as a whole number of months, at least one."""
    return max(1, int(math.floor(tenure_months)))


def _monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 12 / 100


def _calculate_installment(principal: float, rate_per_month: float, term: int) -> float:
    """Return the equal monthly installment for a loan.

    The formula is:

        installment = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    installment simplifies to ``P / n``.

    ``(1 + i)^n - 1`` is evaluated as ``expm1(n * log1p(i))`` so that tiny
    rates keep full precision instead of cancelling to zero. When it
    overflows, the installment tends to ``P * i``.
    """
    if rate_per_month == 0:
        return principal / term
    if rate_per_month > -1:
        try:
            growth = math.expm1(term * math.log1p(rate_per_month))
        except OverflowError:
            growth = math.inf
    else:
        growth = (1 + rate_per_month) ** term - 1
    if math.isinf(growth):
        return principal * rate_per_month
    if growth == 0:
        return principal / term
    return principal * rate_per_month * (growth + 1) / growth


def _simulate(principal: float, rate_per_month: float, installment: float, term: int) -> List[PeriodRow]:
    schedule: List[PeriodRow] = []
    balance = principal
    for period in range(1, term + 1):
        interest_payment = balance * rate_per_month
        # The last installment may not be needed in full
        principal_payment = min(installment - interest_payment, balance)
        balance = max(0.0, balance - principal_payment)
        schedule.append(
            PeriodRow(
                index=period,
                principal_component=principal_payment,
                interest_component=interest_payment,
                ending_balance=balance,
            )
        )
    return schedule


def compute_schedule(terms: LoanTerms) -> AmortizationResult:
    """Compute the installment, totals and amortization schedule for a loan.

    Parameters
    ----------
    terms: LoanTerms
        The loan terms. ``tenure_months`` is floored and raised to at least
        one; when that changes the requested value, the result is flagged with
        ``tenure_clamped`` and a warning is logged. No other validation takes
        place: a non-positive principal or a negative rate yields degenerate
        but arithmetically consistent figures.

    Returns
    -------
    AmortizationResult
        The nominal installment, ``total_payment = installment * n``,
        ``total_interest = total_payment - principal`` and exactly ``n``
        schedule rows.
    """
    term = _normalize_tenure(terms.tenure_months)
    clamped = term != terms.tenure_months
    if clamped:
        logger.warning(
            "Tenure of %s months coerced to %d month(s)", terms.tenure_months, term
        )

    rate_per_month = _monthly_rate(terms.annual_rate_pct)
    installment = _calculate_installment(terms.principal, rate_per_month, term)
    schedule = _simulate(terms.principal, rate_per_month, installment, term)

    total_payment = installment * term
    total_interest = total_payment - terms.principal

    logger.debug(
        "Computed EMI %.6f for principal=%s rate=%s%% term=%d",
        installment,
        terms.principal,
        terms.annual_rate_pct,
        term,
    )

    return AmortizationResult(
        installment_amount=installment,
        total_payment=total_payment,
        total_interest=total_interest,
        schedule=tuple(schedule),
        tenure_months=term,
        tenure_clamped=clamped,
    )


def compute_emi(principal: float, annual_rate_pct: float, tenure_months: float) -> AmortizationResult:
    """Shorthand for :func:`compute_schedule` taking the three terms directly."""
    return compute_schedule(
        LoanTerms(
            principal=principal,
            annual_rate_pct=annual_rate_pct,
            tenure_months=tenure_months,
        )
    )
