"""Shared loan fixtures.

Reference loan: 500,000 at 9.99 % over 60 months.
Interest-free loan: 100,000 at 0 % over 12 months.
"""

from datetime import date

import pytest

from emi_calc.data_models import LoanTerms
from emi_calc.engine import compute_schedule


@pytest.fixture
def reference_terms() -> LoanTerms:
    return LoanTerms(principal=500_000, annual_rate_pct=9.99, tenure_months=60)


@pytest.fixture
def reference_result(reference_terms):
    return compute_schedule(reference_terms)


@pytest.fixture
def interest_free_result():
    return compute_schedule(LoanTerms(principal=100_000, annual_rate_pct=0, tenure_months=12))


@pytest.fixture
def june_start() -> date:
    return date(2025, 6, 7)
