import logging

import pytest

from emi_calc.data_models import LoanTerms
from emi_calc.engine import compute_emi, compute_schedule


class TestInstallment:
    def test_reference_loan(self, reference_result):
        """500,000 at 9.99 % for 60 months."""
        # P * r * (1+r)^n / ((1+r)^n - 1) with r = 0.008325
        assert reference_result.installment_amount == pytest.approx(10621.06, abs=0.01)
        assert reference_result.total_interest == pytest.approx(137263.74, abs=1)

    def test_zero_rate_is_straight_line(self, interest_free_result):
        assert interest_free_result.installment_amount == 100_000 / 12
        assert interest_free_result.installment_amount == pytest.approx(8333.33, abs=0.01)

    def test_single_month_loan(self):
        result = compute_emi(10_000, 12, 1)
        # One payment of principal plus one month of 1 % interest
        assert result.installment_amount == pytest.approx(10_100)
        assert len(result.schedule) == 1
        assert result.schedule[0].principal_component == pytest.approx(10_000)
        assert result.schedule[0].ending_balance == pytest.approx(0, abs=1e-6)

    def test_compute_emi_matches_compute_schedule(self, reference_terms, reference_result):
        assert compute_emi(500_000, 9.99, 60) == reference_result


class TestTotals:
    def test_total_payment_is_installment_times_tenure(self, reference_result):
        assert reference_result.total_payment == reference_result.installment_amount * 60

    def test_total_interest_is_total_payment_less_principal(self, reference_result):
        assert reference_result.total_interest == reference_result.total_payment - 500_000

    def test_zero_rate_has_no_interest(self, interest_free_result):
        assert interest_free_result.total_interest == pytest.approx(0, abs=1e-6)


class TestSchedule:
    def test_row_count(self, reference_result):
        assert len(reference_result.schedule) == 60
        assert [row.index for row in reference_result.schedule] == list(range(1, 61))

    def test_first_row_split(self, reference_result):
        first = reference_result.schedule[0]
        # 500,000 * 0.008325
        assert first.interest_component == pytest.approx(4162.5)
        assert first.principal_component == pytest.approx(6458.56, abs=0.01)

    def test_components_add_up_to_installment(self, reference_result):
        for row in reference_result.schedule[:-1]:
            total = row.principal_component + row.interest_component
            assert total == pytest.approx(reference_result.installment_amount)

    def test_balance_never_increases(self, reference_result):
        schedule = reference_result.schedule
        for i in range(1, len(schedule)):
            assert schedule[i].ending_balance <= schedule[i - 1].ending_balance

    def test_final_balance_is_zero(self, reference_result):
        assert reference_result.schedule[-1].ending_balance == pytest.approx(0, abs=1e-6)

    def test_principal_is_conserved(self, reference_result):
        paid = sum(row.principal_component for row in reference_result.schedule)
        assert paid == pytest.approx(500_000, abs=1e-6)

    def test_balances_are_non_negative(self, reference_result):
        assert all(row.ending_balance >= 0 for row in reference_result.schedule)

    def test_zero_rate_rows(self, interest_free_result):
        assert len(interest_free_result.schedule) == 12
        assert all(row.interest_component == 0 for row in interest_free_result.schedule)
        assert interest_free_result.schedule[-1].ending_balance == pytest.approx(0, abs=1e-6)

    @pytest.mark.parametrize(
        "principal,rate,tenure",
        [(50_000, 5, 6), (1_000_000, 36, 360), (75_000, 0.1, 240), (2_000_000, 12.5, 84)],
    )
    def test_invariants_across_terms(self, principal, rate, tenure):
        result = compute_emi(principal, rate, tenure)
        schedule = result.schedule
        assert len(schedule) == tenure
        for i in range(1, len(schedule)):
            assert schedule[i].ending_balance <= schedule[i - 1].ending_balance
        assert schedule[-1].ending_balance == pytest.approx(0, abs=1e-6)
        paid = sum(row.principal_component for row in schedule)
        assert paid == pytest.approx(principal, rel=1e-9)

    def test_schedule_is_immutable(self, reference_result):
        assert isinstance(reference_result.schedule, tuple)
        with pytest.raises(AttributeError):
            reference_result.schedule[0].ending_balance = 1.0


class TestTenureClamping:
    def test_whole_tenure_is_not_flagged(self, reference_result):
        assert reference_result.tenure_clamped is False
        assert reference_result.tenure_months == 60

    @pytest.mark.parametrize("tenure", [0, -5, 0.4])
    def test_tenure_below_one_becomes_one_month(self, tenure):
        result = compute_emi(12_000, 10, tenure)
        assert result.tenure_months == 1
        assert result.tenure_clamped is True
        assert len(result.schedule) == 1

    def test_fractional_tenure_is_floored(self):
        result = compute_emi(12_000, 10, 12.7)
        assert result.tenure_months == 12
        assert result.tenure_clamped is True
        assert len(result.schedule) == 12

    def test_clamp_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="emi_calc.engine"):
            compute_emi(12_000, 10, 0)
        assert "coerced to 1 month" in caplog.text


class TestDegenerateInputs:
    def test_zero_principal(self):
        result = compute_emi(0, 10, 12)
        assert result.installment_amount == 0
        assert len(result.schedule) == 12

    def test_negative_principal_does_not_raise(self):
        result = compute_schedule(LoanTerms(principal=-1_000, annual_rate_pct=10, tenure_months=6))
        assert result.installment_amount < 0
        assert len(result.schedule) == 6

    def test_negative_rate_does_not_raise(self):
        result = compute_emi(1_000, -5, 6)
        assert len(result.schedule) == 6
        assert result.total_interest < 0


class TestTinyRates:
    @pytest.mark.parametrize("rate", [1e-15, 1e-9, 1e-6])
    @pytest.mark.parametrize("tenure", [60, 360])
    def test_loan_is_fully_repaid(self, rate, tenure):
        result = compute_emi(500_000, rate, tenure)
        assert len(result.schedule) == tenure
        assert result.schedule[-1].ending_balance == pytest.approx(0, abs=1e-6)
        paid = sum(row.principal_component for row in result.schedule)
        assert paid == pytest.approx(500_000, abs=1e-6)

    @pytest.mark.parametrize("rate", [1e-15, 1e-9, 1e-6])
    def test_installment_approaches_straight_line(self, rate):
        result = compute_emi(500_000, rate, 60)
        assert result.installment_amount == pytest.approx(500_000 / 60, rel=1e-6)


class TestHugeRates:
    def test_overflowing_growth_gives_interest_only_installment(self):
        # (1 + r)^n overflows a double; the installment tends to P * r
        result = compute_emi(1_000, 1_000_000, 600)
        assert result.installment_amount == pytest.approx(1_000 * 1_000_000 / 1200)
        assert len(result.schedule) == 600
