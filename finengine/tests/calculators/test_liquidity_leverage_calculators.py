"""Tests for LiquidityCalculator and LeverageCalculator."""
import pytest

from finengine.core.types import FinancialDataRecord, INSUFFICIENT_DATA
from finengine.calculators.liquidity_calculator import LiquidityCalculator
from finengine.calculators.leverage_calculator import LeverageCalculator


class TestLiquidityCalculator:
    """Test suite for LiquidityCalculator."""

    def test_current_ratio(self, sample_record):
        result = LiquidityCalculator().calculate_current_ratio(sample_record)

        assert result.value == 2.0
        assert result.interpretation == 'good'
        assert result.category == 'Liquidity'
        assert result.subcategory == 'Basic Ratios'

    def test_current_ratio_missing_denominator(self, sample_fields):
        """Absent current liabilities is insufficiency, not an error."""
        del sample_fields['current_liabilities']
        result = LiquidityCalculator().calculate_current_ratio(FinancialDataRecord(sample_fields))

        assert result.value is None
        assert result.interpretation == INSUFFICIENT_DATA

    def test_current_ratio_zero_denominator(self, sample_fields):
        sample_fields['current_liabilities'] = 0
        result = LiquidityCalculator().calculate_current_ratio(FinancialDataRecord(sample_fields))

        assert result.value is None
        assert result.interpretation == INSUFFICIENT_DATA

    def test_quick_ratio_excludes_inventory(self, sample_record):
        result = LiquidityCalculator().calculate_quick_ratio(sample_record)

        assert result.value == 1.7
        assert result.interpretation == 'excellent'

    def test_quick_ratio_without_inventory(self):
        record = FinancialDataRecord({'current_assets': 60000, 'current_liabilities': 50000})
        result = LiquidityCalculator().calculate_quick_ratio(record)

        assert result.value == 1.2
        assert result.interpretation == 'good'

    def test_cash_ratio(self, sample_record):
        result = LiquidityCalculator().calculate_cash_ratio(sample_record)

        assert result.value == 0.4
        assert result.interpretation == 'good'

    def test_working_capital_sign(self, sample_record):
        calc = LiquidityCalculator()
        assert calc.calculate_working_capital(sample_record).value == 50000
        assert calc.calculate_working_capital(sample_record).interpretation == 'good'

        negative = FinancialDataRecord({'current_assets': 40000, 'current_liabilities': 50000})
        result = calc.calculate_working_capital(negative)
        assert result.value == -10000
        assert result.interpretation == 'concerning'

    def test_empty_record_is_insufficient(self, empty_record):
        calc = LiquidityCalculator()
        for method in (calc.calculate_current_ratio, calc.calculate_quick_ratio, calc.calculate_cash_ratio,
                       calc.calculate_defensive_interval, calc.calculate_days_cash_on_hand):
            result = method(empty_record)
            assert result.value is None
            assert result.interpretation == INSUFFICIENT_DATA


class TestLeverageCalculator:
    """Test suite for LeverageCalculator."""

    def test_debt_to_equity(self, sample_record):
        result = LeverageCalculator().calculate_debt_to_equity(sample_record)

        assert result.value == 0.5
        assert result.interpretation == 'moderate'
        assert result.category == 'Leverage'

    def test_debt_ratio_reported_as_percent(self, sample_record):
        result = LeverageCalculator().calculate_debt_ratio(sample_record)

        assert result.value == 10.0
        assert result.interpretation == 'low'

    def test_interest_coverage(self, sample_record):
        result = LeverageCalculator().calculate_interest_coverage(sample_record)

        assert result.value == 12.0
        assert result.interpretation == 'excellent'

    def test_debt_to_ebitda_uses_derived_ebitda(self, sample_record):
        result = LeverageCalculator().calculate_debt_to_ebitda(sample_record)

        assert result.value == pytest.approx(50000 / 82000, abs=0.01)

    def test_debt_to_capital(self, sample_record):
        result = LeverageCalculator().calculate_debt_to_capital(sample_record)

        assert result.value == pytest.approx(33.3, abs=0.05)

    def test_missing_equity(self):
        result = LeverageCalculator().calculate_debt_to_equity(FinancialDataRecord({'total_debt': 1000}))

        assert result.value is None
        assert result.interpretation == INSUFFICIENT_DATA
