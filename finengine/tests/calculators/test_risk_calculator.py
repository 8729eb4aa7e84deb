"""Tests for RiskCalculator."""
import pytest

from finengine.core.types import FinancialDataRecord, INSUFFICIENT_DATA
from finengine.calculators.risk_calculator import RiskCalculator


@pytest.fixture
def sample_returns():
    """Twenty daily returns with a fat left tail."""
    return [-0.05, -0.04, -0.03, -0.02, -0.01] + [0.01] * 15


class TestAltmanZScore:
    """Test suite for the Altman Z-Score."""

    def test_z_score(self, sample_record):
        result = RiskCalculator().calculate_altman_z_score(sample_record)

        assert result.value == 2.26
        assert result.interpretation == 'caution'
        assert result.category == 'Risk'
        assert result.components['sales_to_assets'] == 0.8

    def test_requires_every_input(self, sample_fields):
        del sample_fields['total_liabilities']
        result = RiskCalculator().calculate_altman_z_score(FinancialDataRecord(sample_fields))

        assert result.value is None
        assert result.interpretation == INSUFFICIENT_DATA


class TestValueAtRisk:
    """Test suite for VaR variants."""

    def test_historical_index_selection(self, sample_returns, calc_config):
        """At 95% over 20 returns the loss is the 2nd worst return."""
        record = FinancialDataRecord({'returns': sample_returns})
        result = RiskCalculator(calc_config).calculate_value_at_risk(record)

        assert result.value == 4.0
        assert result.interpretation == 'moderate_risk'

    def test_historical_var_amount(self, sample_returns, calc_config):
        record = FinancialDataRecord({'returns': sample_returns, 'portfolio_value': 1000000})
        result = RiskCalculator(calc_config).calculate_historical_var(record)

        assert result.value == 40000
        assert result.interpretation == 'moderate_risk'

    def test_parametric_var_standard_z(self, calc_config):
        record = FinancialDataRecord({'portfolio_value': 1000000, 'volatility': 0.02})
        calc = RiskCalculator(calc_config)

        at_95 = calc.calculate_parametric_var(record)
        at_99 = calc.calculate_parametric_var(record.with_derived(confidence_level=0.99))

        assert at_95.value == 32900
        assert at_95.components['z_score'] == 1.645
        assert at_99.value == 46520

    def test_invalid_confidence(self, sample_returns, calc_config):
        record = FinancialDataRecord({'returns': sample_returns, 'confidence_level': 1.5})

        with pytest.raises(ValueError):
            RiskCalculator(calc_config).calculate_value_at_risk(record)

    def test_monte_carlo_is_reproducible(self, calc_config):
        record = FinancialDataRecord({'expected_return': 0.0005, 'volatility': 0.02})
        calc = RiskCalculator(calc_config)

        first = calc.calculate_monte_carlo_var(record)
        second = calc.calculate_monte_carlo_var(record)

        assert first == second
        assert first.components['simulations'] == 5000
        assert 2.0 < first.value < 4.5

    def test_monte_carlo_uses_supplied_simulations(self, sample_returns, calc_config):
        record = FinancialDataRecord({'simulated_returns': sample_returns})
        result = RiskCalculator(calc_config).calculate_monte_carlo_var(record)

        assert result.value == 4.0
        assert result.components == {'simulations': 20}

    def test_conditional_var_exceeds_var(self, sample_returns, calc_config):
        record = FinancialDataRecord({'returns': sample_returns})
        calc = RiskCalculator(calc_config)

        assert calc.calculate_conditional_var(record).value == 4.5
        assert calc.calculate_conditional_var(record).value >= calc.calculate_value_at_risk(record).value

    def test_missing_returns(self, empty_record):
        result = RiskCalculator().calculate_value_at_risk(empty_record)

        assert result.interpretation == INSUFFICIENT_DATA


class TestCreditAndScenarioRisk:
    """Test suite for credit VaR and scenario analysis."""

    def test_credit_var(self):
        record = FinancialDataRecord({
            'exposure': 1000000, 'probability_of_default': 0.02, 'loss_given_default': 0.45,
        })
        result = RiskCalculator().calculate_credit_var(record)

        assert result.components['expected_loss'] == 9000
        assert result.components['unexpected_loss'] == 63000
        assert result.value == pytest.approx(112635, abs=1)
        assert result.interpretation == 'acceptable_risk'

    def test_scenario_length_mismatch(self):
        record = FinancialDataRecord({'scenarios': [0.1, -0.05, 0.02], 'probabilities': [0.5, 0.5]})

        with pytest.raises(ValueError, match="same length"):
            RiskCalculator().calculate_monte_carlo_risk(record)

    def test_probabilities_must_sum_to_one(self):
        record = FinancialDataRecord({'scenarios': [0.1, -0.05], 'probabilities': [0.5, 0.4]})

        with pytest.raises(ValueError):
            RiskCalculator().calculate_monte_carlo_risk(record)

    def test_scenario_dispersion(self):
        record = FinancialDataRecord({'scenarios': [0.2, -0.2], 'probabilities': [0.5, 0.5]})
        result = RiskCalculator().calculate_monte_carlo_risk(record)

        assert result.value == 0.2
        assert result.components['expected_value'] == 0.0
        assert result.interpretation == 'moderate_risk'
