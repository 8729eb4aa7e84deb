import math
import numpy as np
from statistics import NormalDist
from typing import Optional

from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide, round_half_up


class RiskCalculator(CalculatorBase):
    """Bankruptcy, market and credit risk models.

    Return-based VaR figures are reported as a percentage loss and classified
    on the absolute fractional loss; amount-based variants report currency
    and classify the loss as a share of the portfolio.
    """
    CATEGORY = "Risk"

    # Z-scores quoted by desks for the two standard confidence levels
    STANDARD_Z_SCORES = {0.95: 1.645, 0.99: 2.326}
    CREDIT_VAR_Z = 1.645

    def _confidence(self, data: FinancialDataRecord) -> float:
        confidence = self._field(data, 'confidence_level')
        confidence = self.config.var_confidence_level if confidence is None else confidence
        if not 0 < confidence < 1:
            raise ValueError(f"confidence_level must be between 0 and 1, got {confidence}")
        return confidence

    def _tail_index(self, confidence: float, count: int) -> int:
        return int(math.floor((1 - confidence) * count))

    def _var_quantile(self, returns: np.ndarray, confidence: float) -> float:
        ordered = np.sort(returns)
        return float(ordered[self._tail_index(confidence, len(ordered))])

    def _z_score(self, confidence: float) -> float:
        if confidence in self.STANDARD_Z_SCORES:
            return self.STANDARD_Z_SCORES[confidence]
        return NormalDist().inv_cdf(confidence)

    def calculate_altman_z_score(self, data: FinancialDataRecord) -> MetricResult:
        """Z = 1.2 WC/TA + 1.4 RE/TA + 3.3 EBIT/TA + 0.6 MVE/TL + 1.0 Sales/TA."""
        total_assets = self._field(data, 'total_assets')
        total_liabilities = self._field(data, 'total_liabilities')
        inputs = {
            'working_capital': self._working_capital(data),
            'retained_earnings': self._field(data, 'retained_earnings'),
            'ebit': self._field(data, 'ebit'),
            'market_value_equity': self._field(data, 'market_value_equity', 'market_cap'),
            'sales': self._field(data, 'revenue', 'sales'),
        }
        if any(v is None for v in inputs.values()) or not total_assets or not total_liabilities:
            return self._insufficient("Bankruptcy Prediction")
        terms = {
            'working_capital_to_assets': 1.2 * inputs['working_capital'] / total_assets,
            'retained_earnings_to_assets': 1.4 * inputs['retained_earnings'] / total_assets,
            'ebit_to_assets': 3.3 * inputs['ebit'] / total_assets,
            'market_equity_to_liabilities': 0.6 * inputs['market_value_equity'] / total_liabilities,
            'sales_to_assets': 1.0 * inputs['sales'] / total_assets,
        }
        components = {name: round_half_up(term, 4) for name, term in terms.items()}
        return self._result(sum(terms.values()), th.ALTMAN_Z, "Bankruptcy Prediction", components=components)

    def calculate_value_at_risk(self, data: FinancialDataRecord) -> MetricResult:
        returns = self._series(data, 'returns')
        if returns is None:
            return self._insufficient("Value at Risk")
        loss = abs(self._var_quantile(returns, self._confidence(data)))
        return self._result(loss, th.VALUE_AT_RISK, "Value at Risk", scale=100)

    def calculate_historical_var(self, data: FinancialDataRecord) -> MetricResult:
        returns = self._series(data, 'historical_returns')
        if returns is None:
            returns = self._series(data, 'returns')
        portfolio_value = self._field(data, 'portfolio_value')
        if returns is None or not portfolio_value:
            return self._insufficient("Value at Risk")
        loss_share = abs(self._var_quantile(returns, self._confidence(data)))
        return self._result(loss_share * portfolio_value, th.VALUE_AT_RISK, "Value at Risk", decimals=0,
                            basis=loss_share)

    def calculate_parametric_var(self, data: FinancialDataRecord) -> MetricResult:
        portfolio_value = self._field(data, 'portfolio_value')
        volatility = self._field(data, 'volatility')
        if not portfolio_value or volatility is None:
            return self._insufficient("Value at Risk")
        horizon = self._field(data, 'time_horizon')
        horizon = 1.0 if horizon is None else horizon
        if horizon <= 0 or volatility < 0:
            raise ValueError("time_horizon must be positive and volatility non-negative")
        z = self._z_score(self._confidence(data))
        loss = portfolio_value * volatility * math.sqrt(horizon) * z
        return self._result(loss, th.VALUE_AT_RISK, "Value at Risk", decimals=0,
                            basis=loss / portfolio_value, components={'z_score': round(z, 3)})

    def _simulated_returns(self, data: FinancialDataRecord) -> Optional[np.ndarray]:
        simulated = self._series(data, 'simulated_returns')
        if simulated is not None:
            return simulated
        mean = self._field(data, 'expected_return')
        volatility = self._field(data, 'volatility')
        if mean is None or volatility is None:
            return None
        if volatility < 0:
            raise ValueError("volatility must be non-negative")
        count = self._field(data, 'simulation_count')
        count = self.config.monte_carlo_simulations if count is None else int(count)
        seed = self._field(data, 'random_seed')
        seed = self.config.monte_carlo_seed if seed is None else int(seed)
        if count < 1:
            raise ValueError("simulation_count must be positive")
        rng = np.random.default_rng(seed)
        return rng.normal(mean, volatility, count)

    def calculate_monte_carlo_var(self, data: FinancialDataRecord) -> MetricResult:
        """Sort simulated returns and read the loss at (1 - confidence) x N."""
        simulated = self._simulated_returns(data)
        if simulated is None:
            return self._insufficient("Value at Risk")
        loss = abs(self._var_quantile(simulated, self._confidence(data)))
        components = {'simulations': int(len(simulated))}
        portfolio_value = self._field(data, 'portfolio_value')
        if portfolio_value:
            components['var_amount'] = round_half_up(loss * portfolio_value, 0)
        return self._result(loss, th.VALUE_AT_RISK, "Value at Risk", scale=100, components=components)

    def calculate_conditional_var(self, data: FinancialDataRecord) -> MetricResult:
        """Expected shortfall: mean of the returns at or beyond the VaR cut-off."""
        returns = self._series(data, 'returns')
        if returns is None:
            returns = self._simulated_returns(data)
        if returns is None:
            return self._insufficient("Value at Risk")
        ordered = np.sort(returns)
        tail = ordered[:self._tail_index(self._confidence(data), len(ordered)) + 1]
        loss = abs(float(np.mean(tail)))
        return self._result(loss, th.VALUE_AT_RISK, "Value at Risk", scale=100)

    def calculate_credit_var(self, data: FinancialDataRecord) -> MetricResult:
        """Expected loss + z x unexpected loss."""
        exposure = self._field(data, 'exposure')
        pd_ = self._field(data, 'probability_of_default')
        lgd = self._field(data, 'loss_given_default')
        if not exposure or pd_ is None or lgd is None:
            return self._insufficient("Credit Risk")
        if not 0 <= pd_ <= 1 or not 0 <= lgd <= 1:
            raise ValueError("probability_of_default and loss_given_default must be between 0 and 1")
        expected_loss = exposure * pd_ * lgd
        unexpected_loss = exposure * lgd * math.sqrt(pd_ * (1 - pd_))
        components = {
            'expected_loss': round_half_up(expected_loss, 0),
            'unexpected_loss': round_half_up(unexpected_loss, 0),
        }
        return self._result(expected_loss + self.CREDIT_VAR_Z * unexpected_loss, th.CREDIT_LOSS, "Credit Risk",
                            decimals=0, basis=expected_loss / exposure, components=components)

    def calculate_monte_carlo_risk(self, data: FinancialDataRecord) -> MetricResult:
        """Probability-weighted mean and dispersion of scenario outcomes."""
        scenarios = self._series(data, 'scenarios')
        probabilities = self._series(data, 'probabilities')
        if scenarios is None or probabilities is None:
            return self._insufficient("Scenario Analysis")
        if len(scenarios) != len(probabilities):
            raise ValueError(
                f"scenarios ({len(scenarios)}) and probabilities ({len(probabilities)}) must have the same length"
            )
        if np.any(probabilities < 0) or not math.isclose(float(probabilities.sum()), 1.0, abs_tol=1e-6):
            raise ValueError("probabilities must be non-negative and sum to 1")
        expected = float(np.dot(scenarios, probabilities))
        variance = float(np.dot(probabilities, (scenarios - expected) ** 2))
        std = math.sqrt(variance)
        return self._result(std, th.SCENARIO_VOLATILITY, "Scenario Analysis",
                            components={'expected_value': round_half_up(expected, 4)})
