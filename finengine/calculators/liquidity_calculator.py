from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class LiquidityCalculator(CalculatorBase):
    """Short-term solvency ratios."""
    CATEGORY = "Liquidity"

    def calculate_current_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'current_assets', 'current_liabilities', th.CURRENT_RATIO, "Basic Ratios")

    def calculate_quick_ratio(self, data: FinancialDataRecord) -> MetricResult:
        """(Current assets - inventory) / current liabilities. Missing inventory counts as zero."""
        current_assets = self._field(data, 'current_assets')
        if current_assets is None:
            return self._insufficient("Basic Ratios")
        quick_assets = current_assets - self._optional(data, 'inventory')
        value = safe_divide(quick_assets, self._field(data, 'current_liabilities'))
        return self._result(value, th.QUICK_RATIO, "Basic Ratios")

    def calculate_cash_ratio(self, data: FinancialDataRecord) -> MetricResult:
        cash = self._field(data, 'cash')
        equivalents = self._field(data, 'cash_equivalents')
        if cash is None and equivalents is None:
            return self._insufficient("Basic Ratios")
        value = safe_divide((cash or 0.0) + (equivalents or 0.0), self._field(data, 'current_liabilities'))
        return self._result(value, th.CASH_RATIO, "Basic Ratios")

    def calculate_working_capital(self, data: FinancialDataRecord) -> MetricResult:
        current_assets = self._field(data, 'current_assets')
        current_liabilities = self._field(data, 'current_liabilities')
        if current_assets is None or current_liabilities is None:
            return self._insufficient("Basic Ratios")
        return self._result(current_assets - current_liabilities, th.WORKING_CAPITAL, "Basic Ratios", decimals=0)

    def calculate_net_working_capital_ratio(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._working_capital(data), self._field(data, 'total_assets'))
        return self._result(value, th.NET_WORKING_CAPITAL_TO_ASSETS, "Working Capital", decimals=1, scale=100)

    def calculate_operating_cash_flow_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'operating_cash_flow', 'current_liabilities',
                           th.OPERATING_CASH_FLOW_RATIO, "Cash Flow Ratios")

    def calculate_defensive_interval(self, data: FinancialDataRecord) -> MetricResult:
        """Days the company can operate on liquid assets alone."""
        liquid_fields = ('cash', 'cash_equivalents', 'marketable_securities', 'accounts_receivable')
        present = [self._field(data, name) for name in liquid_fields]
        if all(v is None for v in present):
            return self._insufficient("Advanced Liquidity")
        daily_expenses = safe_divide(self._field(data, 'operating_expenses'), self.DAYS_PER_YEAR)
        value = safe_divide(sum(v for v in present if v is not None), daily_expenses)
        return self._result(value, th.DEFENSIVE_INTERVAL_DAYS, "Advanced Liquidity", decimals=0)

    def calculate_cash_coverage(self, data: FinancialDataRecord) -> MetricResult:
        ebit = self._field(data, 'ebit')
        if ebit is None:
            return self._insufficient("Advanced Liquidity")
        value = safe_divide(ebit + self._optional(data, 'depreciation'), self._field(data, 'interest_expense'))
        return self._result(value, th.INTEREST_COVERAGE, "Advanced Liquidity")

    def calculate_days_cash_on_hand(self, data: FinancialDataRecord) -> MetricResult:
        cash = self._field(data, 'cash')
        if cash is None:
            return self._insufficient("Advanced Liquidity")
        operating_expenses = self._field(data, 'operating_expenses')
        if operating_expenses is None:
            return self._insufficient("Advanced Liquidity")
        cash_expenses = operating_expenses - self._optional(data, 'depreciation')
        daily = safe_divide(cash_expenses, self.DAYS_PER_YEAR)
        value = safe_divide(cash + self._optional(data, 'cash_equivalents'), daily)
        return self._result(value, th.DAYS_CASH_ON_HAND, "Advanced Liquidity", decimals=0)

