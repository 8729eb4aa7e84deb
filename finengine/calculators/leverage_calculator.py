from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class LeverageCalculator(CalculatorBase):
    """Capital structure and debt coverage ratios.

    Debt, equity and capitalization ratios are reported as percentages but
    classified on the underlying fraction.
    """
    CATEGORY = "Leverage"

    def calculate_debt_to_equity(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'total_debt', 'total_equity', th.DEBT_TO_EQUITY, "Basic Ratios")

    def calculate_debt_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'total_debt', 'total_assets', th.DEBT_RATIO, "Basic Ratios", decimals=1, scale=100)

    def calculate_equity_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'total_equity', 'total_assets', th.EQUITY_RATIO, "Basic Ratios", decimals=1, scale=100)

    def calculate_interest_coverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'ebit', 'interest_expense', th.INTEREST_COVERAGE, "Coverage Ratios", decimals=1)

    def calculate_long_term_debt_to_equity(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'long_term_debt', 'total_equity', th.LONG_TERM_DEBT_TO_EQUITY, "Capital Structure")

    def calculate_debt_to_capital(self, data: FinancialDataRecord) -> MetricResult:
        debt = self._field(data, 'total_debt')
        equity = self._field(data, 'total_equity')
        if debt is None or equity is None:
            return self._insufficient("Capital Structure")
        value = safe_divide(debt, debt + equity)
        return self._result(value, th.CAPITALIZATION, "Capital Structure", decimals=1, scale=100)

    def calculate_total_capitalization(self, data: FinancialDataRecord) -> MetricResult:
        long_term_debt = self._field(data, 'long_term_debt')
        equity = self._field(data, 'total_equity')
        if long_term_debt is None or equity is None:
            return self._insufficient("Capital Structure")
        value = safe_divide(long_term_debt, long_term_debt + equity)
        return self._result(value, th.CAPITALIZATION, "Capital Structure", decimals=1, scale=100)

    def calculate_fixed_charge_coverage(self, data: FinancialDataRecord) -> MetricResult:
        ebit = self._field(data, 'ebit')
        interest = self._field(data, 'interest_expense')
        if ebit is None or interest is None:
            return self._insufficient("Coverage Ratios")
        leases = self._optional(data, 'lease_payments')
        value = safe_divide(ebit + leases, interest + leases)
        return self._result(value, th.FIXED_CHARGE_COVERAGE, "Coverage Ratios")

    def calculate_debt_service_coverage(self, data: FinancialDataRecord) -> MetricResult:
        operating_income = self._field(data, 'operating_income')
        principal = self._field(data, 'principal_payments')
        interest = self._field(data, 'interest_payments', 'interest_expense')
        if operating_income is None or (principal is None and interest is None):
            return self._insufficient("Coverage Ratios")
        value = safe_divide(operating_income, (principal or 0.0) + (interest or 0.0))
        return self._result(value, th.DEBT_SERVICE_COVERAGE, "Coverage Ratios")

    def calculate_equity_multiplier(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'total_assets', 'total_equity', th.EQUITY_MULTIPLIER, "Capital Structure")

    def calculate_debt_to_ebitda(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._field(data, 'total_debt'), self._ebitda(data))
        return self._result(value, th.DEBT_TO_EBITDA, "Coverage Ratios")

    def calculate_long_term_debt_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'long_term_debt', 'total_assets', th.LONG_TERM_DEBT_RATIO, "Capital Structure",
                           decimals=1, scale=100)

    def calculate_short_term_debt_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'short_term_debt', 'total_debt', th.SHORT_TERM_DEBT_SHARE, "Capital Structure",
                           decimals=1, scale=100)
