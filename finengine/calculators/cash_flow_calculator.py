from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class CashFlowCalculator(CalculatorBase):
    CATEGORY = "Cash Flow"

    def calculate_free_cash_flow(self, data: FinancialDataRecord) -> MetricResult:
        ocf = self._field(data, 'operating_cash_flow')
        capex = self._field(data, 'capital_expenditures')
        if ocf is None or capex is None:
            return self._insufficient("Cash Flow Analysis")
        return self._result(ocf - capex, th.SIGN, "Cash Flow Analysis", decimals=0)

    def calculate_capex_coverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'operating_cash_flow', 'capital_expenditures', th.CAPEX_COVERAGE,
                           "Cash Flow Analysis")

    def calculate_quality_of_earnings(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'operating_cash_flow', 'net_income', th.EARNINGS_QUALITY, "Earnings Quality")

    def calculate_accruals_ratio(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        ocf = self._field(data, 'operating_cash_flow')
        if net_income is None or ocf is None:
            return self._insufficient("Earnings Quality")
        value = safe_divide(net_income - ocf, self._field(data, 'total_assets'))
        return self._result(value, th.ACCRUALS, "Earnings Quality", decimals=1, scale=100)

    def calculate_cash_dividend_coverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'operating_cash_flow', 'dividends_paid', th.DIVIDEND_COVERAGE,
                           "Cash Flow Analysis")
