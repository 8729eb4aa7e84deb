from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide, round_half_up


class ProfitabilityCalculator(CalculatorBase):
    """Margins and returns. Values are percentages, classified on the fraction."""
    CATEGORY = "Profitability"

    def _margin(self, data: FinancialDataRecord, numerator, denominator: str, table, subcategory: str) -> MetricResult:
        if isinstance(numerator, str):
            numerator = self._field(data, numerator)
        value = safe_divide(numerator, self._field(data, denominator))
        return self._result(value, table, subcategory, decimals=1, scale=100)

    def calculate_gross_profit_margin(self, data: FinancialDataRecord) -> MetricResult:
        gross_profit = self._field(data, 'gross_profit')
        if gross_profit is None:
            revenue = self._field(data, 'revenue')
            cogs = self._field(data, 'cogs')
            gross_profit = None if revenue is None or cogs is None else revenue - cogs
        return self._margin(data, gross_profit, 'revenue', th.GROSS_MARGIN, "Margins")

    def calculate_operating_profit_margin(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'operating_income', 'revenue', th.OPERATING_MARGIN, "Margins")

    def calculate_net_profit_margin(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'net_income', 'revenue', th.NET_MARGIN, "Margins")

    def calculate_pretax_profit_margin(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, self._field(data, 'pretax_income', 'ebt'), 'revenue',
                            th.OPERATING_MARGIN, "Margins")

    def calculate_return_on_assets(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'net_income', 'total_assets', th.RETURN_ON_ASSETS, "Returns")

    def calculate_return_on_equity(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'net_income', 'total_equity', th.RETURN_ON_EQUITY, "Returns")

    def calculate_operating_return_on_assets(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'operating_income', 'total_assets', th.OPERATING_RETURN_ON_ASSETS, "Returns")

    def calculate_ebitda(self, data: FinancialDataRecord) -> MetricResult:
        """Net income + interest + taxes + depreciation + amortization."""
        return self._result(self._ebitda(data), th.SIGN, "Earnings", decimals=0)

    def calculate_ebitda_margin(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, self._ebitda(data), 'revenue', th.EBITDA_MARGIN, "Margins")

    def calculate_ebiat(self, data: FinancialDataRecord) -> MetricResult:
        ebit = self._field(data, 'ebit')
        tax_rate = self._field(data, 'tax_rate')
        if ebit is None or tax_rate is None:
            return self._insufficient("Earnings")
        return self._result(ebit * (1 - tax_rate), th.SIGN, "Earnings", decimals=0)

    def calculate_operating_cash_flow_margin(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'operating_cash_flow', 'revenue', th.OPERATING_MARGIN, "Cash Returns")

    def calculate_cash_return_on_assets(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'operating_cash_flow', 'total_assets', th.OPERATING_RETURN_ON_ASSETS,
                            "Cash Returns")

    def calculate_net_profit_margin_after_tax(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        tax_rate = self._field(data, 'tax_rate')
        if net_income is None or tax_rate is None:
            return self._insufficient("Margins")
        return self._margin(data, net_income * (1 - tax_rate), 'revenue', th.NET_MARGIN_AFTER_TAX, "Margins")

    def calculate_return_on_sales(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'ebit', 'revenue', th.OPERATING_MARGIN, "Margins")

    def calculate_return_on_total_capital(self, data: FinancialDataRecord) -> MetricResult:
        debt = self._field(data, 'total_debt')
        equity = self._field(data, 'total_equity')
        if debt is None or equity is None:
            return self._insufficient("Returns")
        value = safe_divide(self._field(data, 'ebit'), debt + equity)
        return self._result(value, th.RETURN_ON_ASSETS, "Returns", decimals=1, scale=100)

    def calculate_return_on_common_equity(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        if net_income is None:
            return self._insufficient("Returns")
        common_equity = self._field(data, 'common_equity')
        if common_equity is None:
            total_equity = self._field(data, 'total_equity')
            if total_equity is not None:
                common_equity = total_equity - self._optional(data, 'preferred_equity')
        value = safe_divide(net_income - self._optional(data, 'preferred_dividends'), common_equity)
        return self._result(value, th.RETURN_ON_EQUITY, "Returns", decimals=1, scale=100)

    def calculate_basic_earning_power(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'ebit', 'total_assets', th.RETURN_ON_ASSETS, "Returns")

    def calculate_operating_efficiency(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'operating_expenses', 'revenue', th.OPERATING_EXPENSE_RATIO, "Cost Structure")

    def calculate_cogs_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'cogs', 'revenue', th.COGS_RATIO, "Cost Structure")

    def calculate_selling_expense_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'selling_expenses', 'revenue', th.SELLING_EXPENSE_RATIO, "Cost Structure")

    def calculate_administrative_expense_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'administrative_expenses', 'revenue', th.ADMINISTRATIVE_EXPENSE_RATIO,
                            "Cost Structure")

    def calculate_interest_expense_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'interest_expense', 'revenue', th.INTEREST_EXPENSE_RATIO, "Cost Structure")

    def calculate_tax_efficiency(self, data: FinancialDataRecord) -> MetricResult:
        return self._margin(data, 'net_income', self._pretax_field(data), th.TAX_EFFICIENCY, "Cost Structure")

    def calculate_dupont_roe(self, data: FinancialDataRecord) -> MetricResult:
        """Three-step DuPont: profit margin x asset turnover x equity multiplier."""
        profit_margin = safe_divide(self._field(data, 'net_income'), self._field(data, 'revenue'))
        asset_turnover = safe_divide(self._field(data, 'revenue'), self._field(data, 'total_assets'))
        equity_multiplier = safe_divide(self._field(data, 'total_assets'), self._field(data, 'total_equity'))
        if profit_margin is None or asset_turnover is None or equity_multiplier is None:
            return self._insufficient("DuPont Analysis")
        components = {
            'profit_margin': round_half_up(profit_margin, 4),
            'asset_turnover': round_half_up(asset_turnover, 4),
            'equity_multiplier': round_half_up(equity_multiplier, 4),
        }
        value = profit_margin * asset_turnover * equity_multiplier
        return self._result(value, th.RETURN_ON_EQUITY, "DuPont Analysis", decimals=2, scale=100,
                            components=components)

    def _pretax_field(self, data: FinancialDataRecord) -> str:
        return 'pretax_income' if data.has('pretax_income') else 'ebt'
