from typing import Optional

from finengine.core.config import CalculationConfig
from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.activity_calculator import ActivityCalculator
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class IntermediateCalculator(CalculatorBase):
    """Cash-flow decompositions, efficiency cycles, growth and operating leverage."""
    CATEGORY = "Intermediate"

    def __init__(self, config: Optional[CalculationConfig] = None):
        super().__init__(config)
        self._activity = ActivityCalculator(self.config)

    def calculate_fcfe(self, data: FinancialDataRecord) -> MetricResult:
        """FCFE = NI + D&A - capex - change in WC + net borrowing."""
        net_income = self._field(data, 'net_income')
        capex = self._field(data, 'capital_expenditures')
        if net_income is None or capex is None:
            return self._insufficient("Cash Flow Models")
        value = (net_income
                 + self._optional(data, 'depreciation')
                 - capex
                 - self._optional(data, 'change_in_working_capital')
                 + self._optional(data, 'net_borrowing'))
        return self._result(value, th.FREE_CASH_FLOW_TO_EQUITY, "Cash Flow Models", decimals=0)

    def calculate_fcff(self, data: FinancialDataRecord) -> MetricResult:
        """FCFF = EBIT(1 - t) + D&A - capex - change in WC."""
        ebit = self._field(data, 'ebit')
        tax_rate = self._field(data, 'tax_rate')
        capex = self._field(data, 'capital_expenditures')
        if ebit is None or tax_rate is None or capex is None:
            return self._insufficient("Cash Flow Models")
        value = (ebit * (1 - tax_rate)
                 + self._optional(data, 'depreciation')
                 - capex
                 - self._optional(data, 'change_in_working_capital'))
        return self._result(value, th.FREE_CASH_FLOW_TO_FIRM, "Cash Flow Models", decimals=0)

    def calculate_roic(self, data: FinancialDataRecord) -> MetricResult:
        nopat = self._field(data, 'nopat')
        if nopat is None:
            ebit = self._field(data, 'ebit')
            tax_rate = self._field(data, 'tax_rate')
            if ebit is not None and tax_rate is not None:
                nopat = ebit * (1 - tax_rate)
        value = safe_divide(nopat, self._field(data, 'invested_capital'))
        return self._result(value, th.ROIC_PERCENT, "Return Metrics", decimals=2, scale=100, classify_scaled=True)

    def calculate_cash_conversion_cycle(self, data: FinancialDataRecord) -> MetricResult:
        """DIO + DSO - DPO, in days."""
        dio = self._field(data, 'days_inventory_outstanding')
        dso = self._field(data, 'days_sales_outstanding')
        dpo = self._field(data, 'days_payable_outstanding')
        dio = dio if dio is not None else self._activity.days_inventory_outstanding(data)
        dso = dso if dso is not None else self._activity.days_sales_outstanding(data)
        dpo = dpo if dpo is not None else self._activity.days_payable_outstanding(data)
        if dio is None or dso is None or dpo is None:
            return self._insufficient("Efficiency Metrics")
        components = {'dio': round(dio, 1), 'dso': round(dso, 1), 'dpo': round(dpo, 1)}
        return self._result(dio + dso - dpo, th.CASH_CONVERSION_CYCLE, "Efficiency Metrics", decimals=0,
                            components=components)

    def calculate_asset_quality(self, data: FinancialDataRecord) -> MetricResult:
        total_assets = self._field(data, 'total_assets')
        if total_assets is None:
            return self._insufficient("Quality Metrics")
        tangible = total_assets - self._optional(data, 'intangible_assets')
        value = safe_divide(tangible, total_assets)
        return self._result(value, th.ASSET_QUALITY_PERCENT, "Quality Metrics", decimals=2, scale=100,
                            classify_scaled=True)

    def calculate_working_capital_efficiency(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._field(data, 'revenue'), self._working_capital(data))
        return self._result(value, th.WORKING_CAPITAL_EFFICIENCY, "Efficiency Metrics")

    def calculate_working_capital_ratio(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._working_capital(data), self._field(data, 'total_assets'))
        return self._result(value, th.WORKING_CAPITAL_TO_ASSETS, "Liquidity Metrics", decimals=1, scale=100)

    def calculate_cash_flow_to_debt(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'operating_cash_flow', 'total_debt', th.CASH_FLOW_TO_DEBT, "Coverage Metrics")

    def _growth(self, data: FinancialDataRecord, current: str, prior: str) -> MetricResult:
        current_value = self._field(data, current)
        prior_value = self._field(data, prior)
        if current_value is None or prior_value is None:
            return self._insufficient("Growth Metrics")
        value = safe_divide(current_value - prior_value, abs(prior_value))
        return self._result(value, th.GROWTH_RATE, "Growth Metrics", decimals=1, scale=100)

    def calculate_revenue_growth(self, data: FinancialDataRecord) -> MetricResult:
        return self._growth(data, 'revenue', 'prior_revenue')

    def calculate_earnings_growth(self, data: FinancialDataRecord) -> MetricResult:
        return self._growth(data, 'net_income', 'prior_net_income')

    def calculate_asset_growth(self, data: FinancialDataRecord) -> MetricResult:
        return self._growth(data, 'total_assets', 'prior_total_assets')

    def calculate_sustainable_growth(self, data: FinancialDataRecord) -> MetricResult:
        """ROE x retention (1 - payout)."""
        roe = self._field(data, 'return_on_equity')
        if roe is None:
            roe = safe_divide(self._field(data, 'net_income'), self._field(data, 'total_equity'))
        payout = self._field(data, 'dividend_payout_ratio')
        if payout is None:
            payout = safe_divide(self._field(data, 'dividends_paid'), self._field(data, 'net_income'))
        if roe is None or payout is None:
            return self._insufficient("Growth Metrics")
        return self._result(roe * (1 - payout), th.SUSTAINABLE_GROWTH, "Growth Metrics", decimals=1, scale=100)

    def calculate_internal_growth(self, data: FinancialDataRecord) -> MetricResult:
        """ROA x retention."""
        roa = self._field(data, 'return_on_assets')
        if roa is None:
            roa = safe_divide(self._field(data, 'net_income'), self._field(data, 'total_assets'))
        retention = self._field(data, 'retention_ratio')
        if retention is None:
            payout = safe_divide(self._field(data, 'dividends_paid'), self._field(data, 'net_income'))
            retention = None if payout is None else 1 - payout
        if roa is None or retention is None:
            return self._insufficient("Growth Metrics")
        return self._result(roa * retention, th.INTERNAL_GROWTH, "Growth Metrics", decimals=1, scale=100)

    def _contribution_margin(self, data: FinancialDataRecord) -> Optional[float]:
        revenue = self._field(data, 'revenue')
        variable_costs = self._field(data, 'variable_costs')
        if revenue is None or variable_costs is None:
            return None
        return revenue - variable_costs

    def _degree_of_operating_leverage(self, data: FinancialDataRecord) -> Optional[float]:
        return safe_divide(self._contribution_margin(data), self._field(data, 'operating_income', 'ebit'))

    def _degree_of_financial_leverage(self, data: FinancialDataRecord) -> Optional[float]:
        ebit = self._field(data, 'ebit')
        interest = self._field(data, 'interest_expense')
        if ebit is None or interest is None:
            return None
        return safe_divide(ebit, ebit - interest)

    def calculate_degree_of_operating_leverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._degree_of_operating_leverage(data), th.OPERATING_LEVERAGE, "Leverage Analysis")

    def calculate_degree_of_financial_leverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._degree_of_financial_leverage(data), th.FINANCIAL_LEVERAGE_DEGREE,
                            "Leverage Analysis")

    def calculate_combined_leverage(self, data: FinancialDataRecord) -> MetricResult:
        dol = self._degree_of_operating_leverage(data)
        dfl = self._degree_of_financial_leverage(data)
        if dol is None or dfl is None:
            return self._insufficient("Leverage Analysis")
        return self._result(dol * dfl, th.COMBINED_LEVERAGE, "Leverage Analysis",
                            components={'operating': round(dol, 4), 'financial': round(dfl, 4)})

    def _break_even_revenue(self, data: FinancialDataRecord) -> Optional[float]:
        contribution_ratio = safe_divide(self._contribution_margin(data), self._field(data, 'revenue'))
        return safe_divide(self._field(data, 'fixed_costs'), contribution_ratio)

    def calculate_break_even_point(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._break_even_revenue(data), th.CALCULATED, "Break-even Analysis", decimals=0)

    def calculate_margin_of_safety(self, data: FinancialDataRecord) -> MetricResult:
        revenue = self._field(data, 'revenue')
        break_even = self._break_even_revenue(data)
        if revenue is None or break_even is None:
            return self._insufficient("Break-even Analysis")
        value = safe_divide(revenue - break_even, revenue)
        return self._result(value, th.MARGIN_OF_SAFETY, "Break-even Analysis", decimals=1, scale=100)
