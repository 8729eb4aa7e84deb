from typing import Optional

from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class ActivityCalculator(CalculatorBase):
    """Turnover and days-outstanding ratios.

    Turnover ratios prefer period averages (average_inventory,
    average_accounts_receivable, average_accounts_payable) and fall back to
    the closing balance when no average was supplied.
    """
    CATEGORY = "Activity"

    # --- raw building blocks, shared with the cash conversion cycle
    def inventory_turnover(self, data: FinancialDataRecord) -> Optional[float]:
        return safe_divide(self._field(data, 'cogs'), self._field(data, 'average_inventory', 'inventory'))

    def receivables_turnover(self, data: FinancialDataRecord) -> Optional[float]:
        return safe_divide(
            self._field(data, 'net_credit_sales', 'revenue'),
            self._field(data, 'average_accounts_receivable', 'accounts_receivable'),
        )

    def payables_turnover(self, data: FinancialDataRecord) -> Optional[float]:
        return safe_divide(
            self._field(data, 'cogs'),
            self._field(data, 'average_accounts_payable', 'accounts_payable'),
        )

    def days_sales_outstanding(self, data: FinancialDataRecord) -> Optional[float]:
        turnover = self._field(data, 'receivables_turnover')
        return safe_divide(self.DAYS_PER_YEAR, turnover if turnover is not None else self.receivables_turnover(data))

    def days_inventory_outstanding(self, data: FinancialDataRecord) -> Optional[float]:
        turnover = self._field(data, 'inventory_turnover')
        return safe_divide(self.DAYS_PER_YEAR, turnover if turnover is not None else self.inventory_turnover(data))

    def days_payable_outstanding(self, data: FinancialDataRecord) -> Optional[float]:
        turnover = self._field(data, 'payables_turnover')
        return safe_divide(self.DAYS_PER_YEAR, turnover if turnover is not None else self.payables_turnover(data))

    # --- metrics
    def calculate_asset_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'revenue', 'total_assets', th.ASSET_TURNOVER, "Turnover Ratios")

    def calculate_fixed_asset_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'revenue', 'net_fixed_assets', th.FIXED_ASSET_TURNOVER, "Turnover Ratios")

    def calculate_inventory_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.inventory_turnover(data), th.INVENTORY_TURNOVER, "Turnover Ratios", decimals=1)

    def calculate_receivables_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.receivables_turnover(data), th.RECEIVABLES_TURNOVER, "Turnover Ratios", decimals=1)

    def calculate_payables_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.payables_turnover(data), th.PAYABLES_TURNOVER, "Turnover Ratios", decimals=1)

    def calculate_working_capital_turnover(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._field(data, 'revenue'), self._working_capital(data))
        return self._result(value, th.WORKING_CAPITAL_TURNOVER, "Turnover Ratios")

    def calculate_current_asset_turnover(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'revenue', 'current_assets', th.CURRENT_ASSET_TURNOVER, "Turnover Ratios")

    def calculate_cash_turnover(self, data: FinancialDataRecord) -> MetricResult:
        cash = self._field(data, 'cash')
        if cash is None:
            return self._insufficient("Turnover Ratios")
        value = safe_divide(self._field(data, 'revenue'), cash + self._optional(data, 'cash_equivalents'))
        return self._result(value, th.CASH_TURNOVER, "Turnover Ratios")

    def calculate_investment_turnover(self, data: FinancialDataRecord) -> MetricResult:
        equity = self._field(data, 'total_equity')
        if equity is None:
            return self._insufficient("Turnover Ratios")
        value = safe_divide(self._field(data, 'revenue'), equity + self._optional(data, 'long_term_debt'))
        return self._result(value, th.INVESTMENT_TURNOVER, "Turnover Ratios")

    def calculate_days_sales_outstanding(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.days_sales_outstanding(data), th.DAYS_SALES_OUTSTANDING,
                            "Efficiency Ratios", decimals=0)

    def calculate_days_inventory_outstanding(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.days_inventory_outstanding(data), th.DAYS_INVENTORY_OUTSTANDING,
                            "Efficiency Ratios", decimals=0)

    def calculate_days_payable_outstanding(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self.days_payable_outstanding(data), th.DAYS_PAYABLE_OUTSTANDING,
                            "Efficiency Ratios", decimals=0)

    def calculate_revenue_per_employee(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'revenue', 'employee_count', th.CALCULATED, "Productivity", decimals=0)

    def calculate_profit_per_employee(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'net_income', 'employee_count', th.EARNINGS_SIGN, "Productivity", decimals=0)
