"""Sector-specific ratios for banks and insurers."""
from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class BankingCalculator(CalculatorBase):
    CATEGORY = "Banking"

    def calculate_loan_to_deposit(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'total_loans', 'total_deposits', th.LOAN_TO_DEPOSIT, "Banking Ratios",
                           decimals=1, scale=100)

    def calculate_non_performing_loans(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'non_performing_loans', 'total_loans', th.NON_PERFORMING_LOANS, "Banking Ratios",
                           decimals=2, scale=100)

    def calculate_capital_adequacy(self, data: FinancialDataRecord) -> MetricResult:
        capital = self._field(data, 'tier1_capital')
        if capital is None:
            return self._insufficient("Banking Ratios")
        value = safe_divide(capital + self._optional(data, 'tier2_capital'), self._field(data, 'risk_weighted_assets'))
        return self._result(value, th.CAPITAL_ADEQUACY, "Banking Ratios", decimals=1, scale=100)


class InsuranceCalculator(CalculatorBase):
    CATEGORY = "Insurance"

    def calculate_combined_ratio(self, data: FinancialDataRecord) -> MetricResult:
        """(Claims + operating expenses) / premiums, classified on the percentage."""
        claims = self._field(data, 'claims_paid')
        if claims is None:
            return self._insufficient("Insurance Ratios")
        value = safe_divide(claims + self._optional(data, 'operating_expenses'), self._field(data, 'premiums_earned'))
        return self._result(value, th.COMBINED_RATIO_PERCENT, "Insurance Ratios", decimals=1, scale=100,
                            classify_scaled=True)

    def calculate_loss_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'claims_paid', 'premiums_earned', th.LOSS_RATIO, "Insurance Ratios",
                           decimals=1, scale=100)

    def calculate_expense_ratio(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'underwriting_expenses', 'premiums_earned', th.EXPENSE_RATIO, "Insurance Ratios",
                           decimals=1, scale=100)
