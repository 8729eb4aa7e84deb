from typing import Optional

from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide


class MarketCalculator(CalculatorBase):
    """Valuation multiples and per-share figures."""
    CATEGORY = "Market"

    def _eps(self, data: FinancialDataRecord) -> Optional[float]:
        reported = self._field(data, 'earnings_per_share')
        if reported is not None:
            return reported
        return safe_divide(self._field(data, 'net_income'), self._field(data, 'shares_outstanding'))

    def _book_value_per_share(self, data: FinancialDataRecord) -> Optional[float]:
        reported = self._field(data, 'book_value_per_share')
        if reported is not None:
            return reported
        return safe_divide(self._field(data, 'total_equity'), self._field(data, 'shares_outstanding'))

    def _market_cap(self, data: FinancialDataRecord) -> Optional[float]:
        reported = self._field(data, 'market_value_equity', 'market_cap')
        if reported is not None:
            return reported
        price = self._field(data, 'market_price_per_share')
        shares = self._field(data, 'shares_outstanding')
        if price is None or shares is None:
            return None
        return price * shares

    def calculate_price_to_earnings(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._field(data, 'market_price_per_share'), self._eps(data))
        return self._result(value, th.PRICE_TO_EARNINGS, "Valuation Ratios", decimals=1)

    def calculate_price_to_book(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._field(data, 'market_price_per_share'), self._book_value_per_share(data))
        return self._result(value, th.PRICE_TO_BOOK, "Valuation Ratios")

    def calculate_market_to_book(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._market_cap(data), self._field(data, 'total_equity'))
        return self._result(value, th.PRICE_TO_BOOK, "Valuation Ratios")

    def calculate_price_to_sales(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._market_cap(data), self._field(data, 'revenue'))
        return self._result(value, th.PRICE_TO_SALES, "Valuation Ratios")

    def calculate_price_to_cash_flow(self, data: FinancialDataRecord) -> MetricResult:
        value = safe_divide(self._market_cap(data), self._field(data, 'operating_cash_flow'))
        return self._result(value, th.PRICE_TO_CASH_FLOW, "Valuation Ratios")

    def calculate_ev_to_ebitda(self, data: FinancialDataRecord) -> MetricResult:
        enterprise_value = self._field(data, 'enterprise_value')
        if enterprise_value is None:
            market_cap = self._market_cap(data)
            debt = self._field(data, 'total_debt')
            if market_cap is None or debt is None:
                return self._insufficient("Valuation Ratios")
            enterprise_value = market_cap + debt - self._optional(data, 'cash')
        value = safe_divide(enterprise_value, self._ebitda(data))
        return self._result(value, th.EV_TO_EBITDA, "Valuation Ratios")

    def calculate_dividend_yield(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'dividends_per_share', 'market_price_per_share', th.DIVIDEND_YIELD,
                           "Dividend Ratios", decimals=2, scale=100)

    def calculate_dividend_payout(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'dividends_paid', 'net_income', th.DIVIDEND_PAYOUT,
                           "Dividend Ratios", decimals=1, scale=100)

    def calculate_dividend_coverage(self, data: FinancialDataRecord) -> MetricResult:
        return self._ratio(data, 'net_income', 'dividends_paid', th.DIVIDEND_COVERAGE, "Dividend Ratios")

    def calculate_retention_ratio(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        dividends = self._field(data, 'dividends_paid')
        if net_income is None or dividends is None:
            return self._insufficient("Dividend Ratios")
        value = safe_divide(net_income - dividends, net_income)
        return self._result(value, th.RETENTION, "Dividend Ratios", decimals=1, scale=100)

    def calculate_book_value_per_share(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._book_value_per_share(data), th.CALCULATED, "Per Share")

    def calculate_earnings_per_share(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._eps(data), th.EARNINGS_SIGN, "Per Share")

    def calculate_diluted_eps(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        if net_income is None:
            return self._insufficient("Per Share")
        value = safe_divide(net_income - self._optional(data, 'preferred_dividends'),
                            self._field(data, 'diluted_shares_outstanding'))
        return self._result(value, th.EARNINGS_SIGN, "Per Share")

    def calculate_free_cash_flow_yield(self, data: FinancialDataRecord) -> MetricResult:
        free_cash_flow = self._field(data, 'free_cash_flow')
        if free_cash_flow is None:
            ocf = self._field(data, 'operating_cash_flow')
            capex = self._field(data, 'capital_expenditures')
            free_cash_flow = None if ocf is None or capex is None else ocf - capex
        value = safe_divide(free_cash_flow, self._market_cap(data))
        return self._result(value, th.FREE_CASH_FLOW_YIELD, "Valuation Ratios", decimals=2, scale=100)
