from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, safe_divide, round_half_up


class ValuationCalculator(CalculatorBase):
    """Cost of capital, intrinsic value and value-creation models."""
    CATEGORY = "Advanced"

    # Blume adjustment toward the market beta of 1.0
    BETA_WEIGHT = 0.67
    MARKET_BETA_WEIGHT = 0.33

    def calculate_capm(self, data: FinancialDataRecord) -> MetricResult:
        """Required return = rf + beta x (rm - rf)."""
        risk_free = self._field(data, 'risk_free_rate')
        beta = self._field(data, 'beta')
        market_return = self._field(data, 'market_return')
        if risk_free is None or beta is None or market_return is None:
            return self._insufficient("Risk Models")
        required = risk_free + beta * (market_return - risk_free)
        return self._result(required, th.CAPM_RETURN, "Risk Models", scale=100)

    def calculate_adjusted_beta(self, data: FinancialDataRecord) -> MetricResult:
        raw_beta = self._field(data, 'raw_beta', 'beta')
        if raw_beta is None:
            return self._insufficient("Risk Models")
        adjusted = self.BETA_WEIGHT * raw_beta + self.MARKET_BETA_WEIGHT * 1.0
        return self._result(adjusted, th.ADJUSTED_BETA, "Risk Models", decimals=3)

    def calculate_dcf(self, data: FinancialDataRecord) -> MetricResult:
        """PV of projected cash flows plus a Gordon-growth terminal value.

        ``years`` defaults to the number of projected cash flows; periods
        beyond the projection contribute nothing.
        """
        cash_flows = self._series(data, 'cash_flows')
        discount_rate = self._field(data, 'discount_rate')
        growth = self._field(data, 'terminal_growth_rate')
        if cash_flows is None or discount_rate is None or growth is None:
            return self._insufficient("Valuation Models")
        if discount_rate <= growth:
            raise ValueError(
                f"discount_rate ({discount_rate}) must exceed terminal_growth_rate ({growth})"
            )
        if discount_rate <= -1:
            raise ValueError("discount_rate must be greater than -100%")
        years = self._field(data, 'years')
        years = len(cash_flows) if years is None else int(years)
        if years < 1:
            raise ValueError("years must be at least 1")

        pv_cash_flows = 0.0
        for period in range(1, years + 1):
            cash_flow = cash_flows[period - 1] if period <= len(cash_flows) else 0.0
            pv_cash_flows += cash_flow / (1 + discount_rate) ** period
        terminal_value = cash_flows[-1] * (1 + growth) / (discount_rate - growth)
        pv_terminal = terminal_value / (1 + discount_rate) ** years
        components = {
            'pv_cash_flows': round_half_up(pv_cash_flows, 0),
            'terminal_value': round_half_up(terminal_value, 0),
            'pv_terminal_value': round_half_up(pv_terminal, 0),
        }
        return self._result(pv_cash_flows + pv_terminal, th.VALUATION_SIGN, "Valuation Models", decimals=0,
                            components=components)

    def calculate_dividend_discount(self, data: FinancialDataRecord) -> MetricResult:
        """Gordon growth: D1 / (r - g)."""
        required_return = self._field(data, 'required_return', 'cost_of_equity')
        growth = self._field(data, 'dividend_growth_rate', 'growth_rate')
        if required_return is None or growth is None:
            return self._insufficient("Valuation Models")
        next_dividend = self._field(data, 'expected_dividend')
        if next_dividend is None:
            current = self._field(data, 'dividends_per_share')
            if current is None:
                return self._insufficient("Valuation Models")
            next_dividend = current * (1 + growth)
        if required_return <= growth:
            raise ValueError(f"required_return ({required_return}) must exceed growth rate ({growth})")
        value = next_dividend / (required_return - growth)
        return self._result(value, th.VALUATION_SIGN, "Valuation Models")

    def calculate_wacc(self, data: FinancialDataRecord) -> MetricResult:
        cost_of_equity = self._field(data, 'cost_of_equity')
        cost_of_debt = self._field(data, 'cost_of_debt')
        if cost_of_equity is None or cost_of_debt is None:
            return self._insufficient("Cost of Capital")
        equity_weight = self._field(data, 'equity_weight')
        debt_weight = self._field(data, 'debt_weight')
        if equity_weight is None or debt_weight is None:
            equity = self._field(data, 'market_value_equity', 'total_equity')
            debt = self._field(data, 'total_debt')
            if equity is None or debt is None:
                return self._insufficient("Cost of Capital")
            equity_weight = safe_divide(equity, equity + debt)
            debt_weight = safe_divide(debt, equity + debt)
            if equity_weight is None:
                return self._insufficient("Cost of Capital")
        tax_rate = self._optional(data, 'tax_rate')
        wacc = equity_weight * cost_of_equity + debt_weight * cost_of_debt * (1 - tax_rate)
        components = {'equity_weight': round_half_up(equity_weight, 4), 'debt_weight': round_half_up(debt_weight, 4)}
        return self._result(wacc, th.WACC, "Cost of Capital", scale=100, components=components)

    def calculate_eva(self, data: FinancialDataRecord) -> MetricResult:
        """NOPAT - invested capital x WACC."""
        nopat = self._field(data, 'nopat')
        invested_capital = self._field(data, 'invested_capital')
        wacc = self._field(data, 'wacc')
        if nopat is None or invested_capital is None or wacc is None:
            return self._insufficient("Value Creation")
        return self._result(nopat - invested_capital * wacc, th.VALUE_CREATION, "Value Creation", decimals=0)

    def calculate_mva(self, data: FinancialDataRecord) -> MetricResult:
        market_value = self._field(data, 'market_value', 'market_value_equity')
        invested_capital = self._field(data, 'invested_capital')
        if market_value is None or invested_capital is None:
            return self._insufficient("Value Creation")
        return self._result(market_value - invested_capital, th.VALUE_CREATION, "Value Creation", decimals=0)

    def calculate_residual_income(self, data: FinancialDataRecord) -> MetricResult:
        net_income = self._field(data, 'net_income')
        cost_of_equity = self._field(data, 'cost_of_equity')
        equity = self._field(data, 'total_equity')
        if net_income is None or cost_of_equity is None or equity is None:
            return self._insufficient("Value Creation")
        return self._result(net_income - cost_of_equity * equity, th.VALUE_CREATION, "Value Creation", decimals=0)

    def calculate_total_shareholder_return(self, data: FinancialDataRecord) -> MetricResult:
        beginning = self._field(data, 'beginning_price')
        ending = self._field(data, 'ending_price', 'market_price_per_share')
        if beginning is None or ending is None:
            return self._insufficient("Value Creation")
        value = safe_divide(ending - beginning + self._optional(data, 'dividends_per_share'), beginning)
        return self._result(value, th.SHAREHOLDER_RETURN, "Value Creation", scale=100)
