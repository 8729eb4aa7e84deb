import math
import numpy as np
from typing import Optional, Tuple

from finengine.core.types import FinancialDataRecord, MetricResult
from finengine.calculators import thresholds as th
from finengine.calculators.calculator_base import CalculatorBase, round_half_up


def normal_cdf(x: float) -> float:
    """Closed-form approximation of the standard normal CDF."""
    return 0.5 * (1 + math.copysign(1.0, x) * math.sqrt(1 - math.exp(-2 * x ** 2 / math.pi)))


class DerivativesCalculator(CalculatorBase):
    """Bond sensitivity measures and option pricing models."""
    CATEGORY = "Advanced"

    YTM_TOLERANCE = 1e-10
    YTM_MAX_ITERATIONS = 200
    YTM_BRACKET = (-0.99, 10.0)

    # --- fixed income
    def _bond_cash_flows(self, data: FinancialDataRecord) -> Optional[np.ndarray]:
        flows = self._series(data, 'bond_cash_flows')
        return flows if flows is not None else self._series(data, 'cash_flows')

    def _discounted(self, flows: np.ndarray, ytm: float) -> Tuple[np.ndarray, np.ndarray]:
        if ytm <= -1:
            raise ValueError("yield_to_maturity must be greater than -100%")
        periods = np.arange(1, len(flows) + 1, dtype=float)
        return periods, flows / (1 + ytm) ** periods

    def _macaulay(self, data: FinancialDataRecord) -> Optional[float]:
        flows = self._bond_cash_flows(data)
        ytm = self._field(data, 'yield_to_maturity')
        if flows is None or ytm is None:
            return None
        periods, present_values = self._discounted(flows, ytm)
        price = present_values.sum()
        if price == 0:
            return None
        return float((periods * present_values).sum() / price)

    def calculate_macaulay_duration(self, data: FinancialDataRecord) -> MetricResult:
        return self._result(self._macaulay(data), th.MACAULAY_DURATION, "Fixed Income")

    def calculate_modified_duration(self, data: FinancialDataRecord) -> MetricResult:
        """Macaulay duration / (1 + YTM)."""
        ytm = self._field(data, 'yield_to_maturity')
        if ytm is None:
            return self._insufficient("Fixed Income")
        if ytm <= -1:
            raise ValueError("yield_to_maturity must be greater than -100%")
        duration = self._field(data, 'duration')
        if duration is None:
            duration = self._macaulay(data)
        if duration is None:
            return self._insufficient("Fixed Income")
        return self._result(duration / (1 + ytm), th.MODIFIED_DURATION, "Fixed Income")

    def calculate_convexity(self, data: FinancialDataRecord) -> MetricResult:
        flows = self._bond_cash_flows(data)
        ytm = self._field(data, 'yield_to_maturity')
        if flows is None or ytm is None:
            return self._insufficient("Fixed Income")
        periods, present_values = self._discounted(flows, ytm)
        price = self._field(data, 'bond_price')
        price = float(present_values.sum()) if price is None else price
        if not price:
            return self._insufficient("Fixed Income")
        convexity = float((periods * (periods + 1) * present_values).sum() / (1 + ytm) ** 2 / price)
        return self._result(convexity, th.CONVEXITY, "Fixed Income")

    def calculate_current_yield(self, data: FinancialDataRecord) -> MetricResult:
        coupon = self._field(data, 'annual_coupon')
        if coupon is None:
            rate = self._field(data, 'coupon_rate')
            face = self._field(data, 'face_value')
            coupon = None if rate is None or face is None else rate * face
        price = self._field(data, 'bond_price')
        if coupon is None or not price:
            return self._insufficient("Fixed Income")
        return self._result(coupon / price, th.BOND_YIELD, "Fixed Income", scale=100)

    def _bond_price(self, ytm: float, face: float, coupon: float, periods: int, frequency: int) -> float:
        rate = ytm / frequency
        times = np.arange(1, periods + 1, dtype=float)
        return float((coupon / (1 + rate) ** times).sum() + face / (1 + rate) ** periods)

    def calculate_yield_to_maturity(self, data: FinancialDataRecord) -> MetricResult:
        """Annual yield that prices the bond at bond_price, solved by bisection."""
        price = self._field(data, 'bond_price')
        face = self._field(data, 'face_value')
        coupon_rate = self._field(data, 'coupon_rate')
        years = self._field(data, 'years_to_maturity')
        if price is None or face is None or coupon_rate is None or years is None:
            return self._insufficient("Fixed Income")
        frequency = int(self._field(data, 'payments_per_year') or 1)
        periods = int(round(years * frequency))
        if price <= 0 or periods < 1 or frequency < 1:
            raise ValueError("bond_price, years_to_maturity and payments_per_year must be positive")
        coupon = face * coupon_rate / frequency

        low, high = self.YTM_BRACKET
        f_low = self._bond_price(low, face, coupon, periods, frequency) - price
        f_high = self._bond_price(high, face, coupon, periods, frequency) - price
        if f_low * f_high > 0:
            raise ValueError("bond_price is outside the range of solvable yields")
        mid = (low + high) / 2
        for _ in range(self.YTM_MAX_ITERATIONS):
            mid = (low + high) / 2
            f_mid = self._bond_price(mid, face, coupon, periods, frequency) - price
            if abs(f_mid) < self.YTM_TOLERANCE:
                break
            # Price falls as yield rises
            if f_mid > 0:
                low = mid
            else:
                high = mid
        return self._result(mid, th.BOND_YIELD, "Fixed Income", scale=100)

    # --- options
    def _option_inputs(self, data: FinancialDataRecord):
        values = {
            'stock_price': self._field(data, 'stock_price'),
            'strike_price': self._field(data, 'strike_price'),
            'time_to_expiry': self._field(data, 'time_to_expiry'),
            'risk_free_rate': self._field(data, 'risk_free_rate'),
            'volatility': self._field(data, 'volatility'),
        }
        if any(v is None for v in values.values()):
            return None
        if values['time_to_expiry'] <= 0:
            raise ValueError(f"time_to_expiry must be positive, got {values['time_to_expiry']}")
        if values['volatility'] <= 0:
            raise ValueError(f"volatility must be positive, got {values['volatility']}")
        if values['stock_price'] <= 0 or values['strike_price'] <= 0:
            raise ValueError("stock_price and strike_price must be positive")
        option_type = self._text(data, 'option_type', 'call')
        if option_type not in ('call', 'put'):
            raise ValueError(f"option_type must be 'call' or 'put', got '{option_type}'")
        values['option_type'] = option_type
        return values

    def _moneyness(self, inputs) -> float:
        if inputs['option_type'] == 'call':
            return inputs['stock_price'] / inputs['strike_price']
        return inputs['strike_price'] / inputs['stock_price']

    def calculate_black_scholes(self, data: FinancialDataRecord) -> MetricResult:
        inputs = self._option_inputs(data)
        if inputs is None:
            return self._insufficient("Option Pricing")
        s, k = inputs['stock_price'], inputs['strike_price']
        t, r, sigma = inputs['time_to_expiry'], inputs['risk_free_rate'], inputs['volatility']

        d1 = (math.log(s / k) + (r + 0.5 * sigma ** 2) * t) / (sigma * math.sqrt(t))
        d2 = d1 - sigma * math.sqrt(t)
        discounted_strike = k * math.exp(-r * t)
        if inputs['option_type'] == 'call':
            price = s * normal_cdf(d1) - discounted_strike * normal_cdf(d2)
        else:
            price = discounted_strike * normal_cdf(-d2) - s * normal_cdf(-d1)
        components = {'d1': round_half_up(d1, 4), 'd2': round_half_up(d2, 4), 'option_type': inputs['option_type']}
        return self._result(price, th.MONEYNESS, "Option Pricing", basis=self._moneyness(inputs),
                            components=components)

    def _binomial_price(self, data: FinancialDataRecord, american: bool) -> MetricResult:
        inputs = self._option_inputs(data)
        steps = self._field(data, 'time_steps')
        if inputs is None or steps is None:
            return self._insufficient("Option Pricing")
        steps = int(steps)
        if steps < 1:
            raise ValueError("time_steps must be at least 1")
        s, k = inputs['stock_price'], inputs['strike_price']
        r, sigma = inputs['risk_free_rate'], inputs['volatility']
        dt = inputs['time_to_expiry'] / steps
        up = math.exp(sigma * math.sqrt(dt))
        down = 1 / up
        p = (math.exp(r * dt) - down) / (up - down)
        if not 0 <= p <= 1:
            raise ValueError(f"Risk-neutral probability {p:.4f} outside [0, 1]; reduce the time step")
        discount = math.exp(-r * dt)
        sign = 1.0 if inputs['option_type'] == 'call' else -1.0

        # Terminal prices, highest first: node i has (steps - i) up moves
        nodes = np.arange(steps + 1)
        prices = s * up ** (steps - nodes) * down ** nodes
        values = np.maximum(sign * (prices - k), 0.0)
        for step in range(steps - 1, -1, -1):
            values = discount * (p * values[:-1] + (1 - p) * values[1:])
            if american:
                level = np.arange(step + 1)
                prices = s * up ** (step - level) * down ** level
                values = np.maximum(values, sign * (prices - k))
        components = {'up': round_half_up(up, 4), 'down': round_half_up(down, 4),
                      'probability': round_half_up(p, 4), 'steps': steps}
        return self._result(float(values[0]), th.OPTION_VALUE, "Option Pricing", components=components)

    def calculate_binomial_option(self, data: FinancialDataRecord) -> MetricResult:
        american = self._text(data, 'exercise_style', 'european') == 'american'
        return self._binomial_price(data, american=american)

    def calculate_american_option(self, data: FinancialDataRecord) -> MetricResult:
        return self._binomial_price(data, american=True)
