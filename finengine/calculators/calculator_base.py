import math
import numpy as np
import pandas as pd
from typing import Optional, Any, Dict

from finengine.core.config import AppConfig, CalculationConfig
from finengine.core.types import FinancialDataRecord, MetricResult, INSUFFICIENT_DATA
from finengine.calculators.classification import ThresholdTable, interpret


def safe_divide(numerator: Any, denominator: Any, default: Optional[float] = None) -> Optional[float]:
    """Divide, returning default for a zero/None denominator or non-finite operands."""
    if numerator is None or denominator is None:
        return default
    try:
        n = float(numerator)
        d = float(denominator)
    except (TypeError, ValueError):
        return default
    if d == 0 or not np.isfinite(n) or not np.isfinite(d):
        return default
    result = n / d
    return result if np.isfinite(result) else default


def round_half_up(value: Optional[float], decimals: int = 2) -> Optional[float]:
    """Round half away from negative infinity on the scaled integer (2.345 -> 2.35)."""
    if value is None:
        return None
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


class CalculatorBase:
    """Shared helpers for metric calculators.

    Calculators are stateless: every ``calculate_*`` method takes a
    FinancialDataRecord and returns a MetricResult, reading only the fields
    it declares. Subclasses set CATEGORY.
    """
    CATEGORY = ""
    DAYS_PER_YEAR = 365

    def __init__(self, config: Optional[CalculationConfig] = None):
        self.config = config or AppConfig.calculation

    def _clean_result(self, value: Any) -> Optional[float]:
        """Clean result (None/NaN/inf -> None)."""
        if value is None or pd.isna(value) or not np.isfinite(value):
            return None
        return float(value)

    def _field(self, data: FinancialDataRecord, *names: str) -> Optional[float]:
        """First numeric value present among names, else None."""
        for name in names:
            value = data.get(name)
            if isinstance(value, (int, float)) and np.isfinite(value):
                return float(value)
        return None

    def _optional(self, data: FinancialDataRecord, *names: str, default: float = 0.0) -> float:
        """Additive adjustment fields that may be absent."""
        value = self._field(data, *names)
        return default if value is None else value

    def _series(self, data: FinancialDataRecord, name: str) -> Optional[np.ndarray]:
        """Series input as an array; None when absent or empty. Gaps are invalid input."""
        value = data.get(name)
        if value is None:
            return None
        if not isinstance(value, tuple):
            raise ValueError(f"{name} must be a sequence of numbers")
        if len(value) == 0:
            return None
        arr = np.array([np.nan if v is None else v for v in value], dtype=float)
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"{name} contains missing or non-finite values")
        return arr

    def _text(self, data: FinancialDataRecord, name: str, default: str) -> str:
        value = data.get(name)
        return value.strip().lower() if isinstance(value, str) and value.strip() else default

    def _insufficient(self, subcategory: str, category: Optional[str] = None) -> MetricResult:
        return MetricResult(
            value=None,
            interpretation=INSUFFICIENT_DATA,
            category=category or self.CATEGORY,
            subcategory=subcategory,
        )

    def _result(
        self,
        value: Any,
        table: ThresholdTable,
        subcategory: str,
        decimals: int = 2,
        scale: float = 1.0,
        classify_scaled: bool = False,
        components: Optional[Dict[str, Any]] = None,
        category: Optional[str] = None,
        basis: Optional[float] = None,
    ) -> MetricResult:
        """Round, scale and classify a raw value into a MetricResult.

        The raw (unscaled) value is classified unless classify_scaled is set
        or an explicit classification basis is given.
        """
        raw = self._clean_result(value)
        if raw is None:
            return self._insufficient(subcategory, category)
        scaled = raw * scale
        if basis is None:
            basis = scaled if classify_scaled else raw
        return MetricResult(
            value=round_half_up(scaled, decimals),
            interpretation=interpret(basis, table),
            category=category or self.CATEGORY,
            subcategory=subcategory,
            components=components,
        )

    def _ratio(
        self,
        data: FinancialDataRecord,
        numerator: str,
        denominator: str,
        table: ThresholdTable,
        subcategory: str,
        decimals: int = 2,
        scale: float = 1.0,
    ) -> MetricResult:
        """Plain field-over-field ratio."""
        value = safe_divide(self._field(data, numerator), self._field(data, denominator))
        return self._result(value, table, subcategory, decimals=decimals, scale=scale)

    def _working_capital(self, data: FinancialDataRecord) -> Optional[float]:
        """Reported working capital, else current assets minus current liabilities."""
        working_capital = self._field(data, 'working_capital')
        if working_capital is not None:
            return working_capital
        current_assets = self._field(data, 'current_assets')
        current_liabilities = self._field(data, 'current_liabilities')
        if current_assets is None or current_liabilities is None:
            return None
        return current_assets - current_liabilities

    def _ebitda(self, data: FinancialDataRecord) -> Optional[float]:
        """Reported EBITDA, else net income plus interest, taxes, D&A."""
        reported = self._field(data, 'ebitda')
        if reported is not None:
            return reported
        net_income = self._field(data, 'net_income')
        if net_income is None:
            return None
        return (net_income
                + self._optional(data, 'interest_expense')
                + self._optional(data, 'tax_expense')
                + self._optional(data, 'depreciation')
                + self._optional(data, 'amortization'))
