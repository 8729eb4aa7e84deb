import logging
import numpy as np
import pandas as pd
from typing import Any, Dict, Mapping, Optional

from finengine.core.config import AppConfig
from finengine.core.types import BenchmarkComparison, MetricResult
from finengine.calculators.registry import normalize_metric_name

logger = logging.getLogger(__name__)

PERFORMANCE_ABOVE = 'above_average'
PERFORMANCE_AVERAGE = 'average'
PERFORMANCE_BELOW = 'below_average'
PERFORMANCE_UNKNOWN = 'unknown'

_PERCENTILE_KEYS = {
    'p25': ('p25', 'percentile_25'),
    'median': ('median', 'p50', 'percentile_50'),
    'p75': ('p75', 'percentile_75'),
}


def _percentile(entry: Optional[Mapping[str, Any]], key: str) -> float:
    if not entry:
        return np.nan
    for alias in _PERCENTILE_KEYS[key]:
        value = entry.get(alias)
        if value is not None:
            try:
                return float(value)
            except (TypeError, ValueError):
                return np.nan
    return np.nan


def _none_if_nan(value: Any) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def compare_to_benchmarks(
    results: Mapping[str, MetricResult],
    benchmarks: Optional[Mapping[str, Mapping[str, Any]]],
    upper_ratio: Optional[float] = None,
    lower_ratio: Optional[float] = None,
) -> Dict[str, BenchmarkComparison]:
    """Compare each computed metric with its sector percentiles.

    value / median above upper_ratio is above_average, below lower_ratio is
    below_average, anything else average. A missing value, missing median or
    zero median gives unknown.
    """
    upper_ratio = AppConfig.pipeline.benchmark_upper_ratio if upper_ratio is None else upper_ratio
    lower_ratio = AppConfig.pipeline.benchmark_lower_ratio if lower_ratio is None else lower_ratio
    if not results:
        return {}

    normalized = {normalize_metric_name(k): v for k, v in (benchmarks or {}).items()}
    names = list(results.keys())
    entries = [(benchmarks or {}).get(n) or normalized.get(normalize_metric_name(n)) for n in names]

    frame = pd.DataFrame({
        'company_value': [np.nan if results[n].value is None else results[n].value for n in names],
        'sector_p25': [_percentile(e, 'p25') for e in entries],
        'sector_median': [_percentile(e, 'median') for e in entries],
        'sector_p75': [_percentile(e, 'p75') for e in entries],
    }, index=names, dtype=float)

    ratio = frame['company_value'] / frame['sector_median'].where(frame['sector_median'] != 0)
    frame['performance'] = np.select(
        [ratio > upper_ratio, ratio < lower_ratio, ratio.notna()],
        [PERFORMANCE_ABOVE, PERFORMANCE_BELOW, PERFORMANCE_AVERAGE],
        default=PERFORMANCE_UNKNOWN,
    )

    comparisons: Dict[str, BenchmarkComparison] = {}
    for name, row in frame.iterrows():
        comparisons[name] = BenchmarkComparison(
            company_value=_none_if_nan(row['company_value']),
            sector_median=_none_if_nan(row['sector_median']),
            sector_p25=_none_if_nan(row['sector_p25']),
            sector_p75=_none_if_nan(row['sector_p75']),
            performance=str(row['performance']),
        )
    logger.debug("Benchmark comparison complete", extra={
        "metrics": len(comparisons),
        "known": int((frame['performance'] != PERFORMANCE_UNKNOWN).sum()),
    })
    return comparisons
