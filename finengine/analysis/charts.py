import pandas as pd
from typing import Any, Dict, List, Mapping, Optional

from finengine.core.types import BenchmarkComparison, MetricResult

# Categories rendered as bar charts of computed ratios
RATIO_CHART_CATEGORIES = ('Liquidity', 'Leverage', 'Profitability', 'Activity')


def ratio_charts(results: Mapping[str, MetricResult]) -> Dict[str, Dict[str, Any]]:
    """One bar chart per ratio category, computed values only."""
    charts: Dict[str, Dict[str, Any]] = {}
    for category in RATIO_CHART_CATEGORIES:
        members = [(name, r.value) for name, r in results.items()
                   if r.category.lower() == category.lower() and r.value is not None]
        if not members:
            continue
        charts[category.lower()] = {
            'type': 'bar',
            'title': f"{category} Ratios",
            'labels': [name for name, _ in members],
            'values': [value for _, value in members],
        }
    return charts


def benchmark_chart(benchmarking: Mapping[str, BenchmarkComparison]) -> Optional[Dict[str, Any]]:
    """Radar chart of company vs sector median and the p25/p75 midpoint."""
    rows = [(name, c) for name, c in benchmarking.items()
            if c.company_value is not None and c.sector_median is not None]
    if not rows:
        return None
    industry_avg: List[Optional[float]] = []
    for _, c in rows:
        if c.sector_p25 is not None and c.sector_p75 is not None:
            industry_avg.append((c.sector_p25 + c.sector_p75) / 2)
        else:
            industry_avg.append(None)
    return {
        'type': 'radar',
        'labels': [name for name, _ in rows],
        'datasets': {
            'company': [c.company_value for _, c in rows],
            'industry_median': [c.sector_median for _, c in rows],
            'industry_avg': industry_avg,
        },
    }


def trend_chart(market_data: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Line chart of historical close price and volume, oldest first."""
    history = (market_data or {}).get('historical')
    if not history:
        return None
    frame = pd.DataFrame(list(history))
    if 'date' not in frame.columns:
        return None
    if 'close_price' not in frame.columns and 'close' in frame.columns:
        frame = frame.rename(columns={'close': 'close_price'})
    if 'close_price' not in frame.columns:
        return None
    frame['date'] = pd.to_datetime(frame['date'], errors='coerce')
    frame['close_price'] = pd.to_numeric(frame['close_price'], errors='coerce')
    frame = frame.dropna(subset=['date', 'close_price']).sort_values('date')
    if frame.empty:
        return None
    chart: Dict[str, Any] = {
        'type': 'line',
        'labels': frame['date'].dt.strftime('%Y-%m-%d').tolist(),
        'close_price': frame['close_price'].astype(float).tolist(),
    }
    if 'volume' in frame.columns:
        volume = pd.to_numeric(frame['volume'], errors='coerce')
        chart['volume'] = [None if pd.isna(v) else float(v) for v in volume]
    return chart


def build_chart_data(
    results: Mapping[str, MetricResult],
    benchmarking: Mapping[str, BenchmarkComparison],
    market_data: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    charts: Dict[str, Any] = {'financial_ratios': ratio_charts(results)}
    radar = benchmark_chart(benchmarking)
    if radar is not None:
        charts['benchmark_comparison'] = radar
    trend = trend_chart(market_data)
    if trend is not None:
        charts['trend_analysis'] = trend
    return charts
