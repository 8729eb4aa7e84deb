"""Shared test fixtures for analysis tests."""
import pytest

from finengine.core.types import MetricResult, INSUFFICIENT_DATA


def make_result(value, interpretation, category):
    return MetricResult(value=value, interpretation=interpretation, category=category, subcategory='Test')


@pytest.fixture
def sample_results():
    return {
        'Current Ratio': make_result(2.0, 'good', 'Liquidity'),
        'Quick Ratio': make_result(0.6, 'poor', 'Liquidity'),
        'Cash Ratio': make_result(0.05, 'poor', 'Liquidity'),
        'Debt-to-Equity Ratio': make_result(0.5, 'moderate', 'Leverage'),
        'Net Profit Margin': make_result(1.0, 'poor', 'Profitability'),
        'Gross Profit Margin': make_result(None, INSUFFICIENT_DATA, 'Profitability'),
        'Free Cash Flow': make_result(50000.0, 'positive', 'Cash Flow'),
    }


@pytest.fixture
def sample_benchmarks():
    return {
        'Current Ratio': {'p25': 1.2, 'median': 1.5, 'p75': 2.0},
        'quick ratio': {'percentile_25': 0.5, 'percentile_50': 0.6, 'percentile_75': 0.9},
        'Cash Ratio': {'p25': 0.1, 'median': 0.2, 'p75': 0.4},
        'Debt-to-Equity Ratio': {'median': 0},
    }
