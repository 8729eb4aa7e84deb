"""Tests for recommendation synthesis and chart series."""
import pytest

from finengine.core.types import BenchmarkComparison
from finengine.analysis.benchmarking import compare_to_benchmarks
from finengine.analysis.charts import benchmark_chart, build_chart_data, ratio_charts, trend_chart
from finengine.analysis.recommendations import build_recommendations
from finengine.analysis.summary import summarize


class TestRecommendations:
    """Test suite for build_recommendations."""

    def test_priority_areas_from_weak_categories(self, sample_results):
        recommendations = build_recommendations(summarize(sample_results), {})

        categories = [area['category'] for area in recommendations['priority_areas']]
        assert categories == ['liquidity', 'profitability']
        assert recommendations['priority_areas'][0]['priority'] == 'high'

    def test_action_items_from_below_average(self, sample_results, sample_benchmarks):
        benchmarking = compare_to_benchmarks(sample_results, sample_benchmarks)
        recommendations = build_recommendations(summarize(sample_results), benchmarking)

        assert recommendations['action_items'] == [{
            'metric': 'Cash Ratio',
            'recommendation': 'Focus on improving Cash Ratio to reach industry median',
            'current': 0.05,
            'target': 0.2,
        }]

    def test_ai_insights_passed_through(self):
        insights = [{'title': 'Refinance', 'detail': 'Extend maturities'}]
        recommendations = build_recommendations({}, {}, insights)

        assert recommendations['ai_insights'] is insights
        assert recommendations['priority_areas'] == []


class TestCharts:
    """Test suite for chart data builders."""

    def test_ratio_charts_skip_missing_values(self, sample_results):
        charts = ratio_charts(sample_results)

        assert set(charts) == {'liquidity', 'leverage', 'profitability'}
        assert charts['liquidity']['labels'] == ['Current Ratio', 'Quick Ratio', 'Cash Ratio']
        assert charts['profitability']['values'] == [1.0]

    def test_benchmark_radar(self):
        chart = benchmark_chart({
            'Current Ratio': BenchmarkComparison(2.0, 1.5, 1.2, 2.0, 'above_average'),
            'Quick Ratio': BenchmarkComparison(0.8, 1.0, None, None, 'below_average'),
            'EBITDA': BenchmarkComparison(82000.0, None),
        })

        assert chart['labels'] == ['Current Ratio', 'Quick Ratio']
        assert chart['datasets']['industry_avg'][0] == pytest.approx(1.6)
        assert chart['datasets']['industry_avg'][1] is None

    def test_benchmark_radar_empty(self):
        assert benchmark_chart({}) is None

    def test_trend_chart_sorted_oldest_first(self):
        market_data = {'historical': [
            {'date': '2026-01-03', 'close': 11.0, 'volume': 300},
            {'date': '2026-01-01', 'close': 10.0, 'volume': 100},
            {'date': 'not a date', 'close': 12.0, 'volume': 50},
        ]}
        chart = trend_chart(market_data)

        assert chart['labels'] == ['2026-01-01', '2026-01-03']
        assert chart['close_price'] == [10.0, 11.0]
        assert chart['volume'] == [100.0, 300.0]

    def test_trend_chart_without_history(self):
        assert trend_chart(None) is None
        assert trend_chart({'historical': []}) is None

    def test_build_chart_data(self, sample_results):
        charts = build_chart_data(sample_results, {}, None)

        assert set(charts) == {'financial_ratios'}
