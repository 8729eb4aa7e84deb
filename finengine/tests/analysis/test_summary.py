"""Tests for category summaries."""
from finengine.core.types import MetricResult
from finengine.analysis.summary import (
    SUMMARY_BUCKETS,
    bucket_key,
    count_interpretations,
    most_common_interpretation,
    summarize,
)


class TestSummary:
    """Test suite for summarize and its helpers."""

    def test_every_bucket_present(self, sample_results):
        summary = summarize(sample_results)

        assert list(summary) == list(SUMMARY_BUCKETS)
        assert summary['banking'].ratios == []
        assert summary['banking'].representative_interpretation is None

    def test_majority_interpretation(self, sample_results):
        summary = summarize(sample_results)

        assert summary['liquidity'].interpretation_counts == [('good', 1), ('poor', 2)]
        assert summary['liquidity'].representative_interpretation == 'poor'

    def test_tie_goes_to_first_seen(self, sample_results):
        """Profitability has one 'poor' and one 'insufficient_data'; 'poor' came first."""
        summary = summarize(sample_results)

        assert summary['profitability'].representative_interpretation == 'poor'

    def test_multi_word_category(self, sample_results):
        summary = summarize(sample_results)

        assert bucket_key('Cash Flow') == 'cash_flow'
        assert [r['name'] for r in summary['cash_flow'].ratios] == ['Free Cash Flow']

    def test_unknown_category_ignored(self):
        results = {'X': MetricResult(value=1.0, interpretation='good', category='Exotic', subcategory='s')}

        summary = summarize(results)
        assert all(not s.ratios for s in summary.values())

    def test_helpers(self):
        counts = count_interpretations(['a', 'b', 'b', 'a', 'c'])

        assert counts == [('a', 2), ('b', 2), ('c', 1)]
        assert most_common_interpretation(counts) == 'a'
        assert most_common_interpretation([]) is None

    def test_to_dict(self, sample_results):
        data = summarize(sample_results)['leverage'].to_dict()

        assert data == {
            'category': 'leverage',
            'ratios': [{'name': 'Debt-to-Equity Ratio', 'value': 0.5, 'interpretation': 'moderate'}],
            'interpretation_counts': [['moderate', 1]],
            'representative_interpretation': 'moderate',
        }
