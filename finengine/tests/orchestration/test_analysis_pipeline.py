"""Tests for AnalysisPipeline.

Collaborators are Mocks and the run store is in-memory, so every stage runs
without reaching external services.
"""
import pytest
from unittest.mock import Mock

from finengine.core.types import AnalysisTypeSelection, DocumentExtraction
from finengine.orchestration.analysis_pipeline import AnalysisPipeline


@pytest.fixture
def make_pipeline(run_store, mock_document_processor, mock_external_data, mock_ai_agents, fixed_clock):
    def _make(**overrides):
        kwargs = dict(
            config_source=run_store,
            snapshot_store=run_store,
            document_processor=mock_document_processor,
            external_data=mock_external_data,
            ai_agents=mock_ai_agents,
            clock=fixed_clock,
            timer=Mock(side_effect=[10.0, 10.25]),
        )
        kwargs.update(overrides)
        return AnalysisPipeline(**kwargs)
    return _make


class TestAnalysisPipeline:
    """Test suite for AnalysisPipeline."""

    def test_full_run(self, make_pipeline, run_store):
        result = make_pipeline().run('run-1')

        assert result.status == 'completed'
        assert result.errors == []
        assert list(result.results) == [
            'Current Ratio', 'Debt-to-Equity Ratio', 'Return on Equity (ROE)', 'EBITDA', 'Altman Z-Score',
        ]
        assert result.results['Current Ratio']['value'] == 2.0
        assert result.results['Return on Equity (ROE)']['interpretation'] == 'excellent'
        assert result.processing_time_ms == 250
        assert result.total_cost == pytest.approx(1.0)

    def test_snapshots_follow_lifecycle(self, make_pipeline, run_store):
        make_pipeline().run('run-1')
        history = run_store.history('run-1')

        assert history[0]['status'] == 'pending'
        assert history[1]['status'] == 'processing'
        assert history[-1]['status'] == 'completed'
        assert history[-1]['steps_completed'] == [
            'configuration', 'document_processing', 'financial_extraction', 'external_data', 'calculations',
            'ai_analysis', 'benchmarking', 'charts', 'recommendations', 'completion',
        ]
        assert history[-1]['costs']['breakdown'] == {
            'financial_analysis': 0.25,
            'risk_assessment': 0.15,
            'market_enrichment': 0.10,
            'report_content': 0.5,
        }

    def test_extracted_fields_reach_the_record(self, make_pipeline, run_store):
        make_pipeline().run('run-1')
        financial_data = run_store.latest('run-1')['financial_data']

        assert financial_data['cash'] == 20000
        assert financial_data['inventory'] == 15000
        assert financial_data['working_capital'] == 50000

    def test_benchmarks_and_recommendations(self, make_pipeline):
        result = make_pipeline().run('run-1')

        assert result.benchmarking['Current Ratio']['performance'] == 'above_average'
        assert result.benchmarking['Debt-to-Equity Ratio']['performance'] == 'below_average'
        assert [item['metric'] for item in result.recommendations['action_items']] == ['Debt-to-Equity Ratio']
        assert result.recommendations['ai_insights'] == ['Reduce leverage']
        assert result.summary['liquidity']['representative_interpretation'] == 'good'
        assert set(result.charts) == {'financial_ratios', 'benchmark_comparison', 'trend_analysis'}

    def test_document_failure_does_not_stop_run(self, make_pipeline, mock_document_processor):
        mock_document_processor.process.side_effect = RuntimeError("OCR failed")
        result = make_pipeline().run('run-1')

        assert result.status == 'completed'
        assert result.errors == ['Document Processing: OCR failed']
        assert result.results['Current Ratio']['value'] == 2.0

    def test_non_numeric_extracted_values_are_ignored(self, make_pipeline, mock_document_processor, run_store):
        mock_document_processor.process.return_value = DocumentExtraction(
            extracted_fields={'Operating Cash Flow': 5000, 'Capex': 'N/A', 'Current Liabilities': 'N/A'},
        )
        result = make_pipeline().run('run-1')
        financial_data = run_store.latest('run-1')['financial_data']

        assert result.status == 'completed'
        assert result.errors == []
        assert result.results['Current Ratio']['value'] == 2.0
        assert financial_data['operating_cash_flow'] == 5000
        assert financial_data['working_capital'] == 50000
        assert 'capital_expenditures' not in financial_data
        assert 'free_cash_flow' not in financial_data

    def test_external_sub_fetch_failure(self, make_pipeline, mock_external_data, run_store):
        mock_external_data.get_market_data.side_effect = TimeoutError("timeout")
        result = make_pipeline().run('run-1')
        external = run_store.latest('run-1')['external_data']

        assert result.status == 'completed'
        assert 'External Data: market_data: timeout' in result.errors
        assert external['market_data'] is None
        assert external['economic_indicators'] == {'gdp_growth': 2.1}
        assert 'trend_analysis' not in result.charts

    def test_ai_failure_keeps_other_costs(self, make_pipeline, mock_ai_agents):
        mock_ai_agents.assess_risks.side_effect = RuntimeError("rate limited")
        result = make_pipeline().run('run-1')

        assert result.status == 'completed'
        assert 'AI Analysis: risk_assessment: rate limited' in result.errors
        assert result.total_cost == pytest.approx(0.85)

    def test_unknown_metric_is_reported(self, make_pipeline, run_store):
        configuration = run_store.load('run-1')
        configuration.selections = configuration.selections + (AnalysisTypeSelection('Nope'),)
        result = make_pipeline().run('run-1')

        assert result.status == 'completed'
        assert 'Calculations: Calculation method not implemented for: Nope' in result.errors

    def test_missing_configuration_is_fatal(self, make_pipeline, run_store, mock_document_processor):
        result = make_pipeline().run('missing')

        assert result.status == 'error'
        assert run_store.latest('missing')['status'] == 'error'
        assert 'not found' in run_store.latest('missing')['error_message']
        mock_document_processor.process.assert_not_called()

    def test_unexpected_exception_moves_run_to_error(self, make_pipeline, run_store):
        broken_source = Mock()
        broken_source.load.side_effect = RuntimeError("database down")
        result = make_pipeline(config_source=broken_source).run('run-1')

        assert result.status == 'error'
        assert run_store.latest('run-1')['error_message'] == 'database down'
        assert result.processing_time_ms == 250

    def test_runs_without_optional_collaborators(self, run_store, fixed_clock):
        run_store.load('run-1').documents = []
        pipeline = AnalysisPipeline(config_source=run_store, snapshot_store=run_store, clock=fixed_clock)
        result = pipeline.run('run-1')

        assert result.status == 'completed'
        assert result.total_cost == 0.0
        assert result.benchmarking['Current Ratio']['performance'] == 'unknown'

    def test_costs_are_per_run(self, make_pipeline, run_store):
        pipeline = make_pipeline(timer=Mock(side_effect=[0.0, 1.0, 2.0, 3.0]))
        first = pipeline.run('run-1')
        second = pipeline.run('run-1')

        assert first.total_cost == pytest.approx(1.0)
        assert second.total_cost == pytest.approx(1.0)


class TestPipelineCancellation:
    """Test suite for cancellation handling."""

    def test_cancel_during_processing_stops_before_next_stage(self, make_pipeline, mock_document_processor,
                                                              run_store):
        pipeline = make_pipeline()
        run = pipeline.create_run('run-1')

        def _cancel_while_processing(document):
            pipeline.cancel(run, 'user request')
            return mock_document_processor.process.return_value

        mock_document_processor.process.side_effect = _cancel_while_processing
        result = pipeline.execute(run)

        assert result.status == 'cancelled'
        assert run.cancellation_reason == 'user request'
        assert 'document_processing' in run.steps_completed
        assert 'calculations' not in run.steps_completed
        assert run.calculations is None
        assert run_store.latest('run-1')['status'] == 'cancelled'

    def test_cancel_pending_run_skips_execution(self, make_pipeline, mock_document_processor):
        pipeline = make_pipeline()
        run = pipeline.create_run('run-1')
        pipeline.cancel(run)
        result = pipeline.execute(run)

        assert result.status == 'cancelled'
        mock_document_processor.process.assert_not_called()

    def test_execute_rejects_run_already_processing(self, make_pipeline, mock_document_processor):
        pipeline = make_pipeline()
        run = pipeline.create_run('run-1')
        pipeline.state.start(run)

        with pytest.raises(ValueError, match="already processing"):
            pipeline.execute(run)
        assert run.status == 'processing'
        assert run.errors == []
        mock_document_processor.process.assert_not_called()

    def test_cannot_cancel_completed_run(self, make_pipeline):
        pipeline = make_pipeline()
        run = pipeline.create_run('run-1')
        pipeline.execute(run)

        with pytest.raises(ValueError, match="Cannot cancel completed analysis"):
            pipeline.cancel(run, 'too late')
        assert run.status == 'completed'

    def test_repeated_cancel_is_noop(self, make_pipeline, run_store):
        pipeline = make_pipeline()
        run = pipeline.create_run('run-1')
        pipeline.cancel(run, 'first')
        snapshots = len(run_store.history('run-1'))
        pipeline.cancel(run, 'second')

        assert run.cancellation_reason == 'first'
        assert len(run_store.history('run-1')) == snapshots

    def test_execute_rejects_finished_run(self, make_pipeline):
        pipeline = make_pipeline(timer=Mock(side_effect=[0.0, 1.0, 2.0]))
        run = pipeline.create_run('run-1')
        pipeline.execute(run)

        with pytest.raises(ValueError, match="already finished"):
            pipeline.execute(run)
