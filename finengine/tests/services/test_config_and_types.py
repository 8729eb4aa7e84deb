"""Tests for configuration loading and the core data types."""
import pytest

from finengine.core.config import AppConfig, CalculationConfig, EnvConfig, PipelineConfig
from finengine.core.types import (
    AnalysisRun,
    CalculationBatch,
    CostAccumulator,
    FinancialDataRecord,
    MetricResult,
    INSUFFICIENT_DATA,
)


class TestConfig:
    """Test suite for environment-backed configuration."""

    def test_env_cast_and_alias(self, monkeypatch):
        monkeypatch.delenv('FINENGINE_MAX_WORKERS', raising=False)
        monkeypatch.setenv('MAX_WORKERS', '8')

        assert EnvConfig.get('FINENGINE_MAX_WORKERS', cast=int, aliases=['MAX_WORKERS']) == 8
        assert PipelineConfig().max_workers == 8

    def test_invalid_cast(self, monkeypatch):
        monkeypatch.setenv('FINENGINE_MC_SEED', 'not-a-number')

        with pytest.raises(ValueError, match="FINENGINE_MC_SEED"):
            CalculationConfig()

    def test_explicit_values_beat_env(self, monkeypatch):
        monkeypatch.setenv('FINENGINE_VAR_CONFIDENCE', '0.99')

        assert CalculationConfig().var_confidence_level == 0.99
        assert CalculationConfig(var_confidence_level=0.9).var_confidence_level == 0.9

    def test_validation(self):
        with pytest.raises(ValueError):
            CalculationConfig(var_confidence_level=0.9, monte_carlo_simulations=10).validate()
        with pytest.raises(ValueError):
            PipelineConfig(benchmark_upper_ratio=0.8, benchmark_lower_ratio=0.9).validate()

    def test_check_availability(self, monkeypatch):
        monkeypatch.setenv('FINENGINE_LANGUAGE', 'fr')
        availability = AppConfig.check_availability()

        assert availability['calculation'] == {'available': True, 'reason': None}
        assert availability['pipeline']['available'] is False
        assert 'default_language' in availability['pipeline']['reason']

    def test_from_env_rereads_environment(self, monkeypatch):
        monkeypatch.setenv('FINENGINE_MAX_WORKERS', '2')
        config = AppConfig.from_env()

        assert config.pipeline.max_workers == 2
        with pytest.raises(ValueError):
            monkeypatch.setenv('FINENGINE_MAX_WORKERS', '0')
            AppConfig.from_env(strict=True)


class TestCoreTypes:
    """Test suite for record, result and accumulator types."""

    def test_record_is_read_only(self):
        record = FinancialDataRecord({'revenue': 100, 'returns': [0.1, 0.2]})

        assert record['revenue'] == 100.0
        assert record['returns'] == (0.1, 0.2)
        assert record.get('missing') is None
        with pytest.raises(TypeError):
            record._fields['revenue'] = 1

    def test_record_rejects_booleans(self):
        with pytest.raises(ValueError):
            FinancialDataRecord({'revenue': True})

    def test_has_ignores_nan(self):
        record = FinancialDataRecord({'revenue': float('nan'), 'cogs': 0})

        assert not record.has('revenue')
        assert record.has('cogs')

    def test_metric_result_without_value_must_be_insufficient(self):
        with pytest.raises(ValueError):
            MetricResult(value=None, interpretation='good', category='Liquidity', subcategory='Basic Ratios')
        result = MetricResult(value=None, interpretation=INSUFFICIENT_DATA, category='Liquidity', subcategory='s')
        assert result.to_dict()['value'] is None

    def test_batch_success_rate(self):
        batch = CalculationBatch(requested=3)
        batch.results['a'] = MetricResult(1.0, 'good', 'Liquidity', 's')
        batch.errors.append('b failed')

        assert batch.success_rate == 33.3
        assert batch.coverage == {'requested': 3, 'calculated': 1, 'failed': 1}

    def test_cost_accumulator(self):
        cost = CostAccumulator()
        cost.add('financial_analysis', 0.25)
        cost.add('financial_analysis', 0.25)
        cost.add('risk_assessment', None)

        assert cost.total == 0.5
        assert cost.breakdown == {'financial_analysis': 0.5, 'risk_assessment': 0.0}
        with pytest.raises(ValueError):
            cost.add('x', -1)

    def test_run_snapshot_is_plain_data(self):
        run = AnalysisRun(run_id='r1', financial_data=FinancialDataRecord({'returns': [0.1]}))
        snapshot = run.to_dict()

        assert snapshot['financial_data'] == {'returns': [0.1]}
        assert snapshot['costs'] == {'total': 0.0, 'breakdown': {}}
        assert snapshot['status'] == 'pending'
