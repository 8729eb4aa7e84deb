"""Shared test fixtures for orchestration tests."""
import pytest
from datetime import datetime
from unittest.mock import Mock

from finengine.core.types import AgentResponse, DocumentExtraction, RunConfiguration
from finengine.services.run_store import InMemoryRunStore


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2026, 1, 15, 9, 30, 0)


@pytest.fixture
def selections():
    return [
        {'name_en': 'Current Ratio', 'name_ar': 'نسبة التداول'},
        {'name_en': 'Debt-to-Equity Ratio'},
        {'name_en': 'Return on Equity (ROE)', 'description_en': 'Net income over equity'},
        {'name_en': 'EBITDA'},
        {'name_en': 'Altman Z-Score'},
    ]


@pytest.fixture
def financial_inputs():
    return {
        'current_assets': 100000,
        'current_liabilities': 50000,
        'total_assets': 500000,
        'total_liabilities': 250000,
        'total_debt': 50000,
        'total_equity': 100000,
        'retained_earnings': 80000,
        'revenue': 400000,
        'ebit': 60000,
        'net_income': 20000,
        'interest_expense': 5000,
        'tax_expense': 15000,
        'depreciation': 10000,
        'amortization': 2000,
        'market_value_equity': 300000,
    }


@pytest.fixture
def run_store(selections, financial_inputs):
    store = InMemoryRunStore()
    store.add_configuration(RunConfiguration(
        run_id='run-1',
        selections=selections,
        documents=['balance_sheet.pdf'],
        financial_inputs=financial_inputs,
        company_symbol='2222.SR',
        sector_id='energy',
        sector_code='ENR',
        country='SAU',
    ))
    return store


@pytest.fixture
def mock_document_processor():
    mock = Mock()
    mock.process.return_value = DocumentExtraction(
        extracted_fields={'Cash and Cash Equivalents': '20,000', 'Inventory': '15,000'},
        confidence=0.9,
    )
    return mock


@pytest.fixture
def mock_external_data():
    mock = Mock()
    mock.get_market_data.return_value = {
        'historical': [
            {'date': '2026-01-02', 'close_price': 27.5, 'volume': 1000},
            {'date': '2026-01-01', 'close_price': 27.0, 'volume': 1200},
        ],
    }
    mock.get_sector_benchmarks.return_value = {
        'Current Ratio': {'p25': 1.2, 'median': 1.5, 'p75': 2.0},
        'Debt-to-Equity Ratio': {'p25': 0.4, 'median': 0.8, 'p75': 1.2},
    }
    mock.get_economic_indicators.return_value = {'gdp_growth': 2.1}
    mock.get_industry_trends.return_value = [{'trend': 'stable'}]
    return mock


@pytest.fixture
def mock_ai_agents():
    mock = Mock()
    mock.analyze_financials.return_value = AgentResponse(content={'summary': 'solid'}, cost=0.25, model='m')
    mock.assess_risks.return_value = AgentResponse(content={'risk': 'low'}, cost=0.15, model='m')
    mock.enrich_market.return_value = AgentResponse(content={'outlook': 'neutral'}, cost=0.10, model='m')
    mock.generate_report_content.return_value = AgentResponse(
        content={'recommendations': ['Reduce leverage']}, cost=0.5, model='m'
    )
    return mock
