"""Shared test fixtures for metric calculator tests."""
import pytest

from finengine.core.config import CalculationConfig
from finengine.core.types import FinancialDataRecord


@pytest.fixture
def sample_fields():
    """Balance sheet, income statement and cash flow fields for one period."""
    return {
        'current_assets': 100000,
        'current_liabilities': 50000,
        'cash': 20000,
        'inventory': 15000,
        'accounts_receivable': 25000,
        'total_assets': 500000,
        'total_liabilities': 250000,
        'total_debt': 50000,
        'long_term_debt': 40000,
        'total_equity': 100000,
        'retained_earnings': 80000,
        'revenue': 400000,
        'cogs': 240000,
        'operating_income': 60000,
        'ebit': 60000,
        'net_income': 50000,
        'interest_expense': 5000,
        'tax_expense': 15000,
        'depreciation': 10000,
        'amortization': 2000,
        'operating_cash_flow': 70000,
        'capital_expenditures': 20000,
        'market_value_equity': 300000,
    }


@pytest.fixture
def sample_record(sample_fields):
    return FinancialDataRecord(sample_fields)


@pytest.fixture
def empty_record():
    return FinancialDataRecord()


@pytest.fixture
def calc_config():
    """Deterministic risk-model defaults independent of the environment."""
    return CalculationConfig(var_confidence_level=0.95, monte_carlo_simulations=5000, monte_carlo_seed=7)
