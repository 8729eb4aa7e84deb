#!/usr/bin/env python3
import os, json, sys, logging
sys.path.insert(0, os.getcwd())
from pathlib import Path

from finengine.core.config import DEBUG
from finengine.core.types import DocumentExtraction, RunConfiguration
from finengine.orchestration.analysis_pipeline import AnalysisPipeline
from finengine.services.run_store import InMemoryRunStore

logging.basicConfig(level=logging.DEBUG if DEBUG else logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')

OUTPUT_DIR = os.path.join(os.getcwd(), 'scripts', 'output')
Path(OUTPUT_DIR).mkdir(parents=True, exist_ok=True)


class StaticDocumentProcessor:
    """Returns the same extracted statement lines for every document."""

    def process(self, document):
        return DocumentExtraction(
            extracted_fields={
                'Total Current Assets': '1,250,000',
                'Total Current Liabilities': '610,000',
                'Cash and Cash Equivalents': '240,000',
                'Inventory': '180,000',
                'Accounts Receivable': '310,000',
                'Total Assets': '4,800,000',
                'Total Liabilities': '2,100,000',
                'Total Equity': '2,700,000',
                'Total Debt': '900,000',
                'Revenue': '3,600,000',
                'Cost of Goods Sold': '2,150,000',
                'Operating Income': '520,000',
                'EBIT': '520,000',
                'Net Income': '410,000',
                'Interest Expense': '45,000',
                'Operating Cash Flow': '600,000',
                'Capital Expenditures': '150,000',
                'Retained Earnings': '1,300,000',
            },
        )


class StaticExternalData:
    def get_market_data(self, symbol):
        return {'symbol': symbol, 'price': 31.4, 'historical': [
            {'date': '2025-10-01', 'close': 29.8},
            {'date': '2025-11-01', 'close': 30.6},
            {'date': '2025-12-01', 'close': 31.4},
        ]}

    def get_sector_benchmarks(self, sector_id):
        return {
            'Current Ratio': {'median': 1.6, 'p25': 1.2, 'p75': 2.1},
            'Debt-to-Equity Ratio': {'median': 0.5, 'p25': 0.3, 'p75': 0.8},
            'Net Profit Margin': {'median': 9.0, 'p25': 5.0, 'p75': 13.0},
        }

    def get_economic_indicators(self, country):
        return {'country': country, 'gdp_growth': 2.8, 'inflation': 1.9}

    def get_industry_trends(self, sector_code):
        raise ConnectionError(f'trend feed unavailable for {sector_code}')


print('Building run configuration for DEMO...')
store = InMemoryRunStore()
store.add_configuration(RunConfiguration(
    run_id='demo-run',
    selections=[
        {'name_en': 'Current Ratio', 'name_ar': 'نسبة التداول'},
        {'name_en': 'Quick Ratio'},
        {'name_en': 'Debt-to-Equity Ratio'},
        {'name_en': 'Net Profit Margin'},
        {'name_en': 'Return on Equity (ROE)'},
        {'name_en': 'Altman Z-Score'},
        {'name_en': 'Black-Scholes Option Pricing'},
    ],
    documents=['annual_report_2025.pdf'],
    financial_inputs={'market_value_equity': 5200000},
    company_symbol='DEMO',
    sector_id='industrials',
    sector_code='IND',
))

pipeline = AnalysisPipeline(
    config_source=store,
    snapshot_store=store,
    document_processor=StaticDocumentProcessor(),
    external_data=StaticExternalData(),
)
print('Running analysis...')
result = pipeline.run('demo-run')

summary = {
    'status': result.status,
    'metrics': {name: (r['value'], r['interpretation']) for name, r in result.results.items()},
    'errors': result.errors,
    'benchmarking': {name: b['performance'] for name, b in result.benchmarking.items()},
    'priority_areas': result.recommendations.get('priority_areas'),
    'snapshots_saved': len(store.history('demo-run')),
}
print('Summary:', json.dumps(summary, indent=2, ensure_ascii=False))
with open(os.path.join(OUTPUT_DIR, 'demo_run_result.json'), 'w') as fh:
    json.dump(result.to_dict(), fh, indent=2, ensure_ascii=False)
print('Result saved to', os.path.join(OUTPUT_DIR, 'demo_run_result.json'))
