"""Tests for FieldNormalizer and numeric parsing."""
import pytest

from finengine.core.types import FinancialDataRecord
from finengine.services.field_normalizer import FieldNormalizer, normalize_label, parse_numeric_value


class TestParseNumericValue:
    """Test suite for parse_numeric_value."""

    @pytest.mark.parametrize("raw, expected", [
        (1500, 1500.0),
        (12.5, 12.5),
        ("1,250,000", 1250000.0),
        ("$ 3,400.50", 3400.5),
        ("€12", 12.0),
        ("(1,200)", -1200.0),
        ("-45.2", -45.2),
        ("١٢٣٤٥", 12345.0),
        ("12%", 12.0),
        ("1.5e3", 1500.0),
    ])
    def test_parses(self, raw, expected):
        assert parse_numeric_value(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "", "n/a", "abc", object()])
    def test_unparseable(self, raw):
        assert parse_numeric_value(raw) is None


class TestFieldNormalizer:
    """Test suite for FieldNormalizer."""

    def test_english_and_arabic_labels(self):
        fields = FieldNormalizer().normalize({
            'Total Assets': '500,000',
            'الخصوم المتداولة': '50,000',
            'Net Profit': 20000,
            'تكلفة المبيعات': '240000',
        })

        assert fields == {
            'total_assets': 500000.0,
            'current_liabilities': 50000.0,
            'net_income': 20000.0,
            'cogs': 240000.0,
        }

    def test_label_matching_is_case_and_space_insensitive(self):
        normalizer = FieldNormalizer()

        assert normalizer.canonical_field('  CURRENT   assets ') == 'current_assets'
        assert normalizer.canonical_field('current_assets') == 'current_assets'
        assert normalize_label('Cash_and-Cash Equivalents') == 'cash and cash equivalents'

    def test_snake_case_passthrough_and_unknown_labels(self):
        fields = FieldNormalizer().normalize({
            'stock_price': 100,
            'option_type': 'Put',
            'returns': [0.01, '-0.02'],
            'Some Footnote': '12',
        })

        assert fields == {'stock_price': 100.0, 'option_type': 'put', 'returns': [0.01, -0.02]}

    def test_first_label_wins(self):
        fields = FieldNormalizer().normalize({'Revenue': 100, 'Sales': 200})

        assert fields['revenue'] == 100.0

    @pytest.mark.parametrize("raw", ['n/a', 'N/A', '-', '—', '', 'pending audit'])
    def test_unparseable_values_dropped(self, raw):
        assert FieldNormalizer().normalize({'Revenue': raw, 'Capex': raw}) == {}

    def test_only_model_switches_stay_text(self):
        fields = FieldNormalizer().normalize({
            'option_type': ' CALL ',
            'exercise_style': 'American',
            'stock_price': 'unknown',
            'volatility': 'high',
        })

        assert fields == {'option_type': 'call', 'exercise_style': 'american'}

    def test_model_switch_must_be_text(self):
        assert FieldNormalizer().normalize({'option_type': 1}) == {}

    def test_statement_total_labels(self):
        fields = FieldNormalizer().normalize({
            'Total Current Assets': '1,250,000',
            'Total Current Liabilities': '610,000',
            'إجمالي الأصول المتداولة': '1',
        })

        assert fields == {'current_assets': 1250000.0, 'current_liabilities': 610000.0}

    def test_arabic_statement_total_labels(self):
        fields = FieldNormalizer().normalize({
            'إجمالي الأصول المتداولة': '٣٠٠',
            'إجمالي الخصوم المتداولة': '١٥٠',
        })

        assert fields == {'current_assets': 300.0, 'current_liabilities': 150.0}

    def test_build_record_derives_fields(self):
        record = FieldNormalizer().build_record([{
            'Current Assets': 100000, 'Current Liabilities': 50000,
            'Revenue': 400000, 'COGS': 240000,
            'Operating Cash Flow': 70000, 'Capital Expenditures': 20000,
        }])

        assert record['working_capital'] == 50000.0
        assert record['gross_profit'] == 160000.0
        assert record['free_cash_flow'] == 50000.0

    def test_derivation_needs_both_inputs(self):
        record = FieldNormalizer().build_record([{'Revenue': 400000, 'Current Assets': 0}])

        assert 'gross_profit' not in record
        assert 'working_capital' not in record

    def test_zero_inputs_still_derive(self):
        record = FieldNormalizer().build_record([{'Current Assets': 0, 'Current Liabilities': 0}])

        assert record['working_capital'] == 0.0

    def test_reported_value_not_overwritten(self):
        record = FieldNormalizer().build_record([{'Revenue': 100, 'COGS': 60, 'Gross Profit': 45}])

        assert record['gross_profit'] == 45.0

    def test_supplied_inputs_override_extraction(self):
        record = FieldNormalizer().build_record(
            [{'Revenue': 100}, {'Revenue': 999, 'Net Income': 10}],
            supplied={'revenue': 150},
        )

        assert record['revenue'] == 150.0
        assert record['net_income'] == 10.0

    def test_non_numeric_inputs_do_not_break_derivation(self):
        record = FieldNormalizer().build_record(
            [{'Current Assets': 100000, 'Current Liabilities': 'N/A',
              'Operating Cash Flow': 5000, 'Capex': '—'}],
            supplied={'revenue': 400000},
        )

        assert record['current_assets'] == 100000.0
        assert record['revenue'] == 400000.0
        assert 'current_liabilities' not in record
        assert 'working_capital' not in record
        assert 'free_cash_flow' not in record

    def test_derived_fields_skip_text_values(self):
        record = FinancialDataRecord({'revenue': 400000, 'cogs': 'unaudited', 'current_assets': 10, 'current_liabilities': 4})

        assert FieldNormalizer.derived_fields(record) == {'working_capital': 6.0}
