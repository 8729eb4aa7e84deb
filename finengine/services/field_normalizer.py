"""Map extracted statement labels (English or Arabic) onto canonical field names."""
import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from finengine.core.types import FinancialDataRecord

logger = logging.getLogger(__name__)

FIELD_SYNONYMS: Dict[str, List[str]] = {
    'current_assets': ['current assets', 'current asset', 'total current assets',
                       'إجمالي الأصول المتداولة', 'أصول متداولة', 'الأصول المتداولة'],
    'current_liabilities': ['current liabilities', 'current liability', 'total current liabilities',
                            'إجمالي الخصوم المتداولة', 'إجمالي المطلوبات المتداولة', 'خصوم متداولة', 'الخصوم المتداولة'],
    'total_assets': ['total assets', 'total asset', 'إجمالي الأصول', 'مجموع الأصول'],
    'total_liabilities': ['total liabilities', 'إجمالي الخصوم', 'إجمالي المطلوبات'],
    'total_equity': ['total equity', 'shareholders equity', 'total shareholders equity',
                     'إجمالي حقوق الملكية', 'حقوق المساهمين'],
    'total_debt': ['total debt', 'إجمالي الديون'],
    'revenue': ['revenue', 'sales', 'total revenue', 'إيرادات', 'الإيرادات', 'مبيعات', 'المبيعات',
                'إجمالي الإيرادات'],
    'cogs': ['cost of goods sold', 'cost of sales', 'تكلفة البضاعة المباعة', 'تكلفة المبيعات'],
    'gross_profit': ['gross profit', 'gross income', 'الربح الإجمالي', 'إجمالي الربح'],
    'operating_income': ['operating income', 'operating profit', 'دخل تشغيلي', 'الدخل التشغيلي',
                         'الربح التشغيلي'],
    'net_income': ['net income', 'net profit', 'صافي الدخل', 'صافي الربح', 'الربح الصافي'],
    'ebit': ['ebit', 'earnings before interest and taxes'],
    'interest_expense': ['interest expense', 'مصاريف الفوائد'],
    'operating_cash_flow': ['operating cash flow', 'cash from operations', 'التدفق النقدي التشغيلي'],
    'capital_expenditures': ['capital expenditures', 'capex', 'نفقات رأسمالية'],
    'cash': ['cash', 'cash and cash equivalents', 'النقد', 'النقد ومعادلاته'],
    'inventory': ['inventory', 'stock', 'المخزون', 'المخزن'],
    'accounts_receivable': ['accounts receivable', 'receivables', 'الذمم المدينة', 'المدينون'],
    'accounts_payable': ['accounts payable', 'payables', 'الذمم الدائنة', 'الدائنون'],
    'retained_earnings': ['retained earnings', 'الأرباح المبقاة'],
    'depreciation': ['depreciation', 'الاستهلاك'],
}

# Model switches kept as lowercase text; every other field must be numeric
TEXT_FIELDS = ('option_type', 'exercise_style')

_CURRENCY_AND_SPACING = re.compile(r"[,\s$£€¥₹٬]")
_LEADING_NUMBER = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9_]*$")
_ARABIC_DIGITS = str.maketrans('٠١٢٣٤٥٦٧٨٩٫', '0123456789.')


def normalize_label(label: str) -> str:
    return re.sub(r"\s+", " ", str(label).replace('_', ' ').replace('-', ' ')).strip().casefold()


def parse_numeric_value(value: Any) -> Optional[float]:
    """Numbers pass through; strings lose separators and currency symbols.

    Accounting negatives "(1,200)" and Arabic-Indic digits are understood.
    Anything unparseable is None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    text = value.strip().translate(_ARABIC_DIGITS)
    negative = text.startswith('(') and text.endswith(')')
    if negative:
        text = text[1:-1]
    cleaned = _CURRENCY_AND_SPACING.sub('', text)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    number = float(match.group(0))
    return -number if negative else number


def _is_number(value: Any) -> bool:
    return isinstance(value, float) and math.isfinite(value)


class FieldNormalizer:
    """Builds the FinancialDataRecord for a run from raw extracted labels."""

    # (derived field, minuend, subtrahend)
    DERIVATIONS = (
        ('working_capital', 'current_assets', 'current_liabilities'),
        ('gross_profit', 'revenue', 'cogs'),
        ('free_cash_flow', 'operating_cash_flow', 'capital_expenditures'),
    )

    def __init__(self, synonyms: Optional[Mapping[str, Iterable[str]]] = None):
        self.synonyms = dict(synonyms or FIELD_SYNONYMS)
        self._index: Dict[str, str] = {}
        for field_name, labels in self.synonyms.items():
            for label in (field_name, *labels):
                self._index.setdefault(normalize_label(label), field_name)

    def canonical_field(self, label: str) -> Optional[str]:
        """Canonical name for label; snake_case labels not in the index pass through."""
        field_name = self._index.get(normalize_label(label))
        if field_name is not None:
            return field_name
        stripped = str(label).strip()
        return stripped if _SNAKE_CASE.match(stripped) else None

    def _parse(self, field_name: str, value: Any) -> Any:
        if field_name in TEXT_FIELDS:
            if not isinstance(value, str):
                return None
            return value.strip().lower() or None
        if isinstance(value, (list, tuple)):
            parsed = [parse_numeric_value(v) for v in value]
            return None if any(v is None for v in parsed) else parsed
        return parse_numeric_value(value)

    def normalize(self, extracted: Mapping[str, Any]) -> Dict[str, Any]:
        """Canonical field -> parsed value. The first label seen for a field wins."""
        fields: Dict[str, Any] = {}
        skipped: List[str] = []
        for label, raw in (extracted or {}).items():
            field_name = self.canonical_field(label)
            if field_name is None:
                skipped.append(str(label))
                continue
            if field_name in fields:
                continue
            value = self._parse(field_name, raw)
            if value is not None:
                fields[field_name] = value
        if skipped:
            logger.debug("Unmapped labels ignored", extra={"labels": skipped})
        return fields

    def build_record(
        self,
        extractions: Iterable[Mapping[str, Any]],
        supplied: Optional[Mapping[str, Any]] = None,
    ) -> FinancialDataRecord:
        """Merge extracted documents (earlier documents win) and caller-supplied
        fields (which override extraction), then add derived fields."""
        fields: Dict[str, Any] = {}
        for extracted in extractions:
            for name, value in self.normalize(extracted).items():
                fields.setdefault(name, value)
        fields.update(self.normalize(supplied or {}))

        record = FinancialDataRecord(fields)
        record = record.with_derived(**self.derived_fields(record))
        logger.info("Financial data normalized", extra={"fields": len(record)})
        return record

    @classmethod
    def derived_fields(cls, record: FinancialDataRecord) -> Dict[str, float]:
        """Working capital, gross profit and free cash flow, only when both inputs are numbers."""
        derived: Dict[str, float] = {}
        for target, minuend, subtrahend in cls.DERIVATIONS:
            left, right = record.get(minuend), record.get(subtrahend)
            if _is_number(left) and _is_number(right):
                derived[target] = left - right
        return derived
