import math
from collections.abc import Mapping
from datetime import datetime
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, List, Dict, Any, Tuple, Iterator

# Interpretation constants shared by the classification engine and the metric library
INSUFFICIENT_DATA = "insufficient_data"
UNCLASSIFIED = "unclassified"

# Run lifecycle statuses
STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"
STATUS_CANCELLED = "cancelled"
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_ERROR, STATUS_CANCELLED)


def _freeze_value(value: Any) -> Any:
    """Normalize a record value: numbers to float, sequences to tuples of float."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise ValueError("Boolean values are not valid financial fields")
    if isinstance(value, (list, tuple)) or hasattr(value, 'tolist'):
        items = value.tolist() if hasattr(value, 'tolist') else value
        if not isinstance(items, list):
            return _freeze_value(items)
        return tuple(None if v is None else float(v) for v in items)
    return float(value)


class FinancialDataRecord(Mapping):
    """Read-only mapping of canonical field name to a number (or None).

    Series-valued model inputs (returns, cash flows, scenarios) are stored as
    tuples of floats; a few model switches (e.g. ``option_type``) are strings.
    Missing fields read as None.
    """

    def __init__(self, fields: Optional[Mapping] = None):
        frozen = {str(name): _freeze_value(value) for name, value in (fields or {}).items()}
        self._fields = MappingProxyType(frozen)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FinancialDataRecord({dict(self._fields)!r})"

    def has(self, name: str) -> bool:
        """True when the field is present with a non-null, finite value."""
        value = self._fields.get(name)
        if value is None:
            return False
        if isinstance(value, float):
            return math.isfinite(value)
        return True

    def with_derived(self, **derived: Any) -> 'FinancialDataRecord':
        """Return a new record with derived fields added; existing values win."""
        merged = dict(self._fields)
        for name, value in derived.items():
            if value is not None and not self.has(name):
                merged[name] = value
        return FinancialDataRecord(merged)

    def to_dict(self) -> Dict[str, Any]:
        return {k: (list(v) if isinstance(v, tuple) else v) for k, v in self._fields.items()}


@dataclass(frozen=True)
class AnalysisTypeSelection:
    """A metric requested by the caller, with optional localized labels."""
    name_en: str
    id: Optional[str] = None
    name_ar: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisTypeSelection':
        return cls(
            name_en=data['name_en'],
            id=data.get('id'),
            name_ar=data.get('name_ar'),
            description_en=data.get('description_en'),
            description_ar=data.get('description_ar'),
        )


@dataclass(frozen=True)
class MetricResult:
    """Value + interpretation for one metric. value None implies insufficient_data."""
    value: Optional[float]
    interpretation: str
    category: str
    subcategory: str
    components: Optional[Dict[str, Any]] = None
    name_ar: Optional[str] = None
    description_en: Optional[str] = None
    description_ar: Optional[str] = None

    def __post_init__(self):
        if self.value is None and self.interpretation != INSUFFICIENT_DATA:
            raise ValueError(f"Metric without a value must be '{INSUFFICIENT_DATA}', got '{self.interpretation}'")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "value": self.value,
            "interpretation": self.interpretation,
            "category": self.category,
            "subcategory": self.subcategory,
        }
        if self.components is not None:
            data["extra_components"] = dict(self.components)
        for label in ("name_ar", "description_en", "description_ar"):
            if getattr(self, label) is not None:
                data[label] = getattr(self, label)
        return data


@dataclass
class CalculationBatch:
    """Output of one dispatch: ordered results plus the errors for skipped metrics."""
    results: Dict[str, MetricResult] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    requested: int = 0

    @property
    def total_calculated(self) -> int:
        return len(self.results)

    @property
    def total_errors(self) -> int:
        return len(self.errors)

    @property
    def success_rate(self) -> float:
        if not self.requested:
            return 0.0
        return round(self.total_calculated / self.requested * 100, 1)

    @property
    def coverage(self) -> Dict[str, int]:
        return {
            "requested": self.requested,
            "calculated": self.total_calculated,
            "failed": self.total_errors,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": {name: result.to_dict() for name, result in self.results.items()},
            "errors": list(self.errors),
            "total_calculated": self.total_calculated,
            "total_errors": self.total_errors,
            "success_rate": self.success_rate,
            "coverage": self.coverage,
            "timestamp": self.timestamp,
        }


@dataclass
class CategorySummary:
    category: str
    ratios: List[Dict[str, Any]] = field(default_factory=list)
    interpretation_counts: List[Tuple[str, int]] = field(default_factory=list)
    representative_interpretation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "ratios": [dict(r) for r in self.ratios],
            "interpretation_counts": [[label, count] for label, count in self.interpretation_counts],
            "representative_interpretation": self.representative_interpretation,
        }


@dataclass
class BenchmarkComparison:
    company_value: Optional[float]
    sector_median: Optional[float]
    sector_p25: Optional[float] = None
    sector_p75: Optional[float] = None
    performance: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company_value": self.company_value,
            "sector_median": self.sector_median,
            "sector_p25": self.sector_p25,
            "sector_p75": self.sector_p75,
            "performance": self.performance,
        }


@dataclass
class CostAccumulator:
    """Monetary cost of the AI calls made for a single run."""
    total: float = 0.0
    breakdown: Dict[str, float] = field(default_factory=dict)

    def add(self, source: str, amount: Optional[float]) -> float:
        amount = float(amount or 0.0)
        if amount < 0:
            raise ValueError(f"Cost for {source} cannot be negative: {amount}")
        self.breakdown[source] = self.breakdown.get(source, 0.0) + amount
        self.total += amount
        return self.total

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "breakdown": dict(self.breakdown)}


# --- Collaborator payloads
@dataclass
class DocumentExtraction:
    """Raw output of the document processor for one document."""
    extracted_fields: Dict[str, Any] = field(default_factory=dict)
    tables: List[Any] = field(default_factory=list)
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extracted_fields": dict(self.extracted_fields),
            "tables": list(self.tables),
            "confidence": self.confidence,
        }


@dataclass
class AgentResponse:
    """Free-form AI output plus what the call cost."""
    content: Any = None
    cost: float = 0.0
    model: str = ""


@dataclass
class RunConfiguration:
    """Everything the pipeline needs to know about a requested analysis."""
    run_id: str
    selections: Tuple[AnalysisTypeSelection, ...] = ()
    documents: List[Any] = field(default_factory=list)
    financial_inputs: Dict[str, Any] = field(default_factory=dict)
    company_symbol: Optional[str] = None
    sector_id: Optional[str] = None
    sector_code: Optional[str] = None
    country: Optional[str] = None
    language: str = "en"

    def __post_init__(self):
        self.selections = tuple(
            s if isinstance(s, AnalysisTypeSelection) else AnalysisTypeSelection.from_dict(s)
            for s in self.selections
        )


@dataclass
class AnalysisRun:
    """Mutable state of one analysis run; snapshots go to persistence."""
    run_id: str
    status: str = STATUS_PENDING
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    processing_started_at: Optional[str] = None
    processing_completed_at: Optional[str] = None
    error_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    error_message: Optional[str] = None
    cancellation_reason: Optional[str] = None
    processing_time_ms: Optional[int] = None

    document_processing: Optional[Dict[str, Any]] = None
    financial_data: Optional[FinancialDataRecord] = None
    external_data: Optional[Dict[str, Any]] = None
    calculations: Optional[CalculationBatch] = None
    summary: Optional[Dict[str, CategorySummary]] = None
    ai_analysis: Optional[Dict[str, Any]] = None
    benchmarking: Optional[Dict[str, BenchmarkComparison]] = None
    charts: Optional[Dict[str, Any]] = None
    recommendations: Optional[Dict[str, Any]] = None

    steps_completed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    cost: CostAccumulator = field(default_factory=CostAccumulator)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable snapshot of the run."""
        return {
            "run_id": self.run_id,
            "status": self.status,
            "created_at": self.created_at,
            "processing_started_at": self.processing_started_at,
            "processing_completed_at": self.processing_completed_at,
            "error_at": self.error_at,
            "error_message": self.error_message,
            "cancelled_at": self.cancelled_at,
            "cancellation_reason": self.cancellation_reason,
            "processing_time_ms": self.processing_time_ms,
            "document_processing": self.document_processing,
            "financial_data": self.financial_data.to_dict() if self.financial_data is not None else None,
            "external_data": self.external_data,
            "calculations": self.calculations.to_dict() if self.calculations is not None else None,
            "summary": {k: v.to_dict() for k, v in self.summary.items()} if self.summary is not None else None,
            "ai_analysis": self.ai_analysis,
            "benchmarking": {k: v.to_dict() for k, v in self.benchmarking.items()} if self.benchmarking is not None else None,
            "charts": self.charts,
            "recommendations": self.recommendations,
            "steps_completed": list(self.steps_completed),
            "errors": list(self.errors),
            "costs": self.cost.to_dict(),
        }


@dataclass
class AnalysisResult:
    """Caller-facing outcome of a run."""
    run_id: str
    status: str
    results: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    summary: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    total_cost: float = 0.0
    processing_time_ms: Optional[int] = None
    benchmarking: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    recommendations: Dict[str, Any] = field(default_factory=dict)
    charts: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_run(cls, run: AnalysisRun) -> 'AnalysisResult':
        snapshot = run.to_dict()
        calculations = snapshot["calculations"] or {}
        return cls(
            run_id=run.run_id,
            status=run.status,
            results=calculations.get("results", {}),
            summary=snapshot["summary"] or {},
            errors=list(run.errors),
            total_cost=run.cost.total,
            processing_time_ms=run.processing_time_ms,
            benchmarking=snapshot["benchmarking"] or {},
            recommendations=run.recommendations or {},
            charts=run.charts or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status,
            "results": self.results,
            "summary": self.summary,
            "errors": list(self.errors),
            "total_cost": self.total_cost,
            "processing_time_ms": self.processing_time_ms,
            "benchmarking": self.benchmarking,
            "recommendations": self.recommendations,
            "charts": self.charts,
        }
