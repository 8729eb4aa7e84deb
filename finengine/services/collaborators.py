"""Interfaces of the external systems the pipeline talks to.

Implementations live outside this package (HTTP clients, LLM wrappers,
databases). Any object with matching methods can be passed to
AnalysisPipeline.
"""
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from finengine.core.types import (
    AgentResponse,
    AnalysisTypeSelection,
    DocumentExtraction,
    FinancialDataRecord,
    RunConfiguration,
)


class DocumentProcessor(Protocol):
    def process(self, document: Any) -> DocumentExtraction:
        """Extract labelled values and tables from one uploaded document."""
        ...


class ExternalDataService(Protocol):
    """Market data provider. Methods may raise; the pipeline degrades per call."""

    def get_market_data(self, symbol: str) -> Optional[Dict[str, Any]]:
        ...

    def get_sector_benchmarks(self, sector_id: str) -> Optional[Dict[str, Dict[str, Any]]]:
        ...

    def get_economic_indicators(self, country: str) -> Optional[Dict[str, Any]]:
        ...

    def get_industry_trends(self, sector_code: str) -> Optional[List[Dict[str, Any]]]:
        ...


class AIAgents(Protocol):
    """LLM-backed analysts. Every call reports its own monetary cost."""

    def analyze_financials(
        self, record: FinancialDataRecord, selections: Sequence[AnalysisTypeSelection], context: Mapping[str, Any]
    ) -> AgentResponse:
        ...

    def assess_risks(self, record: FinancialDataRecord, context: Mapping[str, Any]) -> AgentResponse:
        ...

    def enrich_market(self, context: Mapping[str, Any]) -> AgentResponse:
        ...

    def generate_report_content(self, context: Mapping[str, Any]) -> AgentResponse:
        ...


class RunConfigurationSource(Protocol):
    def load(self, run_id: str) -> Optional[RunConfiguration]:
        ...


class RunSnapshotStore(Protocol):
    def save(self, snapshot: Dict[str, Any]) -> None:
        ...
