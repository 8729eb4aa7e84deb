import logging
import dataclasses
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from finengine.core.types import AnalysisTypeSelection, CalculationBatch, FinancialDataRecord
from finengine.calculators.registry import DEFAULT_REGISTRY, MetricRegistry

logger = logging.getLogger(__name__)


class MetricDispatcher:
    """Resolve requested metrics, run each one in isolation and collect a batch.

    A metric that cannot be resolved or that raises is recorded in
    ``batch.errors`` and the remaining selections still run.
    """

    def __init__(
        self,
        registry: Optional[MetricRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize dispatcher.

        Args:
            registry: Metric registry (default: the validated module-level registry)
            clock: Optional callable returning the batch timestamp, for reproducible output
        """
        self.registry = registry or DEFAULT_REGISTRY
        self._clock = clock or datetime.now

    @staticmethod
    def _unique(selections: Iterable[AnalysisTypeSelection]) -> List[AnalysisTypeSelection]:
        """First selection per name; results are keyed by name, so repeats are dropped."""
        unique: Dict[str, AnalysisTypeSelection] = {}
        for selection in selections:
            if selection.name_en in unique:
                logger.warning("Duplicate metric selection ignored", extra={"metric": selection.name_en})
                continue
            unique[selection.name_en] = selection
        return list(unique.values())

    def unresolved(self, selections: Iterable[AnalysisTypeSelection]) -> List[str]:
        """Names in selections that the registry does not know."""
        return [s.name_en for s in selections if not self.registry.is_supported(s.name_en)]

    def dispatch(self, record: FinancialDataRecord, selections: Iterable[AnalysisTypeSelection]) -> CalculationBatch:
        selections = self._unique(selections)
        batch = CalculationBatch(timestamp=self._clock().isoformat(), requested=len(selections))

        for selection in selections:
            name = selection.name_en
            metric_id = self.registry.resolve(name)
            if metric_id is None:
                logger.warning("Calculation method not found", extra={"metric": name})
                batch.errors.append(f"Calculation method not implemented for: {name}")
                continue
            try:
                result = self.registry.function(metric_id)(record)
            except Exception as e:
                logger.error("Metric calculation failed", extra={"metric": name, "error": str(e)}, exc_info=True)
                batch.errors.append(f"{name}: {e}")
                continue
            batch.results[name] = dataclasses.replace(
                result,
                name_ar=selection.name_ar,
                description_en=selection.description_en,
                description_ar=selection.description_ar,
            )

        logger.info(
            "Completed calculations",
            extra={
                "requested": batch.requested,
                "calculated": batch.total_calculated,
                "errors": batch.total_errors,
                "success_rate": batch.success_rate,
            },
        )
        return batch
