import time
import logging
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Mapping, Optional

from finengine.core.config import AppConfig
from finengine.core.types import (
    AnalysisResult,
    AnalysisRun,
    FinancialDataRecord,
    RunConfiguration,
    STATUS_PENDING,
)
from finengine.analysis.summary import summarize
from finengine.analysis.charts import build_chart_data
from finengine.analysis.benchmarking import compare_to_benchmarks
from finengine.analysis.recommendations import build_recommendations
from finengine.orchestration.run_state import RunStateMachine
from finengine.orchestration.metric_dispatcher import MetricDispatcher
from finengine.services.field_normalizer import FieldNormalizer
from finengine.services.collaborators import (
    AIAgents,
    DocumentProcessor,
    ExternalDataService,
    RunConfigurationSource,
    RunSnapshotStore,
)

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """
    Drives one analysis run from configuration to recommendations.

    Pipeline stages:
    1. Load run configuration (fatal when missing)
    2. Document processing
    3. Financial extraction into a FinancialDataRecord
    4. External data (market, sector benchmarks, economy, industry) fetched concurrently
    5. Metric calculations and category summary
    6. AI analysis calls fetched concurrently, then report content
    7. Benchmark comparison and chart data
    8. Recommendations
    9. Completion

    Stages 2-8 degrade: a failure is recorded as "<Stage>: <message>" in
    run.errors and the next stage still runs. Cancellation is checked
    before every stage. A snapshot goes to the store after every status
    change and every stage.
    """

    TOTAL_STAGES = 9

    def __init__(
        self,
        config_source: RunConfigurationSource,
        snapshot_store: RunSnapshotStore,
        document_processor: Optional[DocumentProcessor] = None,
        external_data: Optional[ExternalDataService] = None,
        ai_agents: Optional[AIAgents] = None,
        dispatcher: Optional[MetricDispatcher] = None,
        normalizer: Optional[FieldNormalizer] = None,
        config: Optional[AppConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        timer: Optional[Callable[[], float]] = None,
    ):
        """Initialize pipeline with its collaborators.

        Args:
            config_source: Loads the RunConfiguration for a run id
            snapshot_store: Receives run snapshots
            document_processor: Optional document extractor; without one documents are skipped
            external_data: Optional market data service; without one enrichment is empty
            ai_agents: Optional AI agents; without them AI analysis is skipped
            dispatcher: Metric dispatcher (default: one over the module registry)
            normalizer: Field normalizer for extracted labels
            config: Optional AppConfig instance
            clock: Optional callable returning "now" for timestamps
            timer: Optional monotonic timer used for processing_time_ms
        """
        self.config_source = config_source
        self.snapshot_store = snapshot_store
        self.document_processor = document_processor
        self.external_data = external_data
        self.ai_agents = ai_agents
        self.config = config or AppConfig()
        self._clock = clock or datetime.now
        self._timer = timer or time.monotonic
        self.dispatcher = dispatcher or MetricDispatcher(clock=self._clock)
        self.normalizer = normalizer or FieldNormalizer()
        self.state = RunStateMachine(clock=self._clock)

    # --- lifecycle ---

    def create_run(self, run_id: str) -> AnalysisRun:
        run = AnalysisRun(run_id=run_id, created_at=self._clock().isoformat())
        self._snapshot(run)
        return run

    def run(self, run_id: str) -> AnalysisResult:
        """Create a run for run_id and execute it."""
        return self.execute(self.create_run(run_id))

    def cancel(self, run: AnalysisRun, reason: Optional[str] = None) -> AnalysisRun:
        """Cancel a pending or processing run.

        Raises:
            ValueError: If the run has already completed or failed
        """
        was_cancelled = run.is_cancelled
        self.state.cancel(run, reason)
        if not was_cancelled:
            self._snapshot(run)
        return run

    def execute(self, run: AnalysisRun) -> AnalysisResult:
        """Run every stage for a pending run and return the caller-facing result.

        Raises:
            ValueError: If the run is already processing, completed or failed
        """
        if run.is_cancelled:
            logger.info("Run cancelled before start", extra={"run_id": run.run_id})
            return AnalysisResult.from_run(run)
        if run.is_terminal:
            raise ValueError(f"Analysis {run.run_id} already finished with status {run.status}")
        if run.status != STATUS_PENDING:
            raise ValueError(f"Analysis {run.run_id} is already {run.status}")

        started = self._timer()
        self.state.start(run)
        self._snapshot(run)
        logger.info("Running analysis pipeline", extra={"run_id": run.run_id})

        try:
            self._execute_stages(run, started)
        except Exception as e:
            logger.error("Analysis pipeline failed", extra={"run_id": run.run_id, "error": str(e)}, exc_info=True)
            if not run.is_terminal:
                self._finish_time(run, started)
                self.state.fail(run, str(e))
                self._save_failure_snapshot(run)

        return AnalysisResult.from_run(run)

    # --- stages ---

    def _execute_stages(self, run: AnalysisRun, started: float) -> None:
        self._log_stage(run, 1, "Loading run configuration...")
        configuration = self.config_source.load(run.run_id)
        if configuration is None:
            self._finish_time(run, started)
            self.state.fail(run, f"Run configuration not found: {run.run_id}")
            self._snapshot(run)
            logger.error("Run configuration not found", extra={"run_id": run.run_id})
            return
        run.steps_completed.append('configuration')

        stages = [
            (2, "Processing documents...", [('document_processing', "Document Processing", self._process_documents)]),
            (3, "Extracting financial data...", [('financial_extraction', "Financial Extraction", self._extract_financial_data)]),
            (4, "Fetching external data...", [('external_data', "External Data", self._fetch_external_data)]),
            (5, "Running calculations...", [('calculations', "Calculations", self._run_calculations)]),
            (6, "Running AI analysis...", [('ai_analysis', "AI Analysis", self._run_ai_analysis)]),
            (7, "Benchmarking and charts...", [
                ('benchmarking', "Benchmarking", self._run_benchmarking),
                ('charts', "Charts", self._build_charts),
            ]),
            (8, "Building recommendations...", [('recommendations', "Recommendations", self._build_recommendations)]),
        ]
        for number, message, steps in stages:
            if run.is_cancelled:
                self._stop_cancelled(run, started)
                return
            self._log_stage(run, number, message)
            for step_name, label, step in steps:
                self._run_step(run, step_name, label, step, configuration)
            self._snapshot(run)

        if run.is_cancelled:
            self._stop_cancelled(run, started)
            return
        self._log_stage(run, 9, "Completing analysis...")
        self._finish_time(run, started)
        run.steps_completed.append('completion')
        self.state.complete(run)
        self._snapshot(run)
        logger.info("Pipeline completed", extra={
            "run_id": run.run_id,
            "processing_time_ms": run.processing_time_ms,
            "errors": len(run.errors),
            "total_cost": run.cost.total,
        })

    def _run_step(self, run: AnalysisRun, step_name: str, label: str, step: Callable, configuration: RunConfiguration) -> None:
        try:
            step(run, configuration)
            run.steps_completed.append(step_name)
        except Exception as e:
            logger.warning(
                "Stage failed",
                extra={"run_id": run.run_id, "stage": step_name, "error": str(e)},
                exc_info=True,
            )
            run.errors.append(f"{label}: {e}")

    def _process_documents(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        extractions: List[Dict[str, Any]] = []
        if configuration.documents and self.document_processor is None:
            raise RuntimeError("No document processor configured")
        for document in configuration.documents:
            extraction = self.document_processor.process(document)
            extractions.append(extraction.to_dict())
        run.document_processing = {
            'documents_processed': len(extractions),
            'extractions': extractions,
        }
        logger.info("Documents processed", extra={"run_id": run.run_id, "documents": len(extractions)})

    def _extract_financial_data(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        extractions = (run.document_processing or {}).get('extractions', [])
        run.financial_data = self.normalizer.build_record(
            (e.get('extracted_fields') or {} for e in extractions),
            configuration.financial_inputs,
        )

    def _fetch_external_data(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        fetches: Dict[str, Any] = {
            'market_data': None,
            'sector_benchmarks': None,
            'economic_indicators': None,
            'industry_trends': None,
        }
        if self.external_data is None:
            run.external_data = fetches
            return

        country = configuration.country or self.config.pipeline.default_country
        calls = {
            'market_data': (self.external_data.get_market_data, configuration.company_symbol),
            'sector_benchmarks': (self.external_data.get_sector_benchmarks, configuration.sector_id),
            'economic_indicators': (self.external_data.get_economic_indicators, country),
            'industry_trends': (self.external_data.get_industry_trends, configuration.sector_code),
        }
        calls = {name: call for name, call in calls.items() if call[1] is not None}

        errors: List[str] = []
        with ThreadPoolExecutor(max_workers=self.config.pipeline.max_workers) as executor:
            future_to_name = {executor.submit(fn, arg): name for name, (fn, arg) in calls.items()}
            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    fetches[name] = future.result()
                except Exception as e:
                    logger.warning("External fetch failed", extra={"run_id": run.run_id, "source": name, "error": str(e)})
                    errors.append(f"External Data: {name}: {e}")

        run.external_data = fetches
        run.errors.extend(sorted(errors))

    def _run_calculations(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        record = run.financial_data if run.financial_data is not None else FinancialDataRecord()
        unresolved = self.dispatcher.unresolved(configuration.selections)
        if unresolved:
            logger.warning("Unsupported metrics requested", extra={"run_id": run.run_id, "metrics": unresolved})
        batch = self.dispatcher.dispatch(record, configuration.selections)
        run.calculations = batch
        run.summary = summarize(batch.results)
        run.errors.extend(f"Calculations: {error}" for error in batch.errors)

    def _run_ai_analysis(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        if self.ai_agents is None:
            logger.debug("No AI agents configured", extra={"run_id": run.run_id})
            return

        record = run.financial_data if run.financial_data is not None else FinancialDataRecord()
        context = self._ai_context(run, configuration)
        calls = {
            'financial_analysis': lambda: self.ai_agents.analyze_financials(record, configuration.selections, context),
            'risk_assessment': lambda: self.ai_agents.assess_risks(record, context),
            'market_enrichment': lambda: self.ai_agents.enrich_market(context),
        }

        analysis: Dict[str, Any] = {}
        errors: List[str] = []
        with ThreadPoolExecutor(max_workers=self.config.pipeline.max_workers) as executor:
            future_to_name = {executor.submit(call): name for name, call in calls.items()}
            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    response = future.result()
                    run.cost.add(name, response.cost)
                    analysis[name] = response.content
                except Exception as e:
                    logger.warning("AI call failed", extra={"run_id": run.run_id, "agent": name, "error": str(e)})
                    analysis[name] = None
                    errors.append(f"AI Analysis: {name}: {e}")
        run.errors.extend(sorted(errors))

        report_context = dict(context)
        report_context.update(analysis)
        try:
            report = self.ai_agents.generate_report_content(report_context)
            run.cost.add('report_content', report.cost)
            analysis['report_content'] = report.content
        finally:
            run.ai_analysis = analysis
        logger.info("AI analysis complete", extra={"run_id": run.run_id, "total_cost": run.cost.total})

    def _ai_context(self, run: AnalysisRun, configuration: RunConfiguration) -> Dict[str, Any]:
        return {
            'run_id': run.run_id,
            'company_symbol': configuration.company_symbol,
            'language': configuration.language or self.config.pipeline.default_language,
            'calculations': run.calculations.to_dict()['results'] if run.calculations is not None else {},
            'summary': {k: v.to_dict() for k, v in (run.summary or {}).items()},
            'external_data': run.external_data or {},
        }

    def _run_benchmarking(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        results = run.calculations.results if run.calculations is not None else {}
        benchmarks = (run.external_data or {}).get('sector_benchmarks')
        run.benchmarking = compare_to_benchmarks(
            results,
            benchmarks,
            upper_ratio=self.config.pipeline.benchmark_upper_ratio,
            lower_ratio=self.config.pipeline.benchmark_lower_ratio,
        )

    def _build_charts(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        results = run.calculations.results if run.calculations is not None else {}
        run.charts = build_chart_data(
            results,
            run.benchmarking or {},
            (run.external_data or {}).get('market_data'),
        )

    def _build_recommendations(self, run: AnalysisRun, configuration: RunConfiguration) -> None:
        report = (run.ai_analysis or {}).get('report_content')
        ai_recommendations = report.get('recommendations') if isinstance(report, Mapping) else None
        run.recommendations = build_recommendations(run.summary or {}, run.benchmarking or {}, ai_recommendations)

    # --- helpers ---

    def _log_stage(self, run: AnalysisRun, number: int, message: str) -> None:
        logger.info(f"[{number}/{self.TOTAL_STAGES}] {message}", extra={"run_id": run.run_id, "stage": number})

    def _finish_time(self, run: AnalysisRun, started: float) -> None:
        run.processing_time_ms = int(round((self._timer() - started) * 1000))

    def _stop_cancelled(self, run: AnalysisRun, started: float) -> None:
        self._finish_time(run, started)
        self._snapshot(run)
        logger.info("Pipeline stopped after cancellation", extra={
            "run_id": run.run_id,
            "steps_completed": list(run.steps_completed),
        })

    def _snapshot(self, run: AnalysisRun) -> None:
        self.snapshot_store.save(run.to_dict())

    def _save_failure_snapshot(self, run: AnalysisRun) -> None:
        try:
            self._snapshot(run)
        except Exception:
            logger.error("Could not persist failed run", extra={"run_id": run.run_id}, exc_info=True)
