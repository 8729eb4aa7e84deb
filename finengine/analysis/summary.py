from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from finengine.core.types import CategorySummary, MetricResult

# Fixed summary buckets, in report order
SUMMARY_BUCKETS = (
    'liquidity', 'leverage', 'profitability', 'activity', 'market', 'cash_flow',
    'intermediate', 'risk', 'advanced', 'banking', 'insurance',
)


def bucket_key(category: str) -> str:
    return str(category).strip().lower().replace(' ', '_').replace('-', '_')


def count_interpretations(labels: Iterable[str]) -> List[Tuple[str, int]]:
    """(label, count) pairs in first-seen order."""
    counts: Dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    return list(counts.items())


def most_common_interpretation(counts: List[Tuple[str, int]]) -> Optional[str]:
    """Highest count wins; ties go to the label seen first."""
    if not counts:
        return None
    best_label, best_count = counts[0]
    for label, count in counts[1:]:
        if count > best_count:
            best_label, best_count = label, count
    return best_label


def summarize(results: Mapping[str, MetricResult]) -> Dict[str, CategorySummary]:
    """Group results by category and pick each bucket's representative interpretation.

    Every bucket is present; an empty bucket has no representative.
    Categories outside the fixed buckets are not summarized.
    """
    summaries = {bucket: CategorySummary(category=bucket) for bucket in SUMMARY_BUCKETS}
    for name, result in results.items():
        summary = summaries.get(bucket_key(result.category))
        if summary is None:
            continue
        summary.ratios.append({
            'name': name,
            'value': result.value,
            'interpretation': result.interpretation,
        })

    for summary in summaries.values():
        summary.interpretation_counts = count_interpretations(r['interpretation'] for r in summary.ratios)
        summary.representative_interpretation = most_common_interpretation(summary.interpretation_counts)
    return summaries
