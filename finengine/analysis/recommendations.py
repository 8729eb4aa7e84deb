from typing import Any, Dict, Mapping, Optional

from finengine.core.config import ACTION_PERFORMANCE, PRIORITY_INTERPRETATIONS
from finengine.core.types import BenchmarkComparison, CategorySummary


def build_recommendations(
    summary: Mapping[str, CategorySummary],
    benchmarking: Mapping[str, BenchmarkComparison],
    ai_recommendations: Optional[Any] = None,
) -> Dict[str, Any]:
    """Priority areas from weak categories, action items from below-median metrics.

    AI recommendations are carried through untouched under ``ai_insights``.
    """
    priority_areas = [
        {
            'category': category,
            'issue': f"{category} ratios need improvement",
            'priority': 'high',
        }
        for category, s in summary.items()
        if s.representative_interpretation in PRIORITY_INTERPRETATIONS
    ]
    action_items = [
        {
            'metric': metric,
            'recommendation': f"Focus on improving {metric} to reach industry median",
            'current': comparison.company_value,
            'target': comparison.sector_median,
        }
        for metric, comparison in benchmarking.items()
        if comparison.performance == ACTION_PERFORMANCE
    ]
    return {
        'priority_areas': priority_areas,
        'action_items': action_items,
        'ai_insights': ai_recommendations,
    }
