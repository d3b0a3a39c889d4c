from riskhealth.analyzers.suggestion_analyzer import generate_proactive_suggestions
from riskhealth.core.benchmarks import CategoryBenchmarks, get_category_benchmark
from riskhealth.core.category_engine import (
    calculate_category_health_scores, calculate_weighted_overall_score,
)
from riskhealth.core.health_engine import calculate_health_score
from riskhealth.core.mitigation import (
    analyze_action_quality, calculate_mitigation_metrics, calculate_mitigation_progress,
)
from riskhealth.models.risk import Risk
from riskhealth.services.narrative import generate_complete_analysis

__version__ = "1.0.0"

__all__ = [
    "Risk",
    "CategoryBenchmarks",
    "analyze_action_quality",
    "calculate_mitigation_progress",
    "calculate_mitigation_metrics",
    "calculate_health_score",
    "get_category_benchmark",
    "calculate_category_health_scores",
    "calculate_weighted_overall_score",
    "generate_proactive_suggestions",
    "generate_complete_analysis",
]
