from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from riskhealth.models.risk import Risk, RiskLevel

class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"

class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class MitigationMetrics(BaseModel):
    risks_with_actions: int = 0
    risks_in_progress: int = 0
    effectively_mitigated: int = 0
    mitigation_efficiency: float = 0.0
    action_quality_score: float = 0.0

    @property
    def risks_under_treatment(self) -> int:
        return self.risks_in_progress + self.effectively_mitigated

class HealthScoreBreakdown(BaseModel):
    """Composite health score and the terms that produced it.

    ``risk_level_penalty`` is the *combined* penalty: level + assignment +
    deadline + stagnation. ``assignment_penalty`` and ``deadline_penalty`` are
    therefore counted inside it as well as exposed on their own; the pure
    level and stagnation terms are available as ``level_penalty`` and
    ``stagnation_penalty``. Do not subtract the fields from each other
    expecting disjoint terms.
    """
    base_score: int = 60
    risk_level_penalty: int = 0
    assignment_penalty: int = 0
    deadline_penalty: int = 0
    mitigation_bonus: float = 0
    final_score: int = 60
    level_penalty: int = 0
    stagnation_penalty: int = 0

class CategoryBenchmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: int
    good: int
    acceptable: int
    weight: float = Field(ge=0)

class CategoryHealthScore(BaseModel):
    category: str
    risks: list[Risk] = Field(default_factory=list)
    health_score: HealthScoreBreakdown
    mitigation_metrics: MitigationMetrics
    category_weight: float
    benchmark_score: int
    insights: list[str] = Field(default_factory=list)
    trend: Trend = Trend.STABLE
    priority: Priority = Priority.LOW

    @property
    def critical_count(self) -> int:
        return sum(1 for r in self.risks if r.nivel_risco == RiskLevel.CRITICAL)
