from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field
from riskhealth.models.health import (
    CategoryHealthScore, HealthScoreBreakdown, MitigationMetrics, Priority, Trend,
)
from riskhealth.models.narrative import NarrativeAnalysis

class Badge(BaseModel):
    key: str
    text: str

class HeatmapCell(BaseModel):
    level: str
    count: int = 0
    total: int = 0
    intensity: str = "none"

class HeatmapRow(BaseModel):
    category: str
    total: int = 0
    cells: list[HeatmapCell] = Field(default_factory=list)

class RadarPoint(BaseModel):
    category: str
    score: int
    benchmark: int

class HealthCheckReport(BaseModel):
    scope: str
    project: Optional[str] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_risks: int = 0
    breakdown: HealthScoreBreakdown
    mitigation_metrics: MitigationMetrics
    category_scores: list[CategoryHealthScore] = Field(default_factory=list)
    weighted_score: int
    raw_score: int
    normalized_score: int
    score_label: str
    suggestions: list[str] = Field(default_factory=list)
    badges: list[Badge] = Field(default_factory=list)
    heatmap: list[HeatmapRow] = Field(default_factory=list)
    radar: list[RadarPoint] = Field(default_factory=list)
    narrative: NarrativeAnalysis

    @property
    def critical_categories(self):
        return [c for c in self.category_scores if c.priority == Priority.CRITICAL]

    @property
    def declining_categories(self):
        return [c for c in self.category_scores if c.trend == Trend.DECLINING]
