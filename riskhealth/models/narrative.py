from enum import Enum
from pydantic import BaseModel, Field

class IssueSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

class ScoreExplanation(BaseModel):
    label: str
    range: str
    description: str
    implication: str

class CriticalIssue(BaseModel):
    icon: str
    severity: IssueSeverity
    text: str

class Strength(BaseModel):
    icon: str
    text: str

class RecommendationPlan(BaseModel):
    urgent: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    medium_term: list[str] = Field(default_factory=list)
    continuous: list[str] = Field(default_factory=list)

class NarrativeAnalysis(BaseModel):
    executive_summary: str
    score_explanation: ScoreExplanation
    critical_issues: list[CriticalIssue] = Field(default_factory=list)
    strengths: list[Strength] = Field(default_factory=list)
    recommendations: RecommendationPlan = Field(default_factory=RecommendationPlan)
