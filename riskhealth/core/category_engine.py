"""Per-category health scores and the weighted organization score.

Risks are partitioned by ``categoria`` as found in the input, so categories
the benchmark table does not list still get their own entry; they borrow the
fallback benchmark row for thresholds and weight.
"""
from typing import NamedTuple, Optional
from loguru import logger
from riskhealth.core.benchmarks import DEFAULT_TABLE, CategoryBenchmarks
from riskhealth.core.health_engine import HealthScoreEngine
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import round_half_up
from riskhealth.models.health import (
    CategoryBenchmark, CategoryHealthScore,
    MitigationMetrics, Priority, Trend,
)
from riskhealth.models.risk import Risk, RiskCategory, RiskLevel, RiskStatus, Strategy

DEFAULT_OVERALL_SCORE = 60
MAX_INSIGHTS = 2

DECLINING_CRITICAL_RATIO = 0.4
DECLINING_HIGH_RATIO = 0.6
IMPROVING_EFFICIENCY = 70
IMPROVING_CRITICAL_RATIO = 0.2


class CategoryStats(NamedTuple):
    total: int
    critical: int
    high_priority: int
    unassigned: int
    without_deadline: int
    identified: int
    passive: int
    efficiency: float
    quality: float
    final_score: int
    target: int

    @classmethod
    def collect(cls, risks, metrics, score, benchmark):
        return cls(
            total=len(risks),
            critical=sum(1 for r in risks if r.nivel_risco == RiskLevel.CRITICAL),
            high_priority=sum(1 for r in risks if r.is_high_priority),
            unassigned=sum(1 for r in risks if not r.has_owner),
            without_deadline=sum(1 for r in risks if not r.has_deadline),
            identified=sum(1 for r in risks if r.status == RiskStatus.IDENTIFIED),
            passive=sum(1 for r in risks if r.estrategia == Strategy.ACCEPT),
            efficiency=metrics.mitigation_efficiency,
            quality=metrics.action_quality_score,
            final_score=score.final_score,
            target=benchmark.target,
        )


def _plural(n, singular, plural):
    return singular if n == 1 else plural


# (condition, message) pairs per category, checked in order.
INSIGHT_RULES = {
    RiskCategory.STRATEGIC.value: (
        (lambda s: s.critical > 0,
         lambda s: f"{s.critical} {_plural(s.critical, 'risco crítico pode', 'riscos críticos podem')} "
                   "comprometer objetivos estratégicos"),
        (lambda s: s.efficiency < 50,
         lambda s: f"Eficiência de mitigação de {round_half_up(s.efficiency)}% abaixo do esperado "
                   "para riscos estratégicos"),
        (lambda s: s.final_score >= s.target,
         lambda s: "Gestão de riscos estratégicos alinhada à meta"),
    ),
    RiskCategory.FINANCIAL.value: (
        (lambda s: s.unassigned > 0,
         lambda s: f"{s.unassigned} {_plural(s.unassigned, 'risco financeiro', 'riscos financeiros')} "
                   "sem responsável definido"),
        (lambda s: s.without_deadline > 0,
         lambda s: f"Definir prazos para {s.without_deadline} "
                   f"{_plural(s.without_deadline, 'risco financeiro', 'riscos financeiros')}"),
        (lambda s: s.quality >= 0.6,
         lambda s: "Planos de mitigação financeira bem documentados"),
    ),
    RiskCategory.OPERATIONAL.value: (
        (lambda s: s.identified > 0,
         lambda s: f"{s.identified} {_plural(s.identified, 'risco operacional', 'riscos operacionais')} "
                   "ainda sem tratamento iniciado"),
        (lambda s: s.quality < 0.3,
         lambda s: "Detalhar planos de ação operacionais com responsável e prazo"),
        (lambda s: s.efficiency >= IMPROVING_EFFICIENCY,
         lambda s: "Boa cadência de tratamento dos riscos operacionais"),
    ),
    RiskCategory.COMPLIANCE.value: (
        (lambda s: s.high_priority > 0,
         lambda s: f"{s.high_priority} "
                   f"{_plural(s.high_priority, 'risco de compliance prioritário exige', 'riscos de compliance prioritários exigem')} "
                   "atenção"),
        (lambda s: s.efficiency >= IMPROVING_EFFICIENCY,
         lambda s: "Boa cobertura de tratamento em compliance"),
    ),
    RiskCategory.REGULATORY.value: (
        (lambda s: s.without_deadline > 0,
         lambda s: f"{s.without_deadline} "
                   f"{_plural(s.without_deadline, 'risco regulatório sem prazo pode', 'riscos regulatórios sem prazo podem')} "
                   "gerar sanções"),
        (lambda s: s.passive > 0,
         lambda s: "Estratégia \"Aceitar\" em riscos regulatórios requer justificativa formal"),
    ),
}


def category_insights(category: str, stats: CategoryStats) -> list[str]:
    rules = INSIGHT_RULES.get(category, ())
    return [message(stats) for condition, message in rules if condition(stats)][:MAX_INSIGHTS]


def category_priority(final_score: int, benchmark: CategoryBenchmark) -> Priority:
    if final_score < benchmark.acceptable:
        return Priority.CRITICAL
    elif final_score < benchmark.good:
        return Priority.HIGH
    elif final_score < benchmark.target:
        return Priority.MEDIUM
    return Priority.LOW


def category_trend(risks: list[Risk], metrics: MitigationMetrics) -> Trend:
    if not risks:
        return Trend.STABLE
    total = len(risks)
    critical_ratio = sum(1 for r in risks if r.nivel_risco == RiskLevel.CRITICAL) / total
    high_ratio = sum(1 for r in risks if r.is_high_priority) / total
    if critical_ratio > DECLINING_CRITICAL_RATIO or high_ratio > DECLINING_HIGH_RATIO:
        return Trend.DECLINING
    if metrics.mitigation_efficiency > IMPROVING_EFFICIENCY and critical_ratio < IMPROVING_CRITICAL_RATIO:
        return Trend.IMPROVING
    return Trend.STABLE


def partition_by_category(risks: list[Risk]) -> dict[str, list[Risk]]:
    groups = {}
    for r in risks:
        groups.setdefault(r.categoria, []).append(r)
    return groups


class CategoryHealthEngine:
    def __init__(self, risks: list[Risk], benchmarks: Optional[CategoryBenchmarks] = None):
        self.risks = risks
        self.benchmarks = benchmarks or DEFAULT_TABLE

    def calculate(self) -> list[CategoryHealthScore]:
        scores = [self._score(category, items)
                  for category, items in partition_by_category(self.risks).items()]
        scores.sort(key=lambda c: c.category_weight, reverse=True)
        logger.debug(f"Category health computed for {len(scores)} categories.")
        return scores

    def _score(self, category, items) -> CategoryHealthScore:
        benchmark = self.benchmarks.get(category)
        if not self.benchmarks.is_known(category):
            logger.debug(f"No benchmark for '{category}', using '{self.benchmarks.fallback}'.")
        health = HealthScoreEngine(items).calculate()
        metrics = calculate_mitigation_metrics(items)
        stats = CategoryStats.collect(items, metrics, health, benchmark)
        return CategoryHealthScore(
            category=category,
            risks=list(items),
            health_score=health,
            mitigation_metrics=metrics,
            category_weight=benchmark.weight,
            benchmark_score=benchmark.target,
            insights=category_insights(category, stats),
            trend=category_trend(items, metrics),
            priority=category_priority(health.final_score, benchmark),
        )


def calculate_category_health_scores(risks: list[Risk],
                                     benchmarks: Optional[CategoryBenchmarks] = None
                                     ) -> list[CategoryHealthScore]:
    """One CategoryHealthScore per category present, heaviest weight first."""
    return CategoryHealthEngine(risks, benchmarks).calculate()


def calculate_weighted_overall_score(category_scores: list[CategoryHealthScore]) -> int:
    if not category_scores:
        return DEFAULT_OVERALL_SCORE
    total_weight = sum(c.category_weight for c in category_scores)
    if total_weight == 0:
        return DEFAULT_OVERALL_SCORE
    weighted = sum(c.health_score.final_score * c.category_weight for c in category_scores)
    return round_half_up(weighted / total_weight)
