from loguru import logger
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import MAX_RAW_SCORE, clamp, round_half_up
from riskhealth.models.health import HealthScoreBreakdown
from riskhealth.models.risk import Risk, RiskLevel, RiskStatus

# Penalty points when every risk in the set has the attribute.
LEVEL_WEIGHTS = {
    RiskLevel.CRITICAL.value: 50,
    RiskLevel.HIGH.value: 30,
    RiskLevel.MEDIUM.value: 10,
}
UNASSIGNED_WEIGHT = 25
NO_DEADLINE_WEIGHT = 15
STAGNATION_WEIGHT = 10

QUALITY_BONUS_CAP = 10
EFFICIENCY_BONUS = 15
EFFICIENCY_BONUS_THRESHOLD = 50
MITIGATED_BONUS = 10


class HealthScoreEngine:
    BASE = 60

    def __init__(self, risks: list[Risk]):
        self.risks = risks

    def calculate(self) -> HealthScoreBreakdown:
        if not self.risks:
            return HealthScoreBreakdown(base_score=self.BASE, final_score=self.BASE)

        total = len(self.risks)
        level_points = sum(LEVEL_WEIGHTS.get(r.nivel_risco, 0) for r in self.risks)
        level = round_half_up(level_points / total)
        assignment = round_half_up(self._count(lambda r: not r.has_owner) * UNASSIGNED_WEIGHT / total)
        deadline = round_half_up(self._count(lambda r: not r.has_deadline) * NO_DEADLINE_WEIGHT / total)
        stagnation = round_half_up(
            self._count(lambda r: r.status == RiskStatus.IDENTIFIED) * STAGNATION_WEIGHT / total
        )
        bonus = self._mitigation_bonus(total)

        final = clamp(
            round_half_up(self.BASE - level - assignment - deadline - stagnation + bonus),
            0, MAX_RAW_SCORE,
        )
        logger.debug(
            f"Health score: {final} (level={level}, assignment={assignment}, "
            f"deadline={deadline}, stagnation={stagnation}, bonus={bonus:.2f}, n={total})"
        )
        return HealthScoreBreakdown(
            base_score=self.BASE,
            risk_level_penalty=level + assignment + deadline + stagnation,
            assignment_penalty=assignment,
            deadline_penalty=deadline,
            mitigation_bonus=bonus,
            final_score=final,
            level_penalty=level,
            stagnation_penalty=stagnation,
        )

    def _count(self, predicate) -> int:
        return sum(1 for r in self.risks if predicate(r))

    def _mitigation_bonus(self, total):
        metrics = calculate_mitigation_metrics(self.risks)
        bonus = min(QUALITY_BONUS_CAP, metrics.action_quality_score * 10)
        if metrics.mitigation_efficiency > EFFICIENCY_BONUS_THRESHOLD:
            bonus += round_half_up(metrics.mitigation_efficiency / 100 * EFFICIENCY_BONUS)
        bonus += round_half_up(metrics.effectively_mitigated / total * MITIGATED_BONUS)
        return bonus


def calculate_health_score(risks: list[Risk]) -> HealthScoreBreakdown:
    """Composite 0-85 health score for a set of risks.

    Empty input scores the base 60 with no penalty or bonus. See
    ``HealthScoreBreakdown`` for the combined meaning of ``risk_level_penalty``.
    """
    return HealthScoreEngine(risks).calculate()
