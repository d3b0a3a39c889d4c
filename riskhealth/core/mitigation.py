from riskhealth.models.health import MitigationMetrics
from riskhealth.models.risk import Risk, RiskStatus, Strategy

# Evaluated top-down, first match wins.
QUALITY_LADDER = (
    (lambda r: r.plan_length >= 500 and r.has_owner and r.has_deadline
     and bool(r.estrategia) and r.estrategia != Strategy.ACCEPT, 1.0),   # excellent
    (lambda r: r.plan_length >= 300 and r.has_owner and r.has_deadline, 0.6),  # detailed
    (lambda r: r.plan_length >= 150 and r.has_owner, 0.3),               # adequate
    (lambda r: r.plan_length >= 50, 0.1),                                # basic
)

PROGRESS_BY_STATUS = {
    RiskStatus.IDENTIFIED.value: 0.0,
    RiskStatus.UNDER_ANALYSIS.value: 0.1,
    RiskStatus.IN_PROGRESS.value: 0.4,
    RiskStatus.MONITORING.value: 0.7,
    RiskStatus.MITIGATED.value: 1.0,
    RiskStatus.ELIMINATED.value: 1.0,
}

IN_PROGRESS_STATUSES = (RiskStatus.IN_PROGRESS, RiskStatus.MONITORING)
RESOLVED_STATUSES = (RiskStatus.MITIGATED, RiskStatus.ELIMINATED)
MIN_ACTION_LENGTH = 20


def analyze_action_quality(risk: Risk) -> float:
    """Score a mitigation plan on the discrete ladder {1.0, 0.6, 0.3, 0.1, 0.0}."""
    for predicate, score in QUALITY_LADDER:
        if predicate(risk):
            return score
    return 0.0


def calculate_mitigation_progress(risk: Risk) -> float:
    # Not used by calculate_mitigation_metrics: efficiency counts statuses only.
    return PROGRESS_BY_STATUS.get(risk.status, 0.0)


def calculate_mitigation_metrics(risks: list[Risk]) -> MitigationMetrics:
    if not risks:
        return MitigationMetrics()

    total = len(risks)
    with_actions = sum(1 for r in risks if r.plan_length > MIN_ACTION_LENGTH)
    in_progress = sum(1 for r in risks if r.status in IN_PROGRESS_STATUSES)
    mitigated = sum(1 for r in risks if r.status in RESOLVED_STATUSES)
    quality = sum(analyze_action_quality(r) for r in risks) / total

    return MitigationMetrics(
        risks_with_actions=with_actions,
        risks_in_progress=in_progress,
        effectively_mitigated=mitigated,
        mitigation_efficiency=(in_progress + mitigated) / total * 100,
        action_quality_score=quality,
    )
