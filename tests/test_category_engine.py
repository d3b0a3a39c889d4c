import pytest

from riskhealth.core.benchmarks import DEFAULT_TABLE, CategoryBenchmarks
from riskhealth.core.category_engine import (
    calculate_category_health_scores,
    calculate_weighted_overall_score,
    category_priority,
    category_trend,
)
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import round_half_up
from riskhealth.models.health import (
    CategoryBenchmark, CategoryHealthScore, HealthScoreBreakdown, MitigationMetrics,
    Priority, Trend,
)
from tests.conftest import make_risk, well_managed


@pytest.fixture
def mixed_register():
    return [
        make_risk(categoria="Compliance", nivel_risco="Alto"),
        make_risk(categoria="Tecnologia", nivel_risco="Médio"),
        make_risk(categoria="Estratégico", nivel_risco="Crítico", status="Identificado"),
        make_risk(categoria="Operacional"),
        well_managed(categoria="Estratégico"),
        well_managed(categoria="Compliance"),
        make_risk(categoria="Tecnologia", status="Em Andamento"),
    ]


def test_partition_is_complete_and_disjoint(mixed_register):
    scores = calculate_category_health_scores(mixed_register)

    assert sum(len(c.risks) for c in scores) == len(mixed_register)
    ids = [r.id for c in scores for r in c.risks]
    assert len(ids) == len(set(ids))
    assert {c.category for c in scores} == {"Compliance", "Tecnologia", "Estratégico", "Operacional"}


def test_regrouping_reconstructs_partition(mixed_register):
    expected = {}
    for r in mixed_register:
        expected.setdefault(r.categoria, set()).add(r.id)

    scores = calculate_category_health_scores(mixed_register)
    for c in scores:
        assert all(r.categoria == c.category for r in c.risks)
        assert {r.id for r in c.risks} == expected[c.category]


def test_sorted_by_weight_with_stable_ties(mixed_register):
    scores = calculate_category_health_scores(mixed_register)
    # Tecnologia borrows the Operacional weight (0.20) and appears first.
    assert [c.category for c in scores] == ["Estratégico", "Tecnologia", "Operacional", "Compliance"]
    weights = [c.category_weight for c in scores]
    assert weights == sorted(weights, reverse=True)


def test_unknown_category_keeps_name_and_gets_no_insights(mixed_register):
    tech = next(c for c in calculate_category_health_scores(mixed_register) if c.category == "Tecnologia")
    operational = DEFAULT_TABLE.get("Operacional")
    assert tech.category_weight == operational.weight
    assert tech.benchmark_score == operational.target
    assert tech.insights == []


def test_category_scores_use_their_own_partition(mixed_register):
    for c in calculate_category_health_scores(mixed_register):
        assert c.mitigation_metrics == calculate_mitigation_metrics(c.risks)


def test_aggregation_is_idempotent(mixed_register):
    first = [c.model_dump() for c in calculate_category_health_scores(mixed_register)]
    second = [c.model_dump() for c in calculate_category_health_scores(mixed_register)]
    assert first == second


def test_empty_register_has_no_categories():
    assert calculate_category_health_scores([]) == []


def test_strategic_insights_are_capped():
    risks = [make_risk(categoria="Estratégico", nivel_risco="Crítico", status="Identificado")]
    c = calculate_category_health_scores(risks)[0]
    assert len(c.insights) == 2
    assert c.insights[0].startswith("1 risco crítico pode comprometer")
    assert "Eficiência de mitigação de 0%" in c.insights[1]


def test_regulatory_insights():
    risks = [make_risk(categoria="Regulatório", estrategia="Aceitar", responsavel_id="u1")]
    c = calculate_category_health_scores(risks)[0]
    assert c.insights == [
        "1 risco regulatório sem prazo pode gerar sanções",
        "Estratégia \"Aceitar\" em riscos regulatórios requer justificativa formal",
    ]


def test_injected_benchmarks_drive_priority():
    strict = CategoryBenchmarks({
        "Operacional": CategoryBenchmark(target=85, good=84, acceptable=83, weight=1.0),
    })
    risks = [well_managed(), well_managed(responsavel_id="u-02")]
    default = calculate_category_health_scores(risks)[0]
    custom = calculate_category_health_scores(risks, strict)[0]
    assert default.priority == Priority.LOW
    assert custom.priority == Priority.LOW
    assert custom.benchmark_score == 85

    unmanaged = calculate_category_health_scores([make_risk()], strict)[0]
    assert unmanaged.priority == Priority.CRITICAL


@pytest.mark.parametrize("score, expected", [
    (0, Priority.CRITICAL),
    (44, Priority.CRITICAL),
    (45, Priority.HIGH),
    (59, Priority.HIGH),
    (60, Priority.MEDIUM),
    (69, Priority.MEDIUM),
    (70, Priority.LOW),
    (85, Priority.LOW),
])
def test_priority_thresholds(score, expected):
    assert category_priority(score, DEFAULT_TABLE.get("Operacional")) == expected


def _trend(risks):
    return category_trend(risks, calculate_mitigation_metrics(risks))


def test_trend_declining_on_critical_share():
    risks = [make_risk(nivel_risco="Crítico") for _ in range(3)] + [make_risk() for _ in range(2)]
    assert _trend(risks) == Trend.DECLINING


def test_trend_declining_on_high_share():
    risks = ([make_risk(nivel_risco="Crítico") for _ in range(2)]
             + [make_risk(nivel_risco="Alto") for _ in range(2)]
             + [make_risk()])
    assert _trend(risks) == Trend.DECLINING


def test_trend_improving_needs_efficiency_above_seventy():
    improving = [make_risk(status="Mitigado") for _ in range(4)] + [make_risk(status="Identificado")]
    assert _trend(improving) == Trend.IMPROVING

    borderline = ([make_risk(status="Mitigado") for _ in range(7)]
                  + [make_risk(status="Identificado") for _ in range(3)])
    assert _trend(borderline) == Trend.STABLE


def test_trend_ignores_score_magnitude():
    risks = [make_risk(nivel_risco="Médio") for _ in range(4)]
    assert _trend(risks) == Trend.STABLE


def _category(final, weight):
    return CategoryHealthScore(
        category=f"c-{final}-{weight}",
        health_score=HealthScoreBreakdown(final_score=final),
        mitigation_metrics=MitigationMetrics(),
        category_weight=weight,
        benchmark_score=70,
    )


def test_weighted_score_of_nothing_is_sixty():
    assert calculate_weighted_overall_score([]) == 60


def test_weighted_score_renormalizes():
    assert calculate_weighted_overall_score([_category(80, 0.3), _category(40, 0.1)]) == 70


def test_weighted_score_with_zero_weights_is_sixty():
    assert calculate_weighted_overall_score([_category(80, 0.0)]) == 60


def test_weighted_score_matches_category_scores(mixed_register):
    scores = calculate_category_health_scores(mixed_register)
    total = sum(c.category_weight for c in scores)
    expected = round_half_up(sum(c.health_score.final_score * c.category_weight for c in scores) / total)
    assert calculate_weighted_overall_score(scores) == expected


def test_critical_count_per_category(mixed_register):
    counts = {c.category: c.critical_count for c in calculate_category_health_scores(mixed_register)}
    assert counts == {"Estratégico": 1, "Tecnologia": 0, "Operacional": 0, "Compliance": 0}
