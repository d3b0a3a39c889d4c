import pytest
from pydantic import ValidationError

from riskhealth.core.benchmarks import DEFAULT_TABLE
from riskhealth.core.category_engine import calculate_weighted_overall_score
from riskhealth.integrations.risk_source import RiskRegisterSource
from riskhealth.models.health import HealthScoreBreakdown, MitigationMetrics
from riskhealth.models.report import HealthCheckReport
from riskhealth.services.health_service import HealthCheckService
from riskhealth.services.narrative import generate_complete_analysis
from tests.conftest import make_risk, well_managed


class StubSource:
    def __init__(self, risks):
        self.risks = risks

    def load(self):
        return list(self.risks)


@pytest.fixture
def register():
    return [
        well_managed(projeto_nome="ERP", categoria="Financeiro"),
        well_managed(projeto_nome="ERP", categoria="Compliance", responsavel_id="u-02"),
        make_risk(projeto_nome="Portal", nivel_risco="Crítico", status="Identificado"),
    ]


def test_project_filter(register, reference_date):
    service = HealthCheckService(StubSource(register), DEFAULT_TABLE)
    report = service.run(project="ERP", reference_date=reference_date)

    assert report.scope == "ERP"
    assert report.project == "ERP"
    assert report.total_risks == 2
    assert report.narrative.executive_summary.startswith('O projeto "ERP"')
    assert {c.category for c in report.category_scores} == {"Financeiro", "Compliance"}


def test_report_is_consistent(register, reference_date):
    report = HealthCheckService(StubSource(register), DEFAULT_TABLE).run(reference_date=reference_date)

    assert report.total_risks == 3
    assert report.weighted_score == calculate_weighted_overall_score(report.category_scores)
    assert report.raw_score == report.weighted_score
    assert len(report.heatmap) == len(report.category_scores)
    assert len(report.radar) == len(report.category_scores)
    assert len(report.suggestions) <= 4
    assert report.narrative.executive_summary.startswith("O portfólio")


def test_unknown_project_scores_neutral(register, reference_date):
    report = HealthCheckService(StubSource(register), DEFAULT_TABLE).run(
        project="Inexistente", reference_date=reference_date)

    assert report.total_risks == 0
    assert report.category_scores == []
    assert report.weighted_score == 60
    assert report.normalized_score == 71
    assert report.score_label == "Bom"
    assert report.heatmap == []
    assert report.suggestions == []


def test_unmanaged_register_falls_back_to_portfolio_score(scenario_a, reference_date):
    report = HealthCheckService(StubSource(scenario_a), DEFAULT_TABLE).evaluate(
        scenario_a, scope="X", reference_date=reference_date)

    assert report.weighted_score == 0
    assert report.raw_score == report.breakdown.final_score == 0
    assert report.normalized_score == 0
    assert report.score_label == "Crítico"
    assert [c.category for c in report.critical_categories] == ["Operacional"]


def test_mock_register_end_to_end():
    service = HealthCheckService(RiskRegisterSource(mock=True), DEFAULT_TABLE)
    report = service.run(project="Portal de Serviços ao Cidadão")

    assert report.total_risks == 4
    assert 0 <= report.normalized_score <= 100
    assert report.category_scores[0].category_weight >= report.category_scores[-1].category_weight


def test_declining_and_critical_categories(scenario_a, reference_date):
    risks = scenario_a + [well_managed(categoria="Financeiro")]
    report = HealthCheckService(StubSource(risks), DEFAULT_TABLE).run(reference_date=reference_date)

    assert [c.category for c in report.declining_categories] == ["Operacional"]
    assert [c.category for c in report.critical_categories] == ["Operacional"]


def test_report_scores_are_required():
    with pytest.raises(ValidationError):
        HealthCheckReport(scope="X", breakdown=HealthScoreBreakdown(),
                          mitigation_metrics=MitigationMetrics(),
                          narrative=generate_complete_analysis([]))
