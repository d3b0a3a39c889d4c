from datetime import date
from typing import Optional
from loguru import logger
from riskhealth.analyzers.suggestion_analyzer import SuggestionAnalyzer
from riskhealth.config.settings import settings
from riskhealth.core.benchmarks import CategoryBenchmarks, load_benchmarks
from riskhealth.core.category_engine import CategoryHealthEngine, calculate_weighted_overall_score
from riskhealth.core.dashboard import build_badges, build_heatmap, build_radar
from riskhealth.core.health_engine import HealthScoreEngine
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import normalize_score, score_label
from riskhealth.integrations.risk_source import RiskRegisterSource
from riskhealth.models.report import HealthCheckReport
from riskhealth.models.risk import Risk
from riskhealth.services.narrative import NarrativeEngine

class HealthCheckService:
    def __init__(self, source: Optional[RiskRegisterSource] = None,
                 benchmarks: Optional[CategoryBenchmarks] = None):
        self.source = source or RiskRegisterSource()
        self.benchmarks = benchmarks or load_benchmarks(settings.BENCHMARKS_FILE)

    def run(self, project: Optional[str] = None,
            reference_date: Optional[date] = None) -> HealthCheckReport:
        scope = project or settings.ORGANIZATION_NAME
        logger.info(f"Health check started for: {scope}")
        risks = self.source.load()
        if project:
            risks = [r for r in risks if r.projeto_nome == project]
            logger.info(f"{len(risks)} risk(s) in project '{project}'.")
        report = self.evaluate(risks, scope=scope, project=project, reference_date=reference_date)
        logger.info(f"Health check complete: {report.normalized_score}/100 ({report.score_label}).")
        return report

    def evaluate(self, risks: list[Risk], scope: str, project: Optional[str] = None,
                 reference_date: Optional[date] = None) -> HealthCheckReport:
        breakdown = HealthScoreEngine(risks).calculate()
        metrics = calculate_mitigation_metrics(risks)
        category_scores = CategoryHealthEngine(risks, self.benchmarks).calculate()
        weighted = calculate_weighted_overall_score(category_scores)

        # A weighted score of 0 falls back to the unweighted portfolio score.
        raw = weighted or breakdown.final_score
        normalized = normalize_score(raw)

        return HealthCheckReport(
            scope=scope,
            project=project,
            total_risks=len(risks),
            breakdown=breakdown,
            mitigation_metrics=metrics,
            category_scores=category_scores,
            weighted_score=weighted,
            raw_score=raw,
            normalized_score=normalized,
            score_label=score_label(normalized),
            suggestions=SuggestionAnalyzer(risks, reference_date).run_all_checks(),
            badges=build_badges(risks, metrics),
            heatmap=build_heatmap(category_scores),
            radar=build_radar(category_scores),
            narrative=NarrativeEngine(risks, project, reference_date).generate(),
        )
