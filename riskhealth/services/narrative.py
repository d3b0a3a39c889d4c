from collections import Counter
from datetime import date
from typing import Optional
from loguru import logger
from riskhealth.core.health_engine import calculate_health_score
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import normalize_score, round_half_up, score_band
from riskhealth.models.health import MitigationMetrics
from riskhealth.models.narrative import (
    CriticalIssue, IssueSeverity, NarrativeAnalysis, RecommendationPlan,
    ScoreExplanation, Strength,
)
from riskhealth.models.risk import Risk, RiskLevel, RiskStatus, Strategy

MAX_ISSUES = 6
MAX_STRENGTHS = 5
MAX_PER_HORIZON = 3
ADEQUATE_PLAN_LENGTH = 150
STALE_DAYS = 60
OWNER_OVERLOAD = 7
BALANCED_LOAD = 5

SUMMARY_TONE = {
    "Excelente": ("excelente", "demonstrando maturidade organizacional na gestão de riscos. "
                  "Os controles implementados são robustos e o monitoramento é proativo"),
    "Bom": ("boa", "com controles adequados estabelecidos. Existem oportunidades claras de melhoria "
            "que podem elevar significativamente a efetividade da gestão"),
    "Regular": ("regular", "sinalizando a necessidade de atenção em áreas críticas. Ações corretivas "
                "imediatas podem prevenir impactos adversos significativos"),
    "Ruim": ("preocupante", "com deficiências significativas nos controles. É essencial priorizar ações "
             "de mitigação para reduzir a exposição aos riscos identificados"),
    "Crítico": ("crítica", "demandando intervenção urgente. A exposição atual representa ameaça severa "
                "aos objetivos e requer ação executiva imediata"),
}

SCORE_EXPLANATIONS = {
    "Excelente": (
        "A gestão de riscos demonstra maturidade excepcional com controles robustos, monitoramento "
        "proativo e alta efetividade nas ações implementadas.",
        "Continue mantendo este padrão de excelência, revisando periodicamente a eficácia dos "
        "controles e ajustando estratégias conforme necessário.",
    ),
    "Bom": (
        "Os controles de risco são adequados e demonstram governança consistente, porém existem "
        "oportunidades identificadas para aumentar a efetividade da gestão.",
        "Foque em detalhar planos de mitigação, estabelecer cronogramas mais rigorosos e aprimorar "
        "a qualidade da documentação das ações.",
    ),
    "Regular": (
        "A gestão apresenta controles básicos, mas há lacunas importantes que aumentam a exposição "
        "a riscos. Atenção imediata é necessária em áreas específicas.",
        "Priorize a atribuição de responsáveis, definição de prazos e detalhamento de ações para "
        "riscos de alta criticidade. A melhoria é viável com ações focadas.",
    ),
    "Ruim": (
        "Existem deficiências significativas nos controles de risco. A exposição atual pode resultar "
        "em impactos adversos aos objetivos do projeto.",
        "Ação corretiva urgente é necessária. Estabeleça planos de mitigação detalhados, atribua "
        "responsabilidades claras e defina cronogramas rigorosos para riscos prioritários.",
    ),
    "Crítico": (
        "A situação é crítica com exposição severa a riscos. Controles são insuficientes ou "
        "inexistentes, representando ameaça grave aos objetivos.",
        "INTERVENÇÃO EXECUTIVA IMEDIATA NECESSÁRIA. Mobilize recursos, defina taskforce de resposta "
        "e implemente ações emergenciais nas próximas 24-48 horas.",
    ),
}

CONTINUOUS_BASELINE = (
    "Realizar revisões trimestrais de efetividade das estratégias de mitigação",
    "Manter documentação atualizada com lições aprendidas e boas práticas",
)


def _n(count, singular, plural):
    return f"{count} {singular if count == 1 else plural}"


def explain_health_score(normalized: int) -> ScoreExplanation:
    band = score_band(normalized)
    description, implication = SCORE_EXPLANATIONS[band.label]
    return ScoreExplanation(label=band.label, range=band.range,
                            description=description, implication=implication)


def generate_executive_summary(normalized: int, total_risks: int,
                               project_name: Optional[str] = None) -> str:
    context = f'O projeto "{project_name}"' if project_name else "O portfólio"
    if total_risks == 0:
        return (f"{context} ainda não possui riscos mapeados. Este é o momento ideal para iniciar "
                "uma análise sistemática de riscos que podem impactar seus objetivos estratégicos.")
    condition, tone = SUMMARY_TONE[score_band(normalized).label]
    mapped = _n(total_risks, "risco mapeado", "riscos mapeados")
    return f"{context} apresenta condição {condition} (Score: {normalized}/100) com {mapped}, {tone}."


class NarrativeEngine:
    """Builds the written analysis of a risk list: summary, issues, strengths
    and a recommendation plan split by time horizon."""

    def __init__(self, risks: list[Risk], project_name: Optional[str] = None,
                 reference_date: Optional[date] = None):
        self.risks = risks
        self.project_name = project_name
        self.today = reference_date or date.today()

    def generate(self) -> NarrativeAnalysis:
        breakdown = calculate_health_score(self.risks)
        metrics = calculate_mitigation_metrics(self.risks)
        normalized = normalize_score(breakdown.final_score)

        analysis = NarrativeAnalysis(
            executive_summary=generate_executive_summary(normalized, len(self.risks), self.project_name),
            score_explanation=explain_health_score(normalized),
            critical_issues=self.identify_critical_issues(metrics),
            strengths=self.identify_strengths(metrics),
            recommendations=self.prioritized_recommendations(),
        )
        logger.debug(
            f"Narrative: score {normalized}/100, {len(analysis.critical_issues)} issue(s), "
            f"{len(analysis.strengths)} strength(s)."
        )
        return analysis

    # ------------------------------------------------------------------
    # Selectors shared by issues and recommendations
    # ------------------------------------------------------------------
    def _critical(self):
        return [r for r in self.risks if r.nivel_risco == RiskLevel.CRITICAL]

    def _critical_without_plan(self):
        return [r for r in self._critical() if r.plan_length < ADEQUATE_PLAN_LENGTH]

    def _passive_severe(self):
        return [r for r in self.risks if r.is_high_priority and r.estrategia == Strategy.ACCEPT]

    def _stagnant(self):
        return [r for r in self.risks
                if r.status == RiskStatus.IDENTIFIED and (r.days_open(self.today) or 0) > STALE_DAYS]

    def _owner_load(self) -> dict:
        load = Counter(r.responsavel_id for r in self.risks if r.has_owner)
        names = {r.responsavel_id: r.responsavel_nome or r.responsavel_id
                 for r in self.risks if r.has_owner}
        return {owner: (names[owner], count) for owner, count in load.items()}

    def _overloaded(self):
        return [(name, count) for name, count in self._owner_load().values() if count > OWNER_OVERLOAD]

    # ------------------------------------------------------------------
    # Critical issues
    # ------------------------------------------------------------------
    def identify_critical_issues(self, metrics: MitigationMetrics) -> list[CriticalIssue]:
        issues = []

        def add(icon, severity, text):
            issues.append(CriticalIssue(icon=icon, severity=severity, text=text))

        found = self._critical_without_plan()
        if found:
            add("🚨", IssueSeverity.CRITICAL,
                f"{_n(len(found), 'risco crítico', 'riscos críticos')} sem plano de mitigação "
                f"detalhado (mínimo {ADEQUATE_PLAN_LENGTH} caracteres)")

        found = [r for r in self.risks if r.is_high_priority and not r.has_owner]
        if found:
            add("👤", IssueSeverity.CRITICAL,
                f"{_n(len(found), 'risco prioritário', 'riscos prioritários')} sem responsável atribuído")

        found = [r for r in self.risks if r.is_high_priority and not r.has_deadline]
        if found:
            add("⏰", IssueSeverity.HIGH,
                f"{_n(len(found), 'risco', 'riscos')} de alta prioridade sem prazo estabelecido")

        found = self._stagnant()
        if found:
            add("⚠️", IssueSeverity.HIGH,
                f"{_n(len(found), 'risco identificado', 'riscos identificados')} há mais de "
                f"{STALE_DAYS} dias sem progresso")

        found = self._passive_severe()
        if found:
            add("🛡️", IssueSeverity.MEDIUM,
                f"{_n(len(found), 'risco grave', 'riscos graves')} com estratégia passiva (\"Aceitar\")")

        overloaded = self._overloaded()
        if overloaded:
            names = ", ".join(name for name, _ in overloaded)
            add("⚖️", IssueSeverity.MEDIUM,
                f"{_n(len(overloaded), 'responsável', 'responsáveis')} com sobrecarga "
                f"(>{OWNER_OVERLOAD} riscos): {names}")

        if metrics.mitigation_efficiency < 25 and len(self.risks) > 3:
            add("📊", IssueSeverity.HIGH,
                f"Eficiência de mitigação crítica ({round_half_up(metrics.mitigation_efficiency)}%) - "
                f"apenas {metrics.risks_under_treatment} de {len(self.risks)} riscos em tratamento")

        return issues[:MAX_ISSUES]

    # ------------------------------------------------------------------
    # Strengths
    # ------------------------------------------------------------------
    def identify_strengths(self, metrics: MitigationMetrics) -> list[Strength]:
        if not self.risks:
            return []
        total = len(self.risks)
        strengths = []

        def add(icon, text):
            strengths.append(Strength(icon=icon, text=text))

        if metrics.effectively_mitigated > 0:
            pct = round_half_up(metrics.effectively_mitigated / total * 100)
            add("✨", f"{_n(metrics.effectively_mitigated, 'risco efetivamente mitigado', 'riscos efetivamente mitigados')} "
                      f"({pct}% do portfólio)")

        if metrics.action_quality_score >= 0.7:
            add("📝", f"Alta qualidade dos planos de ação (score {round_half_up(metrics.action_quality_score * 100)}%) "
                      "com documentação detalhada")

        assigned = sum(1 for r in self.risks if r.has_owner)
        if assigned == total:
            add("🎯", "100% dos riscos atribuídos a responsáveis - clareza total de ownership")
        elif assigned / total >= 0.8:
            add("🎯", f"{round_half_up(assigned / total * 100)}% dos riscos com responsáveis atribuídos")

        if not self._critical():
            add("🛡️", "Ausência de riscos em nível crítico - exposição controlada")

        if metrics.mitigation_efficiency >= 60:
            add("⚡", f"Excelente eficiência de mitigação ({round_half_up(metrics.mitigation_efficiency)}%) - "
                      f"{metrics.risks_under_treatment} riscos em tratamento ativo")

        monitoring = sum(1 for r in self.risks if r.status == RiskStatus.MONITORING)
        if monitoring and monitoring / total >= 0.3:
            add("👁️", f"{_n(monitoring, 'risco', 'riscos')} em monitoramento proativo contínuo")

        load = self._owner_load()
        max_load = max((count for _, count in load.values()), default=0)
        if 0 < max_load <= BALANCED_LOAD and len(load) > 1:
            add("⚖️", f"Carga bem distribuída entre {len(load)} responsáveis "
                      f"(máx. {max_load} riscos por pessoa)")

        return strengths[:MAX_STRENGTHS]

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------
    def prioritized_recommendations(self) -> RecommendationPlan:
        plan = RecommendationPlan(continuous=list(CONTINUOUS_BASELINE))
        if not self.risks:
            plan.urgent.append("Iniciar mapeamento sistemático de riscos que podem impactar os "
                               "objetivos estratégicos")
            plan.short_term.append("Definir categorias de risco relevantes ao contexto do projeto")
            plan.medium_term.append("Estabelecer matriz de probabilidade e impacto alinhada aos objetivos")
            return plan

        self._urgent(plan.urgent)
        self._short_term(plan.short_term)
        self._medium_term(plan.medium_term)
        self._continuous(plan.continuous)

        return RecommendationPlan(
            urgent=plan.urgent[:MAX_PER_HORIZON],
            short_term=plan.short_term[:MAX_PER_HORIZON],
            medium_term=plan.medium_term[:MAX_PER_HORIZON],
            continuous=plan.continuous[:MAX_PER_HORIZON],
        )

    def _urgent(self, out):
        critical = self._critical()
        unassigned = [r for r in critical if not r.has_owner]
        if unassigned:
            if len(unassigned) == 1:
                out.append("Atribuir responsável imediato ao 1 risco crítico desacompanhado")
            else:
                out.append(f"Atribuir responsável imediato aos {len(unassigned)} riscos críticos "
                           "desacompanhados")

        without_plan = self._critical_without_plan()
        if without_plan:
            codes = ", ".join(r.label for r in without_plan[:3])
            extra = len(without_plan) - 3
            suffix = f" e outros {extra}" if extra > 0 else ""
            out.append(f"Detalhar planos de ação (mín. 300 caracteres) para riscos críticos: {codes}{suffix}")

        without_deadline = [r for r in critical if not r.has_deadline]
        if without_deadline:
            out.append(f"Estabelecer prazos de mitigação para "
                       f"{_n(len(without_deadline), 'risco crítico', 'riscos críticos')}")

    def _short_term(self, out):
        high_without_deadline = [r for r in self.risks
                                 if r.nivel_risco == RiskLevel.HIGH and not r.has_deadline]
        if high_without_deadline:
            out.append(f"Definir cronograma de mitigação para "
                       f"{_n(len(high_without_deadline), 'risco', 'riscos')} de alta prioridade")

        ready = [r for r in self.risks
                 if r.status == RiskStatus.IDENTIFIED and r.plan_length > 100 and r.has_owner]
        if ready:
            out.append(f"Promover {_n(len(ready), 'risco pronto', 'riscos prontos')} de "
                       "\"Identificado\" para \"Em Andamento\"")

        shallow = [r for r in self.risks if 0 < r.plan_length < 100]
        if shallow:
            out.append(f"Enriquecer documentação de {_n(len(shallow), 'risco', 'riscos')} com ações superficiais")

    def _medium_term(self, out):
        stagnant = self._stagnant()
        if stagnant:
            out.append(f"Revisar relevância e atualizar status de "
                       f"{_n(len(stagnant), 'risco estagnado', 'riscos estagnados')} (>{STALE_DAYS} dias)")

        overloaded = self._overloaded()
        if overloaded:
            names = ", ".join(f"{name} ({count})" for name, count in overloaded)
            out.append(f"Redistribuir carga dos responsáveis sobrecarregados: {names}")

        passive = self._passive_severe()
        if passive:
            out.append(f"Revisar estratégia de {_n(len(passive), 'risco grave', 'riscos graves')} "
                       "com postura passiva")

    def _continuous(self, out):
        if any(r.status == RiskStatus.MONITORING for r in self.risks):
            out.append("Realizar reuniões mensais de acompanhamento dos riscos em monitoramento")
        out.append("Monitorar indicadores de eficiência (KPIs) para ajustes proativos")


def generate_complete_analysis(risks: list[Risk], project_name: Optional[str] = None,
                               reference_date: Optional[date] = None) -> NarrativeAnalysis:
    return NarrativeEngine(risks, project_name, reference_date).generate()
