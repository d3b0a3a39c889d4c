from collections import Counter
from datetime import date
from typing import Optional
from loguru import logger
from riskhealth.core.mitigation import calculate_mitigation_metrics
from riskhealth.core.scoring import round_half_up
from riskhealth.models.risk import Risk, RiskLevel, RiskStatus, Strategy

MAX_SUGGESTIONS = 4
DETAILED_PLAN_LENGTH = 300
READY_PLAN_LENGTH = 100
LOW_EFFICIENCY_PCT = 30
LOW_QUALITY_SCORE = 0.4
OWNER_OVERLOAD = 5
CATEGORY_CONCENTRATION = 0.4
STALE_DAYS = 60


def _n(count, singular, plural):
    return f"{count} {singular if count == 1 else plural}"


class SuggestionAnalyzer:
    """Scans a risk list for patterns worth a short warning.

    Every check runs on each call; the result keeps the first
    ``MAX_SUGGESTIONS`` messages in check order.
    """

    def __init__(self, risks: list[Risk], reference_date: Optional[date] = None):
        self.risks = risks
        self.today = reference_date or date.today()
        self.metrics = calculate_mitigation_metrics(risks)
        self.suggestions = []

    def run_all_checks(self) -> list[str]:
        self.suggestions = []
        if not self.risks:
            return []
        self._check_critical_without_plan()
        self._check_unassigned_priority()
        self._check_priority_without_deadline()
        self._check_low_efficiency()
        self._check_low_quality()
        self._check_ready_to_progress()
        self._check_passive_strategy()
        self._check_owner_overload()
        self._check_category_concentration()
        self._check_stale_identified()
        logger.debug(f"Suggestion checks produced {len(self.suggestions)} message(s).")
        return self.suggestions[:MAX_SUGGESTIONS]

    def _check_critical_without_plan(self):
        found = [r for r in self.risks
                 if r.nivel_risco == RiskLevel.CRITICAL and r.plan_length < DETAILED_PLAN_LENGTH]
        if found:
            self._add("🚨", f"{_n(len(found), 'risco crítico precisa', 'riscos críticos precisam')} "
                            "de plano de mitigação detalhado")

    def _check_unassigned_priority(self):
        found = [r for r in self.risks if r.is_high_priority and not r.has_owner]
        if found:
            self._add("👤", f"{_n(len(found), 'risco de alta prioridade precisa', 'riscos de alta prioridade precisam')} "
                            "de responsável")

    def _check_priority_without_deadline(self):
        found = [r for r in self.risks if r.is_high_priority and not r.has_deadline]
        if found:
            self._add("⏰", f"Definir prazo para {_n(len(found), 'risco', 'riscos')} de alta prioridade")

    def _check_low_efficiency(self):
        if self.metrics.mitigation_efficiency < LOW_EFFICIENCY_PCT:
            self._add("📉", f"Eficiência de mitigação baixa ({round_half_up(self.metrics.mitigation_efficiency)}%): "
                            "inicie o tratamento dos riscos identificados")

    def _check_low_quality(self):
        if self.metrics.action_quality_score < LOW_QUALITY_SCORE:
            self._add("📝", f"Qualidade dos planos de ação em {round_half_up(self.metrics.action_quality_score * 100)}%: "
                            "detalhe ações, responsáveis e prazos")

    def _check_ready_to_progress(self):
        found = [r for r in self.risks
                 if r.status == RiskStatus.IDENTIFIED and r.has_owner
                 and r.plan_length > READY_PLAN_LENGTH]
        if found:
            self._add("▶️", f"{_n(len(found), 'risco pode ser promovido', 'riscos podem ser promovidos')} "
                            "para \"Em Andamento\"")

    def _check_passive_strategy(self):
        found = [r for r in self.risks if r.is_high_priority and r.estrategia == Strategy.ACCEPT]
        if found:
            self._add("🛡️", f"Revisar estratégia \"Aceitar\" em {_n(len(found), 'risco grave', 'riscos graves')}")

    def _check_owner_overload(self):
        load = Counter(r.responsavel_id for r in self.risks if r.has_owner)
        overloaded = [owner for owner, count in load.items() if count > OWNER_OVERLOAD]
        if overloaded:
            self._add("⚖️", f"{_n(len(overloaded), 'responsável tem', 'responsáveis têm')} "
                            f"mais de {OWNER_OVERLOAD} riscos: redistribua a carga")

    def _check_category_concentration(self):
        category, count = Counter(r.categoria for r in self.risks).most_common(1)[0]
        share = count / len(self.risks)
        if share > CATEGORY_CONCENTRATION:
            self._add("🎯", f"{round_half_up(share * 100)}% dos riscos concentrados em {category}")

    def _check_stale_identified(self):
        found = [r for r in self.risks
                 if r.status == RiskStatus.IDENTIFIED
                 and (r.days_open(self.today) or 0) > STALE_DAYS]
        if found:
            self._add("⌛", f"{_n(len(found), 'risco identificado', 'riscos identificados')} "
                            f"há mais de {STALE_DAYS} dias sem progresso")

    def _add(self, marker, message):
        self.suggestions.append(f"{marker} {message}")


def generate_proactive_suggestions(risks: list[Risk],
                                   reference_date: Optional[date] = None) -> list[str]:
    return SuggestionAnalyzer(risks, reference_date).run_all_checks()
