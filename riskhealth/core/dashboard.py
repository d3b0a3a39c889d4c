from riskhealth.models.health import CategoryHealthScore, MitigationMetrics
from riskhealth.models.report import Badge, HeatmapCell, HeatmapRow, RadarPoint
from riskhealth.models.risk import Risk, RiskLevel

HEATMAP_LEVELS = (RiskLevel.CRITICAL, RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)

# Upper bound of each intensity bucket, by share of the category's risks.
INTENSITY_BUCKETS = (
    (0.2, "low"),
    (0.4, "moderate"),
    (0.6, "high"),
)


def heatmap_intensity(count: int, total: int) -> str:
    if total == 0 or count == 0:
        return "none"
    ratio = count / total
    for upper, name in INTENSITY_BUCKETS:
        if ratio <= upper:
            return name
    return "severe"


def build_heatmap(category_scores: list[CategoryHealthScore]) -> list[HeatmapRow]:
    rows = []
    for c in category_scores:
        total = len(c.risks)
        cells = []
        for level in HEATMAP_LEVELS:
            count = sum(1 for r in c.risks if r.nivel_risco == level)
            cells.append(HeatmapCell(level=level.value, count=count, total=total,
                                     intensity=heatmap_intensity(count, total)))
        rows.append(HeatmapRow(category=c.category, total=total, cells=cells))
    return rows


def build_radar(category_scores: list[CategoryHealthScore]) -> list[RadarPoint]:
    return [RadarPoint(category=c.category, score=c.health_score.final_score,
                       benchmark=c.benchmark_score)
            for c in category_scores]


def build_badges(risks: list[Risk], metrics: MitigationMetrics) -> list[Badge]:
    badges = []
    if metrics.effectively_mitigated > 0:
        badges.append(Badge(key="mitigated", text=f"{metrics.effectively_mitigated} Mitigados"))
    if metrics.risks_in_progress > 0:
        badges.append(Badge(key="in_progress", text=f"{metrics.risks_in_progress} Em Execução"))
    if metrics.action_quality_score > 0.7:
        badges.append(Badge(key="detailed_actions", text="Ações Detalhadas"))
    if risks and all(r.has_owner for r in risks):
        badges.append(Badge(key="all_assigned", text="Todos Atribuídos"))
    if risks and not any(r.nivel_risco == RiskLevel.CRITICAL for r in risks):
        badges.append(Badge(key="zero_critical", text="Zero Críticos"))
    if metrics.mitigation_efficiency > 80:
        badges.append(Badge(key="high_efficiency", text="Alta Eficiência"))
    return badges
