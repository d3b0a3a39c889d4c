import re
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, PageBreak
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from loguru import logger
from riskhealth.config.settings import settings
from riskhealth.models.health import Priority
from riskhealth.models.narrative import IssueSeverity
from riskhealth.models.report import HealthCheckReport

DARK_BLUE = colors.HexColor("#0D2B45")
BLUE = colors.HexColor("#1565C0")
GRAY = colors.HexColor("#F5F7FA")
PRIORITY_COLORS = {
    Priority.CRITICAL: colors.HexColor("#D32F2F"),
    Priority.HIGH: colors.HexColor("#F57C00"),
    Priority.MEDIUM: colors.HexColor("#FBC02D"),
    Priority.LOW: colors.HexColor("#388E3C"),
}
SEVERITY_LABELS = {
    IssueSeverity.CRITICAL: "CRÍTICO",
    IssueSeverity.HIGH: "ALTO",
    IssueSeverity.MEDIUM: "MÉDIO",
}
HORIZONS = (
    ("urgent", "Urgente (24-48h)"),
    ("short_term", "Curto prazo (esta semana)"),
    ("medium_term", "Médio prazo (este mês)"),
    ("continuous", "Melhoria contínua"),
)

# Base-14 fonts have no emoji glyphs.
_MARKER_RE = re.compile(r"^\W+\s+")


def _plain(text: str) -> str:
    return escape(_MARKER_RE.sub("", text))


def _slug(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_") or "portfolio"


class PDFReportGenerator:
    def __init__(self, report: HealthCheckReport, output_dir=None):
        self.report = report
        self.output_dir = Path(output_dir or settings.REPORT_OUTPUT_DIR)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self) -> str:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self.output_dir / f"RiskHealth_{_slug(self.report.scope)}_{ts}.pdf"
        doc = SimpleDocTemplate(str(path), pagesize=A4,
                                rightMargin=0.75*inch, leftMargin=0.75*inch,
                                topMargin=0.75*inch, bottomMargin=0.75*inch)
        story = []
        story += self._cover()
        story.append(PageBreak())
        story += self._exec_summary()
        story += self._breakdown()
        story += self._categories()
        story += self._issues_and_strengths()
        story += self._recommendations()
        doc.build(story)
        logger.info(f"PDF generated: {path}")
        return str(path)

    def _h1(self, text):
        return Paragraph(f"<font color='#0D2B45'><b>{escape(text)}</b></font>",
                         ParagraphStyle("h1", fontSize=16, spaceAfter=8, spaceBefore=16))

    def _body(self, text):
        return Paragraph(text, ParagraphStyle("body", fontSize=10, leading=14,
                                              alignment=TA_JUSTIFY, spaceAfter=8))

    def _table(self, rows, widths, header_color=BLUE, extra=None):
        t = Table(rows, colWidths=widths, repeatRows=1)
        style = [
            ("BACKGROUND", (0,0), (-1,0), header_color),
            ("TEXTCOLOR", (0,0), (-1,0), colors.white),
            ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
            ("FONTSIZE", (0,0), (-1,-1), 9),
            ("ROWBACKGROUNDS", (0,1), (-1,-1), [GRAY, colors.white]),
            ("GRID", (0,0), (-1,-1), 0.5, colors.lightgrey),
            ("TOPPADDING", (0,0), (-1,-1), 5),
            ("BOTTOMPADDING", (0,0), (-1,-1), 5),
            ("LEFTPADDING", (0,0), (-1,-1), 6),
        ]
        t.setStyle(TableStyle(style + (extra or [])))
        return t

    def _cover(self):
        r = self.report
        title_style = ParagraphStyle("title", fontSize=24, textColor=colors.white,
                                     alignment=TA_CENTER, fontName="Helvetica-Bold", leading=30)
        header = Table([[Paragraph(
            f'<b>{escape(settings.APP_NAME)}</b><br/>Relatório de Saúde de Riscos<br/>'
            f'<font size="14">{escape(r.scope)}</font>', title_style
        )]], colWidths=[6.7*inch])
        header.setStyle(TableStyle([
            ("BACKGROUND", (0,0), (-1,-1), DARK_BLUE),
            ("ALIGN", (0,0), (-1,-1), "CENTER"),
            ("TOPPADDING", (0,0), (-1,-1), 40),
            ("BOTTOMPADDING", (0,0), (-1,-1), 40),
        ]))
        meta = Table([
            ["Escopo:", r.scope],
            ["Data:", r.generated_at.strftime("%d/%m/%Y")],
            ["Health Score:", f"{r.normalized_score}/100 ({r.score_label})"],
            ["Riscos avaliados:", str(r.total_risks)],
        ], colWidths=[2*inch, 4.7*inch])
        meta.setStyle(TableStyle([
            ("FONTNAME", (0,0), (0,-1), "Helvetica-Bold"),
            ("FONTSIZE", (0,0), (-1,-1), 10),
            ("ROWBACKGROUNDS", (0,0), (-1,-1), [GRAY, colors.white]),
            ("TOPPADDING", (0,0), (-1,-1), 6),
            ("BOTTOMPADDING", (0,0), (-1,-1), 6),
            ("LEFTPADDING", (0,0), (-1,-1), 8),
        ]))
        return [header, Spacer(1, 0.3*inch), meta]

    def _exec_summary(self):
        n = self.report.narrative
        return [
            self._h1("Resumo Executivo"),
            self._body(escape(n.executive_summary)),
            self._body(f"<b>{escape(n.score_explanation.label)} "
                       f"({escape(n.score_explanation.range)}):</b> "
                       f"{escape(n.score_explanation.description)}"),
            self._body(f"<i>{escape(n.score_explanation.implication)}</i>"),
        ]

    def _breakdown(self):
        b = self.report.breakdown
        m = self.report.mitigation_metrics
        data = [
            ["Componente", "Valor"],
            ["Score base", str(b.base_score)],
            ["Penalidade por nível de risco", f"-{b.level_penalty}"],
            ["Penalidade por falta de responsável", f"-{b.assignment_penalty}"],
            ["Penalidade por falta de prazo", f"-{b.deadline_penalty}"],
            ["Penalidade por estagnação", f"-{b.stagnation_penalty}"],
            ["Bônus de mitigação", f"+{b.mitigation_bonus:.1f}"],
            ["Score final (0-85)", str(b.final_score)],
            ["Score ponderado por categoria", str(self.report.weighted_score)],
            ["Eficiência de mitigação", f"{m.mitigation_efficiency:.0f}%"],
            ["Qualidade das ações", f"{m.action_quality_score * 100:.0f}%"],
        ]
        return [self._h1("Composição do Score"),
                self._table(data, [4.2*inch, 2.5*inch])]

    def _categories(self):
        rows = [["Categoria", "Riscos", "Score", "Meta", "Prioridade", "Tendência"]]
        extra = []
        for i, c in enumerate(self.report.category_scores, 1):
            rows.append([c.category, str(len(c.risks)), str(c.health_score.final_score),
                         str(c.benchmark_score), c.priority.value.upper(), c.trend.value])
            extra += [("TEXTCOLOR", (4,i), (4,i), PRIORITY_COLORS.get(c.priority, colors.gray)),
                      ("FONTNAME", (4,i), (4,i), "Helvetica-Bold")]
        els = [self._h1("Saúde por Categoria"),
               self._table(rows, [1.8*inch, 0.7*inch, 0.7*inch, 0.7*inch, 1.4*inch, 1.4*inch],
                           header_color=DARK_BLUE, extra=extra)]
        for c in self.report.category_scores:
            for insight in c.insights:
                els.append(self._body(f"<b>{escape(c.category)}:</b> {escape(insight)}"))
        return els

    def _issues_and_strengths(self):
        n = self.report.narrative
        els = [self._h1("Pontos de Atenção")]
        if not n.critical_issues:
            els.append(self._body("Nenhum ponto crítico identificado."))
        for issue in n.critical_issues:
            els.append(self._body(f"<b>[{SEVERITY_LABELS[issue.severity]}]</b> {_plain(issue.text)}"))
        els.append(self._h1("Pontos Fortes"))
        for s in n.strengths:
            els.append(self._body(f"• {_plain(s.text)}"))
        if self.report.suggestions:
            els.append(self._h1("Sugestões"))
            for s in self.report.suggestions:
                els.append(self._body(f"• {_plain(s)}"))
        return els

    def _recommendations(self):
        plan = self.report.narrative.recommendations
        els = [PageBreak(), self._h1("Recomendações")]
        for attr, label in HORIZONS:
            items = getattr(plan, attr)
            if not items:
                continue
            els.append(self._body(f"<b>{label}</b>"))
            for item in items:
                els.append(self._body(f"• {escape(item)}"))
            els.append(Spacer(1, 0.1*inch))
        return els
