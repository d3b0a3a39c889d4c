import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box
from riskhealth.config.settings import settings
from riskhealth.errors import RiskHealthError

console = Console()

PRIORITY_COLORS = {
    "critical": "bold red", "high": "bold orange3",
    "medium": "bold yellow", "low": "bold green",
}
TREND_ICONS = {"improving": "[green]▲[/green]", "stable": "[white]■[/white]",
               "declining": "[red]▼[/red]"}
SEVERITY_COLORS = {"critical": "red", "high": "orange3", "medium": "yellow"}
INTENSITY_COLORS = {"none": "dim", "low": "yellow", "moderate": "orange3",
                    "high": "red", "severe": "bold red"}


def banner():
    console.print(f"""
[bold blue]╔══════════════════════════════════════════════╗
║   {settings.APP_NAME}  v{settings.VERSION}                ║
║   ISO 31000 Risk Register Analytics          ║
╚══════════════════════════════════════════════╝[/bold blue]
""")
    mode = "[yellow]MOCK[/yellow]" if settings.MOCK_MODE else "[green]LIVE[/green]"
    console.print(
        f"  Mode: {mode}  |  "
        f"Organization: [bold]{settings.ORGANIZATION_NAME}[/bold]\n"
    )
    for w in settings.validate():
        console.print(f"  [yellow]⚠  {w}[/yellow]")
    console.print()


def _score_color(normalized):
    return "green" if normalized >= 61 else "yellow" if normalized >= 41 else "red"


def _run_health_check(project):
    from riskhealth.services.health_service import HealthCheckService

    with Progress(SpinnerColumn(), TextColumn("{task.description}"), console=console) as p:
        t = p.add_task("Loading risk register...", total=None)
        service = HealthCheckService()
        p.update(t, description="Scoring risks...")
        report = service.run(project=project)
        p.update(t, description="Health check complete!")
    return report


def _category_table(report):
    tbl = Table(box=box.SIMPLE_HEAVY, header_style="bold cyan")
    tbl.add_column("Category", width=16)
    tbl.add_column("Risks", justify="right")
    tbl.add_column("Crit.", justify="right")
    tbl.add_column("Score", justify="right")
    tbl.add_column("Target", justify="right")
    tbl.add_column("Weight", justify="right")
    tbl.add_column("Priority", width=10)
    tbl.add_column("Trend", justify="center")
    for c in report.category_scores:
        pc = PRIORITY_COLORS.get(c.priority.value, "")
        tbl.add_row(c.category, str(len(c.risks)), str(c.critical_count),
                    str(c.health_score.final_score),
                    str(c.benchmark_score), f"{c.category_weight:.2f}",
                    f"[{pc}]{c.priority.value.upper()}[/{pc}]",
                    TREND_ICONS.get(c.trend.value, c.trend.value))
    return tbl


@click.group()
def cli():
    """Risk Health Check — risk register scoring CLI"""
    banner()


@cli.command("assess")
@click.option("--project", "-p", default=None, help="Only score risks of this project")
@click.option("--no-pdf", is_flag=True, default=False, help="Skip PDF generation")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show narrative details")
def run_assessment(project, no_pdf, verbose):
    """Run the full risk health check."""
    from riskhealth.reporting.pdf_report import PDFReportGenerator

    try:
        report = _run_health_check(project)
    except RiskHealthError as e:
        console.print(f"\n[red]✘ Health check failed:[/red] {e}\n")
        raise SystemExit(1)

    b = report.breakdown
    m = report.mitigation_metrics
    sc = _score_color(report.normalized_score)
    console.print(Panel(
        f"[bold]Scope:[/bold] {report.scope}\n"
        f"[bold]Health Score:[/bold] [{sc}]{report.normalized_score}/100 "
        f"({report.score_label})[/{sc}]  raw {report.raw_score}/85\n"
        f"[bold]Risks:[/bold] {report.total_risks}\n"
        f"[bold]Mitigation Efficiency:[/bold] {m.mitigation_efficiency:.1f}%\n"
        f"[bold]Action Quality:[/bold] {m.action_quality_score * 100:.0f}%\n"
        f"[bold]Penalties:[/bold] level {b.level_penalty}  owner {b.assignment_penalty}  "
        f"deadline {b.deadline_penalty}  stagnation {b.stagnation_penalty}  "
        f"[bold]Bonus:[/bold] +{b.mitigation_bonus:.1f}",
        title="[bold blue]Health Summary[/bold blue]"
    ))

    if report.badges:
        console.print("  " + "  ".join(f"[green]✔ {badge.text}[/green]" for badge in report.badges))

    if report.category_scores:
        console.print(f"\n[bold]Categories ({len(report.category_scores)})[/bold]\n")
        console.print(_category_table(report))
        if report.critical_categories:
            names = ", ".join(c.category for c in report.critical_categories)
            console.print(f"  [bold red]Below acceptable:[/bold red] {names}")
        if report.declining_categories:
            names = ", ".join(c.category for c in report.declining_categories)
            console.print(f"  [red]▼ Declining:[/red] {names}")

    if report.suggestions:
        console.print("\n[bold]Suggestions[/bold]\n")
        for s in report.suggestions:
            console.print(f"  {s}")

    narrative = report.narrative
    if narrative.critical_issues:
        console.print("\n[bold]Critical Issues[/bold]\n")
        for issue in narrative.critical_issues:
            c = SEVERITY_COLORS.get(issue.severity.value, "white")
            console.print(f"  [{c}]{issue.icon} [{issue.severity.value.upper()}][/{c}] {issue.text}")

    if verbose:
        console.print()
        console.print(Panel(
            f"{narrative.executive_summary}\n\n"
            f"[bold]{narrative.score_explanation.label} ({narrative.score_explanation.range})[/bold]: "
            f"{narrative.score_explanation.description}\n\n"
            f"[italic]{narrative.score_explanation.implication}[/italic]",
            title="[bold blue]Executive Summary[/bold blue]"
        ))
        if narrative.strengths:
            console.print("\n[bold]Strengths[/bold]\n")
            for s in narrative.strengths:
                console.print(f"  [green]{s.icon}[/green] {s.text}")
        plan = narrative.recommendations
        horizons = (("URGENT", "red", plan.urgent), ("SHORT TERM", "orange3", plan.short_term),
                    ("MEDIUM TERM", "blue", plan.medium_term), ("CONTINUOUS", "magenta", plan.continuous))
        console.print("\n[bold]Recommendations[/bold]\n")
        for label, color, items in horizons:
            for item in items:
                console.print(f"  [{color}][{label}][/{color}] {item}")

    if not no_pdf:
        console.print("\n[bold]Generating PDF report...[/bold]")
        try:
            pdf_path = PDFReportGenerator(report).generate()
            console.print(f"\n[green]✔ Report saved:[/green] {pdf_path}\n")
        except Exception as e:
            console.print(f"\n[red]✘ PDF generation failed:[/red] {e}\n")


@cli.command("categories")
@click.option("--project", "-p", default=None, help="Only score risks of this project")
def show_categories(project):
    """Show category scores and the category x level heatmap."""
    try:
        report = _run_health_check(project)
    except RiskHealthError as e:
        console.print(f"\n[red]✘ Health check failed:[/red] {e}\n")
        raise SystemExit(1)

    if not report.category_scores:
        console.print("[yellow]No risks to score.[/yellow]\n")
        return

    console.print(_category_table(report))
    console.print(f"\n[bold]Weighted overall score:[/bold] {report.weighted_score}/85\n")

    heat = Table(box=box.ROUNDED, header_style="bold cyan", title="Categorias vs Níveis de Risco")
    heat.add_column("Category", style="bold")
    levels = [cell.level for cell in report.heatmap[0].cells]
    for level in levels:
        heat.add_column(level, justify="center")
    for row in report.heatmap:
        cells = []
        for cell in row.cells:
            c = INTENSITY_COLORS.get(cell.intensity, "")
            cells.append(f"[{c}]{cell.count}[/{c}]")
        heat.add_row(f"{row.category} ({row.total})", *cells)
    console.print(heat)

    for c in report.category_scores:
        for insight in c.insights:
            console.print(f"  💡 [bold]{c.category}:[/bold] {insight}")
    console.print()


@cli.command("status")
def check_status():
    """Check configuration status."""
    tbl = Table(box=box.ROUNDED, header_style="bold cyan")
    tbl.add_column("Component", style="bold")
    tbl.add_column("Status")
    tbl.add_column("Details")

    if settings.MOCK_MODE:
        tbl.add_row("Risk Register", "[yellow]MOCK[/yellow]", "Bundled demo register")
    elif settings.RISK_DATA_FILE:
        tbl.add_row("Risk Register", "[green]CONFIGURED[/green]", settings.RISK_DATA_FILE)
    else:
        tbl.add_row("Risk Register", "[red]NOT CONFIGURED[/red]",
                    "Set RISK_DATA_FILE in .env")

    if settings.has_custom_benchmarks():
        tbl.add_row("Benchmarks", "[green]CUSTOM[/green]", settings.BENCHMARKS_FILE)
    else:
        tbl.add_row("Benchmarks", "[yellow]DEFAULT[/yellow]", "Built-in category table")

    tbl.add_row("Report Output", "[green]OK[/green]", str(settings.REPORT_OUTPUT_DIR))
    tbl.add_row("Environment", settings.APP_ENV, f"Log level {settings.LOG_LEVEL}")

    mode_label = "MOCK (demo data)" if settings.MOCK_MODE else "LIVE (register file)"
    mode_color = "yellow" if settings.MOCK_MODE else "green"
    tbl.add_row("Current Mode", f"[{mode_color}]{mode_label}[/{mode_color}]", "")
    console.print(tbl)
    console.print()
