"""Console reporter — rich terminal rendering of analysis results.

Threats are filtered by a minimum risk level and shown highest risk
first; the summary always covers every threat.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from tyr.config import SCORE_BAND_CRITICAL, SCORE_BAND_HIGH, SCORE_BAND_MEDIUM
from tyr.models import AnalysisResult, RiskLevel, StrideCategory, Threat
from tyr.services.scanner import ScanReport

RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "bold bright_red",
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "bold yellow",
    RiskLevel.LOW: "bold green",
}

RISK_DOTS: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "🔴",
    RiskLevel.HIGH: "🟠",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.LOW: "🟢",
}


def filter_by_threshold(threats: Iterable[Threat], threshold: RiskLevel) -> list[Threat]:
    """Threats at or above *threshold*, highest risk first.

    Threats of equal risk keep their original order.
    """
    selected = [t for t in threats if t.risk_level >= threshold]
    return sorted(selected, key=lambda t: t.risk_level, reverse=True)


def score_style(score: float) -> str:
    if score >= SCORE_BAND_CRITICAL:
        return "bold bright_red"
    if score >= SCORE_BAND_HIGH:
        return "bold yellow"
    if score >= SCORE_BAND_MEDIUM:
        return "bold bright_blue"
    return "bold green"


class ConsoleReporter:
    """Prints reports to a rich ``Console``."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def generate(self, result: AnalysisResult, risk_threshold: RiskLevel | str = RiskLevel.MEDIUM) -> None:
        threshold = (
            risk_threshold
            if isinstance(risk_threshold, RiskLevel)
            else RiskLevel.from_string(risk_threshold)
        )
        out = self._console

        out.print()
        out.print(Rule("[bold bright_cyan]THREAT ANALYSIS REPORT[/]", style="bright_cyan"))
        self._print_summary(result)

        out.print()
        out.print("[bold bright_yellow]🎯 IDENTIFIED THREATS[/]")
        out.print(Rule(style="yellow"))

        threats = filter_by_threshold(result.threats, threshold)
        if not threats:
            out.print("[green]No threats found above the specified threshold.[/]")
        for index, threat in enumerate(threats, start=1):
            self._print_threat(threat, index)

        if result.recommendations:
            out.print()
            out.print("[bold bright_blue]💡 RECOMMENDATIONS[/]")
            out.print(Rule(style="blue"))
            for index, rec in enumerate(result.recommendations, start=1):
                out.print(f"  [bright_blue]{index}.[/] {escape(rec)}", highlight=False)

        out.print(Rule(style="bright_cyan"))

    def render_scan(self, report: ScanReport, risk_threshold: RiskLevel | str = RiskLevel.MEDIUM) -> None:
        """Per-file summary table followed by each file's report."""
        table = Table(title=f"Scan of {escape(str(report.directory))}", show_lines=False)
        table.add_column("File", style="cyan")
        table.add_column("Threats", justify="right")
        table.add_column("Critical", justify="right", style="bright_red")
        table.add_column("High", justify="right", style="red")
        table.add_column("Risk Score", justify="right")
        table.add_column("Status")

        for fa in report.results:
            summary = fa.result.summary
            table.add_row(
                escape(str(fa.path)),
                str(summary.total_threats),
                str(summary.by_risk_level.critical),
                str(summary.by_risk_level.high),
                f"[{score_style(summary.overall_risk_score)}]{summary.overall_risk_score:.1f}[/]",
                "[green]ok[/]",
            )
        for failure in report.failures:
            table.add_row(escape(str(failure.path)), "-", "-", "-", "-", "[red]failed[/]")

        self._console.print(table)
        for fa in report.results:
            self._console.print()
            self._console.print(f"[bold cyan]📄 {escape(str(fa.path))}[/]")
            self.generate(fa.result, risk_threshold)

        self._console.print()
        self._console.print(
            f"[bold green]📊 Analysis Complete[/] — "
            f"{len(report.results)} analyzed, {len(report.failures)} failed, "
            f"{report.total_threats} threats in {report.elapsed_seconds:.1f}s"
        )

    # ──────────────────────────────────────────────────────────
    # Sections
    # ──────────────────────────────────────────────────────────

    def _print_summary(self, result: AnalysisResult) -> None:
        summary = result.summary
        out = self._console
        score = summary.overall_risk_score

        out.print()
        out.print("[bold bright_green]📊 SUMMARY[/]")
        out.print(f"  Total Threats: [bold bright_white]{summary.total_threats}[/]")
        out.print(f"  Overall Risk Score: [{score_style(score)}]{score:.1f}[/]/100")

        out.print()
        out.print("  📈 By Risk Level:")
        for level in sorted(RiskLevel, reverse=True):
            out.print(
                f"    {RISK_DOTS[level]} {level.value + ':':<9} "
                f"[{RISK_STYLES[level]}]{summary.by_risk_level.count(level)}[/]"
            )

        out.print()
        out.print("  🎯 By STRIDE Category:")
        for category in StrideCategory:
            out.print(
                f"    {category.icon} {category.display_name + ':':<23} "
                f"{summary.by_stride_category.count(category)}"
            )

    def _print_threat(self, threat: Threat, index: int) -> None:
        out = self._console
        style = RISK_STYLES[threat.risk_level]

        out.print()
        out.print(
            f"[bold bright_white][{index}][/] {threat.category.icon} "
            f"[{style}][{threat.risk_level.label}][/] [bold bright_white]{escape(threat.title)}[/]",
            highlight=False,
        )
        out.print(f"  [bright_cyan]Category:[/] [cyan]{threat.category.display_name}[/]")
        out.print(f"  [bright_cyan]ID:[/] [cyan]{escape(threat.id)}[/]")
        out.print()
        out.print(f"  [bright_yellow]Description:[/] {escape(threat.description)}", highlight=False)

        if threat.attack_path:
            out.print()
            out.print("  [bright_red]🎯 Attack Path:[/]")
            for step_no, step in enumerate(threat.attack_path, start=1):
                out.print(f"    {step_no}. {escape(step)}", highlight=False)

        out.print()
        out.print(f"  [bold bright_red]Impact:[/] {escape(threat.impact)}", highlight=False)

        if threat.affected_components:
            out.print()
            out.print("  ⚙️  Affected Components:")
            for component in threat.affected_components:
                out.print(f"    • {escape(component)}", highlight=False)

        if threat.mitigations:
            out.print()
            out.print("  [bright_green]🛡️  Mitigations:[/]")
            for m_no, mitigation in enumerate(threat.mitigations, start=1):
                out.print(
                    f"    {m_no}. [green]{escape(mitigation.title)}[/] "
                    f"(Effort: {escape(mitigation.effort)}, Effectiveness: {escape(mitigation.effectiveness)})",
                    highlight=False,
                )
                out.print(f"       [bright_black]{escape(mitigation.description)}[/]", highlight=False)

        if threat.educational_note:
            out.print()
            out.print("  [bright_blue]📚 Educational Note:[/]")
            out.print(f"    [bright_black]{escape(threat.educational_note)}[/]", highlight=False)

        out.print(Rule(style="bright_black"))
