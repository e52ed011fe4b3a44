"""HTML reporter — self-contained single-page threat reports.

All model-supplied text is escaped; the page has no external assets.

Usage:
    from tyr.reporters import HtmlReporter
    Path("threat_report.html").write_text(HtmlReporter().generate(result))
"""

from __future__ import annotations

from html import escape

from tyr.config import SCORE_BAND_CRITICAL, SCORE_BAND_HIGH, SCORE_BAND_MEDIUM
from tyr.models import AnalysisResult, Mitigation, Threat
from tyr.services.scanner import ScanReport

_STYLE = """\
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
            line-height: 1.6; color: #e0e0e0; min-height: 100vh; padding: 2rem;
            background: linear-gradient(135deg, #0a0e27 0%, #1a1f3a 100%);
        }
        .container {
            max-width: 1200px; margin: 0 auto; padding: 3rem; border-radius: 20px;
            background: rgba(255, 255, 255, 0.03); border: 1px solid rgba(255, 255, 255, 0.1);
        }
        .header { text-align: center; margin-bottom: 3rem; padding-bottom: 2rem;
                  border-bottom: 2px solid rgba(100, 200, 255, 0.3); }
        .header h1 { font-size: 2.5rem; color: #64c8ff; }
        .timestamp { color: #888; font-size: 0.9rem; }
        h2 { color: #64c8ff; margin: 2rem 0 1rem; }
        .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr));
                   gap: 1.5rem; margin-bottom: 2rem; }
        .summary-card { padding: 1.5rem; border-radius: 12px;
                        background: rgba(100, 200, 255, 0.08); border: 1px solid rgba(100, 200, 255, 0.2); }
        .summary-card h3 { font-size: 0.9rem; color: #64c8ff; text-transform: uppercase; letter-spacing: 1px; }
        .summary-card .value { font-size: 2rem; font-weight: bold; color: #fff; }
        .risk-critical { color: #ff4444 !important; }
        .risk-high { color: #ff8844 !important; }
        .risk-medium { color: #ffbb44 !important; }
        .risk-low { color: #44ff88 !important; }
        .threat-card { background: rgba(255, 255, 255, 0.03); margin-bottom: 2rem; padding: 2rem;
                       border-radius: 12px; border-left: 4px solid; }
        .threat-card.critical { border-left-color: #ff4444; }
        .threat-card.high { border-left-color: #ff8844; }
        .threat-card.medium { border-left-color: #ffbb44; }
        .threat-card.low { border-left-color: #44ff88; }
        .threat-header { display: flex; justify-content: space-between; align-items: start; }
        .threat-title { font-size: 1.4rem; color: #fff; }
        .threat-meta { display: flex; gap: 1rem; font-size: 0.85rem; color: #888; }
        .badge { padding: 0.3rem 0.8rem; border-radius: 20px; font-size: 0.75rem;
                 font-weight: bold; text-transform: uppercase; color: #000; }
        .badge.critical { background: #ff4444; }
        .badge.high { background: #ff8844; }
        .badge.medium { background: #ffbb44; }
        .badge.low { background: #44ff88; }
        .threat-description { margin: 1rem 0; padding: 1rem; background: rgba(0, 0, 0, 0.2); border-radius: 8px; }
        .impact { margin: 1rem 0; padding: 0.75rem; background: rgba(255, 100, 100, 0.1); border-radius: 6px; }
        .impact strong, .attack-path h4 { color: #ff6666; }
        .attack-step { padding: 0.75rem; margin-bottom: 0.5rem; background: rgba(255, 100, 100, 0.1);
                       border-left: 3px solid #ff6666; border-radius: 4px; }
        .components { margin: 1rem 0; color: #bbb; }
        .mitigations h4, .mitigation-title { color: #44ff88; }
        .mitigation { padding: 1rem; margin-bottom: 0.75rem; background: rgba(100, 255, 150, 0.05);
                      border-left: 3px solid #44ff88; border-radius: 4px; }
        .mitigation-meta { font-size: 0.85rem; color: #888; margin-top: 0.5rem; }
        .educational-note { margin-top: 1.5rem; padding: 1rem; background: rgba(100, 200, 255, 0.1);
                            border-left: 3px solid #64c8ff; border-radius: 4px; }
        .educational-note h4 { color: #64c8ff; }
        .recommendations { margin-top: 3rem; padding: 2rem; border-radius: 12px;
                           background: rgba(100, 200, 255, 0.08); border: 1px solid rgba(100, 200, 255, 0.2); }
        .recommendations ul { list-style: none; }
        .recommendations li { padding: 0.75rem 0 0.75rem 1.5rem; position: relative; }
        .recommendations li:before { content: "→"; position: absolute; left: 0; color: #64c8ff; }
        .file-section { margin-top: 3rem; padding-top: 2rem; border-top: 1px solid rgba(255, 255, 255, 0.1); }
        .failures li { color: #ff8844; }
        @media (max-width: 768px) {
            .container { padding: 1.5rem; }
            .summary { grid-template-columns: 1fr; }
        }"""


def risk_class(score: float) -> str:
    """CSS class for an overall score."""
    if score >= SCORE_BAND_CRITICAL:
        return "risk-critical"
    if score >= SCORE_BAND_HIGH:
        return "risk-high"
    if score >= SCORE_BAND_MEDIUM:
        return "risk-medium"
    return "risk-low"


class HtmlReporter:
    """Renders results as standalone HTML documents."""

    def generate(self, result: AnalysisResult) -> str:
        body = f"""
        <div class="header">
            <h1>🛡️ Threat Analysis Report</h1>
            <p class="timestamp">Generated: {escape(result.timestamp)}</p>
        </div>
        {self._result_section(result)}"""
        return self._page(f"Threat Analysis Report - {result.timestamp}", body)

    def generate_scan(self, report: ScanReport) -> str:
        sections = "".join(
            f"""
        <div class="file-section">
            <h2>📄 {escape(str(fa.path))}</h2>
            {self._result_section(fa.result)}
        </div>"""
            for fa in report.results
        )
        failures = ""
        if report.failures:
            items = "".join(
                f"<li>{escape(str(f.path))}: {escape(f.error)}</li>" for f in report.failures
            )
            failures = f'<div class="failures"><h2>⚠️ Failed Files</h2><ul>{items}</ul></div>'

        body = f"""
        <div class="header">
            <h1>🛡️ Directory Scan Report</h1>
            <p class="timestamp">{escape(str(report.directory))} — {len(report.results)} analyzed,
               {len(report.failures)} failed, {report.total_threats} threats</p>
        </div>
        {sections}
        {failures}"""
        return self._page(f"Directory Scan Report - {report.directory}", body)

    # ──────────────────────────────────────────────────────────
    # Fragments
    # ──────────────────────────────────────────────────────────

    @staticmethod
    def _page(title: str, body: str) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>
{_STYLE}
    </style>
</head>
<body>
    <div class="container">{body}
    </div>
</body>
</html>"""

    def _result_section(self, result: AnalysisResult) -> str:
        summary = result.summary
        cards = "".join(self._threat_card(t) for t in result.threats)
        return f"""
        <div class="summary">
            <div class="summary-card">
                <h3>Overall Risk Score</h3>
                <div class="value {risk_class(summary.overall_risk_score)}">{summary.overall_risk_score:.1f}/100</div>
            </div>
            <div class="summary-card"><h3>Total Threats</h3><div class="value">{summary.total_threats}</div></div>
            <div class="summary-card"><h3>Critical Risks</h3><div class="value risk-critical">{summary.by_risk_level.critical}</div></div>
            <div class="summary-card"><h3>High Risks</h3><div class="value risk-high">{summary.by_risk_level.high}</div></div>
        </div>
        <div class="threats">
            <h2>🎯 Identified Threats</h2>
            {cards}
        </div>
        {self._recommendations(result.recommendations)}"""

    def _threat_card(self, threat: Threat) -> str:
        level = threat.risk_level.value.lower()
        components = ""
        if threat.affected_components:
            components = (
                '<div class="components"><strong>Affected Components:</strong> '
                + ", ".join(escape(c) for c in threat.affected_components)
                + "</div>"
            )
        note = ""
        if threat.educational_note:
            note = f"""
                <div class="educational-note">
                    <h4>📚 Educational Note</h4>
                    <p>{escape(threat.educational_note)}</p>
                </div>"""
        return f"""
            <div class="threat-card {level}">
                <div class="threat-header">
                    <div>
                        <div class="threat-title">{escape(threat.title)}</div>
                        <div class="threat-meta">
                            <span>ID: {escape(threat.id)}</span>
                            <span>Category: {escape(threat.category.display_name)}</span>
                        </div>
                    </div>
                    <span class="badge {level}">{threat.risk_level.label}</span>
                </div>
                <div class="threat-description">{escape(threat.description)}</div>
                <div class="impact"><strong>Impact:</strong> {escape(threat.impact)}</div>
                {components}
                {self._attack_path(threat.attack_path)}
                {self._mitigations(threat.mitigations)}{note}
            </div>"""

    @staticmethod
    def _attack_path(steps: list[str]) -> str:
        if not steps:
            return ""
        rows = "".join(
            f'<div class="attack-step">{i}. {escape(step)}</div>'
            for i, step in enumerate(steps, start=1)
        )
        return f'<div class="attack-path"><h4>🎯 Attack Path</h4>{rows}</div>'

    @staticmethod
    def _mitigations(mitigations: list[Mitigation]) -> str:
        if not mitigations:
            return ""
        rows = "".join(
            f"""
                <div class="mitigation">
                    <div class="mitigation-title">{escape(m.title)}</div>
                    <div>{escape(m.description)}</div>
                    <div class="mitigation-meta">Effort: {escape(m.effort)} | Effectiveness: {escape(m.effectiveness)}</div>
                </div>"""
            for m in mitigations
        )
        return f'<div class="mitigations"><h4>🛡️ Mitigations</h4>{rows}</div>'

    @staticmethod
    def _recommendations(recommendations: list[str]) -> str:
        if not recommendations:
            return ""
        items = "".join(f"<li>{escape(rec)}</li>" for rec in recommendations)
        return f'<div class="recommendations"><h2>💡 Recommendations</h2><ul>{items}</ul></div>'
