"""CLI: Tyr threat modeling assistant.

Usage:
    tyr analyze -i architecture.md                       # console report
    tyr analyze -i main.tf -t terraform -f html -o report.html
    tyr analyze -i openapi.json -t api -f json -r high
    tyr scan -d infra/ -p prod -f json -o scan.json
    tyr interactive -c architecture.md
    tyr providers
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from tyr.config import AGENT_VERSION, get_settings
from tyr.exceptions import TyrError
from tyr.llm import available_providers
from tyr.models import InputType
from tyr.reporters import ConsoleReporter, HtmlReporter, JsonReporter
from tyr.services.analyzer import ThreatAnalyzer
from tyr.services.scanner import DirectoryScanner
from tyr.services.session import ConversationSession

console = Console()
# Banner, progress, logs and errors; stdout carries only the report.
err_console = Console(stderr=True)
logger = logging.getLogger("tyr")

BANNER = """\
[bright_cyan]╔════════════════════════════════════════════════════════════╗
║   ⚔️  TYR - AI THREAT MODELING ASSISTANT                    ║
║   Design-Time Security Analysis with AI                    ║
╚════════════════════════════════════════════════════════════╝[/]"""

DEFAULT_HTML_REPORT = "threat_report.html"
DEFAULT_SCAN_HTML_REPORT = "scan_report.html"

FORMATS = click.Choice(["console", "json", "html"], case_sensitive=False)


def setup_logging(level: str) -> None:
    """Configure rich-formatted logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


def _parse_input_type(ctx: click.Context, param: click.Parameter, value: str) -> InputType:
    try:
        return InputType.from_string(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _fail(exc: Exception) -> NoReturn:
    err_console.print(f"[bold red]❌ Error:[/] {escape(str(exc))}")
    sys.exit(1)


def _write(path: Path, text: str, what: str) -> None:
    path.write_text(text, encoding="utf-8")
    err_console.print(f"[bold green]✅ {what} written to {escape(str(path))}[/]")


@click.group()
@click.version_option(AGENT_VERSION, prog_name="tyr")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: LOG_LEVEL from config).",
)
def main(log_level: str | None) -> None:
    """Tyr - AI-powered threat modeling assistant for design-time security analysis."""
    setup_logging(log_level or get_settings().log_level)
    err_console.print(BANNER)


# ──────────────────────────────────────────────────────────────
# analyze
# ──────────────────────────────────────────────────────────────

@main.command()
@click.option(
    "-i", "--input", "input_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Input file (architecture description, Terraform, K8s manifest, API spec).",
)
@click.option(
    "-t", "--input-type",
    default="architecture",
    callback=_parse_input_type,
    help="Type of input: architecture, terraform, kubernetes, api-spec, system.",
)
@click.option("-f", "--format", "fmt", type=FORMATS, default="console", help="Output format.")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Output file (json: stdout when omitted; html: {DEFAULT_HTML_REPORT}).",
)
@click.option(
    "-r", "--risk-threshold",
    default="medium",
    help="Minimum risk shown on the console: low, medium, high, critical.",
)
@click.option(
    "--explain/--no-explain",
    default=True,
    help="Include an educational note with each threat.",
)
def analyze(
    input_path: Path,
    input_type: InputType,
    fmt: str,
    output: Path | None,
    risk_threshold: str,
    explain: bool,
) -> None:
    """Analyze a system for security threats."""
    err_console.print("[bold cyan]🔍 Starting threat analysis...[/]")

    try:
        content = input_path.read_text(encoding="utf-8")
        with ThreatAnalyzer() as analyzer:
            err_console.print(f"[yellow]🤖 Analyzing with {escape(analyzer.provider_name)}...[/]")
            result = analyzer.analyze(content, input_type, explain)
    except (OSError, UnicodeDecodeError, TyrError) as exc:
        _fail(exc)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(1)

    match fmt.lower():
        case "console":
            ConsoleReporter(console).generate(result, risk_threshold)
        case "json":
            text = JsonReporter().generate(result)
            if output:
                _write(output, text, "Report")
            else:
                click.echo(text)
        case "html":
            _write(output or Path(DEFAULT_HTML_REPORT), HtmlReporter().generate(result), "HTML report")


# ──────────────────────────────────────────────────────────────
# scan
# ──────────────────────────────────────────────────────────────

@main.command()
@click.option(
    "-d", "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory to scan.",
)
@click.option(
    "-p", "--pattern",
    default=None,
    help="Only files whose name contains this text (e.g. 'prod', '.tf').",
)
@click.option("-f", "--format", "fmt", type=FORMATS, default="console", help="Output format.")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Output file (json: stdout when omitted; html: {DEFAULT_SCAN_HTML_REPORT}).",
)
@click.option(
    "-r", "--risk-threshold",
    default="medium",
    help="Minimum risk shown on the console: low, medium, high, critical.",
)
def scan(
    directory: Path,
    pattern: str | None,
    fmt: str,
    output: Path | None,
    risk_threshold: str,
) -> None:
    """Analyze a directory of infrastructure files."""
    err_console.print("[bold cyan]📁 Scanning directory for security issues...[/]")

    try:
        with ThreatAnalyzer() as analyzer:
            report = DirectoryScanner(analyzer).scan(directory, pattern)
    except TyrError as exc:
        _fail(exc)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(1)

    match fmt.lower():
        case "console":
            ConsoleReporter(console).render_scan(report, risk_threshold)
        case "json":
            text = JsonReporter().generate_scan(report)
            if output:
                _write(output, text, "Scan report")
            else:
                click.echo(text)
        case "html":
            _write(
                output or Path(DEFAULT_SCAN_HTML_REPORT),
                HtmlReporter().generate_scan(report),
                "HTML scan report",
            )


# ──────────────────────────────────────────────────────────────
# interactive
# ──────────────────────────────────────────────────────────────

def print_help() -> None:
    console.print("[bold bright_yellow]Available commands:[/]")
    console.print("  [green]describe[/] - Describe your system architecture")
    console.print("  [green]paste[/]    - Paste infrastructure code")
    console.print("  [green]question[/] - Ask specific security questions")
    console.print("  [yellow]clear[/]    - Clear conversation history")
    console.print("  [red]exit[/]     - Exit interactive mode")


@main.command()
@click.option(
    "-c", "--context",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Initial context file, sent along with the first question.",
)
def interactive(context: Path | None) -> None:
    """Interactive mode for iterative threat modeling."""
    console.print("[bold cyan]💬 Interactive Threat Modeling Mode[/]")
    console.print("[yellow]Type 'exit' to quit, 'help' for commands[/]\n")

    try:
        context_text = context.read_text(encoding="utf-8") if context else None
        analyzer = ThreatAnalyzer()
    except (OSError, UnicodeDecodeError, TyrError) as exc:
        _fail(exc)

    with analyzer:
        session = ConversationSession(analyzer)
        if context_text is not None:
            session.load_context(context_text)
            console.print("[green]✅ Context loaded[/]")

        while True:
            try:
                line = console.input("[bold bright_blue]tyr> [/]").strip()
            except (EOFError, KeyboardInterrupt):
                console.print()
                break

            match line:
                case "exit" | "quit":
                    break
                case "help":
                    print_help()
                    continue
                case "clear":
                    session.clear()
                    console.print("[green]✅ Conversation history cleared[/]")
                    continue
                case "":
                    continue

            console.print("[yellow]🤖 Analyzing...[/]")
            try:
                response = session.ask(line)
            except TyrError as exc:
                console.print(f"[red]❌ Error:[/] {escape(str(exc))}")
            else:
                console.print()
                console.print(Markdown(response))
            console.print()


# ──────────────────────────────────────────────────────────────
# providers
# ──────────────────────────────────────────────────────────────

@main.command()
def providers() -> None:
    """List the supported AI backends and the configured one."""
    settings = get_settings()
    active = settings.ai_provider.strip().lower()
    models = {"claude": settings.anthropic_model, "ollama": settings.ollama_model}

    table = Table(title="AI Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Model")
    table.add_column("Active", justify="center")
    for name in available_providers():
        table.add_row(name, models.get(name, "-"), "[green]✔[/]" if name == active else "")
    console.print(table)

    if active not in available_providers():
        console.print(f"[yellow]⚠️  Configured provider '{escape(active)}' is not recognized.[/]")


if __name__ == "__main__":
    main()
