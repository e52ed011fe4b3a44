"""Report renderers for analysis and scan results."""

from tyr.reporters.console import ConsoleReporter, filter_by_threshold
from tyr.reporters.html_reporter import HtmlReporter
from tyr.reporters.json_reporter import JsonReporter

__all__ = ["ConsoleReporter", "HtmlReporter", "JsonReporter", "filter_by_threshold"]
