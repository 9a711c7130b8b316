"""
Command-line interface for the rewrite engine.

Uses Typer to expose the rewriter, the URL rewriter and the referer lookup
for trying rules against saved entry content. Supports loading .env files
for the embed configuration variables.
"""

from __future__ import annotations

from pathlib import Path
import sys

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import AppConfig, load_config
from .core.rules import parse_rules
from .core.types import Entry, Feed
from .logging_utils import setup_logging
from .rewrite.predefined import predefined_rules_for
from .rewrite.referer import get_referer_for_url
from .rewrite.rewriter import rewrite
from .rewrite.url import rewrite_entry_url

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)
console = Console()


def _setup(config: Path | None, log_level: str | None) -> AppConfig:
    if load_dotenv is not None:
        load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


@app.command()
def content(
    url: str = typer.Argument(..., help="Entry URL."),
    input: Path | None = typer.Option(
        None, "--input", "-i", exists=True, readable=True, help="File holding the entry HTML (default: stdin)."
    ),
    title: str = typer.Option("", "--title", "-t", help="Entry title."),
    rules: str = typer.Option("", "--rules", "-r", help="Custom rule text overriding predefined rules."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, help="YAML config file."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Rewrite an entry's title and content and print the result."""
    cfg = _setup(config, log_level)

    if input is not None:
        body = input.read_text(encoding="utf-8")
    else:
        body = sys.stdin.read()

    entry = rewrite(url, Entry(url=url, title=title, content=body), rules, cfg.rewrite)

    if entry.title:
        console.print(entry.title, markup=False, highlight=False, emoji=False, soft_wrap=True)
    console.print(entry.content, markup=False, highlight=False, emoji=False, soft_wrap=True)


@app.command()
def url(
    entry_url: str = typer.Argument(..., help="Entry URL."),
    rule: str = typer.Option(..., "--rule", help='URL rewrite rule: rewrite("regex"|"replacement").'),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Print the entry URL after applying a URL rewrite rule."""
    _setup(None, log_level)
    console.print(
        rewrite_entry_url(Feed(url_rewrite_rules=rule), Entry(url=entry_url)),
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


@app.command()
def referer(media_url: str = typer.Argument(..., help="Media URL.")):
    """Print the referer to send for a media URL, if any."""
    value = get_referer_for_url(media_url)
    if value:
        console.print(value, markup=False, highlight=False, emoji=False, soft_wrap=True)


@app.command(name="rules")
def show_rules(
    entry_url: str = typer.Argument(..., help="Entry URL."),
    rules: str = typer.Option("", "--rules", "-r", help="Custom rule text to parse instead."),
):
    """Show the rules that would run for an entry URL."""
    text = rules if rules.strip() else predefined_rules_for(entry_url)

    table = Table(title=escape(text) if text else "(no predefined rules)")
    table.add_column("Rule")
    table.add_column("Arguments")
    for rule in parse_rules(text):
        table.add_row(escape(rule.name), escape(" | ".join(repr(arg) for arg in rule.args)))
    table.add_row("add_pdf_download_link", "")
    console.print(table)


if __name__ == "__main__":
    app()
