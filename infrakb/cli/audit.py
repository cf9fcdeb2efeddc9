"""Catalogue audit commands for the InfraKB CLI.

Usage:
    infrakb audit-sources [--stale-days 180]
    infrakb check diagram.json
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from infrakb.config import settings
from infrakb.enrich.context import enrich_context
from infrakb.knowledge.infra import InfraSpec
from infrakb.knowledge.seed import default_catalogue
from infrakb.knowledge.source_validator import get_source_type_coverage, get_stale_entries, validate_all_sources

logger = logging.getLogger(__name__)

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "dim"}


def audit_sources(
    stale_days: Optional[int] = typer.Option(
        None,
        "--stale-days",
        help="Age in days after which a source or review counts as stale (default from INFRAKB_STALE_SOURCE_DAYS).",
    ),
) -> None:
    """Validate every cited source and report stale entries and source coverage."""
    stale_days = stale_days if stale_days is not None else settings.stale_source_days
    catalogue = default_catalogue()
    report = validate_all_sources(catalogue, stale_days=stale_days)

    console.print(Panel(
        f"Total sources: {report.total_sources}\n"
        f"Valid:         {report.valid_count}\n"
        f"With warnings: {report.warning_count}\n"
        f"With errors:   {report.error_count}",
        title="Source audit",
        border_style="red" if report.error_count else "green",
    ))

    if report.issues:
        table = Table(title="Source issues")
        table.add_column("Entry", style="cyan", no_wrap=True)
        table.add_column("Source")
        table.add_column("Issue")
        for item in report.issues:
            for issue in item.source.issues:
                style = _SEVERITY_STYLE[issue.severity]
                table.add_row(item.entry_id, item.source.source_title, f"[{style}]{issue.code}[/{style}] {issue.message}")
        console.print(table)

    coverage = Table(title="Source type coverage")
    coverage.add_column("Source type")
    coverage.add_column("Count", justify="right")
    for source_type, count in get_source_type_coverage(catalogue).items():
        coverage.add_row(source_type, str(count))
    console.print(coverage)

    stale = get_stale_entries(catalogue, max_age_days=stale_days)
    if stale:
        console.print(f"[yellow]{len(stale)} entr{'y' if len(stale) == 1 else 'ies'} not reviewed in {stale_days} days:[/yellow]")
        for entry in stale:
            console.print(f"  {entry.entry_id} (last reviewed {entry.last_reviewed}, {entry.days_since_review} days)")
    else:
        console.print(f"[green]No entries older than {stale_days} days.[/green]")


def check(
    spec_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="InfraSpec JSON file."),
) -> None:
    """Check a diagram against the catalogue. Exits 1 when violations are found."""
    try:
        spec = InfraSpec.model_validate_json(spec_file.read_text(encoding="utf-8"))
    except ValidationError as exc:
        console.print(f"[red]Invalid diagram file {spec_file}:[/red]\n{exc}")
        raise typer.Exit(code=2)

    catalogue = default_catalogue()
    enriched = enrich_context(
        spec,
        catalogue.relationships,
        anti_patterns=catalogue.anti_patterns,
        failures=catalogue.failures,
        tips=catalogue.tips,
        min_confidence=settings.enrich_min_confidence,
    )

    for ap in enriched.violations:
        console.print(Panel(
            f"{ap.problem_ko}\n\n[bold]Solution:[/bold] {ap.solution_ko}",
            title=f"[red]{ap.id} {ap.name} ({ap.severity})[/red]",
            border_style="red",
        ))
    for rel in enriched.relationships:
        if rel.relationship_type == "conflicts":
            console.print(f"[red]Conflict:[/red] {rel.source} conflicts {rel.target} ({rel.id}) {rel.reason}")
    for rel in enriched.suggestions:
        missing = rel.target if rel.source in spec.node_types() else rel.source
        style = "yellow" if rel.relationship_type == "requires" else "dim"
        console.print(f"[{style}]Missing {missing}:[/{style}] {rel.reason} ({rel.id})")
    for failure in enriched.risks:
        console.print(f"[magenta]Risk:[/magenta] {failure.id} {failure.title_ko} ({failure.impact}, {failure.likelihood})")
    for tip in enriched.tips:
        console.print(f"[cyan]Tip:[/cyan] {tip.tip_ko}")

    if enriched.has_violations:
        logger.info("Diagram %s has violations", spec_file)
        raise typer.Exit(code=1)
    console.print("[green]No violations found.[/green]")
