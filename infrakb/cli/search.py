"""Search commands for the InfraKB CLI.

Usage:
    infrakb search "firewall state table"
    infrakb search "방화벽" --type failure --limit 5
    infrakb search database --component db-server --tag security
    infrakb component firewall
    infrakb related REL-SEC-002
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from infrakb.config import settings
from infrakb.knowledge.seed import default_catalogue
from infrakb.search.engine import SearchEngine, SearchOptions, SearchResult

console = Console()


@lru_cache(maxsize=1)
def get_engine() -> SearchEngine:
    """Search engine over the default catalogue, built on first use."""
    return SearchEngine.from_catalogue(default_catalogue())


def _results_table(title: str, results: list[SearchResult], score_label: str = "Score") -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column(score_label, justify="right")
    table.add_column("Title")
    table.add_column("Summary", style="dim")
    for r in results:
        table.add_row(r.id, r.type, f"{r.score:.2f}", r.title, r.summary)
    return table


def search(
    query: str = typer.Argument(..., help="Free-text query, English or Korean."),
    types: Optional[List[str]] = typer.Option(
        None,
        "--type",
        "-t",
        help="Restrict to a knowledge type (repeatable): relationship, pattern, antipattern, failure, tip, performance.",
    ),
    components: Optional[List[str]] = typer.Option(
        None,
        "--component",
        "-c",
        help="Only entries referencing this component type (repeatable).",
    ),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Only entries carrying this tag (repeatable)."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum number of results."),
    min_score: Optional[float] = typer.Option(None, "--min-score", help="Minimum relevance between 0 and 1."),
) -> None:
    """Search the knowledge catalogue."""
    if limit is not None:
        limit = max(1, min(limit, settings.max_search_limit))
    options = SearchOptions(
        types=tuple(types) if types else ("all",),
        components=components or None,
        tags=tags or None,
        limit=limit,
        min_score=min_score,
    )
    results = get_engine().search_knowledge(query, options)
    if not results:
        console.print(f"[yellow]No knowledge found for '{query}'.[/yellow]")
        return
    console.print(_results_table(f"Results for '{query}'", results))


def component(
    component_type: str = typer.Argument(..., help="Component type, e.g. firewall or db-server."),
) -> None:
    """List everything the catalogue knows about one component type."""
    results = get_engine().search_by_component(component_type)
    if not results:
        console.print(f"[yellow]No knowledge references '{component_type}'.[/yellow]")
        return
    console.print(_results_table(f"Knowledge about {component_type}", results, score_label="Confidence"))


def related(
    entry_id: str = typer.Argument(..., help="Knowledge entry ID, e.g. REL-SEC-002."),
) -> None:
    """Show entries sharing components or tags with an entry."""
    results = get_engine().get_related_knowledge(entry_id)
    if not results:
        console.print(f"[yellow]Nothing related to '{entry_id}'.[/yellow]")
        return
    console.print(_results_table(f"Related to {entry_id}", results, score_label="Overlap"))
