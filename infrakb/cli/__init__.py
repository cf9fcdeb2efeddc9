"""InfraKB CLI: query and audit the infrastructure knowledge catalogue.

Entry point registered in pyproject.toml:
    infrakb = "infrakb.cli:app"

Commands:
    infrakb search         free-text search (English or Korean)
    infrakb component      everything known about one component type
    infrakb related        entries related to a given entry
    infrakb audit-sources  validate citations, list stale entries
    infrakb check          check a diagram JSON against the catalogue

Usage:
    infrakb --help
    infrakb search "firewall" --type failure
    INFRAKB_LOG_LEVEL=DEBUG infrakb audit-sources
"""

import logging

import typer
from rich.logging import RichHandler

from infrakb.cli.audit import audit_sources, check
from infrakb.cli.search import component, related, search
from infrakb.config import settings

app = typer.Typer(
    name="infrakb",
    help="InfraKB CLI: infrastructure architecture knowledge base",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


app.command()(search)
app.command()(component)
app.command()(related)
app.command(name="audit-sources")(audit_sources)
app.command()(check)
