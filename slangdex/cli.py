"""slangdex CLI -- serve the API and administer the glossary."""

import click
from rich.console import Console
from rich.table import Table

from slangdex import __version__
from slangdex.config import configure_logging, load_settings
from slangdex.errors import GlossaryError

console = Console()

_KIND_STYLES = {
    "SPAM": "magenta",
    "LENGTH": "yellow",
    "AI": "red",
    "PROFANITY": "red",
    "ERROR": "bright_black",
    "OTHER": "cyan",
}


def _engine():
    from slangdex.glossary.engine import GlossaryEngine

    settings = load_settings()
    configure_logging(settings.log_level)
    return GlossaryEngine.from_settings(settings)


@click.group()
@click.version_option(version=__version__)
def main():
    """slangdex -- a community-curated slang glossary.

    Terms are submitted, screened by the moderation pipeline, reviewed by
    moderators, and ranked by votes.
    """


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    console.print(f"\n[bold blue]slangdex[/] -- Serving on http://{host}:{port}\n")
    uvicorn.run(
        "web.backend.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ── Moderators ───────────────────────────────────────────────────────


@main.command(name="create-moderator")
@click.argument("username")
@click.password_option(help="Password for the new moderator")
def create_moderator(username: str, password: str):
    """Create a moderator account."""
    engine = _engine()
    try:
        moderator = engine.moderators.create_moderator(username, password)
    except GlossaryError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"  [green]Created moderator[/] {moderator.username} (id {moderator.id})")


# ── Review queue ─────────────────────────────────────────────────────


@main.command()
def pending():
    """List terms waiting for moderator review."""
    engine = _engine()
    terms = engine.lifecycle.list_pending()

    if not terms:
        console.print("[green]Review queue is empty.[/]")
        return

    table = Table(title=f"Pending terms ({len(terms)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Term", style="cyan")
    table.add_column("Submitted")
    table.add_column("Auto verdict")

    for term in terms:
        note = term.moderation_note
        if note is None:
            verdict = "[green]clean[/]"
        else:
            style = _KIND_STYLES.get(note.kind.value, "white")
            verdict = f"[{style}]{note.serialize()[:60]}[/]"
        table.add_row(str(term.id), term.text, term.created_at[:19], verdict)

    console.print(table)


# ── Rankings ─────────────────────────────────────────────────────────


@main.command()
@click.option("--sort", "sort_key", default="score", type=click.Choice(["score", "trending"]))
@click.option("--search", "-q", default=None, help="Filter by term text")
@click.option("--limit", "-n", default=25, type=int, help="Number of rows")
@click.option("--offset", default=0, type=int, help="Rows to skip")
def top(sort_key: str, search: str | None, limit: int, offset: int):
    """Show the ranked listing of approved terms."""
    engine = _engine()
    if sort_key == "trending":
        engine.trending.refresh()
    try:
        ranked = engine.ranking.list_terms(search=search, sort_key=sort_key, limit=limit, offset=offset)
    except GlossaryError as e:
        raise click.ClickException(str(e)) from e

    if not ranked:
        console.print("[yellow]No approved terms found.[/]")
        return

    table = Table(title=f"Top terms by {sort_key}")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Term", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Trend", justify="right")
    table.add_column("Definition")

    for row in ranked:
        table.add_row(
            str(row.rank),
            row.term.text,
            str(row.term.score),
            f"{row.term.trending_score:+.2f}",
            row.term.definition[:60],
        )

    console.print(table)


@main.command(name="refresh-trending")
def refresh_trending():
    """Recompute trending scores for every term."""
    engine = _engine()
    scores = engine.trending.refresh()
    console.print(f"  [green]v[/] Refreshed {len(scores)} terms")


@main.command(name="verify-scores")
def verify_scores():
    """Check every term's score against its vote ledger."""
    engine = _engine()
    drift = engine.ledger.find_score_drift()

    if not drift:
        console.print("  [green]v[/] All scores match the vote ledger")
        return

    for d in drift:
        console.print(f"  [red]x[/] term {d.term_id}: score {d.maintained}, ledger {d.ledger}")
    raise SystemExit(1)


if __name__ == "__main__":
    main()
