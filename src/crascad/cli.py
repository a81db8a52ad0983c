# src/crascad/cli.py
"""
Crascad Command Line Interface (CLI).

A terminal presentation layer over :class:`GlossarySession`, built with
`typer` and `rich`. It renders read-only snapshots of the session and issues
core operations; all rules (validation, id allocation, audit trail, filtering,
selection) live in the core.

Usage
-----
    $ crascad list --category RESIN_MOLDING --search gate
    $ crascad show 6
    $ crascad add --term 型締め --reading かたじめ --english "Mold clamping" \\
          --meaning "Closing and locking the mold halves." --category RESIN_MOLD --user alice
    $ crascad edit 6 --meaning "Resin inlet into the cavity." --user bob
    $ crascad explain 1
"""

from __future__ import annotations

import asyncio
import base64
import mimetypes
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from crascad.agents.explainer_agent import ExplanationPanel, ExplanationView
from crascad.core.contracts.category import Category, toggle_category
from crascad.core.contracts.term import Term
from crascad.core.errors import GlossaryError
from crascad.core.query import ALL, CategoryFilter, parse_category_filter
from crascad.core.session import GlossarySession

# Ensure env vars (like GOOGLE_API_KEY) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="Crascad: manufacturing glossary in Japanese, English and Mongolian.",
    rich_markup_mode="markdown",
)
console = Console()

CATEGORY_LABELS: dict[Category, dict[str, str]] = {
    Category.GENERAL: {"ENG": "General", "MN": "Ерөнхий"},
    Category.ALJ_SPECIALIZED: {"ENG": "ALJ Specialized", "MN": "ALJ тусгай"},
    Category.TOYOTA_TERMS: {"ENG": "Toyota Terms", "MN": "Тоёотагийн нэр томьёо"},
    Category.OTHER: {"ENG": "Other", "MN": "Бусад"},
    Category.RESIN_MOLDING: {"ENG": "Resin Molding", "MN": "Хуванцар цутгалт"},
    Category.RESIN_MOLD: {"ENG": "Resin Mold", "MN": "Хуванцар хэв"},
    Category.DESIGN_SPECIALIZED: {"ENG": "Design Specialized", "MN": "Дизайны тусгай"},
}


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def category_label(category: Category, lang: str = "ENG") -> str:
    """Display label for ``category``; JP (and unknown languages) use the stored value."""
    return CATEGORY_LABELS[category].get(lang.upper(), category.value)


def _session(ctx: typer.Context) -> GlossarySession:
    session: GlossarySession = ctx.obj
    return session


def _parse_filter(value: str) -> CategoryFilter:
    try:
        return parse_category_filter(value)
    except ValueError as exc:
        names = ", ".join(c.name for c in Category)
        raise typer.BadParameter(f"Unknown category '{value}'. Use ALL or one of: {names}") from exc


def _parse_categories(values: list[str]) -> tuple[Category, ...]:
    parsed = []
    for value in values:
        cat = _parse_filter(value)
        if cat == ALL:
            raise typer.BadParameter("ALL is a filter, not a category.")
        parsed.append(cat)
    return tuple(parsed)


def image_reference(value: str) -> str:
    """Return ``value`` as an image reference.

    An existing local file is embedded as a ``data:`` URI (it must be an
    image); anything else is taken as a remote URL.
    """
    path = Path(value).expanduser()
    if not path.is_file():
        return value
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise typer.BadParameter(f"{path} is not an image file.")
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def _fail(exc: GlossaryError) -> typer.Exit:
    console.print(f"[bold red]❌ {exc.message}[/bold red]")
    return typer.Exit(code=1)


def _warn_on_write_failure(session: GlossarySession) -> None:
    if session.write_warning is not None:
        console.print(f"[yellow]⚠️ {session.write_warning.message}[/yellow]")


def _lookup(session: GlossarySession, term_id: int) -> Term:
    term = session.repository.get(term_id)
    if term is None:
        console.print(f"[bold red]❌ Term with id {term_id} does not exist.[/bold red]")
        raise typer.Exit(code=1)
    return term


def _render_term(term: Term, lang: str) -> None:
    """Render the detail view of one term, edit history newest first."""
    labels = ", ".join(category_label(c, lang) for c in term.categories)
    body = [
        f"[bold]{term.term}[/bold]  [dim]{term.reading}[/dim]",
        f"[cyan]{term.english}[/cyan]",
    ]
    if term.alias:
        body.append(f"Alias: {term.alias}")
    body += ["", term.meaning, "", f"Categories: {labels}"]
    if term.image_url:
        shown = "embedded image" if term.image_url.startswith("data:") else term.image_url
        body.append(f"Image: {shown}")
    if term.created_by or term.created_at:
        body.append(f"Created: {term.created_by or '-'} ({term.created_at or '-'})")
    console.print(Panel("\n".join(body), title=f"#{term.id}", border_style="cyan"))

    if term.history:
        console.print("[bold dim]Edit history:[/bold dim]")
        total = len(term.history)
        for idx, record in enumerate(reversed(term.history)):
            console.print(f" [dim]Edit #{total - idx}: {record.edited_by} ({record.edited_at})[/dim]")


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.callback()  # type: ignore[misc]
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None,
        typer.Option(
            "--data-dir",
            "-d",
            help="Directory holding the term store (default: CRASCAD_DATA_DIR).",
        ),
    ] = None,
) -> None:
    """Open the glossary session shared by every command."""
    ctx.obj = GlossarySession.open(data_dir=data_dir)


@app.command("list")  # type: ignore[misc]
def list_terms(
    ctx: typer.Context,
    category: Annotated[
        str, typer.Option("--category", "-c", help="ALL or a category name.")
    ] = ALL,
    search: Annotated[
        str, typer.Option("--search", "-s", help="Substring matched case-insensitively.")
    ] = "",
    lang: Annotated[str, typer.Option("--lang", "-l", help="ENG, JP or MN.")] = "ENG",
) -> None:
    """List terms matching a category filter and search text."""
    session = _session(ctx)
    session.set_category_filter(_parse_filter(category))
    session.set_search_text(search)

    table = Table(title=f"Results: {len(session.filtered)} / {session.total_count}")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Term", style="bold")
    table.add_column("Reading")
    table.add_column("English", style="cyan")
    table.add_column("Categories")
    active_id = session.active.id if session.active else None
    for term in session.filtered:
        marker = "▶ " if term.id == active_id else ""
        table.add_row(
            f"{marker}{term.id}",
            term.term,
            term.reading,
            term.english,
            ", ".join(category_label(c, lang) for c in term.categories),
        )
    console.print(table)
    if not session.filtered:
        console.print("[dim]No terms match.[/dim]")


@app.command()  # type: ignore[misc]
def show(
    ctx: typer.Context,
    term_id: Annotated[int, typer.Argument(help="Term id.")],
    lang: Annotated[str, typer.Option("--lang", "-l", help="ENG, JP or MN.")] = "ENG",
) -> None:
    """Show one term with its audit trail."""
    _render_term(_lookup(_session(ctx), term_id), lang)


@app.command()  # type: ignore[misc]
def add(
    ctx: typer.Context,
    term: Annotated[str, typer.Option("--term", "-t", help="The term itself.")],
    reading: Annotated[str, typer.Option("--reading", "-r", help="Reading (furigana).")],
    english: Annotated[str, typer.Option("--english", "-e", help="English equivalent.")],
    meaning: Annotated[str, typer.Option("--meaning", "-m", help="Meaning.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Your name, for attribution.")],
    category: Annotated[
        list[str] | None,
        typer.Option("--category", "-c", help="Category name; repeat for several."),
    ] = None,
    alias: Annotated[str | None, typer.Option("--alias", "-a", help="Common alias.")] = None,
    image: Annotated[
        str | None, typer.Option("--image", "-i", help="Image URL or local image file.")
    ] = None,
) -> None:
    """Create a new term."""
    session = _session(ctx)
    draft: dict[str, Any] = {
        "term": term,
        "reading": reading,
        "english": english,
        "meaning": meaning,
        "alias": alias,
        "categories": _parse_categories(category or [Category.GENERAL.name]),
        "image_url": image_reference(image) if image else None,
    }
    try:
        created = session.create(draft, user)
    except GlossaryError as exc:
        raise _fail(exc) from exc

    console.print(f"[bold green]✅ Created term #{created.id}[/bold green]")
    _warn_on_write_failure(session)


@app.command()  # type: ignore[misc]
def edit(
    ctx: typer.Context,
    term_id: Annotated[int, typer.Argument(help="Term id.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Your name, for attribution.")],
    term: Annotated[str | None, typer.Option("--term", "-t")] = None,
    reading: Annotated[str | None, typer.Option("--reading", "-r")] = None,
    english: Annotated[str | None, typer.Option("--english", "-e")] = None,
    meaning: Annotated[str | None, typer.Option("--meaning", "-m")] = None,
    alias: Annotated[str | None, typer.Option("--alias", "-a")] = None,
    image: Annotated[str | None, typer.Option("--image", "-i")] = None,
    add_category: Annotated[
        list[str] | None, typer.Option("--add-category", help="Category to add.")
    ] = None,
    remove_category: Annotated[
        list[str] | None,
        typer.Option("--remove-category", help="Category to remove (the last one stays)."),
    ] = None,
) -> None:
    """Edit fields of an existing term; the edit is recorded in its history."""
    session = _session(ctx)
    current = _lookup(session, term_id)

    changes: dict[str, Any] = {
        name: value
        for name, value in {
            "term": term,
            "reading": reading,
            "english": english,
            "meaning": meaning,
            "alias": alias,
        }.items()
        if value is not None
    }
    if image is not None:
        changes["image_url"] = image_reference(image) if image else None

    categories = current.categories
    for cat in _parse_categories(add_category or []):
        if cat not in categories:
            categories = toggle_category(categories, cat)
    for cat in _parse_categories(remove_category or []):
        if cat in categories:
            kept = toggle_category(categories, cat)
            if kept == categories:
                console.print(f"[yellow]Keeping '{cat.name}': a term needs a category.[/yellow]")
            categories = kept
    if categories != current.categories:
        changes["categories"] = categories

    if not changes:
        console.print("[dim]Nothing to change.[/dim]")
        return

    try:
        updated = session.edit(term_id, changes, user)
    except GlossaryError as exc:
        raise _fail(exc) from exc

    console.print(
        f"[bold green]✅ Updated term #{updated.id}[/bold green] (edit #{len(updated.history)})"
    )
    _warn_on_write_failure(session)


@app.command()  # type: ignore[misc]
def delete(
    ctx: typer.Context,
    term_id: Annotated[int, typer.Argument(help="Term id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Delete a term. Unknown ids are ignored."""
    session = _session(ctx)
    if not yes and not Confirm.ask(f"Delete term #{term_id}?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return
    session.delete(term_id)
    console.print(f"[bold green]✅ Deleted term #{term_id}[/bold green]")
    _warn_on_write_failure(session)


@app.command()  # type: ignore[misc]
def categories(
    ctx: typer.Context,
    lang: Annotated[str, typer.Option("--lang", "-l", help="ENG, JP or MN.")] = "ENG",
) -> None:
    """List the categories with the number of terms in each."""
    session = _session(ctx)
    table = Table(title=f"All: {session.total_count}")
    table.add_column("Name", style="dim")
    table.add_column("Label", style="bold")
    table.add_column("Terms", justify="right")
    for cat, count in session.category_counts.items():
        table.add_row(cat.name, category_label(cat, lang), str(count))
    console.print(table)


@app.command()  # type: ignore[misc]
def explain(
    ctx: typer.Context,
    term_id: Annotated[int, typer.Argument(help="Term id.")],
) -> None:
    """Ask the AI explainer for a deeper commentary on a term."""
    term = _lookup(_session(ctx), term_id)

    async def _fetch() -> ExplanationView:
        panel = ExplanationPanel()
        return await panel.open(term)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"[cyan]Explaining {term.term}...", total=None)
        view = asyncio.run(_fetch())

    if view.status == "error":
        console.print(f"[bold red]❌ {view.error}[/bold red]")
        raise typer.Exit(code=1)

    console.rule(f"[bold]{term.term}[/bold] · {term.english}")
    console.print(Markdown(view.content))


if __name__ == "__main__":
    app()
