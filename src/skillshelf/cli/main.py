"""CLI interface for skillshelf using Typer."""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from skillshelf.core.exceptions import SkillError
from skillshelf.core.prompt import render_skill_index
from skillshelf.core.registry import SkillRegistry
from skillshelf.core.selection import SelectionContext, select_skills
from skillshelf.core.skill_loader import SkillLoader
from skillshelf.utils.config import Config
from skillshelf.utils.logging import setup_logging

app = typer.Typer(
    name="skillshelf",
    help="Skillshelf: discover and serve skill definitions",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


def _registry(ctx: typer.Context) -> SkillRegistry:
    """Build the registry for the configured skill roots."""
    config: Config = ctx.obj["config"]
    try:
        return SkillLoader.from_config(config).load()
    except SkillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    workspace: Annotated[
        Path,
        typer.Option("--workspace", "-w", help="Path to workspace directory"),
    ] = Path("."),
    roots: Annotated[
        list[Path] | None,
        typer.Option(
            "--root",
            "-r",
            help="Skill root directory (repeatable, overrides config)",
        ),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on the first invalid skill"),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log to stderr")
    ] = False,
) -> None:
    """
    Skillshelf: discover and serve skill definitions.

    Configuration is read from <workspace>/config.yaml when present.
    """
    overrides: dict = {}
    if roots:
        overrides["skill_paths"] = [str(root.resolve()) for root in roots]
    if strict:
        overrides["strict"] = True

    try:
        cfg = Config.load(workspace, overrides)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error loading config: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging(cfg, console_output=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@app.command("list")
def list_skills(ctx: typer.Context) -> None:
    """List all discovered skills."""
    registry = _registry(ctx)

    console.print(
        typer.style(f"Available Skills: {len(registry)}", bold=True, fg="cyan")
    )
    for skill in registry:
        marker = " (always)" if skill.always_apply else ""
        label = escape(typer.style(skill.id, bold=True, fg="cyan"))
        console.print(f"\n{label}{marker}")
        console.print(f"  {skill.name}", markup=False)
        console.print(f"  {skill.description}", markup=False)


@app.command()
def show(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="Skill id (directory name)"),
    references: bool = typer.Option(
        False, "--references", help="List bundled reference files"
    ),
) -> None:
    """Print the body of a skill."""
    registry = _registry(ctx)

    try:
        body = registry.load_body(skill_id)
        ref_names = registry.list_references(skill_id) if references else []
    except SkillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(body, markup=False, highlight=False)
    if references:
        console.print("\nReferences:")
        if not ref_names:
            console.print("  (none)")
        for name in ref_names:
            console.print(f"  - {name}", markup=False)


@app.command()
def select(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Task text to match against skills"),
    loaded: Annotated[
        list[str] | None,
        typer.Option("--loaded", "-l", help="Skill id already loaded (repeatable)"),
    ] = None,
) -> None:
    """Show which skills a request would activate."""
    registry = _registry(ctx)
    config: Config = ctx.obj["config"]

    context = SelectionContext(task_text=text, loaded_ids=frozenset(loaded or []))
    selected = select_skills(registry, context, min_score=config.min_score)

    if not selected:
        console.print("[yellow]No skills selected[/yellow]")
        return
    for skill_id in selected:
        console.print(skill_id, markup=False)


@app.command()
def reference(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="Skill id (directory name)"),
    path: str = typer.Argument(..., help="Path relative to the skill directory"),
) -> None:
    """Print a reference file bundled with a skill."""
    registry = _registry(ctx)

    try:
        content = registry.load_reference(skill_id, path)
    except SkillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(content, markup=False, highlight=False)


@app.command()
def index(ctx: typer.Context) -> None:
    """Print the metadata block a host injects into its prompt."""
    registry = _registry(ctx)
    console.print(render_skill_index(registry), markup=False, highlight=False)


@app.command()
def check(ctx: typer.Context) -> None:
    """Validate all skill directories, failing if any is invalid."""
    registry = _registry(ctx)

    if not registry.errors:
        console.print(f"[green]OK: {len(registry)} skill(s) valid[/green]")
        return

    for error in registry.errors:
        console.print(
            f"[red]{error.kind.value}[/red] {escape(str(error))}", highlight=False
        )
    console.print(f"[red]{len(registry.errors)} invalid skill(s)[/red]")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
