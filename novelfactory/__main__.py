"""
NovelFactory CLI – co-write a novel with an LLM
 • init / idea → outline → plan → write → improve → export
 • one-click runs the whole pipeline
 • prompts, models, settings and saved projects managed from here

State lives in NOVELFACTORY_HOME (default ~/.novelfactory).
"""

from __future__ import annotations

import json
import signal
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

import jsonschema
import pydantic
import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from novelfactory import catalog, config, logconf
from novelfactory.errors import NovelFactoryError
from novelfactory.export.manuscript import FORMATS, book_stats, display_title, export_book
from novelfactory.generators.genres import GENRE_REQUIREMENTS, GENRES
from novelfactory.generators.prompt_builders import TemplateEngine
from novelfactory.llm.openai_wrapper import call_llm
from novelfactory.modal import console_acknowledge, console_ask, console_confirm
from novelfactory.models import MODEL_STEPS, Book, Provider, Settings, TemplateName
from novelfactory.storage import ProjectStore
from novelfactory.workflow import Studio


@dataclass
class Session:
    store: ProjectStore
    settings: Settings


app = typer.Typer(pretty_exceptions_show_locals=False, no_args_is_help=True)
project_app = typer.Typer(help="Save, load and share projects.", no_args_is_help=True)
prompt_app = typer.Typer(help="Inspect and override prompt templates.", no_args_is_help=True)
app.add_typer(project_app, name="project")
app.add_typer(prompt_app, name="prompt")


@app.callback()
def main(
    ctx: typer.Context,
    home: Path | None = typer.Option(None, "--home", help="Data directory."),
    log_level: str | None = typer.Option(None, "--log-level"),
):
    config.load_env()
    root = config.home_dir(home)
    logconf.init(log_level or config.log_level(), log_dir=root / "logs")
    store = ProjectStore(root)
    with _guard():
        ctx.obj = Session(store=store, settings=store.load_settings())


# ═════════ helpers ═════════
@contextmanager
def _guard() -> Iterator[None]:
    try:
        yield
    except NovelFactoryError as e:
        print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(1)
    except jsonschema.ValidationError as e:
        print(f"[red]Invalid file: {escape(e.message)}[/]  (path: {list(e.path)})")
        raise typer.Exit(1)
    except pydantic.ValidationError as e:
        print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        print(f"[red]Invalid JSON: {escape(str(e))}[/]")
        raise typer.Exit(1)


def _session(ctx: typer.Context) -> Session:
    return ctx.obj


def _current(ctx: typer.Context) -> Book:
    with _guard():
        return _session(ctx).store.load_current()


def _studio(ctx: typer.Context) -> Studio:
    return Studio(_current(ctx), _session(ctx).settings, llm=call_llm)


def _mask(key: str) -> str:
    return f"{key[:6]}…{key[-4:]}" if len(key) > 12 else ("set" if key else "—")


# ═════════ book setup ═════════
@app.command()
def init(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(None, "--config", help="JSON answers file."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Replace current work without asking."),
):
    """Start a new book."""
    s = _session(ctx)
    current = _current(ctx)
    if current.has_content() and not yes:
        if not console_confirm("Starting a new project will clear your current work. Continue?", "New Project"):
            print("[yellow]Kept the current project.[/]")
            raise typer.Exit()

    with _guard():
        cfg = json.loads(config_file.read_text(encoding="utf-8")) if config_file else {}
    if cfg:
        print(f"[yellow]Loaded answers from {config_file}[/]")

    def ans(key: str, prompt: str, default=None):
        return cfg[key] if key in cfg else typer.prompt(prompt, default=default)

    print("[bold cyan]─── NovelFactory – new book ───[/]\n")
    with _guard():
        book = Book(
            genre=ans("genre", f"Genre ({', '.join(GENRES)})", "fantasy"),
            target_audience=ans("target_audience", "Target audience", "adult"),
            premise=ans("premise", "Premise (blank → generate with `idea`)", ""),
            style_direction=ans("style_direction", "Style direction", ""),
            num_chapters=int(ans("num_chapters", "Chapters", "20")),
            target_word_count=int(ans("target_word_count", "Target words per chapter", "2000")),
        )
    s.store.save_current(book)
    req = GENRE_REQUIREMENTS.get(book.genre)
    if req:
        print(f"[i]Genre requirements:[/] {req.requirements}\n[i]Pacing guidelines:[/] {req.pacing}")
    print(f"[green]✔ New book started: ~{book.num_chapters * book.target_word_count:,} words planned[/]")


@app.command()
def idea(
    ctx: typer.Context,
    genre: str | None = typer.Option(None),
    audience: str | None = typer.Option(None),
):
    """Let the model suggest premise, style and chapter count."""
    studio = _studio(ctx)
    if genre:
        studio.book.genre = genre
    if audience:
        studio.book.target_audience = audience
    with _guard():
        try:
            found = studio.random_idea()
        finally:
            _session(ctx).store.save_current(studio.book)
    print(f"[bold]Premise:[/] {escape(found.premise)}\n[bold]Style:[/] {escape(found.style)}\n[bold]Chapters:[/] {found.chapters}")
    print("[green]✔ Review and edit as needed, then run `novelfactory outline`.[/]")


@app.command()
def outline(
    ctx: typer.Context,
    loops: int = typer.Option(0, help="Feedback loops after generating."),
    manual: str | None = typer.Option(None, help="Manual feedback instead of AI analysis."),
    improve_only: bool = typer.Option(False, "--improve-only", help="Skip generation, only run feedback."),
):
    """Generate the three-act story structure."""
    studio = _studio(ctx)
    with _guard():
        try:
            if not improve_only:
                if studio.book.outline and not console_confirm(
                    "This will replace the existing story structure. Continue?", "Regenerate Outline"
                ):
                    raise typer.Exit()
                studio.generate_outline()
            if loops or improve_only:
                studio.improve("outline", max(loops, 1), manual)
        finally:
            _session(ctx).store.save_current(studio.book)
    typer.echo(studio.book.outline)


@app.command()
def plan(
    ctx: typer.Context,
    loops: int = typer.Option(0, help="Feedback loops after generating."),
    manual: str | None = typer.Option(None),
):
    """Generate the chapter-by-chapter plan, title and blurb."""
    studio = _studio(ctx)
    with _guard():
        try:
            studio.generate_chapter_outline()
            if loops:
                studio.improve("chapters", loops, manual)
        finally:
            _session(ctx).store.save_current(studio.book)
    print(f'[bold]{escape(studio.book.title)}[/]\n{escape(studio.book.blurb)}\n')
    typer.echo(studio.book.chapter_outline)


@app.command()
def write(
    ctx: typer.Context,
    chapters: List[int] = typer.Argument(None, help="Chapter numbers; omit with --all."),
    all_chapters: bool = typer.Option(False, "--all"),
    loops: int = typer.Option(0, help="Feedback loops per chapter."),
    manual: str | None = typer.Option(None),
):
    """Write chapters from the plan."""
    studio = _studio(ctx)
    numbers = list(range(1, studio.book.num_chapters + 1)) if all_chapters else sorted(set(chapters or []))
    if not numbers:
        print("[yellow]Nothing selected: pass chapter numbers or --all.[/]")
        raise typer.Exit(1)
    outside = [n for n in numbers if not 1 <= n <= studio.book.num_chapters]
    if outside:
        print(f"[red]Chapter must be between 1 and {studio.book.num_chapters} (got {', '.join(map(str, outside))}).[/]")
        raise typer.Exit(1)
    with _guard():
        try:
            for n in numbers:
                if studio.book.chapter_text(n).strip() and not all_chapters and not console_confirm(
                    f"Chapter {n} already has content. Rewrite it?", "Rewrite Chapter"
                ):
                    continue
                studio.write_chapter(n)
                if loops:
                    studio.improve("chapter", loops, manual, chapter=n)
                _session(ctx).store.save_current(studio.book)
                print(f"[green]✔ Chapter {n}: {studio.book.chapter(n).word_count:,} words[/]")
        finally:
            _session(ctx).store.save_current(studio.book)


@app.command()
def improve(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="outline | chapters | chapter"),
    chapter: int | None = typer.Option(None, "--chapter", "-c"),
    loops: int = typer.Option(1),
    manual: str | None = typer.Option(None),
):
    """Run feedback loops over existing content."""
    studio = _studio(ctx)
    with _guard():
        try:
            text = studio.improve(target, loops, manual, chapter=chapter)
        except ValueError as e:
            raise typer.BadParameter(str(e))
        finally:
            _session(ctx).store.save_current(studio.book)
    typer.echo(text)


@app.command("one-click")
def one_click(
    ctx: typer.Context,
    outline_loops: int = typer.Option(0),
    chapters_loops: int = typer.Option(0),
    writing_loops: int = typer.Option(0),
):
    """Outline, plan and write the whole book in one go (Ctrl-C stops after the current step)."""
    studio = _studio(ctx)
    store = _session(ctx).store
    stop = {"requested": False}

    def on_sigint(signum, frame):
        stop["requested"] = True
        print("[yellow]Stopping after the current step…[/]")

    def progress(msg: str) -> None:
        store.save_current(studio.book)
        print(f"[cyan]{escape(msg)}[/]")

    previous = signal.signal(signal.SIGINT, on_sigint)
    with _guard():
        try:
            finished = studio.one_click(
                outline_loops, chapters_loops, writing_loops,
                cancelled=lambda: stop["requested"],
                progress=progress,
            )
        finally:
            signal.signal(signal.SIGINT, previous)
            store.save_current(studio.book)
    if not finished:
        print("[yellow]Generation cancelled; progress saved.[/]")
    else:
        stats = book_stats(studio.book)
        print(
            f'[green]✔ One-click generation completed! "{display_title(studio.book) or "Untitled"}"[/]\n'
            f"  • {stats.chapters} chapters completed\n  • {stats.total_words:,} total words"
        )


# ═════════ inspection ═════════
@app.command()
def status(ctx: typer.Context):
    """Show the current book and its progress."""
    book = _current(ctx)
    stats = book_stats(book)
    table = Table(title=display_title(book) or "Untitled", show_header=False)
    for label, value in (
        ("Step", book.current_step.value),
        ("Genre", book.genre),
        ("Audience", book.target_audience),
        ("Chapters", f"{stats.chapters} / {book.num_chapters} written"),
        ("Words", f"{stats.total_words:,} (avg {stats.average_words:,})"),
        ("Reading time", f"{stats.reading_minutes} min"),
        ("Last saved", book.last_saved.isoformat(timespec="seconds")),
    ):
        table.add_row(label, str(value))
    print(table)


@app.command()
def models(
    ctx: typer.Context,
    provider: Provider | None = typer.Option(None),
    recommended: bool = typer.Option(False, "--recommended", help="Hide the longer list."),
):
    """List selectable models with prices per 1M tokens."""
    provider = provider or _session(ctx).settings.api_provider
    table = Table(title=f"{provider.value} models")
    for col in ("Model", "Label", "Input $", "Output $"):
        table.add_column(col)
    for m in catalog.models_for(provider, include_more=not recommended):
        table.add_row(m.value, m.label, f"{m.input_cost:.2f}", f"{m.output_cost:.2f}")
    print(table)


@app.command()
def estimate(ctx: typer.Context):
    """Rough price of generating the whole book."""
    s = _session(ctx)
    cost = catalog.estimate_book_cost(_current(ctx), s.settings)
    print(
        "Estimated cost for complete book generation:\n\n"
        f"- Inputs: ${cost.inputs:.2f}\n- Outputs: ${cost.outputs:.2f}\n- Total: ${cost.total:.2f}\n\n"
        "[grey50]Rough estimate; actual costs depend on content and selected models.[/]"
    )


@app.command()
def export(
    ctx: typer.Context,
    fmt: str = typer.Argument("md", help="txt | html | md"),
    out: Path = typer.Option(Path("."), "--out", "-o"),
):
    """Write the manuscript to a file."""
    if fmt not in FORMATS:
        raise typer.BadParameter(f"format must be one of {', '.join(FORMATS)}")
    with _guard():
        path = export_book(_current(ctx), fmt, out)
    print(f"[green]✔ Manuscript saved to {path}[/]")


# ═════════ settings ═════════
@app.command()
def settings(
    ctx: typer.Context,
    provider: Provider | None = typer.Option(None),
    api_key: str | None = typer.Option(None, help="Key for the active provider."),
    model: str | None = typer.Option(None),
    temperature: float | None = typer.Option(None, min=0.0, max=2.0),
    max_tokens: int | None = typer.Option(None, min=1),
    advanced: bool | None = typer.Option(None, "--advanced/--no-advanced", help="Per-step models."),
    step_model: List[str] = typer.Option(None, "--step-model", help="STEP=MODEL, e.g. writing=openai/gpt-5"),
):
    """Show or change AI settings."""
    s = _session(ctx)
    cfg = s.settings
    with _guard():
        if provider:
            cfg.api_provider = provider
        if api_key is not None:
            if cfg.api_provider is Provider.OPENROUTER:
                cfg.openrouter_api_key = api_key
            else:
                cfg.openai_api_key = api_key
        if model:
            if catalog.find_model(model, cfg.api_provider) is None:
                print(f"[yellow]{model} is not in the {cfg.api_provider.value} catalog; using it anyway.[/]")
            cfg.model = model
        if temperature is not None:
            cfg.temperature = temperature
        if max_tokens is not None:
            cfg.max_tokens = max_tokens
        if advanced is not None:
            cfg.advanced_models_enabled = advanced
        for item in step_model or []:
            step, _, value = item.partition("=")
            if step not in MODEL_STEPS or not value:
                raise typer.BadParameter(f"expected STEP=MODEL with STEP in {', '.join(MODEL_STEPS)}")
            cfg.advanced_models = {**cfg.advanced_models, step: value}
        s.store.save_settings(cfg)

    info = catalog.find_model(cfg.model)
    print(f"Provider:     {cfg.api_provider.value}")
    print(f"API key:      {_mask(cfg.api_key())}")
    print(f"Model:        {cfg.model}" + (f"  (in ${info.input_cost}/1M, out ${info.output_cost}/1M)" if info else ""))
    print(f"Temperature:  {cfg.temperature}")
    print(f"Max tokens:   {cfg.max_tokens}")
    print(f"Step models:  {'on' if cfg.advanced_models_enabled else 'off'} {cfg.advanced_models or ''}")
    print(f"Custom prompts: {', '.join(sorted(k for k in cfg.custom_prompts if cfg.prompt_for(k))) or 'none'}")


@app.command("test-connection")
def test_connection(ctx: typer.Context):
    """Send a one-line request to check the API key."""
    with _guard():
        call_llm("Respond with 'Connection successful!' if you can read this message.", settings=_session(ctx).settings)
    print("[green]Connection successful![/]")


@app.command("settings-export")
def settings_export(ctx: typer.Context, path: Path = typer.Argument(Path("novelfactory-ai-settings.json"))):
    s = _session(ctx)
    path.write_text(json.dumps(s.store.export_settings(s.settings), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"[green]✔ Settings exported to {path}[/]")


@app.command("settings-import")
def settings_import(ctx: typer.Context, path: Path):
    s = _session(ctx)
    with _guard():
        s.settings = s.store.import_settings(json.loads(path.read_text(encoding="utf-8")), s.settings)
    print("[green]✔ Settings imported successfully![/]")


# ═════════ prompts ═════════
@prompt_app.command("show")
def prompt_show(
    ctx: typer.Context,
    name: str,
    chapter: int = typer.Option(1, help="Chapter number for the writing template."),
    raw: bool = typer.Option(False, "--raw", help="Print the template body unrendered."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be sent to the model."),
):
    """Render a template against the current book."""
    s = _session(ctx)
    engine = TemplateEngine(s.settings)
    book = _current(ctx)
    with _guard():
        if raw:
            typer.echo(engine.template_body(name), nl=False)
            return
        text = engine.render(name, engine.context_for(name, book, chapter_num=chapter))
        if dry_run:
            call_llm(text, settings=s.settings, system_prompt=engine.system_prompt(name, book), dry_run=True)
            tokens = catalog.estimate_tokens(text)
            print(f"[yellow]~{tokens:,} prompt tokens, ≈ ${catalog.cost_for(s.settings.model, tokens, 0):.4f} input[/]")
            return
    typer.echo(text)


@prompt_app.command("list")
def prompt_list(ctx: typer.Context):
    s = _session(ctx)
    engine = TemplateEngine(s.settings)
    for name in TemplateName:
        origin = "custom" if s.settings.prompt_for(name) else "built-in"
        fields = ", ".join(engine.placeholders(name))
        print(f"{name.value:<18} {origin:<8} {escape(fields)}")


@prompt_app.command("set")
def prompt_set(ctx: typer.Context, name: str, path: Path):
    """Override a template with the contents of PATH."""
    s = _session(ctx)
    with _guard():
        key = TemplateEngine.template_name(name)
    s.settings.custom_prompts = {**s.settings.custom_prompts, key.value: path.read_text(encoding="utf-8")}
    s.store.save_settings(s.settings)
    print(f"[green]✔ {key.value} prompt overridden[/]")


@prompt_app.command("reset")
def prompt_reset(
    ctx: typer.Context,
    name: str | None = typer.Argument(None),
    all_prompts: bool = typer.Option(False, "--all"),
):
    """Return one template, or all of them, to the built-in text."""
    s = _session(ctx)
    if all_prompts:
        if not console_confirm("Are you sure you want to reset all custom prompts to their default values?", "Reset All Prompts"):
            raise typer.Exit()
        s.settings.custom_prompts = {}
    elif name:
        with _guard():
            key = TemplateEngine.template_name(name)
        s.settings.custom_prompts = {k: v for k, v in s.settings.custom_prompts.items() if k != key.value}
    else:
        raise typer.BadParameter("give a template name or --all")
    s.store.save_settings(s.settings)
    print("[green]✔ Prompts reset to default values.[/]")


# ═════════ projects ═════════
@project_app.command("list")
def project_list(ctx: typer.Context):
    with _guard():
        books = _session(ctx).store.list_projects()
    if not books:
        print("[yellow]No saved projects.[/]")
        return
    table = Table()
    for col in ("Id", "Title", "Genre", "Chapters", "Last saved"):
        table.add_column(col)
    for b in books:
        table.add_row(b.id, display_title(b) or "Untitled", b.genre, str(len(b.completed_chapters())),
                      b.last_saved.isoformat(timespec="seconds"))
    print(table)


@project_app.command("save")
def project_save(ctx: typer.Context, title: str | None = typer.Option(None)):
    store = _session(ctx).store
    book = _current(ctx)
    if title is None:
        suggested = book.title or (book.premise[:30].strip() + ("..." if len(book.premise) > 30 else ""))
        title = console_ask("Enter a title for this project:", "Save Project", suggested)
        if not title:
            raise typer.Exit()
    with _guard():
        book = store.save_project(book, title)
    print(f"[green]✔ Project saved as {book.id}[/]")


@project_app.command("load")
def project_load(ctx: typer.Context, project_id: str, yes: bool = typer.Option(False, "--yes", "-y")):
    store = _session(ctx).store
    if _current(ctx).has_content() and not yes:
        if not console_confirm("Loading a project will replace your current work. Continue?", "Load Project"):
            raise typer.Exit()
    with _guard():
        book = store.load_project(project_id)
    print(f"[green]✔ Loaded {display_title(book) or project_id}[/]")


@project_app.command("delete")
def project_delete(ctx: typer.Context, project_id: str, yes: bool = typer.Option(False, "--yes", "-y")):
    store = _session(ctx).store
    if not yes and not console_confirm(
        f"Are you sure you want to delete {project_id!r}? This cannot be undone.", "Delete Project"
    ):
        raise typer.Exit()
    with _guard():
        store.delete_project(project_id)
    print("[green]✔ Project deleted.[/]")


@project_app.command("clear")
def project_clear(ctx: typer.Context, yes: bool = typer.Option(False, "--yes", "-y")):
    """Delete every saved project."""
    store = _session(ctx).store
    with _guard():
        count = len(store.list_projects())
    if not count:
        console_acknowledge("No projects to delete.", "No Projects")
        return
    if not yes and not console_confirm(
        f"Are you sure you want to delete all {count} saved projects? This cannot be undone.", "Delete All Projects"
    ):
        raise typer.Exit()
    removed = store.clear_projects()
    print(f"[green]✔ {removed} projects deleted.[/]")


@project_app.command("export")
def project_export(ctx: typer.Context, path: Path):
    with _guard():
        bundle = _session(ctx).store.export_bundle()
    if not bundle["projects"]:
        print("[yellow]No projects to export.[/]")
        raise typer.Exit(1)
    path.write_text(json.dumps(bundle, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"[green]✔ {bundle['projectCount']} projects exported to {path}[/]")


@project_app.command("import")
def project_import(ctx: typer.Context, path: Path, yes: bool = typer.Option(False, "--yes", "-y")):
    store = _session(ctx).store
    with _guard():
        data = json.loads(path.read_text(encoding="utf-8"))
        incoming = len(data.get("projects") or {}) if isinstance(data, dict) else 0
        allowed = store.remaining_slots()
        if incoming > allowed and not yes and not console_confirm(
            f"Importing {incoming} projects would exceed the limit of {store.max_projects} projects. "
            f"Only the first {allowed} will be imported. Continue?",
            "Import Limit",
        ):
            raise typer.Exit()
        count = store.import_bundle(data)
    print(f"[green]✔ Successfully imported {count} projects![/]")


if __name__ == "__main__":
    app()
