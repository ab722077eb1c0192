"""
MealMate Recipe Import - CLI Entry Point.

Usage:
    mealmate parse-url URL       Extract a recipe from a web page
    mealmate parse-text TEXT     Extract a recipe from pasted text
    mealmate domains             List sites with dedicated support
    mealmate serve               Run the HTTP API
    mealmate health              Check configuration
    mealmate --help              Show help
"""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner

app = typer.Typer(
    name="mealmate",
    help="MealMate - Import recipes from websites and social media posts.",
    add_completion=False,
)
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Send engine logs to stderr so command output stays clean."""
    from mealmate.config import settings

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def _print_draft(draft, as_json: bool) -> None:
    if as_json:
        console.print_json(json.dumps(asdict(draft), default=str))
        return

    lines = [f"[bold green]{draft.name}[/bold green]"]
    if draft.description:
        lines.append(f"[dim]{draft.description}[/dim]")
    details = [
        f"{label}: {value}"
        for label, value in (
            ("Prep", draft.prep_time),
            ("Cook", draft.cook_time),
            ("Total", draft.total_time),
            ("Serves", draft.servings),
            ("Cuisine", draft.cuisine),
        )
        if value
    ]
    if details:
        lines.append(" | ".join(details))

    if draft.nutrition:
        lines.append("[dim]" + ", ".join(f"{k}: {v}" for k, v in draft.nutrition.items()) + "[/dim]")

    lines.append("\n[bold]Ingredients[/bold]")
    for ingredient in draft.ingredients:
        parts = [ingredient.amount, ingredient.unit or "", ingredient.name]
        line = " ".join(p for p in parts if p)
        if ingredient.notes:
            line += f" [dim]({ingredient.notes})[/dim]"
        lines.append(f"  • {line}")

    lines.append("\n[bold]Instructions[/bold]")
    lines.append(draft.instructions)

    if draft.candidate_images:
        lines.append("\n[bold]Images[/bold]")
        for image in draft.candidate_images:
            lines.append(f"  {image.score:3d}  {image.classification.value:<10} {image.url}")

    footer = f"method: {draft.method.value if draft.method else '?'}"
    if draft.confidence is not None:
        footer += f" | confidence: {draft.confidence:.2f}"
    if draft.source_url:
        footer += f" | {draft.source_url}"

    console.print(Panel.fit("\n".join(lines), title="Recipe", subtitle=footer, border_style="green"))


def _print_error(e) -> None:
    from mealmate.recipe_import import TEXT_MODE_SUGGESTION, ExtractionError, ExtractionErrorKind

    console.print(f"\n[red]❌ {e.kind.value}: {e.message}[/red]")
    if isinstance(e, ExtractionError) and e.kind == ExtractionErrorKind.UNRECOGNIZED_FORMAT:
        console.print(f"[dim]{TEXT_MODE_SUGGESTION}[/dim]")


@app.command("parse-url")
def parse_url(
    url: str = typer.Argument(..., help="Recipe page URL"),
    no_images: bool = typer.Option(False, "--no-images", help="Skip image discovery"),
    max_images: int = typer.Option(None, "--max-images", "-n", help="Maximum images to return"),
    as_json: bool = typer.Option(False, "--json", help="Print the draft as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Extract a recipe from a web page."""
    from mealmate.recipe_import import RecipeEngine, RecipeEngineError

    setup_logging(verbose)
    engine = RecipeEngine.from_settings()

    try:
        with Live(Spinner("dots", text="Loading page..."), console=console, transient=True):
            draft = asyncio.run(
                engine.parse_from_url(url, include_images=not no_images, max_images=max_images)
            )
    except RecipeEngineError as e:
        _print_error(e)
        raise typer.Exit(1)

    _print_draft(draft, as_json)


@app.command("parse-text")
def parse_text(
    text: str = typer.Argument(None, help="Recipe text (or use --file)"),
    file: Path = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="Read text from a file"),
    context: str = typer.Option("general", "--context", "-c", help="general or social_media"),
    source_url: str = typer.Option(None, "--source-url", help="Where the text came from"),
    as_json: bool = typer.Option(False, "--json", help="Print the draft as JSON"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log LLM prompts to prompt_logs/"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Extract a recipe from pasted text using the LLM."""
    from mealmate.config import settings
    from mealmate.llm.prompt_logger import enable_prompt_logging
    from mealmate.recipe_import import RecipeEngine, RecipeEngineError

    setup_logging(verbose)

    if context not in ("general", "social_media"):
        console.print("[red]--context must be 'general' or 'social_media'[/red]")
        raise typer.Exit(2)

    if file is not None:
        text = file.read_text(encoding="utf-8")
    if text is None:
        console.print("[red]Provide recipe text or --file[/red]")
        raise typer.Exit(2)

    if log_prompts or settings.mealmate_log_prompts:
        enable_prompt_logging(True)
        console.print("[dim]📝 Prompt logging enabled. Check prompt_logs/ after the run.[/dim]")

    engine = RecipeEngine.from_settings()

    try:
        with Live(Spinner("dots", text="Reading recipe..."), console=console, transient=True):
            draft = asyncio.run(engine.parse_from_text(text, context=context, source_url=source_url))
    except RecipeEngineError as e:
        _print_error(e)
        raise typer.Exit(1)

    _print_draft(draft, as_json)


@app.command()
def domains() -> None:
    """List sites with dedicated parsing support."""
    from mealmate.recipe_import.extractors import SiteRegistry

    registry = SiteRegistry()

    console.print("\n[bold]Site-specific selectors[/bold]\n")
    for config in registry.configs:
        console.print(f"  • {config.name} ({', '.join(config.domains)}) [dim]{config.quality}[/dim]")

    extra = [d for d in registry.supported_domains if d not in registry.domains]
    if extra:
        console.print("\n[bold]Structured data[/bold]\n")
        for domain in extra:
            console.print(f"  • {domain}")

    console.print("\n[dim]Other sites are parsed with generic heuristics.[/dim]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the recipe import HTTP API."""
    import uvicorn

    from mealmate.config import settings

    setup_logging()
    uvicorn.run(
        "mealmate.web.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def health() -> None:
    """Check configuration and browser availability."""
    from mealmate.config import get_settings

    console.print("\n[bold]MealMate Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.mealmate_env}")
        console.print(f"   Log level: {settings.log_level}")
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    if settings.openai_api_key and settings.openai_api_key.startswith("sk-"):
        console.print(f"✅ OpenAI API key configured (model: {settings.openai_model})")
    elif settings.openai_api_key:
        console.print("⚠️  OpenAI API key may be invalid")
    else:
        console.print("⚠️  OPENAI_API_KEY not set; text parsing unavailable")

    from mealmate.recipe_import.fetcher import launch_browser

    async def _check_browser() -> None:
        async with launch_browser(headless=True):
            pass

    try:
        asyncio.run(_check_browser())
        console.print("✅ Headless browser ready")
    except Exception as e:
        console.print(f"❌ Headless browser failed: {e}")
        console.print("[dim]Run 'playwright install chromium'.[/dim]")
        raise typer.Exit(1)

    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from mealmate import __version__

    console.print(f"MealMate recipe import version {__version__}")


if __name__ == "__main__":
    app()
