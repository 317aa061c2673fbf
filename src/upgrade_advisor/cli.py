"""Command-line interface for upgrade_advisor.

Provides subcommands for listing installed and upgradable packages,
researching upgrades with an AI provider, and browsing saved reports.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from upgrade_advisor.cache import AnalysisCache
from upgrade_advisor.invoker import CommandInvoker
from upgrade_advisor.models import (
    STATUS_ANALYZED,
    STATUS_UPGRADE_FAILED,
    STATUS_UPGRADED,
    PackageRecord,
    ResearchResult,
)
from upgrade_advisor.orchestrator import ResearchOrchestrator
from upgrade_advisor.providers import get_provider
from upgrade_advisor.providers.base import DEFAULT_TIMEOUT
from upgrade_advisor.reporters import MarkdownReporter, ReportIndex, split
from upgrade_advisor.scanners import ScanMode
from upgrade_advisor.settings import (
    CONCURRENCY_LIMIT,
    REPORTS_DIR,
    REQUEST_TIMEOUT,
    Settings,
)

app = typer.Typer(
    name="upgrade-advisor",
    help="AI-assisted upgrade research for winget packages.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("upgrade_advisor")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("upgrade_advisor").setLevel(level)


async def _scan(mode: ScanMode, source: str) -> list[PackageRecord]:
    """Run the winget listing for a scan mode off the event loop."""
    invoker = CommandInvoker()
    if mode is ScanMode.UPGRADABLE:
        return await asyncio.to_thread(invoker.list_upgradable, source)
    return await asyncio.to_thread(invoker.list_installed, source)


async def _research_packages(
    packages: list[PackageRecord],
    provider_name: str,
    credentials: Optional[str],
    model: Optional[str],
    concurrency: int,
    timeout: float,
    use_cache: bool,
    progress: Optional[Progress] = None,
) -> list[ResearchResult]:
    """Research packages, reusing cached analyses where possible.

    Args:
        packages: Packages to research.
        provider_name: Configured provider name.
        credentials: API key for the provider.
        model: Optional model selector.
        concurrency: Maximum provider calls in flight.
        timeout: Per-request timeout in seconds.
        use_cache: Whether to use the analysis cache.
        progress: Optional progress display to update.

    Returns:
        One result per researched package, in the order given.

    Raises:
        ValueError: If the provider name is unknown.
    """
    provider = get_provider(provider_name, timeout=timeout)

    cache = AnalysisCache() if use_cache else None
    results: dict[int, ResearchResult] = {}
    to_research = []

    for package in packages:
        if cache:
            cached = cache.get(
                package.id,
                package.current_version,
                package.available_version,
                provider.name,
            )
            if cached:
                package.recommendation = cached
                package.status = STATUS_ANALYZED
                results[id(package)] = ResearchResult(package=package, analysis=cached)
                continue
        to_research.append(package)

    if cache and len(results) > 0:
        logger.info("Using %d cached analyses", len(results))

    if to_research:
        task = None
        if progress is not None:
            task = progress.add_task("Researching...", total=len(to_research))

        def observe(package: PackageRecord, position: int, total: int) -> None:
            if progress is not None and task is not None:
                progress.update(
                    task,
                    description=f"Researching {package.key}",
                    completed=position - 1,
                )

        async with provider:
            orchestrator = ResearchOrchestrator(
                provider,
                credentials,
                model=model,
                concurrency_limit=concurrency,
                observer=observe,
            )
            researched = await orchestrator.research(to_research)

        if progress is not None and task is not None:
            progress.update(task, completed=len(to_research))

        for result in researched:
            results[id(result.package)] = result
            if cache and result.succeeded:
                cache.set(
                    result.package.id,
                    result.package.current_version,
                    result.package.available_version,
                    provider.name,
                    result.analysis,
                )

    return [results[id(package)] for package in packages if id(package) in results]


def _select(packages: list[PackageRecord], ids: Optional[list[str]]) -> list[PackageRecord]:
    """Filter scanned packages down to the requested ids."""
    if not ids:
        return packages

    wanted = {package_id.lower() for package_id in ids}
    selected = [package for package in packages if package.id.lower() in wanted]

    missing = wanted - {package.id.lower() for package in selected}
    for package_id in sorted(missing):
        err_console.print(f"[yellow]No upgrade available for:[/yellow] {package_id}")

    return selected


def _package_table(packages: list[PackageRecord], title: str, show_available: bool) -> Table:
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Id")
    table.add_column("Version")
    if show_available:
        table.add_column("Available")
    table.add_column("Source")

    for package in packages:
        row = [package.name, package.id, package.current_version]
        if show_available:
            row.append(package.available_version)
        row.append(package.source)
        table.add_row(*row)
    return table


async def _run_research(
    ids: Optional[list[str]],
    source: str,
    provider_name: str,
    credentials: Optional[str],
    model: Optional[str],
    concurrency: int,
    timeout: float,
    reports_dir: Path,
    use_cache: bool,
) -> int:
    """Async implementation of the research command."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        scan_task = progress.add_task("Checking for upgrades...", total=None)
        packages = await _scan(ScanMode.UPGRADABLE, source)
        progress.update(scan_task, visible=False)

        selected = _select(packages, ids)
        if not selected:
            console.print("[yellow]No packages to research[/yellow]")
            return 0

        try:
            results = await _research_packages(
                selected,
                provider_name=provider_name,
                credentials=credentials,
                model=model,
                concurrency=concurrency,
                timeout=timeout,
                use_cache=use_cache,
                progress=progress,
            )
        except ValueError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            return 1

    successful = [result for result in results if result.succeeded]
    if not successful:
        if not any(result.analysis for result in results):
            console.print(
                f"[yellow]No results[/yellow]: {provider_name} is not configured "
                "(set an API key in settings or the environment)"
            )
        else:
            console.print("[yellow]No results[/yellow]: every analysis failed")
            for result in results:
                console.print(f"  - {result.package.key}: {result.package.status}")
        return 0

    combined = MarkdownReporter().render(results, provider_name=provider_name, model=model)
    documents = split(combined, selected)

    index = ReportIndex(reports_dir)
    saved = index.save_all(documents)

    table = Table(title="Research results")
    table.add_column("Package")
    table.add_column("Status", no_wrap=True)
    table.add_column("Report", overflow="fold")
    for result in results:
        report = index.get_path(result.package.key)
        table.add_row(result.package.key, result.package.status, str(report or ""))
    console.print(table)

    console.print(
        f"Analyzed [bold]{len(successful)}[/bold]/{len(selected)} packages, "
        f"saved [bold]{saved}[/bold] report(s) to {index.reports_dir}"
    )
    return 0


SourceOption = Annotated[
    str,
    typer.Option(
        "--source",
        help="Package source: winget, msstore or all",
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
]


@app.command("list")
def list_packages(
    source: SourceOption = "all",
    verbose: VerboseOption = False,
) -> None:
    """List installed packages."""
    _setup_logging(verbose)

    packages = asyncio.run(_scan(ScanMode.INVENTORY, source))
    if not packages:
        console.print("[yellow]No packages found[/yellow]")
        raise typer.Exit(code=0)

    console.print(_package_table(packages, "Installed packages", show_available=True))
    console.print(f"Found [bold]{len(packages)}[/bold] packages")


@app.command()
def upgrades(
    source: SourceOption = "all",
    verbose: VerboseOption = False,
) -> None:
    """List packages with an available upgrade."""
    _setup_logging(verbose)

    packages = asyncio.run(_scan(ScanMode.UPGRADABLE, source))
    if not packages:
        console.print("[green]All packages are up to date[/green]")
        raise typer.Exit(code=0)

    console.print(_package_table(packages, "Available upgrades", show_available=True))
    console.print(f"Found [bold]{len(packages)}[/bold] upgrades")


@app.command()
def research(
    ids: Annotated[
        Optional[list[str]],
        typer.Option(
            "--id",
            help="Package id to research (repeatable; default: all upgrades)",
        ),
    ] = None,
    source: SourceOption = "all",
    provider: Annotated[
        Optional[str],
        typer.Option(
            "--provider",
            "-p",
            help="AI provider: anthropic or perplexity",
        ),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option(
            "--model",
            "-m",
            help="Model to use with the Anthropic provider",
        ),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option(
            "--concurrency",
            "-c",
            min=1,
            help="Maximum AI requests in flight",
        ),
    ] = None,
    reports_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--reports-dir",
            help="Directory for per-package reports",
        ),
    ] = None,
    settings_file: Annotated[
        Optional[Path],
        typer.Option(
            "--settings",
            help="Settings file (JSON)",
        ),
    ] = None,
    anthropic_api_key: Annotated[
        Optional[str],
        typer.Option(
            "--anthropic-api-key",
            envvar="ANTHROPIC_API_KEY",
            help="Anthropic API key",
        ),
    ] = None,
    perplexity_api_key: Annotated[
        Optional[str],
        typer.Option(
            "--perplexity-api-key",
            envvar="PERPLEXITY_API_KEY",
            help="Perplexity API key",
        ),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option(
            "--no-cache",
            help="Ignore and do not update the analysis cache",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Research available upgrades with an AI provider.

    Scans for upgrades, asks the provider for an upgrade-risk analysis of
    each selected package, and saves one Markdown report per package.
    """
    _setup_logging(verbose)

    settings = Settings(settings_file)
    provider_name = provider or settings.provider

    if provider_name.strip().lower() == "perplexity":
        credentials = perplexity_api_key or settings.credentials_for(provider_name)
    else:
        credentials = anthropic_api_key or settings.credentials_for(provider_name)

    exit_code = asyncio.run(
        _run_research(
            ids=ids,
            source=source,
            provider_name=provider_name,
            credentials=credentials,
            model=model or settings.model,
            concurrency=concurrency or settings.get_int(CONCURRENCY_LIMIT, 1),
            timeout=settings.get_float(REQUEST_TIMEOUT, DEFAULT_TIMEOUT),
            reports_dir=reports_dir or Path(settings.get(REPORTS_DIR, "AI_Reports")),
            use_cache=not no_cache,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def upgrade(
    package_id: Annotated[
        str,
        typer.Argument(help="Id of the package to upgrade"),
    ],
    verbose: VerboseOption = False,
) -> None:
    """Upgrade a single package."""
    _setup_logging(verbose)

    success, output = CommandInvoker().upgrade_package(package_id)
    status = STATUS_UPGRADED if success else STATUS_UPGRADE_FAILED

    if success:
        console.print(f"[green]{status}:[/green] {package_id}")
        raise typer.Exit(code=0)

    err_console.print(f"[red]{status}:[/red] {package_id}")
    if output:
        err_console.print(output)
    raise typer.Exit(code=1)


@app.command()
def reports(
    reports_dir: Annotated[
        Path,
        typer.Option(
            "--reports-dir",
            help="Directory for per-package reports",
        ),
    ] = Path("AI_Reports"),
) -> None:
    """List saved per-package reports."""
    index = ReportIndex(reports_dir)
    entries = index.entries()

    if not entries:
        console.print(f"[yellow]No reports found in {index.reports_dir}[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title="Saved reports")
    table.add_column("Package")
    table.add_column("Created", no_wrap=True)
    table.add_column("Path", overflow="fold")
    for key in sorted(entries, key=str.lower):
        entry = entries[key]
        created = entry.created_at.strftime("%Y-%m-%d %H:%M:%S") if entry.created_at else ""
        table.add_row(key, created, str(entry.path))
    console.print(table)


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    package: Annotated[
        Optional[str],
        typer.Argument(help="Specific package id to clear (optional)"),
    ] = None,
) -> None:
    """Inspect or empty the stored package analyses.

    `show` prints where analyses are stored and how many there are.
    `clear` drops every stored analysis, or only the one for PACKAGE.
    """
    analyses = AnalysisCache()

    if action == "show":
        info = analyses.info()
        console.print(f"[bold]Analysis store:[/bold] {info['path']}")
        console.print(f"[bold]Stored analyses:[/bold] {info['count']}")
        console.print(f"[bold]On disk:[/bold] {info['size_bytes'] / 1024:.1f} KB")

    elif action == "clear":
        if package:
            analyses.clear(package_id=package)
            console.print(f"[green]Dropped stored analysis for[/green] {package}")
        else:
            analyses.clear()
            console.print("[green]Dropped all stored analyses[/green]")

    else:
        err_console.print(f"[red]Unknown action:[/red] {action}")
        err_console.print("Valid actions: show, clear")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
