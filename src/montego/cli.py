"""Command line interface for MonteGo.

This module provides the terminal front end with Click and Rich:
- Event predictions with live progress
- Simulation of bare outcome lists
- History and preference management
"""

from datetime import datetime
import json
from pathlib import Path
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from montego import __version__, logging_config
from montego.config import get_config
from montego.events.models import SimulationRecord
from montego.events.resolver import StaticEventResolver
from montego.exceptions import MonteGoError, RateLimitError
from montego.history import HistoryStore
from montego.reporting import (
    ITERATION_PRESETS,
    export_csv,
    format_share_text,
    history_frame,
    parse_iterations,
    record_entropy,
    results_frame,
)
from montego.service import PredictionService
from montego.settings import SettingsManager
from montego.simulation.core.outcome import parse_outcomes
from montego.simulation.engine.finalizer import shannon_entropy
from montego.simulation.engine.simulator import MonteCarloSimulator, ProgressSnapshot

console = Console()
logger = logging_config.get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="montego")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--home",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for history and settings",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, home: Optional[str]) -> None:
    """MonteGo - Monte Carlo event predictions.

    Estimate the odds of competing outcomes by simulating them thousands
    of times.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    config = get_config()
    home_dir = Path(home) if home else config.history.home_dir
    ctx.obj["history_file"] = home_dir / "history.json"
    ctx.obj["settings_file"] = home_dir / "settings.json"

    log_level = "DEBUG" if verbose else config.logging.level if config.logging.log_file else "WARNING"
    logging_config.configure_logging(
        log_level=log_level,
        log_format=config.logging.format,
        log_file=config.logging.log_file,
        enable_colors=True,
    )


def _fail(ctx: click.Context, error: Exception) -> None:
    if isinstance(error, RateLimitError):
        console.print(f"[yellow]Rate limited:[/yellow] {error}")
    else:
        console.print(f"[red]Error:[/red] {error}")
    logger.error("command_failed", error=str(error), error_type=type(error).__name__)
    if ctx.obj.get("verbose"):
        console.print_exception()
    sys.exit(1)


def _iterations_option(value: Optional[str], settings: SettingsManager) -> int:
    if value is None:
        return settings.default_iterations
    return parse_iterations(value)


def _run_with_progress(run, total_label: str):
    """Drive a simulation callable with a Rich progress bar."""
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TextColumn("[dim]{task.fields[rate]}/s  eta {task.fields[eta]}s[/dim]"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(total_label, total=100, rate=0, eta=0)

        def on_progress(snapshot: ProgressSnapshot) -> None:
            progress.update(
                task,
                completed=snapshot.pct,
                description=snapshot.phase,
                rate=f"{snapshot.rate:,}",
                eta=snapshot.eta,
            )

        return run(on_progress)


def _outcome_table(outcomes: list, title: str) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Outcome", style="cyan")
    table.add_column("Strength", justify="right")
    table.add_column("Volatility", justify="right")
    table.add_column("Wins", justify="right")
    table.add_column("Probability", style="green", justify="right")

    for rank, o in enumerate(outcomes, start=1):
        label = f"{o.emoji} {o.name}".strip()
        table.add_row(
            str(rank),
            label,
            f"{o.base_strength:g}",
            f"{o.volatility:g}",
            f"{o.sim_count:,}" if o.sim_count is not None else "-",
            f"{o.sim_prob}%" if o.sim_prob is not None else "-",
        )
    return table


def _render_record(record: SimulationRecord) -> None:
    if record.already_occurred:
        body = (
            f"[bold]Outcome:[/bold] {record.winner_emoji or ''} {record.winner or 'Unknown'}\n"
            + (f"\n{record.detail}" if record.detail else "")
        )
        console.print(Panel(body, title=record.event_title or record.event, border_style="blue"))
    else:
        console.print(_outcome_table(record.outcomes, record.event_title or record.event))
        top = record.top_outcome
        summary = (
            f"[bold]Top pick:[/bold] {top.emoji} {top.name} ({top.sim_prob}%)\n"
            f"[bold]Iterations:[/bold] {record.iterations:,}\n"
            f"[bold]Entropy:[/bold] {record_entropy(record):.1f} bits"
        )
        if record.confidence_level:
            summary += f"\n[bold]Confidence:[/bold] {record.confidence_level}"
        if record.data_quality:
            summary += f"\n[bold]Data quality:[/bold] {record.data_quality}"
        console.print(Panel(summary, title="Simulation Results", border_style="green"))

    if record.insights:
        console.print("[bold]Insights[/bold]")
        for insight in record.insights:
            console.print(f"  • {insight}")


# ============================================================================
# SIMULATION COMMANDS
# ============================================================================


@cli.command()
@click.argument("event")
@click.option(
    "--events",
    "-e",
    "events_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="JSON file with event analyses",
)
@click.option("--iterations", "-n", default=None, help="Iterations, e.g. 5000 or 10K")
@click.option("--seed", type=int, default=None, help="Random seed for reproducibility")
@click.option("--share", is_flag=True, help="Print share text")
@click.option("--no-save", is_flag=True, help="Do not store the result in history")
@click.pass_context
def simulate(
    ctx: click.Context,
    event: str,
    events_file: str,
    iterations: Optional[str],
    seed: Optional[int],
    share: bool,
    no_save: bool,
) -> None:
    """Predict an EVENT using outcomes from an events file.

    \b
    Examples:
        montego simulate "Who wins the final?" --events events.json
        montego simulate "Who wins the final?" -e events.json -n 1M --seed 7
    """
    try:
        settings = SettingsManager(ctx.obj["settings_file"])
        total = _iterations_option(iterations, settings)
        config = get_config().simulation
        service = PredictionService(
            resolver=StaticEventResolver(events_file),
            simulator=MonteCarloSimulator(
                random_state=seed if seed is not None else config.random_seed,
                min_chunk_size=config.min_chunk_size,
                chunk_divisor=config.chunk_divisor,
            ),
            history=None if no_save else HistoryStore(ctx.obj["history_file"]),
            settings=settings,
        )
        record = _run_with_progress(
            lambda on_progress: service.predict(event, total, on_progress),
            "Analyzing event context…",
        )
    except MonteGoError as e:
        _fail(ctx, e)
        return

    _render_record(record)
    if share:
        console.print(Panel(format_share_text(record), title="Share", border_style="magenta"))


@cli.command("run-outcomes")
@click.argument("outcomes_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--iterations", "-n", default="10K", help="Iterations, e.g. 5000 or 10K")
@click.option("--seed", type=int, default=None, help="Random seed for reproducibility")
@click.pass_context
def run_outcomes(ctx: click.Context, outcomes_file: str, iterations: str, seed: Optional[int]) -> None:
    """Simulate a JSON list of outcomes directly.

    \b
    Example:
        montego run-outcomes outcomes.json --iterations 100K
    """
    try:
        with open(outcomes_file, encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("outcomes", [])
        outcomes = parse_outcomes(raw)
        total = parse_iterations(iterations)
        simulator = MonteCarloSimulator(random_state=seed)
        results = _run_with_progress(
            lambda on_progress: simulator.simulate(outcomes, total, on_progress),
            "Initializing scenarios…",
        )
    except json.JSONDecodeError as e:
        _fail(ctx, MonteGoError(f"Outcomes file is not valid JSON: {e}"))
        return
    except MonteGoError as e:
        _fail(ctx, e)
        return

    console.print(_outcome_table(results, f"{total:,} iterations"))
    console.print(f"[bold]Entropy:[/bold] {shannon_entropy(results):.2f} bits")


@cli.command()
def presets() -> None:
    """List iteration presets."""
    table = Table(title="Iteration Presets")
    table.add_column("Label", style="cyan")
    table.add_column("Iterations", justify="right")
    table.add_column("Speed")
    for preset in ITERATION_PRESETS:
        table.add_row(preset.label, f"{preset.value:,}", preset.speed)
    console.print(table)


# ============================================================================
# HISTORY COMMANDS
# ============================================================================


@cli.group()
def history() -> None:
    """Browse stored predictions."""
    pass


@history.command("list")
@click.option("--limit", "-l", type=int, default=20, help="Number of records to show")
@click.pass_context
def history_list(ctx: click.Context, limit: int) -> None:
    """List stored predictions, newest first."""
    store = HistoryStore(ctx.obj["history_file"])
    records = store.records()
    if not records:
        console.print("[dim]No simulations yet. Run your first one![/dim]")
        return

    table = Table(title="Your Simulations")
    table.add_column("Timestamp", style="dim")
    table.add_column("When")
    table.add_column("Event", style="cyan")
    table.add_column("Top pick")
    table.add_column("Prob.", justify="right", style="green")
    for record in records[:limit]:
        when = datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        top = record.top_outcome
        if record.already_occurred:
            pick, prob = f"{record.winner_emoji or ''} {record.winner or ''}".strip(), "✓"
        else:
            pick = f"{top.emoji} {top.name}".strip() if top else "-"
            prob = f"{top.sim_prob}%" if top and top.sim_prob is not None else "-"
        table.add_row(str(record.timestamp), when, record.event_title or record.event, pick, prob)
    console.print(table)


@history.command("show")
@click.argument("timestamp", type=int)
@click.option("--share", is_flag=True, help="Print share text")
@click.pass_context
def history_show(ctx: click.Context, timestamp: int, share: bool) -> None:
    """Show one stored prediction by TIMESTAMP."""
    record = HistoryStore(ctx.obj["history_file"]).get(timestamp)
    if record is None:
        console.print(f"[red]No record with timestamp {timestamp}[/red]")
        sys.exit(1)
    _render_record(record)
    if share:
        console.print(Panel(format_share_text(record), title="Share", border_style="magenta"))


@history.command("export")
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--timestamp", type=int, default=None, help="Export one record's outcomes")
@click.pass_context
def history_export(ctx: click.Context, output: str, timestamp: Optional[int]) -> None:
    """Export history (or one record's outcomes) to a CSV file."""
    store = HistoryStore(ctx.obj["history_file"])
    if timestamp is not None:
        record = store.get(timestamp)
        if record is None:
            console.print(f"[red]No record with timestamp {timestamp}[/red]")
            sys.exit(1)
        frame = results_frame(record)
    else:
        frame = history_frame(store.records())
    path = export_csv(frame, output)
    console.print(f"[bold green]✓[/bold green] Exported {len(frame)} rows to {path}")


@history.command("clear")
@click.confirmation_option(prompt="Clear all stored predictions?")
@click.pass_context
def history_clear(ctx: click.Context) -> None:
    """Delete all stored predictions."""
    try:
        HistoryStore(ctx.obj["history_file"]).clear()
    except MonteGoError as e:
        _fail(ctx, e)
        return
    console.print("[bold green]✓[/bold green] History cleared")


# ============================================================================
# SETTINGS COMMANDS
# ============================================================================


@cli.group()
def settings() -> None:
    """View and change preferences."""
    pass


@settings.command("show")
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Show current preferences."""
    manager = SettingsManager(ctx.obj["settings_file"])
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in manager.get_all().items():
        table.add_row(key, str(value))
    console.print(table)


@settings.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def settings_set(ctx: click.Context, key: str, value: str) -> None:
    """Set preference KEY to VALUE."""
    manager = SettingsManager(ctx.obj["settings_file"])
    try:
        current = manager.get(key)
        if isinstance(current, bool):
            parsed = value.strip().lower() in ("1", "true", "yes", "on")
        elif isinstance(current, int):
            parsed = parse_iterations(value) if key == "default_iterations" else int(value)
        else:
            parsed = value
        manager.set(key, parsed)
        manager.save()
    except (MonteGoError, ValueError) as e:
        _fail(ctx, e)
        return
    console.print(f"[bold green]✓[/bold green] {key} = {manager.get(key)}")


@settings.command("toggle")
@click.argument("key")
@click.pass_context
def settings_toggle(ctx: click.Context, key: str) -> None:
    """Flip boolean preference KEY."""
    manager = SettingsManager(ctx.obj["settings_file"])
    try:
        value = manager.toggle(key)
        manager.save()
    except MonteGoError as e:
        _fail(ctx, e)
        return
    console.print(f"[bold green]✓[/bold green] {key} = {value}")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
