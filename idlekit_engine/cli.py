"""idlekit CLI - validate, inspect and simulate game templates.

Usage:
    idlekit validate ./game.yaml
    idlekit inspect ./game.json
    idlekit run ./game.yaml --ticks 600 --clicks-per-tick 1 --buy-building cursor
    idlekit clicker --ticks 300 --clicks 50
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from idlekit_core.graph import LogicGraph
from idlekit_core.loader import load_default_template, load_template, read_template_data
from idlekit_core.template import GameTemplate, TemplateValidationError, validate_template
from idlekit_core.utils import format_number, format_time, setup_logging
from idlekit_engine.clicker import ClickerGame
from idlekit_engine.clock import SimulationClock
from idlekit_engine.config import EngineConfig
from idlekit_engine.engine import GameEngine

app = typer.Typer(
    name="idlekit",
    help="idlekit - idle game template toolkit",
    add_completion=False,
)

console = Console()

# per building and tick; a zero-cost building is always affordable
MAX_BUILDINGS_PER_TICK = 100


def _load_config(config_path: Optional[Path]) -> EngineConfig:
    load_dotenv()
    config = EngineConfig.load(config_path)
    setup_logging(level=config.log_level, log_file=config.log_file)
    return config


def _load_or_exit(template_path: Path) -> GameTemplate:
    try:
        return load_template(template_path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {template_path}")
        raise typer.Exit(1)
    except TemplateValidationError as e:
        console.print(f"[red]Invalid template:[/red] {template_path}")
        for error in e.errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)


# ============================================================================
# Commands
# ============================================================================


@app.command("validate")
def validate(
    template: Annotated[Path, typer.Argument(help="Template file (.json, .yaml, .yml)")],
) -> None:
    """Validate a template and list every problem found."""
    try:
        data = read_template_data(template)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {template}")
        raise typer.Exit(1)
    except TemplateValidationError as e:
        console.print(f"[red]Unreadable template:[/red] {'; '.join(e.errors)}")
        raise typer.Exit(1)
    
    ok, errors = validate_template(data)
    if not ok:
        console.print(Panel(
            "\n".join(f"- {error}" for error in errors),
            title=f"{template.name}: {len(errors)} error(s)",
            border_style="red",
        ))
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {template.name} is valid")


@app.command("inspect")
def inspect(
    template: Annotated[Path, typer.Argument(help="Template file (.json, .yaml, .yml)")],
) -> None:
    """Print a template summary and lint its logic graph."""
    game_template = _load_or_exit(template)
    summary = game_template.summary()
    
    console.print(Panel(
        "\n".join(f"[bold]{key}:[/bold] {value}" for key, value in summary.items()),
        title="Template",
        border_style="blue",
    ))
    
    report = LogicGraph(game_template.logic).analyze()
    if report.ok and not report.warnings:
        console.print("[green]✓[/green] Logic graph: no problems found")
        return
    for error in report.errors:
        console.print(f"[red]error:[/red] {error}")
    for warning in report.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")


@app.command("run")
def run(
    template: Annotated[Path, typer.Argument(help="Template file (.json, .yaml, .yml)")],
    ticks: Annotated[int, typer.Option("--ticks", "-t", help="Ticks to simulate")] = 600,
    clicks_per_tick: Annotated[int, typer.Option("--clicks-per-tick", "-c", help="Manual clicks per tick")] = 0,
    buy_building: Annotated[Optional[List[str]], typer.Option("--buy-building", "-b", help="Building to buy whenever affordable")] = None,
    buy_upgrade: Annotated[Optional[List[str]], typer.Option("--buy-upgrade", "-u", help="Upgrade to buy once affordable")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", help="JSON engine config")] = None,
) -> None:
    """Simulate a template headless and print the final state."""
    config = _load_config(config_file)
    engine = GameEngine(_load_or_exit(template), config=config)
    player = _Autoplayer(engine, clicks_per_tick, buy_building or [], buy_upgrade or [])
    
    engine.start()
    ran = SimulationClock(player, tick_seconds=engine.tick_seconds).run(max_ticks=ticks)
    engine.shutdown()
    
    _print_engine(engine, ran)


class _Autoplayer:
    """Scripted player: the same clicks and purchases before every tick."""
    
    def __init__(self, engine: GameEngine, clicks: int, buildings: List[str], upgrades: List[str]):
        self.engine = engine
        self.clicks = clicks
        self.buildings = buildings
        self.upgrades = upgrades
    
    def tick(self) -> None:
        for _ in range(self.clicks):
            self.engine.click()
        for building_id in self.buildings:
            for _ in range(MAX_BUILDINGS_PER_TICK):
                if not self.engine.buy_building(building_id):
                    break
        for upgrade_id in self.upgrades:
            self.engine.buy_upgrade(upgrade_id)
        self.engine.tick()


def _print_engine(engine: GameEngine, ticks: int) -> None:
    console.print(Panel(
        f"[bold]Template:[/bold] {engine.template.meta.name}\n"
        f"[bold]Ticks:[/bold] {ticks}\n"
        f"[bold]Simulated time:[/bold] {format_time(engine.elapsed_seconds)}\n"
        f"[bold]Clicks:[/bold] {engine.production.total_clicks}\n"
        f"[bold]Prestige level:[/bold] {engine.prestige.level}",
        title="Simulation",
        border_style="blue",
    ))
    
    resources = Table(title="Resources")
    resources.add_column("Resource")
    resources.add_column("Amount", justify="right")
    resources.add_column("Total", justify="right")
    resources.add_column("Per second", justify="right")
    for resource_id in engine.resources.ids():
        state = engine.get_resource(resource_id)
        resources.add_row(
            resource_id,
            format_number(state.amount),
            format_number(state.total),
            f"{state.per_second:.2f}",
        )
    console.print(resources)
    
    owned = {bid: s for bid, s in engine.buildings.snapshot().items() if s["owned"]}
    if owned:
        buildings = Table(title="Buildings")
        buildings.add_column("Building")
        buildings.add_column("Owned", justify="right")
        for building_id, state in owned.items():
            buildings.add_row(building_id, str(state["owned"]))
        console.print(buildings)
    
    for notification in engine.notifications.drain():
        console.print(f"[cyan]»[/cyan] {notification.message}")


@app.command("clicker")
def clicker(
    template: Annotated[Optional[Path], typer.Argument(help="Template file; the bundled Idle Clicker when omitted")] = None,
    ticks: Annotated[int, typer.Option("--ticks", "-t", help="Ticks to simulate")] = 600,
    clicks: Annotated[int, typer.Option("--clicks", "-c", help="Manual clicks, spread over the first ticks")] = 0,
) -> None:
    """Run the leveled single-resource form, buying the cheapest upgrade it can."""
    _load_config(None)
    game = ClickerGame(_load_or_exit(template) if template else load_default_template())
    clock = SimulationClock(game)
    
    for tick in range(ticks):
        if tick < clicks:
            game.click()
        affordable = [u.id for u in game.template.upgrades if game.can_afford(u.id)]
        if affordable:
            game.buy_upgrade(min(affordable, key=game.get_cost))
        clock.step()
    
    console.print(Panel(
        f"[bold]Points:[/bold] {format_number(game.points)}\n"
        f"[bold]Total earned:[/bold] {format_number(game.total_points_earned)}\n"
        f"[bold]Click power:[/bold] {game.click_power:g}\n"
        f"[bold]Per second:[/bold] {game.points_per_second:g}\n"
        f"[bold]Playtime:[/bold] {format_time(game.playtime_seconds)}",
        title=game.template.meta.name,
        border_style="blue",
    ))
    
    levels = Table(title="Upgrades")
    levels.add_column("Upgrade")
    levels.add_column("Level", justify="right")
    levels.add_column("Next cost", justify="right")
    levels.add_column("Unlock")
    for definition in game.template.upgrades:
        unlock = "" if game.unlocked[definition.id] else (game.unlock_description(definition.id) or "locked")
        levels.add_row(
            definition.name,
            str(game.levels[definition.id]),
            format_number(game.get_cost(definition.id)),
            unlock,
        )
    console.print(levels)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
