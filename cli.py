import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from tanglemap.core.config import settings
from tanglemap.models.graph import StoreFeed
from tanglemap.services.map_service import MapService

cli_app = typer.Typer()
console = Console()

def _load_feed(path: Path) -> StoreFeed:
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] Feed file {path} not found.")
        raise typer.Exit(code=1)
    return StoreFeed.model_validate_json(path.read_text(encoding="utf-8"))

def _run(feed: StoreFeed, ticks: int, seed: int | None, search: str = "") -> MapService:
    service = MapService(settings, seed=seed)
    service.search(search)
    service.submit_feed(feed.tangles, feed.links)
    for _ in range(max(1, ticks)):
        service.step()
    return service

@cli_app.command()
def simulate(
    feed_path: Path = typer.Option(..., "--feed", "-f", help="JSON file with 'tangles' and 'links'."),
    ticks: int = typer.Option(300, "--ticks", "-t", help="Number of layout ticks to run."),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for spawn positions and nudges."),
):
    """
    Runs the layout headlessly and prints where every tangle settled.
    """
    feed = _load_feed(feed_path)
    service = _run(feed, ticks, seed)
    snapshot = service.snapshot

    console.print(
        f"[cyan]{len(snapshot.nodes)} tangles, {len(snapshot.edges)} links "
        f"after {service.engine.tick_count} ticks.[/cyan]"
    )
    table = Table("id", "title", "x", "y", "speed")
    for node_id, node in snapshot.nodes.items():
        state = service.engine.state(node_id)
        table.add_row(
            str(node_id),
            node.title,
            f"{state.position.x:.1f}",
            f"{state.position.y:.1f}",
            f"{state.velocity.length():.4f}",
        )
    console.print(table)
    console.print(f"[bold green]Kinetic energy:[/bold green] {service.engine.kinetic_energy():.6f}")

@cli_app.command()
def frame(
    feed_path: Path = typer.Option(..., "--feed", "-f", help="JSON file with 'tangles' and 'links'."),
    ticks: int = typer.Option(300, "--ticks", "-t", help="Number of layout ticks to run first."),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for spawn positions and nudges."),
    search: str = typer.Option("", "--search", help="Highlight tangles whose title contains this."),
):
    """
    Prints the display list the renderer would hand to the host canvas.
    """
    feed = _load_feed(feed_path)
    service = _run(feed, ticks, seed, search=search)
    frame_json = json.dumps(service.latest_frame.model_dump(mode="json"), indent=2)
    console.print(Syntax(frame_json, "json", theme="solarized-dark"))


if __name__ == "__main__":
    cli_app()
