from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shard_rebalancer.analyzer import balance_statistics, is_balanced
from shard_rebalancer.model import ClusterHealth, PassOutcome, PassReport, ShardDistribution, ShardMove

console = Console()

HEALTH_COLORS = {"green": "green", "yellow": "yellow", "red": "red"}


def format_health(health: Optional[ClusterHealth]) -> str:
    if health is None:
        return "[dim]unknown[/dim]"
    color = HEALTH_COLORS.get(health.status, "white")
    return f"[{color}]{health.status}[/{color}]"


def format_score(value: float) -> str:
    """Format balance score with color coding"""
    color = "green"
    if value < 50:
        color = "red"
    elif value < 80:
        color = "yellow"
    return f"[{color}]{value:.1f}%[/{color}]"


class DistributionReporter:
    def __init__(self, threshold: int):
        self.threshold = threshold

    def status(self, health: Optional[ClusterHealth], distribution: ShardDistribution, moves: List[ShardMove]):
        """Display health, shard distribution, and the moves a pass would issue"""
        console.print(Panel.fit("[bold blue]Shard Distribution[/bold blue]"))

        stats = balance_statistics(distribution)
        summary_table = Table(title="Cluster Summary", box=box.ROUNDED)
        summary_table.add_column("Metric", style="cyan")
        summary_table.add_column("Value", style="magenta")
        if health is not None and health.cluster_name:
            summary_table.add_row("Cluster", health.cluster_name)
        summary_table.add_row("Health", format_health(health))
        summary_table.add_row("Nodes", str(stats.node_count))
        summary_table.add_row("Total Shards", str(stats.total_shards))
        summary_table.add_row("Spread (max - min)", f"{stats.spread} (threshold: {self.threshold})")
        summary_table.add_row("Balance Score", format_score(stats.balance_score))
        console.print(summary_table)
        console.print()

        self.distribution(distribution)

        if is_balanced(distribution, self.threshold):
            console.print("[green]Cluster is balanced, no moves needed.[/green]")
            return

        console.print(f"[yellow]Cluster is not balanced, {len(moves)} move(s) would be issued:[/yellow]")
        self.moves(moves)

    def distribution(self, distribution: ShardDistribution):
        node_table = Table(title="Shards per Node", box=box.ROUNDED)
        node_table.add_column("Node", style="cyan")
        node_table.add_column("Shards", justify="right", style="magenta")
        node_table.add_column("Overloaded", justify="center")

        for node_id, count in sorted(distribution.items(), key=lambda item: item[1], reverse=True):
            overloaded = "[red]yes[/red]" if count > self.threshold else "[dim]no[/dim]"
            node_table.add_row(node_id, str(count), overloaded)

        console.print(node_table)
        console.print()

    def moves(self, moves: List[ShardMove]):
        if not moves:
            return
        move_table = Table(title=f"Shard Moves ({len(moves)})", box=box.ROUNDED)
        move_table.add_column("From Node", style="red")
        move_table.add_column("Shards", justify="right", style="magenta")
        move_table.add_column("To Node", style="green")
        for move in moves:
            move_table.add_row(move.source_node, str(move.source_shards), move.target_node)
        console.print(move_table)
        console.print()

    def pass_report(self, report: PassReport):
        """Summarize the outcome of a single pass"""
        colors = {
            PassOutcome.BALANCED: "green",
            PassOutcome.MOVED: "blue",
            PassOutcome.CANCELLED: "yellow",
        }
        outcome = report.outcome.value if report.outcome else "unknown"
        color = colors.get(report.outcome, "red")
        console.print(f"Pass outcome: [{color}]{outcome}[/{color}], health: {format_health(report.health)}")
        if report.distribution:
            self.distribution(report.distribution)
        self.moves(report.moves)
        for move in report.unconfirmed_moves:
            console.print(f"[yellow]Move not confirmed: {move}[/yellow]")
        for error in report.errors:
            console.print(f"[red]Error: {error}[/red]")
