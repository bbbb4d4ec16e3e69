"""
shard-rebalancer - even out shard counts across search cluster nodes

Command Line Interface.
"""

import sys
from typing import Optional

import click
from rich.console import Console

from shard_rebalancer.analyzer import compute_distribution
from shard_rebalancer.client import ClusterClient
from shard_rebalancer.config import RebalancerSettings
from shard_rebalancer.controller import RebalanceController
from shard_rebalancer.exception import ClusterClientError
from shard_rebalancer.model import ClusterHealth, PlanStrategy
from shard_rebalancer.planner import RebalancePlanner
from shard_rebalancer.reporter import DistributionReporter
from shard_rebalancer.scheduler import Scheduler
from shard_rebalancer.util.cli import boot_click, error_logger

console = Console()


@click.group()
@click.option("--url", envvar="REBALANCER_URL", type=str, help="Base URL of the cluster management endpoint")
@click.option("--username", envvar="REBALANCER_USERNAME", type=str, help="Username for basic auth")
@click.option("--password", envvar="REBALANCER_PASSWORD", type=str, help="Password for basic auth")
@click.option("--ssl-verify/--no-ssl-verify", envvar="REBALANCER_SSL_VERIFY", default=None, help="Verify TLS")
@click.option("--timeout", envvar="REBALANCER_TIMEOUT", type=float, help="HTTP timeout in seconds (default: 30)")
@click.option(
    "--threshold",
    envvar="REBALANCER_THRESHOLD",
    type=int,
    help="Maximum shard count difference between nodes considered balanced (default: 10)",
)
@click.option(
    "--poll-interval",
    envvar="REBALANCER_POLL_INTERVAL",
    type=float,
    help="Seconds to wait between passes (default: 60)",
)
@click.option(
    "--move-delay",
    envvar="REBALANCER_MOVE_DELAY",
    type=float,
    help="Seconds to wait after each move (default: 5)",
)
@click.option(
    "--settle-timeout",
    envvar="REBALANCER_SETTLE_TIMEOUT",
    type=float,
    help="Seconds to wait for each move to show up in the routing state (default: 0, off)",
)
@click.option(
    "--strategy",
    envvar="REBALANCER_STRATEGY",
    type=click.Choice([item.value for item in PlanStrategy]),
    help="How relief targets are picked (default: fixed)",
)
@click.option("--verbose", is_flag=True, required=False, help="Turn on logging")
@click.option("--debug", is_flag=True, required=False, help="Turn on logging with debug level")
@click.version_option()
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, **options):
    """
    Monitor shard distribution across cluster nodes, and nudge shards from
    overloaded nodes towards the least loaded one.
    """
    boot_click(ctx, verbose, debug)
    ctx.obj["settings"] = RebalancerSettings.from_env(**options)


def make_controller(ctx: click.Context) -> RebalanceController:
    settings: RebalancerSettings = ctx.obj["settings"]
    return RebalanceController(client=ClusterClient(settings), settings=settings)


@cli.command()
@click.option(
    "--max-passes",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many passes (default: run forever)",
)
@click.pass_context
def run(ctx: click.Context, max_passes: Optional[int]):
    """Run rebalancing passes periodically until interrupted"""
    controller = make_controller(ctx)
    reporter = DistributionReporter(threshold=controller.settings.threshold)
    scheduler = Scheduler(controller, max_passes=max_passes, on_report=reporter.pass_report)
    scheduler.install_signal_handlers()
    scheduler.run()


@cli.command()
@click.pass_context
def once(ctx: click.Context):
    """Run a single rebalancing pass"""
    controller = make_controller(ctx)
    report = controller.run_pass()
    DistributionReporter(threshold=controller.settings.threshold).pass_report(report)


@cli.command()
@click.pass_context
def status(ctx: click.Context):
    """Display shard distribution and the moves a pass would issue, without changing anything"""
    settings: RebalancerSettings = ctx.obj["settings"]
    client = ClusterClient(settings)

    health: Optional[ClusterHealth] = None
    try:
        health = client.fetch_health()
    except ClusterClientError as ex:
        error_logger(ctx)(f"Unable to get cluster health: {ex}")

    try:
        distribution = compute_distribution(client.fetch_routing_state())
    except ClusterClientError as ex:
        error_logger(ctx)(f"Unable to get cluster state: {ex}")
        raise click.ClickException(str(ex)) from ex

    moves = RebalancePlanner(threshold=settings.threshold, strategy=settings.strategy).plan(distribution)
    DistributionReporter(threshold=settings.threshold).status(health, distribution, moves)


@cli.command()
@click.pass_context
def test_connection(ctx: click.Context):
    """Test connection to the cluster"""
    settings: RebalancerSettings = ctx.obj["settings"]
    client = ClusterClient(settings)
    try:
        health = client.fetch_health()
    except ClusterClientError as ex:
        console.print(f"[red]✗ Connection failed: {ex}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Connection successful![/green] Cluster health: {health.status}")
    if health.number_of_nodes is not None:
        console.print(f"Connected to cluster with {health.number_of_nodes} nodes")
