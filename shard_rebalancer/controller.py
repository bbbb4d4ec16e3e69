"""
One rebalancing pass.

Disable allocation, fetch routing state, analyze, nudge shards away from
overloaded nodes, re-enable allocation. Allocation is re-enabled on every
path through a pass. Moves are only confirmed after that, because the
cluster does not relocate shards while allocation is disabled.
"""

import logging
import threading
import time
from typing import Optional

from shard_rebalancer.analyzer import compute_distribution, is_balanced
from shard_rebalancer.client import ClusterClient
from shard_rebalancer.config import RebalancerSettings
from shard_rebalancer.exception import ClusterClientError
from shard_rebalancer.model import AllocationSettings, PassOutcome, PassReport, ShardDistribution
from shard_rebalancer.planner import RebalancePlanner

logger = logging.getLogger(__name__)


class RebalanceController:
    def __init__(
        self,
        client: ClusterClient,
        settings: Optional[RebalancerSettings] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.client = client
        self.settings = settings or client.settings
        self.cancel = cancel or threading.Event()
        self.planner = RebalancePlanner(threshold=self.settings.threshold, strategy=self.settings.strategy)

    def run_pass(self) -> PassReport:
        logger.info("Rebalancing shards")
        report = PassReport()
        self.sample_health(report)

        try:
            self.rebalance(report)
        finally:
            enabled = self.enable_allocation(report)

        if report.moves and self.settings.settle_timeout > 0:
            if enabled:
                self.confirm_moves(report)
            else:
                logger.warning("Not confirming moves, shard allocation may still be disabled")
                report.unconfirmed_moves = list(report.moves)
        return report

    def rebalance(self, report: PassReport):
        if not self.disable_allocation(report):
            report.outcome = PassOutcome.DISABLE_FAILED
            return

        try:
            snapshot = self.client.fetch_routing_state()
        except ClusterClientError as ex:
            logger.error(f"Error getting cluster state: {ex}")
            report.errors.append(str(ex))
            report.outcome = PassOutcome.FETCH_FAILED
            return

        logger.debug(f"Routing state: {dict(snapshot.nodes)}")
        report.distribution = compute_distribution(snapshot)
        logger.info(f"Shard distribution: {report.distribution}")

        if is_balanced(report.distribution, self.settings.threshold):
            logger.info("Cluster is already balanced")
            report.outcome = PassOutcome.BALANCED
            return

        report.outcome = PassOutcome.MOVED
        self.move_shards(report)

    def sample_health(self, report: PassReport):
        try:
            report.health = self.client.fetch_health()
            logger.info(f"Cluster health: {report.health.status}")
        except ClusterClientError as ex:
            logger.warning(f"Unable to get cluster health: {ex}")

    def disable_allocation(self, report: PassReport) -> bool:
        logger.info("Disabling shard allocation")
        report.disable_count += 1
        try:
            self.client.apply_settings(AllocationSettings.disable())
            return True
        except ClusterClientError as ex:
            logger.error(f"Error disabling shard allocation: {ex}")
            report.errors.append(str(ex))
            return False

    def enable_allocation(self, report: PassReport) -> bool:
        logger.info("Enabling shard allocation")
        report.enable_count += 1
        try:
            self.client.apply_settings(AllocationSettings.enable())
            return True
        except ClusterClientError as ex:
            logger.error(f"Error enabling shard allocation, it may remain disabled: {ex}")
            report.errors.append(str(ex))
            return False

    def move_shards(self, report: PassReport):
        moves = self.planner.plan(report.distribution)
        if not moves:
            logger.info("No shard moves planned")
            return

        for move in moves:
            if self.cancel.is_set():
                logger.warning("Rebalancing cancelled, skipping remaining moves")
                report.outcome = PassOutcome.CANCELLED
                return

            logger.info(f"Moving shard from node {move.source_node} to node {move.target_node}")
            try:
                self.client.apply_settings(AllocationSettings.move(move.source_node, move.target_node))
            except ClusterClientError as ex:
                logger.error(f"Error moving shard, skipping remaining moves: {ex}")
                report.errors.append(str(ex))
                return
            report.moves.append(move)
            self.cancel.wait(self.settings.move_delay)

    def confirm_moves(self, report: PassReport):
        """
        Poll the routing state until each source node holds fewer shards than
        when its move was planned, bounded by `settle_timeout`. Moves still
        pending after that end up in `report.unconfirmed_moves`.
        """
        pending = list(report.moves)
        deadline = time.monotonic() + self.settings.settle_timeout
        poll_interval = self.settings.move_delay or 1.0
        while pending:
            try:
                current = self.shard_counts()
                for move in list(pending):
                    if current.get(move.source_node, 0) < move.source_shards:
                        logger.info(f"Move confirmed: {move}")
                        pending.remove(move)
            except ClusterClientError as ex:
                logger.warning(f"Unable to check progress of moves: {ex}")

            if not pending:
                break
            remaining = deadline - time.monotonic()
            if remaining <= 0 or self.cancel.wait(min(poll_interval, remaining)):
                break

        for move in pending:
            logger.warning(f"Move not confirmed within {self.settings.settle_timeout}s: {move}")
        report.unconfirmed_moves = pending

    def shard_counts(self) -> ShardDistribution:
        return compute_distribution(self.client.fetch_routing_state())
