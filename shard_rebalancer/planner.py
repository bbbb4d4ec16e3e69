"""
Select overloaded nodes and relief targets.
"""

import logging
from typing import Iterable, List, Optional

from shard_rebalancer.model import PlanStrategy, ShardDistribution, ShardMove

logger = logging.getLogger(__name__)


def pick_overloaded(distribution: ShardDistribution, threshold: int) -> List[str]:
    """
    Nodes holding more than `threshold` shards, in mapping iteration order.
    """
    return [node_id for node_id, count in distribution.items() if count > threshold]


def pick_relief(distribution: ShardDistribution, exclude: Iterable[str] = ()) -> Optional[str]:
    """
    The node with the fewest shards. On ties, the first one encountered wins.
    """
    excluded = set(exclude)
    relief_node = None
    relief_count = -1
    for node_id, count in distribution.items():
        if node_id in excluded:
            continue
        if relief_count == -1 or count < relief_count:
            relief_node = node_id
            relief_count = count
    return relief_node


class RebalancePlanner:
    """Turn a shard distribution into a sequence of moves"""

    def __init__(self, threshold: int, strategy: PlanStrategy = PlanStrategy.FIXED):
        self.threshold = threshold
        self.strategy = PlanStrategy(strategy)

    def plan(self, distribution: ShardDistribution) -> List[ShardMove]:
        if self.strategy is PlanStrategy.ADAPTIVE:
            return self._plan_adaptive(distribution)
        return self._plan_fixed(distribution)

    def _plan_fixed(self, distribution: ShardDistribution) -> List[ShardMove]:
        """
        Pick the relief target once, and use it for every overloaded node.
        """
        moves: List[ShardMove] = []
        target_node = pick_relief(distribution)
        for source_node in pick_overloaded(distribution, self.threshold):
            if source_node == target_node:
                logger.debug(f"Skipping node {source_node}: it is the relief target itself")
                continue
            moves.append(ShardMove(source_node, target_node, distribution[source_node]))
        return moves

    def _plan_adaptive(self, distribution: ShardDistribution) -> List[ShardMove]:
        """
        Re-pick the relief target after each move, based on a local estimate
        which assumes one shard moved from source to target.
        """
        moves: List[ShardMove] = []
        estimate = dict(distribution)
        for source_node in pick_overloaded(distribution, self.threshold):
            target_node = pick_relief(estimate, exclude=[source_node])
            if target_node is None or estimate[target_node] >= estimate[source_node]:
                logger.debug(f"Skipping node {source_node}: no less loaded node left")
                continue
            moves.append(ShardMove(source_node, target_node, distribution[source_node]))
            estimate[source_node] -= 1
            estimate[target_node] += 1
        return moves
