"""
Shard distribution analysis.
"""

import math
from typing import List

from shard_rebalancer.model import BalanceStatistics, RoutingSnapshot, ShardDistribution

DEFAULT_THRESHOLD = 10


def compute_distribution(snapshot: RoutingSnapshot) -> ShardDistribution:
    """
    Count shard-routing entries per node.

    Nodes without any shards are retained, with a count of zero.
    """
    return {node_id: len(entries) for node_id, entries in snapshot.nodes.items()}


def is_balanced(distribution: ShardDistribution, threshold: int = DEFAULT_THRESHOLD) -> bool:
    """
    Whether the spread between the most and the least loaded node is within `threshold`.

    The minimum is the smallest observed count, so empty nodes take part in the
    verdict. An empty distribution, or one with a single node, is balanced.
    """
    if not distribution:
        return True
    counts = distribution.values()
    return max(counts) - min(counts) <= threshold


def calculate_balance_score(counts: List[int]) -> float:
    """Calculate a balance score (0-100) for a distribution"""
    if not counts or len(counts) <= 1:
        return 100.0

    mean_count = sum(counts) / len(counts)
    if mean_count == 0:
        return 100.0

    variance = sum((count - mean_count) ** 2 for count in counts) / len(counts)
    cv = math.sqrt(variance) / mean_count

    # CV of 0 = 100%, CV of 1 = ~37%, CV of 2 = ~14%
    return round(max(0.0, 100 * math.exp(-cv)), 1)


def balance_statistics(distribution: ShardDistribution) -> BalanceStatistics:
    counts = list(distribution.values())
    if not counts:
        return BalanceStatistics(0, 0, 0, 0, 0.0, 100.0)
    return BalanceStatistics(
        node_count=len(counts),
        total_shards=sum(counts),
        min_shards=min(counts),
        max_shards=max(counts),
        mean_shards=sum(counts) / len(counts),
        balance_score=calculate_balance_score(counts),
    )
