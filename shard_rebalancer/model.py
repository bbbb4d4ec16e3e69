import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

SETTING_ALLOCATION_ENABLE = "cluster.routing.allocation.enable"
SETTING_ALLOCATION_EXCLUDE_NAME = "cluster.routing.allocation.exclude._name"
SETTING_ALLOCATION_INCLUDE_NAME = "cluster.routing.allocation.include._name"


@dataclass(frozen=True)
class ClusterHealth:
    """Point-in-time cluster health"""

    status: str
    cluster_name: Optional[str] = None
    number_of_nodes: Optional[int] = None
    relocating_shards: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterHealth":
        return cls(
            status=data["status"],
            cluster_name=data.get("cluster_name"),
            number_of_nodes=data.get("number_of_nodes"),
            relocating_shards=data.get("relocating_shards"),
        )


@dataclass(frozen=True)
class RoutingSnapshot:
    """
    Which shard-routing entries currently live on which node.

    The entries are opaque, only their count per node is of interest.
    """

    nodes: Mapping[str, Sequence[Any]] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {node_id: tuple(entries) for node_id, entries in self.nodes.items()}
        object.__setattr__(self, "nodes", MappingProxyType(frozen))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoutingSnapshot":
        """
        Read the `routing_nodes.nodes` section of a cluster state response.

        Raises `KeyError` or `TypeError` when the response has a different shape.
        """
        nodes = data["routing_nodes"]["nodes"]
        if not isinstance(nodes, dict) or not all(isinstance(entries, list) for entries in nodes.values()):
            raise TypeError("Unexpected structure of `routing_nodes.nodes`")
        return cls(nodes=nodes)


# Node identifier to shard count.
ShardDistribution = Dict[str, int]


class PlanStrategy(str, Enum):
    FIXED = "fixed"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class AllocationSettings:
    """A transient cluster settings directive"""

    transient: Mapping[str, Optional[str]]

    @classmethod
    def disable(cls) -> "AllocationSettings":
        return cls(transient={SETTING_ALLOCATION_ENABLE: "none"})

    @classmethod
    def enable(cls) -> "AllocationSettings":
        return cls(transient={SETTING_ALLOCATION_ENABLE: None})

    @classmethod
    def move(cls, source_node: str, target_node: str) -> "AllocationSettings":
        return cls(
            transient={
                SETTING_ALLOCATION_EXCLUDE_NAME: source_node,
                SETTING_ALLOCATION_INCLUDE_NAME: target_node,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"transient": dict(self.transient)}


@dataclass(frozen=True)
class ShardMove:
    """Nudge shards away from an overloaded node towards a relief node"""

    source_node: str
    target_node: str
    source_shards: int

    def __str__(self):
        return f"{self.source_node} ({self.source_shards} shards) → {self.target_node}"


@dataclass(frozen=True)
class BalanceStatistics:
    node_count: int
    total_shards: int
    min_shards: int
    max_shards: int
    mean_shards: float
    balance_score: float

    @property
    def spread(self) -> int:
        return self.max_shards - self.min_shards


class PassOutcome(str, Enum):
    BALANCED = "balanced"
    MOVED = "moved"
    DISABLE_FAILED = "disable-failed"
    FETCH_FAILED = "fetch-failed"
    CANCELLED = "cancelled"


@dataclass
class PassReport:
    """What happened during one rebalancing pass"""

    outcome: Optional[PassOutcome] = None
    health: Optional[ClusterHealth] = None
    distribution: ShardDistribution = dataclasses.field(default_factory=dict)
    moves: List[ShardMove] = dataclasses.field(default_factory=list)
    unconfirmed_moves: List[ShardMove] = dataclasses.field(default_factory=list)
    errors: List[str] = dataclasses.field(default_factory=list)
    disable_count: int = 0
    enable_count: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome in (PassOutcome.BALANCED, PassOutcome.MOVED) and not self.errors
