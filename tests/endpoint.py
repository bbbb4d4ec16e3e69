import json
import typing as t

CLUSTER_URL = "http://localhost:9200"
HEALTH_URL = f"{CLUSTER_URL}/_cluster/health"
ROUTING_URL = f"{CLUSTER_URL}/_cluster/state/routing_nodes"
SETTINGS_URL = f"{CLUSTER_URL}/_cluster/settings"


def routing_nodes(counts: t.Dict[str, int]) -> t.Dict[str, t.Any]:
    """
    Build a `_cluster/state/routing_nodes` response body with `count` shard entries per node.
    """
    nodes = {}
    for node_id, count in counts.items():
        nodes[node_id] = [
            {"state": "STARTED", "primary": True, "node": node_id, "shard": shard, "index": "testdrive"}
            for shard in range(count)
        ]
    return {"cluster_name": "testdrive", "routing_nodes": {"unassigned": [], "nodes": nodes}}


def settings_payloads(rsps) -> t.List[t.Dict[str, t.Any]]:
    """
    All transient settings directives which have been submitted to the mocked endpoint, in order.
    """
    return [
        json.loads(call.request.body)["transient"]
        for call in rsps.calls
        if call.request.method == "PUT" and call.request.url == SETTINGS_URL
    ]
