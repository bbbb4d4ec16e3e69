# Copyright (c) 2026, The shard-rebalancer Developers.
# Distributed under the terms of the AGPLv3 license.
import os

import pytest
import responses

from shard_rebalancer.config import ENVVAR_PREFIX, RebalancerSettings
from tests.endpoint import CLUSTER_URL, HEALTH_URL, SETTINGS_URL


@pytest.fixture(autouse=True)
def prune_environment(monkeypatch):
    """
    Delete all environment variables starting with `REBALANCER_`,
    to prevent leaking from the developer's environment to the test suite.
    """
    for envvar in list(os.environ.keys()):
        if envvar.startswith(ENVVAR_PREFIX):
            monkeypatch.delenv(envvar, raising=False)


@pytest.fixture
def settings() -> RebalancerSettings:
    """
    Settings pointing to the mocked endpoint, without any waiting.
    """
    return RebalancerSettings(url=CLUSTER_URL, poll_interval=0, move_delay=0)


@pytest.fixture
def mocked_cluster():
    """
    Provide a mocked cluster management endpoint, accepting any settings.
    Routing state responses are registered by the test cases.
    """
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.get(HEALTH_URL, json={"cluster_name": "testdrive", "status": "green", "number_of_nodes": 2})
        rsps.put(SETTINGS_URL, json={"acknowledged": True, "persistent": {}, "transient": {}})
        yield rsps
