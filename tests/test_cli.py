"""
CLI tests: Invoke `shard-rebalancer <subcommand>` against a mocked endpoint.
"""

import requests
from click.testing import CliRunner

from shard_rebalancer.cli import cli
from tests.endpoint import CLUSTER_URL, HEALTH_URL, ROUTING_URL, routing_nodes, settings_payloads

OPTIONS = ["--url", CLUSTER_URL, "--move-delay", "0", "--poll-interval", "0"]


def test_cli_status_unbalanced(mocked_cluster):
    mocked_cluster.get(ROUTING_URL, json=routing_nodes({"node-1": 12, "node-2": 1}))
    runner = CliRunner()

    result = runner.invoke(cli, args=OPTIONS + ["status"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "Shards per Node" in result.output
    assert "node-1" in result.output
    assert "not balanced" in result.output
    assert settings_payloads(mocked_cluster) == []


def test_cli_status_balanced(mocked_cluster):
    mocked_cluster.get(ROUTING_URL, json=routing_nodes({"node-1": 5, "node-2": 6}))
    runner = CliRunner()

    result = runner.invoke(cli, args=OPTIONS + ["status"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "Cluster is balanced" in result.output


def test_cli_status_failure(mocked_cluster):
    mocked_cluster.get(ROUTING_URL, body=requests.exceptions.ConnectionError("Connection refused"))
    runner = CliRunner()

    result = runner.invoke(cli, args=OPTIONS + ["status"])

    assert result.exit_code == 1
    assert "Connection refused" in result.output


def test_cli_once(mocked_cluster):
    mocked_cluster.get(ROUTING_URL, json=routing_nodes({"node-1": 12, "node-2": 1}))
    runner = CliRunner()

    result = runner.invoke(cli, args=OPTIONS + ["once"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "Pass outcome: moved" in result.output
    assert settings_payloads(mocked_cluster) == [
        {"cluster.routing.allocation.enable": "none"},
        {
            "cluster.routing.allocation.exclude._name": "node-1",
            "cluster.routing.allocation.include._name": "node-2",
        },
        {"cluster.routing.allocation.enable": None},
    ]


def test_cli_run_max_passes(mocked_cluster, mocker):
    mocker.patch("shard_rebalancer.scheduler.signal.signal")
    mocked_cluster.get(ROUTING_URL, json=routing_nodes({"node-1": 5, "node-2": 6}))
    runner = CliRunner()

    result = runner.invoke(cli, args=OPTIONS + ["run", "--max-passes", "2"], catch_exceptions=False)

    assert result.exit_code == 0
    assert result.output.count("Pass outcome: balanced") == 2
    assert len(settings_payloads(mocked_cluster)) == 4


def test_cli_settings_from_envvars(mocked_cluster):
    mocked_cluster.get(ROUTING_URL, json=routing_nodes({"node-1": 5, "node-2": 6}))
    runner = CliRunner()

    result = runner.invoke(
        cli,
        args=["status"],
        env={"REBALANCER_URL": CLUSTER_URL, "REBALANCER_THRESHOLD": "0"},
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert "threshold: 0" in result.output
    assert "not balanced" in result.output


def test_cli_invalid_strategy():
    runner = CliRunner()
    result = runner.invoke(cli, args=["--strategy", "random", "status"])
    assert result.exit_code == 2
    assert "Invalid value for '--strategy'" in result.output


def test_cli_run_rejects_zero_max_passes():
    runner = CliRunner()
    result = runner.invoke(cli, args=OPTIONS + ["run", "--max-passes", "0"])
    assert result.exit_code == 2
    assert "Invalid value for '--max-passes'" in result.output


def test_cli_test_connection(mocked_cluster):
    runner = CliRunner()
    result = runner.invoke(cli, args=OPTIONS + ["test-connection"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Connection successful" in result.output
    assert "Cluster health: green" in result.output


def test_cli_test_connection_failure(mocked_cluster):
    mocked_cluster.replace("GET", HEALTH_URL, body=requests.exceptions.ConnectionError("Connection refused"))
    runner = CliRunner()
    result = runner.invoke(cli, args=OPTIONS + ["test-connection"])
    assert result.exit_code == 1
    assert "Connection failed" in result.output
