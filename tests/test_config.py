#!/usr/bin/env python3
"""
Unit tests for configuration loading, overrides and validation

Run with: python3 -m pytest tests/test_config.py
"""

import pytest
import yaml

from wifi_csma_scenario.config import (
    ConfigurationError, apply_overrides, check_config, config_from_dict,
    default_config, load_config
)
from wifi_csma_scenario.config.config_loader import EndpointConfig, parse_data_rate, parse_time


# =============================================================================
# Loading
# =============================================================================

def test_packaged_yaml_matches_module_defaults():
    """The shipped YAML and config.defaults describe the same scenario"""
    assert load_config() == default_config()


def test_default_values(config):
    assert config.topology.n_csma == 6
    assert config.topology.n_wifi == 4
    assert config.run.stop_time == 2.0
    assert config.run.tracing is True
    assert config.run.trace_file == "results1.tr"
    assert config.wifi.ssid == "ns-3-ssid"
    assert config.wifi.active_probing is False
    assert [f.name for f in config.traffic.flows] == ["echo-1", "echo-2", "echo-3", "echo-4", "echo-5"]


def test_default_flows_parameters(config):
    for flow in config.traffic.flows:
        assert flow.port == 9
        assert flow.max_packets == 1000
        assert flow.interval == 2.0
        assert flow.packet_size == 1024
        assert flow.start == 1.0
        assert flow.stop == 2.0

    first = config.traffic.flows[0]
    assert (first.server.kind, first.server.index) == ("lan", 2)
    assert (first.client.kind, first.client.index) == ("lan", 1)


def test_load_partial_yaml(tmp_path):
    """Missing sections fall back to defaults; flow defaults apply per flow"""
    path = tmp_path / "small.yaml"
    path.write_text(yaml.safe_dump({
        'topology': {'n_csma': 2, 'n_wifi': 1},
        'traffic': {
            'defaults': {'packet_size': 512},
            'flows': [
                {'server': {'kind': 'lan', 'index': 2},
                 'client': {'kind': 'wifi_sta', 'index': 0},
                 'max_packets': 3},
            ],
        },
    }))

    config = load_config(str(path))

    assert config.topology.n_csma == 2
    assert config.topology.n_wifi == 1
    assert config.network.p2p_data_rate == "10Mbps"
    assert len(config.traffic.flows) == 1
    flow = config.traffic.flows[0]
    assert flow.name == "echo-1"
    assert flow.packet_size == 512
    assert flow.max_packets == 3
    assert flow.port == 9
    assert config.validate() == []


def test_load_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/scenario.yaml")


def test_load_non_mapping_yaml(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")

    with pytest.raises(yaml.YAMLError):
        load_config(str(path))


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == default_config()


# =============================================================================
# Overrides
# =============================================================================

def test_apply_overrides_returns_copy(config):
    updated = apply_overrides(config, n_csma=3, n_wifi=2, verbose=False, tracing=False,
                              stop_time=5.0, trace_file="lan.tr")

    assert updated.topology.n_csma == 3
    assert updated.topology.n_wifi == 2
    assert updated.run.verbose is False
    assert updated.run.tracing is False
    assert updated.run.stop_time == 5.0
    assert updated.run.trace_file == "lan.tr"
    # Input config untouched
    assert config.topology.n_csma == 6
    assert config.run.tracing is True


def test_apply_overrides_none_keeps_values(config):
    assert apply_overrides(config) == config


def test_trace_path_joins_results_dir(config, tmp_path):
    updated = apply_overrides(config, results_dir=str(tmp_path))
    assert updated.trace_path() == str(tmp_path / "results1.tr")

    absolute = apply_overrides(config, trace_file="/tmp/abs.tr")
    assert absolute.trace_path() == "/tmp/abs.tr"


# =============================================================================
# Validation
# =============================================================================

def test_default_config_is_valid(config):
    assert config.validate() == []
    assert check_config(config) == []


def test_small_lan_leaves_flows_unresolvable(config):
    """With nCsma=2 the LAN group is n1..n3, so servers at index 3+ are missing"""
    small = apply_overrides(config, n_csma=2)
    issues = small.validate()

    missing = [i for i in issues if "does not exist" in i]
    assert len(missing) == 4
    assert all(i.startswith("❌") for i in missing)
    assert [f.name for f in small.unresolvable_flows()] == ["echo-2", "echo-3", "echo-4", "echo-5"]

    with pytest.raises(ConfigurationError) as excinfo:
        check_config(small)
    assert len(excinfo.value.errors) == 4


def test_skip_unresolvable_turns_errors_into_warnings(config):
    small = apply_overrides(config, n_csma=2)
    small.traffic.skip_unresolvable = True

    warnings = check_config(small)

    assert len(warnings) == 4
    assert [f.name for f in small.active_flows()] == ["echo-1"]


def test_flow_times_must_fit_stop_time(config):
    short = apply_overrides(config, stop_time=1.5)
    issues = short.validate()

    assert sum(1 for i in issues if "stop 2.0s outside" in i) == 5


def test_start_after_stop(config):
    config.traffic.flows[0].start = 2.0
    config.traffic.flows[0].stop = 1.0

    assert any("start after stop" in i for i in config.validate())


def test_bad_flow_parameters(config):
    flow = config.traffic.flows[0]
    flow.port = 70000
    flow.packet_size = 0
    flow.interval = 0
    flow.max_packets = -1

    issues = config.validate()

    assert any("port 70000 out of range" in i for i in issues)
    assert any("packet size 0 out of range" in i for i in issues)
    assert any("interval must be positive" in i for i in issues)
    assert any("max packets must not be negative" in i for i in issues)


def test_negative_counts(config):
    issues = apply_overrides(config, n_csma=-1, n_wifi=-2).validate()

    assert any("nCsma must be >= 0" in i for i in issues)
    assert any("nWifi must be >= 0" in i for i in issues)


def test_overlapping_subnets(config):
    config.addressing.wifi_subnet = "10.1.0.0/16"

    assert any("must not overlap" in i for i in config.validate())


def test_wifi_pool_capacity(config):
    """Stations plus the AP must fit in the WiFi subnet"""
    crowded = apply_overrides(config, n_wifi=254)

    assert any("wifi subnet" in i for i in crowded.validate())
    assert not any("wifi subnet" in i for i in apply_overrides(config, n_wifi=253).validate())


def test_tracing_empty_lan_warns(config):
    empty = apply_overrides(config, n_csma=0)
    empty.traffic.flows = []

    issues = empty.validate()

    assert len(issues) == 1
    assert issues[0].startswith("⚠️")


def test_duplicate_flow_names(config):
    config.traffic.flows[1].name = "echo-1"

    assert "❌ Duplicate flow names detected" in config.validate()


def test_unknown_endpoint_kind():
    config = config_from_dict({'traffic': {'flows': [
        {'name': 'x', 'server': {'kind': 'mesh', 'index': 0}, 'client': {'kind': 'lan', 'index': 1}},
    ]}})

    assert any("unknown server kind 'mesh'" in i for i in config.validate())


def test_bad_trace_format(config):
    config.run.trace_format = "json"

    assert "❌ Unknown trace format: json" in config.validate()


@pytest.mark.parametrize("subnet", ["10.1.1.0/31", "10.1.1.1/32"])
def test_point_to_point_subnet_too_small(config, subnet):
    """Both link ends need an address; a /31 or /32 cannot hold them"""
    config.addressing.p2p_subnet = subnet

    issues = config.validate()

    assert any(i.startswith("❌ p2p subnet") for i in issues)
    with pytest.raises(ConfigurationError):
        check_config(config)


def test_point_to_point_slash_30_fits(config):
    config.addressing.p2p_subnet = "10.1.1.0/30"

    assert config.validate() == []


def test_servers_sharing_node_and_port(config):
    """Two echo servers on lan[2] port 9 during 1-2 s cannot both bind"""
    config.traffic.flows[1].server = config.traffic.flows[0].server

    clashes = [i for i in config.validate() if "share" in i]

    assert len(clashes) == 1
    assert clashes[0].startswith("❌ echo-1 and echo-2")


def test_servers_sharing_node_on_other_port(config):
    config.traffic.flows[1].server = config.traffic.flows[0].server
    config.traffic.flows[1].port = 10

    assert config.validate() == []


def test_servers_sharing_node_in_separate_windows(config):
    config = apply_overrides(config, stop_time=5.0)
    config.traffic.flows[1].server = config.traffic.flows[0].server
    config.traffic.flows[1].start = 3.0
    config.traffic.flows[1].stop = 4.0

    assert config.validate() == []


def test_servers_on_same_node_through_two_groups(config):
    """p2p index 1 and lan index 0 are both the gateway n1"""
    flows = config.traffic.flows
    flows[0].server = EndpointConfig("p2p", 1)
    flows[1].server = EndpointConfig("lan", 0)

    assert any("share" in i for i in config.validate())


@pytest.mark.parametrize("text,expected", [
    ("false", False), ("False", False), ("no", False), ("0", False),
    ("true", True), ("yes", True), (1, True), (0, False),
])
def test_quoted_booleans_in_yaml(text, expected):
    config = config_from_dict({
        'run': {'tracing': text, 'verbose': text},
        'wifi': {'active_probing': text},
        'traffic': {'skip_unresolvable': text},
    })

    assert config.run.tracing is expected
    assert config.run.verbose is expected
    assert config.wifi.active_probing is expected
    assert config.traffic.skip_unresolvable is expected


def test_non_boolean_setting_rejected():
    with pytest.raises(ConfigurationError) as excinfo:
        config_from_dict({'run': {'tracing': 'sometimes'}})

    assert "run.tracing" in excinfo.value.errors[0]


def test_group_size(config):
    assert config.group_size("p2p") == 2
    assert config.group_size("lan") == 7
    assert config.group_size("wifi_sta") == 4
    assert config.group_size("wifi_ap") == 1

    with pytest.raises(ValueError):
        config.group_size("mesh")


def test_offered_load(config):
    """Five clients, 1024 bytes every 2 seconds each"""
    assert config.offered_load_bps() == 5 * 1024 * 8 / 2.0


# =============================================================================
# Unit parsing
# =============================================================================

@pytest.mark.parametrize("text,expected", [
    ("10Mbps", 10_000_000),
    ("500kb/s", 500_000),
    ("9600bps", 9600),
    ("1.5Gbps", 1_500_000_000),
])
def test_parse_data_rate(text, expected):
    assert parse_data_rate(text) == expected


@pytest.mark.parametrize("text", ["fast", "10", "10 parsecs"])
def test_parse_data_rate_rejects(text):
    with pytest.raises(ValueError):
        parse_data_rate(text)


def test_parse_time():
    assert parse_time("2ms") == pytest.approx(0.002)
    assert parse_time("1.5s") == pytest.approx(1.5)
    assert parse_time("10us") == pytest.approx(1e-5)

    with pytest.raises(ValueError):
        parse_time("2 fortnights")


if __name__ == '__main__':
    pytest.main([__file__])
