#!/usr/bin/env python3
"""
Tests for the command line entry points and the scenario logger

Run with: python3 -m pytest tests/test_cli.py
"""

import argparse
import os

import pytest
import yaml

from wifi_csma_scenario import generate_summary as summary_cli
from wifi_csma_scenario import main as main_module
from wifi_csma_scenario.main import main, parse_args, str2bool
from wifi_csma_scenario.topology import RunResult
from wifi_csma_scenario.utils.logger import ScenarioLogger, get_ns3_log_level


def _dirs(tmp_path):
    return ['--results-dir', str(tmp_path / 'results'), '--log-dir', str(tmp_path / 'logs')]


# =============================================================================
# Argument parsing
# =============================================================================

@pytest.mark.parametrize("value,expected", [
    ("true", True), ("1", True), ("Yes", True),
    ("false", False), ("0", False), ("off", False),
])
def test_str2bool(value, expected):
    assert str2bool(value) is expected


def test_str2bool_rejects_garbage():
    with pytest.raises(argparse.ArgumentTypeError):
        str2bool("maybe")


def test_parse_args_defaults_are_none():
    """Unset flags keep the configured values"""
    args = parse_args([])

    assert args.n_csma is None
    assert args.n_wifi is None
    assert args.verbose is None
    assert args.tracing is None
    assert not args.dry_run


def test_parse_args_simulator_style_flags():
    args = parse_args(['--nCsma=3', '--nWifi', '2', '--tracing', 'false', '--verbose'])

    assert args.n_csma == 3
    assert args.n_wifi == 2
    assert args.tracing is False
    assert args.verbose is True


def test_parse_args_dashed_aliases():
    args = parse_args(['--n-csma', '1', '--n-wifi', '5'])

    assert (args.n_csma, args.n_wifi) == (1, 5)


# =============================================================================
# main()
# =============================================================================

def test_dry_run_prints_description(tmp_path, capsys):
    assert main(['--dry-run'] + _dirs(tmp_path)) == 0

    data = yaml.safe_load(capsys.readouterr().out)
    assert len(data['nodes']) == 12
    assert [f['name'] for f in data['flows']] == ['echo-1', 'echo-2', 'echo-3', 'echo-4', 'echo-5']
    assert os.path.isdir(tmp_path / 'results')
    assert os.listdir(tmp_path / 'logs')


def test_describe_writes_yaml(tmp_path):
    path = tmp_path / 'description.yaml'

    assert main(['--dry-run', '--nWifi', '6', '--describe', str(path)] + _dirs(tmp_path)) == 0

    data = yaml.safe_load(path.read_text())
    assert data['groups']['wifi_sta'] == ['n8', 'n9', 'n10', 'n11', 'n12', 'n13']


def test_unresolvable_counts_rejected(tmp_path):
    """The default flows need six LAN hosts"""
    assert main(['--dry-run', '--nCsma', '2'] + _dirs(tmp_path)) == 2


def test_negative_count_rejected(tmp_path):
    assert main(['--dry-run', '--nWifi', '-1'] + _dirs(tmp_path)) == 2


@pytest.mark.parametrize("subnet", ["10.1.1.0/31", "10.1.1.1/32"])
def test_point_to_point_subnet_too_small_rejected(tmp_path, subnet):
    config_path = tmp_path / 'p2p.yaml'
    config_path.write_text(yaml.safe_dump({'addressing': {'p2p_subnet': subnet}}))

    assert main(['--dry-run', '--config', str(config_path)] + _dirs(tmp_path)) == 2


def test_clashing_echo_servers_rejected(tmp_path):
    config_path = tmp_path / 'clash.yaml'
    config_path.write_text(yaml.safe_dump({'traffic': {'flows': [
        {'name': 'a', 'server': {'kind': 'lan', 'index': 2}, 'client': {'kind': 'lan', 'index': 1}},
        {'name': 'b', 'server': {'kind': 'lan', 'index': 2}, 'client': {'kind': 'wifi_sta', 'index': 0}},
    ]}}))

    assert main(['--dry-run', '--config', str(config_path)] + _dirs(tmp_path)) == 2


def test_quoted_tracing_flag_in_yaml(tmp_path, capsys):
    config_path = tmp_path / 'quiet.yaml'
    config_path.write_text("run:\n  tracing: \"false\"\n")

    assert main(['--dry-run', '--config', str(config_path)] + _dirs(tmp_path)) == 0

    assert yaml.safe_load(capsys.readouterr().out)['run']['tracing'] is False


def test_non_boolean_yaml_setting_rejected(tmp_path):
    config_path = tmp_path / 'bad.yaml'
    config_path.write_text("run:\n  verbose: loud\n")

    assert main(['--dry-run', '--config', str(config_path)] + _dirs(tmp_path)) == 2


def test_skip_unresolvable_config(tmp_path, capsys):
    config_path = tmp_path / 'skip.yaml'
    config_path.write_text(yaml.safe_dump({'traffic': {
        'skip_unresolvable': True,
        'flows': [
            {'name': 'near', 'server': {'kind': 'lan', 'index': 1}, 'client': {'kind': 'wifi_sta', 'index': 0}},
            {'name': 'far', 'server': {'kind': 'lan', 'index': 9}, 'client': {'kind': 'wifi_sta', 'index': 0}},
        ],
    }}))

    assert main(['--dry-run', '--config', str(config_path)] + _dirs(tmp_path)) == 0

    data = yaml.safe_load(capsys.readouterr().out)
    assert [f['name'] for f in data['flows']] == ['near']
    assert data['skipped_flows'] == ['far']


def test_run_with_summary(tmp_path, sample_trace, monkeypatch):
    """Simulator replaced by a stub that hands back a prepared trace"""
    calls = []

    def fake_run(description, config, logger=None, ns=None):
        calls.append(description)
        return RunResult(stop_time=2.0, wall_seconds=0.1,
                         flows=[f.name for f in description.flows], trace_file=sample_trace)

    monkeypatch.setattr(main_module, 'run_scenario', fake_run)

    assert main(['--summary'] + _dirs(tmp_path)) == 0

    assert len(calls) == 1
    assert os.path.exists(tmp_path / 'results' / 'trace_summary.txt')
    assert os.path.exists(tmp_path / 'results' / 'trace_summary.csv')


def test_run_interrupted(tmp_path, monkeypatch):
    def interrupted(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module, 'run_scenario', interrupted)

    assert main(_dirs(tmp_path)) == 130


# =============================================================================
# wifi-csma-summary
# =============================================================================

def test_summary_cli_missing_file(tmp_path):
    assert summary_cli.main([str(tmp_path / 'missing.tr')]) == 1


def test_summary_cli_writes_reports(sample_trace, tmp_path):
    output_dir = tmp_path / 'out'

    assert summary_cli.main([sample_trace, '--csv', '--excel', '--output-dir', str(output_dir)]) == 0

    for name in ('trace_summary.txt', 'trace_summary.csv', 'trace_summary.xlsx'):
        assert os.path.exists(output_dir / name)


def test_summary_cli_defaults_next_to_trace(sample_trace):
    assert summary_cli.main([sample_trace]) == 0

    assert os.path.exists(os.path.join(os.path.dirname(sample_trace), 'trace_summary.txt'))


# =============================================================================
# Logger
# =============================================================================

def test_logger_writes_file(tmp_path):
    logger = ScenarioLogger("test_scenario", log_dir=str(tmp_path), console=False)
    logger.flow_event("echo-1 installed")
    logger.network_event("routing ready")
    logger.close()

    text = open(logger.log_file).read()
    assert "[FLOW] echo-1 installed" in text
    assert "[NETWORK] routing ready" in text


def test_logger_recreated_without_duplicate_handlers(tmp_path):
    ScenarioLogger("dup_scenario", console=True)
    logger = ScenarioLogger("dup_scenario", console=True)

    assert len(logger.logger.handlers) == 1
    logger.close()
    assert logger.logger.handlers == []


def test_ns3_log_level():
    class FakeNs:
        LOG_LEVEL_INFO = 'info-level'

    assert get_ns3_log_level(FakeNs, True) == 'info-level'
    assert get_ns3_log_level(FakeNs, False) is None


if __name__ == '__main__':
    pytest.main([__file__])
