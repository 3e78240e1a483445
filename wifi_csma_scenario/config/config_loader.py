#!/usr/bin/env python3
"""
Configuration loader for the WiFi / CSMA / point-to-point scenario

Loads and validates configuration from YAML file.
"""

import copy
import ipaddress
import os
import re
import yaml
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from . import defaults
from ..topology.addressing import usable_hosts, subnets_overlap
from ..utils.constants import EndpointKind, TraceFormat, ValidationLimits

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'scenario_config.yaml')

_RATE_UNITS = {
    'bps': 1,
    'b/s': 1,
    'kbps': 1_000,
    'kb/s': 1_000,
    'mbps': 1_000_000,
    'mb/s': 1_000_000,
    'gbps': 1_000_000_000,
    'gb/s': 1_000_000_000,
}

_TIME_UNITS = {
    's': 1.0,
    'ms': 1e-3,
    'us': 1e-6,
    'ns': 1e-9,
}

_TRUE_WORDS = ('1', 'true', 'yes', 'on', 't', 'y')
_FALSE_WORDS = ('0', 'false', 'no', 'off', 'f', 'n')


class ConfigurationError(ValueError):
    """Raised when a scenario configuration has errors"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid configuration:\n" + "\n".join(self.errors))


def parse_data_rate(rate: str) -> int:
    """
    Parse an ns-3 data rate string.

    Args:
        rate: e.g. '10Mbps', '500kb/s', '9600bps'

    Returns:
        int: Rate in bits per second

    Raises:
        ValueError: If the string is not a data rate
    """
    match = re.fullmatch(r'\s*([0-9]*\.?[0-9]+)\s*([A-Za-z/]+)\s*', str(rate))
    if not match:
        raise ValueError(f"Malformed data rate: {rate!r}")
    value, unit = match.groups()
    factor = _RATE_UNITS.get(unit.lower())
    if factor is None:
        raise ValueError(f"Unknown data rate unit in {rate!r}")
    return int(float(value) * factor)


def parse_time(value: str) -> float:
    """
    Parse an ns-3 time string.

    Args:
        value: e.g. '2ms', '10us', '1.5s'

    Returns:
        float: Time in seconds
    """
    match = re.fullmatch(r'\s*([0-9]*\.?[0-9]+)\s*([a-z]+)\s*', str(value))
    if not match:
        raise ValueError(f"Malformed time value: {value!r}")
    number, unit = match.groups()
    if unit not in _TIME_UNITS:
        raise ValueError(f"Unknown time unit in {value!r}")
    return float(number) * _TIME_UNITS[unit]


def parse_bool(value) -> bool:
    """
    Parse a boolean setting.

    Accepts YAML booleans, 0/1 and the words true/false, yes/no, on/off
    (case-insensitive), as the simulator's command line does.

    Raises:
        ValueError: If the value is not a boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise ValueError(f"Boolean value expected, got {value!r}")


@dataclass
class TopologyConfig:
    """Node counts"""
    n_csma: int
    n_wifi: int


@dataclass
class NetworkConfig:
    """Wired link configuration"""
    p2p_data_rate: str
    p2p_delay: str
    lan_data_rate: str
    lan_delay_ns: int


@dataclass
class MobilityConfig:
    """Grid placement of the wireless nodes"""
    min_x: float
    min_y: float
    delta_x: float
    delta_y: float
    grid_width: int
    layout: str


@dataclass
class WifiConfig:
    """Wireless segment configuration"""
    ssid: str
    active_probing: bool
    mobility: MobilityConfig


@dataclass
class AddressingConfig:
    """One subnet per segment"""
    p2p_subnet: str
    lan_subnet: str
    wifi_subnet: str

    def networks(self) -> Dict[str, ipaddress.IPv4Network]:
        return {
            'p2p': ipaddress.IPv4Network(self.p2p_subnet),
            'lan': ipaddress.IPv4Network(self.lan_subnet),
            'wifi': ipaddress.IPv4Network(self.wifi_subnet),
        }


@dataclass
class EndpointConfig:
    """Flow endpoint: a node group and an index inside it"""
    kind: str
    index: int


@dataclass
class FlowConfig:
    """Single UDP echo flow"""
    name: str
    server: EndpointConfig
    client: EndpointConfig
    port: int
    max_packets: int
    interval: float
    packet_size: int
    start: float
    stop: float


@dataclass
class TrafficConfig:
    """Traffic configuration"""
    flows: List[FlowConfig]
    skip_unresolvable: bool = False


@dataclass
class RunConfig:
    """Run configuration"""
    stop_time: float
    tracing: bool
    verbose: bool
    trace_format: str
    trace_file: str


@dataclass
class PathsConfig:
    """Paths configuration"""
    results_dir: str
    log_dir: str


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str
    format: str


@dataclass
class ScenarioConfig:
    """Main scenario configuration"""
    name: str
    description: str
    version: str
    topology: TopologyConfig
    network: NetworkConfig
    wifi: WifiConfig
    addressing: AddressingConfig
    traffic: TrafficConfig
    run: RunConfig
    paths: PathsConfig
    logging: LoggingConfig = field(default_factory=lambda: LoggingConfig(
        level=defaults.LOG_LEVEL, format=defaults.LOG_FORMAT))

    def group_size(self, kind: str) -> int:
        """Number of nodes an endpoint kind can index"""
        sizes = {
            EndpointKind.P2P: 2,
            EndpointKind.LAN: self.topology.n_csma + 1,
            EndpointKind.WIFI_STA: self.topology.n_wifi,
            EndpointKind.WIFI_AP: 1,
        }
        if kind not in sizes:
            raise ValueError(f"Unknown endpoint kind: {kind!r}")
        return sizes[kind]

    def endpoint_exists(self, endpoint: EndpointConfig) -> bool:
        if endpoint.kind not in EndpointKind.ALL:
            return False
        return 0 <= endpoint.index < self.group_size(endpoint.kind)

    def unresolvable_flows(self) -> List[FlowConfig]:
        """Flows whose client or server does not exist for the node counts"""
        return [
            flow for flow in self.traffic.flows
            if not (self.endpoint_exists(flow.server) and self.endpoint_exists(flow.client))
        ]

    def active_flows(self) -> List[FlowConfig]:
        """Flows that will be installed"""
        if not self.traffic.skip_unresolvable:
            return list(self.traffic.flows)
        missing = {id(f) for f in self.unresolvable_flows()}
        return [f for f in self.traffic.flows if id(f) not in missing]

    def trace_path(self) -> str:
        """Trace file location (relative names land in results_dir)"""
        if os.path.isabs(self.run.trace_file):
            return self.run.trace_file
        return os.path.join(self.paths.results_dir, self.run.trace_file)

    def offered_load_bps(self) -> float:
        """
        Calculate offered echo load from the clients.

        Formula: sum(packet_size × 8 / interval) over installed flows,
        counting only flows that send at least one packet.
        """
        load = 0.0
        for flow in self.active_flows():
            if flow.max_packets > 0 and flow.interval > 0:
                load += flow.packet_size * 8 / flow.interval
        return load

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of warning/error messages (empty if valid)
        """
        issues = []

        # Validate node counts
        if self.topology.n_csma < 0:
            issues.append(f"❌ nCsma must be >= 0, got {self.topology.n_csma}")
        if self.topology.n_wifi < 0:
            issues.append(f"❌ nWifi must be >= 0, got {self.topology.n_wifi}")

        # Validate address plan
        try:
            networks = self.addressing.networks()
        except ValueError as e:
            issues.append(f"❌ Malformed subnet: {e}")
            networks = None

        if networks:
            if subnets_overlap(networks.values()):
                issues.append("❌ Point-to-point, LAN and WiFi subnets must not overlap")

            demand = {
                'p2p': 2,
                'lan': self.topology.n_csma + 1,
                'wifi': self.topology.n_wifi + 1,
            }
            for segment, needed in demand.items():
                available = usable_hosts(networks[segment])
                if needed > available:
                    issues.append(
                        f"❌ {segment} subnet {networks[segment]} holds {available} "
                        f"addresses but {needed} devices need one"
                    )

        # Validate links
        for label, rate in (('Point-to-point', self.network.p2p_data_rate),
                            ('LAN', self.network.lan_data_rate)):
            try:
                if parse_data_rate(rate) <= 0:
                    issues.append(f"❌ {label} data rate must be positive")
            except ValueError as e:
                issues.append(f"❌ {e}")

        try:
            if parse_time(self.network.p2p_delay) < 0:
                issues.append("❌ Point-to-point delay must not be negative")
        except ValueError as e:
            issues.append(f"❌ {e}")

        if self.network.lan_delay_ns < 0:
            issues.append("❌ LAN delay must not be negative")

        # Validate run parameters
        if self.run.stop_time <= 0:
            issues.append("❌ Stop time must be positive")

        if self.run.trace_format not in TraceFormat.ALL:
            issues.append(f"❌ Unknown trace format: {self.run.trace_format}")

        if self.run.tracing and self.topology.n_csma == 0:
            issues.append("⚠️  Tracing enabled but the LAN has no hosts besides the gateway")

        # Validate flows
        names = [flow.name for flow in self.traffic.flows]
        if len(names) != len(set(names)):
            issues.append("❌ Duplicate flow names detected")

        for flow in self.traffic.flows:
            issues.extend(self._validate_flow(flow))

        issues.extend(self._validate_server_ports())

        return issues

    @staticmethod
    def _server_node(endpoint: EndpointConfig):
        """Key naming the node behind an endpoint (n0 and n1 sit in two groups)"""
        if endpoint.kind == EndpointKind.WIFI_AP or (endpoint.kind, endpoint.index) == (EndpointKind.P2P, 0):
            return (EndpointKind.WIFI_AP, 0)
        if (endpoint.kind, endpoint.index) == (EndpointKind.P2P, 1):
            return (EndpointKind.LAN, 0)
        return (endpoint.kind, endpoint.index)

    def _validate_server_ports(self) -> List[str]:
        """Echo servers on one node and port must not run at the same time"""
        issues = []
        servers = [
            flow for flow in self.active_flows()
            if self.endpoint_exists(flow.server)
        ]
        for i, first in enumerate(servers):
            for second in servers[i + 1:]:
                if first.port != second.port:
                    continue
                if self._server_node(first.server) != self._server_node(second.server):
                    continue
                # Windows that only touch still clash: stop and start share a timestamp
                if first.start <= second.stop and second.start <= first.stop:
                    issues.append(
                        f"❌ {first.name} and {second.name}: echo servers share "
                        f"{first.server.kind}[{first.server.index}] port {first.port} "
                        f"with overlapping windows"
                    )
        return issues

    def _validate_flow(self, flow: FlowConfig) -> List[str]:
        issues = []

        if not 0 <= flow.start <= self.run.stop_time:
            issues.append(f"❌ {flow.name}: start {flow.start}s outside [0, {self.run.stop_time}]")
        if not 0 <= flow.stop <= self.run.stop_time:
            issues.append(f"❌ {flow.name}: stop {flow.stop}s outside [0, {self.run.stop_time}]")
        if flow.start > flow.stop:
            issues.append(f"❌ {flow.name}: start after stop")

        if not ValidationLimits.MIN_PORT <= flow.port <= ValidationLimits.MAX_PORT:
            issues.append(f"❌ {flow.name}: port {flow.port} out of range")
        if not ValidationLimits.MIN_PACKET_SIZE <= flow.packet_size <= ValidationLimits.MAX_UDP_PAYLOAD:
            issues.append(f"❌ {flow.name}: packet size {flow.packet_size} out of range")
        if flow.interval <= 0:
            issues.append(f"❌ {flow.name}: interval must be positive")
        if flow.max_packets < 0:
            issues.append(f"❌ {flow.name}: max packets must not be negative")

        for role, endpoint in (('server', flow.server), ('client', flow.client)):
            if endpoint.kind not in EndpointKind.ALL:
                issues.append(f"❌ {flow.name}: unknown {role} kind {endpoint.kind!r}")
            elif not self.endpoint_exists(endpoint):
                marker = "⚠️ " if self.traffic.skip_unresolvable else "❌"
                issues.append(
                    f"{marker} {flow.name}: {role} {endpoint.kind}[{endpoint.index}] does not exist "
                    f"(group has {self.group_size(endpoint.kind)} nodes)"
                )

        if (flow.server.kind, flow.server.index) == (flow.client.kind, flow.client.index):
            issues.append(f"⚠️  {flow.name}: client and server are the same node")

        return issues


def _bool_setting(section: Dict[str, Any], key: str, default: bool, section_name: str) -> bool:
    try:
        return parse_bool(section.get(key, default))
    except ValueError as e:
        raise ConfigurationError([f"❌ {section_name}.{key}: {e}"]) from e


def _parse_endpoint(data: Dict[str, Any]) -> EndpointConfig:
    return EndpointConfig(kind=str(data['kind']), index=int(data['index']))


def _parse_flows(traffic_data: Dict[str, Any]) -> List[FlowConfig]:
    flow_defaults = {
        'port': defaults.ECHO_PORT,
        'max_packets': defaults.ECHO_MAX_PACKETS,
        'interval': defaults.ECHO_INTERVAL,
        'packet_size': defaults.ECHO_PACKET_SIZE,
        'start': defaults.ECHO_START,
        'stop': defaults.ECHO_STOP,
    }
    flow_defaults.update(traffic_data.get('defaults') or {})

    flows = []
    for idx, flow_data in enumerate(traffic_data.get('flows') or [], start=1):
        values = dict(flow_defaults)
        values.update({k: v for k, v in flow_data.items() if k in flow_defaults})
        flows.append(FlowConfig(
            name=flow_data.get('name', f'echo-{idx}'),
            server=_parse_endpoint(flow_data['server']),
            client=_parse_endpoint(flow_data['client']),
            port=int(values['port']),
            max_packets=int(values['max_packets']),
            interval=float(values['interval']),
            packet_size=int(values['packet_size']),
            start=float(values['start']),
            stop=float(values['stop'])
        ))
    return flows


def default_flows() -> List[FlowConfig]:
    """The five echo flows of the scenario"""
    return [
        FlowConfig(
            name=name,
            server=EndpointConfig(*server),
            client=EndpointConfig(*client),
            port=defaults.ECHO_PORT,
            max_packets=defaults.ECHO_MAX_PACKETS,
            interval=defaults.ECHO_INTERVAL,
            packet_size=defaults.ECHO_PACKET_SIZE,
            start=defaults.ECHO_START,
            stop=defaults.ECHO_STOP
        )
        for name, server, client in defaults.ECHO_FLOWS
    ]


def default_config() -> ScenarioConfig:
    """
    Build the configuration from the module defaults.

    Returns:
        ScenarioConfig object
    """
    return config_from_dict({})


def config_from_dict(data: Dict[str, Any]) -> ScenarioConfig:
    """
    Build a ScenarioConfig from a parsed YAML mapping.

    Missing sections and keys fall back to config.defaults.
    """
    data = data or {}

    scenario_meta = data.get('scenario') or {}

    topology_data = data.get('topology') or {}
    topology = TopologyConfig(
        n_csma=int(topology_data.get('n_csma', defaults.DEFAULT_N_CSMA)),
        n_wifi=int(topology_data.get('n_wifi', defaults.DEFAULT_N_WIFI))
    )

    network_data = data.get('network') or {}
    p2p_data = network_data.get('point_to_point') or {}
    lan_data = network_data.get('lan') or {}
    network = NetworkConfig(
        p2p_data_rate=str(p2p_data.get('data_rate', defaults.P2P_DATA_RATE)),
        p2p_delay=str(p2p_data.get('delay', defaults.P2P_DELAY)),
        lan_data_rate=str(lan_data.get('data_rate', defaults.LAN_DATA_RATE)),
        lan_delay_ns=int(lan_data.get('delay_ns', defaults.LAN_DELAY_NS))
    )

    wifi_data = data.get('wifi') or {}
    mobility_data = wifi_data.get('mobility') or {}
    wifi = WifiConfig(
        ssid=str(wifi_data.get('ssid', defaults.WIFI_SSID)),
        active_probing=_bool_setting(wifi_data, 'active_probing', defaults.WIFI_ACTIVE_PROBING, 'wifi'),
        mobility=MobilityConfig(
            min_x=float(mobility_data.get('min_x', defaults.MOBILITY_MIN_X)),
            min_y=float(mobility_data.get('min_y', defaults.MOBILITY_MIN_Y)),
            delta_x=float(mobility_data.get('delta_x', defaults.MOBILITY_DELTA_X)),
            delta_y=float(mobility_data.get('delta_y', defaults.MOBILITY_DELTA_Y)),
            grid_width=int(mobility_data.get('grid_width', defaults.MOBILITY_GRID_WIDTH)),
            layout=str(mobility_data.get('layout', defaults.MOBILITY_LAYOUT))
        )
    )

    addressing_data = data.get('addressing') or {}
    addressing = AddressingConfig(
        p2p_subnet=str(addressing_data.get('p2p_subnet', defaults.P2P_SUBNET)),
        lan_subnet=str(addressing_data.get('lan_subnet', defaults.LAN_SUBNET)),
        wifi_subnet=str(addressing_data.get('wifi_subnet', defaults.WIFI_SUBNET))
    )

    traffic_data = data.get('traffic') or {}
    if 'flows' in traffic_data:
        flows = _parse_flows(traffic_data)
    else:
        flows = default_flows()
    traffic = TrafficConfig(
        flows=flows,
        skip_unresolvable=_bool_setting(traffic_data, 'skip_unresolvable', False, 'traffic')
    )

    run_data = data.get('run') or {}
    run = RunConfig(
        stop_time=float(run_data.get('stop_time', defaults.STOP_TIME)),
        tracing=_bool_setting(run_data, 'tracing', defaults.TRACING, 'run'),
        verbose=_bool_setting(run_data, 'verbose', defaults.VERBOSE, 'run'),
        trace_format=str(run_data.get('trace_format', defaults.TRACE_FORMAT)),
        trace_file=str(run_data.get('trace_file', defaults.TRACE_FILE))
    )

    paths_data = data.get('paths') or {}
    paths = PathsConfig(
        results_dir=str(paths_data.get('results_dir', defaults.RESULTS_DIR)),
        log_dir=str(paths_data.get('log_dir', defaults.LOG_DIR))
    )

    logging_data = data.get('logging') or {}
    logging_config = LoggingConfig(
        level=str(logging_data.get('level', defaults.LOG_LEVEL)),
        format=str(logging_data.get('format', defaults.LOG_FORMAT))
    )

    return ScenarioConfig(
        name=str(scenario_meta.get('name', 'wifi-csma-p2p')),
        description=str(scenario_meta.get(
            'description', 'WiFi stations and CSMA LAN joined by a point-to-point link')),
        version=str(scenario_meta.get('version', '1.0')),
        topology=topology,
        network=network,
        wifi=wifi,
        addressing=addressing,
        traffic=traffic,
        run=run,
        paths=paths,
        logging=logging_config
    )


def load_config(config_path: Optional[str] = None) -> ScenarioConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file (None = packaged default)

    Returns:
        ScenarioConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is malformed
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise yaml.YAMLError(f"Top level of {config_path} must be a mapping")

    return config_from_dict(data or {})


def apply_overrides(config: ScenarioConfig, n_csma: Optional[int] = None,
                    n_wifi: Optional[int] = None, verbose: Optional[bool] = None,
                    tracing: Optional[bool] = None, trace_file: Optional[str] = None,
                    stop_time: Optional[float] = None,
                    log_level: Optional[str] = None,
                    results_dir: Optional[str] = None,
                    log_dir: Optional[str] = None) -> ScenarioConfig:
    """
    Return a copy of config with command-line overrides applied.

    None means "keep the configured value".
    """
    config = copy.deepcopy(config)

    if n_csma is not None:
        config.topology.n_csma = n_csma
    if n_wifi is not None:
        config.topology.n_wifi = n_wifi
    if verbose is not None:
        config.run.verbose = verbose
    if tracing is not None:
        config.run.tracing = tracing
    if trace_file is not None:
        config.run.trace_file = trace_file
    if stop_time is not None:
        config.run.stop_time = stop_time
    if log_level is not None:
        config.logging.level = log_level
    if results_dir is not None:
        config.paths.results_dir = results_dir
    if log_dir is not None:
        config.paths.log_dir = log_dir

    return config


def check_config(config: ScenarioConfig, logger=None) -> List[str]:
    """
    Validate config, report warnings and raise on errors.

    Args:
        config: Scenario configuration
        logger: Optional ScenarioLogger (print when absent)

    Returns:
        List of warnings

    Raises:
        ConfigurationError: If any error was found
    """
    issues = config.validate()
    errors = [i for i in issues if i.startswith('❌')]
    warnings = [i for i in issues if i.startswith('⚠️')]

    for warning in warnings:
        if logger:
            logger.warning(warning)
        else:
            print(warning)

    if errors:
        if logger:
            for error in errors:
                logger.error(error)
        raise ConfigurationError(errors)

    return warnings
