#!/usr/bin/env python3
"""
Scenario Description Builder

Turns a ScenarioConfig into the complete, engine-independent description of
the run: which nodes exist, which segments they sit on, which address each
device gets and which echo flows run between them.

Topology:

    Wifi 10.1.3.0
                  AP
                  *
     Stations     |
    *    *    *   |       10.1.1.0
    |    |    |   n0 -------------- n1   n2   n3   n4
                     point-to-point  |    |    |    |
                                     ================
                                       LAN 10.1.2.0
"""

import ipaddress
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import yaml

from .addressing import AddressPool
from ..config.naming import get_node_name, get_endpoint_label
from ..utils.constants import EndpointKind, NodeRole, SegmentKind


class UnresolvableEndpoint(LookupError):
    """Raised when a flow endpoint names a node that does not exist"""


@dataclass
class Node:
    """A simulated node"""
    node_id: int
    name: str
    role: str
    position: Optional[Tuple[float, float]] = None


@dataclass
class Interface:
    """A node's device on one segment"""
    node: str
    segment: str
    device_index: int
    address: ipaddress.IPv4Interface


@dataclass
class Segment:
    """A network segment and the devices attached to it"""
    kind: str
    network: ipaddress.IPv4Network
    attributes: Dict[str, object]
    interfaces: List[Interface] = field(default_factory=list)

    @property
    def nodes(self) -> List[str]:
        return [iface.node for iface in self.interfaces]


@dataclass
class EchoFlow:
    """A resolved UDP echo flow"""
    name: str
    server: str
    client: str
    server_address: ipaddress.IPv4Address
    segment: str
    port: int
    max_packets: int
    interval: float
    packet_size: int
    start: float
    stop: float


@dataclass
class ScenarioDescription:
    """Everything the engine needs to set the scenario up"""
    name: str
    nodes: List[Node]
    segments: Dict[str, Segment]
    groups: Dict[str, List[str]]
    flows: List[EchoFlow]
    skipped_flows: List[str]
    wifi: Dict[str, object]
    run: Dict[str, object]

    def node(self, name: str) -> Node:
        for node in self.nodes:
            if node.name == name:
                return node
        raise KeyError(name)

    def segment(self, kind: str) -> Segment:
        return self.segments[kind]

    def address_of(self, node_name: str, segment: str) -> ipaddress.IPv4Address:
        """Address of a node's device on a segment"""
        for iface in self.segments[segment].interfaces:
            if iface.node == node_name:
                return iface.address.ip
        raise KeyError(f"{node_name} has no device on {segment}")

    def interfaces_of(self, node_name: str) -> List[Interface]:
        return [
            iface
            for segment in self.segments.values()
            for iface in segment.interfaces
            if iface.node == node_name
        ]

    def all_addresses(self) -> List[ipaddress.IPv4Address]:
        return [
            iface.address.ip
            for segment in self.segments.values()
            for iface in segment.interfaces
        ]

    def device_map(self) -> Dict[Tuple[int, int], Interface]:
        """(node id, device index) → interface, as the trace file numbers them"""
        ids = {node.name: node.node_id for node in self.nodes}
        return {
            (ids[iface.node], iface.device_index): iface
            for segment in self.segments.values()
            for iface in segment.interfaces
        }

    def as_dict(self) -> Dict[str, object]:
        """Plain data view (strings, numbers, lists, dicts)"""
        return {
            'name': self.name,
            'nodes': [
                {
                    'id': node.node_id,
                    'name': node.name,
                    'role': node.role,
                    **({'position': list(node.position)} if node.position is not None else {}),
                }
                for node in self.nodes
            ],
            'segments': {
                kind: {
                    'network': str(segment.network),
                    'attributes': dict(segment.attributes),
                    'interfaces': [
                        {
                            'node': iface.node,
                            'device': iface.device_index,
                            'address': str(iface.address),
                        }
                        for iface in segment.interfaces
                    ],
                }
                for kind, segment in self.segments.items()
            },
            'groups': {k: list(v) for k, v in self.groups.items()},
            'flows': [
                {
                    'name': flow.name,
                    'server': flow.server,
                    'client': flow.client,
                    'server_address': str(flow.server_address),
                    'segment': flow.segment,
                    'port': flow.port,
                    'max_packets': flow.max_packets,
                    'interval': flow.interval,
                    'packet_size': flow.packet_size,
                    'start': flow.start,
                    'stop': flow.stop,
                }
                for flow in self.flows
            ],
            'skipped_flows': list(self.skipped_flows),
            'wifi': dict(self.wifi),
            'run': dict(self.run),
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.as_dict(), sort_keys=False)


def grid_position(slot: int, mobility) -> Tuple[float, float]:
    """
    Position of the slot-th node placed by a grid allocator.

    RowFirst fills a row of `grid_width` nodes before moving down;
    ColumnFirst fills a column first.
    """
    width = mobility.grid_width
    if mobility.layout == 'ColumnFirst':
        return (mobility.min_x + mobility.delta_x * (slot // width),
                mobility.min_y + mobility.delta_y * (slot % width))
    return (mobility.min_x + mobility.delta_x * (slot % width),
            mobility.min_y + mobility.delta_y * (slot // width))


class ScenarioBuilder:
    """
    Builds the scenario description in engine creation order.

    Node ids:
        n0                  access point, point-to-point end 0
        n1                  LAN gateway, point-to-point end 1, LAN index 0
        n2 .. n(1+nCsma)    extra LAN hosts
        then                wireless stations
    """

    def __init__(self, config, logger=None):
        """
        Args:
            config: ScenarioConfig
            logger: Optional ScenarioLogger
        """
        self.config = config
        self.logger = logger

    def _log(self, msg: str, level: str = "info"):
        """Helper to log messages"""
        if self.logger:
            getattr(self.logger, level)(msg)

    def build(self) -> ScenarioDescription:
        """
        Build the description.

        Returns:
            ScenarioDescription

        Raises:
            AddressPoolExhausted: If a subnet is too small for its devices
            UnresolvableEndpoint: If a flow names a missing node and
                unresolvable flows are not skipped
        """
        n_csma = self.config.topology.n_csma
        n_wifi = self.config.topology.n_wifi
        if n_csma < 0 or n_wifi < 0:
            raise ValueError(f"Node counts must be >= 0 (nCsma={n_csma}, nWifi={n_wifi})")

        nodes = self._create_nodes(n_csma, n_wifi)
        groups = self._create_groups(nodes, n_csma, n_wifi)
        segments = self._create_segments(groups)
        flows, skipped = self._resolve_flows(groups, segments)

        self._log(
            f"Scenario described: {len(nodes)} nodes, "
            f"{sum(len(s.interfaces) for s in segments.values())} devices, "
            f"{len(flows)} flows"
        )

        return ScenarioDescription(
            name=self.config.name,
            nodes=nodes,
            segments=segments,
            groups=groups,
            flows=flows,
            skipped_flows=skipped,
            wifi={
                'ssid': self.config.wifi.ssid,
                'active_probing': self.config.wifi.active_probing,
            },
            run={
                'stop_time': self.config.run.stop_time,
                'tracing': self.config.run.tracing,
                'verbose': self.config.run.verbose,
                'trace_format': self.config.run.trace_format,
                'trace_file': self.config.trace_path(),
            }
        )

    def _create_nodes(self, n_csma: int, n_wifi: int) -> List[Node]:
        mobility = self.config.wifi.mobility
        nodes = [
            Node(0, get_node_name(0), NodeRole.ACCESS_POINT, grid_position(0, mobility)),
            Node(1, get_node_name(1), NodeRole.GATEWAY),
        ]
        for i in range(n_csma):
            node_id = 2 + i
            nodes.append(Node(node_id, get_node_name(node_id), NodeRole.LAN_HOST))
        for i in range(n_wifi):
            node_id = 2 + n_csma + i
            # AP takes grid slot 0, stations follow
            nodes.append(Node(node_id, get_node_name(node_id), NodeRole.STATION,
                              grid_position(i + 1, mobility)))
        return nodes

    @staticmethod
    def _create_groups(nodes: List[Node], n_csma: int, n_wifi: int) -> Dict[str, List[str]]:
        names = [node.name for node in nodes]
        return {
            EndpointKind.P2P: names[0:2],
            EndpointKind.LAN: names[1:2 + n_csma],
            EndpointKind.WIFI_STA: names[2 + n_csma:2 + n_csma + n_wifi],
            EndpointKind.WIFI_AP: names[0:1],
        }

    def _create_segments(self, groups: Dict[str, List[str]]) -> Dict[str, Segment]:
        addressing = self.config.addressing
        network = self.config.network

        p2p_pool = AddressPool(addressing.p2p_subnet)
        lan_pool = AddressPool(addressing.lan_subnet)
        wifi_pool = AddressPool(addressing.wifi_subnet)

        p2p = Segment(
            kind=SegmentKind.P2P,
            network=p2p_pool.network,
            attributes={'data_rate': network.p2p_data_rate, 'delay': network.p2p_delay},
        )
        for node, address in zip(groups[EndpointKind.P2P], p2p_pool.assign(2)):
            p2p.interfaces.append(Interface(node, SegmentKind.P2P, 0, address))
        self._log(f"Point-to-point {p2p.network}: {', '.join(p2p.nodes)}", "debug")

        lan = Segment(
            kind=SegmentKind.LAN,
            network=lan_pool.network,
            attributes={'data_rate': network.lan_data_rate, 'delay_ns': network.lan_delay_ns},
        )
        lan_nodes = groups[EndpointKind.LAN]
        for idx, (node, address) in enumerate(zip(lan_nodes, lan_pool.assign(len(lan_nodes)))):
            # The gateway already carries its point-to-point device
            lan.interfaces.append(Interface(node, SegmentKind.LAN, 1 if idx == 0 else 0, address))
        self._log(f"LAN {lan.network}: {len(lan.interfaces)} devices", "debug")

        wifi = Segment(
            kind=SegmentKind.WIFI,
            network=wifi_pool.network,
            attributes={'ssid': self.config.wifi.ssid},
        )
        stations = groups[EndpointKind.WIFI_STA]
        for node, address in zip(stations, wifi_pool.assign(len(stations))):
            wifi.interfaces.append(Interface(node, SegmentKind.WIFI, 0, address))
        # AP is assigned after the stations, from the same pool
        ap = groups[EndpointKind.WIFI_AP][0]
        wifi.interfaces.append(Interface(ap, SegmentKind.WIFI, 1, wifi_pool.assign(1)[0]))
        self._log(f"WiFi {wifi.network}: {len(stations)} stations + AP", "debug")

        return {
            SegmentKind.P2P: p2p,
            SegmentKind.LAN: lan,
            SegmentKind.WIFI: wifi,
        }

    def _resolve_flows(self, groups, segments) -> Tuple[List[EchoFlow], List[str]]:
        flows = []
        skipped = []

        for flow_cfg in self.config.traffic.flows:
            try:
                server = resolve_endpoint(groups, flow_cfg.server.kind, flow_cfg.server.index)
                client = resolve_endpoint(groups, flow_cfg.client.kind, flow_cfg.client.index)
            except UnresolvableEndpoint as e:
                if not self.config.traffic.skip_unresolvable:
                    raise UnresolvableEndpoint(f"{flow_cfg.name}: {e}") from e
                self._log(f"Skipping {flow_cfg.name}: {e}", "warning")
                skipped.append(flow_cfg.name)
                continue

            segment = endpoint_segment(flow_cfg.server.kind)
            server_address = next(
                iface.address.ip
                for iface in segments[segment].interfaces
                if iface.node == server
            )

            flows.append(EchoFlow(
                name=flow_cfg.name,
                server=server,
                client=client,
                server_address=server_address,
                segment=segment,
                port=flow_cfg.port,
                max_packets=flow_cfg.max_packets,
                interval=flow_cfg.interval,
                packet_size=flow_cfg.packet_size,
                start=flow_cfg.start,
                stop=flow_cfg.stop
            ))

        return flows, skipped


def endpoint_segment(kind: str) -> str:
    """Segment whose address a server of this endpoint kind listens on"""
    mapping = {
        EndpointKind.P2P: SegmentKind.P2P,
        EndpointKind.LAN: SegmentKind.LAN,
        EndpointKind.WIFI_STA: SegmentKind.WIFI,
        EndpointKind.WIFI_AP: SegmentKind.WIFI,
    }
    if kind not in mapping:
        raise UnresolvableEndpoint(f"unknown endpoint kind {kind!r}")
    return mapping[kind]


def resolve_endpoint(groups: Dict[str, List[str]], kind: str, index: int) -> str:
    """
    Map a (kind, index) endpoint to a node name.

    Raises:
        UnresolvableEndpoint: If the kind is unknown or index is out of range
    """
    if kind not in groups:
        raise UnresolvableEndpoint(f"unknown endpoint kind {kind!r}")
    members = groups[kind]
    if not 0 <= index < len(members):
        raise UnresolvableEndpoint(
            f"{get_endpoint_label(kind, index)} does not exist ({len(members)} nodes in group)"
        )
    return members[index]


def build_scenario(config, logger=None) -> ScenarioDescription:
    """Shortcut for ScenarioBuilder(config, logger).build()"""
    return ScenarioBuilder(config, logger).build()
