#!/usr/bin/env python3
"""
ns-3 Runner

Replays a ScenarioDescription as ns-3 helper calls and runs the simulator.
Containers are created in the same order the description numbers its
nodes, so node n<k> here is /NodeList/<k> in the trace file.
"""

import os
import time
from dataclasses import dataclass
from typing import List, Optional

from .scenario import ScenarioDescription
from ..utils.constants import (
    EndpointKind, Ns3LogComponent, Ns3TypeId, SegmentKind, TraceFormat
)
from ..utils.logger import get_ns3_log_level


def import_ns3():
    """
    Import the ns-3 Python bindings.

    Raises:
        ImportError: If the ns3 distribution is not installed
    """
    try:
        from ns import ns
    except ImportError as e:
        raise ImportError(
            "ns-3 Python bindings not found. "
            "Install with: pip install 'wifi-csma-scenario[ns3]'"
        ) from e
    return ns


@dataclass
class RunResult:
    """Outcome of one simulator run"""
    stop_time: float
    wall_seconds: float
    flows: List[str]
    trace_file: Optional[str] = None


class Ns3Runner:
    """
    Drives ns-3 from a scenario description.

    Workflow: build() → enable_tracing() → run()
    """

    def __init__(self, description: ScenarioDescription, config, logger=None, ns=None):
        """
        Initialize runner.

        Args:
            description: Scenario description from ScenarioBuilder
            config: ScenarioConfig the description was built from
            logger: Optional ScenarioLogger
            ns: ns-3 bindings namespace (imported when omitted)
        """
        self.description = description
        self.config = config
        self.logger = logger
        self.ns = ns if ns is not None else import_ns3()

        self.built = False
        self.trace_file = None
        self.containers = {}
        self.devices = {}
        self.interfaces = {}
        self.helpers = {}
        self.applications = []
        self._node_objects = {}

    def _log(self, msg: str, level: str = "info"):
        """Helper to log messages"""
        if self.logger:
            if level in ("network", "wifi", "flow", "trace"):
                getattr(self.logger, f"{level}_event")(msg)
            else:
                getattr(self.logger, level)(msg)
        else:
            print(f"[NS3] {msg}")

    def build(self):
        """
        Issue the ns-3 calls that create the scenario.

        Returns:
            self
        """
        self._enable_application_logging()
        self._build_point_to_point()
        self._build_lan()
        self._build_wifi()
        self._install_mobility()
        self._install_internet()
        self._assign_addresses()
        self._install_flows()

        self.ns.Ipv4GlobalRoutingHelper.PopulateRoutingTables()
        self._log("Global routing tables populated", "network")

        self.built = True
        return self

    def _enable_application_logging(self):
        level = get_ns3_log_level(self.ns, self.config.run.verbose)
        if level is None:
            return
        self.ns.LogComponentEnable(Ns3LogComponent.ECHO_CLIENT, level)
        self.ns.LogComponentEnable(Ns3LogComponent.ECHO_SERVER, level)
        self._log("Echo application logging enabled", "debug")

    def _build_point_to_point(self):
        ns = self.ns
        attributes = self.description.segment(SegmentKind.P2P).attributes

        p2p_nodes = ns.NodeContainer()
        p2p_nodes.Create(2)

        p2p = ns.PointToPointHelper()
        p2p.SetDeviceAttribute("DataRate", ns.StringValue(attributes['data_rate']))
        p2p.SetChannelAttribute("Delay", ns.StringValue(attributes['delay']))

        self.containers[EndpointKind.P2P] = p2p_nodes
        self.helpers[SegmentKind.P2P] = p2p
        self.devices[SegmentKind.P2P] = p2p.Install(p2p_nodes)

        for idx, name in enumerate(self.description.groups[EndpointKind.P2P]):
            self._node_objects[name] = p2p_nodes.Get(idx)

        self._log(
            f"Point-to-point link: {attributes['data_rate']}, {attributes['delay']}",
            "network"
        )

    def _build_lan(self):
        ns = self.ns
        attributes = self.description.segment(SegmentKind.LAN).attributes
        lan_group = self.description.groups[EndpointKind.LAN]

        csma_nodes = ns.NodeContainer()
        csma_nodes.Add(self.containers[EndpointKind.P2P].Get(1))
        csma_nodes.Create(len(lan_group) - 1)

        csma = ns.CsmaHelper()
        csma.SetChannelAttribute("DataRate", ns.StringValue(attributes['data_rate']))
        csma.SetChannelAttribute("Delay", ns.TimeValue(ns.NanoSeconds(attributes['delay_ns'])))

        self.containers[EndpointKind.LAN] = csma_nodes
        self.helpers[SegmentKind.LAN] = csma
        self.devices[SegmentKind.LAN] = csma.Install(csma_nodes)

        for idx, name in enumerate(lan_group):
            self._node_objects.setdefault(name, csma_nodes.Get(idx))

        self._log(
            f"LAN: {len(lan_group)} nodes, {attributes['data_rate']}, {attributes['delay_ns']}ns",
            "network"
        )

    def _build_wifi(self):
        ns = self.ns
        stations = self.description.groups[EndpointKind.WIFI_STA]

        sta_nodes = ns.NodeContainer()
        sta_nodes.Create(len(stations))

        ap_node = ns.NodeContainer()
        ap_node.Add(self.containers[EndpointKind.P2P].Get(0))

        channel = ns.YansWifiChannelHelper.Default()
        phy = ns.YansWifiPhyHelper()
        phy.SetChannel(channel.Create())

        wifi = ns.WifiHelper()
        wifi.SetRemoteStationManager(Ns3TypeId.AARF_MANAGER)

        mac = ns.WifiMacHelper()
        ssid = ns.Ssid(self.description.wifi['ssid'])
        mac.SetType(Ns3TypeId.STA_MAC,
                    "Ssid", ns.SsidValue(ssid),
                    "ActiveProbing", ns.BooleanValue(bool(self.description.wifi['active_probing'])))
        sta_devices = wifi.Install(phy, mac, sta_nodes)

        mac.SetType(Ns3TypeId.AP_MAC,
                    "Ssid", ns.SsidValue(ssid))
        ap_devices = wifi.Install(phy, mac, ap_node)

        self.containers[EndpointKind.WIFI_STA] = sta_nodes
        self.containers[EndpointKind.WIFI_AP] = ap_node
        self.devices['wifi_sta'] = sta_devices
        self.devices['wifi_ap'] = ap_devices
        self.helpers[SegmentKind.WIFI] = wifi

        for idx, name in enumerate(stations):
            self._node_objects[name] = sta_nodes.Get(idx)

        self._log(
            f"WiFi: SSID {self.description.wifi['ssid']}, {len(stations)} stations + AP",
            "wifi"
        )

    def _install_mobility(self):
        ns = self.ns
        grid = self.config.wifi.mobility

        mobility = ns.MobilityHelper()
        mobility.SetPositionAllocator(Ns3TypeId.GRID_ALLOCATOR,
                                      "MinX", ns.DoubleValue(grid.min_x),
                                      "MinY", ns.DoubleValue(grid.min_y),
                                      "DeltaX", ns.DoubleValue(grid.delta_x),
                                      "DeltaY", ns.DoubleValue(grid.delta_y),
                                      "GridWidth", ns.UintegerValue(grid.grid_width),
                                      "LayoutType", ns.StringValue(grid.layout))
        mobility.SetMobilityModel(Ns3TypeId.CONSTANT_POSITION)

        # AP first so it takes grid slot 0
        mobility.Install(self.containers[EndpointKind.WIFI_AP])
        mobility.Install(self.containers[EndpointKind.WIFI_STA])

    def _install_internet(self):
        stack = self.ns.InternetStackHelper()
        stack.Install(self.containers[EndpointKind.LAN])
        stack.Install(self.containers[EndpointKind.WIFI_AP])
        stack.Install(self.containers[EndpointKind.WIFI_STA])

    def _set_base(self, address, network):
        ns = self.ns
        address.SetBase(ns.Ipv4Address(str(network.network_address)),
                        ns.Ipv4Mask(str(network.netmask)))

    def _assign_addresses(self):
        address = self.ns.Ipv4AddressHelper()

        p2p_net = self.description.segment(SegmentKind.P2P).network
        self._set_base(address, p2p_net)
        self.interfaces[SegmentKind.P2P] = address.Assign(self.devices[SegmentKind.P2P])

        lan_net = self.description.segment(SegmentKind.LAN).network
        self._set_base(address, lan_net)
        self.interfaces[SegmentKind.LAN] = address.Assign(self.devices[SegmentKind.LAN])

        # Stations then AP from one base: the AP follows the last station
        wifi_net = self.description.segment(SegmentKind.WIFI).network
        self._set_base(address, wifi_net)
        self.interfaces['wifi_sta'] = address.Assign(self.devices['wifi_sta'])
        self.interfaces['wifi_ap'] = address.Assign(self.devices['wifi_ap'])

        self._log(f"Addresses assigned: {p2p_net}, {lan_net}, {wifi_net}", "network")

    def _install_flows(self):
        ns = self.ns

        for flow in self.description.flows:
            server = ns.UdpEchoServerHelper(flow.port)
            server_apps = server.Install(self._node_objects[flow.server])
            server_apps.Start(ns.Seconds(flow.start))
            server_apps.Stop(ns.Seconds(flow.stop))

            remote = ns.InetSocketAddress(ns.Ipv4Address(str(flow.server_address)), flow.port)
            client = ns.UdpEchoClientHelper(remote.ConvertTo())
            client.SetAttribute("MaxPackets", ns.UintegerValue(flow.max_packets))
            client.SetAttribute("Interval", ns.TimeValue(ns.Seconds(flow.interval)))
            client.SetAttribute("PacketSize", ns.UintegerValue(flow.packet_size))

            client_apps = client.Install(self._node_objects[flow.client])
            client_apps.Start(ns.Seconds(flow.start))
            client_apps.Stop(ns.Seconds(flow.stop))

            self.applications.append((flow.name, server_apps, client_apps))
            self._log(
                f"{flow.name}: {flow.client} -> {flow.server} "
                f"({flow.server_address}:{flow.port}), {flow.packet_size}B every {flow.interval}s, "
                f"[{flow.start}s, {flow.stop}s]",
                "flow"
            )

    def enable_tracing(self) -> Optional[str]:
        """
        Enable packet tracing on the LAN devices.

        Returns:
            Trace file path (ascii) or pcap prefix, None when tracing is off
        """
        if not self.built:
            raise RuntimeError("Scenario not built. Call build() first.")

        run = self.description.run
        if not run['tracing']:
            return None

        path = run['trace_file']
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        csma = self.helpers[SegmentKind.LAN]
        if run['trace_format'] == TraceFormat.PCAP:
            prefix = os.path.splitext(path)[0]
            csma.EnablePcapAll(prefix)
            self.trace_file = prefix
        else:
            ascii_helper = self.ns.AsciiTraceHelper()
            csma.EnableAsciiAll(ascii_helper.CreateFileStream(path))
            self.trace_file = path

        self._log(f"{run['trace_format']} tracing on LAN devices: {self.trace_file}", "trace")
        return self.trace_file

    def run(self) -> RunResult:
        """
        Run the simulation until the stop time and tear it down.

        Returns:
            RunResult
        """
        if not self.built:
            raise RuntimeError("Scenario not built. Call build() first.")

        ns = self.ns
        stop_time = self.description.run['stop_time']

        ns.Simulator.Stop(ns.Seconds(stop_time))

        self._log(f"Running simulation for {stop_time} simulated seconds")
        started = time.time()
        try:
            ns.Simulator.Run()
        finally:
            ns.Simulator.Destroy()
        elapsed = time.time() - started
        self._log(f"Simulation finished in {elapsed:.2f}s wall-clock")

        return RunResult(
            stop_time=stop_time,
            wall_seconds=elapsed,
            flows=[flow.name for flow in self.description.flows],
            trace_file=self.trace_file
        )


def run_scenario(description: ScenarioDescription, config, logger=None, ns=None) -> RunResult:
    """
    Complete workflow: build → trace → run.

    Args:
        description: Scenario description
        config: ScenarioConfig
        logger: Optional ScenarioLogger
        ns: Optional ns-3 bindings namespace

    Returns:
        RunResult
    """
    runner = Ns3Runner(description, config, logger, ns=ns)
    runner.build()
    runner.enable_tracing()
    return runner.run()
