#!/usr/bin/env python3
"""
ASCII Trace Analysis

Parses the ns-3 ASCII trace written for the LAN devices and computes
packet counts, per-node, per-device and per-flow totals, drops and inter-arrival
statistics.

Trace line layout:
    r 1.00822 /NodeList/1/DeviceList/1/$ns3::CsmaNetDevice/MacRx
      ns3::EthernetHeader (...) ns3::Ipv4Header (... protocol 17 ...
      length: 1052 10.1.3.1 > 10.1.2.3) ns3::UdpHeader (length: 1032
      49153 > 9) Payload (size=1024) ns3::EthernetTrailer (fcs=0)
"""

import os
import re
from collections import defaultdict
from dataclasses import dataclass
from statistics import mean, stdev
from typing import Iterable, List, Optional, Union

import numpy as np

from ..config.naming import get_node_name
from ..utils.constants import EchoDefaults, IPProtocol, TraceEventType

_HEAD_RE = re.compile(r'^([+\-drt]) (\d+(?:\.\d+)?(?:[eE][+-]?\d+)?) (\S+)')
_CONTEXT_RE = re.compile(r'^/NodeList/(\d+)/DeviceList/(\d+)/\$?([\w:]+)/(\S+)')
_IPV4_RE = re.compile(
    r'ns3::Ipv4Header \(.*?protocol (\d+) .*?length: (\d+) '
    r'(\d+\.\d+\.\d+\.\d+) > (\d+\.\d+\.\d+\.\d+)\)'
)
_UDP_RE = re.compile(r'ns3::UdpHeader \(length: (\d+) (\d+) > (\d+)\)')
_PAYLOAD_RE = re.compile(r'Payload \(size=(\d+)\)')


@dataclass
class TraceEvent:
    """One line of the ASCII trace"""
    event: str
    time: float
    node: int
    device: int
    device_type: str
    source: str
    protocol: Optional[int] = None
    src: Optional[str] = None
    dst: Optional[str] = None
    src_port: Optional[int] = None
    dst_port: Optional[int] = None
    ip_length: Optional[int] = None
    payload_size: Optional[int] = None
    arp: bool = False

    @property
    def event_name(self) -> str:
        return TraceEventType.NAMES[self.event]

    @property
    def is_udp(self) -> bool:
        return self.protocol == IPProtocol.UDP and self.dst_port is not None


def parse_trace_line(line: str) -> Optional[TraceEvent]:
    """
    Parse a single ASCII trace line.

    Args:
        line: Raw trace line

    Returns:
        TraceEvent, or None for blank or unrecognised lines
    """
    head = _HEAD_RE.match(line.strip())
    if not head:
        return None

    event_code, time_str, context = head.groups()
    ctx = _CONTEXT_RE.match(context)
    if not ctx:
        return None

    node, device, device_type, source = ctx.groups()
    event = TraceEvent(
        event=event_code,
        time=float(time_str),
        node=int(node),
        device=int(device),
        device_type=device_type,
        source=source,
        arp='ns3::ArpHeader' in line
    )

    ipv4 = _IPV4_RE.search(line)
    if ipv4:
        event.protocol = int(ipv4.group(1))
        event.ip_length = int(ipv4.group(2))
        event.src = ipv4.group(3)
        event.dst = ipv4.group(4)

    udp = _UDP_RE.search(line)
    if udp:
        event.src_port = int(udp.group(2))
        event.dst_port = int(udp.group(3))

    payload = _PAYLOAD_RE.search(line)
    if payload:
        event.payload_size = int(payload.group(1))

    return event


def parse_trace_file(trace_file: str) -> List[TraceEvent]:
    """
    Parse an ASCII trace file.

    Args:
        trace_file: Path to the .tr file

    Returns:
        list: TraceEvent per recognised line, in file order

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not os.path.exists(trace_file):
        raise FileNotFoundError(f"Trace file not found: {trace_file}")

    events = []
    with open(trace_file, 'r') as f:
        for line in f:
            event = parse_trace_line(line)
            if event is not None:
                events.append(event)
    return events


def calculate_interarrival_stats(times):
    """
    Calculate inter-arrival statistics.

    Args:
        times: Sorted arrival times in seconds

    Returns:
        dict: Statistics in milliseconds (avg, min, max, std, jitter)
    """
    if len(times) < 2:
        return {'avg': 0, 'min': 0, 'max': 0, 'std': 0, 'jitter': 0}

    gaps = np.diff(np.asarray(times, dtype=float)) * 1000.0
    gaps = [float(g) for g in gaps if np.isfinite(g)]

    jitter_values = [abs(gaps[i] - gaps[i - 1]) for i in range(1, len(gaps))]

    return {
        'avg': mean(gaps),
        'min': min(gaps),
        'max': max(gaps),
        'std': stdev(gaps) if len(gaps) > 1 else 0,
        'jitter': mean(jitter_values) if jitter_values else 0
    }


def calculate_packet_loss(sent, received):
    """
    Calculate packet loss statistics.

    Args:
        sent: Number of packets put on the wire
        received: Number of packets received

    Returns:
        dict: {'lost': count, 'rate': percentage}
    """
    lost = max(sent - received, 0)
    rate = (lost / sent * 100) if sent > 0 else 0

    return {
        'lost': lost,
        'rate': rate
    }


def generate_summary(source: Union[str, Iterable[TraceEvent]], echo_port: int = EchoDefaults.PORT,
                     description=None):
    """
    Generate complete summary from a trace.

    Args:
        source: Trace file path or parsed events
        echo_port: UDP port of the echo servers
        description: Optional ScenarioDescription to name endpoints

    Returns:
        dict: Complete summary statistics
    """
    events = parse_trace_file(source) if isinstance(source, str) else list(source)

    address_names = {}
    device_map = {}
    if description is not None:
        device_map = description.device_map()
        for segment in description.segments.values():
            for iface in segment.interfaces:
                address_names[str(iface.address.ip)] = iface.node

    counts = defaultdict(int)
    nodes = defaultdict(lambda: {'received': 0, 'sent': 0, 'dropped': 0, 'rx_bytes': 0})
    devices = defaultdict(lambda: {'received': 0, 'sent': 0, 'dropped': 0, 'rx_bytes': 0})
    flows = defaultdict(lambda: {'sent': 0, 'received': 0, 'dropped': 0, 'bytes': 0, 'arrivals': []})
    arp_packets = 0

    for ev in events:
        name = ev.event_name
        counts[name] += 1

        for stats in (nodes[ev.node], devices[(ev.node, ev.device)]):
            if ev.event == TraceEventType.RECEIVE:
                stats['received'] += 1
                stats['rx_bytes'] += ev.payload_size or 0
            elif ev.event == TraceEventType.DEQUEUE:
                stats['sent'] += 1
            elif ev.event == TraceEventType.DROP:
                stats['dropped'] += 1

        if ev.arp and ev.event == TraceEventType.RECEIVE:
            arp_packets += 1

        if not ev.is_udp:
            continue

        key = (ev.src, ev.dst, ev.src_port, ev.dst_port)
        flow = flows[key]
        if ev.event == TraceEventType.DEQUEUE:
            flow['sent'] += 1
        elif ev.event == TraceEventType.DROP:
            flow['dropped'] += 1
        elif ev.event == TraceEventType.RECEIVE:
            flow['received'] += 1
            flow['bytes'] += ev.payload_size or 0
            flow['arrivals'].append(ev.time)

    times = [ev.time for ev in events]
    first_time = min(times) if times else 0.0
    last_time = max(times) if times else 0.0
    duration = last_time - first_time

    flow_rows = []
    udp_totals = {'requests': 0, 'replies': 0, 'sent': 0, 'received': 0, 'dropped': 0, 'bytes': 0}
    for (src, dst, sport, dport), data in sorted(flows.items()):
        if dport == echo_port:
            kind = 'request'
        elif sport == echo_port:
            kind = 'reply'
        else:
            kind = 'other'

        loss = calculate_packet_loss(data['sent'], data['received'])
        flow_rows.append({
            'src': src,
            'dst': dst,
            'src_node': address_names.get(src),
            'dst_node': address_names.get(dst),
            'src_port': sport,
            'dst_port': dport,
            'kind': kind,
            'sent': data['sent'],
            'received': data['received'],
            'dropped': data['dropped'],
            'bytes': data['bytes'],
            'lost': loss['lost'],
            'loss_rate': loss['rate'],
            'interarrival': calculate_interarrival_stats(sorted(data['arrivals']))
        })

        if kind == 'request':
            udp_totals['requests'] += data['received']
        elif kind == 'reply':
            udp_totals['replies'] += data['received']
        udp_totals['sent'] += data['sent']
        udp_totals['received'] += data['received']
        udp_totals['dropped'] += data['dropped']
        udp_totals['bytes'] += data['bytes']

    node_rows = [
        {
            'node': node_id,
            'name': get_node_name(node_id),
            **stats
        }
        for node_id, stats in sorted(nodes.items())
    ]

    # Segment and address come from the description when one is given
    device_rows = []
    for (node_id, device), stats in sorted(devices.items()):
        iface = device_map.get((node_id, device))
        device_rows.append({
            'node': node_id,
            'device': device,
            'name': get_node_name(node_id),
            'segment': iface.segment if iface else None,
            'address': str(iface.address.ip) if iface else None,
            **stats
        })

    total_drops = counts.get('drop', 0)
    wire_packets = counts.get('dequeue', 0)

    return {
        'total_events': len(events),
        'events': {label: counts.get(label, 0) for label in TraceEventType.NAMES.values()},
        'first_time': first_time,
        'last_time': last_time,
        'duration': duration,
        'arp_packets': arp_packets,
        'drops': {
            'count': total_drops,
            'rate': (total_drops / (wire_packets + total_drops) * 100)
            if (wire_packets + total_drops) > 0 else 0
        },
        'udp': {
            **udp_totals,
            'throughput_bps': (udp_totals['bytes'] * 8 / duration) if duration > 0 else 0
        },
        'nodes': node_rows,
        'devices': device_rows,
        'flows': flow_rows
    }
