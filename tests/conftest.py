#!/usr/bin/env python3
"""Shared fixtures for the scenario tests"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wifi_csma_scenario.config.config_loader import default_config


_ETH = "ns3::EthernetHeader ( length/type=0x800, source=00:00:00:00:00:02, destination=00:00:00:00:00:04)"
_IP_HDR = ("ns3::Ipv4Header (tos 0x0 DSCP Default ECN Not-ECT ttl 63 id 0 protocol 17 "
           "offset (bytes) 0 flags [none] length: 1052 {src} > {dst})")
_UDP_HDR = "ns3::UdpHeader (length: 1032 {sport} > {dport})"
_TAIL = "Payload (size=1024) ns3::EthernetTrailer (fcs=0)"
_CSMA = "/NodeList/{node}/DeviceList/{dev}/$ns3::CsmaNetDevice/{source}"


def udp_line(event, time, node, dev, source, src, dst, sport, dport):
    """Build one UDP trace line the way ns-3 writes it"""
    return " ".join([
        event,
        str(time),
        _CSMA.format(node=node, dev=dev, source=source),
        _ETH,
        _IP_HDR.format(src=src, dst=dst),
        _UDP_HDR.format(sport=sport, dport=dport),
        _TAIL,
    ])


ARP_LINE = (
    "r 1.002 /NodeList/1/DeviceList/1/$ns3::CsmaNetDevice/MacRx "
    "ns3::EthernetHeader ( length/type=0x806, source=00:00:00:00:00:04, destination=ff:ff:ff:ff:ff:ff) "
    "ns3::ArpHeader (request source mac: 00-06-00:00:00:00:00:04 source ipv4: 10.1.2.4 dest ipv4: 10.1.2.1) "
    "Payload (size=18) ns3::EthernetTrailer (fcs=0)"
)

SAMPLE_TRACE_LINES = [
    ARP_LINE,
    udp_line("+", 1.00315, 1, 1, "TxQueue/Enqueue", "10.1.3.1", "10.1.2.4", 49153, 9),
    udp_line("-", 1.00315, 1, 1, "TxQueue/Dequeue", "10.1.3.1", "10.1.2.4", 49153, 9),
    udp_line("r", 1.00402, 4, 0, "MacRx", "10.1.3.1", "10.1.2.4", 49153, 9),
    udp_line("+", 1.00402, 4, 0, "TxQueue/Enqueue", "10.1.2.4", "10.1.3.1", 9, 49153),
    udp_line("-", 1.00402, 4, 0, "TxQueue/Dequeue", "10.1.2.4", "10.1.3.1", 9, 49153),
    udp_line("r", 1.0049, 1, 1, "MacRx", "10.1.2.4", "10.1.3.1", 9, 49153),
    udp_line("d", 1.5, 2, 0, "MacTxDrop", "10.1.3.2", "10.1.2.5", 49153, 9),
    "",
    "not a trace line",
]


@pytest.fixture
def config():
    """Default scenario configuration"""
    return default_config()


@pytest.fixture
def sample_trace(tmp_path):
    """Small ASCII trace with one echo exchange, one ARP and one drop"""
    path = tmp_path / "results1.tr"
    path.write_text("\n".join(SAMPLE_TRACE_LINES) + "\n")
    return str(path)
