#!/usr/bin/env python3
"""
Constants for the WiFi / CSMA / point-to-point scenario

All magic numbers and ns-3 type names are defined here with clear names.
"""


class SegmentKind:
    """Network segments of the scenario"""
    P2P = "p2p"
    LAN = "lan"
    WIFI = "wifi"


class EndpointKind:
    """Node groups a traffic flow endpoint can refer to"""
    P2P = "p2p"            # point-to-point pair (0 = AP, 1 = LAN gateway)
    LAN = "lan"            # LAN container (0 = gateway, 1.. = extra nodes)
    WIFI_STA = "wifi_sta"  # wireless stations
    WIFI_AP = "wifi_ap"    # the access point (index 0 only)

    ALL = (P2P, LAN, WIFI_STA, WIFI_AP)


class NodeRole:
    """Role of each node in the topology"""
    ACCESS_POINT = "access_point"
    GATEWAY = "lan_gateway"
    LAN_HOST = "lan_host"
    STATION = "station"


class Ns3TypeId:
    """ns-3 TypeId strings used when configuring helpers"""
    AARF_MANAGER = "ns3::AarfWifiManager"
    STA_MAC = "ns3::StaWifiMac"
    AP_MAC = "ns3::ApWifiMac"
    GRID_ALLOCATOR = "ns3::GridPositionAllocator"
    CONSTANT_POSITION = "ns3::ConstantPositionMobilityModel"


class Ns3LogComponent:
    """ns-3 log components toggled by the verbose flag"""
    ECHO_CLIENT = "UdpEchoClientApplication"
    ECHO_SERVER = "UdpEchoServerApplication"


class TraceEventType:
    """ns-3 ASCII trace event codes"""
    ENQUEUE = "+"
    DEQUEUE = "-"
    DROP = "d"
    RECEIVE = "r"
    TRANSMIT = "t"

    NAMES = {
        "+": "enqueue",
        "-": "dequeue",
        "d": "drop",
        "r": "receive",
        "t": "transmit",
    }


class TraceFormat:
    """Supported packet trace formats"""
    ASCII = "ascii"
    PCAP = "pcap"

    ALL = (ASCII, PCAP)


class IPProtocol:
    """IP protocol numbers"""
    ICMP = 1
    TCP = 6
    UDP = 17


class EchoDefaults:
    """UDP echo application defaults"""
    PORT = 9
    MAX_PACKETS = 1000
    INTERVAL = 2.0       # seconds
    PACKET_SIZE = 1024   # bytes


class ValidationLimits:
    """Validation thresholds"""
    MIN_PORT = 1
    MAX_PORT = 65535
    MIN_PACKET_SIZE = 1
    MAX_UDP_PAYLOAD = 65507
