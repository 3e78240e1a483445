"""Utilities for the WiFi / CSMA scenario"""

from .constants import (
    SegmentKind,
    EndpointKind,
    NodeRole,
    Ns3TypeId,
    Ns3LogComponent,
    TraceEventType,
    TraceFormat,
    IPProtocol,
    EchoDefaults,
    ValidationLimits
)
from .logger import ScenarioLogger, get_ns3_log_level

__all__ = [
    'SegmentKind',
    'EndpointKind',
    'NodeRole',
    'Ns3TypeId',
    'Ns3LogComponent',
    'TraceEventType',
    'TraceFormat',
    'IPProtocol',
    'EchoDefaults',
    'ValidationLimits',
    'ScenarioLogger',
    'get_ns3_log_level'
]
