#!/usr/bin/env python3
"""
Default Configuration Values

These are DEFAULT values that the YAML file and the command line can override.
"""

# =============================================================================
# TOPOLOGY DEFAULTS
# =============================================================================

DEFAULT_N_CSMA = 6              # "extra" LAN nodes besides the gateway
DEFAULT_N_WIFI = 4              # wireless stations

# =============================================================================
# LINK DEFAULTS
# =============================================================================

P2P_DATA_RATE = "10Mbps"
P2P_DELAY = "2ms"

LAN_DATA_RATE = "10Mbps"
LAN_DELAY_NS = 10000            # 10 us

# =============================================================================
# WIFI DEFAULTS
# =============================================================================

WIFI_SSID = "ns-3-ssid"
WIFI_ACTIVE_PROBING = False

MOBILITY_MIN_X = 0.0
MOBILITY_MIN_Y = 0.0
MOBILITY_DELTA_X = 5.0
MOBILITY_DELTA_Y = 5.0
MOBILITY_GRID_WIDTH = 3
MOBILITY_LAYOUT = "RowFirst"

# =============================================================================
# ADDRESS PLAN
# =============================================================================

P2P_SUBNET = "10.1.1.0/24"
LAN_SUBNET = "10.1.2.0/24"
WIFI_SUBNET = "10.1.3.0/24"

# =============================================================================
# TRAFFIC DEFAULTS
# =============================================================================

ECHO_PORT = 9
ECHO_MAX_PACKETS = 1000
ECHO_INTERVAL = 2.0             # seconds
ECHO_PACKET_SIZE = 1024         # bytes
ECHO_START = 1.0                # seconds
ECHO_STOP = 2.0                 # seconds

# (name, server endpoint, client endpoint); endpoints are (kind, index)
ECHO_FLOWS = [
    ("echo-1", ("lan", 2), ("lan", 1)),
    ("echo-2", ("lan", 3), ("wifi_sta", 0)),
    ("echo-3", ("lan", 4), ("wifi_sta", 1)),
    ("echo-4", ("lan", 5), ("wifi_sta", 2)),
    ("echo-5", ("lan", 6), ("wifi_sta", 3)),
]

# =============================================================================
# RUN DEFAULTS
# =============================================================================

STOP_TIME = 2.0                 # seconds of simulated time
TRACING = True
VERBOSE = True
TRACE_FORMAT = "ascii"
TRACE_FILE = "results1.tr"

# =============================================================================
# PATHS / LOGGING
# =============================================================================

RESULTS_DIR = "results"
LOG_DIR = "logs"
LOG_LEVEL = "INFO"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
