"""WiFi stations and a CSMA LAN joined by a point-to-point link, driven on ns-3"""

__version__ = "1.0.0"

from .config import ScenarioConfig, load_config, default_config, apply_overrides
from .topology import ScenarioBuilder, ScenarioDescription, build_scenario, Ns3Runner

__all__ = [
    'ScenarioConfig',
    'load_config',
    'default_config',
    'apply_overrides',
    'ScenarioBuilder',
    'ScenarioDescription',
    'build_scenario',
    'Ns3Runner'
]
