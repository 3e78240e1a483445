"""Topology modules: address plan, scenario description, ns-3 runner"""

from .addressing import AddressPool, AddressPoolExhausted, usable_hosts, subnets_overlap
from .scenario import (
    ScenarioBuilder,
    ScenarioDescription,
    UnresolvableEndpoint,
    build_scenario,
    resolve_endpoint
)
from .ns3_runner import Ns3Runner, RunResult, run_scenario

__all__ = [
    'AddressPool',
    'AddressPoolExhausted',
    'usable_hosts',
    'subnets_overlap',
    'ScenarioBuilder',
    'ScenarioDescription',
    'UnresolvableEndpoint',
    'build_scenario',
    'resolve_endpoint',
    'Ns3Runner',
    'RunResult',
    'run_scenario'
]
