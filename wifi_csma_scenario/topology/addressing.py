#!/usr/bin/env python3
"""
Sequential IPv4 address pools

One pool per segment. Addresses are handed out in order from the first
host address, the way the simulator's address helper assigns a device
container: a later assign() on the same pool continues where the previous
one stopped.
"""

import ipaddress
from typing import Iterable, List, Union


class AddressPoolExhausted(ValueError):
    """Raised when a pool has no address left for a device"""


def usable_hosts(network: ipaddress.IPv4Network) -> int:
    """
    Number of devices a fresh AddressPool on this network can address.

    Assignment starts at host offset 1, like the simulator's address
    helper, so a /31 holds one device and a /32 none.
    """
    return AddressPool(network).capacity


def subnets_overlap(networks: Iterable[ipaddress.IPv4Network]) -> bool:
    """Check whether any two networks share an address"""
    networks = list(networks)
    for i, first in enumerate(networks):
        for second in networks[i + 1:]:
            if first.overlaps(second):
                return True
    return False


class AddressPool:
    """Sequential address assignment inside one network"""

    def __init__(self, network: Union[str, ipaddress.IPv4Network], first_host: int = 1):
        """
        Args:
            network: Network in CIDR form, e.g. '10.1.2.0/24'
            first_host: Host offset of the first address handed out
        """
        self.network = ipaddress.IPv4Network(network)
        if first_host < 0:
            raise ValueError("first_host must not be negative")
        self.first_host = first_host
        self._next = first_host

    @property
    def capacity(self) -> int:
        return max(0, self._last_host() - self.first_host + 1)

    @property
    def remaining(self) -> int:
        return self.capacity - (self._next - self.first_host)

    def _last_host(self) -> int:
        if self.network.prefixlen >= self.network.max_prefixlen - 1:
            return self.network.num_addresses - 1
        return self.network.num_addresses - 2

    def assign(self, count: int) -> List[ipaddress.IPv4Interface]:
        """
        Assign the next `count` addresses.

        Args:
            count: Number of devices

        Returns:
            list: IPv4Interface per device, in device order

        Raises:
            AddressPoolExhausted: If the pool cannot hold `count` more devices
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        if count > self.remaining:
            raise AddressPoolExhausted(
                f"{self.network}: {count} addresses requested, {self.remaining} left"
            )

        base = int(self.network.network_address)
        prefix = self.network.prefixlen
        interfaces = [
            ipaddress.IPv4Interface((base + offset, prefix))
            for offset in range(self._next, self._next + count)
        ]
        self._next += count
        return interfaces

    def reset(self):
        """Start handing out addresses from the first host again"""
        self._next = self.first_host

    def __repr__(self):
        return f"AddressPool({str(self.network)!r}, next={self._next})"
