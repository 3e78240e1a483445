#!/usr/bin/env python3
"""
Unit tests for the sequential address pools

Run with: python3 -m pytest tests/test_addressing.py
"""

import ipaddress

import pytest

from wifi_csma_scenario.topology.addressing import (
    AddressPool, AddressPoolExhausted, subnets_overlap, usable_hosts
)


def test_assign_is_sequential_from_first_host():
    """Devices get .1, .2, ... in order"""
    pool = AddressPool("10.1.3.0/24")
    addresses = [str(i.ip) for i in pool.assign(4)]

    assert addresses == ["10.1.3.1", "10.1.3.2", "10.1.3.3", "10.1.3.4"]


def test_second_assign_continues_after_first():
    """The AP assigned after the stations follows the last station"""
    pool = AddressPool("10.1.3.0/24")
    pool.assign(4)
    ap = pool.assign(1)

    assert str(ap[0]) == "10.1.3.5/24"


def test_assign_zero_devices():
    pool = AddressPool("10.1.2.0/24")

    assert pool.assign(0) == []
    assert pool.remaining == 254


def test_capacity_of_slash_24():
    pool = AddressPool("10.1.1.0/24")

    assert pool.capacity == 254
    assert len(pool.assign(254)) == 254
    assert pool.remaining == 0


def test_exhausted_pool_raises():
    """Broadcast address is never handed out"""
    pool = AddressPool("10.1.2.0/24")
    pool.assign(250)

    with pytest.raises(AddressPoolExhausted):
        pool.assign(5)


def test_small_subnet_capacity():
    pool = AddressPool("192.168.0.0/30")

    assert pool.capacity == 2
    assert [str(i.ip) for i in pool.assign(2)] == ["192.168.0.1", "192.168.0.2"]


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        AddressPool("10.1.1.0/24").assign(-1)


def test_reset_starts_over():
    pool = AddressPool("10.1.1.0/24")
    first = pool.assign(2)
    pool.reset()

    assert pool.assign(2) == first


def test_usable_hosts():
    assert usable_hosts(ipaddress.IPv4Network("10.0.0.0/24")) == 254
    assert usable_hosts(ipaddress.IPv4Network("10.0.0.0/30")) == 2
    assert usable_hosts(ipaddress.IPv4Network("10.0.0.0/31")) == 1
    assert usable_hosts(ipaddress.IPv4Network("10.0.0.1/32")) == 0


@pytest.mark.parametrize("subnet", ["10.0.0.0/24", "10.0.0.0/30", "10.0.0.0/31", "10.0.0.1/32"])
def test_usable_hosts_matches_pool(subnet):
    """Validation and assignment agree on how many devices fit"""
    network = ipaddress.IPv4Network(subnet)
    pool = AddressPool(network)

    assert len(pool.assign(usable_hosts(network))) == usable_hosts(network)
    with pytest.raises(AddressPoolExhausted):
        pool.assign(1)


def test_subnets_overlap():
    disjoint = [ipaddress.IPv4Network(n) for n in ("10.1.1.0/24", "10.1.2.0/24", "10.1.3.0/24")]
    nested = [ipaddress.IPv4Network(n) for n in ("10.1.0.0/16", "10.1.2.0/24")]

    assert subnets_overlap(disjoint) is False
    assert subnets_overlap(nested) is True


if __name__ == '__main__':
    pytest.main([__file__])
