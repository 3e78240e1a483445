#!/usr/bin/env python3
"""
Node Naming Functions

Standardized naming for nodes and devices across the scenario.
"""


def get_node_name(node_id):
    """
    Get the node name for a global node id.

    Node ids follow creation order, the same numbering the simulator uses
    for /NodeList/<id> in trace files.
    Format: n{id} → e.g., n0, n7

    Args:
        node_id: Global node id (0, 1, 2, ...)

    Returns:
        str: Node name
    """
    return f'n{node_id}'



def get_endpoint_label(kind, index):
    """
    Get a short label for a flow endpoint.

    Format: {kind}-{index} → e.g., lan-2, wifi_sta-0

    Args:
        kind: Endpoint kind ('p2p', 'lan', 'wifi_sta', 'wifi_ap')
        index: Index inside that node group

    Returns:
        str: Endpoint label
    """
    return f'{kind}-{index}'
