"""Network interface helpers.

This module checks bind addresses against the host's network interfaces
and lists the IPv4 addresses the server could listen on.

Example:
    if not is_local_address("192.168.1.100"):
        console.print("[red]Address not assigned to this host")
"""

import socket
from dataclasses import dataclass

import psutil

WILDCARD_ADDRESSES = ("", "0.0.0.0")


@dataclass
class NetworkInterface:
    """Network interface representation with its key properties.

    Attributes:
        name: Interface name (e.g., 'eth0', 'lo')
        ip: IPv4 address assigned to the interface
        is_up: Boolean indicating if the interface is up and running
    """

    name: str
    ip: str
    is_up: bool


def list_interfaces() -> list[NetworkInterface]:
    """Return every interface that has an IPv4 address."""
    stats = psutil.net_if_stats()
    interfaces = []
    for name, addrs in psutil.net_if_addrs().items():
        ipv4 = next((addr.address for addr in addrs if addr.family == socket.AF_INET), None)
        if not ipv4:
            continue
        iface_stats = stats.get(name)
        interfaces.append(NetworkInterface(name=name, ip=ipv4, is_up=bool(iface_stats and iface_stats.isup)))
    return interfaces


def is_local_address(host: str) -> bool:
    """Verify that ``host`` is a wildcard or is assigned to a local interface."""
    if host in WILDCARD_ADDRESSES:
        return True
    for addrs in psutil.net_if_addrs().values():
        for addr in addrs:
            if addr.family == socket.AF_INET and addr.address == host:
                return True
    return False
