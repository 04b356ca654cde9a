"""
macOS Platform

Enumerates interfaces with psutil and names them with networksetup.
BSD interface names encode the interface kind (en, utun, gif, ...).
"""

import socket
from typing import Dict, List, Optional

import psutil

from .base import NetworkPlatform
from ..errors import EnumerationError
from ..models import AdapterDescriptor, InterfaceType, OperationalStatus


# First matching prefix wins
NAME_PREFIX_TYPES = (
    ("bridge", InterfaceType.ETHERNET),
    ("ipsec", InterfaceType.TUNNEL),
    ("utun", InterfaceType.TUNNEL),
    ("awdl", InterfaceType.WIRELESS),
    ("llw", InterfaceType.WIRELESS),
    ("gif", InterfaceType.TUNNEL),
    ("stf", InterfaceType.TUNNEL),
    ("ppp", InterfaceType.PPP),
    ("tap", InterfaceType.PROPRIETARY_VIRTUAL),
    ("tun", InterfaceType.PROPRIETARY_VIRTUAL),
    ("lo", InterfaceType.LOOPBACK),
    ("en", InterfaceType.ETHERNET),
)

WIRELESS_PORTS = ("wi-fi", "airport")


class MacOSPlatform(NetworkPlatform):
    """macOS-specific network enumeration"""

    @property
    def os_name(self) -> str:
        return "macos"

    def list_adapters(self) -> List[AdapterDescriptor]:
        """List network interfaces"""
        try:
            addrs = psutil.net_if_addrs()
            stats = psutil.net_if_stats()
        except OSError as e:
            raise self.wrap_os_error(e, "psutil could not enumerate interfaces")

        ports = self.get_hardware_ports()
        adapters = []
        for name in sorted(set(addrs) | set(stats)):
            try:
                ifindex = socket.if_nametoindex(name)
            except OSError as e:
                raise self.wrap_os_error(e, f"Could not resolve index of {name}")

            stat = stats.get(name)
            mac = None
            for addr in addrs.get(name, []):
                if addr.family == psutil.AF_LINK:
                    mac = addr.address

            description = ports.get(name)
            adapters.append(AdapterDescriptor(
                identifier=str(ifindex),
                name=name,
                description=description,
                interface_type=self._interface_type(name, description),
                status=self._status(stat),
                # No filter layer on macOS: every interface terminates the stack
                ipv4_index=ifindex,
                mac_address=mac,
                speed_mbps=stat.speed if stat and stat.speed else None,
            ))
        return adapters

    def get_hardware_ports(self) -> Dict[str, str]:
        """Map BSD device names to hardware port names (e.g. en0 -> Wi-Fi)"""
        try:
            result = self.run_command(["networksetup", "-listallhardwareports"], timeout=10)
        except EnumerationError:
            return {}
        if result.returncode != 0:
            return {}
        return parse_hardware_ports(result.stdout)

    @staticmethod
    def _interface_type(name: str, description: Optional[str]) -> InterfaceType:
        lowered = name.lower()
        for prefix, interface_type in NAME_PREFIX_TYPES:
            if lowered.startswith(prefix):
                if interface_type is InterfaceType.ETHERNET and description:
                    if any(port in description.lower() for port in WIRELESS_PORTS):
                        return InterfaceType.WIRELESS
                return interface_type
        return InterfaceType.UNKNOWN

    @staticmethod
    def _status(stat) -> OperationalStatus:
        if stat is None:
            return OperationalStatus.UNKNOWN
        return OperationalStatus.UP if stat.isup else OperationalStatus.DOWN


def parse_hardware_ports(output: str) -> Dict[str, str]:
    """Parse `networksetup -listallhardwareports` output"""
    ports: Dict[str, str] = {}
    port = None
    for line in output.splitlines():
        key, _, value = line.partition(":")
        key, value = key.strip(), value.strip()
        if key == "Hardware Port":
            port = value
        elif key == "Device" and port:
            ports[value] = port
            port = None
    return ports
