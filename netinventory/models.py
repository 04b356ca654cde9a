"""
Adapter data model.

An AdapterDescriptor is the OS's view of one network interface at the
moment of enumeration. Descriptors are immutable; identity is the
OS-assigned identifier, never the name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InterfaceType(Enum):
    """Interface type tag, modelled on the IANA ifType registry"""
    ETHERNET = "ethernet"
    WIRELESS = "wireless"
    LOOPBACK = "loopback"
    TUNNEL = "tunnel"
    PPP = "ppp"
    PROPRIETARY_VIRTUAL = "proprietary_virtual"  # ifType 53, TAP/TUN VPN drivers
    OTHER = "other"
    UNKNOWN = "unknown"

    @classmethod
    def from_iana(cls, code: Optional[int]) -> "InterfaceType":
        """Map a raw IANA ifType code to an InterfaceType"""
        if code is None:
            return cls.UNKNOWN
        return _IANA_TYPES.get(code, cls.OTHER)


_IANA_TYPES = {
    1: InterfaceType.UNKNOWN,      # other
    6: InterfaceType.ETHERNET,     # ethernetCsmacd
    23: InterfaceType.PPP,
    24: InterfaceType.LOOPBACK,    # softwareLoopback
    53: InterfaceType.PROPRIETARY_VIRTUAL,
    71: InterfaceType.WIRELESS,    # ieee80211
    131: InterfaceType.TUNNEL,
}


class OperationalStatus(Enum):
    """RFC 2863 operational states"""
    UP = "up"
    DOWN = "down"
    TESTING = "testing"
    UNKNOWN = "unknown"
    DORMANT = "dormant"
    NOT_PRESENT = "not_present"
    LOWER_LAYER_DOWN = "lower_layer_down"

    @classmethod
    def parse(cls, text: Optional[str]) -> "OperationalStatus":
        """
        Parse an OS status string.

        Accepts Linux operstate values ("up", "lowerlayerdown", ...) and
        Windows Get-NetAdapter status values ("Up", "Disconnected", ...).
        """
        if not text:
            return cls.UNKNOWN
        key = text.strip().lower().replace(" ", "").replace("_", "")
        return _STATUS_ALIASES.get(key, cls.UNKNOWN)

    def __str__(self) -> str:
        return self.name.replace("_", " ").title().replace(" ", "")


_STATUS_ALIASES = {
    "up": OperationalStatus.UP,
    "down": OperationalStatus.DOWN,
    "disconnected": OperationalStatus.DOWN,
    "disabled": OperationalStatus.DOWN,
    "testing": OperationalStatus.TESTING,
    "unknown": OperationalStatus.UNKNOWN,
    "dormant": OperationalStatus.DORMANT,
    "notpresent": OperationalStatus.NOT_PRESENT,
    "lowerlayerdown": OperationalStatus.LOWER_LAYER_DOWN,
}


@dataclass(frozen=True)
class AdapterDescriptor:
    """Network adapter as reported by the OS"""
    identifier: str
    name: str
    description: Optional[str]
    interface_type: InterfaceType
    status: OperationalStatus = OperationalStatus.UNKNOWN
    ipv4_index: Optional[int] = None  # None = no IPv4 binding (filter-layer adapter)
    type_code: Optional[int] = None
    mac_address: Optional[str] = None
    speed_mbps: Optional[int] = None

    @property
    def display_name(self) -> str:
        """Description when the OS provides one, otherwise the name"""
        return self.description or self.name
