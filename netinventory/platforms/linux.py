"""
Linux Platform

Enumerates network interfaces from sysfs. Everything the classifier needs
is exposed under /sys/class/net/<iface>/ and /proc/sys/net/ipv4/conf/.
"""

import os
from pathlib import Path
from typing import List, Optional

from .base import NetworkPlatform
from ..errors import EnumerationError
from ..models import AdapterDescriptor, InterfaceType, OperationalStatus


# ARPHRD_* values from <linux/if_arp.h>
ARPHRD_ETHER = 1
ARPHRD_INFINIBAND = 32
ARPHRD_PPP = 512
ARPHRD_TUNNEL = 768
ARPHRD_TUNNEL6 = 769
ARPHRD_LOOPBACK = 772
ARPHRD_SIT = 776
ARPHRD_IPGRE = 778
ARPHRD_IEEE80211 = 801
ARPHRD_IEEE80211_RADIOTAP = 803
ARPHRD_IP6GRE = 823
ARPHRD_NONE = 65534

TUNNEL_ARPHRDS = frozenset({
    ARPHRD_TUNNEL,
    ARPHRD_TUNNEL6,
    ARPHRD_SIT,
    ARPHRD_IPGRE,
    ARPHRD_IP6GRE,
})


class LinuxPlatform(NetworkPlatform):
    """Linux-specific network enumeration via sysfs"""

    SYS_CLASS_NET = Path("/sys/class/net")
    PROC_IPV4_CONF = Path("/proc/sys/net/ipv4/conf")

    def __init__(
        self,
        sys_root: Optional[Path] = None,
        ipv4_conf_root: Optional[Path] = None,
    ):
        self.sys_root = Path(sys_root) if sys_root else self.SYS_CLASS_NET
        self.ipv4_conf_root = Path(ipv4_conf_root) if ipv4_conf_root else self.PROC_IPV4_CONF

    @property
    def os_name(self) -> str:
        return "linux"

    def list_adapters(self) -> List[AdapterDescriptor]:
        """List network interfaces from sysfs"""
        if not self.sys_root.is_dir():
            raise EnumerationError(f"{self.sys_root} is not available (sysfs not mounted?)")
        try:
            names = sorted(entry.name for entry in self.sys_root.iterdir())
        except OSError as e:
            raise self.wrap_os_error(e, f"Could not list {self.sys_root}")

        adapters = []
        for name in names:
            try:
                adapters.append(self._read_adapter(name))
            except OSError as e:
                # FileNotFoundError here means the interface went away mid-scan
                raise self.wrap_os_error(e, f"Could not read interface {name}")
        return adapters

    def _read_adapter(self, name: str) -> AdapterDescriptor:
        iface = self.sys_root / name
        ifindex = self.parse_int(self._read(iface / "ifindex"))
        if ifindex is None:
            raise FileNotFoundError(f"{iface / 'ifindex'} is missing")

        type_code = self.parse_int(self._read(iface / "type", optional=True))
        speed = self.parse_int(self._read(iface / "speed", optional=True))

        return AdapterDescriptor(
            identifier=str(ifindex),
            name=name,
            description=self._describe(iface),
            interface_type=self._interface_type(iface, type_code),
            status=OperationalStatus.parse(self._read(iface / "operstate", optional=True)),
            ipv4_index=ifindex if (self.ipv4_conf_root / name).is_dir() else None,
            type_code=type_code,
            mac_address=self._read(iface / "address", optional=True) or None,
            speed_mbps=speed if speed is not None and speed > 0 else None,
        )

    def _interface_type(self, iface: Path, type_code: Optional[int]) -> InterfaceType:
        """Map ARPHRD type plus sysfs markers onto InterfaceType"""
        if (iface / "tun_flags").exists():
            return InterfaceType.PROPRIETARY_VIRTUAL  # TUN or TAP device
        if type_code == ARPHRD_LOOPBACK:
            return InterfaceType.LOOPBACK
        if type_code == ARPHRD_ETHER:
            if (iface / "wireless").exists() or (iface / "phy80211").exists():
                return InterfaceType.WIRELESS
            return InterfaceType.ETHERNET
        if type_code in (ARPHRD_IEEE80211, ARPHRD_IEEE80211_RADIOTAP):
            return InterfaceType.WIRELESS
        if type_code in TUNNEL_ARPHRDS or type_code == ARPHRD_NONE:
            return InterfaceType.TUNNEL  # wireguard and other L3 tunnels report NONE
        if type_code == ARPHRD_PPP:
            return InterfaceType.PPP
        if type_code is None:
            return InterfaceType.UNKNOWN
        return InterfaceType.OTHER

    def _describe(self, iface: Path) -> Optional[str]:
        """Driver name for hardware-backed interfaces, DEVTYPE otherwise"""
        driver = iface / "device" / "driver"
        if driver.exists():
            return os.path.basename(os.path.realpath(driver))

        uevent = self._read(iface / "uevent", optional=True) or ""
        for line in uevent.splitlines():
            key, _, value = line.partition("=")
            if key == "DEVTYPE" and value:
                return value
        return None

    @staticmethod
    def _read(path: Path, optional: bool = False) -> Optional[str]:
        """Read a sysfs attribute; optional attributes may be absent or unreadable"""
        try:
            return path.read_text().strip()
        except OSError:
            if optional:
                return None
            raise
