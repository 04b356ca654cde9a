"""
Windows Platform

Enumerates network adapters through PowerShell (NetAdapter / NetTCPIP
modules). Hidden adapters are included so NDIS filter adapters are seen
and can be classified.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Set

from .base import NetworkPlatform
from ..errors import EnumerationError, TransientEnumerationError
from ..models import AdapterDescriptor, InterfaceType, OperationalStatus

logger = logging.getLogger(__name__)


ENUMERATION_SCRIPT = (
    "$ErrorActionPreference = 'Stop'; "
    "$adapters = @(Get-NetAdapter -IncludeHidden | Select-Object "
    "InterfaceGuid, Name, InterfaceDescription, InterfaceType, Status, ifIndex, MacAddress, Speed); "
    "$ipv4 = @(Get-NetIPInterface -AddressFamily IPv4 -IncludeAllCompartments | Select-Object ifIndex); "
    "@{ adapters = $adapters; ipv4 = $ipv4 } | ConvertTo-Json -Depth 3 -Compress"
)

# Messages for ERROR_NO_DATA surfacing through the CIM layer
TRANSIENT_MARKERS = (
    "pipe is being closed",
    "0x800700e8",
)


class WindowsPlatform(NetworkPlatform):
    """Windows-specific network enumeration via PowerShell"""

    POWERSHELL = "powershell.exe"

    @property
    def os_name(self) -> str:
        return "windows"

    def list_adapters(self) -> List[AdapterDescriptor]:
        """List network adapters using Get-NetAdapter"""
        result = self.run_command([
            self.POWERSHELL, "-NoProfile", "-NonInteractive", "-Command", ENUMERATION_SCRIPT,
        ])

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if any(marker in stderr.lower() for marker in TRANSIENT_MARKERS):
                raise TransientEnumerationError(f"Get-NetAdapter failed transiently: {stderr}")
            raise EnumerationError(f"Get-NetAdapter failed ({result.returncode}): {stderr}")

        return self.parse_output(result.stdout)

    def parse_output(self, output: str) -> List[AdapterDescriptor]:
        """Parse the JSON document produced by ENUMERATION_SCRIPT"""
        try:
            data = json.loads(output) if output and output.strip() else {}
        except json.JSONDecodeError as e:
            raise EnumerationError(f"Unreadable Get-NetAdapter output: {e}", cause=e)

        ipv4_indexes: Set[int] = set()
        for entry in _as_list(data.get("ipv4")):
            index = self.parse_int(entry.get("ifIndex"))
            if index is not None:
                ipv4_indexes.add(index)

        adapters = []
        for entry in _as_list(data.get("adapters")):
            descriptor = self._to_descriptor(entry, ipv4_indexes)
            if descriptor is not None:
                adapters.append(descriptor)
        return adapters

    def _to_descriptor(self, entry: Dict[str, Any], ipv4_indexes: Set[int]) -> Optional[AdapterDescriptor]:
        ifindex = self.parse_int(entry.get("ifIndex"))
        identifier = entry.get("InterfaceGuid") or (str(ifindex) if ifindex is not None else None)
        if not identifier:
            # Without a stable identity the adapter cannot be reconciled
            logger.warning(f"Skipping adapter {entry.get('Name')!r}: no InterfaceGuid or ifIndex")
            return None

        type_code = self.parse_int(entry.get("InterfaceType"))
        speed = self.parse_int(entry.get("Speed"))
        mac = entry.get("MacAddress") or None

        return AdapterDescriptor(
            identifier=str(identifier),
            name=entry.get("Name") or "",
            description=entry.get("InterfaceDescription"),
            interface_type=InterfaceType.from_iana(type_code),
            status=OperationalStatus.parse(entry.get("Status")),
            ipv4_index=ifindex if ifindex in ipv4_indexes else None,
            type_code=type_code,
            mac_address=mac.replace("-", ":").lower() if mac else None,
            speed_mbps=speed // 1_000_000 if speed else None,
        )


def _as_list(value: Optional[Any]) -> List[Dict[str, Any]]:
    """ConvertTo-Json collapses single-element arrays into objects"""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return list(value)
