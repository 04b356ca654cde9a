"""
netinventory Platforms - Cross-platform network enumeration

Each platform lists the OS's network interfaces as AdapterDescriptors:
- Linux: sysfs
- Windows: PowerShell NetAdapter cmdlets
- macOS: psutil + networksetup
"""

from .base import NetworkPlatform
from .factory import get_platform, PlatformFactory

__all__ = [
    "NetworkPlatform",
    "get_platform",
    "PlatformFactory",
]
