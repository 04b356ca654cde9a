"""
Platform selection

Maps an OS name onto its enumeration backend. One backend is cached per OS,
so asking for a different OS never hands back the host's cached backend.
Unix-likes without a dedicated backend fall back to sysfs.
"""

import platform
import threading
from typing import Callable, Dict, Optional

from .base import NetworkPlatform


OS_ALIASES = {
    "windows": "windows",
    "win32": "windows",
    "nt": "windows",
    "darwin": "macos",
    "macos": "macos",
    "macosx": "macos",
    "linux": "linux",
}


def resolve_os_name(os_override: Optional[str] = None) -> str:
    """Normalize an OS name (or the host's) to 'windows', 'macos' or 'linux'"""
    name = (os_override or platform.system()).strip().lower()
    return OS_ALIASES.get(name, "linux")


def _windows() -> NetworkPlatform:
    from .windows import WindowsPlatform
    return WindowsPlatform()


def _macos() -> NetworkPlatform:
    from .macos import MacOSPlatform
    return MacOSPlatform()


def _linux() -> NetworkPlatform:
    from .linux import LinuxPlatform
    return LinuxPlatform()


BACKENDS: Dict[str, Callable[[], NetworkPlatform]] = {
    "windows": _windows,
    "macos": _macos,
    "linux": _linux,
}


class PlatformFactory:
    """Builds enumeration backends and keeps one shared instance per OS"""

    _instances: Dict[str, NetworkPlatform] = {}
    _lock = threading.Lock()

    @classmethod
    def create(cls, os_override: Optional[str] = None) -> NetworkPlatform:
        """Build a fresh backend for os_override, or for the host OS"""
        return BACKENDS[resolve_os_name(os_override)]()

    @classmethod
    def shared(cls, os_override: Optional[str] = None) -> NetworkPlatform:
        """Return the cached backend for the OS, building it on first use"""
        os_name = resolve_os_name(os_override)
        with cls._lock:
            backend = cls._instances.get(os_name)
            if backend is None:
                backend = cls._instances[os_name] = BACKENDS[os_name]()
            return backend

    @classmethod
    def reset(cls) -> None:
        """Forget every cached backend"""
        with cls._lock:
            cls._instances.clear()


def get_platform(os_override: Optional[str] = None) -> NetworkPlatform:
    """
    Shared enumeration backend for this host.

    Usage:
        from netinventory.platforms import get_platform

        backend = get_platform()
        print(backend.os_name)  # 'windows', 'linux', or 'macos'
    """
    return PlatformFactory.shared(os_override)
