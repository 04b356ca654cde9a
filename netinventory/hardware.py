"""
Hardware collaborator interface.

The sensor subsystem (throughput, error counters) belongs to the surrounding
monitoring framework. This module defines the seam it plugs into: a settings
store passed through untouched, and the sensor-bearing object built for each
tracked adapter.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .models import AdapterDescriptor


class Settings:
    """In-memory settings store handed to every hardware object"""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})
        self._lock = threading.Lock()

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._values

    def get_value(self, name: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._values.get(name, default)

    def set_value(self, name: str, value: str) -> None:
        with self._lock:
            self._values[name] = value

    def remove(self, name: str) -> None:
        with self._lock:
            self._values.pop(name, None)


@dataclass
class Sensor:
    """A named reading owned by a hardware object"""
    name: str
    value: Optional[float] = None
    unit: str = ""


class NetworkHardware:
    """
    Sensor-bearing object for one adapter.

    The base implementation carries no sensors; the monitoring framework
    supplies a factory producing subclasses that do.
    """

    def __init__(self, descriptor: AdapterDescriptor, settings: Settings):
        self.descriptor = descriptor
        self.settings = settings
        self.sensors: List[Sensor] = []
        self._closed = False

    @property
    def identifier(self) -> str:
        return self.descriptor.identifier

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release sensor resources. Safe to call more than once."""
        self._closed = True

    def __repr__(self) -> str:
        return f"NetworkHardware({self.identifier!r}, {self.name!r})"


HardwareFactory = Callable[[AdapterDescriptor, Settings], NetworkHardware]
