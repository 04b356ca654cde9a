"""
Network Group - the monitorable set of network adapters.

Wires the pieces together:
    change source -> ChangeNotifier -> refresh()
        -> SnapshotProvider.get_snapshot() -> AdapterRegistry.reconcile()
        -> on_adapter_removed / on_adapter_added
"""

import logging
from typing import Optional, Tuple

from .classifier import AdapterClassifier, get_classifier
from .config import MonitorConfig
from .hardware import HardwareFactory, NetworkHardware, Settings
from .notifier import ChangeNotifier, NetworkChangeSource, PollingChangeSource
from .platforms import NetworkPlatform, get_platform
from .registry import AdapterCallback, AdapterRegistry, ReconcileResult, TrackedAdapter
from .snapshot import SnapshotProvider

logger = logging.getLogger(__name__)


class NetworkGroup:
    """
    Live inventory of the host's network adapters.

    Construction performs one synchronous reconcile, then (with watch=True)
    keeps the inventory current from network change notifications until
    close() is called.

    Usage:
        with NetworkGroup(Settings(), physical_only=True) as group:
            for hardware in group.hardware:
                print(hardware.name)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        physical_only: bool = False,
        *,
        config: Optional[MonitorConfig] = None,
        platform: Optional[NetworkPlatform] = None,
        classifier: Optional[AdapterClassifier] = None,
        change_source: Optional[NetworkChangeSource] = None,
        hardware_factory: Optional[HardwareFactory] = None,
        on_adapter_added: Optional[AdapterCallback] = None,
        on_adapter_removed: Optional[AdapterCallback] = None,
        watch: bool = True,
    ):
        self.config = config or MonitorConfig(physical_only=physical_only)
        self.settings = settings if settings is not None else Settings()
        self.physical_only = physical_only or self.config.physical_only

        self.provider = SnapshotProvider(
            platform=platform or get_platform(),
            classifier=classifier or get_classifier(self.config.classifier_policy),
            physical_only=self.physical_only,
            max_attempts=self.config.max_enumeration_attempts,
        )

        self.registry = AdapterRegistry(self.settings, hardware_factory)
        self.registry.on_adapter_added = on_adapter_added
        self.registry.on_adapter_removed = on_adapter_removed

        self.refresh()

        self.notifier: Optional[ChangeNotifier] = None
        if watch:
            source = change_source or PollingChangeSource(self.config.poll_interval)
            self.notifier = ChangeNotifier(source, self.refresh)

        logger.info(
            f"Tracking {len(self.registry.adapters)} network adapter(s) "
            f"(physical_only={self.physical_only}, classifier={self.provider.classifier.name})"
        )

    @property
    def adapters(self) -> Tuple[TrackedAdapter, ...]:
        return self.registry.adapters

    @property
    def hardware(self) -> Tuple[NetworkHardware, ...]:
        """Read-only, ordered view of the tracked hardware objects"""
        return tuple(adapter.hardware for adapter in self.registry.adapters)

    def refresh(self) -> Optional[ReconcileResult]:
        """Re-enumerate and reconcile. None when no snapshot was available."""
        return self.registry.reconcile(self.provider.get_snapshot())

    def get_report(self) -> str:
        """
        Multi-line report: per adapter, its description and operational
        status, followed by each sensor's name and value.
        """
        lines = []
        for adapter in self.registry.adapters:
            lines.append(adapter.descriptor.display_name)
            lines.append(str(adapter.descriptor.status))
            lines.append("")

            for sensor in adapter.hardware.sensors:
                lines.append(sensor.name)
                lines.append("" if sensor.value is None else str(sensor.value))
                lines.append("")

        return "\n".join(lines) + ("\n" if lines else "")

    def close(self) -> None:
        """Stop listening for changes, then release every tracked adapter"""
        if self.notifier is not None:
            self.notifier.close()
            self.notifier = None
        self.registry.close()

    def __enter__(self) -> "NetworkGroup":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
