"""
netinventory - Live network adapter inventory for hardware monitoring

Keeps a continuously reconciled list of the host's network adapters and
classifies them so only relevant (optionally: only physical) adapters are
exposed as monitorable devices.

Components:
- SnapshotProvider: enumerates adapters, retrying transient OS failures
- AdapterClassifier: eligibility and physical-adapter policies
- AdapterRegistry: copy-on-write tracked collection with add/remove deltas
- ChangeNotifier: re-enumerates on network change notifications
- NetworkGroup: wires all of the above together
"""

__version__ = "0.1.0"

from .classifier import (
    AdapterClassifier,
    BindingClassifier,
    CompositeClassifier,
    NamingClassifier,
    get_classifier,
    is_eligible_type,
)
from .config import ClassifierPolicy, MonitorConfig, configure_logging
from .errors import (
    ConfigurationError,
    EnumerationError,
    NetworkInventoryError,
    TransientEnumerationError,
)
from .group import NetworkGroup
from .hardware import NetworkHardware, Sensor, Settings
from .models import AdapterDescriptor, InterfaceType, OperationalStatus
from .notifier import (
    ChangeKind,
    ChangeNotifier,
    NetworkChangeEvent,
    NetworkChangeSource,
    PollingChangeSource,
    Subscription,
)
from .platforms import NetworkPlatform, get_platform
from .registry import AdapterRegistry, ReconcileResult, TrackedAdapter
from .snapshot import SnapshotProvider

__all__ = [
    "__version__",
    # Model
    "AdapterDescriptor",
    "InterfaceType",
    "OperationalStatus",
    # Classification
    "AdapterClassifier",
    "BindingClassifier",
    "NamingClassifier",
    "CompositeClassifier",
    "get_classifier",
    "is_eligible_type",
    # Enumeration
    "NetworkPlatform",
    "get_platform",
    "SnapshotProvider",
    # Registry
    "AdapterRegistry",
    "TrackedAdapter",
    "ReconcileResult",
    # Change notification
    "ChangeKind",
    "NetworkChangeEvent",
    "NetworkChangeSource",
    "PollingChangeSource",
    "ChangeNotifier",
    "Subscription",
    # Hardware collaborator
    "NetworkHardware",
    "Sensor",
    "Settings",
    # Facade
    "NetworkGroup",
    # Config
    "MonitorConfig",
    "ClassifierPolicy",
    "configure_logging",
    # Errors
    "NetworkInventoryError",
    "EnumerationError",
    "TransientEnumerationError",
    "ConfigurationError",
]
