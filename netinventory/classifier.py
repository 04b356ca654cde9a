"""
Adapter Classifier - decides which adapters are monitorable hardware.

Two layers:
- is_eligible_type(): hard exclusion of loopback, tunnel and unknown
  interface types. Always applied.
- AdapterClassifier.is_physical(): physical-vs-virtual decision, only
  applied in physical-only mode.

There is no portable "is physical" flag, so is_physical() is a policy
built from metadata the OS reports. Two heuristics exist and neither is
authoritative on its own:

- BindingClassifier: relies on the IPv4 binding index, the interface
  type code and virtualization keywords in the description.
- NamingClassifier: relies on NDIS filter-chain naming and a denylist
  of VPN/tunnel/virtualization product names.

CompositeClassifier combines strategies (physical only if all agree).
All tables below are lowercase; matching is case-insensitive.
"""

import logging
from abc import ABC, abstractmethod
from typing import Tuple

from .config import ClassifierPolicy
from .models import AdapterDescriptor, InterfaceType

logger = logging.getLogger(__name__)


INELIGIBLE_TYPES = frozenset({
    InterfaceType.LOOPBACK,
    InterfaceType.TUNNEL,
    InterfaceType.UNKNOWN,
})

# Binding heuristic: description keywords for virtualization / containers
VIRTUALIZATION_KEYWORDS: Tuple[str, ...] = (
    "virtual",
    "hyper-v",
    "vmware",
    "virtualbox",
    "parallels",
    "qemu",
    "docker",
    "container",
    "wsl",
)

# Naming heuristic: NDIS lightweight filter adapters show up as
# "<Adapter>-<Filter>-0000"
FILTER_NAME_MARKERS: Tuple[str, ...] = (
    "-0000",
    "-qos packet",
    "-wfp ",
    "-native wifi",
    "-virtualbox",
    "-virtual wifi",
)

# Naming heuristic: software interfaces named by their creator (Linux/macOS)
VIRTUAL_NAME_PREFIXES: Tuple[str, ...] = (
    "veth",
    "docker",
    "br-",
    "virbr",
    "vboxnet",
    "vmnet",
    "tailscale",
    "wg",
    "zt",
)

# Naming heuristic: leftover test / kernel-debug adapters
TEST_NAME_MARKERS: Tuple[str, ...] = (
    "(kerneldebugger)",
)
TEST_NAME_PREFIXES: Tuple[str, ...] = (
    "lan-verbindung*",
)

# Naming heuristic: known virtual, tunnel and VPN products by description
DESCRIPTION_DENYLIST: Tuple[str, ...] = (
    "vmware",
    "virtualbox",
    "hyper-v",
    "docker",
    "wsl",
    "vethernet",
    "tap-",
    "wireguard",
    "teredo",
    "isatap",
    "6to4",
    "microsoft kernel debug",
    "private internet access",
    "nordvpn",
    "expressvpn",
    "surfshark",
    "protonvpn",
)


def _normalized(value) -> str:
    return value.lower() if value else ""


def is_eligible_type(descriptor: AdapterDescriptor) -> bool:
    """False for loopback, tunnel and unknown interface types."""
    return descriptor.interface_type not in INELIGIBLE_TYPES


class AdapterClassifier(ABC):
    """
    Strategy deciding whether an adapter is genuine physical hardware.

    Implementations must be pure: the same descriptor always yields the
    same answer, regardless of call order.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short policy name used in logs and the CLI"""
        pass

    @abstractmethod
    def is_physical(self, descriptor: AdapterDescriptor) -> bool:
        """Return True if the adapter should be exposed in physical-only mode"""
        pass


class BindingClassifier(AdapterClassifier):
    """Physical adapters terminate the stack: they carry an IPv4 binding."""

    @property
    def name(self) -> str:
        return "binding"

    def is_physical(self, descriptor: AdapterDescriptor) -> bool:
        if descriptor.ipv4_index is None:
            return False  # filter-layer pseudo-adapter
        if descriptor.interface_type is InterfaceType.PROPRIETARY_VIRTUAL:
            return False  # TAP/TUN VPN driver
        desc = _normalized(descriptor.description)
        return not any(keyword in desc for keyword in VIRTUALIZATION_KEYWORDS)


class NamingClassifier(AdapterClassifier):
    """Recognizes filter and virtual adapters by their names and product strings."""

    @property
    def name(self) -> str:
        return "naming"

    def is_physical(self, descriptor: AdapterDescriptor) -> bool:
        name = _normalized(descriptor.name)
        desc = _normalized(descriptor.description)

        if any(marker in name for marker in FILTER_NAME_MARKERS):
            return False
        if name.startswith(VIRTUAL_NAME_PREFIXES):
            return False
        if any(product in desc for product in DESCRIPTION_DENYLIST):
            return False
        if name.startswith(TEST_NAME_PREFIXES) or any(m in name for m in TEST_NAME_MARKERS):
            return False
        return True


class CompositeClassifier(AdapterClassifier):
    """Physical only when every wrapped strategy says so."""

    def __init__(self, *strategies: AdapterClassifier):
        if not strategies:
            raise ValueError("CompositeClassifier needs at least one strategy")
        self.strategies = strategies

    @property
    def name(self) -> str:
        return "+".join(s.name for s in self.strategies)

    def is_physical(self, descriptor: AdapterDescriptor) -> bool:
        return all(s.is_physical(descriptor) for s in self.strategies)


def get_classifier(policy: ClassifierPolicy = ClassifierPolicy.COMBINED) -> AdapterClassifier:
    """Build the classifier for a configured policy"""
    if policy is ClassifierPolicy.BINDING:
        return BindingClassifier()
    if policy is ClassifierPolicy.NAMING:
        return NamingClassifier()
    return CompositeClassifier(BindingClassifier(), NamingClassifier())


def classify(descriptor: AdapterDescriptor, classifier: AdapterClassifier) -> bool:
    """
    Apply a classifier, treating unreadable metadata as "not physical".

    Excluding a real adapter is preferable to exposing a virtual one, so
    any failure inside the strategy excludes the adapter instead of
    aborting the snapshot.
    """
    try:
        return classifier.is_physical(descriptor)
    except (OSError, AttributeError, TypeError, ValueError) as e:
        logger.warning(
            f"Could not classify adapter {descriptor.name!r} with {classifier.name} policy, excluding: {e}"
        )
        return False
