"""
Adapter Registry

Owns the authoritative collection of tracked adapters and reconciles it
against fresh snapshots.

Concurrency model:
- One writer lock covers read-current -> diff -> build -> swap.
- The published collection is an immutable tuple replaced wholesale, so
  readers never take the lock and never see a half-built set.
- Resource release and callbacks run after the lock is dropped, so a
  callback that triggers another reconcile cannot deadlock.
- Deltas are delivered one pass at a time, in publish order. A failing
  callback is logged and does not stop the rest of the delivery.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Sequence, Tuple

from .hardware import HardwareFactory, NetworkHardware, Settings
from .models import AdapterDescriptor

logger = logging.getLogger(__name__)


class TrackedAdapter:
    """
    An adapter the registry currently tracks.

    Identity is the OS identifier: two tracked adapters are the same entity
    iff their identifiers match, even if name or description changed.
    """

    __slots__ = ("descriptor", "hardware")

    def __init__(self, descriptor: AdapterDescriptor, hardware: NetworkHardware):
        self.descriptor = descriptor
        self.hardware = hardware

    @property
    def identifier(self) -> str:
        return self.descriptor.identifier

    @property
    def name(self) -> str:
        return self.descriptor.name

    def close(self) -> None:
        self.hardware.close()

    def __eq__(self, other) -> bool:
        if not isinstance(other, TrackedAdapter):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash(self.identifier)

    def __repr__(self) -> str:
        return f"TrackedAdapter({self.identifier!r}, {self.name!r})"


@dataclass
class ReconcileResult:
    """Delta applied by one reconcile pass"""
    added: List[TrackedAdapter] = field(default_factory=list)
    removed: List[TrackedAdapter] = field(default_factory=list)
    version: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


AdapterCallback = Callable[[TrackedAdapter], None]


class AdapterRegistry:
    """Copy-on-write collection of TrackedAdapters"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        hardware_factory: Optional[HardwareFactory] = None,
    ):
        self.settings = settings if settings is not None else Settings()
        self.hardware_factory: HardwareFactory = hardware_factory or NetworkHardware

        # Callbacks
        self.on_adapter_added: Optional[AdapterCallback] = None
        self.on_adapter_removed: Optional[AdapterCallback] = None

        self._lock = threading.Lock()
        self._adapters: Tuple[TrackedAdapter, ...] = ()
        self._version = 0

        # Deltas waiting for delivery, oldest first
        self._pending: Deque[ReconcileResult] = deque()
        self._dispatching = False

    @property
    def adapters(self) -> Tuple[TrackedAdapter, ...]:
        """Current collection, in insertion order. Never blocks."""
        return self._adapters

    @property
    def version(self) -> int:
        """Incremented every time a changed collection is published"""
        return self._version

    def get(self, identifier: str) -> Optional[TrackedAdapter]:
        for adapter in self._adapters:
            if adapter.identifier == identifier:
                return adapter
        return None

    def reconcile(self, snapshot: Optional[Sequence[AdapterDescriptor]]) -> Optional[ReconcileResult]:
        """
        Apply the minimal add/remove delta to match a snapshot.

        A None snapshot means enumeration failed; the current state is kept
        and None is returned. Adapters present on both sides are left
        untouched so their sensor history survives.

        Each pass queues its delta under the state lock, so deltas are
        delivered in the order they were published. Whichever thread finds
        the queue idle delivers everything queued, including deltas from
        concurrent or re-entrant passes.
        """
        if snapshot is None:
            logger.debug("No snapshot available, keeping current adapters")
            return None

        with self._lock:
            current = self._adapters
            wanted = {descriptor.identifier for descriptor in snapshot}

            kept = [adapter for adapter in current if adapter.identifier in wanted]
            removed = [adapter for adapter in current if adapter.identifier not in wanted]

            known = {adapter.identifier for adapter in kept}
            added = []
            for descriptor in snapshot:
                if descriptor.identifier in known:
                    continue
                known.add(descriptor.identifier)
                added.append(TrackedAdapter(descriptor, self.hardware_factory(descriptor, self.settings)))

            if removed or added:
                self._adapters = tuple(kept + added)
                self._version += 1
            result = ReconcileResult(added=added, removed=removed, version=self._version)

            if not result.changed:
                return result
            self._pending.append(result)
            if self._dispatching:
                return result
            self._dispatching = True

        self._dispatch()
        return result

    def _dispatch(self) -> None:
        """Deliver queued deltas in publish order until the queue is empty"""
        try:
            while True:
                with self._lock:
                    if not self._pending:
                        self._dispatching = False
                        return
                    result = self._pending.popleft()
                self._deliver(result)
        except BaseException:
            with self._lock:
                self._dispatching = False
            raise

    def _deliver(self, result: ReconcileResult) -> None:
        if result.removed:
            logger.info(f"Network adapters removed: {', '.join(a.name for a in result.removed)}")
        if result.added:
            logger.info(f"Network adapters added: {', '.join(a.name for a in result.added)}")

        for adapter in result.removed:
            try:
                adapter.close()
            except Exception:
                logger.exception(f"Failed to release adapter {adapter.name}")

        for adapter in result.removed:
            self._notify(self.on_adapter_removed, adapter)
        for adapter in result.added:
            self._notify(self.on_adapter_added, adapter)

    def _notify(self, callback: Optional[AdapterCallback], adapter: TrackedAdapter) -> None:
        if callback is None:
            return
        try:
            callback(adapter)
        except Exception:
            logger.exception(f"Adapter callback failed for {adapter.name}")

    def close(self) -> None:
        """Drop every tracked adapter and release its resources. No callbacks fire."""
        with self._lock:
            adapters = self._adapters
            self._adapters = ()
            if adapters:
                self._version += 1

        for adapter in adapters:
            adapter.close()
