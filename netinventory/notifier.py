"""
Change Notifier - re-enumerate whenever the network topology changes.

A NetworkChangeSource delivers "address changed" / "availability changed"
events on its own thread. ChangeNotifier subscribes to it and hands each
event to a worker thread that runs the refresh, so the source's callback
never does the enumeration work inline.

Both event kinds trigger the same full refresh: OS change payloads are not
trusted to describe the delta.
"""

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, FrozenSet, List, Optional, Tuple

import psutil

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kinds of OS network change notifications"""
    ADDRESS_CHANGED = "address_changed"
    AVAILABILITY_CHANGED = "availability_changed"


@dataclass(frozen=True)
class NetworkChangeEvent:
    """One network change notification"""
    kind: ChangeKind
    timestamp: float = field(default_factory=time.time)


ChangeCallback = Callable[[NetworkChangeEvent], None]


class Subscription:
    """Handle returned by NetworkChangeSource.subscribe()"""

    def __init__(self, source: "NetworkChangeSource", callback: ChangeCallback):
        self._source = source
        self._callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop delivery. Idempotent."""
        if self._active:
            self._active = False
            self._source._unsubscribe(self._callback)


class NetworkChangeSource(ABC):
    """
    Observer registry for OS network change notifications.

    Subclasses produce events and call _emit(). _start() runs when the
    first listener subscribes and _stop() when the last one leaves.
    """

    def __init__(self):
        self._listeners: List[ChangeCallback] = []
        self._listeners_lock = threading.Lock()

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        with self._listeners_lock:
            first = not self._listeners
            self._listeners.append(callback)
        if first:
            self._start()
        return Subscription(self, callback)

    def _unsubscribe(self, callback: ChangeCallback) -> None:
        with self._listeners_lock:
            if callback in self._listeners:
                self._listeners.remove(callback)
            last = not self._listeners
        if last:
            self._stop()

    @property
    def listener_count(self) -> int:
        with self._listeners_lock:
            return len(self._listeners)

    def _emit(self, event: NetworkChangeEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    @abstractmethod
    def _start(self) -> None:
        """Begin producing events"""
        pass

    @abstractmethod
    def _stop(self) -> None:
        """Stop producing events"""
        pass


AddressFingerprint = FrozenSet[Tuple[str, int, str]]
AvailabilityFingerprint = FrozenSet[Tuple[str, bool]]


class PollingChangeSource(NetworkChangeSource):
    """
    Portable change source built on psutil.

    Polls the interface address table and up/down flags and emits
    ADDRESS_CHANGED or AVAILABILITY_CHANGED when either differs from the
    previous poll.
    """

    def __init__(self, poll_interval: float = 2.0):
        super().__init__()
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._addresses: Optional[AddressFingerprint] = None
        self._availability: Optional[AvailabilityFingerprint] = None

    def _start(self) -> None:
        # Each run owns its stop signal; a late-exiting previous loop keeps its own
        self._stop_event = threading.Event()
        self._addresses, self._availability = self._fingerprint_or_none()
        self._thread = threading.Thread(
            target=self._poll_loop, args=(self._stop_event,), name="netinventory-poll", daemon=True
        )
        self._thread.start()

    def _stop(self) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval + 1.0)

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Poll until stopped"""
        while not stop_event.wait(self.poll_interval):
            self.poll()

    def poll(self) -> List[ChangeKind]:
        """Take one fingerprint and emit events for whatever changed"""
        addresses, availability = self._fingerprint_or_none()
        if addresses is None:
            return []

        changes = []
        if self._addresses is not None and addresses != self._addresses:
            changes.append(ChangeKind.ADDRESS_CHANGED)
        if self._availability is not None and availability != self._availability:
            changes.append(ChangeKind.AVAILABILITY_CHANGED)
        self._addresses, self._availability = addresses, availability

        for kind in changes:
            self._emit(NetworkChangeEvent(kind))
        return changes

    def _fingerprint_or_none(self):
        try:
            return self.fingerprint()
        except OSError as e:
            # Enumeration can fail while the stack is being reconfigured; next tick will tell
            logger.debug(f"Skipping network change poll: {e}")
            return None, None

    @staticmethod
    def fingerprint() -> Tuple[AddressFingerprint, AvailabilityFingerprint]:
        addresses = frozenset(
            (name, int(addr.family), addr.address)
            for name, addr_list in psutil.net_if_addrs().items()
            for addr in addr_list
        )
        availability = frozenset(
            (name, bool(stat.isup))
            for name, stat in psutil.net_if_stats().items()
        )
        return addresses, availability


_STOP = object()


class ChangeNotifier:
    """
    Triggers a refresh on every network change.

    The source callback only enqueues. A worker thread drains the queue,
    coalescing bursts of events into one refresh. Refresh failures are
    logged; they never kill the worker.
    """

    def __init__(self, source: NetworkChangeSource, refresh: Callable[[], Any]):
        self.source = source
        self.refresh = refresh

        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._closed = threading.Event()

        # Events arriving before the worker starts wait in the queue
        self._subscription = source.subscribe(self._on_change)
        self._worker = threading.Thread(target=self._run, name="netinventory-notifier", daemon=True)
        self._worker.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _on_change(self, event: NetworkChangeEvent) -> None:
        if self._closed.is_set():
            return
        logger.debug(f"Network change: {event.kind.value}")
        self._queue.put(event)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return

            # Collapse everything queued behind this event into one pass
            stop = False
            while True:
                try:
                    pending = self._queue.get_nowait()
                except queue.Empty:
                    break
                if pending is _STOP:
                    stop = True
                    break
            if stop:
                return

            try:
                self.refresh()
            except Exception:
                logger.exception("Adapter refresh after network change failed")

    def close(self, timeout: Optional[float] = 10.0) -> None:
        """Unsubscribe and wait for an in-flight refresh to finish"""
        if self._closed.is_set():
            return
        self._closed.set()
        self._subscription.unsubscribe()
        self._queue.put(_STOP)
        if self._worker is not threading.current_thread():
            self._worker.join(timeout=timeout)
