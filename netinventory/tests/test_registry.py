"""
Registry Tests.

Reconciliation deltas, identity preservation, notification order and
behaviour under concurrent reconcile calls.
"""

import threading

import pytest

from netinventory.hardware import NetworkHardware, Settings
from netinventory.registry import AdapterRegistry, TrackedAdapter


class TestReconcile:
    """Diffing snapshots against the tracked collection."""

    def setup_method(self):
        self.registry = AdapterRegistry(Settings())
        self.events = []
        self.registry.on_adapter_added = lambda a: self.events.append(("added", a.identifier))
        self.registry.on_adapter_removed = lambda a: self.events.append(("removed", a.identifier))

    def ids(self):
        return [a.identifier for a in self.registry.adapters]

    def test_initial_snapshot_adds_everything(self, descriptor):
        result = self.registry.reconcile([descriptor("A"), descriptor("B")])

        assert self.ids() == ["A", "B"]
        assert [a.identifier for a in result.added] == ["A", "B"]
        assert result.removed == []
        assert self.events == [("added", "A"), ("added", "B")]

    def test_new_adapter_added(self, descriptor):
        self.registry.reconcile([descriptor("A")])
        self.events.clear()

        self.registry.reconcile([descriptor("A"), descriptor("B")])

        assert self.events == [("added", "B")]
        assert self.ids() == ["A", "B"]

    def test_missing_adapter_removed(self, descriptor):
        self.registry.reconcile([descriptor("A"), descriptor("B")])
        self.events.clear()

        self.registry.reconcile([descriptor("B")])

        assert self.events == [("removed", "A")]
        assert self.ids() == ["B"]

    def test_removed_adapter_released(self, descriptor):
        self.registry.reconcile([descriptor("A")])
        hardware = self.registry.get("A").hardware

        self.registry.reconcile([])

        assert hardware.closed is True

    def test_removals_notified_before_additions(self, descriptor):
        self.registry.reconcile([descriptor("A")])
        self.events.clear()

        self.registry.reconcile([descriptor("B")])

        assert self.events == [("removed", "A"), ("added", "B")]

    def test_idempotent(self, descriptor):
        snapshot = [descriptor("A"), descriptor("B")]
        self.registry.reconcile(snapshot)
        self.events.clear()
        version = self.registry.version

        result = self.registry.reconcile(snapshot)

        assert self.events == []
        assert result.changed is False
        assert self.registry.version == version

    def test_unchanged_adapter_keeps_hardware(self, descriptor):
        self.registry.reconcile([descriptor("A", name="eth0")])
        before = self.registry.get("A")

        # Rename between passes: same identifier means same entity
        self.registry.reconcile([descriptor("A", name="enp3s0"), descriptor("B")])

        after = self.registry.get("A")
        assert after is before
        assert after.hardware is before.hardware
        assert after.hardware.closed is False

    def test_changed_identifier_is_remove_plus_add(self, descriptor):
        self.registry.reconcile([descriptor("A", name="eth0")])
        self.events.clear()

        self.registry.reconcile([descriptor("A2", name="eth0")])

        assert self.events == [("removed", "A"), ("added", "A2")]

    def test_none_snapshot_is_noop(self, descriptor):
        self.registry.reconcile([descriptor("A")])
        self.events.clear()
        published = self.registry.adapters

        assert self.registry.reconcile(None) is None
        assert self.registry.adapters is published
        assert self.events == []

    def test_duplicate_identifiers_in_snapshot_tracked_once(self, descriptor):
        self.registry.reconcile([descriptor("A"), descriptor("A")])
        assert self.ids() == ["A"]

    def test_tracked_set_equals_snapshot(self, descriptor):
        passes = [["A", "B", "C"], ["B", "D"], [], ["E", "B"], ["E", "B"]]
        for ids in passes:
            self.registry.reconcile([descriptor(i) for i in ids])
            assert set(self.ids()) == set(ids)

    def test_published_view_is_immutable(self, descriptor):
        self.registry.reconcile([descriptor("A")])
        with pytest.raises(AttributeError):
            self.registry.adapters.append(None)


class TestHardwareFactory:
    """Hardware objects come from the injected factory with the settings passed through."""

    def test_factory_receives_settings(self, descriptor):
        settings = Settings({"nic.interval": "1"})
        created = []

        def factory(desc, passed_settings):
            created.append((desc.identifier, passed_settings))
            return NetworkHardware(desc, passed_settings)

        AdapterRegistry(settings, factory).reconcile([descriptor("A")])

        assert created == [("A", settings)]


class TestClose:
    """Teardown releases everything without notifications."""

    def test_close_releases_all(self, descriptor):
        registry = AdapterRegistry()
        registry.reconcile([descriptor("A"), descriptor("B")])
        hardware = [a.hardware for a in registry.adapters]
        removed = []
        registry.on_adapter_removed = removed.append

        registry.close()

        assert registry.adapters == ()
        assert all(h.closed for h in hardware)
        assert removed == []


class TestIdentity:
    """TrackedAdapter equality follows the OS identifier."""

    def test_equal_by_identifier(self, descriptor):
        a = TrackedAdapter(descriptor("A", name="eth0"), NetworkHardware(descriptor("A"), Settings()))
        b = TrackedAdapter(descriptor("A", name="eth9"), NetworkHardware(descriptor("A"), Settings()))
        c = TrackedAdapter(descriptor("C"), NetworkHardware(descriptor("C"), Settings()))

        assert a == b
        assert hash(a) == hash(b)
        assert a != c


class TestConcurrency:
    """Concurrent reconciles serialize."""

    def test_concurrent_reconciles_never_duplicate(self, descriptor):
        registry = AdapterRegistry()
        added = []
        removed = []
        lock = threading.Lock()

        def on_added(adapter):
            with lock:
                added.append(adapter.identifier)

        def on_removed(adapter):
            with lock:
                removed.append(adapter.identifier)

        registry.on_adapter_added = on_added
        registry.on_adapter_removed = on_removed

        snapshots = [
            [descriptor("A"), descriptor("B")],
            [descriptor("B"), descriptor("C")],
            [descriptor("A"), descriptor("C"), descriptor("D")],
        ]
        barrier = threading.Barrier(12)
        torn = []

        def worker(i):
            barrier.wait()
            for _ in range(50):
                registry.reconcile(snapshots[i % len(snapshots)])
                ids = [a.identifier for a in registry.adapters]
                if len(ids) != len(set(ids)):
                    torn.append(ids)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert torn == []
        ids = [a.identifier for a in registry.adapters]
        assert len(ids) == len(set(ids))
        assert set(ids) in [{d.identifier for d in s} for s in snapshots]

        # Every add is matched by a remove, except for what is still tracked
        for identifier in "ABCD":
            balance = added.count(identifier) - removed.count(identifier)
            assert balance == (1 if identifier in ids else 0)

    def test_callback_may_reenter_reconcile(self, descriptor):
        registry = AdapterRegistry()

        def on_added(adapter):
            if adapter.identifier == "A":
                registry.reconcile([descriptor("A"), descriptor("B")])

        registry.on_adapter_added = on_added
        registry.reconcile([descriptor("A")])

        assert [a.identifier for a in registry.adapters] == ["A", "B"]


class TestCallbackFailures:
    """A failing consumer does not cut a delivery short."""

    def test_removed_callback_error_does_not_skip_release_or_additions(self, descriptor):
        registry = AdapterRegistry()
        registry.reconcile([descriptor("A"), descriptor("B")])
        hardware = [a.hardware for a in registry.adapters]
        added = []

        def on_removed(adapter):
            raise RuntimeError("consumer failed")

        registry.on_adapter_removed = on_removed
        registry.on_adapter_added = lambda a: added.append(a.identifier)

        result = registry.reconcile([descriptor("C")])

        assert [a.identifier for a in registry.adapters] == ["C"]
        assert all(h.closed for h in hardware)
        assert added == ["C"]
        assert [a.identifier for a in result.removed] == ["A", "B"]

    def test_added_callback_error_does_not_skip_other_additions(self, descriptor):
        registry = AdapterRegistry()
        added = []

        def on_added(adapter):
            added.append(adapter.identifier)
            if adapter.identifier == "A":
                raise RuntimeError("consumer failed")

        registry.on_adapter_added = on_added
        registry.reconcile([descriptor("A"), descriptor("B")])

        assert added == ["A", "B"]

    def test_release_error_does_not_skip_other_releases(self, descriptor):
        class FailingHardware(NetworkHardware):
            def close(self):
                super().close()
                raise OSError("device gone")

        registry = AdapterRegistry(hardware_factory=FailingHardware)
        registry.reconcile([descriptor("A"), descriptor("B")])
        hardware = [a.hardware for a in registry.adapters]
        removed = []
        registry.on_adapter_removed = lambda a: removed.append(a.identifier)

        registry.reconcile([])

        assert all(h.closed for h in hardware)
        assert removed == ["A", "B"]

    def test_registry_usable_after_callback_error(self, descriptor):
        registry = AdapterRegistry()
        events = []

        def on_added(adapter):
            events.append(adapter.identifier)
            if adapter.identifier == "A":
                raise RuntimeError("consumer failed")

        registry.on_adapter_added = on_added
        registry.reconcile([descriptor("A")])
        registry.reconcile([descriptor("A"), descriptor("B")])

        assert events == ["A", "B"]


class TestDeliveryOrder:
    """Overlapping passes deliver their deltas in publish order."""

    def test_overlapping_passes_do_not_interleave(self, descriptor):
        registry = AdapterRegistry()
        events = []
        in_callback = threading.Event()
        release = threading.Event()

        def on_added(adapter):
            events.append(("added", adapter.identifier, adapter.hardware.closed))
            if adapter.identifier == "A" and not in_callback.is_set():
                in_callback.set()
                release.wait(timeout=5)

        def on_removed(adapter):
            events.append(("removed", adapter.identifier, adapter.hardware.closed))

        registry.on_adapter_added = on_added
        registry.on_adapter_removed = on_removed

        first = threading.Thread(target=registry.reconcile, args=([descriptor("A"), descriptor("X")],))
        first.start()
        assert in_callback.wait(timeout=5)

        # Published immediately, delivered after the first pass finishes
        result = registry.reconcile([descriptor("A")])
        assert [a.identifier for a in result.removed] == ["X"]
        assert [a.identifier for a in registry.adapters] == ["A"]

        release.set()
        first.join(timeout=5)

        assert events == [
            ("added", "A", False),
            ("added", "X", False),
            ("removed", "X", True),
        ]

    def test_reentrant_pass_delivered_after_current_delta(self, descriptor):
        registry = AdapterRegistry()
        events = []

        def on_added(adapter):
            events.append(("added", adapter.identifier))
            if adapter.identifier == "A":
                registry.reconcile([descriptor("B")])

        registry.on_adapter_added = on_added
        registry.on_adapter_removed = lambda a: events.append(("removed", a.identifier))
        registry.reconcile([descriptor("A"), descriptor("C")])

        assert events == [
            ("added", "A"),
            ("added", "C"),
            ("removed", "A"),
            ("removed", "C"),
            ("added", "B"),
        ]
