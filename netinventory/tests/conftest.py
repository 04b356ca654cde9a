"""
Shared fixtures: fake OS backend, fake change source and a descriptor builder.
"""

from typing import List, Optional

import pytest

from netinventory.models import AdapterDescriptor, InterfaceType, OperationalStatus
from netinventory.notifier import ChangeKind, NetworkChangeEvent, NetworkChangeSource
from netinventory.platforms import NetworkPlatform, PlatformFactory


def make_descriptor(
    identifier: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    interface_type: InterfaceType = InterfaceType.ETHERNET,
    status: OperationalStatus = OperationalStatus.UP,
    ipv4_index: Optional[int] = 1,
    **kwargs,
) -> AdapterDescriptor:
    return AdapterDescriptor(
        identifier=identifier,
        name=name if name is not None else f"eth-{identifier}",
        description=description,
        interface_type=interface_type,
        status=status,
        ipv4_index=ipv4_index,
        **kwargs,
    )


class FakePlatform(NetworkPlatform):
    """Scriptable backend: returns `adapters` after raising queued `failures`"""

    def __init__(self, adapters: Optional[List[AdapterDescriptor]] = None):
        self.adapters = list(adapters or [])
        self.failures: List[Exception] = []
        self.calls = 0

    @property
    def os_name(self) -> str:
        return "fake"

    def list_adapters(self) -> List[AdapterDescriptor]:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return list(self.adapters)


class FakeChangeSource(NetworkChangeSource):
    """Change source driven by the test"""

    def __init__(self):
        super().__init__()
        self.running = False

    def _start(self) -> None:
        self.running = True

    def _stop(self) -> None:
        self.running = False

    def fire(self, kind: ChangeKind = ChangeKind.ADDRESS_CHANGED) -> None:
        self._emit(NetworkChangeEvent(kind))


@pytest.fixture
def descriptor():
    """Builder for AdapterDescriptors with test-friendly defaults"""
    return make_descriptor


@pytest.fixture
def fake_platform():
    return FakePlatform()


@pytest.fixture
def change_source():
    return FakeChangeSource()


@pytest.fixture(autouse=True)
def reset_platform_cache():
    PlatformFactory.reset()
    yield
    PlatformFactory.reset()
