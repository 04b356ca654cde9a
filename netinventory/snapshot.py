"""
Adapter Snapshot Provider

Produces the filtered, name-ordered list of adapters that the registry
reconciles against. A snapshot of None means "state unknown this cycle"
and must never be read as "every adapter was removed".
"""

import logging
from typing import List, Optional

from .classifier import AdapterClassifier, classify, get_classifier, is_eligible_type
from .errors import TransientEnumerationError
from .models import AdapterDescriptor
from .platforms import NetworkPlatform

logger = logging.getLogger(__name__)


class SnapshotProvider:
    """
    Queries the OS for the current adapters.

    Pipeline: enumerate -> drop ineligible types -> sort by name ->
    (physical-only) drop non-physical adapters.
    """

    MAX_ATTEMPTS = 5

    def __init__(
        self,
        platform: NetworkPlatform,
        classifier: Optional[AdapterClassifier] = None,
        physical_only: bool = False,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.platform = platform
        self.classifier = classifier or get_classifier()
        self.physical_only = physical_only
        self.max_attempts = max_attempts

    def get_snapshot(self) -> Optional[List[AdapterDescriptor]]:
        """
        Return the current eligible adapters, or None if the OS kept failing.

        Only TransientEnumerationError is retried, immediately and without
        backoff. Any other error propagates to the caller.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                adapters = self.platform.list_adapters()
            except TransientEnumerationError as e:
                logger.debug(f"Transient enumeration failure (attempt {attempt}/{self.max_attempts}): {e}")
                continue
            return self.filter(adapters)

        logger.warning(f"Adapter enumeration failed {self.max_attempts} times, skipping this cycle")
        return None

    def filter(self, adapters: List[AdapterDescriptor]) -> List[AdapterDescriptor]:
        """Apply eligibility, ordering and (optionally) the physical predicate"""
        eligible = sorted(
            (adapter for adapter in adapters if is_eligible_type(adapter)),
            key=lambda adapter: adapter.name,
        )
        if not self.physical_only:
            return eligible
        return [adapter for adapter in eligible if classify(adapter, self.classifier)]
