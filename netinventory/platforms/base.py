"""
Base Platform - Abstract interface for OS-specific network enumeration

Philosophy:
- The inventory logic is the same across all platforms
- Platforms translate "list the network adapters" into OS-specific calls
- Platforms never filter: eligibility and classification happen upstream
"""

import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from ..errors import EnumerationError, TransientEnumerationError, is_transient_os_error
from ..models import AdapterDescriptor


class NetworkPlatform(ABC):
    """
    Abstract base class for OS-specific adapter enumeration.

    Design principle: Same interface, different implementations.
    The snapshot provider doesn't need to know if it's on Windows/Linux/Mac.
    """

    @property
    @abstractmethod
    def os_name(self) -> str:
        """Return OS name: 'windows', 'linux', or 'macos'"""
        pass

    @abstractmethod
    def list_adapters(self) -> List[AdapterDescriptor]:
        """
        Enumerate every OS-visible network interface, unfiltered.

        Raises:
            TransientEnumerationError: the OS failed in a retryable way
            EnumerationError: any other enumeration failure
        """
        pass

    # === Utility Methods (implemented in base) ===

    def run_command(
        self,
        args: List[str],
        timeout: int = 30,
    ) -> subprocess.CompletedProcess:
        """Run a helper tool, mapping launch failures onto EnumerationError."""
        try:
            return subprocess.run(args, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise EnumerationError(f"{args[0]} timed out after {timeout}s", cause=e)
        except OSError as e:
            raise self.wrap_os_error(e, f"Could not run {args[0]}")

    @staticmethod
    def wrap_os_error(error: OSError, context: str) -> EnumerationError:
        """Translate an OSError into the matching enumeration error"""
        if is_transient_os_error(error):
            return TransientEnumerationError(f"{context}: {error}", cause=error)
        return EnumerationError(f"{context}: {error}", cause=error)

    @staticmethod
    def parse_int(value: Optional[str]) -> Optional[int]:
        """Parse an integer attribute, None when absent or malformed"""
        if value is None:
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None
