"""
netinventory Interfaces - User-facing entry points
"""

from .cli import InventoryCLI, create_app, run_cli

__all__ = [
    "InventoryCLI",
    "create_app",
    "run_cli",
]
