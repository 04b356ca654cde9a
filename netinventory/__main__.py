"""
netinventory - Network adapter inventory

Entry point for running from command line:
    python -m netinventory

Or after installation:
    netinventory
"""

from .interfaces.cli import run_cli

if __name__ == "__main__":
    run_cli()
