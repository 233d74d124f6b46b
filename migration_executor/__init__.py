"""
Migration Executor - copy-offload host preparation and plan network checks.

Provides:
- vmkfstools-wrapper VIB reconciliation on ESXi hosts
- Datacenter resolution for ESXi hosts
- NIC-to-NetworkMap resolution and duplicate destination detection
"""

__version__ = "1.0.0"
