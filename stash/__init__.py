"""
Stash - Source Package

A personal savings tracker. The user records dated snapshots of their
account balances and watches the totals move over time.

DESIGN PRINCIPLES:
1. The in-memory store is the source of truth, the JSON file mirrors it
2. Every change goes through the store, never around it
3. Chart data is derived, never stored
4. Failures are surfaced to the user, never retried silently
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Stash Team"
