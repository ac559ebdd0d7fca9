"""
Folder synchronization module.

Provides functionality for:
- Matching entries of two listings by name
- Recursive one-way reconciliation of a target tree
"""

from synchpath.core.folder.matcher import (
    find_match,
    partition_entries,
)
from synchpath.core.folder.reconcile import (
    Reconciler,
    SyncObserver,
    reconcile,
)

__all__ = [
    # Matcher
    'find_match',
    'partition_entries',
    # Reconciliation
    'Reconciler',
    'SyncObserver',
    'reconcile',
]
