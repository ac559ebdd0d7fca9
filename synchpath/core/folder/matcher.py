"""
Name matching between two listings of the same directory level.
"""

from __future__ import annotations

from typing import Collection, Optional, Sequence

from synchpath.core.models import (
    DirectoryEntry,
    MatchPartition,
    MatchState,
)


def find_match(
    source_entry: DirectoryEntry,
    target_listing: Sequence[DirectoryEntry],
    exclude: Collection[int] = ()
) -> Optional[int]:
    """
    Find the target entry whose name equals ``source_entry.name``.

    Comparison is exact and case-sensitive. Indices in ``exclude``
    (targets already claimed by another source entry) are skipped.

    Returns:
        Index of the first match in listing order, or None.
    """
    for index, target_entry in enumerate(target_listing):
        if index in exclude:
            continue
        if target_entry.name == source_entry.name:
            return index
    return None


def partition_entries(
    source_listing: Sequence[DirectoryEntry],
    target_listing: Sequence[DirectoryEntry]
) -> MatchPartition:
    """
    Split two listings into matched pairs and leftovers.

    Every target entry ends up either in exactly one pair or in
    ``remaining_target``; every source entry either in exactly one
    pair or in ``unmatched_source``.
    """
    partition = MatchPartition(states=[MatchState.UNMATCHED] * len(source_listing))
    matched_targets: set[int] = set()

    for position, source_entry in enumerate(source_listing):
        index = find_match(source_entry, target_listing, matched_targets)
        if index is None:
            partition.unmatched_source.append(source_entry)
            continue

        matched_targets.add(index)
        partition.states[position] = MatchState.MATCHED
        partition.pairs.append((source_entry, target_listing[index]))

    partition.remaining_target = [
        entry for index, entry in enumerate(target_listing)
        if index not in matched_targets
    ]
    return partition
