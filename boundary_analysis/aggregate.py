"""Global identity and rights summaries over every accepted record.

These views ignore boundary selection entirely: they answer "who has what,
anywhere" and feed over-permission and orphaned-SID review.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Set, Tuple

from boundary_analysis.records import PermissionRecord


def unique_ace_combinations(records: Iterable[PermissionRecord]) -> List[Dict[str, Any]]:
    counts: Dict[Tuple[str, str, str], int] = {}
    samples: Dict[Tuple[str, str, str], str] = {}
    for rec in records:
        key = rec.entry
        counts[key] = counts.get(key, 0) + 1
        prev = samples.get(key)
        if prev is None or rec.folder_path < prev:
            samples[key] = rec.folder_path

    rows = [
        {
            "Identity": k[0],
            "Rights": k[1],
            "AccessType": k[2],
            "Count": c,
            "SamplePath": samples[k],
        }
        for k, c in counts.items()
    ]
    rows.sort(key=lambda r: (-r["Count"], r["Identity"], r["Rights"], r["AccessType"]))
    return rows


def identity_summary(records: Iterable[PermissionRecord]) -> List[Dict[str, Any]]:
    occ: Dict[str, int] = {}
    perms: Dict[str, Set[Tuple[str, str]]] = {}
    folders: Dict[str, Set[str]] = {}
    for rec in records:
        occ[rec.identity] = occ.get(rec.identity, 0) + 1
        perms.setdefault(rec.identity, set()).add((rec.rights, rec.access_type.value))
        folders.setdefault(rec.identity, set()).add(rec.folder_path)

    rows = [
        {
            "Identity": name,
            "OccurrenceCount": n,
            "UniquePermissionCount": len(perms[name]),
            "FolderCount": len(folders[name]),
        }
        for name, n in occ.items()
    ]
    rows.sort(key=lambda r: (-r["OccurrenceCount"], r["Identity"]))
    return rows
