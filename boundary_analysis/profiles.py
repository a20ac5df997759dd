"""Group permission records by folder and fingerprint each folder's explicit ACEs.

Functions exposed for tests: `compute_signature`, `build_profiles`.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from boundary_analysis.paths import normalize_path, path_depth
from boundary_analysis.records import (
    INHERITED_ONLY,
    AccessType,
    FolderPermissionProfile,
    PermissionRecord,
    RejectedRecord,
    render_rights,
)

Entry = Tuple[str, str, str]

DEFAULT_SIGNATURE_SEPARATOR = ";"


@dataclass(frozen=True)
class ProfileBuildResult:
    profiles: Dict[str, FolderPermissionProfile]
    rejected: Tuple[RejectedRecord, ...]
    accepted: Tuple[PermissionRecord, ...]

    @property
    def skipped_count(self) -> int:
        return len(self.rejected)


def compute_signature(entries: Iterable[Entry], separator: str = DEFAULT_SIGNATURE_SEPARATOR) -> str:
    canon = sorted(set(entries))
    if not canon:
        return INHERITED_ONLY
    return separator.join(f"{i}|{r}|{a}" for i, r, a in canon)


def _reject_reason(rec: object) -> Optional[str]:
    if not isinstance(rec, PermissionRecord):
        return f"not a PermissionRecord: {type(rec).__name__}"
    if not isinstance(rec.folder_path, str) or not rec.folder_path.strip():
        return "missing folder path"
    if not isinstance(rec.identity, str) or not rec.identity.strip():
        return "missing identity"
    if not isinstance(rec.access_type, AccessType):
        return f"unknown access type: {rec.access_type!r}"
    return None


def build_profiles(
    records: Optional[Sequence[PermissionRecord]],
    share_segment_index: Optional[int] = None,
    signature_separator: str = DEFAULT_SIGNATURE_SEPARATOR,
) -> ProfileBuildResult:
    if records is None:
        raise ValueError("records must be a collection, not None")

    groups: Dict[str, List[PermissionRecord]] = {}
    rejected: List[RejectedRecord] = []
    accepted: List[PermissionRecord] = []
    for idx, rec in enumerate(records):
        reason = _reject_reason(rec)
        if reason:
            rejected.append(RejectedRecord(index=idx, reason=reason, record=rec))
            continue
        path = normalize_path(rec.folder_path)
        identity = rec.identity.strip()
        rights = rec.rights if isinstance(rec.rights, str) else render_rights(rec.rights)
        if (path, identity, rights) != (rec.folder_path, rec.identity, rec.rights):
            rec = PermissionRecord(path, identity, rights, rec.access_type, bool(rec.inherited))
        groups.setdefault(path, []).append(rec)
        accepted.append(rec)

    if rejected:
        print(f"Warning: skipped {len(rejected)} malformed permission records", file=sys.stderr)

    profiles: Dict[str, FolderPermissionProfile] = {}
    for path, recs in groups.items():
        explicit = [r for r in recs if not r.inherited]
        entries = sorted({r.entry for r in explicit})
        identities: Set[str] = {r.identity for r in recs}
        profiles[path] = FolderPermissionProfile(
            path=path,
            depth=path_depth(path, share_segment_index),
            explicit_entries=tuple(entries),
            signature=compute_signature(entries, signature_separator),
            explicit_count=len(explicit),
            total_count=len(recs),
            unique_identity_count=len(identities),
        )

    return ProfileBuildResult(profiles=profiles, rejected=tuple(rejected), accepted=tuple(accepted))
