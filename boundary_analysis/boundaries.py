"""Select permission boundaries from folder profiles.

The default ``deepest`` mode keeps one folder per distinct explicit signature:
profiles are walked deepest first (ties broken by path) and the first holder
of a signature wins. Folders in unrelated branches that carry the same
signature collapse into that one boundary.

``subtrees`` mode instead reports every folder whose signature is not already
held by one of its ancestors, i.e. the top of each subtree sharing a
signature.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Set

from boundary_analysis.paths import is_ancestor, split_segments
from boundary_analysis.records import INHERITED_ONLY, FolderPermissionProfile, PermissionBoundary

BOUNDARY_MODES = ("deepest", "subtrees")


def _candidates(profiles: Mapping[str, FolderPermissionProfile]) -> List[FolderPermissionProfile]:
    return [p for p in profiles.values() if p.signature != INHERITED_ONLY and p.explicit_count > 0]


def _to_boundary(profile: FolderPermissionProfile) -> PermissionBoundary:
    return PermissionBoundary(
        path=profile.path,
        depth=profile.depth,
        signature=profile.signature,
        identities=tuple(sorted({e[0] for e in profile.explicit_entries})),
        rights=tuple(sorted({e[1] for e in profile.explicit_entries})),
    )


def _select_deepest(cands: List[FolderPermissionProfile]) -> List[PermissionBoundary]:
    ordered = sorted(cands, key=lambda p: (-p.depth, p.path))
    claimed: Set[str] = set()
    out: List[PermissionBoundary] = []
    for prof in ordered:
        if prof.signature in claimed:
            continue
        claimed.add(prof.signature)
        out.append(_to_boundary(prof))
    return out


def _select_subtrees(cands: List[FolderPermissionProfile]) -> List[PermissionBoundary]:
    by_sig: Dict[str, List[FolderPermissionProfile]] = {}
    for prof in cands:
        by_sig.setdefault(prof.signature, []).append(prof)

    out: List[FolderPermissionProfile] = []
    for holders in by_sig.values():
        # shallow first so a kept ancestor is seen before its descendants
        holders.sort(key=lambda p: (len(split_segments(p.path)), p.path))
        tops: List[FolderPermissionProfile] = []
        for prof in holders:
            if any(is_ancestor(t.path, prof.path) for t in tops):
                continue
            tops.append(prof)
        out.extend(tops)
    out.sort(key=lambda p: (-p.depth, p.path))
    return [_to_boundary(p) for p in out]


def select_boundaries(profiles: Mapping[str, FolderPermissionProfile], mode: str = "deepest") -> List[PermissionBoundary]:
    if mode not in BOUNDARY_MODES:
        raise ValueError(f"unknown boundary mode: {mode!r} (expected one of {', '.join(BOUNDARY_MODES)})")
    cands = _candidates(profiles)
    if mode == "subtrees":
        return _select_subtrees(cands)
    return _select_deepest(cands)
