"""Turn selected boundaries into per-folder migration recommendations."""
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from boundary_analysis.paths import share_parts
from boundary_analysis.records import (
    FolderPermissionProfile,
    MigrationMapping,
    PermissionBoundary,
    RecommendedAction,
)

DEFAULT_SITE_DEPTH_THRESHOLD = 4
DISPLAY_SEPARATOR = "; "


def recommend_action(depth: int, site_depth_threshold: int = DEFAULT_SITE_DEPTH_THRESHOLD) -> RecommendedAction:
    if depth <= site_depth_threshold:
        return RecommendedAction.CREATE_SITE_OR_LIBRARY
    return RecommendedAction.FOLDER_LEVEL_PERMISSION


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if it not in seen:
            seen.add(it)
            out.append(it)
    return out


def generate_mappings(
    boundaries: Iterable[PermissionBoundary],
    profiles: Mapping[str, FolderPermissionProfile],
    site_depth_threshold: int = DEFAULT_SITE_DEPTH_THRESHOLD,
    share_segment_index: Optional[int] = None,
) -> List[MigrationMapping]:
    out: List[MigrationMapping] = []
    for b in boundaries:
        prof = profiles.get(b.path)
        entries = prof.explicit_entries if prof else ()
        share, rel = share_parts(b.path, share_segment_index)
        out.append(MigrationMapping(
            path=b.path,
            share_name=share,
            relative_path=rel,
            folder_depth=b.depth,
            identities=DISPLAY_SEPARATOR.join(_unique(e[0] for e in entries)),
            permissions=DISPLAY_SEPARATOR.join(_unique(f"{i}: {r} ({a})" for i, r, a in entries)),
            recommended_action=recommend_action(b.depth, site_depth_threshold),
            signature=b.signature,
        ))
    return out
