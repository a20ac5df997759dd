"""Run the whole analysis: records -> profiles -> (boundaries, aggregates) -> mappings.

`AnalysisResult` exposes the four report views as flat rows and DataFrames
with fixed column names, so empty input still yields headed, empty tables.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from boundary_analysis.aggregate import identity_summary, unique_ace_combinations
from boundary_analysis.boundaries import select_boundaries
from boundary_analysis.config import Settings
from boundary_analysis.mapping import generate_mappings
from boundary_analysis.profiles import build_profiles
from boundary_analysis.records import (
    FolderPermissionProfile,
    MigrationMapping,
    PermissionBoundary,
    PermissionRecord,
    RejectedRecord,
)

VIEW_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "boundary_mappings": ("ShareName", "RelativePath", "FolderDepth", "Identities", "Permissions",
                          "RecommendedAction", "Path", "Signature"),
    "unique_ace_combinations": ("Identity", "Rights", "AccessType", "Count", "SamplePath"),
    "identity_summary": ("Identity", "OccurrenceCount", "UniquePermissionCount", "FolderCount"),
    "folder_profiles": ("Path", "Depth", "Signature", "ExplicitCount", "TotalCount", "UniqueIdentityCount"),
    "rejected_records": ("Index", "Reason", "FolderPath", "Identity"),
}


@dataclass(frozen=True)
class AnalysisResult:
    profiles: Dict[str, FolderPermissionProfile]
    boundaries: Tuple[PermissionBoundary, ...]
    mappings: Tuple[MigrationMapping, ...]
    ace_combinations: Tuple[Dict[str, Any], ...]
    identities: Tuple[Dict[str, Any], ...]
    rejected: Tuple[RejectedRecord, ...]
    record_count: int

    @property
    def skipped_count(self) -> int:
        return len(self.rejected)

    def views(self) -> Dict[str, List[Dict[str, Any]]]:
        profile_rows = [p.as_row() for p in sorted(self.profiles.values(), key=lambda p: (p.depth, p.path))]
        return {
            "boundary_mappings": [m.as_row() for m in self.mappings],
            "unique_ace_combinations": [dict(r) for r in self.ace_combinations],
            "identity_summary": [dict(r) for r in self.identities],
            "folder_profiles": profile_rows,
            "rejected_records": [r.as_row() for r in self.rejected],
        }

    def frames(self) -> Dict[str, pd.DataFrame]:
        return {name: pd.DataFrame(rows, columns=list(VIEW_COLUMNS[name])) for name, rows in self.views().items()}

    def summary(self) -> Dict[str, int]:
        return {
            "records": self.record_count,
            "skipped_records": self.skipped_count,
            "folders": len(self.profiles),
            "boundaries": len(self.boundaries),
            "unique_ace_combinations": len(self.ace_combinations),
            "identities": len(self.identities),
        }


def run_pipeline(records: Optional[Sequence[PermissionRecord]], settings: Optional[Settings] = None) -> AnalysisResult:
    s = settings or Settings()
    built = build_profiles(records, share_segment_index=s.share_segment_index, signature_separator=s.signature_separator)
    boundaries = select_boundaries(built.profiles, mode=s.boundary_mode)
    mappings = generate_mappings(boundaries, built.profiles, site_depth_threshold=s.site_depth_threshold,
                                 share_segment_index=s.share_segment_index)
    return AnalysisResult(
        profiles=built.profiles,
        boundaries=tuple(boundaries),
        mappings=tuple(mappings),
        ace_combinations=tuple(unique_ace_combinations(built.accepted)),
        identities=tuple(identity_summary(built.accepted)),
        rejected=built.rejected,
        record_count=len(built.accepted) + len(built.rejected),
    )
