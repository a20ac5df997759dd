"""Convert ingested ACE rows (dicts, DataFrames, parquet dirs) into PermissionRecords.

Expected columns (lowercase): folder_path, ace_name, ace_sid, ace_mask, ace_type, ace_inherited.

Rows are converted one to one, even when malformed, so rejection (and its
index) happens in a single place: `profiles.build_profiles`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from boundary_analysis.records import AccessType, PermissionRecord, render_rights

EXPECTED_COLUMNS = ("folder_path", "ace_name", "ace_sid", "ace_mask", "ace_type", "ace_inherited")


def _blank(v: Any) -> bool:
    if v is None:
        return True
    try:
        if pd.isna(v):
            return True
    except (TypeError, ValueError):
        pass
    return not str(v).strip() or str(v).strip().lower() == "nan"


def _unwrap(v: Any) -> Any:
    # ConvertTo-Json principal objects: {"Value": "CORP\\Finance"}
    if isinstance(v, dict):
        for key in ("Value", "value"):
            if v.get(key) is not None:
                return v[key]
        return None
    return v


def _to_bool(v: Any) -> bool:
    if _blank(v):
        return False
    if isinstance(v, str):
        return v.strip().lower() in ("true", "1", "yes", "y")
    return bool(v)


def row_to_record(row: Dict[str, Any]) -> PermissionRecord:
    folder = "" if _blank(row.get("folder_path")) else str(row.get("folder_path")).strip()
    name = _unwrap(row.get("ace_name"))
    if _blank(name):
        # orphaned SIDs come through with no resolved name
        name = _unwrap(row.get("ace_sid"))
    identity = "" if _blank(name) else str(name).strip()
    raw_type = row.get("ace_type")
    # collectors that omit the type only export allow entries
    access = AccessType.ALLOW if _blank(raw_type) else (AccessType.parse(raw_type) or raw_type)
    mask = row.get("ace_mask")
    return PermissionRecord(
        folder_path=folder,
        identity=identity,
        rights="" if _blank(mask) else render_rights(mask),
        access_type=access,  # type: ignore[arg-type]
        inherited=_to_bool(row.get("ace_inherited")),
    )


def records_from_rows(rows: Iterable[Dict[str, Any]]) -> List[PermissionRecord]:
    return [row_to_record(r) for r in rows]


def records_from_frame(df: pd.DataFrame) -> List[PermissionRecord]:
    df = df.copy()
    df.columns = [str(c).lower() for c in df.columns]
    for needed in EXPECTED_COLUMNS:
        if needed not in df.columns:
            df[needed] = None
    rows: List[Dict[str, Any]] = df[list(EXPECTED_COLUMNS)].to_dict(orient="records")  # type: ignore[pandas-stubs]
    return records_from_rows(rows)


def load_parquet_dir(parquet_dir: Path) -> pd.DataFrame:
    files = sorted(Path(parquet_dir).glob("*.parquet"))
    dfs: List[pd.DataFrame] = []
    for f in files:
        try:
            df = pd.read_parquet(f)  # type: ignore[pandas-stubs]
        except Exception as e:
            print(f"Failed to read {f}: {e}")
            continue
        df.columns = [c.lower() for c in df.columns]
        dfs.append(df)
    if not dfs:
        return pd.DataFrame(columns=list(EXPECTED_COLUMNS))
    return pd.concat(dfs, ignore_index=True)  # type: ignore[pandas-stubs]
