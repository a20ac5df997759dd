#!/usr/bin/env python3
"""Ingest collector folder ACL JSON files into Parquet files of flat ACE rows.

Usage:
  python -m boundary_analysis.ingest_acls --run-path runs/run-20260202-124902 --out-dir out/parquet

Each folderacls/*.json file holds folder entries such as
  {"UncPath": "\\\\filer\\share\\folder", "Access": [{"Identity": ..., "Rights": ...,
   "Type": "Allow", "IsInherited": false}, ...]}
and becomes one parquet file with one row per ACE.
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import pandas as pd
from tqdm import tqdm

from boundary_analysis.paths import normalize_path

ACL_KEYS = ("acl", "acls", "aces", "acllist", "access", "accesslist", "permissions")
SCHEMA_SUFFIX = ".schema.json"


def find_folderacl_files(run_path: Path) -> List[Path]:
    p1 = run_path / "folderacls"
    if p1.exists():
        files = sorted(p1.glob("*.json"))
    else:
        # fallback: search recursively
        files = sorted(Path(run_path).rglob("*folderacls/*.json"))
    return [f for f in files if not f.name.endswith(SCHEMA_SUFFIX)]


def _get_ci(d: Dict[str, Any], *keys: str) -> Any:
    low = {k.lower(): v for k, v in d.items()}
    for key in keys:
        v = low.get(key.lower())
        if v is not None:
            return v
    return None


def _text(v: Any) -> Optional[str]:
    """Flatten a JSON value to text so every parquet column has one type.

    ConvertTo-Json writes principals as objects such as
    {"Value": "CORP\\Finance"}; those are unwrapped through their Value key.
    """
    if isinstance(v, dict):
        v = _get_ci(v, "Value")
    if v is None:
        return None
    return str(v)


def _find_acl_nodes(obj: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(obj, dict):
        if any(k.lower() in ACL_KEYS and isinstance(v, list) for k, v in obj.items()):
            yield obj
            return
        for v in obj.values():
            yield from _find_acl_nodes(v)
    elif isinstance(obj, list):
        for item in obj:
            yield from _find_acl_nodes(item)


def _acl_list(node: Dict[str, Any]) -> List[Any]:
    for k, v in node.items():
        if k.lower() in ACL_KEYS and isinstance(v, list):
            return v
    return []


def extract_acls_from_json(data: Any, source_file: str) -> Iterable[Dict[str, Any]]:
    """Traverse a JSON document and yield one flat row per ACE.

    Folder entries are found by looking for an ACL-like list ('Access', 'Aces',
    ...). The folder path comes from 'UncPath', 'Path' or 'FolderPath'; an entry
    without one is still emitted with an empty folder_path so the analysis can
    count it as rejected instead of silently losing it.
    """
    for node in _find_acl_nodes(data):
        raw_path: Optional[Any] = _get_ci(node, "UncPath", "Path", "FolderPath", "FullName")
        folder_path = normalize_path(str(raw_path)) if raw_path else ""
        share_name = _text(_get_ci(node, "ShareName", "SharePath"))
        collected_utc = _text(_get_ci(node, "CollectedUtc"))
        owner = _text(_get_ci(node, "Owner"))

        for ace in _acl_list(node):
            if isinstance(ace, dict):
                sid = _get_ci(ace, "sid", "principalid", "accountid")
                name = _get_ci(ace, "identity", "identityreference", "name", "displayname", "account",
                               "accountname", "principal", "trustee")
                ace_type = _get_ci(ace, "type", "accesscontroltype", "ace_type", "acetype")
                mask = _get_ci(ace, "rights", "filesystemrights", "mask", "accessmask", "permissions")
                inherited = _get_ci(ace, "isinherited", "inherited")
            else:
                sid = name = ace_type = mask = inherited = None

            yield {
                "source_file": source_file,
                "folder_path": folder_path,
                "share_name": share_name,
                "ace_sid": _text(sid),
                "ace_name": _text(name),
                "ace_type": _text(ace_type),
                "ace_mask": _text(mask),
                "ace_inherited": _text(inherited),
                "ace_raw": json.dumps(ace, ensure_ascii=False) if not isinstance(ace, str) else ace,
                "collected_utc": collected_utc,
                "owner": owner,
            }


def process_run(run_path: str, out_dir: str, preview: bool = False) -> Optional[Path]:
    run_path_p = Path(run_path)
    if not run_path_p.exists():
        raise SystemExit(f"Run path does not exist: {run_path}")

    files = find_folderacl_files(run_path_p)
    if not files:
        print(f"No folder ACL JSON files found under {run_path}")
        return None

    target_dir = Path(out_dir) / run_path_p.name
    # create target directory only when not previewing (preview only lists paths)
    if not preview:
        target_dir.mkdir(parents=True, exist_ok=True)

    for f in tqdm(files, desc="processing files"):
        try:
            with open(f, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            print(f"Failed to parse {f}: {e}")
            continue

        rows = list(extract_acls_from_json(data, str(f)))
        if not rows:
            continue

        out_file = target_dir / (f.stem + ".parquet")
        print(str(out_file))
        if preview:
            continue
        try:
            pd.DataFrame(rows).to_parquet(out_file, index=False)
        except (ValueError, TypeError, OSError) as e:
            # pyarrow's ArrowInvalid / ArrowTypeError derive from these
            print(f"Failed to write parquet for {f}: {e}")
            if out_file.exists():
                out_file.unlink()

    print(f"Finished. Parquet files written to: {target_dir}")
    return target_dir


def main():
    parser = argparse.ArgumentParser(description="Ingest folder ACL JSON files to Parquet")
    parser.add_argument("--run-path", required=True, help="Path to a run directory (e.g., runs/run-20260202-124902)")
    parser.add_argument("--out-dir", required=True, help="Output directory for Parquet files")
    parser.add_argument("--preview", action="store_true", help="Print the target Parquet paths and do not write files")
    args = parser.parse_args()
    process_run(args.run_path, args.out_dir, preview=args.preview)


if __name__ == "__main__":
    main()
