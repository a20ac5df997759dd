#!/usr/bin/env python3
"""Run a set of common DuckDB queries against a written report directory and write CSV outputs.

Usage:
  python -m boundary_analysis.report_queries --report out/analysis/run-20260206-160959 --out out/analysis/queries

Requirements: `duckdb` Python package (pip install duckdb)
"""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List

import duckdb

SQL_QUERIES = {
    'boundaries_per_share': '''
SELECT
  ShareName,
  RecommendedAction,
  COUNT(*) AS boundary_count
FROM read_csv_auto('{report}/boundary_mappings.csv', header=true, all_varchar=true)
GROUP BY ShareName, RecommendedAction
ORDER BY boundary_count DESC, ShareName;''',

    'deepest_boundaries': '''
SELECT ShareName, RelativePath, TRY_CAST(FolderDepth AS INTEGER) AS FolderDepth, Identities, Permissions
FROM read_csv_auto('{report}/boundary_mappings.csv', header=true, all_varchar=true)
ORDER BY FolderDepth DESC, ShareName, RelativePath
LIMIT 200;''',

    'widest_identities': '''
SELECT
  Identity,
  TRY_CAST(FolderCount AS BIGINT) AS FolderCount,
  TRY_CAST(OccurrenceCount AS BIGINT) AS OccurrenceCount,
  TRY_CAST(UniquePermissionCount AS BIGINT) AS UniquePermissionCount
FROM read_csv_auto('{report}/identity_summary.csv', header=true, all_varchar=true)
ORDER BY FolderCount DESC, Identity
LIMIT 200;''',

    'deny_entries': '''
SELECT Identity, Rights, TRY_CAST("Count" AS BIGINT) AS "Count", SamplePath
FROM read_csv_auto('{report}/unique_ace_combinations.csv', header=true, all_varchar=true)
WHERE AccessType = 'Deny'
ORDER BY "Count" DESC, Identity;''',

    'high_rights_combinations': '''
SELECT Identity, Rights, AccessType, TRY_CAST("Count" AS BIGINT) AS "Count", SamplePath
FROM read_csv_auto('{report}/unique_ace_combinations.csv', header=true, all_varchar=true)
WHERE LOWER(Rights) LIKE '%full%' OR LOWER(Rights) LIKE '%modify%' OR LOWER(Rights) LIKE '%write%'
ORDER BY "Count" DESC, Identity
LIMIT 1000;''',
}


def run_queries(report_dir: Path, out_dir: Path) -> Dict[str, Path]:
    con = duckdb.connect(database=':memory:')
    out_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}
    failed: List[str] = []
    for name, sql in SQL_QUERIES.items():
        q = sql.format(report=report_dir.as_posix())
        print(f'Running: {name}')
        try:
            df = con.execute(q).fetchdf()
        except duckdb.Error as e:
            print(f'Failed running {name}: {e}')
            failed.append(name)
            continue
        out_file = out_dir / (name + '.csv')
        df.to_csv(out_file, index=False)
        written[name] = out_file
        print(f'Wrote: {out_file}')
    con.close()
    if failed:
        print(f'{len(failed)} queries failed: {", ".join(failed)}')
    return written


if __name__ == '__main__':
    p = argparse.ArgumentParser()
    p.add_argument('--report', required=True, help='Path to a report directory written by run.py analyze')
    p.add_argument('--out', required=True, help='Output directory for CSVs')
    args = p.parse_args()
    run_queries(Path(args.report), Path(args.out))
