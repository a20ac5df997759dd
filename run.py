#!/usr/bin/env python3
"""Single entrypoint for ingestion, boundary analysis, report queries and tests.

Usage:
  python run.py ingest --run-path runs/run-20260202-124902 --out-parquet out/parquet
  python run.py analyze --run-path runs/run-20260202-124902 --out-parquet out/parquet --out-dir out/analysis
  python run.py query --report out/analysis/run-20260202-124902
  python run.py test
"""
from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path


def run_ingest(args: argparse.Namespace) -> int:
    from boundary_analysis import ingest_acls

    target = ingest_acls.process_run(args.run_path, args.out_parquet, preview=args.preview)
    return 0 if target else 3


def run_analyze(args: argparse.Namespace) -> int:
    # import local modules
    from boundary_analysis import ingest_acls, loader, report
    from boundary_analysis.config import SETTINGS_PATH, load_settings
    from boundary_analysis.pipeline import run_pipeline

    run_path = args.run_path
    settings_path = Path(args.settings) if args.settings else SETTINGS_PATH
    try:
        settings = load_settings(settings_path)
        settings = settings.override(
            site_depth_threshold=args.site_depth_threshold,
            boundary_mode=args.boundary_mode,
            share_segment_index=args.share_index,
        )
    except (OSError, ValueError) as e:
        print(f"Invalid settings: {e}")
        return 2

    # ingest -> parquet
    if not args.skip_ingest:
        print(f"Ingesting run {run_path} -> {args.out_parquet}")
        ingest_acls.process_run(run_path, args.out_parquet)

    # determine parquet dir for this run
    run_id = Path(run_path).name
    parquet_dir = Path(args.out_parquet) / run_id
    if not parquet_dir.exists():
        print(f"Parquet directory not found: {parquet_dir}")
        return 2

    df = loader.load_parquet_dir(parquet_dir)
    records = loader.records_from_frame(df)
    print(f"Loaded {len(records)} ACE rows from {parquet_dir}")

    result = run_pipeline(records, settings)
    if result.skipped_count:
        print(f"Skipped {result.skipped_count} malformed records (see rejected_records.csv)")

    out_dir = Path(args.out_dir) / run_id
    written = report.write_reports(result, out_dir, run_name=run_id, parquet=args.parquet)
    for w in written:
        print(f"Wrote: {w}")

    if args.split:
        report.split_mappings_by_action(out_dir / "boundary_mappings.csv", out_dir)
        print(f"Wrote recommended-action split files to {out_dir}")

    s = result.summary()
    print(f"Folders: {s['folders']}  Boundaries: {s['boundaries']}  Identities: {s['identities']}")
    return 0


def run_query(args: argparse.Namespace) -> int:
    from boundary_analysis import report_queries

    report_dir = Path(args.report)
    if not (report_dir / "boundary_mappings.csv").exists():
        print(f"Report directory not found or incomplete: {report_dir}")
        return 2
    out_dir = Path(args.out) if args.out else report_dir / "queries"
    written = report_queries.run_queries(report_dir, out_dir)
    return 0 if len(written) == len(report_queries.SQL_QUERIES) else 4


def run_tests(args: argparse.Namespace) -> int:
    # Run pytest using the same Python interpreter
    print("Running pytest...")
    res = subprocess.run([sys.executable, '-m', 'pytest', '-q'])
    py_res = res.returncode

    # Run pyright if available
    from shutil import which

    pr = which('pyright') or which(str(Path('.venv') / 'Scripts' / 'pyright'))
    if pr:
        print("Running pyright...")
        pr_res = subprocess.run([pr])
        return pr_res.returncode or py_res
    return py_res


def main():
    p = argparse.ArgumentParser(prog='run.py')
    sp = p.add_subparsers(dest='cmd')

    i = sp.add_parser('ingest')
    i.add_argument('--run-path', required=True)
    i.add_argument('--out-parquet', default='out/parquet')
    i.add_argument('--preview', action='store_true')

    a = sp.add_parser('analyze')
    a.add_argument('--run-path', required=True)
    a.add_argument('--out-parquet', default='out/parquet')
    a.add_argument('--out-dir', default='out/analysis')
    a.add_argument('--settings', default=None, help='Settings JSON (defaults to boundary_analysis/settings.json)')
    a.add_argument('--site-depth-threshold', type=int, default=None,
                   help='Deepest folder depth that still gets its own site or library')
    a.add_argument('--boundary-mode', choices=['deepest', 'subtrees'], default=None)
    a.add_argument('--share-index', type=int, default=None, help='Path segment index of the share name')
    a.add_argument('--parquet', action='store_true', help='Also write parquet copies of each report')
    a.add_argument('--split', action='store_true', help='Write per-RecommendedAction split CSVs')
    a.add_argument('--skip-ingest', action='store_true', help='Skip ingestion and use existing parquet')

    q = sp.add_parser('query')
    q.add_argument('--report', required=True, help='Report directory written by analyze')
    q.add_argument('--out', default=None)

    sp.add_parser('test')

    args = p.parse_args()
    handlers = {'ingest': run_ingest, 'analyze': run_analyze, 'query': run_query, 'test': run_tests}
    handler = handlers.get(args.cmd)
    if handler is None:
        p.print_help()
        return
    raise SystemExit(handler(args))


if __name__ == '__main__':
    main()
