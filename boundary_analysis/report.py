"""Write analysis result sets to CSV (and optionally parquet)."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List

from boundary_analysis.pipeline import AnalysisResult
from boundary_analysis.records import RecommendedAction

ACTION_FILES = {
    RecommendedAction.CREATE_SITE_OR_LIBRARY.value: "boundary_mappings_site_or_library.csv",
    RecommendedAction.FOLDER_LEVEL_PERMISSION.value: "boundary_mappings_folder_level.csv",
}


def write_reports(result: AnalysisResult, out_dir: Path, run_name: str = "", parquet: bool = False) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for name, df in result.frames().items():
        out_file = out_dir / (name + ".csv")
        df.to_csv(out_file, index=False)
        written.append(out_file)
        if parquet:
            pq_file = out_dir / (name + ".parquet")
            df.to_parquet(pq_file, index=False)
            written.append(pq_file)

    written.append(write_summary(out_dir, run_name, result.summary()))
    return written


def write_summary(out_dir: Path, run_name: str, counts: Dict[str, int]) -> Path:
    out_file = out_dir / "summary.csv"
    with out_file.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["run"] + list(counts.keys()))
        writer.writerow([run_name] + list(counts.values()))
    return out_file


def split_mappings_by_action(inpath: Path, out_dir: Path) -> List[Path]:
    """Split boundary_mappings.csv into one file per RecommendedAction."""
    out_dir.mkdir(parents=True, exist_ok=True)
    outs = {action: out_dir / fname for action, fname in ACTION_FILES.items()}

    with inpath.open("r", encoding="utf-8", newline="") as inf:
        rdr = csv.DictReader(inf)
        fieldnames = list(rdr.fieldnames or [])
        files = {action: path.open("w", encoding="utf-8", newline="") for action, path in outs.items()}
        try:
            writers = {action: csv.DictWriter(f, fieldnames=fieldnames) for action, f in files.items()}
            for w in writers.values():
                if fieldnames:
                    w.writeheader()
            for row in rdr:
                action = row.get("RecommendedAction") or ""
                if action in writers:
                    writers[action].writerow(row)
        finally:
            for f in files.values():
                f.close()

    return list(outs.values())
