import argparse
import json
import sys
from pathlib import Path

import pandas as pd

# Ensure repo root is on sys.path so `boundary_analysis` and `run` are importable from tests
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from boundary_analysis.ingest_acls import extract_acls_from_json, process_run
from boundary_analysis.loader import load_parquet_dir, records_from_frame
from boundary_analysis.records import AccessType

import run


def make_sample_run(tmp_path: Path) -> Path:
    run_dir = tmp_path / "runs" / "run-test-1"
    folderacls = run_dir / "folderacls"
    folderacls.mkdir(parents=True, exist_ok=True)
    sample = [
        {
            "UncPath": "\\\\filer01\\share\\folder1",
            "CollectedUtc": "2026-02-09T12:00:00Z",
            "Owner": "owner",
            "Access": [
                {"Identity": "Domain Users", "Rights": "Modify", "Type": "Allow", "IsInherited": False},
                {"Identity": "Admins", "Rights": "FullControl", "Type": "Allow", "IsInherited": False},
            ],
        },
        {
            "UncPath": "\\\\filer01\\share\\folder1\\sub\\",
            "Access": [
                {"Identity": "Domain Users", "Rights": "Modify", "Type": "Allow", "IsInherited": True},
                {"Identity": "Contractors", "Rights": "Modify", "AccessControlType": 1, "IsInherited": False},
            ],
        },
        {"Path": "", "Access": [{"Identity": "Lost", "Rights": "Read"}]},
    ]
    with open(folderacls / "sample.json", "w", encoding="utf-8") as fh:
        json.dump(sample, fh)
    (folderacls / "broken.json").write_text("{not json", encoding="utf-8")
    (folderacls / "forensic-acl-1.0.0.schema.json").write_text("{}", encoding="utf-8")
    return run_dir


def test_extract_rows_from_nested_document():
    doc = {"results": {"items": [{"Path": "\\\\f\\s\\a", "Aces": [{"name": "Bob", "mask": 2032127}]}]}}
    rows = list(extract_acls_from_json(doc, "x.json"))
    assert len(rows) == 1
    assert rows[0]["folder_path"] == "\\\\f\\s\\a"
    assert rows[0]["ace_name"] == "Bob"
    assert rows[0]["ace_mask"] == "2032127"


def test_process_run_writes_parquet(tmp_path: Path):
    run_dir = make_sample_run(tmp_path)
    out_dir = tmp_path / "out"
    target = process_run(str(run_dir), str(out_dir))

    assert target == out_dir / run_dir.name
    files = list(target.glob("*.parquet"))
    assert len(files) == 1

    df = pd.read_parquet(files[0])
    expected_cols = {"source_file", "folder_path", "ace_sid", "ace_name", "ace_type", "ace_mask", "ace_inherited", "ace_raw"}
    assert expected_cols.issubset(set(df.columns))
    assert len(df) == 5
    # trailing separator stripped at ingest
    assert "\\\\filer01\\share\\folder1\\sub" in set(df["folder_path"])


def test_records_from_ingested_parquet(tmp_path: Path):
    run_dir = make_sample_run(tmp_path)
    target = process_run(str(run_dir), str(tmp_path / "out"))
    recs = records_from_frame(load_parquet_dir(target))
    assert len(recs) == 5
    deny = [r for r in recs if r.identity == "Contractors"]
    assert deny and deny[0].access_type is AccessType.DENY and deny[0].inherited is False
    # rows without a type default to Allow, rows without a path are kept for rejection
    lost = [r for r in recs if r.identity == "Lost"]
    assert lost[0].folder_path == "" and lost[0].access_type is AccessType.ALLOW


def test_records_fall_back_to_sid_for_identity():
    df = pd.DataFrame([
        {"folder_path": "\\\\f\\s\\a", "ace_name": None, "ace_sid": "S-1-5-21-9999", "ace_mask": "1245631",
         "ace_type": "allow", "ace_inherited": "False"},
    ])
    rec = records_from_frame(df)[0]
    assert rec.identity == "S-1-5-21-9999"
    assert rec.rights == "Modify"
    assert rec.inherited is False


def test_run_analyze_end_to_end(tmp_path: Path):
    run_dir = make_sample_run(tmp_path)
    args = argparse.Namespace(
        run_path=str(run_dir),
        out_parquet=str(tmp_path / "parquet"),
        out_dir=str(tmp_path / "analysis"),
        settings=None,
        site_depth_threshold=None,
        boundary_mode=None,
        share_index=None,
        parquet=False,
        split=True,
        skip_ingest=False,
    )
    assert run.run_analyze(args) == 0

    report_dir = tmp_path / "analysis" / run_dir.name
    mappings = pd.read_csv(report_dir / "boundary_mappings.csv")
    assert sorted(mappings["RelativePath"]) == ["folder1", "folder1\\sub"]
    assert set(mappings["ShareName"]) == {"share"}
    rejected = pd.read_csv(report_dir / "rejected_records.csv")
    assert len(rejected) == 1
    assert (report_dir / "boundary_mappings_site_or_library.csv").exists()


def test_mixed_inherited_values_still_write_every_file(tmp_path: Path):
    run_dir = tmp_path / "runs" / "run-mixed"
    folderacls = run_dir / "folderacls"
    folderacls.mkdir(parents=True)
    mixed = [{"UncPath": "\\\\filer01\\share\\a", "Access": [
        {"Identity": "G1", "Rights": "Modify", "Type": "Allow", "IsInherited": True},
        {"Identity": "G2", "Rights": "Read", "Type": "Allow", "IsInherited": "False"},
    ]}]
    good = [{"UncPath": "\\\\filer01\\share\\b", "Access": [
        {"Identity": "G3", "Rights": "Read", "Type": "Allow", "IsInherited": False},
    ]}]
    (folderacls / "a_mixed.json").write_text(json.dumps(mixed), encoding="utf-8")
    (folderacls / "b_good.json").write_text(json.dumps(good), encoding="utf-8")

    target = process_run(str(run_dir), str(tmp_path / "out"))
    assert sorted(p.name for p in target.glob("*.parquet")) == ["a_mixed.parquet", "b_good.parquet"]

    recs = {r.identity: r for r in records_from_frame(load_parquet_dir(target))}
    assert recs["G1"].inherited is True
    assert recs["G2"].inherited is False
    assert recs["G3"].inherited is False


def test_failed_parquet_write_skips_only_that_file(tmp_path: Path, monkeypatch):
    run_dir = tmp_path / "runs" / "run-flaky"
    folderacls = run_dir / "folderacls"
    folderacls.mkdir(parents=True)
    for stem in ("a_bad", "b_good"):
        entry = [{"UncPath": "\\\\filer01\\share\\" + stem, "Access": [{"Identity": "G1", "Rights": "Read"}]}]
        (folderacls / (stem + ".json")).write_text(json.dumps(entry), encoding="utf-8")

    original = pd.DataFrame.to_parquet

    def flaky_to_parquet(self, path, *args, **kwargs):
        if "a_bad" in Path(path).name:
            raise ValueError("Could not convert 'False' with type str")
        return original(self, path, *args, **kwargs)

    monkeypatch.setattr(pd.DataFrame, "to_parquet", flaky_to_parquet)
    target = process_run(str(run_dir), str(tmp_path / "out"))
    assert [p.name for p in target.glob("*.parquet")] == ["b_good.parquet"]


def test_identity_reference_objects_are_unwrapped(tmp_path: Path):
    from boundary_analysis.pipeline import run_pipeline

    doc = [{"Path": "\\\\filer01\\Finance\\Team", "Access": [
        {"IdentityReference": {"Value": "CORP\\Finance"}, "FileSystemRights": 1245631,
         "AccessControlType": 0, "IsInherited": False},
    ]}]
    rows = list(extract_acls_from_json(doc, "acl.json"))
    assert rows[0]["ace_name"] == "CORP\\Finance"
    assert rows[0]["ace_inherited"] == "False"

    result = run_pipeline(records_from_frame(pd.DataFrame(rows)))
    assert result.mappings[0].identities == "CORP\\Finance"
    assert result.mappings[0].signature == "CORP\\Finance|Modify|Allow"


def test_loader_unwraps_principal_objects_in_rows():
    df = pd.DataFrame([{"folder_path": "\\\\f\\s\\a", "ace_name": {"value": "CORP\\HR"}, "ace_mask": "Read"}])
    assert records_from_frame(df)[0].identity == "CORP\\HR"
