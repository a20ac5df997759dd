import sys
from pathlib import Path

# allow importing boundary_analysis package
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from boundary_analysis.aggregate import identity_summary, unique_ace_combinations
from boundary_analysis.boundaries import select_boundaries
from boundary_analysis.mapping import generate_mappings, recommend_action
from boundary_analysis.profiles import build_profiles
from boundary_analysis.records import AccessType, PermissionRecord, RecommendedAction


def make_rec(folder, identity, rights, access='Allow', inh=False):
    return PermissionRecord(folder, identity, rights, AccessType.parse(access), inh)


RECS = [
    make_rec(r'\\filer\Finance', 'Finance-RW', 'Modify'),
    make_rec(r'\\filer\Finance', 'Domain Admins', 'FullControl'),
    make_rec(r'\\filer\Finance\Payroll', 'Payroll', 'Modify'),
    make_rec(r'\\filer\Finance\Payroll', 'Finance-RW', 'Modify', inh=True),
    make_rec(r'\\filer\Finance\Payroll\2024\Q1\Close', 'Auditors', 'ReadAndExecute'),
    make_rec(r'\\filer\Finance\Payroll\2024\Q1\Close', 'Payroll', 'Modify', inh=True),
    make_rec(r'\\filer\Finance\Reports', 'Finance-RW', 'Modify', inh=True),
]


def test_unique_ace_combinations_counts_and_sample():
    rows = unique_ace_combinations(RECS)
    top = rows[0]
    assert (top['Identity'], top['Rights'], top['AccessType'], top['Count']) == ('Finance-RW', 'Modify', 'Allow', 3)
    assert top['SamplePath'] == r'\\filer\Finance'
    assert sum(r['Count'] for r in rows) == len(RECS)


def test_identity_summary_sums_to_record_count():
    rows = identity_summary(RECS)
    assert sum(r['OccurrenceCount'] for r in rows) == len(RECS)
    by_name = {r['Identity']: r for r in rows}
    assert by_name['Finance-RW']['OccurrenceCount'] == 3
    assert by_name['Finance-RW']['UniquePermissionCount'] == 1
    assert by_name['Finance-RW']['FolderCount'] == 3
    assert by_name['Payroll']['FolderCount'] == 2


def test_identity_summary_counts_deny_as_distinct_permission():
    rows = identity_summary([make_rec(r'\S\a', 'G3', 'Modify'), make_rec(r'\S\b', 'G3', 'Modify', 'Deny')])
    assert rows == [{'Identity': 'G3', 'OccurrenceCount': 2, 'UniquePermissionCount': 2, 'FolderCount': 2}]


def test_mappings_share_relative_path_and_action():
    profiles = build_profiles(RECS).profiles
    maps = generate_mappings(select_boundaries(profiles), profiles)
    by_rel = {m.relative_path: m for m in maps}
    assert set(by_rel) == {'Root', 'Payroll', r'Payroll\2024\Q1\Close'}
    assert all(m.share_name == 'Finance' for m in maps)

    root = by_rel['Root']
    assert root.folder_depth == 1
    assert root.identities == 'Domain Admins; Finance-RW'
    assert root.permissions == 'Domain Admins: FullControl (Allow); Finance-RW: Modify (Allow)'
    assert root.recommended_action is RecommendedAction.CREATE_SITE_OR_LIBRARY

    deep = by_rel[r'Payroll\2024\Q1\Close']
    assert deep.folder_depth == 5
    assert deep.identities == 'Auditors'
    assert deep.recommended_action is RecommendedAction.FOLDER_LEVEL_PERMISSION


def test_threshold_is_configurable():
    assert recommend_action(4) is RecommendedAction.CREATE_SITE_OR_LIBRARY
    assert recommend_action(5) is RecommendedAction.FOLDER_LEVEL_PERMISSION
    assert recommend_action(5, site_depth_threshold=6) is RecommendedAction.CREATE_SITE_OR_LIBRARY

    profiles = build_profiles(RECS).profiles
    maps = generate_mappings(select_boundaries(profiles), profiles, site_depth_threshold=1)
    actions = {m.relative_path: m.recommended_action for m in maps}
    assert actions['Root'] is RecommendedAction.CREATE_SITE_OR_LIBRARY
    assert actions['Payroll'] is RecommendedAction.FOLDER_LEVEL_PERMISSION


def test_drive_path_share_name_skips_drive_letter():
    recs = [make_rec(r'D:\Shares\Finance\Team', 'Team-RW', 'Modify')]
    profiles = build_profiles(recs).profiles
    m = generate_mappings(select_boundaries(profiles), profiles)[0]
    assert (m.share_name, m.relative_path, m.folder_depth) == ('Shares', r'Finance\Team', 3)

    fixed = build_profiles(recs, share_segment_index=0).profiles
    m = generate_mappings(select_boundaries(fixed), fixed, share_segment_index=0)[0]
    assert m.share_name == 'D:'
