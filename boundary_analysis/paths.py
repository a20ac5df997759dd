"""Folder path helpers: segment splitting, depth and share-relative parts.

Paths use either separator. A UNC path (``\\\\server\\share\\...``) keeps its
share name at segment 1, and so does a local drive path (``D:\\Shares\\...``,
where the drive letter is skipped); anything else has it at segment 0, unless a
fixed index is configured. The share root is depth 1. Paths compare
case-sensitively, the same way profiles are grouped, so collectors must supply
consistently cased paths.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

_SEP_RE = re.compile(r"[\\/]+")
_DRIVE_RE = re.compile(r"^[A-Za-z]:$")


def normalize_path(path: str) -> str:
    s = str(path).strip()
    if len(s) > 1:
        stripped = s.rstrip("\\/")
        # keep a bare separator root rather than collapsing it to ''
        s = stripped or s[0]
    return s


def split_segments(path: str) -> List[str]:
    return [seg for seg in _SEP_RE.split(str(path)) if seg]


def is_unc(path: str) -> bool:
    s = str(path).strip()
    return len(s) >= 2 and s[0] in "\\/" and s[1] in "\\/"


def share_index(path: str, configured: Optional[int] = None) -> int:
    if configured is not None:
        return configured
    if is_unc(path):
        return 1
    segs = split_segments(path)
    return 1 if segs and _DRIVE_RE.match(segs[0]) else 0


def path_depth(path: str, configured_share_index: Optional[int] = None) -> int:
    segs = split_segments(path)
    idx = share_index(path, configured_share_index)
    return max(len(segs) - idx, 0)


def share_parts(path: str, configured_share_index: Optional[int] = None) -> Tuple[str, str]:
    """Return ``(share_name, relative_path)``; relative path is ``Root`` at the share itself."""
    segs = split_segments(path)
    idx = share_index(path, configured_share_index)
    share = segs[idx] if idx < len(segs) else ""
    rest = segs[idx + 1:]
    return share, ("\\".join(rest) if rest else "Root")


def is_ancestor(ancestor: str, path: str) -> bool:
    a = split_segments(ancestor)
    p = split_segments(path)
    return len(a) < len(p) and p[:len(a)] == a
