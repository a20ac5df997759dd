"""Load analysis settings from boundary_analysis/settings.json.

Functions exposed for tests: `load_settings`, `Settings`.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from boundary_analysis.boundaries import BOUNDARY_MODES

SETTINGS_PATH = Path(__file__).parent / "settings.json"


@dataclass(frozen=True)
class Settings:
    site_depth_threshold: int = 4
    boundary_mode: str = "deepest"
    share_segment_index: Optional[int] = None
    signature_separator: str = ";"

    def override(self, **kwargs: Any) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        changes = {k: v for k, v in kwargs.items() if v is not None}
        return _validate(replace(self, **changes)) if changes else self


def _as_int(key: str, val: Any) -> int:
    if isinstance(val, bool):
        raise ValueError(f"setting {key!r} must be an integer, got {val!r}")
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ValueError(f"setting {key!r} must be an integer, got {val!r}")


def _validate(s: Settings) -> Settings:
    if s.site_depth_threshold < 1:
        raise ValueError(f"setting 'site_depth_threshold' must be >= 1, got {s.site_depth_threshold}")
    if s.boundary_mode not in BOUNDARY_MODES:
        raise ValueError(f"setting 'boundary_mode' must be one of {', '.join(BOUNDARY_MODES)}, got {s.boundary_mode!r}")
    if s.share_segment_index is not None and s.share_segment_index < 0:
        raise ValueError(f"setting 'share_segment_index' must be >= 0, got {s.share_segment_index}")
    if not s.signature_separator or "|" in s.signature_separator:
        raise ValueError("setting 'signature_separator' must be non-empty and must not contain '|'")
    return s


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    with path.open("r", encoding="utf-8") as fh:
        j: Dict[str, Any] = json.load(fh)
    if not isinstance(j, dict):
        raise ValueError(f"settings file {path} must hold a JSON object")

    unknown = set(j) - {"site_depth_threshold", "boundary_mode", "share_segment_index", "signature_separator"}
    if unknown:
        raise ValueError(f"unknown settings in {path}: {', '.join(sorted(unknown))}")

    base = Settings()
    thr = j.get("site_depth_threshold")
    idx = j.get("share_segment_index")
    mode = j.get("boundary_mode")
    sep = j.get("signature_separator")
    return _validate(Settings(
        site_depth_threshold=_as_int("site_depth_threshold", thr) if thr is not None else base.site_depth_threshold,
        boundary_mode=str(mode).lower() if mode else base.boundary_mode,
        share_segment_index=_as_int("share_segment_index", idx) if idx is not None else None,
        signature_separator=str(sep) if sep is not None else base.signature_separator,
    ))
