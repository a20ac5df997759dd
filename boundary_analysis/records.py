"""Record types shared by every stage of the boundary analysis.

All types are frozen dataclasses; stages build new values instead of mutating
the ones they were given.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


INHERITED_ONLY = "INHERITED_ONLY"

# well-known FileSystemRights masks, most permissive first
KNOWN_RIGHTS_MASKS: Tuple[Tuple[int, str], ...] = (
    (2032127, "FullControl"),
    (1245631, "Modify"),
    (1180063, "Read, Write"),
    (1179817, "ReadAndExecute"),
    (1179785, "Read"),
    (278, "Write"),
)


class AccessType(enum.Enum):
    ALLOW = "Allow"
    DENY = "Deny"

    @classmethod
    def parse(cls, value: Any) -> Optional["AccessType"]:
        """Parse an access type name or .NET AccessControlType value (0 allow, 1 deny)."""
        if isinstance(value, AccessType):
            return value
        if value is None or isinstance(value, bool):
            return None
        s = str(value).strip().lower()
        if s in ("allow", "accessallowed", "0"):
            return cls.ALLOW
        if s in ("deny", "accessdenied", "1"):
            return cls.DENY
        return None


class RecommendedAction(enum.Enum):
    CREATE_SITE_OR_LIBRARY = "CreateSiteOrLibrary"
    FOLDER_LEVEL_PERMISSION = "FolderLevelPermission"


def render_rights(rights: Any) -> str:
    if rights is None:
        return ""
    if isinstance(rights, bool):
        return str(rights)
    if isinstance(rights, float) and rights.is_integer():
        rights = int(rights)
    if isinstance(rights, int):
        for mask, name in KNOWN_RIGHTS_MASKS:
            if rights == mask:
                return name
        return str(rights)
    s = str(rights).strip()
    if s.isdigit():
        return render_rights(int(s))
    return s


@dataclass(frozen=True)
class PermissionRecord:
    folder_path: str
    identity: str
    rights: str
    access_type: AccessType
    inherited: bool = False

    @property
    def entry(self) -> Tuple[str, str, str]:
        return (self.identity, self.rights, self.access_type.value)


@dataclass(frozen=True)
class RejectedRecord:
    index: int
    reason: str
    record: Any = None

    def as_row(self) -> Dict[str, Any]:
        rec = self.record
        if isinstance(rec, PermissionRecord):
            folder, identity = rec.folder_path, rec.identity
        elif isinstance(rec, dict):
            folder, identity = rec.get("folder_path"), rec.get("ace_name")
        else:
            folder, identity = None, None
        return {"Index": self.index, "Reason": self.reason, "FolderPath": folder, "Identity": identity}


@dataclass(frozen=True)
class FolderPermissionProfile:
    path: str
    depth: int
    explicit_entries: Tuple[Tuple[str, str, str], ...]
    signature: str
    explicit_count: int
    total_count: int
    unique_identity_count: int

    def as_row(self) -> Dict[str, Any]:
        return {
            "Path": self.path,
            "Depth": self.depth,
            "Signature": self.signature,
            "ExplicitCount": self.explicit_count,
            "TotalCount": self.total_count,
            "UniqueIdentityCount": self.unique_identity_count,
        }


@dataclass(frozen=True)
class PermissionBoundary:
    path: str
    depth: int
    signature: str
    identities: Tuple[str, ...] = field(default_factory=tuple)
    rights: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MigrationMapping:
    path: str
    share_name: str
    relative_path: str
    folder_depth: int
    identities: str
    permissions: str
    recommended_action: RecommendedAction
    signature: str

    def as_row(self) -> Dict[str, Any]:
        return {
            "ShareName": self.share_name,
            "RelativePath": self.relative_path,
            "FolderDepth": self.folder_depth,
            "Identities": self.identities,
            "Permissions": self.permissions,
            "RecommendedAction": self.recommended_action.value,
            "Path": self.path,
            "Signature": self.signature,
        }
