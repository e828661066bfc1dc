"""
Permission reference data.

PermissionCode is the closed set of access levels. The catalog only
resolves codes to display metadata (for responses and seeding); access
decisions compare codes directly against an operation's allowed set.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterator

from utils.exceptions import NotFound


class PermissionCode(IntEnum):
    READER = 1
    EDITOR = 2
    ADMIN = 3


@dataclass(frozen=True)
class PermissionMetadata:
    code: PermissionCode
    name: str
    description: str


DEFAULT_PERMISSIONS = (
    PermissionMetadata(
        PermissionCode.READER,
        "reader",
        "Permission to only read articles. Actions: Read articles.",
    ),
    PermissionMetadata(
        PermissionCode.EDITOR,
        "editor",
        "Permission to manage articles. Actions: Read, Create, Edit and Delete articles.",
    ),
    PermissionMetadata(
        PermissionCode.ADMIN,
        "admin",
        "Permission to manage articles and users. "
        "Actions: Read, Create, Edit and Delete articles and users.",
    ),
)


class PermissionCatalog:
    """Read-only map of permission code -> metadata."""

    def __init__(self, entries=DEFAULT_PERMISSIONS):
        self._entries: Dict[int, PermissionMetadata] = {int(e.code): e for e in entries}

    def lookup(self, code) -> PermissionMetadata:
        try:
            return self._entries[int(code)]
        except (KeyError, TypeError, ValueError):
            raise NotFound("Permission not found")

    def __iter__(self) -> Iterator[PermissionMetadata]:
        return iter(sorted(self._entries.values(), key=lambda e: e.code))


catalog = PermissionCatalog()
