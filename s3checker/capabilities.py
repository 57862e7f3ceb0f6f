"""Maps storage probe outcomes to CockroachDB cloud capabilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

BACKUP = "Backup"
RESTORE = "Restore"
IMPORT = "Import"
EXPORT = "Export"
CHANGEFEEDS = "Enterprise Changefeeds"


@dataclass(frozen=True)
class CapabilityVerdict:
    name: str
    sufficient: bool


def map_capabilities(list_ok: bool, put_ok: bool, get_ok: bool) -> List[CapabilityVerdict]:
    """Return verdicts in report order. Depends on nothing but the three flags."""
    return [
        CapabilityVerdict(BACKUP, put_ok and get_ok and list_ok),
        CapabilityVerdict(RESTORE, get_ok and list_ok),
        CapabilityVerdict(IMPORT, get_ok),
        CapabilityVerdict(EXPORT, put_ok),
        CapabilityVerdict(CHANGEFEEDS, put_ok),
    ]
