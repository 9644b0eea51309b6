"""ID prefixes and generation.

IDs are ``{prefix}{10 hex chars}`` drawn from a random UUID. The prefix
names the entity kind so an ID is self-describing in logs and CLI output.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import uuid

TYPE_PREFIXES: dict[str, str] = {
    "user": "usr_",
    "board": "brd_",
    "invitation": "inv_",
    "task": "tsk_",
    "checklist": "lst_",
    "checklist_item": "itm_",
    "notification": "ntf_",
}

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    kind: re.compile(rf"^{prefix}[0-9a-f]{{10}}$") for kind, prefix in TYPE_PREFIXES.items()
}


def new_id(kind: str) -> str:
    """Generate a fresh ID for *kind*.

    Raises:
        KeyError: If *kind* has no registered prefix.
    """
    return f"{TYPE_PREFIXES[kind]}{uuid.uuid4().hex[:10]}"


def validate_id(entity_id: str, kind: str) -> bool:
    """Check whether *entity_id* matches the expected pattern for *kind*."""
    pattern = ID_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.match(entity_id) is not None
