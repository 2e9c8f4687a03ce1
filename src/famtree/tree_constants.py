#!/usr/bin/env python3

from enum import IntEnum


# Relation kinds offered to the user, keyed by the numeric code typed at the
# prompt. Codes are persisted, so existing entries must never be renumbered.
RELATION_TYPES = {
    1: {"name": "PARENT", "label": "parent"},
    2: {"name": "CHILD", "label": "child"},
    3: {"name": "SPOUSE", "label": "spouse"},
    4: {"name": "SIBLING", "label": "sibling"},
    5: {"name": "GRANDPARENT", "label": "grandparent"},
    6: {"name": "GRANDCHILD", "label": "grandchild"},
    7: {"name": "UNCLE_AUNT", "label": "uncle / aunt"},
    8: {"name": "NEPHEW_NIECE", "label": "nephew / niece"},
    9: {"name": "COUSIN", "label": "cousin"},
    10: {"name": "OTHER", "label": "other relative"},
}

RelationKind = IntEnum(
    "RelationKind",
    [(details["name"], code) for code, details in RELATION_TYPES.items()],
)
RelationKind.__doc__ = "Closed set of relation categories, one code per direction."


def relation_label(kind: RelationKind) -> str:
    return RELATION_TYPES[int(kind)]["label"]


# --- Persisted format ---
FORMAT_NAME = "famtree"
FORMAT_VERSION = 1
DEFAULT_FILE_SUFFIX = ".json"
