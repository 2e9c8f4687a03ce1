#!/usr/bin/env python3

"""Read-only text views of members and trees."""

from typing import List, Optional

from .tree_constants import RELATION_TYPES, relation_label
from .tree_data_management import Tree
from .tree_errors import InvalidInput
from .tree_models import Member

MEMBER_SECTIONS = ("info", "description", "contacts", "events", "relations")
TREE_SECTIONS = ("info", "members", "root")


def _format_birth(member: Member) -> str:
    return str(member.birth_year) if member.birth_year is not None else "unknown"


def _member_info(member: Member) -> List[str]:
    return [f"Name: {member.full_name}", f"Born: {_format_birth(member)}"]


def _member_description(member: Member) -> List[str]:
    return [f"Description: {member.description or '-'}"]


def _member_contacts(member: Member) -> List[str]:
    if not member.contacts:
        return ["Contacts: -"]
    return ["Contacts:"] + [f"  {c.type}: {c.value}" for c in member.contacts]


def _member_events(member: Member) -> List[str]:
    if not member.events:
        return ["Events: -"]
    return ["Events:"] + [f"  {e.year}: {e.description}" for e in member.events]


def _member_relations(member: Member) -> List[str]:
    if not member.relations:
        return ["Relations: -"]
    lines = ["Relations:"]
    for kind, targets in member.relations.items():
        names = ", ".join(targets)
        lines.append(f"  {relation_label(kind)}: {names}")
    return lines


_MEMBER_VIEWS = {
    "info": _member_info,
    "description": _member_description,
    "contacts": _member_contacts,
    "events": _member_events,
    "relations": _member_relations,
}


def show_member(member: Member, key: Optional[str] = None) -> str:
    """Format a member, or only one section of it when ``key`` is given."""
    if key is None or not key.strip():
        sections = MEMBER_SECTIONS
    else:
        key = key.strip().lower()
        if key not in _MEMBER_VIEWS:
            raise InvalidInput(
                f"Unknown member view '{key}'",
                recovery_suggestion=f"Use one of: {', '.join(MEMBER_SECTIONS)}."
            )
        sections = (key,)

    lines: List[str] = []
    for section in sections:
        lines.extend(_MEMBER_VIEWS[section](member))
    return "\n".join(lines)


def show_tree(tree: Tree, key: Optional[str] = None) -> str:
    """Format a tree summary.

    ``key`` selects a section ("info", "members", "root") or names a member,
    in which case that member is shown in full.
    """
    root_name = tree.root.full_name if tree.root else "-"
    info = [f"Tree: {tree.name}", f"Root: {root_name}", f"Members: {len(tree)}"]
    members = [
        f"  {'*' if member is tree.root else ' '} {member.full_name} ({_format_birth(member)})"
        for member in tree
    ]

    if key is None or not key.strip():
        return "\n".join(info + members)

    lookup = key.strip()
    if lookup.lower() == "info":
        return "\n".join(info)
    if lookup.lower() == "members":
        return "\n".join(members)
    if lookup.lower() == "root":
        return show_member(tree.root)
    if lookup in tree:
        return show_member(tree.get_member(lookup))
    raise InvalidInput(
        f"Unknown tree view '{lookup}'",
        recovery_suggestion=f"Use one of: {', '.join(TREE_SECTIONS)}, or a member's full name."
    )


def show_relation_types() -> str:
    """Numbered list of relation kinds, as offered at the relate prompt."""
    return "\n".join(
        f"{code}. {details['label']}" for code, details in RELATION_TYPES.items()
    )
