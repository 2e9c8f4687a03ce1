#!/usr/bin/env python3

import logging
from typing import Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict, Field

from .tree_constants import RelationKind, FORMAT_NAME, FORMAT_VERSION
from .tree_utils import parse_year, relation_kind_from_code, text_value
from .tree_errors import InvalidInput

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class Contact:
    type: str
    value: str


@dataclass
class LifeEvent:
    year: int
    description: str


@dataclass(eq=False)
class Member:
    """A person in a tree.

    Members compare and hash by identity. ``relations`` maps each kind to an
    insertion ordered set of related members, stored as a dict keyed by the
    related member's full name. The references are non-owning: only the Tree
    decides when a member stops existing.
    """
    full_name: str
    birth_year: Optional[int] = None
    description: Optional[str] = None
    contacts: List[Contact] = field(default_factory=list)
    events: List[LifeEvent] = field(default_factory=list)
    relations: Dict[RelationKind, Dict[str, "Member"]] = field(default_factory=dict, repr=False)

    def add_contact(self, contact_type: str, value: str) -> Contact:
        contact = Contact(
            type=text_value(contact_type, "contact type"),
            value=text_value(value, "contact value")
        )
        self.contacts.append(contact)
        logger.info(f"Added {contact.type or 'untyped'} contact to {self.full_name}")
        return contact

    def describe(self, text: str) -> None:
        self.description = text_value(text, "description")
        logger.info(f"Updated description of {self.full_name}")

    def add_event(self, year: Union[int, str], description: str) -> LifeEvent:
        description = text_value(description, "event description")
        parsed_year = parse_year(year, "event year")
        if parsed_year is None:
            raise InvalidInput(
                "Event year must not be empty",
                recovery_suggestion="Enter the year the event happened, e.g. 1999."
            )
        event = LifeEvent(year=parsed_year, description=description)
        self.events.append(event)
        logger.info(f"Added event ({event.year}) to {self.full_name}")
        return event

    def relate(self, kind: Union[RelationKind, int, str], other: "Member") -> None:
        """Record ``other`` under ``kind`` for this member.

        Only this side of the link is written; the opposite direction takes a
        second call on ``other``. Relating the same pair and kind twice is a
        no-op. The caller must pass a member of the same tree.
        """
        kind = relation_kind_from_code(kind)
        targets = self.relations.setdefault(kind, {})
        if targets.get(other.full_name) is other:
            return
        targets[other.full_name] = other
        logger.debug(f"Related {self.full_name} -[{kind.name}]-> {other.full_name}")

    def unrelate(self, other: "Member") -> bool:
        """Remove ``other`` from every relation kind. Returns True if a link was dropped."""
        removed = False
        for kind in list(self.relations):
            targets = self.relations[kind]
            if targets.get(other.full_name) is other:
                del targets[other.full_name]
                removed = True
                if not targets:
                    del self.relations[kind]
        return removed

    def related(self, kind: Union[RelationKind, int, str]) -> List["Member"]:
        kind = relation_kind_from_code(kind)
        return list(self.relations.get(kind, {}).values())

    def relatives(self) -> List[Tuple[RelationKind, "Member"]]:
        """All outgoing links as (kind, member) pairs, grouped by kind."""
        return [
            (kind, target)
            for kind, targets in self.relations.items()
            for target in targets.values()
        ]

    def is_related_to(self, other: "Member") -> bool:
        return any(target is other for _, target in self.relatives())


# --- Persisted records ---
# Field order below is the key order of the encoded JSON.

class ContactRecord(BaseModel):
    """Persisted contact entry"""
    model_config = ConfigDict(extra="forbid", strict=True)
    type: str
    value: str


class EventRecord(BaseModel):
    """Persisted life event"""
    model_config = ConfigDict(extra="forbid", strict=True)
    year: int
    description: str


class RelationRecord(BaseModel):
    """One outgoing relation link, pointing at a member id"""
    model_config = ConfigDict(extra="forbid", strict=True)
    kind: int
    target_id: str


class MemberRecord(BaseModel):
    """Persisted member with relation links flattened to ids"""
    model_config = ConfigDict(extra="forbid", strict=True)
    id: str
    birth_year: Optional[int] = None
    description: Optional[str] = None
    contacts: List[ContactRecord] = Field(default_factory=list)
    events: List[EventRecord] = Field(default_factory=list)
    relations: List[RelationRecord] = Field(default_factory=list)


class TreeRecord(BaseModel):
    """Top level persisted document"""
    model_config = ConfigDict(extra="forbid", strict=True)
    format: str = FORMAT_NAME
    version: int = FORMAT_VERSION
    tree_name: str
    root_id: str
    members: List[MemberRecord] = Field(default_factory=list)
