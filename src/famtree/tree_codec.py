#!/usr/bin/env python3

"""Conversion between an in-memory Tree and its persisted bytes.

Members reference each other freely, so the relation graph is full of
cycles (a spouse pair is already one). The persisted form breaks them by
naming every member with a stable id, its full name, and storing each
relation link as ``{"kind": code, "target_id": id}``.

Decoding runs in two passes. The first creates every member with its
scalar fields; the second resolves relation targets against the complete
member table, which makes forward references legal.
"""

import logging
from typing import Dict

import chardet
from pydantic import ValidationError

from .tree_constants import RELATION_TYPES, RelationKind, FORMAT_NAME, FORMAT_VERSION
from .tree_data_management import Tree
from .tree_errors import CorruptData
from .tree_models import (
    Member, Contact, LifeEvent,
    TreeRecord, MemberRecord, ContactRecord, EventRecord, RelationRecord,
)

# Set up logging
logger = logging.getLogger(__name__)


def _member_to_record(member: Member) -> MemberRecord:
    return MemberRecord(
        id=member.full_name,
        birth_year=member.birth_year,
        description=member.description,
        contacts=[ContactRecord(type=c.type, value=c.value) for c in member.contacts],
        events=[EventRecord(year=e.year, description=e.description) for e in member.events],
        relations=[
            RelationRecord(kind=int(kind), target_id=target.full_name)
            for kind, target in member.relatives()
        ],
    )


def tree_to_record(tree: Tree) -> TreeRecord:
    if tree.root is None:
        raise CorruptData(f"Tree '{tree.name}' has no root member")
    return TreeRecord(
        format=FORMAT_NAME,
        version=FORMAT_VERSION,
        tree_name=tree.name,
        root_id=tree.root.full_name,
        members=[_member_to_record(member) for member in tree.members.values()],
    )


def encode_tree(tree: Tree) -> bytes:
    """Serialize a tree to UTF-8 JSON bytes.

    Output is deterministic: member order, and per member the order of
    contacts, events and relation links, follow insertion order.
    """
    record = tree_to_record(tree)
    data = record.model_dump_json(indent=2, exclude_none=True).encode("utf-8")
    logger.debug(f"Encoded tree '{tree.name}': {len(tree.members)} members, {len(data)} bytes")
    return data


def _decode_text(data: bytes) -> str:
    """Decode persisted bytes, falling back to detected encodings for hand-edited files."""
    if not isinstance(data, (bytes, bytearray)):
        raise CorruptData(f"Expected bytes, got {type(data).__name__}")
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Tree data is not valid UTF-8: {e}")

    detected = chardet.detect(bytes(data))
    detected_encoding = detected.get("encoding")
    confidence = detected.get("confidence", 0)
    logger.info(f"Detected encoding: {detected_encoding} (confidence: {confidence})")
    if not detected_encoding:
        raise CorruptData("Could not determine the text encoding of the tree data")
    try:
        return bytes(data).decode(detected_encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise CorruptData(f"Failed to decode tree data as {detected_encoding}: {e}") from e


def _parse_record(text: str) -> TreeRecord:
    try:
        record = TreeRecord.model_validate_json(text)
    except ValidationError as e:
        raise CorruptData(
            f"Malformed tree data: {e.error_count()} problem(s), first: {e.errors()[0]['msg']}"
        ) from e

    if record.format != FORMAT_NAME:
        raise CorruptData(f"Unknown data format '{record.format}'")
    if record.version != FORMAT_VERSION:
        raise CorruptData(
            f"Unsupported format version {record.version}",
            recovery_suggestion=f"This build reads version {FORMAT_VERSION} files."
        )
    return record


def record_to_tree(record: TreeRecord) -> Tree:
    """Rebuild a Tree from a validated record.

    Nothing is returned unless every id resolves, so a caller never sees a
    partially linked tree.
    """
    members: Dict[str, Member] = {}

    # Pass 1: members with scalar fields only
    for member_record in record.members:
        if not member_record.id or member_record.id != member_record.id.strip():
            raise CorruptData(f"Invalid member id {member_record.id!r}")
        if member_record.id in members:
            raise CorruptData(f"Duplicate member id '{member_record.id}'")
        members[member_record.id] = Member(
            full_name=member_record.id,
            birth_year=member_record.birth_year,
            description=member_record.description,
            contacts=[Contact(type=c.type, value=c.value) for c in member_record.contacts],
            events=[LifeEvent(year=e.year, description=e.description) for e in member_record.events],
        )

    # Pass 2: resolve relation targets against the complete member table
    for member_record in record.members:
        member = members[member_record.id]
        for relation in member_record.relations:
            if relation.kind not in RELATION_TYPES:
                raise CorruptData(
                    f"Unknown relation kind {relation.kind} on member '{member_record.id}'"
                )
            target = members.get(relation.target_id)
            if target is None:
                raise CorruptData(
                    f"Member '{member_record.id}' is related to unknown id '{relation.target_id}'"
                )
            kind = RelationKind(relation.kind)
            if member.relations.get(kind, {}).get(target.full_name) is target:
                raise CorruptData(
                    f"Duplicate {kind.name.lower()} link from '{member_record.id}' to '{relation.target_id}'"
                )
            member.relate(kind, target)

    root = members.get(record.root_id)
    if root is None:
        raise CorruptData(f"Root id '{record.root_id}' does not match any member")
    if not record.tree_name.strip():
        raise CorruptData("Tree name is empty")

    return Tree(name=record.tree_name, root=root, members=members)


def decode_tree(data: bytes) -> Tree:
    """Parse bytes produced by ``encode_tree`` back into a Tree."""
    text = _decode_text(data)
    record = _parse_record(text)
    tree = record_to_tree(record)
    logger.info(f"Decoded tree '{tree.name}' with {len(tree.members)} members")
    return tree
