#!/usr/bin/env python3

import logging
from typing import Dict, Iterator, Optional, Union
from dataclasses import dataclass, field

from .tree_models import Member
from .tree_errors import CannotRemoveRoot, DuplicateMember, MemberNotFound
from .tree_utils import normalize_name, parse_year

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class Tree:
    """A named collection of members with one designated root.

    The tree owns every member. All structural mutation (adding, removing,
    re-rooting) goes through it so that no relation set ever points at a
    member that is no longer in ``members``.
    """
    name: str
    root: Optional[Member] = None
    members: Dict[str, Member] = field(default_factory=dict)

    @classmethod
    def create(cls, tree_name: str, root_full_name: str, root_birth: Union[int, str, None] = None) -> "Tree":
        """Build a fresh tree whose only member is its root."""
        name = normalize_name(tree_name, "tree name")
        root_name = normalize_name(root_full_name, "root full name")
        birth_year = parse_year(root_birth, "birth year")

        root = Member(full_name=root_name, birth_year=birth_year)
        tree = cls(name=name, root=root, members={root_name: root})
        logger.info(f"Created tree '{name}' rooted at {root_name}")
        return tree

    @classmethod
    def parse(cls, data: bytes) -> "Tree":
        """Rebuild a tree from bytes produced by ``encode_tree``."""
        from .tree_codec import decode_tree
        return decode_tree(data)

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, full_name: str) -> bool:
        return isinstance(full_name, str) and full_name.strip() in self.members

    def __iter__(self) -> Iterator[Member]:
        return iter(list(self.members.values()))

    def add_member(self, full_name: str, birth: Union[int, str, None] = None) -> Member:
        """Insert a new member without relations."""
        name = normalize_name(full_name, "full name")
        if name in self.members:
            raise DuplicateMember(
                f"Member '{name}' already exists in tree '{self.name}'",
                recovery_suggestion="Member names must be unique; add a distinguishing detail to the name."
            )
        birth_year = parse_year(birth, "birth year")

        member = Member(full_name=name, birth_year=birth_year)
        self.members[name] = member
        logger.info(f"Added member {name} to tree '{self.name}'")
        return member

    def get_member(self, full_name: str) -> Member:
        """Exact-name lookup."""
        key = full_name.strip() if isinstance(full_name, str) else full_name
        member = self.members.get(key)
        if member is None:
            raise MemberNotFound(f"Member '{key}' not found in tree '{self.name}'")
        return member

    def remove_member(self, full_name: str) -> Member:
        """Remove a member and every relation entry pointing at it.

        All checks happen before anything is mutated. Links may be one-sided,
        so the removed member's own relations do not list every member that
        points at it; every other member is visited.
        """
        member = self.get_member(full_name)
        if member is self.root:
            raise CannotRemoveRoot(
                f"Cannot remove root member '{member.full_name}'",
                recovery_suggestion="Change the root to another member first."
            )

        affected = 0
        for other in self.members.values():
            if other is member:
                continue
            if other.unrelate(member):
                affected += 1
        del self.members[member.full_name]
        member.relations.clear()

        logger.info(f"Removed member {member.full_name} from tree '{self.name}' ({affected} members unlinked)")
        return member

    def rename(self, new_name: str) -> None:
        name = normalize_name(new_name, "tree name")
        logger.info(f"Renamed tree '{self.name}' to '{name}'")
        self.name = name

    def change_root(self, full_name: str) -> None:
        """Designate another member as root. Relations are not touched."""
        member = self.get_member(full_name)
        self.root = member
        logger.info(f"Root of tree '{self.name}' is now {member.full_name}")

    def unrelate_pair(self, member_a: Member, member_b: Member) -> None:
        """Drop every link between two members, in both directions."""
        unrelate_pair(self, member_a, member_b)


def unrelate_pair(tree: Tree, member_a: Member, member_b: Member) -> None:
    """Remove ``member_b`` from all of ``member_a``'s relation sets and vice versa.

    The kinds used when the pair was related do not need to be known.
    """
    for member in (member_a, member_b):
        if tree.members.get(member.full_name) is not member:
            raise MemberNotFound(f"Member '{member.full_name}' not found in tree '{tree.name}'")

    dropped_ab = member_a.unrelate(member_b)
    dropped_ba = member_b.unrelate(member_a)
    if dropped_ab or dropped_ba:
        logger.info(f"Unrelated {member_a.full_name} and {member_b.full_name}")
    else:
        logger.debug(f"{member_a.full_name} and {member_b.full_name} were not related")
