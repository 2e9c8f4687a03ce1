#!/usr/bin/env python3

import logging
from typing import Any, Optional
from dataclasses import dataclass

from .tree_data_management import Tree
from .tree_models import Member

# Set up logging
logger = logging.getLogger(__name__)

# Command levels, outermost first
LEVELS = ("common", "tree", "member")


@dataclass
class TreeSession:
    """Everything one interactive session works on.

    Passed explicitly to every command instead of living in module globals.
    """
    store: Any = None
    level: str = "common"
    tree: Optional[Tree] = None
    file_name: Optional[str] = None
    member: Optional[Member] = None

    def level_down(self) -> str:
        index = LEVELS.index(self.level)
        if index < len(LEVELS) - 1:
            self.level = LEVELS[index + 1]
        logger.debug(f"Entered level {self.level}")
        return self.level

    def level_up(self) -> str:
        """Leave the current level, dropping the context that belonged to it."""
        if self.level == "member":
            self.member = None
        elif self.level == "tree":
            self.tree = None
            self.file_name = None
            self.member = None
        index = LEVELS.index(self.level)
        if index > 0:
            self.level = LEVELS[index - 1]
        logger.debug(f"Returned to level {self.level}")
        return self.level

    @property
    def prompt(self) -> str:
        if self.level == "member" and self.member is not None:
            return f"{self.tree.name}/{self.member.full_name}> "
        if self.level in ("tree", "member") and self.tree is not None:
            return f"{self.tree.name}> "
        return "> "
