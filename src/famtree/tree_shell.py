#!/usr/bin/env python3

"""Interactive command loop for building and editing family trees.

Commands are grouped by level. ``common`` is where a session starts;
creating or opening a tree moves to ``tree``; choosing a member moves to
``member``. ``exit`` always goes one level up and leaves the program from
``common``. A line is ``<command> [key]``; the key is only used by ``show``.
"""

import argparse
import logging
import sys
from typing import Callable, Dict, Optional

from .tree_config import config
from .tree_context import TreeSession
from .tree_data_management import Tree
from .tree_errors import TreeError, InvalidInput
from .tree_show import show_member, show_tree, show_relation_types
from .tree_storage import FileTreeStore, get_tree_store, serialize, deserialize
from .tree_utils import relation_kind_from_code

# Set up logging
logger = logging.getLogger(__name__)


HELP_TEXTS = {
    "about": (
        "famtree keeps a family tree: people, how they are related, and what\n"
        "happened in their lives. Trees are saved as JSON files."
    ),
    "common": (
        "about   - what this program does\n"
        "create  - start a new tree\n"
        "open    - open a saved tree\n"
        "help    - show this list\n"
        "exit    - quit"
    ),
    "tree": (
        "add         - add a member\n"
        "member      - work on one member\n"
        "remove      - remove a member (not the root)\n"
        "rename      - rename the tree\n"
        "root        - choose another root member\n"
        "save        - save the tree\n"
        "show [key]  - show the tree (key: info, members, root or a full name)\n"
        "help        - show this list\n"
        "exit        - close the tree"
    ),
    "member": (
        "contact     - add a contact\n"
        "describe    - replace the description\n"
        "event       - add a life event\n"
        "relate      - relate to another member\n"
        "unrelate    - remove all relations with another member\n"
        "show [key]  - show the member (key: info, description, contacts, events, relations)\n"
        "help        - show this list\n"
        "exit        - back to the tree"
    ),
}


class ConsoleIO:
    """Prompt and output channel used by the commands."""

    def ask(self, prompt: str) -> str:
        return input(prompt)

    def say(self, text: str) -> None:
        print(text)


# ===== common level =====

def cmd_about(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    io.say(HELP_TEXTS["about"])
    return True


def cmd_help(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    io.say(HELP_TEXTS[session.level])
    return True


def cmd_create(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("New tree name: ")
    root_name = io.ask("Root full name: ")
    root_birth = io.ask("Root birth year [or skip]: ")
    session.tree = Tree.create(name, root_name, root_birth)
    session.file_name = None
    session.level_down()
    return True


def cmd_open(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    file_name = io.ask("File Name: ")
    tree = deserialize(session.store, file_name)
    session.tree = tree
    session.file_name = file_name.strip()
    session.level_down()
    io.say(f"Opened tree '{tree.name}' ({len(tree)} members)")
    return True


def cmd_quit(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    return False


# ===== tree level =====

def _save(session: TreeSession, io: ConsoleIO) -> None:
    file_name = session.file_name or io.ask("New file name: ")
    serialize(session.store, file_name, session.tree)
    session.file_name = file_name.strip()
    io.say("Successfully saved!")


def cmd_add(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("New member full name: ")
    birth = io.ask("Member birth year [or skip]: ")
    session.tree.add_member(name, birth)
    return True


def cmd_member(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("Choose member [full name]: ")
    session.member = session.tree.get_member(name)
    session.level_down()
    return True


def cmd_remove(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("Remove member [full name]: ")
    session.tree.remove_member(name)
    return True


def cmd_rename(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("New name of tree: ")
    session.tree.rename(name)
    return True


def cmd_root(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("Change root [full name]: ")
    session.tree.change_root(name)
    return True


def cmd_save(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    _save(session, io)
    return True


def cmd_show_tree(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    io.say(show_tree(session.tree, key))
    return True


def cmd_close_tree(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    answer = io.ask("Do you want to save tree before leaving? [y/n]: ")
    if answer.strip() != "n":
        _save(session, io)
    session.level_up()
    return True


# ===== member level =====

def cmd_contact(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    contact_type = io.ask("Contact type: ")
    value = io.ask("Contact: ")
    session.member.add_contact(contact_type, value)
    return True


def cmd_describe(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    text = io.ask("Description: ")
    session.member.describe(text)
    return True


def cmd_event(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    year = io.ask("Event year: ")
    description = io.ask("Description: ")
    session.member.add_event(year, description)
    return True


def cmd_relate(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    """Link the current member and a relative, one call per direction."""
    name = io.ask("Relative full name: ")
    relative = session.tree.get_member(name)
    current = session.member
    io.say(show_relation_types())
    to_code = io.ask(f"Relation => {relative.full_name} to current person [num]: ")
    from_code = io.ask(f"Relation => current person to {relative.full_name} [num]: ")

    # Both codes are checked before either side is written
    to_kind = relation_kind_from_code(to_code)
    from_kind = relation_kind_from_code(from_code)
    current.relate(to_kind, relative)
    relative.relate(from_kind, current)
    logger.info(f"Related {current.full_name} and {relative.full_name} ({to_kind.name}/{from_kind.name})")
    return True


def cmd_unrelate(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    name = io.ask("Unrelate person [full name]: ")
    relative = session.tree.get_member(name)
    session.tree.unrelate_pair(session.member, relative)
    return True


def cmd_show_member(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    io.say(show_member(session.member, key))
    return True


def cmd_close_member(session: TreeSession, io: ConsoleIO, key: Optional[str] = None) -> bool:
    session.level_up()
    return True


CommandHandler = Callable[[TreeSession, ConsoleIO, Optional[str]], bool]

COMMANDS: Dict[str, Dict[str, CommandHandler]] = {
    "common": {
        "about": cmd_about,
        "create": cmd_create,
        "exit": cmd_quit,
        "help": cmd_help,
        "open": cmd_open,
    },
    "tree": {
        "add": cmd_add,
        "exit": cmd_close_tree,
        "help": cmd_help,
        "member": cmd_member,
        "remove": cmd_remove,
        "rename": cmd_rename,
        "root": cmd_root,
        "save": cmd_save,
        "show": cmd_show_tree,
    },
    "member": {
        "contact": cmd_contact,
        "describe": cmd_describe,
        "event": cmd_event,
        "exit": cmd_close_member,
        "help": cmd_help,
        "relate": cmd_relate,
        "show": cmd_show_member,
        "unrelate": cmd_unrelate,
    },
}


def activate(session: TreeSession, line: str, io: ConsoleIO) -> bool:
    """Run one command line. Returns False when the session should end."""
    parts = line.split(None, 1)
    if not parts:
        return True
    name = parts[0]
    key = parts[1].strip() if len(parts) > 1 else None

    command = COMMANDS[session.level].get(name)
    if command is None:
        raise InvalidInput(
            f"Invalid command '{name}'",
            recovery_suggestion="Type `help` to see commands."
        )
    return command(session, io, key)


def run(session: TreeSession, io: ConsoleIO) -> None:
    """Read and dispatch lines until the user exits or input ends."""
    io.say("Hello! Welcome to Family Tree app.")
    io.say("Type `help` to see commands\n")
    while True:
        try:
            line = io.ask(session.prompt)
        except EOFError:
            break
        try:
            if not activate(session, line, io):
                break
        except TreeError as e:
            if e.recovery_suggestion:
                logger.error(f"{e.message} ({e.recovery_suggestion})")
            else:
                logger.error(e.message)


def main(argv=None):
    """Main entry point for the script"""
    parser = argparse.ArgumentParser(description='Build, edit and save family trees interactively')
    parser.add_argument('--data-dir', '-d', help=f'Directory for tree files (default: {config.DATA_DIR})')
    parser.add_argument('--log-level', '-l', default=config.LOG_LEVEL,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], type=str.upper,
                        help='Logging level')
    parser.add_argument('--open', '-o', dest='open_name', help='Tree file to open on start')

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format='%(levelname)s: %(message)s')

    store = FileTreeStore(args.data_dir) if args.data_dir else get_tree_store(config)
    session = TreeSession(store=store)
    io = ConsoleIO()

    if args.open_name:
        try:
            session.tree = deserialize(store, args.open_name)
            session.file_name = args.open_name
            session.level_down()
        except TreeError as e:
            logger.error(e.message)
            return 1

    try:
        run(session, io)
    except KeyboardInterrupt:
        io.say("")
    return 0


if __name__ == '__main__':
    sys.exit(main())
