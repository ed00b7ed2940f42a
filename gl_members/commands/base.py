"""Base class and registry for commands."""

from __future__ import annotations

import argparse
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gl_members.models import ResourceState
    from gl_members.resource import GroupMembersResource

# ---------------------------------------------------------------------------
# Command Registry
# ---------------------------------------------------------------------------

_command_registry: dict[str, type[Command]] = {}


def register_command(name: str):
    """Decorator to register a command class under a CLI subcommand name."""

    def decorator(cls):
        _command_registry[name] = cls
        cls.command_name = name
        return cls

    return decorator


def get_command_registry() -> dict[str, type[Command]]:
    """Get the command registry."""
    return _command_registry


# ---------------------------------------------------------------------------
# Command Base Class
# ---------------------------------------------------------------------------


class Command(ABC):
    """Base class for all commands."""

    command_name: str = ""
    forces_dry_run: bool = False

    def __init__(self, resource: GroupMembersResource, args: argparse.Namespace):
        self.resource = resource
        self.client = resource.client
        self.args = args
        self.logger = logging.getLogger("gl-members")

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Add command-specific CLI arguments."""

    @abstractmethod
    def run(self, state: ResourceState) -> ResourceState:
        """Run the command against the loaded state and return the new state."""
        ...
