"""Apply a member declaration to its group."""

from __future__ import annotations

import argparse

from gl_members.commands.base import Command, register_command
from gl_members.config import load_declaration
from gl_members.models import ResourceState


@register_command("apply")
class ApplyCommand(Command):
    """Make the group's membership match a declaration file."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("config", help="YAML or JSON file declaring group_id and members")

    def run(self, state: ResourceState) -> ResourceState:
        declaration = load_declaration(self.args.config)
        self.logger.info(f"Declared {len(declaration.members)} members for group '{declaration.group_id}'")

        if not state.id:
            return self.resource.create(state, declaration.group_id, declaration.members)
        return self.resource.update(state, declaration.group_id, declaration.members)


@register_command("plan")
class PlanCommand(ApplyCommand):
    """Show the changes apply would make, without making them."""

    forces_dry_run = True
