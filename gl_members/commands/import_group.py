"""Adopt an existing group."""

from __future__ import annotations

import argparse

from gl_members.commands.base import Command, register_command
from gl_members.models import ConfigError, ResourceState


@register_command("import")
class ImportCommand(Command):
    """Record an existing group's members as the managed state."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("group", help="Group ID, full path or GitLab URL")

    def run(self, state: ResourceState) -> ResourceState:
        group_id = self.client.normalize_group_ref(self.args.group)
        if state.id and state.id != group_id:
            raise ConfigError(f"State already tracks group '{state.id}', refusing to import '{group_id}'")
        return self.resource.import_group(state, group_id)
