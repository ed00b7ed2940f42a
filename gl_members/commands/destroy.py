"""Remove the managed members from their group."""

from __future__ import annotations

from gl_members.commands.base import Command, register_command
from gl_members.models import ResourceState


@register_command("destroy")
class DestroyCommand(Command):
    """Remove every member recorded in state (owners are kept)."""

    def run(self, state: ResourceState) -> ResourceState:
        if not state.id:
            self.logger.info("No group recorded in state, nothing to destroy")
            return state
        return self.resource.delete(state)
