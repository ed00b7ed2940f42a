"""Refresh the recorded state from GitLab."""

from __future__ import annotations

from gl_members.commands.base import Command, register_command
from gl_members.models import STATUS_DRIFTED, ResourceState


@register_command("refresh")
class RefreshCommand(Command):
    """Read the group's current members into state and report drift."""

    def run(self, state: ResourceState) -> ResourceState:
        if not state.id:
            self.logger.info("No group recorded in state, nothing to refresh")
            return state

        state = self.resource.read(state)
        if state.status == STATUS_DRIFTED:
            self.logger.warning(f"Members of group '{state.id}' have drifted from the recorded state")
        else:
            self.logger.info(f"Group '{state.id}' is in sync ({len(state.members)} members)")
        return state
