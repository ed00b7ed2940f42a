"""Commands for gl-members."""

# Import all commands to register them
from gl_members.commands.apply import ApplyCommand, PlanCommand
from gl_members.commands.base import Command, get_command_registry, register_command
from gl_members.commands.destroy import DestroyCommand
from gl_members.commands.import_group import ImportCommand
from gl_members.commands.refresh import RefreshCommand

__all__ = [
    "Command",
    "register_command",
    "get_command_registry",
    "ApplyCommand",
    "PlanCommand",
    "RefreshCommand",
    "DestroyCommand",
    "ImportCommand",
]
