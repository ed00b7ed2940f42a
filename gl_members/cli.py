"""CLI entry point for gl-members."""

from __future__ import annotations

import argparse
import os
import sys

import requests

# Ensure all commands are registered by importing the commands package
import gl_members.commands  # noqa: F401
from gl_members.client import GitLabClient
from gl_members.commands import get_command_registry
from gl_members.logging_utils import setup_logging
from gl_members.models import (
    DEFAULT_GITLAB_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STATE_FILE,
    ConfigError,
    GroupNotFoundError,
)
from gl_members.resource import GroupMembersResource
from gl_members.state import StateStore


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl-members",
        description="Keep a GitLab group's membership in line with a declaration file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (required)
    GITLAB_URL   - GitLab instance URL (default: https://gitlab.com)

Examples:
    # Show what would change
    gl-members plan members.yaml

    # Add, update and remove members to match the declaration
    gl-members apply members.yaml --state team.state.json

    # Detect changes made outside of gl-members
    gl-members refresh --state team.state.json

    # Start managing an existing group
    gl-members import https://gitlab.com/groups/myorg/team

    # Remove the managed members again (owners are kept)
    gl-members destroy --state team.state.json
""",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON lines (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--gitlab-url", default=None, help="GitLab instance URL (default: from GITLAB_URL env or https://gitlab.com)"
    )
    parser.add_argument(
        "--max-retries",
        type=non_negative_int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Maximum retry attempts for transient errors (default: {DEFAULT_MAX_RETRIES})",
    )
    parser.add_argument(
        "--state",
        dest="state_file",
        default=DEFAULT_STATE_FILE,
        help=f"Path of the JSON state file (default: {DEFAULT_STATE_FILE})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    registry = get_command_registry()
    for name, cmd_cls in sorted(registry.items()):
        sub = subparsers.add_parser(name, help=cmd_cls.__doc__)
        cmd_cls.add_arguments(sub)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    gitlab_url = args.gitlab_url or os.environ.get("GITLAB_URL", DEFAULT_GITLAB_URL)

    token = os.environ.get("GITLAB_TOKEN")
    if not token:
        print("ERROR: GITLAB_TOKEN environment variable is not set.", file=sys.stderr)
        return 1

    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose, secrets=[token])

    cmd_cls = get_command_registry()[args.command]
    dry_run = args.dry_run or cmd_cls.forces_dry_run

    client = GitLabClient(base_url=gitlab_url, token=token, dry_run=dry_run, max_retries=args.max_retries)
    resource = GroupMembersResource(client)
    store = StateStore(args.state_file)

    if dry_run:
        logger.info("DRY-RUN MODE - no changes will be made")

    try:
        state = store.load()
        command = cmd_cls(resource=resource, args=args)
        state = command.run(state)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except GroupNotFoundError as e:
        logger.warning(str(e))
        if not dry_run:
            store.save(state)
        return 1 if args.command == "apply" else 0
    except requests.HTTPError as e:
        logger.error(f"Fatal API error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    if not dry_run:
        store.save(state)

    total = len(resource.results)
    applied = sum(1 for r in resource.results if r.action in ("applied", "would_apply"))
    already = sum(1 for r in resource.results if r.action == "already_set")
    skipped = sum(1 for r in resource.results if r.action == "skipped")

    logger.info(
        f"Done: {total} members, {applied} {'would change' if dry_run else 'changed'}, "
        f"{already} already set, {skipped} skipped; status {state.status}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
