"""
gl-members: Declarative management of GitLab group membership.

Reconciles a declared set of group members (user ID, access level, expiry)
against the live member list of a GitLab group: missing members are added,
changed ones updated and undeclared ones removed. Owners are never removed.

Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (required)
    GITLAB_URL   - GitLab instance URL (default: https://gitlab.com)
"""

from gl_members.cli import main
from gl_members.client import GitLabClient
from gl_members.models import (
    DEFAULT_MAX_RETRIES,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
    DesiredMember,
    MemberChanges,
    ObservedMember,
    ResourceState,
)
from gl_members.normalizer import normalize_members
from gl_members.reconcile import reconcile
from gl_members.resource import GroupMembersResource

__version__ = "0.1.0"
__all__ = [
    "main",
    "__version__",
    "GitLabClient",
    "GroupMembersResource",
    "DesiredMember",
    "ObservedMember",
    "MemberChanges",
    "ResourceState",
    "normalize_members",
    "reconcile",
    "DEFAULT_MAX_RETRIES",
    "RETRY_BACKOFF_FACTOR",
    "RETRYABLE_STATUS_CODES",
]
