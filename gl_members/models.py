"""Data models, constants and exceptions for gl-members."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_STATE_FILE = "gl-members.state.json"
API_V4 = "/api/v4"
PER_PAGE = 100

# Retry configuration. Failures propagate on the first attempt unless
# --max-retries asks for transport-level retries.
DEFAULT_MAX_RETRIES = 0
RETRY_BACKOFF_FACTOR = 0.5  # seconds
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# GitLab access level constants. "master" is the deprecated name of "maintainer".
ACCESS_LEVELS = {
    "guest": 10,
    "reporter": 20,
    "developer": 30,
    "maintainer": 40,
    "master": 40,
    "owner": 50,
}

ACCESS_LEVEL_NAMES = {
    10: "guest",
    20: "reporter",
    30: "developer",
    40: "maintainer",
    50: "owner",
}

OWNER_ACCESS_LEVEL = ACCESS_LEVELS["owner"]

# Resource lifecycle
STATUS_ABSENT = "absent"
STATUS_CREATED = "created"
STATUS_SYNCED = "synced"
STATUS_DRIFTED = "drifted"
STATUS_DELETED = "deleted"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a member declaration or declaration file is invalid."""


class GroupNotFoundError(Exception):
    """The managed group no longer exists in GitLab.

    Recoverable: the resource's tracked identifier has already been cleared
    when this is raised, so the caller can treat the resource as deleted.
    """

    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(
            f"removing all group members in {group_id} from state because group no longer exists in gitlab"
        )


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DesiredMember:
    """A declared group membership."""

    user_id: int
    access_level: str
    expires_at: str | None = None

    @property
    def access_value(self) -> int:
        return ACCESS_LEVELS[self.access_level.lower()]


@dataclass(frozen=True)
class ObservedMember:
    """Snapshot of a membership as reported by the GitLab API."""

    user_id: int
    access_level: int
    expires_at: str | None = None
    username: str = ""
    name: str = ""
    state: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ObservedMember:
        return cls(
            user_id=data["id"],
            access_level=data["access_level"],
            expires_at=data.get("expires_at") or None,
            username=data.get("username", ""),
            name=data.get("name", ""),
            state=data.get("state", ""),
        )

    @property
    def access_level_name(self) -> str:
        return ACCESS_LEVEL_NAMES.get(self.access_level, str(self.access_level))

    @property
    def is_owner(self) -> bool:
        return self.access_level == OWNER_ACCESS_LEVEL


@dataclass
class MemberChanges:
    """Output of a reconciliation pass."""

    to_add: list[DesiredMember] = field(default_factory=list)
    to_update: list[DesiredMember] = field(default_factory=list)
    to_remove: list[ObservedMember] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)


@dataclass
class ResourceState:
    """Persisted state of one group members resource."""

    id: str | None = None
    group_id: str = ""
    members: list[dict[str, Any]] = field(default_factory=list)
    status: str = STATUS_ABSENT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "members": self.members,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceState:
        return cls(
            id=data.get("id") or None,
            group_id=data.get("group_id", ""),
            members=list(data.get("members", [])),
            status=data.get("status", STATUS_ABSENT),
        )


@dataclass
class ActionResult:
    """Result of a single membership mutation."""

    group: str
    user_id: int
    operation: str
    action: str  # "applied", "already_set", "skipped", "would_apply"
    detail: str = ""
    dry_run: bool = False

    def to_dict(self) -> dict:
        d = {
            "group": self.group,
            "user_id": self.user_id,
            "operation": self.operation,
            "action": self.action,
            "detail": self.detail,
        }
        if self.dry_run:
            d["dry_run"] = True
        return d
