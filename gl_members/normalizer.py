"""Turn raw member declarations into DesiredMember records."""

from __future__ import annotations

import datetime
from typing import Any, Iterable

from gl_members.models import ACCESS_LEVELS, ConfigError, DesiredMember


def normalize_members(declarations: Iterable[dict[str, Any]]) -> list[DesiredMember]:
    """Validate and convert member declarations.

    Each declaration needs an integer ``id`` (``user_id`` is accepted too) and an
    ``access_level``; ``expires_at`` is optional. A user may be declared only once.
    """
    members: list[DesiredMember] = []
    seen: set[int] = set()
    for index, decl in enumerate(declarations):
        if not isinstance(decl, dict):
            raise ConfigError(f"member #{index + 1}: expected a mapping, got {type(decl).__name__}")

        user_id = _parse_user_id(decl.get("id", decl.get("user_id")), index)
        if user_id in seen:
            raise ConfigError(f"member #{index + 1}: user {user_id} is declared more than once")
        seen.add(user_id)

        members.append(
            DesiredMember(
                user_id=user_id,
                access_level=_parse_access_level(decl.get("access_level"), index),
                expires_at=_parse_expires_at(decl.get("expires_at"), index),
            )
        )
    return members


def same_access_level(old: str, new: str) -> bool:
    """True if two access level names grant the same level ("master" == "maintainer")."""
    old_value = ACCESS_LEVELS.get(old.lower())
    return old_value is not None and old_value == ACCESS_LEVELS.get(new.lower())


def _parse_user_id(value: Any, index: int) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or value is None:
        raise ConfigError(f"member #{index + 1}: a numeric user id is required")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    raise ConfigError(f"member #{index + 1}: user id must be numeric, got {value!r}")


def _parse_access_level(value: Any, index: int) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"member #{index + 1}: access_level is required")
    if value.lower() not in ACCESS_LEVELS:
        choices = ", ".join(ACCESS_LEVELS)
        raise ConfigError(f"member #{index + 1}: invalid access_level {value!r} (expected one of: {choices})")
    return value


def _parse_expires_at(value: Any, index: int) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, str):
        return value
    raise ConfigError(f"member #{index + 1}: expires_at must be a date string, got {value!r}")
