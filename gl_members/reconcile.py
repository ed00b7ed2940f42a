"""Desired-vs-observed reconciliation for group membership."""

from __future__ import annotations

from typing import Iterable

from gl_members.models import DesiredMember, MemberChanges, ObservedMember
from gl_members.normalizer import same_access_level


def reconcile(desired: Iterable[DesiredMember], observed: Iterable[ObservedMember]) -> MemberChanges:
    """
    Compute the mutations that turn the observed membership into the desired one.

    Members are matched by user id. A desired member with no observed counterpart
    is added; one whose access level or expiry differs is updated. Observed members
    not claimed by any desired member are removed. Expiry dates are compared as
    strings, so only identical representations count as equal.
    """
    unclaimed: dict[int, ObservedMember] = {member.user_id: member for member in observed}
    changes = MemberChanges()

    for member in desired:
        current = unclaimed.pop(member.user_id, None)
        if current is None:
            changes.to_add.append(member)
            continue
        if _differs(member, current):
            changes.to_update.append(member)

    changes.to_remove.extend(unclaimed.values())
    return changes


def _differs(desired: DesiredMember, current: ObservedMember) -> bool:
    if not same_access_level(desired.access_level, current.access_level_name):
        return True
    return desired.expires_at != current.expires_at


def flatten_members(observed: Iterable[ObservedMember]) -> list[dict]:
    """Express observed members in the declarative shape used for state."""
    return [
        {
            "id": member.user_id,
            "access_level": member.access_level_name,
            "expires_at": member.expires_at or "",
            "username": member.username,
            "name": member.name,
            "state": member.state,
        }
        for member in observed
    ]
