"""Lifecycle of a group members resource: create, read, update, delete, import."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

import requests

from gl_members.models import (
    ACCESS_LEVELS,
    STATUS_ABSENT,
    STATUS_CREATED,
    STATUS_DELETED,
    STATUS_DRIFTED,
    STATUS_SYNCED,
    ActionResult,
    DesiredMember,
    GroupNotFoundError,
    MemberChanges,
    ObservedMember,
    ResourceState,
)
from gl_members.normalizer import same_access_level
from gl_members.reconcile import flatten_members, reconcile

if TYPE_CHECKING:
    from gl_members.client import GitLabClient


class GroupMembersResource:
    """
    Manages the full member list of one GitLab group.

    Every method takes the resource state explicitly and mutates it in place,
    except in dry-run mode where the remote side is only read and the state is
    left untouched. Any unexpected API error aborts the remaining mutations and
    propagates as requests.HTTPError; the next run repairs a partially applied
    batch.
    """

    def __init__(self, client: GitLabClient):
        self.client = client
        self.logger = logging.getLogger("gl-members")
        self.results: list[ActionResult] = []

    # -- Lifecycle --

    def create(self, state: ResourceState, group_id: int | str, desired: Iterable[DesiredMember]) -> ResourceState:
        """Add every declared member, then read back the group."""
        group_id = self.client.normalize_group_ref(group_id)
        for member in desired:
            self.logger.debug(f"Creating group member {member.user_id} in {group_id}")
            self._add(group_id, member)

        if self.client.dry_run:
            return state

        state.id = group_id
        state.group_id = group_id
        state.status = STATUS_CREATED
        return self.read(state)

    def read(self, state: ResourceState, reconciled: bool = False) -> ResourceState:
        """Refresh state from GitLab.

        Outside of a reconciliation, a member list that no longer matches the
        recorded one marks the resource as drifted. A freshly created resource
        has only had members added, so it stays "created" until an update has
        reconciled it.
        """
        self.logger.debug(f"Reading group members from group {state.id}")
        members = flatten_members(self._list_members(state))

        if reconciled or state.status == STATUS_ABSENT:
            state.status = STATUS_SYNCED
        elif state.status == STATUS_CREATED:
            pass
        elif _comparable(members) != _comparable(state.members):
            state.status = STATUS_DRIFTED

        state.members = members
        state.group_id = state.id or ""
        return state

    def plan(self, state: ResourceState, desired: Iterable[DesiredMember]) -> MemberChanges:
        """Reconcile the declared members against a fresh listing of the group."""
        if not state.id:
            return MemberChanges(to_add=list(desired))
        return reconcile(desired, self._list_members(state))

    def update(self, state: ResourceState, group_id: int | str, desired: Iterable[DesiredMember]) -> ResourceState:
        """Apply adds, updates and removals so that the group matches the declaration."""
        desired = list(desired)
        group_id = self.client.normalize_group_ref(group_id)

        if state.id != group_id:
            # The group is the resource's identity: moving it means replacing the resource
            self.logger.info(f"Group changed from {state.id} to {group_id}, replacing resource")
            self.delete(state)
            return self.create(state, group_id, desired)

        changes = self.plan(state, desired)

        for member in changes.to_add:
            self.logger.debug(f"Creating group member {member.user_id} in {group_id}")
            self._add(group_id, member)

        for member in changes.to_update:
            self.logger.debug(f"Updating group member {member.user_id} in {group_id}")
            self._edit(group_id, member)

        for observed in changes.to_remove:
            self.logger.debug(f"Removing group member {observed.user_id} from {group_id}")
            self._remove(group_id, observed.user_id, observed.is_owner)

        if self.client.dry_run:
            return state
        return self.read(state, reconciled=True)

    def delete(self, state: ResourceState) -> ResourceState:
        """Remove every member recorded in state. Owners are left in place."""
        group_id = state.id
        if group_id:
            for entry in state.members:
                is_owner = same_access_level(str(entry.get("access_level", "")), "owner")
                self._remove(group_id, entry["id"], is_owner)

        if self.client.dry_run:
            return state

        state.id = None
        state.members = []
        state.status = STATUS_DELETED
        return state

    def import_group(self, state: ResourceState, group_id: int | str) -> ResourceState:
        """Adopt an existing group's membership as the recorded state."""
        group_id = self.client.normalize_group_ref(group_id)
        state.id = group_id
        state.group_id = group_id
        return self.read(state, reconciled=True)

    # -- Remote listing --

    def _list_members(self, state: ResourceState) -> list[ObservedMember]:
        try:
            data = self.client.list_group_members(state.id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                group_id = state.id
                state.id = None
                state.members = []
                state.status = STATUS_ABSENT
                raise GroupNotFoundError(group_id) from None
            raise
        return [ObservedMember.from_api(item) for item in data]

    # -- Mutations --

    def _add(self, group_id: str, member: DesiredMember) -> ActionResult:
        operation = f"add-member:{member.user_id}"
        detail = _describe(member)
        if self.client.dry_run:
            return self._record(ActionResult(group_id, member.user_id, operation, "would_apply", detail, dry_run=True))

        try:
            self.client.add_group_member(group_id, member.user_id, member.access_value, member.expires_at)
        except requests.HTTPError as e:
            if e.response is None or e.response.status_code != 409:
                raise
            # GitLab answers 409 when the user is already a member
            self.logger.debug(f"Got conflict for user {member.user_id}")
            return self._record(ActionResult(group_id, member.user_id, operation, "already_set", "already a member"))

        return self._record(ActionResult(group_id, member.user_id, operation, "applied", detail))

    def _edit(self, group_id: str, member: DesiredMember) -> ActionResult:
        operation = f"update-member:{member.user_id}"
        detail = _describe(member)
        if self.client.dry_run:
            return self._record(ActionResult(group_id, member.user_id, operation, "would_apply", detail, dry_run=True))

        self.client.edit_group_member(group_id, member.user_id, member.access_value, member.expires_at)
        return self._record(ActionResult(group_id, member.user_id, operation, "applied", detail))

    def _remove(self, group_id: str, user_id: int, is_owner: bool) -> ActionResult:
        operation = f"remove-member:{user_id}"
        if is_owner:
            self.logger.warning(f'Can\'t remove group member {user_id} with "owner" access level from {group_id}')
            return self._record(ActionResult(group_id, user_id, operation, "skipped", "owner access level"))

        if self.client.dry_run:
            return self._record(ActionResult(group_id, user_id, operation, "would_apply", dry_run=True))

        self.client.remove_group_member(group_id, user_id)
        return self._record(ActionResult(group_id, user_id, operation, "applied"))

    def _record(self, result: ActionResult) -> ActionResult:
        self.results.append(result)
        # StructuredFormatter renders the attached result as text or a JSON line
        self.logger.info(f"{result.operation} -> {result.action}", extra={"action_result": result})
        return result


def _describe(member: DesiredMember) -> str:
    return f"access_level={member.access_level}, expires_at={member.expires_at or 'never'}"


def _comparable(members: list[dict]) -> list[tuple]:
    return sorted(
        (
            entry["id"],
            ACCESS_LEVELS.get(str(entry.get("access_level", "")).lower()),
            entry.get("expires_at") or "",
        )
        for entry in members
    )
