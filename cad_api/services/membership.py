"""Community membership state machine.

A user's relationship to a community is one of four states. Every membership
change goes through :func:`transition`, which is pure: it only decides the next
state, the status string to persist, and the side effects the caller must apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from cad_api.utils.errors import ConflictError, ForbiddenError, InvalidInputError

STATUS_APPROVED = "approved"
STATUS_BANNED = "banned"
STATUS_PENDING = "pending"
STATUS_DECLINED = "declined"


class MembershipState(str, Enum):
    ABSENT = "absent"
    PENDING = "pending"
    APPROVED = "approved"
    BANNED = "banned"


class MembershipEvent(str, Enum):
    REDEEM_INVITE = "redeem_invite"
    REQUEST = "request"
    APPROVE = "approve"
    DECLINE = "decline"
    BAN = "ban"
    UNBAN = "unban"
    LEAVE = "leave"


class Effect(str, Enum):
    CREATE_RECORD = "create_record"
    UPDATE_RECORD = "update_record"
    DELETE_RECORD = "delete_record"
    INCREMENT_MEMBERS = "increment_members"
    DECREMENT_MEMBERS = "decrement_members"
    ADD_TO_BAN_LIST = "add_to_ban_list"
    REMOVE_FROM_BAN_LIST = "remove_from_ban_list"


@dataclass(frozen=True)
class Transition:
    """Outcome of applying one event to one membership state."""

    state: MembershipState
    status: str | None
    effects: tuple[Effect, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not self.effects


def state_of(record: dict[str, Any] | None) -> MembershipState:
    """Map a stored membership record to its state.

    Any status other than approved or banned counts as pending.
    """
    if record is None:
        return MembershipState.ABSENT
    status = record.get("status")
    if status == STATUS_APPROVED:
        return MembershipState.APPROVED
    if status == STATUS_BANNED:
        return MembershipState.BANNED
    return MembershipState.PENDING


def find_record(records: list[dict[str, Any]], community_id: str) -> dict[str, Any] | None:
    """Return the record for ``community_id`` from a user's membership list."""
    for record in records:
        if str(record.get("community_id")) == str(community_id):
            return record
    return None


def _redeem_invite(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.APPROVED:
        return Transition(MembershipState.APPROVED, STATUS_APPROVED)
    if state is MembershipState.BANNED or on_ban_list:
        raise ForbiddenError("You are banned from this community")
    if state is MembershipState.ABSENT:
        return Transition(
            MembershipState.APPROVED,
            STATUS_APPROVED,
            (Effect.CREATE_RECORD, Effect.INCREMENT_MEMBERS),
        )
    # Approved in place, keeping the record id; the member counter is untouched.
    return Transition(MembershipState.APPROVED, STATUS_APPROVED, (Effect.UPDATE_RECORD,))


def _request(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.APPROVED:
        raise ConflictError("Already a member of this community")
    if state is MembershipState.BANNED or on_ban_list:
        raise ForbiddenError("You are banned from this community")
    if state is MembershipState.ABSENT:
        return Transition(MembershipState.PENDING, STATUS_PENDING, (Effect.CREATE_RECORD,))
    return Transition(MembershipState.PENDING, STATUS_PENDING, (Effect.UPDATE_RECORD,))


def _approve(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.APPROVED:
        raise ConflictError("Member already exists")
    if state is MembershipState.BANNED or on_ban_list:
        raise ForbiddenError("User is banned from this community")
    record_effect = (
        Effect.CREATE_RECORD if state is MembershipState.ABSENT else Effect.UPDATE_RECORD
    )
    return Transition(
        MembershipState.APPROVED,
        STATUS_APPROVED,
        (record_effect, Effect.INCREMENT_MEMBERS),
    )


def _decline(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is not MembershipState.PENDING:
        raise ConflictError("No pending request for this community")
    return Transition(MembershipState.PENDING, STATUS_DECLINED, (Effect.UPDATE_RECORD,))


def _ban(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.ABSENT:
        return Transition(MembershipState.ABSENT, None, (Effect.ADD_TO_BAN_LIST,))
    if state is MembershipState.APPROVED:
        # Banned records are never counted, so unban and leave stay neutral.
        return Transition(
            MembershipState.BANNED,
            STATUS_BANNED,
            (Effect.UPDATE_RECORD, Effect.DECREMENT_MEMBERS, Effect.ADD_TO_BAN_LIST),
        )
    return Transition(
        MembershipState.BANNED,
        STATUS_BANNED,
        (Effect.UPDATE_RECORD, Effect.ADD_TO_BAN_LIST),
    )


def _unban(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.BANNED:
        return Transition(
            MembershipState.ABSENT,
            None,
            (Effect.DELETE_RECORD, Effect.REMOVE_FROM_BAN_LIST),
        )
    if state is MembershipState.ABSENT and on_ban_list:
        return Transition(MembershipState.ABSENT, None, (Effect.REMOVE_FROM_BAN_LIST,))
    raise ConflictError("User is not banned from this community")


def _leave(state: MembershipState, on_ban_list: bool) -> Transition:
    if state is MembershipState.ABSENT:
        raise InvalidInputError("Community not found in user's communities")
    if state is MembershipState.APPROVED:
        return Transition(
            MembershipState.ABSENT,
            None,
            (Effect.DELETE_RECORD, Effect.DECREMENT_MEMBERS),
        )
    return Transition(MembershipState.ABSENT, None, (Effect.DELETE_RECORD,))


_HANDLERS = {
    MembershipEvent.REDEEM_INVITE: _redeem_invite,
    MembershipEvent.REQUEST: _request,
    MembershipEvent.APPROVE: _approve,
    MembershipEvent.DECLINE: _decline,
    MembershipEvent.BAN: _ban,
    MembershipEvent.UNBAN: _unban,
    MembershipEvent.LEAVE: _leave,
}


def transition(
    state: MembershipState,
    event: MembershipEvent,
    on_ban_list: bool = False,
) -> Transition:
    """Compute the next membership state for ``event``.

    Raises:
        ForbiddenError: the user is banned and the event would admit them.
        ConflictError: the event does not apply to the current state.
        InvalidInputError: the user has no membership to act on.
    """
    return _HANDLERS[event](state, on_ban_list)
