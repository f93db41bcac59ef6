# backend/orgaccess/core/invitation_status.py

from __future__ import annotations

import enum
from typing import FrozenSet, Mapping


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


# Every status must appear here; terminal states map to an empty set.
ALLOWED_TRANSITIONS: Mapping[InvitationStatus, FrozenSet[InvitationStatus]] = {
    InvitationStatus.PENDING: frozenset(
        {InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.EXPIRED}
    ),
    InvitationStatus.ACCEPTED: frozenset(),
    InvitationStatus.DECLINED: frozenset(),
    InvitationStatus.EXPIRED: frozenset(),
}

assert set(ALLOWED_TRANSITIONS) == set(InvitationStatus), "transition table is not exhaustive"


class InvalidTransition(ValueError):
    def __init__(self, current: InvitationStatus, target: InvitationStatus):
        super().__init__(f"Invitation cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


def ensure_transition(current: InvitationStatus | str, target: InvitationStatus | str) -> InvitationStatus:
    """
    Validate a single status edge and return the target as an enum.
    Raises InvalidTransition for anything other than pending -> terminal.
    """
    cur = InvitationStatus(current)
    nxt = InvitationStatus(target)
    if nxt not in ALLOWED_TRANSITIONS[cur]:
        raise InvalidTransition(cur, nxt)
    return nxt
