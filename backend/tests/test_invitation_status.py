import pytest

from orgaccess.core.invitation_status import (
    ALLOWED_TRANSITIONS,
    InvalidTransition,
    InvitationStatus,
    ensure_transition,
)

TERMINAL = [InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.EXPIRED]


def test_every_status_has_a_transition_entry():
    assert set(ALLOWED_TRANSITIONS) == set(InvitationStatus)


@pytest.mark.parametrize("target", TERMINAL)
def test_pending_moves_to_each_terminal_state(target):
    assert ensure_transition(InvitationStatus.PENDING, target) is target


def test_string_values_are_accepted():
    assert ensure_transition("pending", "declined") is InvitationStatus.DECLINED


@pytest.mark.parametrize("current", TERMINAL)
@pytest.mark.parametrize("target", list(InvitationStatus))
def test_terminal_states_never_move(current, target):
    assert current.is_terminal

    with pytest.raises(InvalidTransition):
        ensure_transition(current, target)


def test_pending_cannot_stay_pending():
    assert not InvitationStatus.PENDING.is_terminal

    with pytest.raises(InvalidTransition):
        ensure_transition(InvitationStatus.PENDING, InvitationStatus.PENDING)


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        ensure_transition("pending", "revoked")
