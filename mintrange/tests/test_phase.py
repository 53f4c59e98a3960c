from __future__ import annotations

import pytest

from mintrange.errors import ConfigurationError, InvalidAddress, NotPaused, Paused, Unauthorized
from mintrange.runtime.access import OWNER_OPERATIONS
from mintrange.runtime.phase import ALLOWED, Operation, Phase, require_phase, transition
from mintrange.types.events import OwnershipTransferred
from mintrange.types.ranges import ZERO_ADDRESS
from mintrange.tests.util import ALICE, BOB, CAROL, OWNER, STRANGER, mint


def test_every_operation_has_a_phase() -> None:
    for op in Operation:
        assert any(op in allowed for allowed in ALLOWED.values())


def test_transitions() -> None:
    assert transition(Phase.LIVE, Operation.PAUSE) is Phase.PAUSED
    assert transition(Phase.PAUSED, Operation.UNPAUSE) is Phase.LIVE
    assert transition(Phase.LIVE, Operation.MINT) is Phase.LIVE
    with pytest.raises(Paused):
        require_phase(Phase.PAUSED, Operation.MINT_RANGE)
    with pytest.raises(NotPaused):
        require_phase(Phase.LIVE, Operation.UPDATE_HOLDERS)


def test_read_only_operations_skip_owner_gate() -> None:
    assert Operation.PLAN_UPDATE not in OWNER_OPERATIONS
    assert Operation.TRANSFER not in OWNER_OPERATIONS


def test_pause_cycle(token) -> None:
    assert token.phase() is Phase.LIVE
    with pytest.raises(Unauthorized):
        token.pause(STRANGER)
    token.pause(OWNER)
    assert token.paused()
    with pytest.raises(Paused):
        token.pause(OWNER)
    plan = token.plan_mint_range(1)
    with pytest.raises(Paused):
        token.mint_range(OWNER, plan.input)
    token.unpause(OWNER)
    with pytest.raises(NotPaused):
        token.unpause(OWNER)
    assert [r.name for r in token.events()] == ["Paused", "Unpaused"]


def test_configuration_is_live_only(token) -> None:
    token.pause(OWNER)
    with pytest.raises(Paused):
        token.append_holder_range(OWNER, [ALICE, CAROL])
    with pytest.raises(Paused):
        token.append_supply_range(OWNER, 1, 2)


def test_revision_counts_committed_transactions(token) -> None:
    start = token.revision()
    token.pause(OWNER)
    token.unpause(OWNER)
    with pytest.raises(Unauthorized):
        token.pause(STRANGER)
    assert token.revision() == start + 2


def test_ownership_transfer(token) -> None:
    token.transfer_ownership(OWNER, BOB)
    assert token.owner() == BOB
    assert token.events()[-1].event == OwnershipTransferred(OWNER, BOB)
    with pytest.raises(Unauthorized):
        token.pause(OWNER)
    token.pause(BOB)
    token.transfer_ownership(BOB, OWNER)
    token.unpause(OWNER)
    with pytest.raises(InvalidAddress):
        token.transfer_ownership(OWNER, ZERO_ADDRESS)


def test_configuration_views(token) -> None:
    mint(token, 2)
    token.append_holder_range(OWNER, [ALICE, CAROL], [0, 3])
    token.set_initial_supply(OWNER, [4, 6])

    assert token.initial_holders(1) == (ALICE, BOB)
    assert token.initial_holders(3) == (ALICE, CAROL)
    assert token.initial_supply(3) == (4, 6)
    assert token.initial_supply(2) == (1, 1)

    with pytest.raises(ConfigurationError):
        token.set_initial_supply(OWNER, [4])
    with pytest.raises(ConfigurationError):
        token.append_holder_range(OWNER, [ALICE, ALICE])
    with pytest.raises(Unauthorized):
        token.append_holder_range(STRANGER, [ALICE, CAROL])
