from __future__ import annotations

import pytest

from mintrange.errors import (InsufficientBalance, InvalidAddress, MalformedBatch, Paused,
                              Unauthorized)
from mintrange.types.events import ApprovalForAll, TransferBatch, TransferSingle
from mintrange.types.ranges import ZERO_ADDRESS
from mintrange.tests.util import ALICE, BOB, CAROL, DAVE, OWNER, STRANGER, mint


@pytest.fixture
def minted(token):
    mint(token, 10)
    return token


def test_transfer_materializes_both_sides(minted) -> None:
    minted.safe_transfer_from(ALICE, ALICE, CAROL, 4, 1)

    assert minted.balance_of(ALICE, 4) == 0
    assert minted.balance_of(CAROL, 4) == 1
    assert minted.is_balance_initialized(ALICE, 4)
    assert minted.is_balance_initialized(CAROL, 4)
    assert not minted.is_balance_initialized(ALICE, 5)
    assert minted.total_supply(4) == 2
    assert minted.events()[-1].event == TransferSingle(ALICE, ALICE, CAROL, 4, 1)


def test_batch_transfer(minted) -> None:
    minted.safe_batch_transfer_from(BOB, BOB, DAVE, [1, 2, 3], [1, 1, 0])

    assert minted.balance_of_batch([BOB, BOB, BOB, DAVE], [1, 3, 4, 2]) == [0, 1, 1, 1]
    event = minted.events()[-1].event
    assert isinstance(event, TransferBatch)
    assert event.token_ids == (1, 2, 3)


def test_transfer_of_unminted_or_foreign_balance_fails(minted) -> None:
    with pytest.raises(InsufficientBalance):
        minted.safe_transfer_from(ALICE, ALICE, BOB, 11, 1)
    with pytest.raises(InsufficientBalance):
        minted.safe_transfer_from(CAROL, CAROL, BOB, 1, 1)
    with pytest.raises(InsufficientBalance):
        minted.safe_batch_transfer_from(ALICE, ALICE, BOB, [1, 1], [1, 1])
    assert minted.balance_of(ALICE, 1) == 1
    assert not minted.is_balance_initialized(ALICE, 1)


def test_operator_must_be_approved(minted) -> None:
    with pytest.raises(Unauthorized):
        minted.safe_transfer_from(CAROL, ALICE, CAROL, 1, 1)

    minted.set_approval_for_all(ALICE, CAROL, True)
    assert minted.is_approved_for_all(ALICE, CAROL)
    assert minted.events()[-1].event == ApprovalForAll(ALICE, CAROL, True)
    minted.safe_transfer_from(CAROL, ALICE, DAVE, 1, 1)
    assert minted.balance_of(DAVE, 1) == 1

    minted.set_approval_for_all(ALICE, CAROL, False)
    with pytest.raises(Unauthorized):
        minted.safe_transfer_from(CAROL, ALICE, DAVE, 2, 1)


def test_invalid_addresses(minted) -> None:
    with pytest.raises(InvalidAddress):
        minted.safe_transfer_from(ALICE, ALICE, ZERO_ADDRESS, 1, 1)
    with pytest.raises(InvalidAddress):
        minted.set_approval_for_all(ALICE, ALICE, True)
    with pytest.raises(InvalidAddress):
        minted.mint(OWNER, ZERO_ADDRESS, 3, 1)


def test_malformed_batches(minted) -> None:
    with pytest.raises(MalformedBatch):
        minted.safe_batch_transfer_from(ALICE, ALICE, BOB, [1, 2], [1])
    with pytest.raises(MalformedBatch):
        minted.safe_batch_transfer_from(ALICE, ALICE, BOB, [1], [-1])
    with pytest.raises(MalformedBatch):
        minted.balance_of_batch([ALICE], [1, 2])


def test_transfers_are_blocked_while_paused(minted) -> None:
    minted.pause(OWNER)
    with pytest.raises(Paused):
        minted.safe_transfer_from(ALICE, ALICE, BOB, 1, 1)
    with pytest.raises(Paused):
        minted.set_approval_for_all(ALICE, CAROL, True)
    minted.unpause(OWNER)
    minted.safe_transfer_from(ALICE, ALICE, BOB, 1, 1)
    assert minted.balance_of(BOB, 1) == 2


def test_manual_mints_and_claims(token) -> None:
    token.mint_claims(OWNER, CAROL, 3)
    token.mint_batch(OWNER, DAVE, [0, 40], [2, 5])

    assert token.balance_of(CAROL, 0) == 3
    assert token.balance_of(DAVE, 0) == 2
    assert token.total_supply(0) == 5
    assert token.total_supply(40) == 5
    assert token.exists(40)
    assert not token.exists(41)
    assert token.token_slug(0) == "CLAIM-0"

    with pytest.raises(Unauthorized):
        token.mint(STRANGER, CAROL, 0, 1)
    with pytest.raises(Unauthorized):
        token.mint_claims(STRANGER, CAROL, 1)


def test_reads_never_fail_for_unknown_pairs(token) -> None:
    assert token.balance_of(STRANGER, 10**9) == 0
    assert token.total_supply(10**9) == 0
    assert not token.exists(1)
    assert not token.is_balance_initialized(STRANGER, 1)
