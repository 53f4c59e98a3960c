from __future__ import annotations

import pytest

from mintrange.errors import InvalidCount, MalformedBatch, StaleInput, Unauthorized
from mintrange.runtime.supply import derive_supply
from mintrange.types.events import TransferBatch
from mintrange.types.inputs import MintRangeInput
from mintrange.types.ranges import ZERO_ADDRESS, SupplyRangeEntry
from mintrange.tests.util import ALICE, BOB, CAROL, OWNER, STRANGER, TREASURY, VAULT, mint


@pytest.mark.parametrize("count", [0, -1, "3", True, 2.0])
def test_plan_rejects_invalid_counts(token, count) -> None:
    with pytest.raises(InvalidCount):
        token.plan_mint_range(count)


def test_plan_rejects_counts_above_limit(make_token) -> None:
    token = make_token(max_mint_count=5)
    token.plan_mint_range(5)
    with pytest.raises(InvalidCount):
        token.plan_mint_range(6)


def test_plan_is_a_pure_view(token) -> None:
    before = token.revision()
    a = token.plan_mint_range(10)
    b = token.plan_mint_range(10)
    assert a.checksum == b.checksum
    assert a.input == b.input
    assert token.revision() == before
    assert token.last_range_token_id_minted() == 0


def test_first_plan_starts_after_claim_token(token) -> None:
    plan = token.plan_mint_range(3)
    assert plan.input.ids == (1, 2, 3)
    assert plan.input.holders == (ALICE, BOB)
    assert plan.input.amounts == ((1, 1, 1), (1, 1, 1))


def test_mint_range_writes_no_overrides_and_emits_one_batch_per_holder(token) -> None:
    mint(token, 30)

    assert token.last_range_token_id_minted() == 30
    assert not any(token.is_balance_initialized(a, i) for a in (ALICE, BOB) for i in range(1, 31))
    assert token.balance_of(ALICE, 17) == 1
    assert token.balance_of(BOB, 30) == 1
    assert token.balance_of(BOB, 31) == 0
    assert token.total_supply(12) == 2

    records = token.events(name="TransferBatch")
    assert len(records) == 2
    for rec, holder in zip(records, (ALICE, BOB)):
        assert isinstance(rec.event, TransferBatch)
        assert rec.event.from_ == ZERO_ADDRESS
        assert rec.event.to == holder
        assert rec.event.token_ids == tuple(range(1, 31))


def test_treasury_supply_is_within_bounds_and_spread(make_token) -> None:
    token = make_token((TREASURY, VAULT), supply=(1, 10))
    plan = mint(token, 200)
    treasury = plan.input.amounts[0]
    assert all(1 <= a <= 10 for a in treasury)
    assert len(set(treasury)) >= 5
    assert plan.input.amounts[1] == (1,) * 200
    for token_id, amount in zip(plan.input.ids, treasury):
        assert token.balance_of(TREASURY, token_id) == amount
        assert token.total_supply(token_id) == amount + 1


def test_derive_supply_is_deterministic() -> None:
    entry = SupplyRangeEntry(0, 3, 9)
    values = [derive_supply(i, entry, b"seed") for i in range(50)]
    assert values == [derive_supply(i, entry, b"seed") for i in range(50)]
    assert values != [derive_supply(i, entry, b"other-seed") for i in range(50)]
    assert derive_supply(7, SupplyRangeEntry(0, 4, 4), b"seed") == 4


def test_safe_mint_rejects_plan_from_before_configuration_change(make_token) -> None:
    token = make_token(supply=(1, 1))
    plan = token.plan_mint_range(5)
    token.append_holder_range(OWNER, [ALICE, CAROL])
    with pytest.raises(StaleInput):
        token.mint_range_safe(OWNER, plan.input, plan.checksum)
    with pytest.raises(StaleInput):
        token.mint_range(OWNER, plan.input)
    assert token.last_range_token_id_minted() == 0


def test_safe_mint_rejects_supply_change_with_same_distribution(make_token) -> None:
    token = make_token(supply=(2, 2))
    plan = token.plan_mint_range(1)
    token.append_supply_range(OWNER, 2, 3)
    fresh = token.plan_mint_range(1)
    assert fresh.checksum != plan.checksum
    with pytest.raises(StaleInput):
        token.mint_range_safe(OWNER, plan.input, plan.checksum)


def test_mint_rejects_foreign_checksum_and_old_span(token) -> None:
    plan = token.plan_mint_range(3)
    with pytest.raises(StaleInput):
        token.mint_range_safe(OWNER, plan.input, b"\x00" * 32)
    token.mint_range(OWNER, plan.input)
    with pytest.raises(StaleInput):
        token.mint_range(OWNER, plan.input)
    assert token.last_range_token_id_minted() == 3


def test_mint_rejects_tampered_amounts(token) -> None:
    plan = token.plan_mint_range(2)
    forged = MintRangeInput(
        start_id=plan.input.start_id,
        end_id=plan.input.end_id,
        ids=plan.input.ids,
        holders=plan.input.holders,
        amounts=((5, 5), (1, 1)),
    )
    with pytest.raises(StaleInput):
        token.mint_range(OWNER, forged)
    bad_shape = MintRangeInput(1, 2, (1, 2), (ALICE, BOB), ((1, 1),))
    with pytest.raises(MalformedBatch):
        token.mint_range(OWNER, bad_shape)


def test_mint_requires_owner(token) -> None:
    plan = token.plan_mint_range(2)
    with pytest.raises(Unauthorized):
        token.mint_range(STRANGER, plan.input)


def test_manually_minted_ids_are_skipped(make_token) -> None:
    token = make_token((TREASURY, VAULT), supply=(3, 3))
    token.mint(OWNER, CAROL, 5, 7)

    plan = mint(token, 8)
    assert 5 not in plan.input.ids
    assert plan.input.ids == (1, 2, 3, 4, 6, 7, 8)
    assert token.balance_of(TREASURY, 5) == 0
    assert token.balance_of(VAULT, 5) == 0
    assert token.balance_of(CAROL, 5) == 7
    assert token.total_supply(5) == 7
    assert token.balance_of(TREASURY, 6) == 3
    assert token.minted_ranges()[0].excluded == (5,)


def test_history_is_replayed_from_snapshots(make_token) -> None:
    token = make_token((TREASURY, VAULT), supply=(2, 2))
    mint(token, 3)
    token.append_holder_range(OWNER, [TREASURY, CAROL], [0, 4])
    token.append_supply_range(OWNER, 9, 9)
    mint(token, 3)

    assert token.initial_holder_ranges() == ([0, 4], [(TREASURY, VAULT), (TREASURY, CAROL)])
    assert token.initial_supply_ranges() == ([0, 4], [(2, 2), (9, 9)])
    for i in (1, 2, 3):
        assert token.balance_of(TREASURY, i) == 2
        assert token.balance_of(VAULT, i) == 1
        assert token.balance_of(CAROL, i) == 0
    for i in (4, 5, 6):
        assert token.balance_of(TREASURY, i) == 9
        assert token.balance_of(CAROL, i) == 4
        assert token.balance_of(VAULT, i) == 0
