"""
Property tests for the ledger as a whole.

Random sequences of range mints, transfers, holder appends (two or three
slots) and retroactive holder updates must keep two laws:

- conservation: for every minted id, the balances of all addresses sum to
  `total_supply(id)`;
- replay: folding the emitted transfer events reproduces `balance_of` for
  every (id, address) pair.

Updates are either planner batches with some ids rewritten as explicit moves
or freezes, or hand-built batches of explicit and freeze groups that keep the
current holders.
"""
from __future__ import annotations

from dataclasses import replace

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from mintrange.config import load_config
from mintrange.runtime.token import MintRangeToken
from mintrange.state.events import InMemoryEventSink, replay_balances
from mintrange.types.inputs import UpdateInitialHolderRangesInput
from mintrange.tests.util import ALICE, BOB, CAROL, DAVE, OWNER, TREASURY, mint

POOL = (TREASURY, ALICE, BOB, CAROL, DAVE)

OPS = st.sampled_from(["mint", "transfer", "update", "append", "explicit"])


def _fresh() -> MintRangeToken:
    return MintRangeToken(
        OWNER,
        [TREASURY, ALICE],
        holder_amounts=[0, 2],
        initial_supply=(1, 5),
        config=load_config(env={}),
        sink=InMemoryEventSink(),
    )


def _live(token: MintRangeToken) -> None:
    if token.paused():
        token.unpause(OWNER)


def _paused(token: MintRangeToken) -> None:
    if not token.paused():
        token.pause(OWNER)


def _holders(data, n: int):
    return data.draw(st.permutations(POOL).map(lambda p: list(p[:n])))


def _pair(data):
    return tuple(_holders(data, 2))


def _rework(data, batch: UpdateInitialHolderRangesInput) -> UpdateInitialHolderRangesInput:
    """Turn some implicit ids into explicit moves or freezes, all slots of an id alike."""
    moved = sorted({i for ids in batch.ids for i in ids})
    modes = {i: data.draw(st.sampled_from(["implicit", "explicit", "freeze"])) for i in moved}
    ids, amounts, initialize = [], [], []
    for g_ids, g_amounts, g_init in zip(batch.ids, batch.amounts, batch.initialize):
        kept = [(i, a) for i, a in zip(g_ids, g_amounts) if modes[i] != "freeze"]
        ids.append(tuple(i for i, _ in kept))
        amounts.append(tuple(a for _, a in kept))
        initialize.append(tuple(g_init) + tuple(i for i in g_ids if modes[i] != "implicit"))
    return replace(batch, ids=tuple(ids), amounts=tuple(amounts), initialize=tuple(initialize))


def _hand_built(data, token: MintRangeToken) -> UpdateInitialHolderRangesInput:
    """One explicit move plus one freeze-only group over the current holders."""
    last = token.last_range_token_id_minted()
    src, dst = _pair(data)
    token_id = data.draw(st.integers(1, last))
    amount = data.draw(st.integers(0, token.balance_of(src, token_id)))
    a, b = _pair(data)
    frozen = data.draw(st.integers(1, last))
    starts, holders = token.initial_holder_ranges()
    return UpdateInitialHolderRangesInput(
        from_addresses=[src, a],
        to_addresses=[dst, b],
        ids=[[token_id], []],
        amounts=[[amount], []],
        initialize=[[token_id], [frozen]],
        new_initial_holders=holders,
        new_initial_holders_range=starts,
    )


def _check_laws(token: MintRangeToken) -> None:
    last = token.last_range_token_id_minted()
    replayed = replay_balances(token.events())
    for token_id in range(1, last + 1):
        total = 0
        for addr in POOL:
            bal = token.balance_of(addr, token_id)
            assert bal >= 0
            assert replayed.get((token_id, addr), 0) == bal
            total += bal
        assert total == token.total_supply(token_id)


@settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(st.data())
def test_random_histories_conserve_supply(data) -> None:
    token = _fresh()
    mint(token, data.draw(st.integers(1, 4)))

    for op in data.draw(st.lists(OPS, min_size=1, max_size=8)):
        last = token.last_range_token_id_minted()
        if op == "mint":
            _live(token)
            mint(token, data.draw(st.integers(1, 4)))
        elif op == "append":
            _live(token)
            n = data.draw(st.sampled_from([2, 3]))
            amounts = [0] + [data.draw(st.integers(1, 3)) for _ in range(n - 1)]
            token.append_holder_range(OWNER, _holders(data, n), amounts)
        elif op == "transfer":
            _live(token)
            src, dst = _pair(data)
            token_id = data.draw(st.integers(1, last))
            have = token.balance_of(src, token_id)
            amount = data.draw(st.integers(0, have))
            token.safe_transfer_from(src, src, dst, token_id, amount)
        elif op == "update":
            _paused(token)
            _starts, current = token.initial_holder_ranges()
            plan = token.get_update_initial_holder_ranges_input([_holders(data, len(hs)) for hs in current])
            token.update_initial_holder_ranges(OWNER, _rework(data, plan.input))
        else:
            _paused(token)
            batch = _hand_built(data, token)
            token.update_initial_holder_ranges(OWNER, batch)
            assert token.is_balance_initialized(batch.from_addresses[1], batch.initialize[1][0])
        _check_laws(token)


@pytest.mark.parametrize("count", [1, 7, 31])
def test_treasury_amounts_stay_in_bounds(count) -> None:
    token = _fresh()
    plan = mint(token, count)
    for token_id, amount in zip(plan.input.ids, plan.input.amounts[0]):
        assert 1 <= amount <= 5
        assert token.total_supply(token_id) == amount + 2
