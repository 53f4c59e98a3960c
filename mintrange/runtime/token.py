"""
mintrange.runtime.token — the ledger facade.

`MintRangeToken` owns the journal, the typed state view and the event sink.
Every mutating method runs as one transaction:

    owner gate (where required) → phase guard → validate → write → commit → emit

Validation happens before any write, and the whole body runs inside
`Journal.atomic()`, so a failing call leaves state and the event log untouched.
Callers pass the acting address explicitly as `caller`.

    token = MintRangeToken(OWNER, [TREASURY, VAULT], initial_supply=(5, 10))
    plan = token.plan_mint_range(30)
    token.mint_range_safe(OWNER, plan.input, plan.checksum)
    token.balance_of(VAULT, 12)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from .. import errors
from .. import logging as mlog
from ..config import LedgerConfig, get_config
from ..state.events import EventRecord, EventSink, InMemoryEventSink, JsonlEventSink
from ..state.journal import Journal
from ..state.ledger import LedgerState
from ..state.storage import StateStore
from ..types import events as ev
from ..types.inputs import MintRangeInput, UpdateInitialHolderRangesInput
from ..types.ranges import MintedRangeSnapshot, hex_addr
from ..utils.dates import token_slug_from_token_id
from . import balances, mint_range, transfers, updates
from .access import OWNER_OPERATIONS, require_address, require_operator, require_owner
from .phase import Operation, Phase, require_phase, transition

log = logging.getLogger(__name__)


class MintRangeToken:
    """
    Range-compressed multi-token ledger.

    Parameters
    ----------
    owner :
        Address allowed to configure, mint, pause and update.
    initial_holders :
        Holders of the forced first range (slot 0 is the treasury).
    holder_amounts :
        Fixed per-id amounts per slot; defaults to `config.default_holder_amount`
        for every non-treasury slot.
    initial_supply :
        Treasury `(min, max)`; defaults to `config.default_supply`.
    config :
        LedgerConfig; defaults to the cached environment config.
    sink :
        Event sink; defaults to a JSONL sink when `config.event_log_path` is
        set, else in-memory.
    """

    def __init__(
        self,
        owner: bytes,
        initial_holders: Sequence[bytes],
        *,
        holder_amounts: Optional[Sequence[int]] = None,
        initial_supply: Optional[Tuple[int, int]] = None,
        config: Optional[LedgerConfig] = None,
        sink: Optional[EventSink] = None,
        store: Optional[StateStore] = None,
    ) -> None:
        self.config = config or get_config()
        if sink is None:
            sink = (
                JsonlEventSink(str(self.config.event_log_path))
                if self.config.event_log_path
                else InMemoryEventSink()
            )
        self.sink = sink
        self._journal = Journal(store if store is not None else StateStore())
        self._state = LedgerState(self._journal, self.config)
        self._tx_index = 0

        owner = require_address(owner, what="owner")
        amounts = self._default_amounts(initial_holders, holder_amounts)
        lo, hi = initial_supply if initial_supply is not None else self.config.default_supply
        with self._journal.atomic():
            self._state.owner = owner
            self._state.phase = Phase.LIVE.value
            self._state.last_minted = self.config.first_range_id - 1
            self._state.partitions.initialize(tuple(initial_holders), amounts, lo, hi)
        log.info(
            "ledger created",
            extra={"owner": hex_addr(owner), "holders": len(initial_holders), "supply": [lo, hi]},
        )

    def close(self) -> None:
        """Flush and release the event sink (closes a JSONL log file)."""
        self.sink.close()

    def __enter__(self) -> "MintRangeToken":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    def _default_amounts(
        self, holders: Sequence[bytes], amounts: Optional[Sequence[int]]
    ) -> Tuple[int, ...]:
        if amounts is not None:
            return tuple(amounts)
        return (0,) + (self.config.default_holder_amount,) * max(len(holders) - 1, 0)

    @contextmanager
    def _transaction(self, op: Operation, caller: bytes) -> Iterator[List[ev.LedgerEvent]]:
        emitted: List[ev.LedgerEvent] = []
        with mlog.trace_scope(operation=op.value, caller=caller):
            try:
                if op in OWNER_OPERATIONS:
                    require_owner(self._state.owner, caller)
                require_phase(Phase(self._state.phase), op)
                with self._journal.atomic():
                    yield emitted
                    rev = self._state.bump_revision()
            except errors.LedgerError as exc:
                log.debug("transaction rejected", extra={"code": exc.code})
                raise
            for log_index, event in enumerate(emitted):
                self.sink.append(event, tx_index=self._tx_index, log_index=log_index)
            self._tx_index += 1
            log.info("transaction committed", extra={"revision": rev, "events": len(emitted)})

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def owner(self) -> bytes:
        return self._state.owner

    def phase(self) -> Phase:
        return Phase(self._state.phase)

    def paused(self) -> bool:
        return self.phase() is Phase.PAUSED

    def revision(self) -> int:
        return self._state.revision

    def last_range_token_id_minted(self) -> int:
        return self._state.last_minted

    def locked_initial_holders_up_to(self) -> int:
        return self._state.lock_watermark

    def is_initial_holders_range_update_permanently_disabled(self) -> bool:
        return self._state.updates_disabled

    def initial_holders(self, token_id: int) -> Tuple[bytes, ...]:
        return self._state.partitions.active_holder_range(token_id).holders

    def initial_supply(self, token_id: int) -> Tuple[int, int]:
        return self._state.partitions.active_supply_range(token_id).bounds()

    def initial_holder_ranges(self) -> Tuple[List[int], List[Tuple[bytes, ...]]]:
        return self._state.partitions.holder_ranges()

    def initial_supply_ranges(self) -> Tuple[List[int], List[Tuple[int, int]]]:
        return self._state.partitions.supply_ranges()

    def minted_ranges(self) -> List[MintedRangeSnapshot]:
        return self._state.snapshots.all()

    def balance_of(self, address: bytes, token_id: int) -> int:
        return balances.balance_of(self._state, bytes(address), token_id)

    def balance_of_batch(self, addresses: Sequence[bytes], ids: Sequence[int]) -> List[int]:
        return transfers.balances_of(self._state, [bytes(a) for a in addresses], ids)

    def total_supply(self, token_id: int) -> int:
        return balances.total_supply(self._state, token_id)

    def exists(self, token_id: int) -> bool:
        return balances.exists(self._state, token_id)

    def is_balance_initialized(self, address: bytes, token_id: int) -> bool:
        return self._state.overrides.is_initialized(token_id, bytes(address))

    def is_approved_for_all(self, account: bytes, operator: bytes) -> bool:
        return self._state.is_approved_for_all(bytes(account), bytes(operator))

    def token_slug(self, token_id: int) -> str:
        return token_slug_from_token_id(token_id, config=self.config)

    def events(self, **filters) -> List[EventRecord]:
        return list(self.sink.get_logs(**filters))

    # ------------------------------------------------------------------ #
    # Lifecycle & ownership
    # ------------------------------------------------------------------ #

    def pause(self, caller: bytes) -> None:
        with self._transaction(Operation.PAUSE, caller) as out:
            self._state.phase = transition(self.phase(), Operation.PAUSE).value
            out.append(ev.Paused(bytes(caller)))

    def unpause(self, caller: bytes) -> None:
        with self._transaction(Operation.UNPAUSE, caller) as out:
            self._state.phase = transition(self.phase(), Operation.UNPAUSE).value
            out.append(ev.Unpaused(bytes(caller)))

    def transfer_ownership(self, caller: bytes, new_owner: bytes) -> None:
        with self._transaction(Operation.TRANSFER_OWNERSHIP, caller) as out:
            new_owner = require_address(new_owner, what="new owner")
            previous = self._state.owner
            self._state.owner = new_owner
            out.append(ev.OwnershipTransferred(previous, new_owner))

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def append_holder_range(
        self, caller: bytes, holders: Sequence[bytes], amounts: Optional[Sequence[int]] = None
    ) -> None:
        """Holders for the next range mint (overwrites a pending entry)."""
        with self._transaction(Operation.CONFIGURE, caller):
            self._state.partitions.append_holder_range(
                tuple(holders),
                self._default_amounts(holders, amounts),
                last_minted=self._state.last_minted,
            )

    set_initial_holders = append_holder_range

    def append_supply_range(self, caller: bytes, min_supply: int, max_supply: int) -> None:
        """Treasury supply bounds for the next range mint (overwrites a pending entry)."""
        with self._transaction(Operation.CONFIGURE, caller):
            self._state.partitions.append_supply_range(
                min_supply, max_supply, last_minted=self._state.last_minted
            )

    def set_initial_supply(self, caller: bytes, bounds: Sequence[int]) -> None:
        if len(bounds) != 2:
            raise errors.ConfigurationError("supply needs exactly [min, max]", field_name="supply")
        self.append_supply_range(caller, bounds[0], bounds[1])

    # ------------------------------------------------------------------ #
    # Range minting
    # ------------------------------------------------------------------ #

    def plan_mint_range(self, count: int) -> mint_range.MintPlan:
        return mint_range.plan_mint_range(self._state, count)

    def mint_range(self, caller: bytes, mint_input: MintRangeInput) -> None:
        with self._transaction(Operation.MINT_RANGE, caller) as out:
            plan = mint_range.verify_mint_range(self._state, mint_input)
            out.extend(mint_range.commit_mint_range(self._state, plan, bytes(caller)))

    def mint_range_safe(self, caller: bytes, mint_input: MintRangeInput, checksum: bytes) -> None:
        with self._transaction(Operation.MINT_RANGE, caller) as out:
            plan = mint_range.verify_mint_range(self._state, mint_input, checksum)
            out.extend(mint_range.commit_mint_range(self._state, plan, bytes(caller)))

    # ------------------------------------------------------------------ #
    # Manual minting & transfers
    # ------------------------------------------------------------------ #

    def mint(self, caller: bytes, to: bytes, token_id: int, amount: int) -> None:
        with self._transaction(Operation.MINT, caller) as out:
            to = require_address(to, what="to")
            out.append(transfers.apply_mint(self._state, bytes(caller), to, [token_id], [amount], single=True))

    def mint_batch(self, caller: bytes, to: bytes, ids: Sequence[int], amounts: Sequence[int]) -> None:
        with self._transaction(Operation.MINT, caller) as out:
            to = require_address(to, what="to")
            out.append(transfers.apply_mint(self._state, bytes(caller), to, list(ids), list(amounts)))

    def mint_claims(self, caller: bytes, to: bytes, amount: int) -> None:
        self.mint(caller, to, self.config.claim_token_id, amount)

    def safe_transfer_from(
        self, caller: bytes, from_: bytes, to: bytes, token_id: int, amount: int
    ) -> None:
        self.safe_batch_transfer_from(caller, from_, to, [token_id], [amount], _single=True)

    def safe_batch_transfer_from(
        self,
        caller: bytes,
        from_: bytes,
        to: bytes,
        ids: Sequence[int],
        amounts: Sequence[int],
        *,
        _single: bool = False,
    ) -> None:
        with self._transaction(Operation.TRANSFER, caller) as out:
            caller = require_address(caller, what="caller")
            from_ = require_address(from_, what="from")
            to = require_address(to, what="to")
            require_operator(from_, caller, self._state.is_approved_for_all(from_, caller))
            out.append(transfers.apply_transfer(
                self._state, caller, from_, to, list(ids), list(amounts), single=_single
            ))

    def set_approval_for_all(self, caller: bytes, operator: bytes, approved: bool) -> None:
        with self._transaction(Operation.APPROVE, caller) as out:
            caller = require_address(caller, what="caller")
            operator = require_address(operator, what="operator")
            if operator == caller:
                raise errors.InvalidAddress("cannot approve self as operator", address=operator)
            self._state.set_approval(caller, operator, approved)
            out.append(ev.ApprovalForAll(caller, operator, bool(approved)))

    # ------------------------------------------------------------------ #
    # Retroactive updates & lock
    # ------------------------------------------------------------------ #

    def get_update_initial_holder_ranges_input(
        self,
        new_initial_holders: Sequence[Sequence[bytes]],
        new_initial_holders_range: Optional[Sequence[int]] = None,
    ) -> updates.UpdatePlan:
        require_phase(self.phase(), Operation.PLAN_UPDATE)
        return updates.plan_update(self._state, new_initial_holders, new_initial_holders_range)

    def verify_update_initial_holder_ranges(self, batch: UpdateInitialHolderRangesInput) -> bytes:
        require_phase(self.phase(), Operation.PLAN_UPDATE)
        return updates.verify_update(self._state, batch).checksum

    def update_initial_holder_ranges(self, caller: bytes, batch: UpdateInitialHolderRangesInput) -> None:
        with self._transaction(Operation.UPDATE_HOLDERS, caller) as out:
            verified = updates.verify_update(self._state, batch)
            out.extend(updates.commit_update(self._state, verified, bytes(caller)))

    def update_initial_holder_ranges_safe(
        self, caller: bytes, batch: UpdateInitialHolderRangesInput, checksum: bytes
    ) -> None:
        with self._transaction(Operation.UPDATE_HOLDERS, caller) as out:
            verified = updates.verify_update(self._state, batch)
            if bytes(checksum) != verified.checksum:
                raise errors.StaleInput(
                    "checksum does not match the current update plan",
                    data={"expected": "0x" + verified.checksum.hex()},
                )
            out.extend(updates.commit_update(self._state, verified, bytes(caller)))

    def set_lock_initial_holders_up_to(self, caller: bytes, watermark: int) -> None:
        with self._transaction(Operation.LOCK, caller) as out:
            out.append(updates.lock_initial_holders(self._state, watermark))

    def permanently_disable_initial_holders_range_update(self, caller: bytes) -> None:
        with self._transaction(Operation.DISABLE_UPDATES, caller) as out:
            event = updates.disable_updates(self._state, bytes(caller))
            if event is not None:
                out.append(event)


__all__ = ["MintRangeToken"]
