from __future__ import annotations

import pytest

from mintrange.config import load_config
from mintrange.runtime.token import MintRangeToken
from mintrange.state.events import InMemoryEventSink
from mintrange.tests.util import ALICE, BOB, OWNER


@pytest.fixture
def config():
    # Isolated from the developer's environment.
    return load_config(env={})


@pytest.fixture
def make_token(config):
    def _make(holders=(ALICE, BOB), *, amounts=None, supply=(1, 1), **overrides):
        cfg = config.with_overrides(**overrides) if overrides else config
        return MintRangeToken(
            OWNER,
            list(holders),
            holder_amounts=amounts,
            initial_supply=supply,
            config=cfg,
            sink=InMemoryEventSink(),
        )

    return _make


@pytest.fixture
def token(make_token):
    return make_token()
