"""
mintrange.runtime — ledger operations on top of the state layer.

- phase:       Live/Paused lifecycle guard
- access:      owner / operator gates
- supply:      per-id default amounts
- checksum:    canonical CBOR + SHA3-256 plan digests
- balances:    override-then-default balance resolution
- transfers:   manual mints and transfers (materializing)
- mint_range:  plan / verify / commit range mints
- updates:     retroactive holder updates and the lock
- token:       MintRangeToken facade
"""
