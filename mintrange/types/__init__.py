"""
mintrange.types — immutable records shared by the state and runtime layers.

- ranges:  holder / supply range entries, minted-range snapshots, overrides
- inputs:  MintRangeInput and UpdateInitialHolderRangesInput call inputs
- events:  transfer and administrative events
"""
