"""
Protocol constants for the Drips contracts
"""

# Streams
MAX_STREAMS_RECEIVERS = 100
AMT_PER_SEC_EXTRA_DECIMALS = 9
AMT_PER_SEC_MULTIPLIER = 10 ** AMT_PER_SEC_EXTRA_DECIMALS

# Splits
MAX_SPLITS_RECEIVERS = 200
TOTAL_SPLITS_WEIGHT = 1_000_000

# Cycles (1 week on every current deployment)
DEFAULT_CYCLE_SECS = 604800

# Hash the contract stores for an empty receivers list and for an empty history
ZERO_HASH = b"\x00" * 32
EMPTY_RECEIVERS_HASH = ZERO_HASH
