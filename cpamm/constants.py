"""Pool parameters shared across the engine."""

from cpamm.safe_int import BALANCE_MAX

# Share-unit resolution relative to raw token units.
# Only used when minting the first provision into an empty pool.
PRECISION = 1_000_000

# Shares issued to the first provider, independent of the deposited amounts
BOOTSTRAP_SHARES = 100 * PRECISION

# Fees are expressed in parts per thousand of the swap input
FEE_DENOMINATOR = 1000

# Highest accepted fee; anything above is clamped to 0 at construction
MAX_FEE_PER_MILLE = FEE_DENOMINATOR - 1

DEFAULT_FEE_PER_MILLE = 3

__all__ = [
    "BALANCE_MAX",
    "BOOTSTRAP_SHARES",
    "DEFAULT_FEE_PER_MILLE",
    "FEE_DENOMINATOR",
    "MAX_FEE_PER_MILLE",
    "PRECISION",
]
