"""Exception types for the AMM ledger.

Every public operation surfaces exactly one success result or exactly one of
these error kinds. ``code`` is a stable string for logs and operation results;
``err_code`` is the numeric code used by the source ledger.
"""

from __future__ import annotations


class AmmError(Exception):
    """Base class for ledger error kinds."""

    code = "AMM_ERROR"
    err_code = 0

    def __init__(self, message: str = "") -> None:
        self.message = message or self.code
        super().__init__(self.message)


class NotAuthorized(AmmError):
    """Caller lacks privilege, or the platform is disabled."""

    code = "NOT_AUTHORIZED"
    err_code = 100


class PoolNotFound(AmmError):
    """Pool id is missing or the pool is inactive."""

    code = "POOL_NOT_FOUND"
    err_code = 101


class InsufficientLiquidity(AmmError):
    """Pool has no tractable reserves, holder lacks LP tokens, or output is zero."""

    code = "INSUFFICIENT_LIQUIDITY"
    err_code = 102


class InvalidAmount(AmmError):
    """Zero or otherwise disallowed input quantity."""

    code = "INVALID_AMOUNT"
    err_code = 103


class SlippageTooHigh(AmmError):
    """Computed output is below the caller's stated minimum."""

    code = "SLIPPAGE_TOO_HIGH"
    err_code = 104


class PoolAlreadyExists(AmmError):
    """Reserved. Pool creation has no uniqueness constraint, so nothing raises this."""

    code = "POOL_ALREADY_EXISTS"
    err_code = 105


class ZeroLiquidity(AmmError):
    """Minted LP amount is below the per-call floor."""

    code = "ZERO_LIQUIDITY"
    err_code = 106


class InvariantViolation(AmmError):
    """Raised when a post-state violates a ledger invariant."""

    code = "INVARIANT_VIOLATION"
    err_code = 900

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


ERROR_KINDS: tuple[type[AmmError], ...] = (
    NotAuthorized,
    PoolNotFound,
    InsufficientLiquidity,
    InvalidAmount,
    SlippageTooHigh,
    PoolAlreadyExists,
    ZeroLiquidity,
    InvariantViolation,
)
