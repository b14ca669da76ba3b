"""
Capability interface of the execution environment.

The audit engine only talks to the environment through these operations.
Concrete adapters live in cycle_audit.environments. Every operation is a
blocking request/response call; failures are raised as
ExecutionEnvironmentError.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

from .types import Receipt


@runtime_checkable
class ExecutionEnvironment(Protocol):
    """Protocol for an environment holding balances and pool reserves."""

    @property
    def operator(self) -> str:
        """Account that funds and executes the cycles."""
        ...

    def create_token(self) -> str:
        """Deploy a synthetic token and return its handle."""
        ...

    def set_reserve(
        self, token_a: str, token_b: str, reserve_a: int, reserve_b: int
    ) -> None:
        """Set the reserves of the pool for (token_a, token_b)."""
        ...

    def mint(self, token: str, account: str, amount: int) -> None:
        """Credit amount of token to account."""
        ...

    def approve(self, token: str, amount: int, spender: Optional[str] = None) -> None:
        """Authorize spender (the arbitrage executor by default) to spend amount."""
        ...

    def execute_arbitrage(
        self, path: Sequence[str], amount_in: int, min_profit: int
    ) -> Receipt:
        """
        Run the swap path atomically.

        Raises:
            ExecutionEnvironmentError: If the path reverts, including when the
                output does not reach min_profit
        """
        ...

    def balance_of(self, token: str, account: str) -> int:
        """Balance of account in token, in minor units."""
        ...
