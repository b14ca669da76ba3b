"""
Funds and executes a single cycle, capturing before/after balances.
"""

from typing import Callable, Optional, Sequence, TypeVar

from .environment import ExecutionEnvironment
from .exceptions import ExecutionEnvironmentError
from .types import CycleResult
from .utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CycleExecutor:
    """
    Runs a synthetic swap path for the operating account.

    A revert of the swap path itself is an expected outcome (slippage ate
    the edge) and is returned as a reverted CycleResult. Failures in the
    funding steps around it are raised.
    """

    def __init__(self, environment: ExecutionEnvironment):
        self.environment = environment

    @property
    def account(self) -> str:
        return self.environment.operator

    def run(
        self,
        path: Sequence[str],
        amount_in: int,
        min_profit: Optional[int] = None,
    ) -> CycleResult:
        """
        Mint, approve and execute the path.

        Args:
            path: Synthetic token handles, start token first
            amount_in: Input amount in minor units of the start token
            min_profit: Minimum output the environment must return; defaults
                to amount_in (break-even floor)

        Returns:
            CycleResult with balances and gas, or reverted=True

        Raises:
            ExecutionEnvironmentError: If mint, approve or a balance read fails
        """
        if min_profit is None:
            min_profit = amount_in

        start_token = path[0]
        env = self.environment

        self._call("mint", env.mint, start_token, self.account, amount_in)
        self._call("approve", env.approve, start_token, amount_in)

        balance_before = int(
            self._call("balance_of", env.balance_of, start_token, self.account)
        )

        try:
            receipt = env.execute_arbitrage(list(path), amount_in, min_profit)
        except ExecutionEnvironmentError as e:
            logger.debug(f"Swap path reverted: {e}")
            return CycleResult(balance_before=balance_before, reverted=True, error=str(e))

        if receipt.status == 0:
            return CycleResult(
                balance_before=balance_before,
                reverted=True,
                error=f"transaction {receipt.tx_hash} reverted",
            )

        balance_after = int(
            self._call("balance_of", env.balance_of, start_token, self.account)
        )

        return CycleResult(
            balance_before=balance_before,
            balance_after=balance_after,
            gas_used=int(receipt.gas_used),
        )

    @staticmethod
    def _call(operation: str, func: Callable[..., T], *args) -> T:
        try:
            return func(*args)
        except ExecutionEnvironmentError:
            raise
        except Exception as e:
            raise ExecutionEnvironmentError(
                f"{operation} failed: {e}", operation=operation
            ) from e
